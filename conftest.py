import pytest
from datetime import date
from django.core.cache import cache
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.models import User, UserRole
from apps.codes.models import Product


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    """Write QR artifacts into a per-test directory."""
    settings.MEDIA_ROOT = tmp_path / 'media'
    return settings.MEDIA_ROOT


@pytest.fixture(autouse=True)
def clear_cache():
    """Reset throttle counters between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def client_for():
    """Return a factory building an API client authenticated as a user."""
    def _client_for(user):
        client = APIClient()
        refresh = RefreshToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return client
    return _client_for


@pytest.fixture
def manufacturer(db):
    return User.objects.create_user(
        email='maker@example.com',
        password='TestPass123!',
        display_name='Maker',
        role=UserRole.MANUFACTURER,
        company_name='Lagos Pharma Ltd',
    )


@pytest.fixture
def other_manufacturer(db):
    return User.objects.create_user(
        email='othermaker@example.com',
        password='TestPass123!',
        display_name='Other Maker',
        role=UserRole.MANUFACTURER,
        company_name='Abuja Foods',
    )


@pytest.fixture
def consumer(db):
    return User.objects.create_user(
        email='consumer@example.com',
        password='TestPass123!',
        display_name='Consumer',
        role=UserRole.CONSUMER,
    )


@pytest.fixture
def back_office_user(db):
    return User.objects.create_user(
        email='backoffice@example.com',
        password='TestPass123!',
        display_name='Back Office',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def manufacturer_client(client_for, manufacturer):
    return client_for(manufacturer)


@pytest.fixture
def consumer_client(client_for, consumer):
    return client_for(consumer)


@pytest.fixture
def back_office_client(client_for, back_office_user):
    return client_for(back_office_user)


@pytest.fixture
def product(manufacturer):
    return Product.objects.create(
        manufacturer=manufacturer,
        name='Paracetamol 500mg',
        category='pharmaceuticals',
    )


@pytest.fixture
def make_batch(product):
    """Return a factory registering a batch of ``quantity`` codes for ``product``."""
    from apps.codes.services import create_batch

    counter = {'n': 0}

    def _make_batch(quantity=5, batch_number=None, target_product=None):
        counter['n'] += 1
        owner_product = target_product or product
        return create_batch(
            manufacturer=owner_product.manufacturer,
            product_id=owner_product.id,
            batch_number=batch_number or f'B-{counter["n"]:04d}',
            production_date=date(2026, 1, 1),
            expiry_date=date(2028, 1, 1),
            quantity=quantity,
        )
    return _make_batch
