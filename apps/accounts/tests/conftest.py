import pytest
from apps.accounts.models import User, UserRole


@pytest.fixture
def staff_user(db):
    """Django staff without the admin role still counts as back-office."""
    return User.objects.create_user(
        email='staff@example.com',
        password='TestPass123!',
        display_name='Staff',
        role=UserRole.CONSUMER,
        is_staff=True,
    )


@pytest.fixture
def inactive_user(db):
    """Create and return an inactive manufacturer."""
    return User.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        role=UserRole.MANUFACTURER,
        is_active=False,
    )
