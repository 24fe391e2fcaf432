import pytest

from apps.codes.models import Product


@pytest.fixture
def batch(make_batch):
    """A batch of five freshly issued codes."""
    return make_batch(quantity=5)


@pytest.fixture
def other_product(other_manufacturer):
    return Product.objects.create(
        manufacturer=other_manufacturer,
        name='Cassava Flour',
        category='food',
    )
