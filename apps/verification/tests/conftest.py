import pytest


@pytest.fixture
def batch(make_batch):
    return make_batch(quantity=3)


@pytest.fixture
def code(batch):
    """An issued, unused code."""
    return batch.codes.order_by('created_at').first()
