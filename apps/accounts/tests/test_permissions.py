"""
Tests for the role permission classes.
"""
import pytest
from unittest.mock import Mock
from django.contrib.auth.models import AnonymousUser
from apps.accounts.permissions import IsManufacturer, IsBackOffice


def _request_for(user):
    request = Mock()
    request.user = user
    return request


@pytest.mark.django_db
class TestIsManufacturer:

    def test_manufacturer_allowed(self, manufacturer):
        assert IsManufacturer().has_permission(_request_for(manufacturer), Mock()) is True

    def test_consumer_denied(self, consumer):
        assert IsManufacturer().has_permission(_request_for(consumer), Mock()) is False

    def test_back_office_denied(self, back_office_user):
        assert IsManufacturer().has_permission(_request_for(back_office_user), Mock()) is False

    def test_anonymous_denied(self):
        assert IsManufacturer().has_permission(_request_for(AnonymousUser()), Mock()) is False


@pytest.mark.django_db
class TestIsBackOffice:

    def test_admin_role_allowed(self, back_office_user):
        assert IsBackOffice().has_permission(_request_for(back_office_user), Mock()) is True

    def test_staff_allowed(self, staff_user):
        assert IsBackOffice().has_permission(_request_for(staff_user), Mock()) is True

    def test_manufacturer_denied(self, manufacturer):
        assert IsBackOffice().has_permission(_request_for(manufacturer), Mock()) is False

    def test_anonymous_denied(self):
        assert IsBackOffice().has_permission(_request_for(AnonymousUser()), Mock()) is False

    def test_actor_id_is_opaque_string(self, back_office_user):
        assert back_office_user.actor_id == str(back_office_user.id)
