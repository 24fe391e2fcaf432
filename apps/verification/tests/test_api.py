import pytest
from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from rest_framework.throttling import ScopedRateThrottle

from apps.verification.models import VerificationLog, Verdict


@pytest.mark.django_db
class TestManualVerification:
    """Tests for POST /api/verify/"""

    def test_anonymous_genuine(self, api_client, code):
        response = api_client.post(reverse('verification:verify'), {'code': code.value}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['verdict'] == Verdict.GENUINE
        assert response.data['product_name'] == 'Paracetamol 500mg'
        assert response.data['batch_number'] == code.batch.batch_number

    def test_second_attempt_already_used(self, api_client, code):
        url = reverse('verification:verify')
        api_client.post(url, {'code': code.value}, format='json')

        response = api_client.post(url, {'code': code.value}, format='json')

        assert response.data['verdict'] == Verdict.CODE_ALREADY_USED

    def test_unknown_code_invalid(self, api_client, db):
        response = api_client.post(reverse('verification:verify'), {'code': 'LUM-UNKNOWN234'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['verdict'] == Verdict.INVALID
        assert response.data['product_name'] is None

    def test_missing_code(self, api_client, db):
        response = api_client.post(reverse('verification:verify'), {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_half_location_rejected(self, api_client, code):
        response = api_client.post(
            reverse('verification:verify'),
            {'code': code.value, 'latitude': 6.5},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        code.refresh_from_db()
        assert code.is_used is False

    def test_authenticated_attempt_recorded_with_user(self, consumer_client, consumer, code):
        consumer_client.post(
            reverse('verification:verify'),
            {'code': code.value},
            format='json',
            HTTP_X_FORWARDED_FOR='203.0.113.7, 10.0.0.1'
        )

        log = VerificationLog.objects.get(code=code)
        assert log.user == consumer
        assert log.ip_address == '203.0.113.7'

    def test_malformed_forwarded_for_falls_back_to_remote_addr(self, api_client, code):
        response = api_client.post(
            reverse('verification:verify'),
            {'code': code.value},
            format='json',
            HTTP_X_FORWARDED_FOR='unknown, 10.0.0.1'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['verdict'] == Verdict.GENUINE
        assert VerificationLog.objects.get(code=code).ip_address == '127.0.0.1'

    def test_blank_code_logged_as_invalid(self, api_client, db):
        response = api_client.post(reverse('verification:verify'), {'code': '   '}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['verdict'] == Verdict.INVALID
        log = VerificationLog.objects.get()
        assert log.verdict == Verdict.INVALID
        assert log.code is None

    def test_store_failure_returns_generic_503(self, api_client, code, monkeypatch):
        def broken_create(**kwargs):
            raise DatabaseError('disk I/O error at /var/lib/db')

        monkeypatch.setattr(VerificationLog.objects, 'create', broken_create)

        response = api_client.post(reverse('verification:verify'), {'code': code.value}, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert 'try again' in response.data['detail']
        assert 'disk' not in response.data['detail']
        code.refresh_from_db()
        assert code.is_used is False

    def test_throttled(self, api_client, code, monkeypatch):
        monkeypatch.setattr(ScopedRateThrottle, 'THROTTLE_RATES', {'verification': '2/min'})
        url = reverse('verification:verify')

        for _ in range(2):
            assert api_client.post(url, {'code': code.value}, format='json').status_code == status.HTTP_200_OK

        response = api_client.post(url, {'code': code.value}, format='json')
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS


@pytest.mark.django_db
class TestQRVerification:
    """Tests for POST /api/verify/qr/"""

    def test_scanned_payload(self, api_client, code):
        response = api_client.post(reverse('verification:verify-qr'), {'payload': code.value}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['verdict'] == Verdict.GENUINE

    def test_foreign_payload_rejected(self, api_client, code):
        response = api_client.post(
            reverse('verification:verify-qr'),
            {'payload': 'https://shop.example.com/item/9'},
            format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert VerificationLog.objects.count() == 0


@pytest.mark.django_db
class TestVerificationHistory:
    """Tests for GET /api/verify/history/"""

    def test_history_lists_own_attempts(self, consumer_client, client_for, manufacturer, code):
        consumer_client.post(reverse('verification:verify'), {'code': code.value}, format='json')
        client_for(manufacturer).post(reverse('verification:verify'), {'code': 'LUM-OTHER23456'}, format='json')

        response = consumer_client.get(reverse('verification:history'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1
        assert response.data['results'][0]['code_value'] == code.value

    def test_history_requires_auth(self, api_client):
        response = api_client.get(reverse('verification:history'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
