import pytest
from django.urls import reverse
from rest_framework import status

from apps.disputes.models import Dispute, DisputeStatus


@pytest.mark.django_db
class TestDisputeCreateAPI:
    """Tests for POST /api/disputes/"""

    def test_manufacturer_opens_dispute(self, manufacturer_client, payment):
        response = manufacturer_client.post(reverse('disputes:dispute-list'), {
            'payment_id': str(payment.id),
            'reason': 'Duplicate charge',
            'description': 'Charged twice on the same day',
            'claimed_amount': '2000.00',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == DisputeStatus.OPEN
        assert response.data['reference'] == 'PSK-REF-0001'
        assert response.data['claimed_amount'] == '2000.00'
        assert len(response.data['transitions']) == 1

    def test_duplicate_dispute_conflicts(self, manufacturer_client, dispute, payment):
        response = manufacturer_client.post(reverse('disputes:dispute-list'), {
            'payment_id': str(payment.id),
            'reason': 'Again',
            'description': 'Second attempt',
        }, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_foreign_payment_not_found(self, manufacturer_client, other_payment):
        response = manufacturer_client.post(reverse('disputes:dispute-list'), {
            'payment_id': str(other_payment.id),
            'reason': 'r',
            'description': 'd',
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert Dispute.objects.count() == 0

    def test_consumer_forbidden(self, consumer_client, payment):
        response = consumer_client.post(reverse('disputes:dispute-list'), {
            'payment_id': str(payment.id),
            'reason': 'r',
            'description': 'd',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_back_office_cannot_open(self, back_office_client, payment):
        response = back_office_client.post(reverse('disputes:dispute-list'), {
            'payment_id': str(payment.id),
            'reason': 'r',
            'description': 'd',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestDisputeReadAPI:
    """Tests for listing and retrieving disputes"""

    def test_manufacturer_sees_own(self, manufacturer_client, client_for, other_manufacturer, dispute):
        response = manufacturer_client.get(reverse('disputes:dispute-list'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['count'] == 1

        other_client = client_for(other_manufacturer)
        response = other_client.get(reverse('disputes:dispute-list'))
        assert response.data['count'] == 0

        response = other_client.get(reverse('disputes:dispute-detail', args=[dispute.id]))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_back_office_sees_all_and_filters(self, back_office_client, dispute):
        url = reverse('disputes:dispute-list')

        response = back_office_client.get(url)
        assert response.data['count'] == 1

        response = back_office_client.get(url, {'status': DisputeStatus.REFUNDED})
        assert response.data['count'] == 0

    def test_invalid_status_filter(self, back_office_client):
        response = back_office_client.get(reverse('disputes:dispute-list'), {'status': 'LOST'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_retrieve_with_history(self, manufacturer_client, investigated_dispute):
        url = reverse('disputes:dispute-detail', args=[investigated_dispute.id])
        response = manufacturer_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [t['to_status'] for t in response.data['transitions']] == [
            DisputeStatus.OPEN,
            DisputeStatus.UNDER_INVESTIGATION,
        ]

    def test_consumer_cannot_list(self, consumer_client):
        response = consumer_client.get(reverse('disputes:dispute-list'))

        assert response.status_code == status.HTTP_403_FORBIDDEN


@pytest.mark.django_db
class TestDisputeTransitionAPI:
    """Tests for the back-office transition actions"""

    def test_manufacturer_cannot_investigate(self, manufacturer_client, dispute):
        url = reverse('disputes:dispute-investigate', args=[dispute.id])
        response = manufacturer_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        dispute.refresh_from_db()
        assert dispute.status == DisputeStatus.OPEN

    def test_full_refund_flow(self, back_office_client, back_office_user, dispute):
        response = back_office_client.post(
            reverse('disputes:dispute-investigate', args=[dispute.id]),
            {'notes': 'Pulling gateway records'},
            format='json'
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == DisputeStatus.UNDER_INVESTIGATION
        assert response.data['investigator'] == back_office_user.actor_id

        refund_url = reverse('disputes:dispute-refund', args=[dispute.id])
        response = back_office_client.post(refund_url, {}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == DisputeStatus.REFUNDED
        assert response.data['refunded_amount'] == '5000.00'

        response = back_office_client.post(refund_url, {'refund_amount': '10.00'}, format='json')
        assert response.status_code == status.HTTP_409_CONFLICT

        dispute.refresh_from_db()
        assert str(dispute.refunded_amount) == '5000.00'

    def test_refund_over_payment(self, back_office_client, investigated_dispute):
        url = reverse('disputes:dispute-refund', args=[investigated_dispute.id])
        response = back_office_client.post(url, {'refund_amount': '9000.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_reject_requires_reason(self, back_office_client, investigated_dispute):
        url = reverse('disputes:dispute-reject', args=[investigated_dispute.id])
        response = back_office_client.post(url, {'reason': ''}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        investigated_dispute.refresh_from_db()
        assert investigated_dispute.status == DisputeStatus.UNDER_INVESTIGATION

    def test_reject(self, back_office_client, investigated_dispute):
        url = reverse('disputes:dispute-reject', args=[investigated_dispute.id])
        response = back_office_client.post(url, {'reason': 'Charge confirmed by gateway'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == DisputeStatus.REJECTED

    def test_resolve_open_dispute_conflicts(self, back_office_client, dispute):
        url = reverse('disputes:dispute-resolve', args=[dispute.id])
        response = back_office_client.post(url, {'resolution_notes': 'Done'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_unknown_dispute(self, back_office_client):
        url = reverse('disputes:dispute-investigate', args=['00000000-0000-0000-0000-000000000000'])
        response = back_office_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.parametrize('bad_id', ['0' * 36, '-' * 36, 'not-a-uuid'])
    def test_malformed_dispute_id_not_found(self, back_office_client, bad_id):
        base = reverse('disputes:dispute-list')

        response = back_office_client.get(f'{base}{bad_id}/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

        response = back_office_client.post(f'{base}{bad_id}/refund/', {}, format='json')
        assert response.status_code == status.HTTP_404_NOT_FOUND
