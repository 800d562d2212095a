"""REST endpoints: envelope, status codes and permissions."""
import pytest
from rest_framework.test import APIClient

from negotiation.enums import ErrorMessages
from negotiation.models import QuotationResponse, QuotationVersion
from negotiation.pricing import MAX_TOTAL

BASE = '/api/negotiation'


def _create_version(client, inquiry, item, quantity=5, unit_price='10.00', **extra):
    body = {
        'entry_type': 'INTERNAL_QUOTE',
        'items': [{'catalog_item_id': item.pk, 'quantity': quantity, 'unit_price': unit_price}],
        **extra,
    }
    return client.post(f'{BASE}/inquiries/{inquiry.pk}/versions/', body, format='json')


@pytest.mark.django_db
class TestVersionEndpoints:

    def test_create_version(self, api_client, inquiry, item_a):
        response = _create_version(api_client, inquiry, item_a)

        assert response.status_code == 201
        body = response.json()
        assert body['success'] is True
        data = body['data']
        assert data['version_number'] == 1
        assert data['status'] == 'NEW'
        assert data['final_price'] == '50.00'
        assert data['item_count'] == 1
        assert data['inquiry_status'] == 'SENT'
        assert body['message'] == 'Version 1 created with 1 items. Final price: 50.00'

    def test_replayed_submission_returns_200(self, api_client, inquiry, item_a):
        first = _create_version(api_client, inquiry, item_a, submission_key='form-1')
        second = _create_version(api_client, inquiry, item_a, submission_key='form-1')

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()['data']['id'] == first.json()['data']['id']

    def test_empty_items_is_400(self, api_client, inquiry):
        response = api_client.post(
            f'{BASE}/inquiries/{inquiry.pk}/versions/', {'entry_type': 'INTERNAL_QUOTE', 'items': []}, format='json'
        )
        assert response.status_code == 400
        body = response.json()
        assert body['success'] is False
        assert 'items' in body['errors']

    def test_invalid_quantity_is_400(self, api_client, inquiry, item_a):
        response = _create_version(api_client, inquiry, item_a, quantity=0)
        assert response.status_code == 400

    def test_oversized_quantity_is_400(self, api_client, inquiry, item_a):
        response = _create_version(api_client, inquiry, item_a, quantity=10 ** 13, unit_price='1000.00')

        assert response.status_code == 400
        body = response.json()
        assert body['success'] is False
        assert body['code'] == 'validation_error'
        assert 'items' in body['errors']

    def test_total_beyond_column_range_is_400(self, api_client, inquiry, item_a):
        response = _create_version(api_client, inquiry, item_a, quantity=1000000000, unit_price='1000.00')

        assert response.status_code == 400
        assert response.json()['errors'] == {'items': [ErrorMessages.TOTAL_TOO_LARGE.format(limit=MAX_TOTAL)]}
        assert QuotationVersion.objects.count() == 0

    def test_unknown_inquiry_is_404(self, api_client, item_a):
        response = api_client.post(
            f'{BASE}/inquiries/99999/versions/',
            {'entry_type': 'INTERNAL_QUOTE', 'items': [{'catalog_item_id': item_a.pk, 'quantity': 1, 'unit_price': '1.00'}]},
            format='json'
        )
        assert response.status_code == 404
        assert response.json() == {'success': False, 'error': 'Inquiry 99999 not found', 'code': 'not_found'}

    def test_list_versions_with_display_currency(self, api_client, inquiry, item_a):
        _create_version(api_client, inquiry, item_a)
        _create_version(api_client, inquiry, item_a, unit_price='9.00')

        response = api_client.get(f'{BASE}/inquiries/{inquiry.pk}/versions/?currency=USD')

        assert response.status_code == 200
        versions = response.json()['data']
        assert [version['version_number'] for version in versions] == [1, 2]
        assert versions[0]['final_price'] == '50.00'
        assert versions[0]['display'] == {
            'currency': 'USD',
            'final_price': '37.00',
            'items': [{'id': versions[0]['items'][0]['id'], 'unit_price': '7.40', 'total_price': '37.00'}],
        }
        assert versions[0]['customer_response'] is None
        assert versions[0]['quotation_response_count'] == 0

    def test_version_detail(self, api_client, inquiry, item_a):
        _create_version(api_client, inquiry, item_a)
        assert api_client.get(f'{BASE}/inquiries/{inquiry.pk}/versions/1/').status_code == 200
        assert api_client.get(f'{BASE}/inquiries/{inquiry.pk}/versions/2/').status_code == 404


@pytest.mark.django_db
class TestResponseEndpoints:

    def test_customer_response_conflict(self, api_client, inquiry, item_a):
        version_id = _create_version(api_client, inquiry, item_a).json()['data']['id']
        url = f'{BASE}/versions/{version_id}/customer-response/'

        first = api_client.post(url, {'status': 'ACCEPTED', 'comments': 'ok'}, format='json')
        second = api_client.post(url, {'status': 'DECLINED'}, format='json')

        assert first.status_code == 201
        assert first.json()['data']['inquiry_status'] == 'ACCEPTED'
        assert second.status_code == 409
        assert second.json()['success'] is False
        assert api_client.get(url).json()['data']['status'] == 'ACCEPTED'

    def test_quotation_responses(self, api_client, inquiry, item_a):
        version = _create_version(api_client, inquiry, item_a).json()['data']
        url = f'{BASE}/versions/{version["id"]}/responses/'
        body = {
            'overall_status': 'PARTIAL_ACCEPTED',
            'response_date': '2026-03-02T15:30:00Z',
            'communication_method': 'EMAIL',
            'customer_contact_person': 'Dana Ortiz',
            'response_items': [{
                'version_item_id': version['items'][0]['id'],
                'catalog_item_id': item_a.pk,
                'item_status': 'ACCEPTED',
            }],
        }

        created = [api_client.post(url, body, format='json') for _ in range(2)]

        assert [response.status_code for response in created] == [201, 201]
        assert [response.json()['data']['response_number'] for response in created] == [1, 2]
        assert created[0].json()['data']['warnings'] == [
            "Overall status is PARTIAL_ACCEPTED but every line is accepted"
        ]
        listed = api_client.get(url).json()['data']
        assert [response['response_number'] for response in listed] == [1, 2]

        detail = api_client.get(f'{BASE}/responses/{listed[0]["id"]}/')
        assert detail.status_code == 200
        assert detail.json()['data']['items'][0]['item_status'] == 'ACCEPTED'

        versions = api_client.get(f'{BASE}/inquiries/{inquiry.pk}/versions/').json()['data']
        assert versions[0]['quotation_response_count'] == 2

    def test_foreign_item_is_400_integrity(self, api_client, inquiry, item_a, item_b):
        first = _create_version(api_client, inquiry, item_a).json()['data']
        second = _create_version(api_client, inquiry, item_b).json()['data']

        response = api_client.post(f'{BASE}/versions/{first["id"]}/responses/', {
            'overall_status': 'ACCEPTED',
            'communication_method': 'PORTAL',
            'response_items': [{
                'version_item_id': second['items'][0]['id'],
                'catalog_item_id': item_b.pk,
                'item_status': 'ACCEPTED',
            }],
        }, format='json')

        assert response.status_code == 400
        assert response.json()['success'] is False
        assert 'response_items' in response.json()['errors']
        assert response.json()['code'] == 'integrity_error'

    def test_requested_total_beyond_column_range_is_400(self, api_client, inquiry, item_a):
        version = _create_version(api_client, inquiry, item_a, quantity=1000, unit_price='1.00').json()['data']
        response = api_client.post(f'{BASE}/versions/{version["id"]}/responses/', {
            'overall_status': 'NEGOTIATING',
            'communication_method': 'EMAIL',
            'response_items': [{
                'version_item_id': version['items'][0]['id'],
                'catalog_item_id': item_a.pk,
                'item_status': 'COUNTER_PROPOSED',
                'requested_unit_price': '9999999999.00',
            }],
        }, format='json')

        assert response.status_code == 400
        assert 'response_items[0]' in response.json()['errors']
        assert QuotationResponse.objects.count() == 0

    def test_invalid_item_status_is_400(self, api_client, inquiry, item_a):
        version = _create_version(api_client, inquiry, item_a).json()['data']
        response = api_client.post(f'{BASE}/versions/{version["id"]}/responses/', {
            'overall_status': 'ACCEPTED',
            'communication_method': 'EMAIL',
            'response_items': [{
                'version_item_id': version['items'][0]['id'],
                'catalog_item_id': item_a.pk,
                'item_status': 'SORT_OF',
            }],
        }, format='json')
        assert response.status_code == 400


@pytest.mark.django_db
class TestHistoryAndLedgerEndpoints:

    def test_sku_change_and_history(self, api_client, inquiry, item_a):
        url = f'{BASE}/inquiries/{inquiry.pk}/sku-changes/'
        created = api_client.post(url, {
            'catalog_item_id': item_a.pk,
            'old_unit_price': '10.00',
            'new_unit_price': '12.00',
            'changed_by': 'INTERNAL',
            'change_reason': 'Supplier cost increase',
        }, format='json')

        assert created.status_code == 201
        assert created.json()['data']['change_type'] == 'PRICE_CHANGE'

        history = api_client.get(f'{BASE}/inquiries/{inquiry.pk}/sku-history/').json()['data']
        assert len(history) == 1
        assert (history[0]['old_unit_price'], history[0]['new_unit_price']) == ('10.00', '12.00')

    def test_sku_change_without_new_values_is_400(self, api_client, inquiry, item_a):
        response = api_client.post(
            f'{BASE}/inquiries/{inquiry.pk}/sku-changes/', {'catalog_item_id': item_a.pk}, format='json'
        )
        assert response.status_code == 400

    def test_ledger_and_summary(self, api_client, inquiry, item_a):
        _create_version(api_client, inquiry, item_a)
        api_client.post(f'{BASE}/inquiries/{inquiry.pk}/sku-changes/',
                        {'catalog_item_id': item_a.pk, 'new_quantity': 8}, format='json')

        ledger = api_client.get(f'{BASE}/inquiries/{inquiry.pk}/ledger/?currency=USD').json()['data']
        assert ledger['inquiry']['status'] == 'SENT'
        assert ledger['can_create_version'] is True
        assert ledger['latest_version_number'] == 1
        assert ledger['versions'][0]['has_customer_response'] is False
        assert ledger['versions'][0]['display']['currency'] == 'USD'
        assert ledger['sku_history'][0]['sku'] == 'A'
        assert ledger['sku_history'][0]['change_count'] == 1

        summary = api_client.get(f'{BASE}/inquiries/{inquiry.pk}/summary/').json()['data']
        assert summary['total_versions'] == 1
        assert summary['total_sku_changes'] == 1
        assert summary['latest_final_price'] == '50.00'

    def test_bad_display_currency(self, api_client, inquiry):
        response = api_client.get(f'{BASE}/inquiries/{inquiry.pk}/ledger/?currency=XYZ')
        assert response.status_code == 400

    def test_communications_and_follow_up(self, api_client, inquiry):
        url = f'{BASE}/inquiries/{inquiry.pk}/communications/'
        created = api_client.post(url, {
            'communication_type': 'PHONE',
            'direction': 'INBOUND',
            'content': 'Asked for a volume discount',
            'follow_up_required': True,
        }, format='json')
        assert created.status_code == 201

        communication_id = created.json()['data']['id']
        complete_url = f'{BASE}/communications/{communication_id}/follow-up/complete/'
        assert api_client.post(complete_url).status_code == 200
        assert api_client.post(complete_url).status_code == 409
        assert api_client.get(url).json()['data'][0]['follow_up_completed'] is True


@pytest.mark.django_db
class TestPermissions:

    def test_anonymous_is_rejected(self, inquiry):
        response = APIClient().get(f'{BASE}/inquiries/{inquiry.pk}/versions/')
        assert response.status_code == 401
        assert response.json()['success'] is False

    def test_viewer_can_read_but_not_write(self, viewer_client, inquiry, item_a):
        assert viewer_client.get(f'{BASE}/inquiries/{inquiry.pk}/versions/').status_code == 200
        response = _create_version(viewer_client, inquiry, item_a)
        assert response.status_code == 403


@pytest.mark.django_db
class TestInquiryEndpoints:

    def test_create_list_and_update_status(self, api_client):
        created = api_client.post('/api/inquiries/', {
            'rfq_number': 'RFQ-API-1', 'customer_reference': 'Globex', 'currency': 'usd',
        }, format='json')
        assert created.status_code == 201
        inquiry = created.json()['data']
        assert inquiry['currency'] == 'USD'
        assert inquiry['version_count'] == 0

        listed = api_client.get('/api/inquiries/?status=new').json()['data']
        assert [row['rfq_number'] for row in listed] == ['RFQ-API-1']

        status_url = f"/api/inquiries/{inquiry['id']}/status/"
        assert api_client.patch(status_url, {'status': 'DRAFT'}, format='json').status_code == 200
        rejected = api_client.patch(status_url, {'status': 'PROCESSED'}, format='json')
        assert rejected.status_code == 400
        assert rejected.json()['success'] is False

    def test_duplicate_rfq_is_409(self, api_client, inquiry):
        response = api_client.post('/api/inquiries/', {
            'rfq_number': inquiry.rfq_number, 'customer_reference': 'Dup',
        }, format='json')
        assert response.status_code == 409

    def test_unknown_status_filter(self, api_client):
        assert api_client.get('/api/inquiries/?status=LOST').status_code == 400

    def test_missing_inquiry_detail(self, api_client):
        response = api_client.get('/api/inquiries/4321/')
        assert response.status_code == 404
        assert response.json()['success'] is False


@pytest.mark.django_db
class TestCatalogEndpoints:

    def test_search_active_items(self, api_client, item_a, item_b):
        item_b.is_active = False
        item_b.save()

        response = api_client.get('/api/catalog/items/?search=bearing')

        assert response.status_code == 200
        assert response.json()['message'] == 'Found 1 catalog items'
        assert [row['sku'] for row in response.json()['data']] == ['A']

    def test_item_detail(self, viewer_client, item_a):
        response = viewer_client.get(f'/api/catalog/items/{item_a.pk}/')
        assert response.json()['data']['mpn'] == '6204-2RSH'
