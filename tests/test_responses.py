"""Response recorder: coarse verdicts and detailed, numbered responses."""
import threading
from decimal import Decimal
from unittest import mock

import pytest
from django.db import connection

from catalog.models import CatalogItem
from inquiries.enums import InquiryStatus
from inquiries.services import InquiryService
from negotiation.enums import CommunicationMethod, EntryType, QuotationResponseStatus, ResponseItemStatus
from negotiation.exceptions import (
    CrossReferenceError, LedgerConflict, LedgerNotFound, LedgerValidationError
)
from negotiation.models import CustomerResponse, QuotationResponse, QuotationResponseItem
from negotiation.responses import ResponseRecorder
from negotiation.versions import VersionManager


def _line(version_item, status=ResponseItemStatus.ACCEPTED, **extra):
    return {
        'version_item_id': version_item.pk,
        'catalog_item_id': version_item.catalog_item_id,
        'item_status': status,
        **extra,
    }


def _header(overall_status=QuotationResponseStatus.ACCEPTED, **extra):
    return {
        'overall_status': overall_status,
        'communication_method': CommunicationMethod.EMAIL,
        **extra,
    }


@pytest.mark.django_db
class TestCustomerResponse:

    def test_accept_latest_version(self, inquiry, item_a, make_version, sales_user):
        version = make_version(inquiry, (item_a, 5, '10.00'))

        result = ResponseRecorder.record_customer_response(
            version.pk, 'ACCEPTED', comments='Looks good', author=sales_user
        )

        assert result['response'].status == 'ACCEPTED'
        assert result['status_change']['changed'] is True
        inquiry.refresh_from_db()
        assert inquiry.status == InquiryStatus.ACCEPTED

    def test_second_verdict_conflicts_and_keeps_the_first(self, inquiry, item_a, make_version):
        version = make_version(inquiry, (item_a, 5, '10.00'))
        ResponseRecorder.record_customer_response(version.pk, 'NEGOTIATING', comments='too high')

        with pytest.raises(LedgerConflict):
            ResponseRecorder.record_customer_response(version.pk, 'ACCEPTED')

        response = CustomerResponse.objects.get(version=version)
        assert response.status == 'NEGOTIATING'
        assert response.comments == 'too high'

    def test_verdict_on_superseded_version_leaves_inquiry_status(self, inquiry, item_a, make_version):
        first = make_version(inquiry, (item_a, 5, '10.00'))
        make_version(inquiry, (item_a, 5, '9.00'))

        result = ResponseRecorder.record_customer_response(first.pk, 'DECLINED')

        assert result['status_change'] is None
        inquiry.refresh_from_db()
        assert inquiry.status == InquiryStatus.NEGOTIATING

    def test_invalid_status(self, inquiry, item_a, make_version):
        version = make_version(inquiry, (item_a, 5, '10.00'))
        with pytest.raises(LedgerValidationError):
            ResponseRecorder.record_customer_response(version.pk, 'MAYBE')
        assert CustomerResponse.objects.count() == 0

    def test_unknown_version(self, db):
        with pytest.raises(LedgerNotFound):
            ResponseRecorder.record_customer_response(424242, 'ACCEPTED')


@pytest.mark.django_db
class TestQuotationResponse:

    def test_single_accepted_line_scenario(self, inquiry, item_a, make_version, sales_user):
        version = make_version(inquiry, (item_a, 5, '10.00'))
        version_item = version.items.get()

        result = ResponseRecorder.record_quotation_response(
            version.pk, _header(), [_line(version_item)], author=sales_user
        )

        response = result['response']
        assert response.response_number == 1
        assert response.overall_status == QuotationResponseStatus.ACCEPTED
        assert result['warnings'] == []
        assert response.items.count() == 1

    def test_sequence_numbers_follow_creation_order(self, inquiry, item_a, make_version):
        version = make_version(inquiry, (item_a, 5, '10.00'))
        version_item = version.items.get()

        numbers = [
            ResponseRecorder.record_quotation_response(
                version.pk, _header(QuotationResponseStatus.PENDING), [_line(version_item, ResponseItemStatus.PENDING)]
            )['response'].response_number
            for _ in range(3)
        ]

        assert numbers == [1, 2, 3]
        listed = ResponseRecorder.list_quotation_responses(version.pk)
        assert [response.response_number for response in listed] == [1, 2, 3]

    def test_sequences_are_per_version(self, inquiry, item_a, make_version):
        first = make_version(inquiry, (item_a, 5, '10.00'))
        second = make_version(inquiry, (item_a, 5, '9.00'))
        ResponseRecorder.record_quotation_response(first.pk, _header(), [_line(first.items.get())])

        result = ResponseRecorder.record_quotation_response(second.pk, _header(), [_line(second.items.get())])
        assert result['response'].response_number == 1

    def test_foreign_version_item_rejects_whole_response(self, inquiry, item_a, item_b, make_version):
        first = make_version(inquiry, (item_a, 5, '10.00'))
        second = make_version(inquiry, (item_a, 5, '9.00'), (item_b, 1, '2.00'))
        own_item = first.items.get()
        foreign_item = second.items.get(catalog_item=item_b)

        with pytest.raises(CrossReferenceError) as excinfo:
            ResponseRecorder.record_quotation_response(
                first.pk, _header(), [_line(own_item), _line(foreign_item)]
            )

        assert excinfo.value.status_code == 400
        assert excinfo.value.get_codes() == 'integrity_error'
        assert QuotationResponse.objects.count() == 0
        assert QuotationResponseItem.objects.count() == 0

    def test_sku_mismatch_rejected(self, inquiry, item_a, item_b, make_version):
        version = make_version(inquiry, (item_a, 5, '10.00'))
        line = _line(version.items.get())
        line['catalog_item_id'] = item_b.pk

        with pytest.raises(CrossReferenceError):
            ResponseRecorder.record_quotation_response(version.pk, _header(), [line])
        assert QuotationResponse.objects.count() == 0

    def test_inconsistent_overall_status_is_a_warning(self, inquiry, item_a, item_b, make_version, caplog):
        version = make_version(inquiry, (item_a, 5, '10.00'), (item_b, 1, '2.00'))
        lines = [_line(item, ResponseItemStatus.ACCEPTED) for item in version.items.all()]

        result = ResponseRecorder.record_quotation_response(
            version.pk, _header(QuotationResponseStatus.PARTIAL_ACCEPTED), lines
        )

        assert result['response'].overall_status == QuotationResponseStatus.PARTIAL_ACCEPTED
        assert result['warnings'] == ["Overall status is PARTIAL_ACCEPTED but every line is accepted"]
        assert 'PARTIAL_ACCEPTED but every line is accepted' in caplog.text

    def test_requested_values_and_total(self, inquiry, item_a, item_b, make_version):
        version = make_version(inquiry, (item_a, 5, '10.00'), (item_b, 4, '2.00'))
        item_a_line = version.items.get(catalog_item=item_a)
        item_b_line = version.items.get(catalog_item=item_b)

        result = ResponseRecorder.record_quotation_response(
            version.pk,
            _header(QuotationResponseStatus.NEGOTIATING),
            [
                _line(item_a_line, ResponseItemStatus.COUNTER_PROPOSED,
                      requested_quantity=8, requested_unit_price=Decimal('9.25')),
                _line(item_b_line, ResponseItemStatus.COUNTER_PROPOSED,
                      requested_unit_price=Decimal('1.80'), customer_sku_reference='NW-778'),
            ],
        )

        items = {item.catalog_item_id: item for item in result['response'].items.all()}
        assert items[item_a.pk].requested_total_price == Decimal('74.00')
        # No requested quantity: the offered quantity is used
        assert items[item_b.pk].requested_quantity is None
        assert items[item_b.pk].requested_total_price == Decimal('7.20')
        assert items[item_b.pk].customer_sku_reference == 'NW-778'
        assert result['warnings'] == []

    def test_quotation_response_never_moves_inquiry(self, inquiry, item_a, make_version):
        version = make_version(inquiry, (item_a, 5, '10.00'))
        ResponseRecorder.record_quotation_response(version.pk, _header(), [_line(version.items.get())])

        inquiry.refresh_from_db()
        assert inquiry.status == InquiryStatus.SENT

    def test_duplicate_line_rejected(self, inquiry, item_a, make_version):
        version = make_version(inquiry, (item_a, 5, '10.00'))
        line = _line(version.items.get())

        with pytest.raises(LedgerValidationError):
            ResponseRecorder.record_quotation_response(version.pk, _header(), [line, dict(line)])

    def test_empty_lines_rejected(self, inquiry, item_a, make_version):
        version = make_version(inquiry, (item_a, 5, '10.00'))
        with pytest.raises(LedgerValidationError):
            ResponseRecorder.record_quotation_response(version.pk, _header(), [])

    def test_stale_response_number_is_retried(self, inquiry, item_a, make_version):
        version = make_version(inquiry, (item_a, 5, '10.00'))
        version_item = version.items.get()
        ResponseRecorder.record_quotation_response(version.pk, _header(), [_line(version_item)])

        with mock.patch('negotiation.responses.next_number', side_effect=[1, 2]):
            result = ResponseRecorder.record_quotation_response(version.pk, _header(), [_line(version_item)])

        assert result['response'].response_number == 2
        assert QuotationResponseItem.objects.count() == 2

    def test_missing_response(self, db):
        with pytest.raises(LedgerNotFound):
            ResponseRecorder.get_quotation_response(31337)


@pytest.mark.django_db(transaction=True)
class TestConcurrentResponses:

    def test_two_recorders_get_distinct_sequential_numbers(self):
        item = CatalogItem.objects.create(sku='CONC-R')
        inquiry = InquiryService.create_inquiry({'rfq_number': 'RFQ-CONC-R', 'customer_reference': 'Race Co'})
        version = VersionManager.create_version(
            inquiry.pk, EntryType.INTERNAL_QUOTE,
            [{'catalog_item_id': item.pk, 'quantity': 4, 'unit_price': '2.50'}]
        )['version']
        version_item = version.items.get()
        barrier = threading.Barrier(2)
        results, failures = [], []

        def recorder(status):
            try:
                barrier.wait(timeout=5)
                result = ResponseRecorder.record_quotation_response(
                    version.pk, _header(QuotationResponseStatus.NEGOTIATING), [_line(version_item, status)]
                )
                results.append(result['response'].response_number)
            except Exception as exc:
                failures.append(exc)
            finally:
                connection.close()

        statuses = (ResponseItemStatus.COUNTER_PROPOSED, ResponseItemStatus.NEEDS_CLARIFICATION)
        threads = [threading.Thread(target=recorder, args=(status,)) for status in statuses]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert failures == []
        assert sorted(results) == [1, 2]
        numbers = [response.response_number for response in ResponseRecorder.list_quotation_responses(version.pk)]
        assert numbers == [1, 2]
        assert QuotationResponseItem.objects.filter(response__version=version).count() == 2
