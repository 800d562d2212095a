"""Ledger facade, summary and the communications log."""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from negotiation.communications import CommunicationLog
from negotiation.exceptions import LedgerConflict, LedgerNotFound, LedgerValidationError
from negotiation.history import ChangeRecorder
from negotiation.ledger import NegotiationLedger, effective_status
from negotiation.responses import ResponseRecorder


def _communication(inquiry, **extra):
    data = {'communication_type': 'EMAIL', 'direction': 'INBOUND', 'content': 'Customer reply'}
    data.update(extra)
    return CommunicationLog.record_communication(inquiry.pk, data)


@pytest.mark.django_db
class TestLedgerState:

    def test_state_enriches_versions(self, inquiry, item_a, make_version):
        first = make_version(inquiry, (item_a, 5, '10.00'))
        make_version(inquiry, (item_a, 5, '9.50'))
        ResponseRecorder.record_customer_response(first.pk, 'NEGOTIATING')
        for _ in range(2):
            ResponseRecorder.record_quotation_response(
                first.pk,
                {'overall_status': 'NEGOTIATING', 'communication_method': 'PHONE'},
                [{'version_item_id': first.items.get().pk, 'catalog_item_id': item_a.pk,
                  'item_status': 'COUNTER_PROPOSED', 'requested_unit_price': '9.00'}],
            )
        ChangeRecorder.record_change(inquiry.pk, item_a.pk, new_unit_price='9.40')

        state = NegotiationLedger.get_state(inquiry.pk)

        versions = state['versions']
        assert [version.version_number for version in versions] == [1, 2]
        assert [version.quotation_response_count for version in versions] == [2, 0]
        assert effective_status(versions[0]) == 'NEGOTIATING'
        assert effective_status(versions[1]) == 'NEW'
        assert state['latest_version'].version_number == 2
        assert state['can_create_version'] is True
        assert state['display_currency'] is None
        assert state['sku_history'][0]['change_count'] == 1

    def test_display_currency(self, inquiry):
        assert NegotiationLedger.get_state(inquiry.pk, 'usd')['display_currency'] == 'USD'
        assert NegotiationLedger.get_state(inquiry.pk, 'CAD')['display_currency'] is None

    def test_unsupported_display_currency(self, inquiry):
        with pytest.raises(LedgerValidationError):
            NegotiationLedger.get_state(inquiry.pk, 'EUR')

    def test_unknown_inquiry(self, db):
        with pytest.raises(LedgerNotFound):
            NegotiationLedger.get_state(123456)

    def test_summary(self, inquiry, item_a, make_version):
        make_version(inquiry, (item_a, 5, '10.00'))
        _communication(inquiry, communication_date=timezone.now() - timedelta(days=1))
        latest = _communication(inquiry, follow_up_required=True)
        ChangeRecorder.record_change(inquiry.pk, item_a.pk, new_quantity=6)
        ChangeRecorder.record_change(inquiry.pk, item_a.pk, new_quantity=7)

        summary = NegotiationLedger.get_summary(inquiry.pk)

        assert summary['total_versions'] == 1
        assert summary['latest_version_number'] == 1
        assert summary['latest_final_price'] == Decimal('50.00')
        assert summary['total_communications'] == 2
        assert summary['total_sku_changes'] == 2
        assert summary['renegotiated_items'] == 1
        assert summary['pending_follow_ups'] == 1
        assert summary['last_communication_date'] == latest.communication_date
        assert summary['negotiation_duration_days'] == 0


@pytest.mark.django_db
class TestCommunications:

    def test_list_is_newest_first(self, inquiry):
        older = _communication(inquiry, communication_date=timezone.now() - timedelta(hours=3))
        newer = _communication(inquiry, direction='OUTBOUND')

        assert list(CommunicationLog.list_communications(inquiry.pk)) == [newer, older]

    def test_invalid_choices(self, inquiry):
        with pytest.raises(LedgerValidationError) as excinfo:
            CommunicationLog.record_communication(inquiry.pk, {
                'communication_type': 'FAX', 'direction': 'SIDEWAYS', 'content': '',
            })
        assert set(excinfo.value.errors) == {'communication_type', 'direction', 'content'}

    def test_complete_follow_up_once(self, inquiry):
        communication = _communication(inquiry, follow_up_required=True,
                                       follow_up_date=timezone.now() + timedelta(days=2))

        completed = CommunicationLog.complete_follow_up(communication.pk)
        assert completed.follow_up_completed is True
        assert completed.follow_up_completed_at is not None

        with pytest.raises(LedgerConflict):
            CommunicationLog.complete_follow_up(communication.pk)

    def test_complete_without_follow_up(self, inquiry):
        communication = _communication(inquiry)
        with pytest.raises(LedgerConflict):
            CommunicationLog.complete_follow_up(communication.pk)

    def test_complete_unknown(self, db):
        with pytest.raises(LedgerNotFound):
            CommunicationLog.complete_follow_up(99999)
