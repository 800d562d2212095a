"""Inquiry intake and lifecycle transitions."""
import pytest

from inquiries.enums import BusinessRules, InquiryStatus
from inquiries.services import InquiryService
from negotiation.exceptions import LedgerConflict, LedgerNotFound, LedgerValidationError


class TestBusinessRules:

    @pytest.mark.parametrize('from_status,to_status', [
        (InquiryStatus.NEW, InquiryStatus.SENT),
        (InquiryStatus.SENT, InquiryStatus.ACCEPTED),
        (InquiryStatus.NEGOTIATING, InquiryStatus.DECLINED),
        (InquiryStatus.ACCEPTED, InquiryStatus.PROCESSED),
        (InquiryStatus.DECLINED, InquiryStatus.NEGOTIATING),
    ])
    def test_allowed(self, from_status, to_status):
        assert BusinessRules.can_transition(from_status, to_status) is True

    @pytest.mark.parametrize('from_status,to_status', [
        (InquiryStatus.NEW, InquiryStatus.ACCEPTED),
        (InquiryStatus.PROCESSED, InquiryStatus.NEGOTIATING),
        (InquiryStatus.SENT, InquiryStatus.PROCESSED),
    ])
    def test_forbidden(self, from_status, to_status):
        assert BusinessRules.can_transition(from_status, to_status) is False

    def test_processed_is_locked(self):
        assert BusinessRules.can_create_version(InquiryStatus.PROCESSED, ['PROCESSED']) is False
        assert BusinessRules.can_create_version(InquiryStatus.ACCEPTED, ['PROCESSED']) is True


@pytest.mark.django_db
class TestInquiryService:

    def test_create_defaults(self, sales_user):
        inquiry = InquiryService.create_inquiry(
            {'rfq_number': 'RFQ-7', 'customer_reference': 'Fabrikam'}, user=sales_user
        )
        assert inquiry.status == InquiryStatus.NEW
        assert inquiry.currency == 'CAD'
        assert inquiry.created_by == sales_user

    def test_duplicate_number(self, inquiry):
        with pytest.raises(LedgerConflict):
            InquiryService.create_inquiry({'rfq_number': inquiry.rfq_number, 'customer_reference': 'Again'})

    def test_unsupported_currency(self, db):
        with pytest.raises(LedgerValidationError):
            InquiryService.create_inquiry({'rfq_number': 'RFQ-8', 'customer_reference': 'X', 'currency': 'EUR'})

    def test_strict_transition(self, inquiry):
        result = InquiryService.transition(inquiry, InquiryStatus.DRAFT)
        assert result == {'old_status': 'NEW', 'new_status': 'DRAFT', 'changed': True, 'reason': ''}

        with pytest.raises(LedgerValidationError):
            InquiryService.transition(inquiry, InquiryStatus.PROCESSED)
        inquiry.refresh_from_db()
        assert inquiry.status == InquiryStatus.DRAFT

    def test_lenient_transition_is_skipped(self, inquiry, caplog):
        result = InquiryService.transition(inquiry, InquiryStatus.PROCESSED, reason='test', strict=False)
        assert result['changed'] is False
        assert 'Skipped transition' in caplog.text

    def test_same_status_is_noop(self, inquiry):
        assert InquiryService.transition(inquiry, InquiryStatus.NEW)['changed'] is False

    def test_missing(self, db):
        with pytest.raises(LedgerNotFound):
            InquiryService.get_inquiry(4040)
