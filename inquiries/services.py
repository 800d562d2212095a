"""
Business logic services for inquiries.
Owns the RFQ lifecycle; ledger operations call in here to move status.
"""
import logging
from typing import Any, Dict, Optional

from django.db import IntegrityError, transaction

from negotiation.conf import ledger_setting
from negotiation.currency import is_supported_currency
from negotiation.exceptions import LedgerConflict, LedgerNotFound, LedgerValidationError

from .enums import BusinessRules, ErrorMessages, InquiryStatus
from .models import Inquiry

logger = logging.getLogger(__name__)


class InquiryService:
    """Service class for inquiry intake and lifecycle"""

    @staticmethod
    def create_inquiry(data: Dict[str, Any], user=None) -> Inquiry:
        """
        Create a new inquiry in status NEW.

        Args:
            data: validated fields (rfq_number, customer_reference, currency, title, notes)
            user: the authenticated user recording the intake

        Raises:
            LedgerValidationError: unsupported currency
            LedgerConflict: duplicate RFQ number
        """
        currency = (data.get('currency') or ledger_setting('DEFAULT_CURRENCY')).upper()
        if not is_supported_currency(currency):
            raise LedgerValidationError(
                ErrorMessages.UNSUPPORTED_CURRENCY.format(currency=currency),
                errors={'currency': [ErrorMessages.UNSUPPORTED_CURRENCY.format(currency=currency)]},
            )

        try:
            with transaction.atomic():
                inquiry = Inquiry.objects.create(
                    rfq_number=data['rfq_number'],
                    title=data.get('title', ''),
                    customer_reference=data['customer_reference'],
                    currency=currency,
                    notes=data.get('notes', ''),
                    status=InquiryStatus.NEW,
                    created_by=user if user is not None and user.is_authenticated else None,
                )
        except IntegrityError:
            raise LedgerConflict(ErrorMessages.DUPLICATE_NUMBER.format(number=data['rfq_number']))

        logger.info("Inquiry %s created for customer %s", inquiry.rfq_number, inquiry.customer_reference)
        return inquiry

    @staticmethod
    def get_inquiry(inquiry_id: int, for_update: bool = False) -> Inquiry:
        """Fetch an inquiry or raise LedgerNotFound"""
        queryset = Inquiry.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=inquiry_id)
        except Inquiry.DoesNotExist:
            raise LedgerNotFound(ErrorMessages.INQUIRY_NOT_FOUND.format(inquiry_id=inquiry_id))

    @staticmethod
    def transition(inquiry: Inquiry, new_status: str, reason: str = '', strict: bool = True) -> Dict[str, Any]:
        """
        Move an inquiry to ``new_status`` along an allowed transition.

        A transition to the current status is a no-op. When ``strict`` is
        False a disallowed transition is logged and skipped instead of
        raising; ledger events use this so that recording history never
        fails because of the inquiry's lifecycle.

        Returns:
            Dict with old_status, new_status and whether anything changed
        """
        old_status = inquiry.status
        result = {
            'old_status': old_status,
            'new_status': old_status,
            'changed': False,
            'reason': reason,
        }

        if old_status == new_status:
            return result

        if not BusinessRules.can_transition(old_status, new_status):
            message = ErrorMessages.INVALID_TRANSITION.format(from_status=old_status, to_status=new_status)
            if strict:
                logger.warning("Rejected transition for inquiry %s: %s", inquiry.pk, message)
                raise LedgerValidationError(message, errors={'status': [message]})
            logger.info("Skipped transition for inquiry %s: %s (%s)", inquiry.pk, message, reason)
            return result

        inquiry.status = new_status
        inquiry.save(update_fields=['status', 'updated_at'])
        logger.info(
            "Inquiry %s status %s -> %s%s",
            inquiry.pk, old_status, new_status, f" ({reason})" if reason else '',
        )

        result['new_status'] = new_status
        result['changed'] = True
        return result

    @staticmethod
    def can_create_version(inquiry: Inquiry) -> bool:
        return BusinessRules.can_create_version(inquiry.status, ledger_setting('LOCKED_INQUIRY_STATUSES'))

    @staticmethod
    def status_after_new_version(inquiry: Inquiry, version_number: int) -> Optional[str]:
        """
        The status an inquiry should take once ``version_number`` exists.

        The first offer marks the inquiry SENT; every later version means the
        parties are negotiating.
        """
        if version_number == 1:
            if inquiry.status in BusinessRules.PRE_OFFER_STATUSES:
                return InquiryStatus.SENT
            return None
        return InquiryStatus.NEGOTIATING
