"""
Communication log for an inquiry's negotiation.
"""
import logging
from typing import Any, Dict

from django.db import transaction
from django.utils import timezone

from inquiries.services import InquiryService

from .enums import CommunicationDirection, CommunicationMethod, ErrorMessages
from .exceptions import CrossReferenceError, LedgerConflict, LedgerNotFound, LedgerValidationError
from .models import NegotiationCommunication
from .versions import VersionManager

logger = logging.getLogger(__name__)


class CommunicationLog:
    """Service class for negotiation communications"""

    @staticmethod
    def record_communication(inquiry_id: int, data: Dict[str, Any], author=None) -> NegotiationCommunication:
        """
        Log an exchange with the customer.

        Args:
            data: communication_type, direction, content and optional
                version_id, subject, contact_person, communication_date,
                follow_up_required, follow_up_date
        """
        errors = {}
        if data.get('communication_type') not in CommunicationMethod.values:
            errors['communication_type'] = [f"Expected one of: {', '.join(CommunicationMethod.values)}"]
        if data.get('direction') not in CommunicationDirection.values:
            errors['direction'] = [f"Expected one of: {', '.join(CommunicationDirection.values)}"]
        if not data.get('content'):
            errors['content'] = ["Content is required"]
        if data.get('follow_up_date') and not data.get('follow_up_required'):
            errors['follow_up_date'] = ["A follow-up date needs follow_up_required"]
        if errors:
            raise LedgerValidationError("Invalid communication", errors=errors)

        inquiry = InquiryService.get_inquiry(inquiry_id)
        version = None
        if data.get('version_id') is not None:
            version = VersionManager.get_version_by_id(data['version_id'])
            if version.inquiry_id != inquiry.pk:
                raise CrossReferenceError(f"Version {version.pk} does not belong to inquiry {inquiry.pk}")

        with transaction.atomic():
            communication = NegotiationCommunication.objects.create(
                inquiry=inquiry,
                version=version,
                communication_type=data['communication_type'],
                direction=data['direction'],
                subject=data.get('subject') or '',
                content=data['content'],
                contact_person=data.get('contact_person') or '',
                communication_date=data.get('communication_date') or timezone.now(),
                follow_up_required=bool(data.get('follow_up_required')),
                follow_up_date=data.get('follow_up_date'),
                entered_by=author if author is not None and author.is_authenticated else None,
            )

        logger.info(
            "%s %s communication logged for inquiry %s%s",
            communication.direction, communication.communication_type, inquiry.pk,
            " (follow-up required)" if communication.follow_up_required else ''
        )
        return communication

    @staticmethod
    def list_communications(inquiry_id: int):
        """Communications of an inquiry, newest first"""
        InquiryService.get_inquiry(inquiry_id)
        return (
            NegotiationCommunication.objects
            .filter(inquiry_id=inquiry_id)
            .select_related('entered_by')
            .order_by('-communication_date', '-id')
        )

    @staticmethod
    def pending_follow_ups(inquiry_id: int):
        return NegotiationCommunication.objects.filter(
            inquiry_id=inquiry_id, follow_up_required=True, follow_up_completed=False
        )

    @staticmethod
    def complete_follow_up(communication_id: int) -> NegotiationCommunication:
        """
        Mark a communication's follow-up as done. This is the only update a
        communication ever receives.

        Raises:
            LedgerNotFound: unknown communication
            LedgerConflict: no follow-up was required, or it is already completed
        """
        with transaction.atomic():
            try:
                communication = NegotiationCommunication.objects.select_for_update().get(pk=communication_id)
            except NegotiationCommunication.DoesNotExist:
                raise LedgerNotFound(ErrorMessages.COMMUNICATION_NOT_FOUND.format(communication_id=communication_id))

            if not communication.follow_up_required:
                raise LedgerConflict(ErrorMessages.NO_FOLLOW_UP_REQUIRED.format(communication_id=communication_id))
            if communication.follow_up_completed:
                raise LedgerConflict(ErrorMessages.FOLLOW_UP_ALREADY_COMPLETED.format(communication_id=communication_id))

            communication.follow_up_completed = True
            communication.follow_up_completed_at = timezone.now()
            communication.save(update_fields=['follow_up_completed', 'follow_up_completed_at', 'updated_at'])

        logger.info("Follow-up completed for communication %s", communication_id)
        return communication
