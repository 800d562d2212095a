"""
Negotiation ledger facade: read-side view of where an inquiry's
negotiation stands. Performs no writes.
"""
from typing import Any, Dict, Optional

from django.core.exceptions import ObjectDoesNotExist
from django.db.models import Count, Max
from django.utils import timezone

from inquiries.services import InquiryService

from .communications import CommunicationLog
from .currency import is_supported_currency
from .exceptions import LedgerValidationError
from .history import ChangeRecorder
from .models import NegotiationCommunication, SkuNegotiationHistory
from .versions import VersionManager


def resolve_display_currency(inquiry, requested: Optional[str]) -> Optional[str]:
    """Requested display currency, or None when it matches the currency of record"""
    if not requested:
        return None
    requested = requested.upper()
    if not is_supported_currency(requested):
        message = f"Unsupported display currency '{requested}'"
        raise LedgerValidationError(message, errors={'currency': [message]})
    if requested == inquiry.currency:
        return None
    return requested


def effective_status(version) -> str:
    """The customer's verdict when there is one, else the version's own status"""
    try:
        return version.customer_response.status
    except ObjectDoesNotExist:
        return version.status


class NegotiationLedger:
    """Facade over versions, responses and SKU history for one inquiry"""

    @staticmethod
    def get_state(inquiry_id: int, display_currency: Optional[str] = None) -> Dict[str, Any]:
        """
        Current negotiation state: versions (with verdict and response
        count), SKU history grouped by item, and whether a new version
        may be created.
        """
        inquiry = InquiryService.get_inquiry(inquiry_id)
        versions = list(VersionManager.get_versions(inquiry.pk))

        return {
            'inquiry': inquiry,
            'versions': versions,
            'latest_version': versions[-1] if versions else None,
            'can_create_version': InquiryService.can_create_version(inquiry),
            'sku_history': ChangeRecorder.history_by_item(inquiry.pk),
            'display_currency': resolve_display_currency(inquiry, display_currency),
        }

    @staticmethod
    def get_summary(inquiry_id: int) -> Dict[str, Any]:
        """Counters describing an inquiry's negotiation so far"""
        inquiry = InquiryService.get_inquiry(inquiry_id)

        communications = NegotiationCommunication.objects.filter(inquiry=inquiry).aggregate(
            total=Count('id'),
            last_date=Max('communication_date'),
        )
        versions = VersionManager.get_versions(inquiry.pk)
        latest_version = versions.last()

        return {
            'inquiry_id': inquiry.pk,
            'rfq_number': inquiry.rfq_number,
            'status': inquiry.status,
            'currency': inquiry.currency,
            'total_versions': versions.count(),
            'latest_version_number': latest_version.version_number if latest_version else None,
            'latest_final_price': latest_version.final_price if latest_version else None,
            'total_communications': communications['total'],
            'total_sku_changes': SkuNegotiationHistory.objects.filter(inquiry=inquiry).count(),
            'renegotiated_items': len(ChangeRecorder.change_counts(inquiry.pk)),
            'pending_follow_ups': CommunicationLog.pending_follow_ups(inquiry.pk).count(),
            'last_communication_date': communications['last_date'],
            'negotiation_duration_days': (timezone.now() - inquiry.created_at).days,
        }
