"""
Version manager: allocates version numbers and writes immutable offer
snapshots together with their line items.
"""
import logging
from typing import Any, Dict, List, Optional

from django.db.models import Count

from catalog.models import CatalogItem
from inquiries.services import InquiryService

from .enums import ErrorMessages
from .exceptions import LedgerNotFound, LedgerValidationError
from .models import QuotationVersion, QuotationVersionItem
from .pricing import line_total, to_money, version_total
from .sequences import allocate_with_retry, next_number
from .validators import VersionItemValidator

logger = logging.getLogger(__name__)


class VersionManager:
    """Service class for quotation versions"""

    @staticmethod
    def create_version(
        inquiry_id: int,
        entry_type: str,
        items: List[Dict[str, Any]],
        notes: str = '',
        author=None,
        submission_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Write the next version of an inquiry with all of its items.

        Args:
            inquiry_id: inquiry the version belongs to
            entry_type: one of EntryType
            items: dicts with catalog_item_id, quantity, unit_price and optional comment
            notes: free text stored on the version
            author: user creating the version, if any
            submission_key: optional client token; re-submitting the same key
                returns the version it already produced

        Returns:
            Dict with version, created (False for a replayed submission_key)
            and the inquiry status change, if any

        Raises:
            LedgerValidationError: bad entry type or items, or inquiry locked
            LedgerNotFound: unknown inquiry or catalog item
            LedgerConflict: no version number could be allocated
        """
        is_valid, error = VersionItemValidator.validate_entry_type(entry_type)
        if not is_valid:
            raise LedgerValidationError(error, errors={'entry_type': [error]})

        is_valid, errors = VersionItemValidator.validate_items(items)
        if not is_valid:
            raise LedgerValidationError("Invalid version items", errors=errors)

        final_price, error = version_total(items)
        if error:
            raise LedgerValidationError(error, errors={'items': [error]})

        inquiry = InquiryService.get_inquiry(inquiry_id)
        catalog_items = VersionManager._resolve_catalog_items(items)

        def allocate():
            locked_inquiry = InquiryService.get_inquiry(inquiry.pk, for_update=True)
            if not InquiryService.can_create_version(locked_inquiry):
                message = ErrorMessages.INQUIRY_LOCKED.format(status=locked_inquiry.status)
                raise LedgerValidationError(message, errors={'inquiry': [message]})

            if submission_key:
                existing = locked_inquiry.versions.filter(submission_key=submission_key).first()
                if existing is not None:
                    return existing, False, None

            number = next_number(QuotationVersion.objects.filter(inquiry=locked_inquiry), 'version_number')
            version = QuotationVersion.objects.create(
                inquiry=locked_inquiry,
                version_number=number,
                entry_type=entry_type,
                final_price=final_price,
                notes=notes or '',
                submission_key=submission_key or None,
                created_by=author if author is not None and author.is_authenticated else None,
            )
            QuotationVersionItem.objects.bulk_create([
                QuotationVersionItem(
                    version=version,
                    catalog_item=catalog_items[int(item['catalog_item_id'])],
                    quantity=int(item['quantity']),
                    unit_price=to_money(item['unit_price']),
                    total_price=line_total(item['quantity'], item['unit_price'])[0],
                    comment=item.get('comment') or '',
                )
                for item in items
            ])

            status_change = None
            target_status = InquiryService.status_after_new_version(locked_inquiry, number)
            if target_status:
                status_change = InquiryService.transition(
                    locked_inquiry, target_status,
                    reason=f"version {number} created", strict=False
                )
            return version, True, status_change

        version, created, status_change = allocate_with_retry(
            allocate, sequence='version', scope=f"inquiry {inquiry.pk}"
        )

        if created:
            logger.info(
                "Version %s created for inquiry %s: %s %s items, final price %s",
                version.version_number, inquiry.pk, entry_type, len(items), version.final_price
            )
        else:
            logger.info(
                "Submission %s for inquiry %s replayed as version %s",
                submission_key, inquiry.pk, version.version_number
            )

        return {
            'version': version,
            'created': created,
            'status_change': status_change,
        }

    @staticmethod
    def _resolve_catalog_items(items) -> Dict[int, CatalogItem]:
        ids = {int(item['catalog_item_id']) for item in items}
        found = CatalogItem.objects.in_bulk(ids)
        missing = sorted(ids - set(found))
        if missing:
            message = ErrorMessages.CATALOG_ITEM_NOT_FOUND.format(ids=', '.join(str(pk) for pk in missing))
            raise LedgerNotFound(message, errors={'items': [message]})
        return found

    @staticmethod
    def version_queryset():
        """Versions with items, verdict and response count loaded"""
        return (
            QuotationVersion.objects
            .select_related('inquiry', 'created_by', 'customer_response')
            .prefetch_related('items__catalog_item')
            .annotate(quotation_response_count=Count('quotation_responses'))
        )

    @staticmethod
    def get_versions(inquiry_id: int):
        """All versions of an inquiry, ascending by version number"""
        InquiryService.get_inquiry(inquiry_id)
        return VersionManager.version_queryset().filter(inquiry_id=inquiry_id).order_by('version_number')

    @staticmethod
    def get_version(inquiry_id: int, version_number: int) -> QuotationVersion:
        InquiryService.get_inquiry(inquiry_id)
        try:
            return VersionManager.version_queryset().get(inquiry_id=inquiry_id, version_number=version_number)
        except QuotationVersion.DoesNotExist:
            raise LedgerNotFound(ErrorMessages.VERSION_NOT_FOUND.format(version=version_number))

    @staticmethod
    def get_version_by_id(version_id: int, for_update: bool = False) -> QuotationVersion:
        queryset = QuotationVersion.objects.select_related('inquiry')
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=version_id)
        except QuotationVersion.DoesNotExist:
            raise LedgerNotFound(ErrorMessages.VERSION_NOT_FOUND.format(version=version_id))

    @staticmethod
    def latest_version_number(inquiry_id: int) -> int:
        """0 when the inquiry has no versions yet"""
        return next_number(QuotationVersion.objects.filter(inquiry_id=inquiry_id), 'version_number') - 1
