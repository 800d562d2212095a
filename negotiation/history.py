"""
SKU negotiation history: append-only log of inline quantity and price edits,
plus the optimistic-edit helper used by interactive clients.
"""
import copy
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import Count

from catalog.models import CatalogItem
from inquiries.services import InquiryService

from .enums import ChangeType, ChangedBy, ErrorMessages
from .exceptions import CrossReferenceError, LedgerNotFound, LedgerValidationError
from .models import NegotiationCommunication, QuotationVersionItem, SkuNegotiationHistory
from .pricing import to_money, validate_line
from .validators import valid_quantity
from .versions import VersionManager

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ('quantity', 'unit_price')


class ChangeRecorder:
    """Service class for SKU-level negotiation history"""

    @staticmethod
    def detect_change_type(quantity_changed: bool, price_changed: bool) -> Optional[str]:
        if quantity_changed and price_changed:
            return ChangeType.BOTH
        if quantity_changed:
            return ChangeType.QUANTITY_CHANGE
        if price_changed:
            return ChangeType.PRICE_CHANGE
        return None

    @staticmethod
    def last_known_values(inquiry_id: int, catalog_item_id: int, version=None) -> Tuple[Optional[int], Optional[Decimal]]:
        """
        Current quantity and unit price of an item: the newest history entry
        first, then the given version's line, then the newest version line
        carrying the item.
        """
        quantity, unit_price = None, None

        latest = (
            SkuNegotiationHistory.objects
            .filter(inquiry_id=inquiry_id, catalog_item_id=catalog_item_id)
            .order_by('-created_at', '-id')
            .first()
        )
        if latest is not None:
            quantity, unit_price = latest.new_quantity, latest.new_unit_price

        if quantity is None or unit_price is None:
            lines = QuotationVersionItem.objects.filter(
                version__inquiry_id=inquiry_id, catalog_item_id=catalog_item_id
            )
            if version is not None:
                lines = lines.filter(version=version)
            line = lines.order_by('-version__version_number', '-id').first()
            if line is not None:
                quantity = line.quantity if quantity is None else quantity
                unit_price = line.unit_price if unit_price is None else unit_price

        return quantity, unit_price

    @staticmethod
    def record_change(
        inquiry_id: int,
        catalog_item_id: int,
        new_quantity=None,
        new_unit_price=None,
        old_quantity=None,
        old_unit_price=None,
        changed_by: str = ChangedBy.CUSTOMER,
        change_reason: str = '',
        author=None,
        version_id: Optional[int] = None,
        communication_id: Optional[int] = None,
    ) -> SkuNegotiationHistory:
        """
        Append one history entry for an inline edit.

        Old values the caller leaves out are filled from the last known
        state of the item. The change type is derived from which of
        quantity and unit price actually differ.

        Raises:
            LedgerValidationError: bad values, or nothing changed
            LedgerNotFound: unknown inquiry, item, version or communication
            CrossReferenceError: version or communication of another inquiry
        """
        errors = {}
        if changed_by not in ChangedBy.values:
            errors['changed_by'] = [f"Invalid changed_by '{changed_by}'. Expected one of: {', '.join(ChangedBy.values)}"]
        if new_quantity is not None and valid_quantity(new_quantity) is None:
            errors['new_quantity'] = [ErrorMessages.INVALID_QUANTITY]
        if new_unit_price is not None:
            is_valid, error = validate_line(0, new_unit_price)
            if not is_valid:
                errors['new_unit_price'] = [error]
        if old_quantity is not None and valid_quantity(old_quantity) is None:
            errors['old_quantity'] = [ErrorMessages.INVALID_QUANTITY]
        if old_unit_price is not None:
            is_valid, error = validate_line(0, old_unit_price)
            if not is_valid:
                errors['old_unit_price'] = [error]
        if new_quantity is None and new_unit_price is None:
            errors['non_field_errors'] = [ErrorMessages.NO_FIELD_CHANGED]
        if errors:
            raise LedgerValidationError("Invalid SKU change", errors=errors)

        inquiry = InquiryService.get_inquiry(inquiry_id)
        try:
            catalog_item = CatalogItem.objects.get(pk=catalog_item_id)
        except CatalogItem.DoesNotExist:
            raise LedgerNotFound(ErrorMessages.CATALOG_ITEM_NOT_FOUND.format(ids=catalog_item_id))

        version = None
        if version_id is not None:
            version = VersionManager.get_version_by_id(version_id)
            if version.inquiry_id != inquiry.pk:
                raise CrossReferenceError(f"Version {version_id} does not belong to inquiry {inquiry.pk}")

        communication = None
        if communication_id is not None:
            try:
                communication = NegotiationCommunication.objects.get(pk=communication_id)
            except NegotiationCommunication.DoesNotExist:
                raise LedgerNotFound(ErrorMessages.COMMUNICATION_NOT_FOUND.format(communication_id=communication_id))
            if communication.inquiry_id != inquiry.pk:
                raise CrossReferenceError(f"Communication {communication_id} does not belong to inquiry {inquiry.pk}")

        if old_quantity is None or old_unit_price is None:
            known_quantity, known_price = ChangeRecorder.last_known_values(inquiry.pk, catalog_item.pk, version)
            old_quantity = known_quantity if old_quantity is None else old_quantity
            old_unit_price = known_price if old_unit_price is None else old_unit_price

        old_quantity = int(old_quantity) if old_quantity is not None else None
        old_unit_price = to_money(old_unit_price) if old_unit_price is not None else None
        new_quantity = int(new_quantity) if new_quantity is not None else old_quantity
        new_unit_price = to_money(new_unit_price) if new_unit_price is not None else old_unit_price

        change_type = ChangeRecorder.detect_change_type(
            new_quantity != old_quantity,
            new_unit_price != old_unit_price,
        )
        if change_type is None:
            raise LedgerValidationError(ErrorMessages.NO_FIELD_CHANGED)

        with transaction.atomic():
            entry = SkuNegotiationHistory.objects.create(
                inquiry=inquiry,
                catalog_item=catalog_item,
                version=version,
                communication=communication,
                change_type=change_type,
                old_quantity=old_quantity,
                new_quantity=new_quantity,
                old_unit_price=old_unit_price,
                new_unit_price=new_unit_price,
                change_reason=change_reason or '',
                changed_by=changed_by,
                entered_by=author if author is not None and author.is_authenticated else None,
            )

        logger.info(
            "%s recorded for %s on inquiry %s by %s: qty %s -> %s, price %s -> %s",
            change_type, catalog_item.sku, inquiry.pk, changed_by,
            old_quantity, new_quantity, old_unit_price, new_unit_price
        )
        return entry

    @staticmethod
    def record_field_change(inquiry_id: int, catalog_item_id: int, field: str, old_value, new_value,
                            changed_by: str = ChangedBy.CUSTOMER, **kwargs) -> SkuNegotiationHistory:
        """Single-field form of record_change ('quantity' or 'unit_price')"""
        if field not in EDITABLE_FIELDS:
            raise LedgerValidationError(
                f"Field '{field}' cannot be negotiated",
                errors={'field': [f"Expected one of: {', '.join(EDITABLE_FIELDS)}"]}
            )
        return ChangeRecorder.record_change(
            inquiry_id,
            catalog_item_id,
            changed_by=changed_by,
            **{f'old_{field}': old_value, f'new_{field}': new_value},
            **kwargs
        )

    @staticmethod
    def list_history(inquiry_id: int, catalog_item_id: Optional[int] = None):
        """History of an inquiry, newest first"""
        InquiryService.get_inquiry(inquiry_id)
        queryset = (
            SkuNegotiationHistory.objects
            .filter(inquiry_id=inquiry_id)
            .select_related('catalog_item', 'entered_by')
            .order_by('-created_at', '-id')
        )
        if catalog_item_id is not None:
            queryset = queryset.filter(catalog_item_id=catalog_item_id)
        return queryset

    @staticmethod
    def change_counts(inquiry_id: int) -> Dict[int, int]:
        """Number of recorded changes per catalog item"""
        rows = (
            SkuNegotiationHistory.objects
            .filter(inquiry_id=inquiry_id)
            .values('catalog_item_id')
            .annotate(total=Count('id'))
        )
        return {row['catalog_item_id']: row['total'] for row in rows}

    @staticmethod
    def history_by_item(inquiry_id: int) -> List[Dict[str, Any]]:
        """History grouped per catalog item, each group newest first"""
        groups = {}
        for entry in ChangeRecorder.list_history(inquiry_id):
            group = groups.setdefault(entry.catalog_item_id, {
                'catalog_item': entry.catalog_item,
                'changes': [],
            })
            group['changes'].append(entry)

        result = []
        for group in groups.values():
            group['change_count'] = len(group['changes'])
            result.append(group)
        return sorted(result, key=lambda group: group['catalog_item'].sku)


class OptimisticEdit:
    """
    Two-phase inline edit over a client's local view of version lines.

    ``apply()`` changes the local line immediately; ``commit()`` records the
    change in the ledger and restores the previous local values if recording
    fails, then re-raises.

    ``lines`` maps catalog item id to a dict holding at least ``quantity``
    and ``unit_price``.
    """

    def __init__(self, lines: Dict[int, Dict[str, Any]], catalog_item_id: int,
                 quantity=None, unit_price=None):
        if catalog_item_id not in lines:
            raise LedgerNotFound(ErrorMessages.CATALOG_ITEM_NOT_FOUND.format(ids=catalog_item_id))
        self.lines = lines
        self.catalog_item_id = catalog_item_id
        self.quantity = quantity
        self.unit_price = unit_price
        self._snapshot = None

    @property
    def applied(self) -> bool:
        return self._snapshot is not None

    def apply(self) -> Dict[str, Any]:
        line = self.lines[self.catalog_item_id]
        self._snapshot = copy.deepcopy(line)
        if self.quantity is not None:
            line['quantity'] = self.quantity
        if self.unit_price is not None:
            line['unit_price'] = self.unit_price
        return line

    def rollback(self):
        if self._snapshot is None:
            return
        self.lines[self.catalog_item_id].clear()
        self.lines[self.catalog_item_id].update(self._snapshot)
        self._snapshot = None

    def commit(self, inquiry_id: int, **kwargs) -> SkuNegotiationHistory:
        if not self.applied:
            self.apply()
        try:
            entry = ChangeRecorder.record_change(
                inquiry_id,
                self.catalog_item_id,
                new_quantity=self.quantity,
                new_unit_price=self.unit_price,
                old_quantity=self._snapshot.get('quantity'),
                old_unit_price=self._snapshot.get('unit_price'),
                **kwargs
            )
        except Exception:
            logger.warning("Inline edit of item %s on inquiry %s rolled back", self.catalog_item_id, inquiry_id)
            self.rollback()
            raise
        self._snapshot = None
        return entry
