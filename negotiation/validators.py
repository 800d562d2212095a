"""
Input and consistency rules for the negotiation ledger.
Everything here runs before any write; nothing touches the database.
"""
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Tuple, Optional

from .enums import (
    EntryType, QuotationResponseStatus, ResponseItemStatus, CommunicationMethod,
    ErrorMessages
)
from .pricing import MAX_QUANTITY, validate_line


def positive_int(value) -> Optional[int]:
    """Whole number >= 1, or None"""
    if isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if number != number.to_integral_value() or number < 1:
        return None
    return int(number)


def valid_quantity(value) -> Optional[int]:
    """Whole number between 1 and the largest storable quantity, or None"""
    quantity = positive_int(value)
    if quantity is None or quantity > MAX_QUANTITY:
        return None
    return quantity


class VersionItemValidator:
    """Line-item rules for a new version"""

    @staticmethod
    def validate_entry_type(entry_type) -> Tuple[bool, Optional[str]]:
        if entry_type not in EntryType.values:
            return False, f"Invalid entry type '{entry_type}'. Expected one of: {', '.join(EntryType.values)}"
        return True, None

    @staticmethod
    def validate_items(items) -> Tuple[bool, Dict[str, List[str]]]:
        """
        Validate every line of a version.

        Rules:
        1. At least one line
        2. Each line names a catalog item
        3. Quantity is a whole number between 1 and MAX_QUANTITY
        4. Unit price is a non-negative number that fits its column

        Returns:
            (is_valid, errors) with errors keyed 'items' or 'items[<index>]'
        """
        if not items:
            return False, {'items': [ErrorMessages.NO_ITEMS_PROVIDED]}

        errors = {}
        for index, item in enumerate(items):
            line_errors = []
            if positive_int(item.get('catalog_item_id')) is None:
                line_errors.append("A valid catalog item id is required")

            if valid_quantity(item.get('quantity')) is None:
                line_errors.append(ErrorMessages.INVALID_QUANTITY)

            unit_price = item.get('unit_price')
            if unit_price is None:
                line_errors.append("Unit price is required")
            else:
                is_valid, error = validate_line(0, unit_price)
                if not is_valid:
                    line_errors.append(error)

            if line_errors:
                errors[f'items[{index}]'] = line_errors

        return not errors, errors


class ResponseLineValidator:
    """Field rules for a detailed quotation response"""

    @staticmethod
    def validate_header(overall_status, communication_method) -> Dict[str, List[str]]:
        errors = {}
        if overall_status not in QuotationResponseStatus.values:
            errors['overall_status'] = [
                f"Invalid overall status '{overall_status}'. Expected one of: {', '.join(QuotationResponseStatus.values)}"
            ]
        if communication_method not in CommunicationMethod.values:
            errors['communication_method'] = [
                f"Invalid communication method '{communication_method}'. Expected one of: {', '.join(CommunicationMethod.values)}"
            ]
        return errors

    @staticmethod
    def validate_lines(lines) -> Tuple[bool, Dict[str, List[str]]]:
        """
        Validate response lines in isolation (cross-references are checked
        against the version separately).
        """
        if not lines:
            return False, {'response_items': [ErrorMessages.NO_RESPONSE_ITEMS]}

        errors = {}
        seen = set()
        for index, line in enumerate(lines):
            line_errors = []
            version_item_id = positive_int(line.get('version_item_id'))
            if version_item_id is None:
                line_errors.append("A valid version item id is required")
            elif version_item_id in seen:
                line_errors.append(ErrorMessages.DUPLICATE_LINE.format(item_id=version_item_id))
            else:
                seen.add(version_item_id)

            if positive_int(line.get('catalog_item_id')) is None:
                line_errors.append("A valid catalog item id is required")

            if line.get('item_status') not in ResponseItemStatus.values:
                line_errors.append(
                    f"Invalid item status '{line.get('item_status')}'. Expected one of: {', '.join(ResponseItemStatus.values)}"
                )

            requested_quantity = line.get('requested_quantity')
            if requested_quantity is not None and valid_quantity(requested_quantity) is None:
                line_errors.append(ErrorMessages.INVALID_QUANTITY)

            requested_unit_price = line.get('requested_unit_price')
            if requested_unit_price is not None:
                is_valid, error = validate_line(0, requested_unit_price)
                if not is_valid:
                    line_errors.append(error)

            if line_errors:
                errors[f'response_items[{index}]'] = line_errors

        return not errors, errors


class StatusConsistencyValidator:
    """Compares a response's overall status with its per-line statuses"""

    @staticmethod
    def check_overall_status(overall_status: str, line_statuses: List[str]) -> List[str]:
        """
        Return human-readable warnings when the overall status does not
        summarize the lines. Mismatches never block a write.

        Expected shapes:
        - ACCEPTED: every line ACCEPTED
        - DECLINED: every line DECLINED
        - PARTIAL_ACCEPTED: some lines ACCEPTED, some not
        - NEGOTIATING: at least one line COUNTER_PROPOSED or NEEDS_CLARIFICATION
        - PENDING: at least one line PENDING
        """
        if not line_statuses:
            return []

        statuses = {str(status) for status in line_statuses}
        accepted = ResponseItemStatus.ACCEPTED.value
        warnings = []

        if overall_status == QuotationResponseStatus.ACCEPTED and statuses != {accepted}:
            warnings.append("Overall status is ACCEPTED but not every line is accepted")
        elif overall_status == QuotationResponseStatus.DECLINED and statuses != {ResponseItemStatus.DECLINED.value}:
            warnings.append("Overall status is DECLINED but not every line is declined")
        elif overall_status == QuotationResponseStatus.PARTIAL_ACCEPTED:
            if accepted not in statuses:
                warnings.append("Overall status is PARTIAL_ACCEPTED but no line is accepted")
            elif statuses == {accepted}:
                warnings.append("Overall status is PARTIAL_ACCEPTED but every line is accepted")
        elif overall_status == QuotationResponseStatus.NEGOTIATING:
            if not statuses & {ResponseItemStatus.COUNTER_PROPOSED.value, ResponseItemStatus.NEEDS_CLARIFICATION.value}:
                warnings.append("Overall status is NEGOTIATING but no line is counter-proposed or needs clarification")
        elif overall_status == QuotationResponseStatus.PENDING and ResponseItemStatus.PENDING.value not in statuses:
            warnings.append("Overall status is PENDING but no line is pending")

        return warnings
