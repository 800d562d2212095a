"""
Enums and choices for the negotiation ledger.
Each loosely-typed status field of the ledger gets a closed set here and is
validated at the API boundary.
"""
from django.db import models


class EntryType(models.TextChoices):
    """What a quotation version represents"""
    INTERNAL_QUOTE = 'INTERNAL_QUOTE', 'Internal Quote'
    CUSTOMER_FEEDBACK = 'CUSTOMER_FEEDBACK', 'Customer Feedback'
    COUNTER_OFFER = 'COUNTER_OFFER', 'Counter Offer'


class VersionStatus(models.TextChoices):
    """Status a version is created with; verdicts live on CustomerResponse"""
    NEW = 'NEW', 'New'


class CustomerResponseStatus(models.TextChoices):
    """Coarse verdict on a version"""
    ACCEPTED = 'ACCEPTED', 'Accepted'
    DECLINED = 'DECLINED', 'Declined'
    NEGOTIATING = 'NEGOTIATING', 'Negotiating'


class QuotationResponseStatus(models.TextChoices):
    """Overall status of a detailed response"""
    PENDING = 'PENDING', 'Pending'
    ACCEPTED = 'ACCEPTED', 'Accepted'
    DECLINED = 'DECLINED', 'Declined'
    PARTIAL_ACCEPTED = 'PARTIAL_ACCEPTED', 'Partially Accepted'
    NEGOTIATING = 'NEGOTIATING', 'Negotiating'


class ResponseItemStatus(models.TextChoices):
    """Customer's answer for one line of a version"""
    PENDING = 'PENDING', 'Pending'
    ACCEPTED = 'ACCEPTED', 'Accepted'
    DECLINED = 'DECLINED', 'Declined'
    COUNTER_PROPOSED = 'COUNTER_PROPOSED', 'Counter Proposed'
    NEEDS_CLARIFICATION = 'NEEDS_CLARIFICATION', 'Needs Clarification'


class CommunicationMethod(models.TextChoices):
    EMAIL = 'EMAIL', 'Email'
    PHONE = 'PHONE', 'Phone'
    MEETING = 'MEETING', 'Meeting'
    PORTAL = 'PORTAL', 'Portal'


class CommunicationDirection(models.TextChoices):
    INBOUND = 'INBOUND', 'Inbound'
    OUTBOUND = 'OUTBOUND', 'Outbound'


class ChangeType(models.TextChoices):
    """Which fields an inline negotiation edit touched"""
    PRICE_CHANGE = 'PRICE_CHANGE', 'Price Change'
    QUANTITY_CHANGE = 'QUANTITY_CHANGE', 'Quantity Change'
    BOTH = 'BOTH', 'Price and Quantity Change'


class ChangedBy(models.TextChoices):
    """Which party asked for an inline edit"""
    INTERNAL = 'INTERNAL', 'Internal'
    CUSTOMER = 'CUSTOMER', 'Customer'


# Verdict -> inquiry status it drives
CUSTOMER_VERDICT_TO_INQUIRY_STATUS = {
    CustomerResponseStatus.ACCEPTED: 'ACCEPTED',
    CustomerResponseStatus.DECLINED: 'DECLINED',
    CustomerResponseStatus.NEGOTIATING: 'NEGOTIATING',
}


class ErrorMessages:
    """Centralized error messages for consistency"""

    # Validation errors
    NO_ITEMS_PROVIDED = "At least one line item is required"
    NO_RESPONSE_ITEMS = "At least one response line is required"
    INVALID_QUANTITY = "Quantity must be a whole number between 1 and 2147483647"
    NEGATIVE_QUANTITY = "Quantity cannot be negative"
    NEGATIVE_PRICE = "Unit price cannot be negative"
    QUANTITY_TOO_LARGE = "Quantity cannot exceed {limit}"
    PRICE_TOO_LARGE = "Unit price cannot exceed {limit}"
    TOTAL_TOO_LARGE = "Total cannot exceed {limit}"
    NO_FIELD_CHANGED = "Neither quantity nor unit price changed"
    INQUIRY_LOCKED = "Cannot create a version for an inquiry in {status} state"
    DUPLICATE_LINE = "Version item {item_id} is answered more than once"

    # Not found
    VERSION_NOT_FOUND = "Version {version} not found"
    RESPONSE_NOT_FOUND = "Quotation response {response_id} not found"
    CATALOG_ITEM_NOT_FOUND = "Catalog items not found: {ids}"
    COMMUNICATION_NOT_FOUND = "Communication {communication_id} not found"

    # Conflicts
    CUSTOMER_RESPONSE_EXISTS = "Version {version_id} already has a customer response; create a new version to change the verdict"
    SEQUENCE_EXHAUSTED = "Could not allocate a {sequence} number after {attempts} attempts"
    FOLLOW_UP_ALREADY_COMPLETED = "Follow-up for communication {communication_id} is already completed"
    NO_FOLLOW_UP_REQUIRED = "Communication {communication_id} has no follow-up to complete"

    # Integrity
    FOREIGN_VERSION_ITEM = "Version items {ids} do not belong to version {version_id}"
    SKU_MISMATCH = "Line for version item {item_id} names catalog item {sku_id}, expected {expected_id}"


class ResponseMessages:
    """Centralized success messages for consistency"""

    VERSION_CREATED = "Version {number} created with {count} items. Final price: {total}"
    VERSION_REPLAYED = "Version {number} was already created for this submission"
    VERSIONS_FOUND = "Found {count} versions"
    CUSTOMER_RESPONSE_RECORDED = "Customer response {status} recorded for version {number}"
    QUOTATION_RESPONSE_RECORDED = "Response #{sequence} recorded for version {number}"
    RESPONSES_FOUND = "Found {count} responses for version {number}"
    SKU_CHANGE_RECORDED = "{change_type} recorded for {sku}"
    HISTORY_FOUND = "Found {count} SKU changes"
    COMMUNICATION_RECORDED = "Communication recorded"
    FOLLOW_UP_COMPLETED = "Follow-up completed"
