"""
Enums and choices for inquiries app.
Centralizes the RFQ lifecycle and its transition rules.
"""
from django.db import models


class InquiryStatus(models.TextChoices):
    """Lifecycle status of an inquiry (RFQ)"""
    NEW = 'NEW', 'New RFQ received'
    DRAFT = 'DRAFT', 'Draft in progress'
    SENT = 'SENT', 'Sent to customer'
    NEGOTIATING = 'NEGOTIATING', 'Under negotiation'
    ACCEPTED = 'ACCEPTED', 'Accepted by customer'
    DECLINED = 'DECLINED', 'Declined by customer'
    PROCESSED = 'PROCESSED', 'Processed and completed'


class BusinessRules:
    """Business rules and constants"""

    ALLOWED_TRANSITIONS = {
        InquiryStatus.NEW: [InquiryStatus.DRAFT, InquiryStatus.SENT, InquiryStatus.NEGOTIATING],
        InquiryStatus.DRAFT: [InquiryStatus.SENT, InquiryStatus.NEGOTIATING],
        InquiryStatus.SENT: [InquiryStatus.NEGOTIATING, InquiryStatus.ACCEPTED, InquiryStatus.DECLINED],
        InquiryStatus.NEGOTIATING: [InquiryStatus.SENT, InquiryStatus.ACCEPTED, InquiryStatus.DECLINED],
        # A new version reopens negotiation on a settled inquiry
        InquiryStatus.ACCEPTED: [InquiryStatus.NEGOTIATING, InquiryStatus.PROCESSED],
        InquiryStatus.DECLINED: [InquiryStatus.NEGOTIATING, InquiryStatus.DRAFT],
        InquiryStatus.PROCESSED: [],
    }

    # Statuses before anything has been offered to the customer
    PRE_OFFER_STATUSES = [InquiryStatus.NEW, InquiryStatus.DRAFT]

    @staticmethod
    def can_transition(from_status, to_status):
        """Check if inquiry can move from one status to another"""
        return to_status in BusinessRules.ALLOWED_TRANSITIONS.get(from_status, [])

    @staticmethod
    def can_create_version(status, locked_statuses):
        """Versions may be added unless the inquiry is in a locked status"""
        return status not in locked_statuses


class ErrorMessages:
    """Centralized error messages for consistency"""

    INQUIRY_NOT_FOUND = "Inquiry {inquiry_id} not found"
    INVALID_TRANSITION = "Cannot transition inquiry from {from_status} to {to_status}"
    DUPLICATE_NUMBER = "An inquiry with number '{number}' already exists"
    UNSUPPORTED_CURRENCY = "Currency '{currency}' is not supported"


class ResponseMessages:
    """Centralized success messages for consistency"""

    INQUIRY_CREATED = "Inquiry {number} created"
    STATUS_UPDATED = "Inquiry status changed from {old_status} to {new_status}"
    STATUS_UNCHANGED = "Inquiry already in status {status}"
