from django.db import models
from django.conf import settings

from .enums import InquiryStatus


class Inquiry(models.Model):
    """A customer's request for pricing (RFQ); root of the negotiation ledger"""
    rfq_number = models.CharField(max_length=100, unique=True, help_text="Human-readable RFQ number")
    title = models.CharField(max_length=255, blank=True)
    customer_reference = models.CharField(max_length=255, help_text="Customer identifier or name")
    currency = models.CharField(max_length=3, default='CAD', help_text="Currency of record")
    status = models.CharField(max_length=20, choices=InquiryStatus.choices, default=InquiryStatus.NEW)
    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='inquiries',
        null=True, blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'inquiries'

    def __str__(self):
        return f"RFQ {self.rfq_number} ({self.status})"
