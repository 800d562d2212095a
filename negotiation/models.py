from django.db import models
from django.conf import settings

from .enums import (
    EntryType, VersionStatus, CustomerResponseStatus, QuotationResponseStatus,
    ResponseItemStatus, CommunicationMethod, CommunicationDirection, ChangeType, ChangedBy
)
from .exceptions import ImmutableRecordError


class WriteOnceQuerySet(models.QuerySet):
    """Bulk updates and deletes are refused on write-once tables"""

    def update(self, **kwargs):
        raise ImmutableRecordError(f"{self.model.__name__} rows are write-once")
    update.alters_data = True

    def delete(self):
        raise ImmutableRecordError(f"{self.model.__name__} rows cannot be deleted")
    delete.alters_data = True
    delete.queryset_only = True


class WriteOnceModel(models.Model):
    """Ledger row that can be inserted but never updated or deleted"""

    objects = WriteOnceQuerySet.as_manager()

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError(f"{self.__class__.__name__} {self.pk} is write-once")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError(f"{self.__class__.__name__} {self.pk} cannot be deleted")


class QuotationVersion(WriteOnceModel):
    """Immutable, numbered snapshot of an offer for an inquiry"""
    inquiry = models.ForeignKey(
        'inquiries.Inquiry',
        on_delete=models.PROTECT,
        related_name='versions'
    )
    version_number = models.PositiveIntegerField()
    entry_type = models.CharField(max_length=20, choices=EntryType.choices)
    status = models.CharField(max_length=20, choices=VersionStatus.choices, default=VersionStatus.NEW)

    # Cached sum of item totals, written together with the items
    final_price = models.DecimalField(max_digits=14, decimal_places=2)
    notes = models.TextField(blank=True)
    submission_key = models.CharField(
        max_length=64, null=True, blank=True,
        help_text="Client token that makes a re-submitted create return the same version"
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='quotation_versions',
        null=True, blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['inquiry', 'version_number']
        constraints = [
            models.UniqueConstraint(
                fields=['inquiry', 'version_number'],
                name='unique_version_number_per_inquiry'
            ),
            models.UniqueConstraint(
                fields=['inquiry', 'submission_key'],
                condition=models.Q(submission_key__isnull=False),
                name='unique_submission_key_per_inquiry'
            ),
            models.CheckConstraint(
                condition=models.Q(version_number__gte=1),
                name='version_number_starts_at_one'
            ),
        ]

    def __str__(self):
        return f"RFQ {self.inquiry_id} v{self.version_number} - {self.final_price}"

    @property
    def creator_name(self):
        if self.created_by_id is None:
            return 'System'
        return self.created_by.get_username()


class QuotationVersionItem(WriteOnceModel):
    """One priced line within a version"""
    version = models.ForeignKey(
        QuotationVersion,
        on_delete=models.PROTECT,
        related_name='items'
    )
    catalog_item = models.ForeignKey(
        'catalog.CatalogItem',
        on_delete=models.PROTECT,
        related_name='version_items'
    )
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, help_text="In the inquiry's currency")
    total_price = models.DecimalField(max_digits=14, decimal_places=2)
    comment = models.TextField(blank=True)

    class Meta:
        ordering = ['id']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name='version_item_quantity_positive'
            ),
            models.CheckConstraint(
                condition=models.Q(unit_price__gte=0),
                name='version_item_unit_price_non_negative'
            ),
        ]

    def __str__(self):
        return f"{self.quantity}x {self.catalog_item_id} @ {self.unit_price} (version {self.version_id})"


class CustomerResponse(WriteOnceModel):
    """The single coarse verdict on a version"""
    version = models.OneToOneField(
        QuotationVersion,
        on_delete=models.PROTECT,
        related_name='customer_response'
    )
    status = models.CharField(max_length=20, choices=CustomerResponseStatus.choices)
    comments = models.TextField(blank=True)
    requested_changes = models.TextField(blank=True)
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='customer_responses',
        null=True, blank=True,
    )
    responded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.status} for version {self.version_id}"


class QuotationResponse(WriteOnceModel):
    """A detailed, sequence-numbered customer reply to a version"""
    version = models.ForeignKey(
        QuotationVersion,
        on_delete=models.PROTECT,
        related_name='quotation_responses'
    )
    response_number = models.PositiveIntegerField()
    overall_status = models.CharField(max_length=20, choices=QuotationResponseStatus.choices)
    response_date = models.DateTimeField()
    customer_contact_person = models.CharField(max_length=255, blank=True)
    communication_method = models.CharField(max_length=10, choices=CommunicationMethod.choices)
    overall_comments = models.TextField(blank=True)
    requested_delivery_date = models.DateField(null=True, blank=True)
    payment_terms_requested = models.CharField(max_length=255, blank=True)
    special_instructions = models.TextField(blank=True)

    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='quotation_responses',
        null=True, blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['version', 'response_number']
        constraints = [
            models.UniqueConstraint(
                fields=['version', 'response_number'],
                name='unique_response_number_per_version'
            ),
            models.CheckConstraint(
                condition=models.Q(response_number__gte=1),
                name='response_number_starts_at_one'
            ),
        ]

    def __str__(self):
        return f"Response #{self.response_number} to version {self.version_id} ({self.overall_status})"


class QuotationResponseItem(WriteOnceModel):
    """The customer's answer for one line of the version"""
    response = models.ForeignKey(
        QuotationResponse,
        on_delete=models.PROTECT,
        related_name='items'
    )
    version_item = models.ForeignKey(
        QuotationVersionItem,
        on_delete=models.PROTECT,
        related_name='response_items'
    )
    catalog_item = models.ForeignKey(
        'catalog.CatalogItem',
        on_delete=models.PROTECT,
        related_name='response_items'
    )
    item_status = models.CharField(max_length=20, choices=ResponseItemStatus.choices)
    requested_quantity = models.PositiveIntegerField(null=True, blank=True)
    requested_unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    requested_total_price = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    customer_sku_reference = models.CharField(max_length=100, blank=True)
    item_specific_comments = models.TextField(blank=True)
    alternative_suggestions = models.TextField(blank=True)
    delivery_requirements = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return f"{self.item_status} for version item {self.version_item_id}"


class NegotiationCommunication(models.Model):
    """A logged exchange with the customer; only its follow-up flag may change"""
    inquiry = models.ForeignKey(
        'inquiries.Inquiry',
        on_delete=models.PROTECT,
        related_name='communications'
    )
    version = models.ForeignKey(
        QuotationVersion,
        on_delete=models.PROTECT,
        related_name='communications',
        null=True, blank=True,
    )
    communication_type = models.CharField(max_length=10, choices=CommunicationMethod.choices)
    direction = models.CharField(max_length=10, choices=CommunicationDirection.choices)
    subject = models.CharField(max_length=255, blank=True)
    content = models.TextField()
    contact_person = models.CharField(max_length=255, blank=True)
    communication_date = models.DateTimeField()

    follow_up_required = models.BooleanField(default=False)
    follow_up_date = models.DateTimeField(null=True, blank=True)
    follow_up_completed = models.BooleanField(default=False)
    follow_up_completed_at = models.DateTimeField(null=True, blank=True)

    entered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='negotiation_communications',
        null=True, blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-communication_date', '-id']

    def __str__(self):
        return f"{self.direction} {self.communication_type} for RFQ {self.inquiry_id}"


class SkuNegotiationHistory(WriteOnceModel):
    """Append-only record of one inline quantity/price edit"""
    inquiry = models.ForeignKey(
        'inquiries.Inquiry',
        on_delete=models.PROTECT,
        related_name='sku_history'
    )
    catalog_item = models.ForeignKey(
        'catalog.CatalogItem',
        on_delete=models.PROTECT,
        related_name='negotiation_history'
    )
    version = models.ForeignKey(
        QuotationVersion,
        on_delete=models.PROTECT,
        related_name='sku_changes',
        null=True, blank=True,
    )
    communication = models.ForeignKey(
        NegotiationCommunication,
        on_delete=models.PROTECT,
        related_name='sku_changes',
        null=True, blank=True,
    )
    change_type = models.CharField(max_length=20, choices=ChangeType.choices)
    old_quantity = models.PositiveIntegerField(null=True, blank=True)
    new_quantity = models.PositiveIntegerField(null=True, blank=True)
    old_unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    new_unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    change_reason = models.TextField(blank=True)
    changed_by = models.CharField(max_length=10, choices=ChangedBy.choices, default=ChangedBy.CUSTOMER)

    entered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name='sku_changes',
        null=True, blank=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name_plural = 'SKU negotiation history'
        indexes = [
            models.Index(fields=['inquiry', 'catalog_item'], name='sku_history_inquiry_item_idx'),
        ]

    def __str__(self):
        return f"{self.change_type} on {self.catalog_item_id} (RFQ {self.inquiry_id})"
