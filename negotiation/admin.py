from django.contrib import admin
from negotiation.models import (
    QuotationVersion, QuotationVersionItem, CustomerResponse, QuotationResponse,
    QuotationResponseItem, SkuNegotiationHistory, NegotiationCommunication
)


class WriteOnceAdmin(admin.ModelAdmin):
    """Ledger rows are browsed in the admin, never added, edited or deleted"""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class WriteOnceInline(admin.TabularInline):
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class QuotationVersionItemInline(WriteOnceInline):
    model = QuotationVersionItem
    fields = ['catalog_item', 'quantity', 'unit_price', 'total_price', 'comment']


class QuotationResponseItemInline(WriteOnceInline):
    model = QuotationResponseItem
    fk_name = 'response'
    fields = ['version_item', 'catalog_item', 'item_status', 'requested_quantity',
              'requested_unit_price', 'requested_total_price', 'item_specific_comments']


@admin.register(QuotationVersion)
class QuotationVersionAdmin(WriteOnceAdmin):
    list_display = ['id', 'inquiry', 'version_number', 'entry_type', 'status', 'final_price', 'created_by', 'created_at']
    list_filter = ['entry_type', 'created_at']
    search_fields = ['inquiry__rfq_number', 'notes']
    inlines = [QuotationVersionItemInline]


@admin.register(CustomerResponse)
class CustomerResponseAdmin(WriteOnceAdmin):
    list_display = ['id', 'version', 'status', 'recorded_by', 'responded_at']
    list_filter = ['status', 'responded_at']
    search_fields = ['version__inquiry__rfq_number', 'comments']


@admin.register(QuotationResponse)
class QuotationResponseAdmin(WriteOnceAdmin):
    list_display = ['id', 'version', 'response_number', 'overall_status', 'communication_method', 'response_date']
    list_filter = ['overall_status', 'communication_method', 'response_date']
    search_fields = ['version__inquiry__rfq_number', 'customer_contact_person']
    inlines = [QuotationResponseItemInline]


@admin.register(SkuNegotiationHistory)
class SkuNegotiationHistoryAdmin(WriteOnceAdmin):
    list_display = ['id', 'inquiry', 'catalog_item', 'change_type', 'old_unit_price', 'new_unit_price',
                    'old_quantity', 'new_quantity', 'changed_by', 'created_at']
    list_filter = ['change_type', 'changed_by', 'created_at']
    search_fields = ['inquiry__rfq_number', 'catalog_item__sku', 'change_reason']


@admin.register(NegotiationCommunication)
class NegotiationCommunicationAdmin(admin.ModelAdmin):
    list_display = ['id', 'inquiry', 'communication_type', 'direction', 'communication_date',
                    'follow_up_required', 'follow_up_completed']
    list_filter = ['communication_type', 'direction', 'follow_up_required', 'follow_up_completed']
    search_fields = ['inquiry__rfq_number', 'subject', 'contact_person']
    readonly_fields = ['created_at', 'updated_at', 'follow_up_completed_at']
