from django.contrib import admin
from inquiries.models import Inquiry


@admin.register(Inquiry)
class InquiryAdmin(admin.ModelAdmin):
    list_display = ['id', 'rfq_number', 'customer_reference', 'currency', 'status', 'created_by', 'created_at']
    list_filter = ['status', 'currency', 'created_at']
    search_fields = ['rfq_number', 'title', 'customer_reference']
    readonly_fields = ['created_at', 'updated_at']
