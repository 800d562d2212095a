from django.contrib import admin
from catalog.models import CatalogItem


@admin.register(CatalogItem)
class CatalogItemAdmin(admin.ModelAdmin):
    list_display = ['id', 'sku', 'brand', 'mpn', 'is_active', 'created_at']
    list_filter = ['is_active', 'brand']
    search_fields = ['sku', 'description', 'mpn']
    readonly_fields = ['created_at', 'updated_at']
