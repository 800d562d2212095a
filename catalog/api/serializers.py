from rest_framework import serializers
from catalog.models import CatalogItem


class CatalogItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = CatalogItem
        fields = ['id', 'sku', 'description', 'brand', 'mpn', 'is_active']
        read_only_fields = fields
