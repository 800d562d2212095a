from django.db.models import Q
from rest_framework import generics

from project.utils import StandardizedResponseMixin
from catalog.models import CatalogItem
from catalog.api.serializers import CatalogItemSerializer


class CatalogItemListView(StandardizedResponseMixin, generics.ListAPIView):
    """List active catalog items, optionally filtered with ?search="""
    serializer_class = CatalogItemSerializer
    list_message = "Found {count} catalog items"

    def get_queryset(self):
        queryset = CatalogItem.objects.filter(is_active=True)
        search = self.request.query_params.get('search')
        if search:
            queryset = queryset.filter(
                Q(sku__icontains=search) | Q(description__icontains=search) | Q(mpn__icontains=search)
            )
        return queryset


class CatalogItemDetailView(StandardizedResponseMixin, generics.RetrieveAPIView):
    serializer_class = CatalogItemSerializer
    queryset = CatalogItem.objects.all()
