from django.db import models


class CatalogItem(models.Model):
    """A sellable SKU that quotation lines and negotiation history refer to"""
    sku = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    brand = models.CharField(max_length=100, blank=True)
    mpn = models.CharField(max_length=100, blank=True, help_text="Manufacturer part number")

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['sku']

    def __str__(self):
        return self.sku
