"""Shared fixtures for the negotiation ledger test suite."""
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from rest_framework.test import APIClient

from catalog.models import CatalogItem
from inquiries.services import InquiryService
from negotiation.enums import EntryType
from negotiation.versions import VersionManager
from project.permissions import SALES_GROUP


@pytest.fixture
def sales_user(db):
    user = get_user_model().objects.create_user(username='sales', password='secret123')
    group, _ = Group.objects.get_or_create(name=SALES_GROUP)
    user.groups.add(group)
    return user


@pytest.fixture
def viewer_user(db):
    return get_user_model().objects.create_user(username='viewer', password='secret123')


@pytest.fixture
def item_a(db):
    return CatalogItem.objects.create(sku='A', description='Bearing 6204', brand='SKF', mpn='6204-2RSH')


@pytest.fixture
def item_b(db):
    return CatalogItem.objects.create(sku='B', description='Ball valve 1/2"', brand='Apollo')


@pytest.fixture
def inquiry(db, sales_user):
    return InquiryService.create_inquiry(
        {'rfq_number': 'RFQ-1001', 'customer_reference': 'Northwind', 'currency': 'CAD'},
        user=sales_user,
    )


@pytest.fixture
def make_version(sales_user):
    """Create a version from (catalog_item, quantity, unit_price) tuples"""

    def _make(inquiry, *lines, entry_type=EntryType.INTERNAL_QUOTE, **kwargs):
        items = [
            {'catalog_item_id': item.pk, 'quantity': quantity, 'unit_price': Decimal(str(price))}
            for item, quantity, price in lines
        ]
        result = VersionManager.create_version(
            inquiry.pk, entry_type=entry_type, items=items, author=sales_user, **kwargs
        )
        return result['version']

    return _make


@pytest.fixture
def api_client(sales_user):
    client = APIClient()
    client.force_authenticate(user=sales_user)
    return client


@pytest.fixture
def viewer_client(viewer_user):
    client = APIClient()
    client.force_authenticate(user=viewer_user)
    return client
