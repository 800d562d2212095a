"""
Management command to create sample data for exploring the negotiation ledger
"""
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand

from catalog.models import CatalogItem
from inquiries.models import Inquiry
from inquiries.services import InquiryService
from negotiation.enums import EntryType
from negotiation.versions import VersionManager
from project.permissions import SALES_GROUP

User = get_user_model()

SAMPLE_ITEMS = [
    {'sku': 'BRG-6204-2RS', 'brand': 'SKF', 'mpn': '6204-2RSH', 'description': 'Deep groove ball bearing, sealed, 20x47x14 mm'},
    {'sku': 'VLV-BALL-050', 'brand': 'Apollo', 'mpn': '70-104-01', 'description': '1/2" bronze ball valve, threaded'},
    {'sku': 'MTR-1HP-TEFC', 'brand': 'Baldor', 'mpn': 'EM3546T', 'description': '1 HP TEFC motor, 1800 RPM, 56C frame'},
    {'sku': 'BLT-A48', 'brand': 'Gates', 'mpn': 'A48', 'description': 'Classic V-belt, A section, 50" outside length'},
    {'sku': 'FLT-HYD-10M', 'brand': 'Parker', 'mpn': '937399Q', 'description': 'Hydraulic filter element, 10 micron'},
]


class Command(BaseCommand):
    help = 'Create sample catalog items, a sales user and a demo inquiry with a first version'

    def add_arguments(self, parser):
        parser.add_argument(
            '--rfq-number',
            dest='rfq_number',
            default='RFQ-DEMO-001',
            help='RFQ number of the demo inquiry',
        )
        parser.add_argument(
            '--password',
            dest='password',
            default='sales12345',
            help='Password for the demo sales user',
        )

    def handle(self, *args, **options):
        self.stdout.write('Creating sample data...')

        user = self.create_sales_user(options['password'])
        items = self.create_catalog_items()
        inquiry = self.create_inquiry(options['rfq_number'], user)
        self.create_first_version(inquiry, items, user)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.print_test_endpoints(inquiry)

    def create_sales_user(self, password):
        group, _ = Group.objects.get_or_create(name=SALES_GROUP)
        user, created = User.objects.get_or_create(
            username='sales_demo',
            defaults={'email': 'sales_demo@example.com'},
        )
        if created:
            user.set_password(password)
            user.save()
            self.stdout.write(f'Created sales user: {user.username}')
        user.groups.add(group)
        return user

    def create_catalog_items(self):
        items = []
        for data in SAMPLE_ITEMS:
            item, created = CatalogItem.objects.get_or_create(sku=data['sku'], defaults=data)
            if created:
                self.stdout.write(f'Created catalog item: {item.sku}')
            items.append(item)
        return items

    def create_inquiry(self, rfq_number, user):
        inquiry = Inquiry.objects.filter(rfq_number=rfq_number).first()
        if inquiry is not None:
            self.stdout.write(f'Inquiry {rfq_number} already exists')
            return inquiry

        inquiry = InquiryService.create_inquiry({
            'rfq_number': rfq_number,
            'title': 'Maintenance spares for Line 3',
            'customer_reference': 'Northwind Manufacturing',
            'currency': 'CAD',
        }, user=user)
        self.stdout.write(f'Created inquiry: {inquiry.rfq_number}')
        return inquiry

    def create_first_version(self, inquiry, items, user):
        if inquiry.versions.exists():
            self.stdout.write(f'Inquiry {inquiry.rfq_number} already has versions')
            return

        prices = [Decimal('12.40'), Decimal('38.75'), Decimal('412.00'), Decimal('9.95'), Decimal('56.20')]
        quantities = [40, 12, 2, 25, 6]
        result = VersionManager.create_version(
            inquiry.pk,
            entry_type=EntryType.INTERNAL_QUOTE,
            items=[
                {'catalog_item_id': item.pk, 'quantity': quantity, 'unit_price': price}
                for item, quantity, price in zip(items, quantities, prices)
            ],
            notes='Initial quote from seed data',
            author=user,
            submission_key=f'seed-{inquiry.rfq_number}',
        )
        version = result['version']
        self.stdout.write(f'Created version {version.version_number} with final price {version.final_price}')

    def print_test_endpoints(self, inquiry):
        self.stdout.write('\nSample API endpoints:')
        self.stdout.write('POST /api/token/  {"username": "sales_demo", "password": "..."}')
        self.stdout.write(f'GET  /api/negotiation/inquiries/{inquiry.pk}/versions/')
        self.stdout.write(f'GET  /api/negotiation/inquiries/{inquiry.pk}/ledger/?currency=USD')
        self.stdout.write(f'GET  /api/negotiation/inquiries/{inquiry.pk}/summary/')
