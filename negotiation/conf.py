"""
Ledger settings with defaults, overridable through settings.NEGOTIATION_LEDGER.
"""
from decimal import Decimal

from django.conf import settings

DEFAULTS = {
    'SEQUENCE_RETRY_LIMIT': 5,
    'DEFAULT_CURRENCY': 'CAD',
    'CURRENCY_RATES': {
        ('CAD', 'USD'): Decimal('0.74'),
        ('USD', 'CAD'): Decimal('1.35'),
    },
    'LOCKED_INQUIRY_STATUSES': ['PROCESSED'],
}


def ledger_setting(name):
    overrides = getattr(settings, 'NEGOTIATION_LEDGER', {}) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
