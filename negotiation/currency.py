"""
Display-currency conversion.

Amounts are stored in the inquiry's currency of record. Conversion here is
for presentation only; callers must never write a converted value back.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from .conf import ledger_setting

CENT = Decimal('0.01')


def _rates():
    rates = {}
    for key, rate in ledger_setting('CURRENCY_RATES').items():
        if isinstance(key, str):
            source, target = key.split('->')
        else:
            source, target = key
        rates[(source.strip().upper(), target.strip().upper())] = Decimal(str(rate))
    return rates


def supported_currencies():
    codes = set()
    for source, target in _rates():
        codes.update((source, target))
    codes.add(ledger_setting('DEFAULT_CURRENCY').upper())
    return sorted(codes)


def is_supported_currency(code: Optional[str]) -> bool:
    return bool(code) and code.upper() in supported_currencies()


def convert_amount(amount, from_currency: str, to_currency: str) -> Decimal:
    """
    Convert ``amount`` between currencies using the configured rate table,
    rounded to cents.

    Raises:
        ValueError: no rate is configured for the pair
    """
    amount = Decimal(str(amount))
    source, target = from_currency.upper(), to_currency.upper()
    if source == target:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)

    rate = _rates().get((source, target))
    if rate is None:
        raise ValueError(f"Unsupported currency conversion: {source} to {target}")
    return (amount * rate).quantize(CENT, rounding=ROUND_HALF_UP)
