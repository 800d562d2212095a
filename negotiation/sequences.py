"""
Per-parent sequence allocation.

Numbers are allocated as max(existing) + 1 and inserted under a unique
constraint. Two writers that read the same max both try to insert the same
number; the loser gets an IntegrityError, its transaction is rolled back and
the whole allocation is re-run with a fresh read.
"""
import logging

from django.db import IntegrityError, transaction
from django.db.models import Max

from .conf import ledger_setting
from .enums import ErrorMessages
from .exceptions import LedgerConflict

logger = logging.getLogger(__name__)


def next_number(queryset, field: str) -> int:
    """max(field) + 1 over ``queryset``, starting at 1"""
    current = queryset.aggregate(current=Max(field))['current']
    return (current or 0) + 1


def allocate_with_retry(allocate, sequence: str, scope):
    """
    Run ``allocate()`` in its own transaction, retrying when it trips a
    unique constraint.

    ``allocate`` must read the current maximum and perform every insert for
    the record itself, so that a retry leaves no partial rows behind. Ledger
    errors raised by ``allocate`` propagate immediately.

    Raises:
        LedgerConflict: still conflicting after SEQUENCE_RETRY_LIMIT attempts
    """
    attempts = ledger_setting('SEQUENCE_RETRY_LIMIT')
    for attempt in range(1, attempts + 1):
        try:
            with transaction.atomic():
                return allocate()
        except IntegrityError as exc:
            logger.warning(
                "%s number collision for %s (attempt %s/%s): %s",
                sequence, scope, attempt, attempts, exc
            )

    logger.error("Giving up allocating a %s number for %s after %s attempts", sequence, scope, attempts)
    raise LedgerConflict(ErrorMessages.SEQUENCE_EXHAUSTED.format(sequence=sequence, attempts=attempts))
