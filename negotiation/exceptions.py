"""
Error taxonomy for the negotiation ledger.

Every error is an ``APIException`` so views can let it propagate and the
project exception handler renders it in the standard envelope.
"""
from typing import Dict, List, Optional

from rest_framework import status
from rest_framework.exceptions import APIException


class LedgerError(APIException):
    """Base class for negotiation ledger errors"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Negotiation ledger error'
    default_code = 'ledger_error'

    def __init__(self, detail=None, code=None, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(detail=detail, code=code)
        self.errors = errors


class LedgerValidationError(LedgerError):
    """Malformed or missing input, detected before any write"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid request'
    default_code = 'validation_error'


class LedgerNotFound(LedgerError):
    """A referenced inquiry, version, response or item does not exist"""
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found'
    default_code = 'not_found'


class LedgerConflict(LedgerError):
    """Duplicate sequence number after retries, or a second coarse verdict"""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Conflicting write'
    default_code = 'conflict'


class CrossReferenceError(LedgerError):
    """A response line points at an item that is not part of the target version"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Response references items outside the version'
    default_code = 'integrity_error'


class ImmutableRecordError(Exception):
    """Raised when code tries to update or delete a write-once ledger row"""
