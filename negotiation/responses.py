"""
Response recorder: the coarse customer verdict on a version and the
detailed, numbered per-line responses.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from inquiries.services import InquiryService

from .enums import (
    CustomerResponseStatus, CUSTOMER_VERDICT_TO_INQUIRY_STATUS, ErrorMessages
)
from .exceptions import CrossReferenceError, LedgerConflict, LedgerNotFound, LedgerValidationError
from .models import CustomerResponse, QuotationResponse, QuotationResponseItem
from .pricing import line_total, to_money
from .sequences import allocate_with_retry, next_number
from .validators import ResponseLineValidator, StatusConsistencyValidator
from .versions import VersionManager

logger = logging.getLogger(__name__)


class ResponseRecorder:
    """Service class for customer responses"""

    @staticmethod
    def record_customer_response(version_id: int, status: str, comments: str = '',
                                 requested_changes: str = '', author=None) -> Dict[str, Any]:
        """
        Record the single verdict on a version.

        The inquiry follows the verdict only when it answers the latest
        version and the lifecycle allows the move; otherwise the verdict is
        still recorded and the skip is logged.

        Raises:
            LedgerValidationError: unknown status
            LedgerNotFound: unknown version
            LedgerConflict: the version already has a verdict
        """
        if status not in CustomerResponseStatus.values:
            message = f"Invalid status '{status}'. Expected one of: {', '.join(CustomerResponseStatus.values)}"
            raise LedgerValidationError(message, errors={'status': [message]})

        version = VersionManager.get_version_by_id(version_id)
        conflict = ErrorMessages.CUSTOMER_RESPONSE_EXISTS.format(version_id=version.pk)
        if CustomerResponse.objects.filter(version=version).exists():
            raise LedgerConflict(conflict)

        try:
            with transaction.atomic():
                inquiry = InquiryService.get_inquiry(version.inquiry_id, for_update=True)
                response = CustomerResponse.objects.create(
                    version=version,
                    status=status,
                    comments=comments or '',
                    requested_changes=requested_changes or '',
                    recorded_by=author if author is not None and author.is_authenticated else None,
                )

                status_change = None
                target_status = CUSTOMER_VERDICT_TO_INQUIRY_STATUS[CustomerResponseStatus(status)]
                if version.version_number == VersionManager.latest_version_number(inquiry.pk):
                    status_change = InquiryService.transition(
                        inquiry, target_status,
                        reason=f"customer {status.lower()} version {version.version_number}",
                        strict=False
                    )
                else:
                    logger.info(
                        "Verdict %s on superseded version %s of inquiry %s leaves status %s",
                        status, version.version_number, inquiry.pk, inquiry.status
                    )
        except IntegrityError:
            raise LedgerConflict(conflict)

        logger.info("Customer response %s recorded for version %s", status, version.pk)
        return {
            'response': response,
            'version': version,
            'status_change': status_change,
        }

    @staticmethod
    def record_quotation_response(version_id: int, response_data: Dict[str, Any],
                                  line_responses: List[Dict[str, Any]], author=None) -> Dict[str, Any]:
        """
        Record a detailed response with one line per answered version item.

        The response gets the next response number for the version. Every
        line must reference an item of this version and carry the same
        catalog item; otherwise nothing is written. An overall status that
        does not summarize the lines is accepted and reported as warnings.

        Args:
            version_id: version being answered
            response_data: overall_status, communication_method and optional
                response_date, customer_contact_person, overall_comments,
                requested_delivery_date, payment_terms_requested,
                special_instructions
            line_responses: dicts with version_item_id, catalog_item_id,
                item_status and optional requested values and comments

        Returns:
            Dict with response and warnings

        Raises:
            LedgerValidationError: malformed header or lines
            LedgerNotFound: unknown version
            CrossReferenceError: line outside the version or SKU mismatch
            LedgerConflict: no response number could be allocated
        """
        overall_status = response_data.get('overall_status')
        errors = ResponseLineValidator.validate_header(overall_status, response_data.get('communication_method'))
        _, line_errors = ResponseLineValidator.validate_lines(line_responses)
        errors.update(line_errors)
        if errors:
            raise LedgerValidationError("Invalid quotation response", errors=errors)

        version = VersionManager.get_version_by_id(version_id)
        version_items = {item.pk: item for item in version.items.all()}
        ResponseRecorder._check_cross_references(version, version_items, line_responses)
        requested_totals = ResponseRecorder._requested_totals(version_items, line_responses)

        warnings = StatusConsistencyValidator.check_overall_status(
            overall_status, [line['item_status'] for line in line_responses]
        )

        def allocate():
            VersionManager.get_version_by_id(version.pk, for_update=True)
            number = next_number(QuotationResponse.objects.filter(version=version), 'response_number')
            response = QuotationResponse.objects.create(
                version=version,
                response_number=number,
                overall_status=overall_status,
                response_date=response_data.get('response_date') or timezone.now(),
                customer_contact_person=response_data.get('customer_contact_person') or '',
                communication_method=response_data['communication_method'],
                overall_comments=response_data.get('overall_comments') or '',
                requested_delivery_date=response_data.get('requested_delivery_date'),
                payment_terms_requested=response_data.get('payment_terms_requested') or '',
                special_instructions=response_data.get('special_instructions') or '',
                recorded_by=author if author is not None and author.is_authenticated else None,
            )
            QuotationResponseItem.objects.bulk_create([
                ResponseRecorder._build_line(
                    response, version_items[int(line['version_item_id'])], line, requested_totals[index]
                )
                for index, line in enumerate(line_responses)
            ])
            return response

        response = allocate_with_retry(allocate, sequence='response', scope=f"version {version.pk}")

        for warning in warnings:
            logger.warning("Response #%s to version %s: %s", response.response_number, version.pk, warning)
        logger.info(
            "Response #%s (%s, %s lines) recorded for version %s",
            response.response_number, overall_status, len(line_responses), version.pk
        )
        return {
            'response': response,
            'version': version,
            'warnings': warnings,
        }

    @staticmethod
    def _check_cross_references(version, version_items, line_responses):
        foreign = [
            int(line['version_item_id']) for line in line_responses
            if int(line['version_item_id']) not in version_items
        ]
        if foreign:
            message = ErrorMessages.FOREIGN_VERSION_ITEM.format(
                ids=', '.join(str(pk) for pk in foreign), version_id=version.pk
            )
            logger.warning("Rejected response to version %s: %s", version.pk, message)
            raise CrossReferenceError(message, errors={'response_items': [message]})

        mismatches = []
        for line in line_responses:
            version_item = version_items[int(line['version_item_id'])]
            if int(line['catalog_item_id']) != version_item.catalog_item_id:
                mismatches.append(ErrorMessages.SKU_MISMATCH.format(
                    item_id=version_item.pk,
                    sku_id=line['catalog_item_id'],
                    expected_id=version_item.catalog_item_id,
                ))
        if mismatches:
            logger.warning("Rejected response to version %s: %s", version.pk, '; '.join(mismatches))
            raise CrossReferenceError(mismatches[0], errors={'response_items': mismatches})

    @staticmethod
    def _requested_totals(version_items, line_responses) -> List[Optional[Decimal]]:
        """
        Requested total per line: requested unit price times the requested
        quantity, or the offered quantity when none was asked for.

        Raises:
            LedgerValidationError: a total does not fit its column
        """
        totals, errors = [], {}
        for index, line in enumerate(line_responses):
            requested_unit_price = line.get('requested_unit_price')
            if requested_unit_price is None:
                totals.append(None)
                continue

            quantity = line.get('requested_quantity')
            if quantity is None:
                quantity = version_items[int(line['version_item_id'])].quantity
            total, error = line_total(quantity, requested_unit_price)
            if error:
                errors[f'response_items[{index}]'] = [error]
            totals.append(total)

        if errors:
            raise LedgerValidationError("Invalid quotation response", errors=errors)
        return totals

    @staticmethod
    def _build_line(response, version_item, line, requested_total_price) -> QuotationResponseItem:
        requested_quantity = line.get('requested_quantity')
        requested_unit_price = line.get('requested_unit_price')

        return QuotationResponseItem(
            response=response,
            version_item=version_item,
            catalog_item_id=version_item.catalog_item_id,
            item_status=line['item_status'],
            requested_quantity=int(requested_quantity) if requested_quantity is not None else None,
            requested_unit_price=to_money(requested_unit_price) if requested_unit_price is not None else None,
            requested_total_price=requested_total_price,
            customer_sku_reference=line.get('customer_sku_reference') or '',
            item_specific_comments=line.get('item_specific_comments') or '',
            alternative_suggestions=line.get('alternative_suggestions') or '',
            delivery_requirements=line.get('delivery_requirements') or '',
        )

    @staticmethod
    def list_quotation_responses(version_id: int):
        """Responses to a version, ascending by response number"""
        version = VersionManager.get_version_by_id(version_id)
        return (
            QuotationResponse.objects
            .filter(version=version)
            .select_related('recorded_by')
            .prefetch_related('items__catalog_item')
            .order_by('response_number')
        )

    @staticmethod
    def get_quotation_response(response_id: int) -> QuotationResponse:
        try:
            return (
                QuotationResponse.objects
                .select_related('version', 'recorded_by')
                .prefetch_related('items__catalog_item')
                .get(pk=response_id)
            )
        except QuotationResponse.DoesNotExist:
            raise LedgerNotFound(ErrorMessages.RESPONSE_NOT_FOUND.format(response_id=response_id))

    @staticmethod
    def get_customer_response(version_id: int) -> Optional[CustomerResponse]:
        version = VersionManager.get_version_by_id(version_id)
        return CustomerResponse.objects.filter(version=version).first()
