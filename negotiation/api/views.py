from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import status
from rest_framework.views import APIView

from project.permissions import IsSalesUserOrReadOnly
from project.utils import success_response, validation_error_response
from negotiation.communications import CommunicationLog
from negotiation.enums import ResponseMessages
from negotiation.history import ChangeRecorder
from negotiation.ledger import NegotiationLedger, resolve_display_currency
from negotiation.responses import ResponseRecorder
from negotiation.versions import VersionManager
from inquiries.services import InquiryService
from negotiation.api.serializers import (
    VersionCreateSerializer, VersionSerializer,
    CustomerResponseCreateSerializer, CustomerResponseSerializer,
    QuotationResponseCreateSerializer, QuotationResponseSerializer,
    SkuChangeCreateSerializer, SkuNegotiationHistorySerializer, SkuHistoryGroupSerializer,
    CommunicationCreateSerializer, CommunicationSerializer,
    NegotiationSummarySerializer
)

WRITE_RATE = '30/m'


class VersionListCreateView(APIView):
    """
    GET: versions of an inquiry, ascending, optionally with ?currency= display amounts
    POST: create the next version
    """
    permission_classes = [IsSalesUserOrReadOnly]

    def get(self, request, inquiry_id):
        versions = VersionManager.get_versions(inquiry_id)
        inquiry = InquiryService.get_inquiry(inquiry_id)
        display_currency = resolve_display_currency(inquiry, request.query_params.get('currency'))

        serializer = VersionSerializer(versions, many=True, context={'display_currency': display_currency})
        return success_response(
            data=serializer.data,
            message=ResponseMessages.VERSIONS_FOUND.format(count=len(serializer.data))
        )

    @method_decorator(ratelimit(key='user', rate=WRITE_RATE, method='POST', block=True))
    def post(self, request, inquiry_id):
        serializer = VersionCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        data = serializer.validated_data
        result = VersionManager.create_version(
            inquiry_id,
            entry_type=data['entry_type'],
            items=data['items'],
            notes=data['notes'],
            author=request.user,
            submission_key=data['submission_key'],
        )
        version = VersionManager.get_version(inquiry_id, result['version'].version_number)
        response_data = VersionSerializer(version).data
        response_data['inquiry_status'] = InquiryService.get_inquiry(inquiry_id).status

        if not result['created']:
            return success_response(
                data=response_data,
                message=ResponseMessages.VERSION_REPLAYED.format(number=version.version_number)
            )
        return success_response(
            data=response_data,
            message=ResponseMessages.VERSION_CREATED.format(
                number=version.version_number,
                count=len(data['items']),
                total=version.final_price
            ),
            status_code=status.HTTP_201_CREATED
        )


class VersionDetailView(APIView):
    """One version of an inquiry by its version number"""
    permission_classes = [IsSalesUserOrReadOnly]

    def get(self, request, inquiry_id, version_number):
        version = VersionManager.get_version(inquiry_id, version_number)
        display_currency = resolve_display_currency(version.inquiry, request.query_params.get('currency'))
        serializer = VersionSerializer(version, context={'display_currency': display_currency})
        return success_response(data=serializer.data, message="Version retrieved successfully")


class CustomerResponseView(APIView):
    """Record the single coarse verdict on a version"""
    permission_classes = [IsSalesUserOrReadOnly]

    def get(self, request, version_id):
        response = ResponseRecorder.get_customer_response(version_id)
        data = CustomerResponseSerializer(response).data if response is not None else None
        return success_response(data=data, message="Customer response retrieved successfully")

    @method_decorator(ratelimit(key='user', rate=WRITE_RATE, method='POST', block=True))
    def post(self, request, version_id):
        serializer = CustomerResponseCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = ResponseRecorder.record_customer_response(
            version_id,
            author=request.user,
            **serializer.validated_data
        )
        response_data = CustomerResponseSerializer(result['response']).data
        response_data['inquiry_status'] = (result['status_change'] or {}).get(
            'new_status', InquiryService.get_inquiry(result['version'].inquiry_id).status
        )
        return success_response(
            data=response_data,
            message=ResponseMessages.CUSTOMER_RESPONSE_RECORDED.format(
                status=result['response'].status,
                number=result['version'].version_number
            ),
            status_code=status.HTTP_201_CREATED
        )


class QuotationResponseListCreateView(APIView):
    """
    GET: detailed responses to a version, ascending by response number
    POST: record the next detailed response
    """
    permission_classes = [IsSalesUserOrReadOnly]

    def get(self, request, version_id):
        version = VersionManager.get_version_by_id(version_id)
        responses = ResponseRecorder.list_quotation_responses(version_id)
        serializer = QuotationResponseSerializer(responses, many=True)
        return success_response(
            data=serializer.data,
            message=ResponseMessages.RESPONSES_FOUND.format(
                count=len(serializer.data), number=version.version_number
            )
        )

    @method_decorator(ratelimit(key='user', rate=WRITE_RATE, method='POST', block=True))
    def post(self, request, version_id):
        serializer = QuotationResponseCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        data = dict(serializer.validated_data)
        line_responses = data.pop('response_items')
        result = ResponseRecorder.record_quotation_response(
            version_id, data, line_responses, author=request.user
        )
        response = ResponseRecorder.get_quotation_response(result['response'].pk)
        response_data = QuotationResponseSerializer(response).data
        response_data['warnings'] = result['warnings']
        return success_response(
            data=response_data,
            message=ResponseMessages.QUOTATION_RESPONSE_RECORDED.format(
                sequence=response.response_number,
                number=result['version'].version_number
            ),
            status_code=status.HTTP_201_CREATED
        )


class QuotationResponseDetailView(APIView):
    permission_classes = [IsSalesUserOrReadOnly]

    def get(self, request, response_id):
        response = ResponseRecorder.get_quotation_response(response_id)
        return success_response(
            data=QuotationResponseSerializer(response).data,
            message="Response retrieved successfully"
        )


class SkuChangeCreateView(APIView):
    """Record an inline quantity/price edit for one SKU of an inquiry"""
    permission_classes = [IsSalesUserOrReadOnly]

    @method_decorator(ratelimit(key='user', rate=WRITE_RATE, method='POST', block=True))
    def post(self, request, inquiry_id):
        serializer = SkuChangeCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        entry = ChangeRecorder.record_change(inquiry_id, author=request.user, **serializer.validated_data)
        return success_response(
            data=SkuNegotiationHistorySerializer(entry).data,
            message=ResponseMessages.SKU_CHANGE_RECORDED.format(
                change_type=entry.change_type, sku=entry.catalog_item.sku
            ),
            status_code=status.HTTP_201_CREATED
        )


class SkuHistoryListView(APIView):
    """SKU change history of an inquiry, newest first; ?catalog_item_id= narrows it to one item"""
    permission_classes = [IsSalesUserOrReadOnly]

    def get(self, request, inquiry_id):
        catalog_item_id = request.query_params.get('catalog_item_id')
        if catalog_item_id is not None and not catalog_item_id.isdigit():
            return validation_error_response({'catalog_item_id': ["Must be a whole number"]})

        history = ChangeRecorder.list_history(
            inquiry_id, int(catalog_item_id) if catalog_item_id is not None else None
        )
        serializer = SkuNegotiationHistorySerializer(history, many=True)
        return success_response(
            data=serializer.data,
            message=ResponseMessages.HISTORY_FOUND.format(count=len(serializer.data))
        )


class NegotiationLedgerView(APIView):
    """Everything needed to render an inquiry's negotiation in one read"""
    permission_classes = [IsSalesUserOrReadOnly]

    def get(self, request, inquiry_id):
        state = NegotiationLedger.get_state(inquiry_id, request.query_params.get('currency'))
        inquiry = state['inquiry']
        context = {'display_currency': state['display_currency']}
        latest = state['latest_version']

        data = {
            'inquiry': {
                'id': inquiry.id,
                'rfq_number': inquiry.rfq_number,
                'customer_reference': inquiry.customer_reference,
                'currency': inquiry.currency,
                'status': inquiry.status,
            },
            'can_create_version': state['can_create_version'],
            'latest_version_number': latest.version_number if latest else None,
            'versions': VersionSerializer(state['versions'], many=True, context=context).data,
            'sku_history': SkuHistoryGroupSerializer(state['sku_history'], many=True).data,
        }
        return success_response(data=data, message="Negotiation ledger retrieved successfully")


class NegotiationSummaryView(APIView):
    permission_classes = [IsSalesUserOrReadOnly]

    def get(self, request, inquiry_id):
        summary = NegotiationLedger.get_summary(inquiry_id)
        return success_response(
            data=NegotiationSummarySerializer(summary).data,
            message="Negotiation summary retrieved successfully"
        )


class CommunicationListCreateView(APIView):
    """
    GET: communications of an inquiry, newest first
    POST: log a new communication
    """
    permission_classes = [IsSalesUserOrReadOnly]

    def get(self, request, inquiry_id):
        communications = CommunicationLog.list_communications(inquiry_id)
        serializer = CommunicationSerializer(communications, many=True)
        return success_response(
            data=serializer.data,
            message=f"Found {len(serializer.data)} communications"
        )

    @method_decorator(ratelimit(key='user', rate=WRITE_RATE, method='POST', block=True))
    def post(self, request, inquiry_id):
        serializer = CommunicationCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        communication = CommunicationLog.record_communication(
            inquiry_id, serializer.validated_data, author=request.user
        )
        return success_response(
            data=CommunicationSerializer(communication).data,
            message=ResponseMessages.COMMUNICATION_RECORDED,
            status_code=status.HTTP_201_CREATED
        )


class FollowUpCompleteView(APIView):
    permission_classes = [IsSalesUserOrReadOnly]

    @method_decorator(ratelimit(key='user', rate=WRITE_RATE, method='POST', block=True))
    def post(self, request, communication_id):
        communication = CommunicationLog.complete_follow_up(communication_id)
        return success_response(
            data=CommunicationSerializer(communication).data,
            message=ResponseMessages.FOLLOW_UP_COMPLETED
        )
