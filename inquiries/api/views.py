from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from rest_framework import generics, status
from rest_framework.views import APIView

from project.permissions import IsSalesUserOrReadOnly
from project.utils import (
    success_response, validation_error_response, StandardizedResponseMixin
)
from inquiries.enums import InquiryStatus, ResponseMessages
from inquiries.models import Inquiry
from inquiries.services import InquiryService
from inquiries.api.serializers import (
    InquirySerializer, InquiryCreateSerializer, InquiryStatusUpdateSerializer
)


class InquiryListCreateView(StandardizedResponseMixin, generics.ListAPIView):
    """
    GET: inquiries, newest first, optionally filtered with ?status=
    POST: record a new inquiry
    """
    serializer_class = InquirySerializer
    permission_classes = [IsSalesUserOrReadOnly]
    list_message = "Found {count} inquiries"

    def get_queryset(self):
        queryset = Inquiry.objects.select_related('created_by')
        status_filter = self.request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter.upper())
        return queryset.order_by('-created_at')

    def list(self, request, *args, **kwargs):
        status_filter = request.query_params.get('status')
        if status_filter and status_filter.upper() not in InquiryStatus.values:
            return validation_error_response({'status': [f"Unknown status '{status_filter}'"]})
        return super().list(request, *args, **kwargs)

    @method_decorator(ratelimit(key='user', rate='30/m', method='POST', block=True))
    def post(self, request, *args, **kwargs):
        serializer = InquiryCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        inquiry = InquiryService.create_inquiry(serializer.validated_data, user=request.user)
        return success_response(
            data=InquirySerializer(inquiry).data,
            message=ResponseMessages.INQUIRY_CREATED.format(number=inquiry.rfq_number),
            status_code=status.HTTP_201_CREATED
        )


class InquiryDetailView(StandardizedResponseMixin, generics.RetrieveAPIView):
    serializer_class = InquirySerializer
    permission_classes = [IsSalesUserOrReadOnly]
    queryset = Inquiry.objects.select_related('created_by')


class InquiryStatusView(APIView):
    """Manually move an inquiry along an allowed lifecycle transition"""
    permission_classes = [IsSalesUserOrReadOnly]

    def patch(self, request, pk):
        serializer = InquiryStatusUpdateSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        inquiry = InquiryService.get_inquiry(pk)
        result = InquiryService.transition(
            inquiry,
            serializer.validated_data['status'],
            reason=serializer.validated_data['reason'] or f"manual update by {request.user.get_username()}",
        )
        if result['changed']:
            message = ResponseMessages.STATUS_UPDATED.format(**result)
        else:
            message = ResponseMessages.STATUS_UNCHANGED.format(status=inquiry.status)
        return success_response(data=InquirySerializer(inquiry).data, message=message)
