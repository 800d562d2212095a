from rest_framework import serializers

from inquiries.enums import InquiryStatus
from inquiries.models import Inquiry


class InquirySerializer(serializers.ModelSerializer):
    """Serializer for Inquiry model"""
    created_by = serializers.SerializerMethodField()
    version_count = serializers.SerializerMethodField()
    latest_version_number = serializers.SerializerMethodField()

    class Meta:
        model = Inquiry
        fields = [
            'id', 'rfq_number', 'title', 'customer_reference', 'currency', 'status',
            'notes', 'created_by', 'version_count', 'latest_version_number',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_created_by(self, obj):
        return obj.created_by.get_username() if obj.created_by else None

    def get_version_count(self, obj):
        return obj.versions.count()

    def get_latest_version_number(self, obj):
        latest = obj.versions.order_by('-version_number').first()
        return latest.version_number if latest else None


class InquiryCreateSerializer(serializers.Serializer):
    """Serializer for intake of a new inquiry"""
    rfq_number = serializers.CharField(max_length=100)
    title = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    customer_reference = serializers.CharField(max_length=255)
    currency = serializers.CharField(max_length=3, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class InquiryStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=InquiryStatus.choices)
    reason = serializers.CharField(required=False, allow_blank=True, default='')
