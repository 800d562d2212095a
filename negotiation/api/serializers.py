from django.core.exceptions import ObjectDoesNotExist
from rest_framework import serializers

from negotiation.currency import convert_amount
from negotiation.enums import (
    EntryType, CustomerResponseStatus, QuotationResponseStatus, ResponseItemStatus,
    CommunicationMethod, CommunicationDirection, ChangedBy
)
from negotiation.ledger import effective_status
from negotiation.pricing import MAX_QUANTITY
from negotiation.models import (
    QuotationVersion, QuotationVersionItem, CustomerResponse, QuotationResponse,
    QuotationResponseItem, SkuNegotiationHistory, NegotiationCommunication
)


def _username(user):
    return user.get_username() if user is not None else None


# Input serializers

class VersionItemInputSerializer(serializers.Serializer):
    catalog_item_id = serializers.IntegerField(min_value=1)
    quantity = serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class VersionCreateSerializer(serializers.Serializer):
    """Body of a create-version request"""
    entry_type = serializers.ChoiceField(choices=EntryType.choices)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    submission_key = serializers.CharField(max_length=64, required=False, allow_null=True, default=None)
    items = VersionItemInputSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one line item is required")
        return value


class CustomerResponseCreateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CustomerResponseStatus.choices)
    comments = serializers.CharField(required=False, allow_blank=True, default='')
    requested_changes = serializers.CharField(required=False, allow_blank=True, default='')


class ResponseItemInputSerializer(serializers.Serializer):
    version_item_id = serializers.IntegerField(min_value=1)
    catalog_item_id = serializers.IntegerField(min_value=1)
    item_status = serializers.ChoiceField(choices=ResponseItemStatus.choices)
    requested_quantity = serializers.IntegerField(
        min_value=1, max_value=MAX_QUANTITY, required=False, allow_null=True, default=None
    )
    requested_unit_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )
    customer_sku_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    item_specific_comments = serializers.CharField(required=False, allow_blank=True, default='')
    alternative_suggestions = serializers.CharField(required=False, allow_blank=True, default='')
    delivery_requirements = serializers.CharField(required=False, allow_blank=True, default='')


class QuotationResponseCreateSerializer(serializers.Serializer):
    """Body of a detailed quotation response"""
    overall_status = serializers.ChoiceField(choices=QuotationResponseStatus.choices)
    response_date = serializers.DateTimeField(required=False, allow_null=True, default=None)
    communication_method = serializers.ChoiceField(choices=CommunicationMethod.choices)
    customer_contact_person = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    overall_comments = serializers.CharField(required=False, allow_blank=True, default='')
    requested_delivery_date = serializers.DateField(required=False, allow_null=True, default=None)
    payment_terms_requested = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    special_instructions = serializers.CharField(required=False, allow_blank=True, default='')
    response_items = ResponseItemInputSerializer(many=True)

    def validate_response_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one response line is required")
        return value


class SkuChangeCreateSerializer(serializers.Serializer):
    """Body of an inline SKU change; omitted old values come from the last known state"""
    catalog_item_id = serializers.IntegerField(min_value=1)
    old_quantity = serializers.IntegerField(
        min_value=1, max_value=MAX_QUANTITY, required=False, allow_null=True, default=None
    )
    new_quantity = serializers.IntegerField(
        min_value=1, max_value=MAX_QUANTITY, required=False, allow_null=True, default=None
    )
    old_unit_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )
    new_unit_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False, allow_null=True, default=None
    )
    changed_by = serializers.ChoiceField(choices=ChangedBy.choices, default=ChangedBy.CUSTOMER)
    change_reason = serializers.CharField(required=False, allow_blank=True, default='')
    version_id = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    communication_id = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)

    def validate(self, attrs):
        if attrs.get('new_quantity') is None and attrs.get('new_unit_price') is None:
            raise serializers.ValidationError("Provide new_quantity, new_unit_price or both")
        return attrs


class CommunicationCreateSerializer(serializers.Serializer):
    communication_type = serializers.ChoiceField(choices=CommunicationMethod.choices)
    direction = serializers.ChoiceField(choices=CommunicationDirection.choices)
    version_id = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    subject = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    content = serializers.CharField()
    contact_person = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    communication_date = serializers.DateTimeField(required=False, allow_null=True, default=None)
    follow_up_required = serializers.BooleanField(default=False)
    follow_up_date = serializers.DateTimeField(required=False, allow_null=True, default=None)


# Output serializers

class VersionItemSerializer(serializers.ModelSerializer):
    """Serializer for QuotationVersionItem model"""
    sku = serializers.CharField(source='catalog_item.sku', read_only=True)
    description = serializers.CharField(source='catalog_item.description', read_only=True)

    class Meta:
        model = QuotationVersionItem
        fields = [
            'id', 'catalog_item_id', 'sku', 'description',
            'quantity', 'unit_price', 'total_price', 'comment'
        ]
        read_only_fields = fields


class CustomerResponseSerializer(serializers.ModelSerializer):
    """Serializer for CustomerResponse model"""
    recorded_by = serializers.SerializerMethodField()

    class Meta:
        model = CustomerResponse
        fields = ['id', 'version_id', 'status', 'comments', 'requested_changes', 'recorded_by', 'responded_at']
        read_only_fields = fields

    def get_recorded_by(self, obj):
        return _username(obj.recorded_by)


class VersionSerializer(serializers.ModelSerializer):
    """
    Serializer for QuotationVersion with nested items, the customer's
    verdict and the number of detailed responses.

    With ``display_currency`` in the context a ``display`` block carries
    converted amounts; stored amounts are always in the inquiry currency.
    """
    items = VersionItemSerializer(many=True, read_only=True)
    item_count = serializers.SerializerMethodField()
    created_by = serializers.CharField(source='creator_name', read_only=True)
    effective_status = serializers.SerializerMethodField()
    customer_response = serializers.SerializerMethodField()
    has_customer_response = serializers.SerializerMethodField()
    quotation_response_count = serializers.SerializerMethodField()
    currency = serializers.CharField(source='inquiry.currency', read_only=True)
    display = serializers.SerializerMethodField()

    class Meta:
        model = QuotationVersion
        fields = [
            'id', 'inquiry_id', 'version_number', 'entry_type', 'status', 'effective_status',
            'final_price', 'currency', 'item_count', 'notes', 'created_by', 'created_at',
            'items', 'customer_response', 'has_customer_response', 'quotation_response_count',
            'display'
        ]
        read_only_fields = fields

    def _customer_response(self, obj):
        try:
            return obj.customer_response
        except ObjectDoesNotExist:
            return None

    def get_item_count(self, obj):
        return len(obj.items.all())

    def get_effective_status(self, obj):
        return effective_status(obj)

    def get_customer_response(self, obj):
        response = self._customer_response(obj)
        if response is None:
            return None
        return CustomerResponseSerializer(response).data

    def get_has_customer_response(self, obj):
        return self._customer_response(obj) is not None

    def get_quotation_response_count(self, obj):
        count = getattr(obj, 'quotation_response_count', None)
        if count is None:
            count = obj.quotation_responses.count()
        return count

    def get_display(self, obj):
        target = self.context.get('display_currency')
        if not target:
            return None
        source = obj.inquiry.currency
        return {
            'currency': target,
            'final_price': str(convert_amount(obj.final_price, source, target)),
            'items': [
                {
                    'id': item.id,
                    'unit_price': str(convert_amount(item.unit_price, source, target)),
                    'total_price': str(convert_amount(item.total_price, source, target)),
                }
                for item in obj.items.all()
            ],
        }


class QuotationResponseItemSerializer(serializers.ModelSerializer):
    """Serializer for QuotationResponseItem model"""
    sku = serializers.CharField(source='catalog_item.sku', read_only=True)

    class Meta:
        model = QuotationResponseItem
        fields = [
            'id', 'version_item_id', 'catalog_item_id', 'sku', 'item_status',
            'requested_quantity', 'requested_unit_price', 'requested_total_price',
            'customer_sku_reference', 'item_specific_comments',
            'alternative_suggestions', 'delivery_requirements'
        ]
        read_only_fields = fields


class QuotationResponseSerializer(serializers.ModelSerializer):
    """Serializer for QuotationResponse with its line items"""
    items = QuotationResponseItemSerializer(many=True, read_only=True)
    item_count = serializers.SerializerMethodField()
    recorded_by = serializers.SerializerMethodField()

    class Meta:
        model = QuotationResponse
        fields = [
            'id', 'version_id', 'response_number', 'overall_status', 'response_date',
            'customer_contact_person', 'communication_method', 'overall_comments',
            'requested_delivery_date', 'payment_terms_requested', 'special_instructions',
            'recorded_by', 'created_at', 'item_count', 'items'
        ]
        read_only_fields = fields

    def get_item_count(self, obj):
        return len(obj.items.all())

    def get_recorded_by(self, obj):
        return _username(obj.recorded_by)


class SkuNegotiationHistorySerializer(serializers.ModelSerializer):
    """Serializer for SkuNegotiationHistory model"""
    sku = serializers.CharField(source='catalog_item.sku', read_only=True)
    entered_by = serializers.SerializerMethodField()

    class Meta:
        model = SkuNegotiationHistory
        fields = [
            'id', 'inquiry_id', 'catalog_item_id', 'sku', 'version_id', 'communication_id',
            'change_type', 'old_quantity', 'new_quantity', 'old_unit_price', 'new_unit_price',
            'changed_by', 'change_reason', 'entered_by', 'created_at'
        ]
        read_only_fields = fields

    def get_entered_by(self, obj):
        return _username(obj.entered_by)


class CommunicationSerializer(serializers.ModelSerializer):
    """Serializer for NegotiationCommunication model"""
    entered_by = serializers.SerializerMethodField()

    class Meta:
        model = NegotiationCommunication
        fields = [
            'id', 'inquiry_id', 'version_id', 'communication_type', 'direction',
            'subject', 'content', 'contact_person', 'communication_date',
            'follow_up_required', 'follow_up_date', 'follow_up_completed',
            'follow_up_completed_at', 'entered_by', 'created_at'
        ]
        read_only_fields = fields

    def get_entered_by(self, obj):
        return _username(obj.entered_by)


class SkuHistoryGroupSerializer(serializers.Serializer):
    """One catalog item's history within the ledger view"""
    catalog_item_id = serializers.IntegerField(source='catalog_item.id')
    sku = serializers.CharField(source='catalog_item.sku')
    change_count = serializers.IntegerField()
    changes = SkuNegotiationHistorySerializer(many=True)


class NegotiationSummarySerializer(serializers.Serializer):
    inquiry_id = serializers.IntegerField()
    rfq_number = serializers.CharField()
    status = serializers.CharField()
    currency = serializers.CharField()
    total_versions = serializers.IntegerField()
    latest_version_number = serializers.IntegerField(allow_null=True)
    latest_final_price = serializers.DecimalField(max_digits=14, decimal_places=2, allow_null=True)
    total_communications = serializers.IntegerField()
    total_sku_changes = serializers.IntegerField()
    renegotiated_items = serializers.IntegerField()
    pending_follow_ups = serializers.IntegerField()
    last_communication_date = serializers.DateTimeField(allow_null=True)
    negotiation_duration_days = serializers.IntegerField()
