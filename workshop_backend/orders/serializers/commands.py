# orders/serializers/commands.py

"""
Write-side input serializers.

They document ONLY what the client is allowed to send and check shape.
Business validation (references, stock, modes, transitions) belongs to
the order services, which report it with stable error codes.
"""

from rest_framework import serializers

from orders.models import WorkOrder


class OrderItemInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField(help_text="Product or service id")
    type = serializers.ChoiceField(
        choices=["producto", "servicio"],
        required=False,
        help_text="Declared item type. When omitted, an active service wins over a product.",
    )
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        required=False,
        help_text="Defaults to the catalog price",
    )
    discount = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        required=False,
        help_text="Percent, 0-100",
    )
    warehouse_id = serializers.IntegerField(required=False, allow_null=True)
    location_id = serializers.IntegerField(required=False, allow_null=True)
    service_ref = serializers.IntegerField(
        required=False,
        allow_null=True,
        help_text="Service id (of this same order) the part is consumed by",
    )


class CreateOrderInputSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    vehicle_id = serializers.IntegerField()
    principal_worker_id = serializers.IntegerField(required=False, allow_null=True)
    secondary_worker_ids = serializers.ListField(
        child=serializers.IntegerField(),
        required=False,
    )
    priority = serializers.ChoiceField(
        choices=WorkOrder.Priority.choices,
        required=False,
    )
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    mode = serializers.ChoiceField(
        choices=WorkOrder.Mode.choices,
        required=False,
    )
    estimated_finish = serializers.DateTimeField(required=False, allow_null=True)
    items = OrderItemInputSerializer(many=True, allow_empty=False)


class PaymentInputSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    method = serializers.CharField(max_length=32, required=False, allow_blank=True)
    reference = serializers.CharField(max_length=120, required=False, allow_blank=True, allow_null=True)


class UpdateOrderInputSerializer(serializers.Serializer):
    status = serializers.CharField(required=False, help_text="Target lifecycle state")
    priority = serializers.ChoiceField(choices=WorkOrder.Priority.choices, required=False)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True)
    estimated_finish = serializers.DateTimeField(
        required=False,
        allow_null=True,
        help_text="Explicit null clears the estimate",
    )
    assign_worker = serializers.IntegerField(required=False, help_text="New principal worker id")
    add_workers = serializers.ListField(child=serializers.IntegerField(), required=False)
    remove_workers = serializers.ListField(child=serializers.IntegerField(), required=False)
    generate_missing_tasks = serializers.BooleanField(required=False)
    payment = PaymentInputSerializer(required=False, allow_null=True)
    vehicle_id = serializers.IntegerField(required=False)
    items = OrderItemInputSerializer(many=True, required=False, allow_empty=False)
