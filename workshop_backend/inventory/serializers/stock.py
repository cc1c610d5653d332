# inventory/serializers/stock.py

from rest_framework import serializers

from inventory.models import StockLevel, StockMovement, StockReservation


class StockLevelSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    warehouse_code = serializers.CharField(source="warehouse.code", read_only=True)
    location_code = serializers.CharField(source="location.code", read_only=True, default=None)

    class Meta:
        model = StockLevel
        fields = [
            "id",
            "product",
            "product_name",
            "warehouse",
            "warehouse_code",
            "location",
            "location_code",
            "quantity_available",
            "quantity_committed",
            "updated_at",
        ]
        read_only_fields = fields


class StockReservationSerializer(serializers.ModelSerializer):
    order_code = serializers.CharField(source="order.code", read_only=True)

    class Meta:
        model = StockReservation
        fields = [
            "id",
            "order",
            "order_code",
            "line",
            "product",
            "warehouse",
            "location",
            "quantity",
            "status",
            "reason",
            "metadata",
            "created_at",
            "confirmed_at",
            "released_at",
        ]
        read_only_fields = fields


class StockMovementSerializer(serializers.ModelSerializer):
    class Meta:
        model = StockMovement
        fields = [
            "id",
            "product",
            "warehouse",
            "location",
            "reservation",
            "order",
            "movement_type",
            "reason",
            "quantity",
            "note",
            "created_at",
        ]
        read_only_fields = fields


class ReceiptInputSerializer(serializers.Serializer):
    """
    Stock receipt command.
    Quantities are whole units; the ledger service re-checks everything.
    """

    product_id = serializers.IntegerField()
    warehouse_id = serializers.IntegerField()
    location_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1)
    note = serializers.CharField(max_length=255, required=False, allow_blank=True)
