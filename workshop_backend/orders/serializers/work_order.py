# orders/serializers/work_order.py

from rest_framework import serializers

from orders.models import OrderPayment, Task, WorkOrder, WorkOrderLine, WorkOrderWorker
from orders.services.progress import compute_progress


class TaskSerializer(serializers.ModelSerializer):
    worker_name = serializers.CharField(source="worker.full_name", read_only=True, default=None)

    class Meta:
        model = Task
        fields = [
            "id",
            "line",
            "worker",
            "worker_name",
            "status",
            "estimated_minutes",
            "actual_minutes",
            "started_at",
            "finished_at",
        ]
        read_only_fields = fields


class WorkOrderLineSerializer(serializers.ModelSerializer):
    """
    Order line (read-only).
    Service lines carry their task; product lines carry their bucket.
    """

    type = serializers.CharField(source="item_type", read_only=True)
    item_name = serializers.SerializerMethodField()
    task = serializers.SerializerMethodField()

    class Meta:
        model = WorkOrderLine
        fields = [
            "id",
            "type",
            "service",
            "product",
            "item_name",
            "warehouse",
            "location",
            "service_line",
            "quantity",
            "unit_price",
            "discount",
            "total",
            "min_minutes",
            "max_minutes",
            "task",
        ]
        read_only_fields = fields

    def get_item_name(self, obj):
        item = obj.service if obj.service_id else obj.product
        return getattr(item, "name", None)

    def get_task(self, obj):
        if not obj.service_id:
            return None
        task = getattr(obj, "task", None)
        return TaskSerializer(task).data if task else None


class WorkOrderWorkerSerializer(serializers.ModelSerializer):
    worker_name = serializers.CharField(source="worker.full_name", read_only=True)

    class Meta:
        model = WorkOrderWorker
        fields = ["id", "worker", "worker_name", "role", "assigned_at"]
        read_only_fields = fields


class OrderPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderPayment
        fields = ["id", "amount", "method", "reference", "received_by", "created_at"]
        read_only_fields = fields


class WorkOrderListSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.full_name", read_only=True)
    vehicle_plate = serializers.CharField(source="vehicle.plate", read_only=True)
    principal_worker_name = serializers.CharField(
        source="principal_worker.full_name",
        read_only=True,
        default=None,
    )
    progress = serializers.SerializerMethodField()

    class Meta:
        model = WorkOrder
        fields = [
            "id",
            "code",
            "customer",
            "customer_name",
            "vehicle",
            "vehicle_plate",
            "principal_worker",
            "principal_worker_name",
            "status",
            "priority",
            "payment_status",
            "total",
            "estimated_finish",
            "created_at",
            "progress",
        ]
        read_only_fields = fields

    def get_progress(self, obj):
        return compute_progress(obj)


class WorkOrderSerializer(WorkOrderListSerializer):
    lines = WorkOrderLineSerializer(many=True, read_only=True)
    roster = WorkOrderWorkerSerializer(many=True, read_only=True)
    payments = OrderPaymentSerializer(many=True, read_only=True)

    class Meta(WorkOrderListSerializer.Meta):
        fields = WorkOrderListSerializer.Meta.fields + [
            "mode",
            "notes",
            "subtotal",
            "tax",
            "amount_paid",
            "min_duration_minutes",
            "max_duration_minutes",
            "started_at",
            "finished_at",
            "delivered_at",
            "delivered_by",
            "created_by",
            "is_active",
            "updated_at",
            "lines",
            "roster",
            "payments",
        ]
        read_only_fields = fields
