# orders/admin.py

"""
Admin is read-mostly for work orders.

Lines, reservations and payments are written only through the order
services (they move stock and money), so they are shown read-only.
"""

from django.contrib import admin

from orders.models import OrderPayment, Task, WorkOrder, WorkOrderLine, WorkOrderWorker


class WorkOrderLineInline(admin.TabularInline):
    model = WorkOrderLine
    extra = 0
    can_delete = False
    fields = ("service", "product", "quantity", "unit_price", "discount", "total", "warehouse", "location")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class WorkOrderWorkerInline(admin.TabularInline):
    model = WorkOrderWorker
    extra = 0
    readonly_fields = ("assigned_at",)


class OrderPaymentInline(admin.TabularInline):
    model = OrderPayment
    extra = 0
    can_delete = False
    readonly_fields = ("amount", "method", "reference", "received_by", "created_at")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(WorkOrder)
class WorkOrderAdmin(admin.ModelAdmin):
    list_display = ("code", "customer", "vehicle", "status", "priority", "payment_status", "total", "is_active", "created_at")
    list_filter = ("status", "priority", "payment_status", "is_active")
    search_fields = ("code", "vehicle__plate", "customer__first_name", "customer__last_name")
    readonly_fields = (
        "code",
        "subtotal",
        "tax",
        "total",
        "amount_paid",
        "payment_status",
        "started_at",
        "finished_at",
        "delivered_at",
        "delivered_by",
        "created_by",
        "created_at",
        "updated_at",
    )
    inlines = [WorkOrderLineInline, WorkOrderWorkerInline, OrderPaymentInline]

    def has_delete_permission(self, request, obj=None):
        # cancellation goes through the API so reservations are released
        return False


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ("id", "line", "worker", "status", "estimated_minutes", "started_at", "finished_at")
    list_filter = ("status",)
    search_fields = ("line__order__code",)
