# inventory/admin.py

"""
Ledger rows are written only by inventory services.
Warehouses and locations are plain master data.
"""

from django.contrib import admin

from inventory.models import (
    LegacyStock,
    Location,
    StockLevel,
    StockMovement,
    StockReservation,
    Warehouse,
)


class LocationInline(admin.TabularInline):
    model = Location
    extra = 0


@admin.register(Warehouse)
class WarehouseAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "is_active")
    search_fields = ("code", "name")
    inlines = [LocationInline]


class ReadOnlyLedgerAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockLevel)
class StockLevelAdmin(ReadOnlyLedgerAdmin):
    list_display = ("product", "warehouse", "location", "quantity_available", "quantity_committed", "updated_at")
    list_filter = ("warehouse",)
    search_fields = ("product__code", "product__name")


@admin.register(LegacyStock)
class LegacyStockAdmin(ReadOnlyLedgerAdmin):
    list_display = ("product", "quantity_available")


@admin.register(StockReservation)
class StockReservationAdmin(ReadOnlyLedgerAdmin):
    list_display = ("id", "order", "product", "warehouse", "quantity", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("order__code", "product__code")


@admin.register(StockMovement)
class StockMovementAdmin(ReadOnlyLedgerAdmin):
    list_display = ("created_at", "product", "movement_type", "reason", "quantity", "order")
    list_filter = ("movement_type", "reason")
    search_fields = ("product__code", "order__code")
