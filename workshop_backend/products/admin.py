# products/admin.py
"""
Admin rules:

- Product.stock is derived from the inventory ledger and is read-only here.
  Stock is loaded through inventory receipts, never typed in.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product, Service


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "unit_price", "stock", "is_active")
    list_filter = ("is_active",)
    search_fields = ("code", "name")
    readonly_fields = ("stock", "created_at", "updated_at")


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "base_price", "min_time", "max_time", "time_unit", "is_active")
    list_filter = ("is_active", "time_unit")
    search_fields = ("code", "name")
