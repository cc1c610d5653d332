# workshop/admin.py

from django.contrib import admin

from workshop.models import Customer, Vehicle, Worker


class VehicleInline(admin.TabularInline):
    model = Vehicle
    extra = 0


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("first_name", "last_name", "document_number", "phone", "is_active")
    list_filter = ("is_active",)
    search_fields = ("first_name", "last_name", "document_number")
    inlines = [VehicleInline]


@admin.register(Vehicle)
class VehicleAdmin(admin.ModelAdmin):
    list_display = ("plate", "brand", "model", "year", "customer")
    search_fields = ("plate", "customer__first_name", "customer__last_name")


@admin.register(Worker)
class WorkerAdmin(admin.ModelAdmin):
    list_display = ("full_name", "specialty", "user", "is_active")
    list_filter = ("is_active",)
    search_fields = ("full_name",)
