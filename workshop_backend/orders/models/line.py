# orders/models/line.py

"""
WORK ORDER LINE

Either a service line (service set) or a product line (product +
warehouse, optional location). Never both.

A product line may point at one service line of the same order
(service_line): "this part was consumed while performing that service".
At most one product line per service line (OneToOne).

Lines are immutable once created; edits replace the whole line set.
"""

from decimal import Decimal

from django.db import models
from django.db.models import Q

from inventory.models import Location, Warehouse
from products.models import Product, Service

from .work_order import WorkOrder


class WorkOrderLine(models.Model):
    TYPE_PRODUCT = "producto"
    TYPE_SERVICE = "servicio"

    order = models.ForeignKey(
        WorkOrder,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    service = models.ForeignKey(
        Service,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order_lines",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order_lines",
    )

    warehouse = models.ForeignKey(
        Warehouse,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order_lines",
    )
    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order_lines",
    )

    service_line = models.OneToOneField(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="consumed_product_line",
    )

    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    discount = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2)

    # Duration bounds (service lines only), already multiplied by quantity
    min_minutes = models.PositiveIntegerField(null=True, blank=True)
    max_minutes = models.PositiveIntegerField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(service__isnull=False, product__isnull=True)
                    | Q(service__isnull=True, product__isnull=False)
                ),
                name="chk_order_line_service_xor_product",
            ),
            models.CheckConstraint(
                condition=Q(quantity__gt=0),
                name="chk_order_line_quantity_gt_zero",
            ),
            models.CheckConstraint(
                condition=Q(discount__gte=0) & Q(discount__lte=100),
                name="chk_order_line_discount_range",
            ),
        ]

    @property
    def item_type(self) -> str:
        return self.TYPE_SERVICE if self.service_id else self.TYPE_PRODUCT

    @property
    def is_service(self) -> bool:
        return self.service_id is not None

    def __str__(self):
        item = self.service if self.service_id else self.product
        return f"{self.order.code} | {item} x{self.quantity}"
