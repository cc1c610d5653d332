# orders/services/pricing.py

"""
WORK ORDER VALIDATION & PRICING

PURPOSE:
- Resolve everything a create / edit request references (customer, vehicle,
  workers, warehouse, products, services) and reject the request before
  any write happens.
- Price every line and aggregate totals and duration estimates.

RULES:
- Item type: declared type wins; else active service; else active product;
  else the line is rejected. Resolved once per line, nowhere else.
- quantity: positive integer (int or digit string)
- discount: within [0, 100]
- unit price: >= 0
- "solo_servicios" mode rejects product lines outright.
- Product lines need product.stock >= quantity and a warehouse
  (explicit or the default one).
- line total = quantity * price * (1 - discount / 100)
- tax = subtotal * WORK_ORDER_TAX_RATE, total = subtotal + tax
- At most one product line per referenced service (first violation fails).

GUARANTEES:
- No database writes. Read-only lookups only.
- Money is Decimal, 2dp, ROUND_HALF_UP per line and per aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings

from inventory.models import Warehouse
from inventory.services.exceptions import InvalidLocationError
from inventory.services.ledger import resolve_bucket_scope
from orders.models import WorkOrder, WorkOrderLine
from orders.services.exceptions import (
    BusinessRuleError,
    OrderValidationError,
    ReferenceUnavailableError,
)
from products.models import Product, Service
from workshop.models import Customer, Vehicle, Worker

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")

TYPE_PRODUCT = WorkOrderLine.TYPE_PRODUCT
TYPE_SERVICE = WorkOrderLine.TYPE_SERVICE


# ============================================================
# NORMALIZERS
# ============================================================

def money(value) -> Decimal:
    return Decimal(str(value or "0")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def tax_rate() -> Decimal:
    return Decimal(str(getattr(settings, "WORK_ORDER_TAX_RATE", "0.18")))


def compute_tax_and_total(subtotal) -> tuple[Decimal, Decimal]:
    sub = money(subtotal)
    tax = money(sub * tax_rate())
    return tax, money(sub + tax)


def to_positive_int(value) -> int | None:
    """
    Id / quantity normalizer.
    Accepts positive ints or digit strings; anything else is None.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        s = value.strip()
        if s.isdigit() and int(s) > 0:
            return int(s)
    return None


def _to_decimal(value, *, default=None) -> Decimal | None:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return None
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not d.is_finite():
        return None
    return d


# ============================================================
# RESULT TYPES
# ============================================================

@dataclass(frozen=True)
class PricedLine:
    item_type: str
    item_id: int
    quantity: int
    unit_price: Decimal
    discount: Decimal
    total: Decimal
    product: Product | None = None
    service: Service | None = None
    warehouse_id: int | None = None
    location_id: int | None = None
    service_ref: int | None = None
    min_minutes: int | None = None
    max_minutes: int | None = None

    @property
    def is_service(self) -> bool:
        return self.item_type == TYPE_SERVICE


@dataclass(frozen=True)
class PricedLines:
    lines: tuple[PricedLine, ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    min_minutes: int
    max_minutes: int
    default_warehouse_id: int

    @property
    def service_lines(self) -> tuple[PricedLine, ...]:
        return tuple(line for line in self.lines if line.is_service)

    @property
    def product_lines(self) -> tuple[PricedLine, ...]:
        return tuple(line for line in self.lines if not line.is_service)

    def estimate_finish(self, *, now: datetime) -> datetime | None:
        if self.max_minutes > 0:
            return now + timedelta(minutes=self.max_minutes)
        return None


@dataclass(frozen=True)
class ValidatedOrder:
    customer: Customer
    vehicle: Vehicle
    principal_worker: Worker | None
    secondary_workers: tuple[Worker, ...]
    mode: str
    priced: PricedLines


# ============================================================
# REFERENCE RESOLUTION
# ============================================================

def resolve_customer_and_vehicle(*, customer_id, vehicle_id) -> tuple[Customer, Vehicle]:
    cid = to_positive_int(customer_id)
    vid = to_positive_int(vehicle_id)
    if not cid or not vid:
        raise OrderValidationError(
            "Invalid customer or vehicle",
            code="invalid_customer_or_vehicle",
            details={"customer_id": customer_id, "vehicle_id": vehicle_id},
        )

    customer = Customer.objects.filter(pk=cid).first()
    if customer is None or not customer.is_active:
        raise ReferenceUnavailableError(
            "Customer does not exist or is inactive",
            code="customer_unavailable",
            details={"customer_id": cid},
        )

    vehicle = resolve_vehicle(vehicle_id=vid, customer=customer)
    return customer, vehicle


def resolve_vehicle(*, vehicle_id, customer) -> Vehicle:
    vid = to_positive_int(vehicle_id)
    vehicle = Vehicle.objects.filter(pk=vid).first() if vid else None
    if vehicle is None or vehicle.customer_id != customer.pk:
        raise ReferenceUnavailableError(
            "Vehicle does not belong to the selected customer",
            code="vehicle_mismatch",
            details={"vehicle_id": vehicle_id, "customer_id": customer.pk},
        )
    return vehicle


def resolve_worker(worker_id, *, field_name: str = "worker_id") -> Worker:
    wid = to_positive_int(worker_id)
    worker = Worker.objects.filter(pk=wid).first() if wid else None
    if worker is None or not worker.is_active:
        raise ReferenceUnavailableError(
            "Selected worker is not available",
            code="worker_unavailable",
            details={field_name: worker_id},
        )
    return worker


def resolve_workers(worker_ids, *, field_name: str) -> tuple[Worker, ...]:
    """Resolve a list of worker ids, dropping duplicates but keeping order."""
    seen = set()
    workers = []
    for raw in worker_ids or []:
        worker = resolve_worker(raw, field_name=field_name)
        if worker.pk in seen:
            continue
        seen.add(worker.pk)
        workers.append(worker)
    return tuple(workers)


def default_warehouse_id() -> int | None:
    """First active warehouse; product lines without an explicit one land here."""
    return Warehouse.objects.filter(is_active=True).order_by("id").values_list("id", flat=True).first()


# ============================================================
# ITEM TYPE (tagged union: product | service)
# ============================================================

@dataclass(frozen=True)
class Catalogs:
    products: dict
    services: dict


def load_catalogs(item_ids) -> Catalogs:
    ids = sorted({i for i in item_ids if i})
    return Catalogs(
        products={p.id: p for p in Product.objects.filter(id__in=ids)},
        services={s.id: s for s in Service.objects.filter(id__in=ids)},
    )


def resolve_item(*, item_id: int, declared_type, catalogs: Catalogs):
    """
    Disambiguate an id that may exist in both catalogs.
    Returns (item_type, product, service).
    """
    product = catalogs.products.get(item_id)
    service = catalogs.services.get(item_id)

    if declared_type == TYPE_PRODUCT:
        if product is None or not product.is_active:
            raise ReferenceUnavailableError(
                f"Product {item_id} is not available",
                code="product_unavailable",
                details={"item_id": item_id},
            )
        return TYPE_PRODUCT, product, None

    if declared_type == TYPE_SERVICE:
        if service is None or not service.is_active:
            raise ReferenceUnavailableError(
                f"Service {item_id} is not available",
                code="service_unavailable",
                details={"item_id": item_id},
            )
        return TYPE_SERVICE, None, service

    if declared_type not in (None, ""):
        raise OrderValidationError(
            f"Unknown item type '{declared_type}'",
            code="invalid_item_type",
            details={"item_id": item_id, "type": declared_type},
        )

    if service is not None and service.is_active:
        return TYPE_SERVICE, None, service
    if product is not None and product.is_active:
        return TYPE_PRODUCT, product, None

    raise ReferenceUnavailableError(
        f"Item {item_id} is not available",
        code="item_unavailable",
        details={"item_id": item_id},
    )


# ============================================================
# LINE VALIDATION
# ============================================================

def price_line(raw: dict, *, services_only: bool, catalogs: Catalogs, default_warehouse_id: int) -> PricedLine:
    item_id = to_positive_int(raw.get("item_id"))
    if not item_id:
        raise OrderValidationError(
            "Invalid product/service id",
            code="invalid_item_id",
            details={"item_id": raw.get("item_id")},
        )

    item_type, product, service = resolve_item(
        item_id=item_id,
        declared_type=raw.get("type"),
        catalogs=catalogs,
    )
    name = product.name if product else service.name

    if services_only and item_type == TYPE_PRODUCT:
        raise BusinessRuleError(
            "Service-only mode: products are not allowed on this order",
            code="products_not_allowed",
            details={"item_id": item_id},
        )

    quantity = to_positive_int(raw.get("quantity"))
    if not quantity:
        raise OrderValidationError(
            f"Invalid quantity for item {item_id}",
            code="invalid_quantity",
            details={"item_id": item_id, "quantity": raw.get("quantity")},
        )

    default_price = product.unit_price if product else service.base_price
    unit_price = _to_decimal(raw.get("unit_price"), default=default_price)
    if unit_price is None or unit_price < ZERO:
        raise OrderValidationError(
            f"Invalid unit price for {name}",
            code="invalid_price",
            details={"item_id": item_id, "unit_price": raw.get("unit_price")},
        )

    discount = _to_decimal(raw.get("discount"), default=ZERO)
    if discount is None or discount < ZERO or discount > HUNDRED:
        raise OrderValidationError(
            f"Invalid discount for {name}",
            code="invalid_discount",
            details={"item_id": item_id, "discount": raw.get("discount")},
        )

    total = money(Decimal(quantity) * unit_price * (1 - discount / HUNDRED))

    if item_type == TYPE_SERVICE:
        return PricedLine(
            item_type=TYPE_SERVICE,
            item_id=item_id,
            service=service,
            quantity=quantity,
            unit_price=money(unit_price),
            discount=money(discount),
            total=total,
            min_minutes=service.min_minutes * quantity,
            max_minutes=service.max_minutes * quantity,
        )

    if int(product.stock or 0) < quantity:
        raise BusinessRuleError(
            f"Insufficient stock for {product.name}. Available: {product.stock}",
            code="insufficient_stock",
            details={"item_id": item_id, "requested": quantity, "available": product.stock},
        )

    raw_warehouse = raw.get("warehouse_id")
    warehouse_id = to_positive_int(raw_warehouse) if raw_warehouse not in (None, "") else default_warehouse_id
    if not warehouse_id:
        raise OrderValidationError(
            f"A valid warehouse is required for product {product.name}",
            code="invalid_warehouse",
            details={"item_id": item_id, "warehouse_id": raw_warehouse},
        )

    raw_location = raw.get("location_id")
    location_id = None
    if raw_location not in (None, ""):
        location_id = to_positive_int(raw_location)
        if not location_id:
            raise OrderValidationError(
                f"Invalid location for product {product.name}",
                code="invalid_location",
                details={"item_id": item_id, "location_id": raw_location},
            )

    try:
        resolve_bucket_scope(warehouse=warehouse_id, location=location_id)
    except InvalidLocationError as exc:
        raise ReferenceUnavailableError(exc.message, code=exc.code, details=exc.details) from exc

    raw_ref = raw.get("service_ref")
    service_ref = None
    if raw_ref not in (None, ""):
        service_ref = to_positive_int(raw_ref)
        if not service_ref:
            raise OrderValidationError(
                "Invalid service reference",
                code="invalid_service_ref",
                details={"item_id": item_id, "service_ref": raw_ref},
            )

    return PricedLine(
        item_type=TYPE_PRODUCT,
        item_id=item_id,
        product=product,
        quantity=quantity,
        unit_price=money(unit_price),
        discount=money(discount),
        total=total,
        warehouse_id=warehouse_id,
        location_id=location_id,
        service_ref=service_ref,
    )


def check_service_refs(lines) -> None:
    """
    Every service_ref must name a service line of the same request and
    each service line can own at most one product line.
    """
    service_ids = {line.item_id for line in lines if line.is_service}
    claimed = set()

    for line in lines:
        if line.is_service or not line.service_ref:
            continue

        if line.service_ref not in service_ids:
            raise OrderValidationError(
                f"Service reference {line.service_ref} does not match any service line of this order",
                code="invalid_service_ref",
                details={"item_id": line.item_id, "service_ref": line.service_ref},
            )

        if line.service_ref in claimed:
            raise BusinessRuleError(
                f"Each service can have 0 or 1 associated product (service {line.service_ref})",
                code="duplicate_service_product",
                details={"service_ref": line.service_ref},
            )
        claimed.add(line.service_ref)


def price_lines(*, items, mode: str) -> PricedLines:
    if not items:
        raise OrderValidationError(
            "At least one item is required",
            code="items_required",
        )

    if mode not in WorkOrder.Mode.values:
        raise OrderValidationError(
            f"Unknown order mode '{mode}'",
            code="invalid_mode",
            details={"mode": mode},
        )

    fallback_warehouse_id = default_warehouse_id()
    if fallback_warehouse_id is None:
        raise BusinessRuleError(
            "No active warehouse configured",
            code="no_active_warehouse",
        )

    catalogs = load_catalogs(to_positive_int(raw.get("item_id")) for raw in items)
    services_only = mode == WorkOrder.Mode.SERVICES_ONLY

    lines = []
    subtotal = ZERO
    min_total = 0
    max_total = 0

    for raw in items:
        line = price_line(
            raw,
            services_only=services_only,
            catalogs=catalogs,
            default_warehouse_id=fallback_warehouse_id,
        )
        lines.append(line)
        subtotal += line.total
        if line.is_service:
            min_total += line.min_minutes or 0
            max_total += line.max_minutes or 0

    check_service_refs(lines)

    subtotal = money(subtotal)
    tax, total = compute_tax_and_total(subtotal)

    return PricedLines(
        lines=tuple(lines),
        subtotal=subtotal,
        tax=tax,
        total=total,
        min_minutes=min_total,
        max_minutes=max_total,
        default_warehouse_id=fallback_warehouse_id,
    )


# ============================================================
# ORDER-LEVEL VALIDATION
# ============================================================

def validate_order_payload(
    *,
    customer_id,
    vehicle_id,
    items,
    principal_worker_id=None,
    secondary_worker_ids=None,
    mode: str | None = None,
) -> ValidatedOrder:
    """
    Full create-time validation. Raises before any write on the first
    failing rule.
    """
    customer, vehicle = resolve_customer_and_vehicle(
        customer_id=customer_id,
        vehicle_id=vehicle_id,
    )

    principal = None
    if principal_worker_id not in (None, ""):
        principal = resolve_worker(principal_worker_id, field_name="principal_worker_id")

    secondaries = resolve_workers(secondary_worker_ids, field_name="secondary_worker_ids")

    mode = mode or WorkOrder.Mode.SERVICES_AND_PRODUCTS
    priced = price_lines(items=items, mode=mode)

    return ValidatedOrder(
        customer=customer,
        vehicle=vehicle,
        principal_worker=principal,
        secondary_workers=secondaries,
        mode=mode,
        priced=priced,
    )
