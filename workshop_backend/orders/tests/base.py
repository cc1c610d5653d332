# orders/tests/base.py

from decimal import Decimal

from workshop.tests.factories import (
    make_customer,
    make_service,
    make_user,
    make_vehicle,
    make_warehouse,
    make_worker,
    stocked_product,
)


class OrderFixturesMixin:
    """
    One customer with one vehicle, one worker, one warehouse,
    a 180.00 service and a 50.00 product with 10 units in stock.
    """

    def setUp(self):
        super().setUp()
        self.user = make_user("advisor", superuser=True)
        self.customer = make_customer()
        self.vehicle = make_vehicle(self.customer)
        self.worker = make_worker()
        self.warehouse = make_warehouse()
        self.service = make_service(base_price=Decimal("180.00"))
        self.product = stocked_product(warehouse=self.warehouse, quantity=10, unit_price=Decimal("50.00"))

    def payload(self, **overrides):
        data = {
            "customer_id": self.customer.id,
            "vehicle_id": self.vehicle.id,
            "items": [
                {"item_id": self.service.id, "type": "servicio", "quantity": 1},
                {
                    "item_id": self.product.id,
                    "type": "producto",
                    "quantity": 2,
                    "discount": "10",
                    "service_ref": self.service.id,
                },
            ],
        }
        data.update(overrides)
        return data
