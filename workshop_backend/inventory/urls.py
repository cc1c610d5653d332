# inventory/urls.py

from django.urls import path

from inventory.views import (
    ReservationListView,
    StockLevelListView,
    StockMovementListView,
    StockReceiptView,
)

urlpatterns = [
    path("receipts/", StockReceiptView.as_view(), name="inventory-receipts"),
    path("levels/", StockLevelListView.as_view(), name="inventory-levels"),
    path("reservations/", ReservationListView.as_view(), name="inventory-reservations"),
    path("movements/", StockMovementListView.as_view(), name="inventory-movements"),
]
