# orders/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from orders.views import WorkOrderViewSet

router = DefaultRouter()
router.register(r"", WorkOrderViewSet, basename="work-orders")

urlpatterns = [
    path("", include(router.urls)),
]
