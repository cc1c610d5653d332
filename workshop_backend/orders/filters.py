# orders/filters.py

import django_filters
from django.db.models import Q

from orders.models import WorkOrder


class WorkOrderFilter(django_filters.FilterSet):
    """
    Listing filters for active work orders.

    ?status=en_proceso&priority=alta&payment_status=parcial
    ?worker=<id>            principal worker or roster member
    ?date_from=YYYY-MM-DD   created on or after
    ?date_to=YYYY-MM-DD     created on or before
    ?search=<text>          code, plate, customer name or document
    """

    status = django_filters.ChoiceFilter(choices=WorkOrder.Status.choices)
    priority = django_filters.ChoiceFilter(choices=WorkOrder.Priority.choices)
    payment_status = django_filters.ChoiceFilter(choices=WorkOrder.PaymentStatus.choices)
    worker = django_filters.NumberFilter(method="filter_worker")
    date_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = WorkOrder
        fields = ["status", "priority", "payment_status", "customer", "vehicle"]

    def filter_worker(self, queryset, name, value):
        return queryset.filter(
            Q(principal_worker_id=value) | Q(roster__worker_id=value)
        ).distinct()

    def filter_search(self, queryset, name, value):
        term = (value or "").strip()
        if not term:
            return queryset
        return queryset.filter(
            Q(code__icontains=term)
            | Q(vehicle__plate__icontains=term)
            | Q(customer__first_name__icontains=term)
            | Q(customer__last_name__icontains=term)
            | Q(customer__document_number__icontains=term)
        )
