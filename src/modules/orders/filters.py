import django_filters
from django.db.models import Q

from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(method="filter_status")
    driver = django_filters.CharFilter(field_name="driver", lookup_expr="exact")
    merchant = django_filters.CharFilter(field_name="merchant", lookup_expr="exact")
    city = django_filters.CharFilter(field_name="city", lookup_expr="iexact")
    unassigned = django_filters.BooleanFilter(field_name="driver", lookup_expr="isnull")
    start_date = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    search = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Order
        fields = [
            "status",
            "driver",
            "merchant",
            "city",
            "unassigned",
            "start_date",
            "end_date",
            "search",
        ]

    def filter_status(self, queryset, name, value):
        """Accepts a single code or a comma-separated list."""
        codes = [c.strip().upper() for c in value.split(",") if c.strip()]
        if not codes:
            return queryset
        return queryset.filter(status__in=codes)

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        query = (
            Q(recipient__icontains=value)
            | Q(phone__icontains=value)
            | Q(reference_number__icontains=value)
            | Q(address__icontains=value)
        )
        if value.isdigit():
            query |= Q(order_number=int(value))
        return queryset.filter(query)
