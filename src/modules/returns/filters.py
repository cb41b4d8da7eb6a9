import django_filters

from modules.returns.constants import SlipStatus
from modules.returns.models import DriverSlip, MerchantSlip


class DriverSlipFilter(django_filters.FilterSet):
    driver_name = django_filters.CharFilter(field_name="driver_name", lookup_expr="exact")
    start_date = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = DriverSlip
        fields = ["driver_name", "start_date", "end_date"]


class MerchantSlipFilter(django_filters.FilterSet):
    merchant_name = django_filters.CharFilter(
        field_name="merchant_name", lookup_expr="exact"
    )
    status = django_filters.ChoiceFilter(choices=SlipStatus.choices)
    start_date = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = MerchantSlip
        fields = ["merchant_name", "status", "start_date", "end_date"]
