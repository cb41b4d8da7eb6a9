import django_filters

from modules.settlements.constants import PaymentStatus
from modules.settlements.models import DriverPaymentSlip, MerchantPaymentSlip


class DriverPaymentSlipFilter(django_filters.FilterSet):
    driver_name = django_filters.CharFilter(field_name="driver_name", lookup_expr="exact")
    start_date = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = DriverPaymentSlip
        fields = ["driver_name", "start_date", "end_date"]


class MerchantPaymentSlipFilter(django_filters.FilterSet):
    merchant_name = django_filters.CharFilter(
        field_name="merchant_name", lookup_expr="exact"
    )
    status = django_filters.ChoiceFilter(choices=PaymentStatus.choices)
    start_date = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = MerchantPaymentSlip
        fields = ["merchant_name", "status", "start_date", "end_date"]
