from __future__ import annotations

import math
from typing import Any, Iterable, List, Mapping, Optional

from agreements.models import BillingFrequency, CostBreakdown, CostItem
from telemetry.logging_utils import get_logger

logger = get_logger(__name__)


def to_number(value: Any) -> Optional[float]:
    """Read an int, float or numeric string; ``None`` for anything else, NaN and infinities included."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value) if isinstance(value, (int, float)) else float(str(value).replace(",", "").strip())
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def monthly_equivalent(cost: float, frequency: BillingFrequency) -> float:
    months = frequency.months_per_charge
    if months is None:
        return 0.0
    return cost / months


def calculate_total_costs(
    rent_amount: Any,
    maintenance_charges: Any = 0,
    additional_services: Optional[Iterable[Mapping[str, Any]]] = None,
) -> CostBreakdown:
    rent = to_number(rent_amount) or 0.0
    maintenance = to_number(maintenance_charges) or 0.0

    breakdown: List[CostItem] = [CostItem(item="Rent", amount=rent, frequency=BillingFrequency.MONTHLY.value)]
    monthly_total = rent

    if maintenance > 0:
        breakdown.append(
            CostItem(item="Maintenance Charges", amount=maintenance, frequency=BillingFrequency.MONTHLY.value)
        )
        monthly_total += maintenance

    for service in additional_services or []:
        service = service if isinstance(service, Mapping) else {}
        name = service.get("serviceName") or "Additional Service"
        cost = to_number(service.get("cost"))
        if cost is None:
            logger.warning("service_cost_unreadable", extra={"service": name, "cost": str(service.get("cost"))})
            cost = 0.0
        label = service.get("billingFrequency") or BillingFrequency.MONTHLY.value
        frequency = BillingFrequency.lookup(label)
        if frequency is None:
            logger.warning("billing_frequency_ambiguous", extra={"service": name, "billing_frequency": str(label)})
            frequency = BillingFrequency.MONTHLY

        breakdown.append(CostItem(item=str(name), amount=cost, frequency=str(label)))
        monthly_total += monthly_equivalent(cost, frequency)

    return CostBreakdown(monthly_total=monthly_total, yearly_total=monthly_total * 12, breakdown=breakdown)
