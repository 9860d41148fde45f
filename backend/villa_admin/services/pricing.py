from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

from villa_admin.core.constants import TAX_RATE
from villa_admin.utils.numbers import round_half_up


@dataclass(frozen=True)
class PriceSnapshot:
    """Prices as they stood when the booking was made."""

    villa_name: str
    villa_price: float
    package_name: Optional[str]
    package_price: float
    nights: int
    safari_total: float
    subtotal: float
    taxes: float
    total: float

    def to_dict(self) -> dict:
        return asdict(self)

    def as_booking_fields(self) -> dict:
        fields = asdict(self)
        fields["total_amount"] = fields.pop("total")
        fields.pop("nights")
        return fields


def count_nights(check_in: date, check_out: date) -> int:
    return max((check_out - check_in).days, 0)


def calculate_price(
    villa_price: float,
    package_price: float,
    nights: int,
    villa_name: str = "",
    package_name: Optional[str] = None,
    safari_total: float = 0,
    tax_rate: float = TAX_RATE,
) -> PriceSnapshot:
    subtotal = nights * (villa_price + (package_price or 0)) + (safari_total or 0)
    taxes = round_half_up(subtotal * tax_rate)

    return PriceSnapshot(
        villa_name=villa_name,
        villa_price=villa_price,
        package_name=package_name,
        package_price=package_price or 0,
        nights=nights,
        safari_total=safari_total or 0,
        subtotal=subtotal,
        taxes=taxes,
        total=subtotal + taxes,
    )


def snapshot_for(villa, package, check_in: date, check_out: date, safari_total: float = 0) -> PriceSnapshot:
    return calculate_price(
        villa_price=villa.base_price,
        package_price=package.price if package else 0,
        nights=count_nights(check_in, check_out),
        villa_name=villa.name,
        package_name=package.name if package else None,
        safari_total=safari_total,
    )


def calculate_remaining(total: float, advance: float) -> float:
    return max(0, (total or 0) - (advance or 0))


def payment_status_for(total: float, advance: float, current: str = "pending") -> str:
    """
    Payment status implied by an advance. Statuses set by the gateway or
    by a refund are left alone, and a paid booking stays paid while its
    advance still covers the total.
    """
    if current not in ("pending", "advance_paid", "paid"):
        return current

    remaining = calculate_remaining(total, advance)
    return (
        "paid" if remaining == 0 and (advance or current == "paid")
        else "advance_paid" if advance and advance > 0
        else "pending" if current == "advance_paid"
        else current
    )
