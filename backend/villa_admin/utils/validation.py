import re
from datetime import date
from typing import List, Optional

from villa_admin.core.constants import ADMIN_MAX_GUESTS, MAX_STAY_DAYS

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[6-9]\d{9}$")
NAME_RE = re.compile(r"^[A-Za-z\s]{2,50}$")


def clean_phone(phone: str) -> str:
    digits = re.sub(r"\D", "", phone or "")
    # Accept numbers written with the +91 country code.
    if len(digits) == 12 and digits.startswith("91"):
        digits = digits[2:]
    return digits


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match((email or "").strip()))


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.match(clean_phone(phone)))


def is_valid_name(name: str) -> bool:
    return bool(NAME_RE.match((name or "").strip()))


def validate_stay_dates(
    check_in: date,
    check_out: date,
    allow_past: bool = False,
    today: Optional[date] = None,
) -> List[str]:
    errors = []
    today = today or date.today()

    if not allow_past and check_in < today:
        errors.append("Check-in date cannot be in the past")

    if check_out <= check_in:
        errors.append("Check-out date must be after check-in date")
    elif (check_out - check_in).days > MAX_STAY_DAYS:
        errors.append(f"Maximum stay duration is {MAX_STAY_DAYS} days")

    return errors


def validate_guest_count(guests: int, max_guests: int = ADMIN_MAX_GUESTS) -> List[str]:
    if guests < 1:
        return ["At least 1 guest is required"]
    if guests > max_guests:
        return [f"Maximum {max_guests} guests allowed"]
    return []


def validate_advance(advance: float, total: float) -> List[str]:
    if advance < 0:
        return ["Advance amount cannot be negative"]
    if advance > total:
        return ["Advance amount cannot exceed total amount"]
    return []


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower())
    return slug.strip("-")
