import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a calculator: 0.5 always goes up, unlike Python's round()."""
    factor = 10 ** digits
    result = math.floor(value * factor + 0.5) / factor
    return int(result) if digits == 0 else result


def percentage(part: float, whole: float, digits: int = 0):
    if not whole:
        return 0
    return round_half_up(part / whole * 100, digits)
