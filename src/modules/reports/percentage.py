from decimal import ROUND_HALF_UP, Decimal

from src.modules.reports.schemas import Denominator, MetricSet

ZERO_PERCENT = "0.00%"


def format_percentage(value: Decimal | float | int) -> str:
    """
    Format a 0-100 rate to 2 decimal places (ROUND_HALF_UP) with a trailing '%'.

    Floats are read through their shortest repr, so 1.005 rounds to '1.01%'
    (binary rounding would give '1.00%').

    Examples:
        >>> format_percentage(50)
        '50.00%'
        >>> format_percentage(33.335)
        '33.34%'
    """
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)}%"


def resolve_percentage(metrics: MetricSet, denominator: Denominator) -> str:
    """
    Percentage for one cell or row of any report shape.

    Uses the backend's `porcentaje` when present, otherwise titulados / denominator * 100.
    A zero denominator or missing titulados gives "0.00%", the same as a real 0% rate.
    """
    if metrics.porcentaje is not None:
        return format_percentage(metrics.porcentaje)
    denominator_value = metrics.count(denominator.value)
    if denominator_value > 0 and metrics.titulados:
        return format_percentage(Decimal(metrics.titulados) / Decimal(denominator_value) * 100)
    return ZERO_PERCENT

