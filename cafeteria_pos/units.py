from __future__ import annotations

from decimal import Decimal

from .errors import UnitMismatch

# Factors convert to the base unit of each family: g, ml, pcs.
WEIGHT_UNITS = {
    "kg": Decimal("1000"),
    "g": Decimal("1"),
    "mg": Decimal("0.001"),
    "lb": Decimal("453.592"),
    "oz": Decimal("28.3495"),
}
VOLUME_UNITS = {
    "l": Decimal("1000"),
    "dl": Decimal("100"),
    "cl": Decimal("10"),
    "ml": Decimal("1"),
}
COUNT_UNITS = {
    "pcs": Decimal("1"),
    "pc": Decimal("1"),
    "ea": Decimal("1"),
    "unit": Decimal("1"),
    "units": Decimal("1"),
    "dozen": Decimal("12"),
}
UNIT_FAMILIES = (WEIGHT_UNITS, VOLUME_UNITS, COUNT_UNITS)

ALIASES = {
    "kgs": "kg",
    "grams": "g",
    "gram": "g",
    "liter": "l",
    "liters": "l",
    "litre": "l",
    "litres": "l",
    "piece": "pcs",
    "pieces": "pcs",
}


def normalize_unit(unit: str | None) -> str:
    if not unit:
        return ""
    cleaned = unit.strip().lower()
    return ALIASES.get(cleaned, cleaned)


def convert_quantity(amount: Decimal, from_unit: str | None, to_unit: str | None) -> Decimal:
    """Express ``amount`` of ``from_unit`` in ``to_unit``.

    A blank recipe unit means the amount is already in the stock unit.
    """
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    if not source or source == target:
        return amount
    for family in UNIT_FAMILIES:
        if source in family and target in family:
            return amount * family[source] / family[target]
    raise UnitMismatch(from_unit or "", to_unit or "")
