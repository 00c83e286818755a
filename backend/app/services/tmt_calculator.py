"""
TMT bar weight conversion.

Standard formula: weight (kg) = (d² / 162) × length (m) × pieces
where d is the bar diameter in mm.

Only the diameters in TMT_WEIGHTS_PER_METER are converted. Anything else
passes through unconverted (no guessing for odd sizes).
"""
import re
from typing import Optional

# kg per meter for the diameters the shop stocks
TMT_WEIGHTS_PER_METER = {
    6: 0.222,
    8: 0.395,
    10: 0.617,
    12: 0.888,
    16: 1.58,
    20: 2.469,
    25: 3.858,
}

COMMON_DIAMETERS = (8, 10, 12, 16, 20, 25)

_MM_SIZE = re.compile(r"(\d+)\s*mm", re.IGNORECASE)
_LEADING_DIGITS = re.compile(r"^\s*(\d+)\s*$")


def parse_size_mm(size: Optional[str]) -> Optional[int]:
    """'10mm' -> 10, '10' -> 10, '1.5x1.5' -> None."""
    if not size:
        return None
    m = _MM_SIZE.search(size) or _LEADING_DIGITS.match(size)
    return int(m.group(1)) if m else None


def is_known_diameter(diameter_mm: Optional[int]) -> bool:
    return diameter_mm in TMT_WEIGHTS_PER_METER


def weight_per_meter(diameter_mm: float) -> float:
    return (diameter_mm * diameter_mm) / 162


def calculate_tmt_weight(diameter_mm: float, pieces: float, length_m: float = 12) -> float:
    """Total kg for `pieces` rods of `length_m` meters."""
    return weight_per_meter(diameter_mm) * length_m * pieces


def conversion_formula(diameter_mm: float, length_m: float, pieces: float) -> str:
    """Human-readable formula shown next to the converted weight."""
    return f"({_fmt(diameter_mm)}²/162) × {_fmt(length_m)}m × {_fmt(pieces)}"


def format_weight(weight_kg: float) -> str:
    if weight_kg >= 1000:
        return f"{weight_kg / 1000:.2f} MT"
    return f"{weight_kg:.2f} kg"


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)
