"""
Free-text answer parsers for the capacity interview.

Users answer in everyday Indonesian ("500 ribu", "1,5 juta", "6 hari
seminggu", "setengah"), so each parser accepts the common spoken forms and
returns a number, or None when nothing usable is found.
"""
import math
import re
from typing import Callable, Dict, Optional, Union

from ...models.assessment import ParserKind
from .numeric import round_half_up

Number = Union[int, float]


# Average weeks per month, used to turn "N hari seminggu" into days per month
WEEKS_PER_MONTH = 4.33

_LEADING_RP = re.compile(r"^rp")
_MILLIONS = re.compile(r"(\d+(?:[.,]\d+)?)\s*(juta|jt)")
_THOUSANDS = re.compile(r"(\d+(?:[.,]\d+)?)\s*(ribu|rb)")
_WEEKLY_DAYS = re.compile(r"(\d+)\s*hari\s*(seminggu|per\s*minggu)")
_FIRST_NUMBER = re.compile(r"(\d+)")

_PERCENTAGE_WORDS = (
    (("setengah", "separuh"), 50),
    (("sepertiga",), 33),
    (("seperempat",), 25),
)


def parse_currency(text: Optional[str]) -> Optional[Number]:
    """
    Parse a Rupiah amount.

    "Rp 500.000" -> 500000, "500rb" -> 500000, "1,5 juta" -> 1500000
    """
    if not text:
        return None
    lower = _LEADING_RP.sub("", text.strip().lower()).strip()

    # Millions first, so "1 jt 500 rb" reads as 1 juta
    match = _MILLIONS.search(lower)
    if match:
        return _normalize(_decimal(match.group(1)) * 1_000_000)

    match = _THOUSANDS.search(lower)
    if match:
        return _normalize(_decimal(match.group(1)) * 1_000)

    # Plain number: dots and commas are thousands separators
    digits = re.sub(r"\D", "", lower.replace(".", "").replace(",", ""))
    if not digits:
        return None
    return int(digits)


def parse_days(text: Optional[str]) -> Optional[int]:
    """
    Parse active business days per month.

    "25 hari" -> 25, "setiap hari" -> 30, "6 hari seminggu" -> 26
    """
    if not text:
        return None
    lower = text.lower()

    match = _WEEKLY_DAYS.search(lower)
    if match:
        return round_half_up(int(match.group(1)) * WEEKS_PER_MONTH)

    if ("setiap hari" in lower or "tiap hari" in lower) and not _FIRST_NUMBER.search(lower):
        return 30

    match = _FIRST_NUMBER.search(lower)
    return int(match.group(1)) if match else None


def parse_percentage(text: Optional[str]) -> Optional[int]:
    """Parse a share of revenue: "60%" -> 60, "setengah" -> 50."""
    if not text:
        return None
    lower = text.lower()

    for words, value in _PERCENTAGE_WORDS:
        if any(word in lower for word in words):
            return value

    match = _FIRST_NUMBER.search(lower)
    return int(match.group(1)) if match else None


PARSERS: Dict[ParserKind, Callable[[Optional[str]], Optional[Number]]] = {
    ParserKind.CURRENCY: parse_currency,
    ParserKind.DAYS: parse_days,
    ParserKind.PERCENTAGE: parse_percentage,
}


def parse_answer(kind: ParserKind, text: Optional[str]) -> Optional[Number]:
    """Run the parser for kind; NaN results are reported as None."""
    value = PARSERS[kind](text)
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return value


def _decimal(raw: str) -> float:
    # Decimal comma: "1,5" means 1.5
    return float(raw.replace(",", "."))


def _normalize(value: float) -> Number:
    # 1.1 * 1_000_000 is 1100000.0000000002 in binary floating point
    nearest = round(value)
    return int(nearest) if abs(value - nearest) < 1e-6 else value
