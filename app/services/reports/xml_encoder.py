"""
CBAM XML encoder.

Owns the wire-level details of the quarterly report: the numeric format,
element construction and serialization. Escaping is left to ElementTree.
"""

import calendar
import xml.etree.ElementTree as ET
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Tuple

from app.utils.constants import XML_FRACTION_DIGITS, XML_MAX_INTEGER_DIGITS, Quarter

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

_FRACTION_QUANTUM = Decimal(1).scaleb(-XML_FRACTION_DIGITS)


def format_cbam_number(value: Any) -> str:
    """
    Render a number with exactly 7 fraction digits.

    Only the least-significant 9 integer digits are kept, so values of
    10^9 and above are truncated. This matches the existing registry
    output and must not be applied to new fields.

    Example:
        >>> format_cbam_number(Decimal("71.6"))
        '71.6000000'
        >>> format_cbam_number(Decimal("1234567890.5"))
        '234567890.5000000'
    """
    number = Decimal(str(value if value is not None else 0))
    fixed = format(number.quantize(_FRACTION_QUANTUM, rounding=ROUND_HALF_UP), "f")
    sign = "-" if fixed.startswith("-") else ""
    integer, _, fraction = fixed.lstrip("-").partition(".")
    return f"{sign}{integer[-XML_MAX_INTEGER_DIGITS:]}.{fraction}"


def quarter_dates(year: int, quarter: str) -> Tuple[date, date]:
    """
    First and last day of a quarter given as 'Q1'..'Q4'.

    Raises:
        ValueError: quarter is not one of Q1..Q4
    """
    quarter_number = list(Quarter).index(Quarter(quarter.upper())) + 1
    first_month = (quarter_number - 1) * 3 + 1
    last_month = quarter_number * 3
    return (
        date(year, first_month, 1),
        date(year, last_month, calendar.monthrange(year, last_month)[1]),
    )


def sub(parent: ET.Element, tag: str, text: Optional[Any] = None) -> ET.Element:
    """Append a child element with optional text."""
    element = ET.SubElement(parent, tag)
    if text is not None:
        element.text = str(text)
    return element


def sub_number(parent: ET.Element, tag: str, value: Any) -> ET.Element:
    """Append a child element holding a CBAM-formatted number."""
    return sub(parent, tag, format_cbam_number(value))


def sub_value(parent: ET.Element, tag: str, value: Any, unit: str) -> ET.Element:
    """Append a <tag><Value/><Unit/></tag> block."""
    element = sub(parent, tag)
    sub_number(element, "Value", value)
    sub(element, "Unit", unit)
    return element


def serialize(root: ET.Element) -> str:
    """Serialize a report tree with the XML declaration, indented."""
    ET.indent(root, space="  ")
    return f"{XML_DECLARATION}\n{ET.tostring(root, encoding='unicode')}\n"
