"""
Self-check of generated CBAM XML.

Re-parses a rendered report and reports structural and numeric-format
problems. The verdict is stored with the report and never blocks saving it.
"""

import logging
import re
import xml.etree.ElementTree as ET

from app.pydantic_models.report import XMLValidationResult
from app.utils.constants import XML_FRACTION_DIGITS, XML_MAX_INTEGER_DIGITS

logger = logging.getLogger(__name__)

DECLARATION_PREFIX = '<?xml version="1.0"'
ROOT_ELEMENT = "QReport"
REQUIRED_ELEMENTS = ("ReportingPeriod", "Declarant", "ImportedGoods", "ReportSummary")
ZERO_VALUE = "0." + "0" * XML_FRACTION_DIGITS
NUMBER_PATTERN = re.compile(r"^-?\d+(\.\d+)?$")
CN_CODE_PATTERN = re.compile(r"[0-9]{8}")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def validate_xml(xml_content: str) -> XMLValidationResult:
    """
    Validate a rendered CBAM quarterly report.

    Errors: missing declaration, root or required elements, unparseable
    document, Value elements over 9 integer or 7 fraction digits.
    Warnings: CN codes that are not 8 digits, zero Values.
    """
    errors = []
    warnings = []

    if not xml_content.lstrip().startswith(DECLARATION_PREFIX):
        errors.append("Missing XML declaration")

    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError as e:
        logger.warning(f"Generated XML could not be parsed: {e}")
        errors.append(f"XML is not well-formed: {e}")
        return XMLValidationResult(is_valid=False, errors=errors, warnings=warnings)

    if _local_name(root.tag) != ROOT_ELEMENT:
        errors.append(f"Missing {ROOT_ELEMENT} root element")

    present = {_local_name(element.tag) for element in root.iter()}
    errors.extend(
        f"Missing required element: {element}"
        for element in REQUIRED_ELEMENTS
        if element not in present
    )

    has_zero_value = False
    for element in root.iter():
        name = _local_name(element.tag)
        text = (element.text or "").strip()

        if name == "CNCode" and not CN_CODE_PATTERN.fullmatch(text):
            warnings.append(f"CN Code {text} should be 8 digits")

        elif name == "Value":
            if text == ZERO_VALUE:
                has_zero_value = True
            if not NUMBER_PATTERN.match(text):
                errors.append(f"Value '{text}' is not a number")
                continue
            integer, _, fraction = text.lstrip("-").partition(".")
            if len(integer) > XML_MAX_INTEGER_DIGITS or len(fraction) > XML_FRACTION_DIGITS:
                errors.append(f"Value {text} exceeds CBAM numeric format (max n..16,7)")

    if has_zero_value:
        warnings.append("Some emission values are zero - verify data completeness")

    return XMLValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
