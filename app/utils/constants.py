"""
Application constants following kkb_fastapi pattern.
"""
from decimal import Decimal
from enum import Enum


class ConfigFile:
    """Configuration file paths."""
    PRODUCTION = "production.toml"
    DEVELOPMENT = "development.toml"
    TEST = "test.toml"


class ActivityKind(str, Enum):
    """Activity record variants."""
    ELECTRICITY = "electricity"
    FUEL = "fuel"
    PRODUCTION = "production"
    PRECURSOR = "precursor"


class EmissionFactorType(str, Enum):
    """Reference emission factor types."""
    FUEL = "fuel"
    ELECTRICITY = "electricity"
    PRECURSOR = "precursor"
    DEFAULT = "default"


class FactorProvenance(str, Enum):
    """Where a resolved emission factor came from."""
    SUPPLIER_DECLARATION = "supplier_declaration"
    INLINE = "inline"
    REFERENCE = "reference"
    CATEGORY_DEFAULT = "category_default"
    # combined default split 80/20 into direct/indirect, not a measured value
    CATEGORY_DEFAULT_SPLIT = "category_default_split"
    FIXED_DEFAULT = "fixed_default"
    RENEWABLE = "renewable"
    UNRESOLVED = "unresolved"


class CalculationStatus(str, Enum):
    DRAFT = "draft"
    CALCULATED = "calculated"
    VALIDATED = "validated"
    FINALIZED = "finalized"


class ValidationSeverity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class ValidationCategory(str, Enum):
    CN_CODE = "cn_code"
    COUNTRY_CODE = "country_code"
    NUMERIC_FORMAT = "numeric_format"
    SUPPLIER_DATA = "supplier_data"
    OUTLIER = "outlier"
    COMPLETENESS = "completeness"
    CALCULATION = "calculation"


class ValidationStatus(str, Enum):
    PASSED = "passed"
    WARNINGS = "warnings"
    FAILED = "failed"


class DeclarationStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class OrganisationType(str, Enum):
    EU_IMPORTER = "eu_importer"
    NON_EU_PRODUCER = "non_eu_producer"


class Quarter(str, Enum):
    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    Q4 = "Q4"


class ReportType(str, Enum):
    CBAM_XML = "cbam_xml"


class ReportStatus(str, Enum):
    COMPLETED = "completed"
    VALIDATED = "validated"
    SUBMITTED = "submitted"


# Unit conversion constants
KG_PER_TONNE = Decimal("1000")
KWH_PER_MWH = Decimal("1000")
# Approximate diesel density in t/litre, kept for output parity
LITRE_TO_TONNES = Decimal("0.00084")

# Scope 2 fallbacks in tCO2e/MWh
DEFAULT_GRID_EMISSION_FACTOR = Decimal("0.716")
DEFAULT_CAPTIVE_EMISSION_FACTOR = Decimal("0.8")

# Share of a combined default factor attributed to direct emissions
DEFAULT_DIRECT_SHARE = Decimal("0.8")
DEFAULT_INDIRECT_SHARE = Decimal("0.2")

# Persisted figures are kept at the CBAM fraction precision
CALCULATION_PRECISION = Decimal("0.0000001")

# Validation thresholds
ELECTRICITY_OUTLIER_KWH = Decimal("10000000")
SEE_UPPER_BOUND = Decimal("50")
SEE_LOWER_BOUND = Decimal("0.01")
MAX_INTEGER_DIGITS = 16
MAX_FRACTION_DIGITS = 7
EXPECTED_MONTHS_PER_QUARTER = 3

# CBAM XML wire format
XSD_VERSION = "23.00"
CBAM_NAMESPACE = "urn:cbam:quarterly-report:v23.00"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XML_MAX_INTEGER_DIGITS = 9
XML_FRACTION_DIGITS = 7
DEFAULT_CN_CODE = "00000000"
DEFAULT_COUNTRY_CODE = "IN"

VALID_COUNTRY_CODES = frozenset(
    {
        "IN", "CN", "US", "DE", "FR", "IT", "ES", "GB", "JP", "KR", "BR", "RU", "AU",
        "CA", "MX", "ID", "TH", "VN", "MY", "PH", "SG", "TW", "PK", "BD", "TR", "SA",
        "AE", "ZA", "EG", "NG", "AR", "CL", "CO", "PE", "NL", "BE", "PL", "SE", "NO",
        "DK", "FI", "AT", "CH", "CZ", "HU", "RO", "UA", "GR", "PT", "IE", "NZ",
    }
)
