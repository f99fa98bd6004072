"""
CBAM quarterly report generator.

Renders a stored calculation into the CBAM QReport XML document, runs the
self-check on the output and stores both as a Report row.
"""

import logging
import uuid
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.database.repositories import (
    CalculationRepository,
    FacilityRepository,
    OrganisationRepository,
    ReportingPeriodRepository,
    ReportRepository,
)
from app.database.schemas import (
    FacilityDBModel,
    OrganisationDBModel,
    ReportingPeriodDBModel,
)
from app.pydantic_models.calculation import (
    CalculationPydModel,
    ProductCalculation,
    ScopeDetail,
)
from app.pydantic_models.report import ReportGenerationResult, ReportPydModel
from app.utils.constants import (
    CBAM_NAMESPACE,
    DEFAULT_CN_CODE,
    DEFAULT_COUNTRY_CODE,
    XSD_VERSION,
    XSI_NAMESPACE,
    OrganisationType,
    Quarter,
    ReportStatus,
    ReportType,
)

from .xml_encoder import quarter_dates, serialize, sub, sub_number, sub_value
from .xml_validator import validate_xml

logger = logging.getLogger(__name__)

XML_MIME_TYPE = "application/xml"
QUANTITY_UNIT = "TNE"
EMISSIONS_UNIT = "tCO2e"
SEE_UNIT = "tCO2e/t"

CERTIFICATION_TEXT = (
    "I hereby declare that the information provided in this quarterly report "
    "is complete and accurate to the best of my knowledge, and that the embedded "
    "emissions have been calculated in accordance with the EU CBAM Regulation "
    "requirements."
)


class ReportGenerationError(Exception):
    """Expected failure of report generation (missing inputs)."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def build_file_name(organisation_name: str, year: int, quarter: str) -> str:
    """
    Build the report file name.

    Example:
        >>> build_file_name("Venus Wire Industries", 2024, "Q1")
        'CBAM_Venus_Wire_Industries_2024_Q1.xml'
    """
    return f"CBAM_{'_'.join(organisation_name.split())}_{year}_{quarter}.xml"


def generate_good_id() -> str:
    return f"GOOD-{uuid.uuid4().hex[:12].upper()}"


class CBAMReportBuilder:
    """Builds the QReport element tree for one calculation."""

    def __init__(
        self,
        organisation: OrganisationDBModel,
        period: ReportingPeriodDBModel,
        calculation: CalculationPydModel,
        facilities: Iterable[FacilityDBModel] = (),
        generated_at: Optional[datetime] = None,
    ):
        self.organisation = organisation
        self.period = period
        self.calculation = calculation
        self.facilities = list(facilities)
        self.generated_at = generated_at or datetime.utcnow()
        self.country_code = organisation.country_code or DEFAULT_COUNTRY_CODE

    def build(self) -> ET.Element:
        root = ET.Element(
            "QReport",
            {
                "xmlns": CBAM_NAMESPACE,
                "xmlns:xsi": XSI_NAMESPACE,
                "xsi:schemaLocation": f"{CBAM_NAMESPACE} QReport_ver{XSD_VERSION}.xsd",
            },
        )
        self._header(root)
        self._reporting_period(root)
        self._declarant(root)
        self._installations(root)

        goods = sub(root, "ImportedGoods")
        for product in self.calculation.products:
            self._good(goods, product)

        self._summary(root)
        self._declaration(root)
        return root

    def render(self) -> str:
        return serialize(self.build())

    def _header(self, root: ET.Element):
        header = sub(root, "ReportHeader")
        sub(header, "ReportVersion", XSD_VERSION)
        sub(header, "ReportType", "QUARTERLY")
        sub(header, "GenerationDate", self.generated_at.date().isoformat())
        sub(header, "GenerationTime", self.generated_at.strftime("%H:%M:%S"))

    def _reporting_period(self, root: ET.Element):
        start, end = quarter_dates(self.period.year, self.period.quarter)
        period = sub(root, "ReportingPeriod")
        sub(period, "Year", self.period.year)
        sub(period, "Quarter", self.period.quarter)
        sub(period, "StartDate", start.isoformat())
        sub(period, "EndDate", end.isoformat())

    @staticmethod
    def _address(parent: ET.Element, entity, country_code: str):
        address = sub(parent, "Address")
        sub(address, "Street", entity.street or "")
        sub(address, "City", entity.city or "")
        sub(address, "PostalCode", entity.postal_code or "")
        sub(address, "Country", country_code)

    def _declarant(self, root: ET.Element):
        org = self.organisation
        declarant = sub(root, "Declarant")
        sub(declarant, "Name", org.name)
        sub(declarant, "IdentificationNumber", str(org.id).upper())
        self._address(declarant, org, self.country_code)
        sub(
            declarant,
            "DeclarantType",
            "IMPORTER" if org.type == OrganisationType.EU_IMPORTER.value else "PRODUCER",
        )

    def _installations(self, root: ET.Element):
        installations = sub(root, "Installations")
        for facility in self.facilities:
            installation = sub(installations, "Installation")
            sub(installation, "InstallationId", str(facility.id).upper())
            sub(installation, "InstallationName", facility.name)
            self._address(
                installation, facility, facility.country_code or self.country_code
            )

    @staticmethod
    def _sources(parent: ET.Element, tag: str, name_tag: str, details: Iterable[ScopeDetail]):
        sources = sub(parent, tag)
        for detail in details:
            source = sub(sources, "Source" if tag == "Sources" else "Precursor")
            sub(source, name_tag, detail.source)
            sub_number(source, "Quantity", detail.quantity)
            sub(source, "QuantityUnit", detail.unit)
            sub_number(source, "EmissionFactor", detail.emission_factor)
            sub_number(source, "Emissions", detail.emissions)

    def _good(self, goods: ET.Element, product: ProductCalculation):
        good = sub(goods, "Good")
        sub(good, "GoodId", generate_good_id())
        sub(good, "CNCode", product.cn_code or DEFAULT_CN_CODE)
        sub(good, "GoodDescription", product.product_name)
        sub(good, "CountryOfOrigin", self.country_code)

        quantity = sub(good, "ImportedQuantity")
        sub_number(quantity, "Quantity", product.production_quantity)
        sub(quantity, "Unit", QUANTITY_UNIT)

        embedded = sub(good, "EmbeddedEmissions")
        sub_value(embedded, "DirectEmissions", product.see_direct, SEE_UNIT)
        sub_value(embedded, "IndirectEmissions", product.see_indirect, SEE_UNIT)
        sub_value(embedded, "TotalSpecificEmbeddedEmissions", product.see_total, SEE_UNIT)
        sub_value(embedded, "TotalEmissions", product.total_emissions, EMISSIONS_UNIT)

        details = sub(good, "EmissionDetails")

        scope1 = sub_value(details, "Scope1Emissions", product.scope1_emissions, EMISSIONS_UNIT)
        self._sources(scope1, "Sources", "Name", product.scope1_details)

        scope2 = sub_value(details, "Scope2Emissions", product.scope2_emissions, EMISSIONS_UNIT)
        self._sources(scope2, "Sources", "Name", product.scope2_details)

        scope3 = sub(details, "Scope3Emissions")
        sub_number(scope3, "DirectValue", product.scope3_direct_emissions)
        sub_number(scope3, "IndirectValue", product.scope3_indirect_emissions)
        sub_number(scope3, "TotalValue", product.scope3_total_emissions)
        sub(scope3, "Unit", EMISSIONS_UNIT)
        self._sources(scope3, "Precursors", "SupplierMaterial", product.scope3_details)

        methodology = sub(good, "CalculationMethodology")
        sub(methodology, "Method", "ACTUAL_DATA")
        sub(methodology, "DataSource", "INSTALLATION_RECORDS")

    def _summary(self, root: ET.Element):
        calc = self.calculation
        summary = sub(root, "ReportSummary")
        sub_value(summary, "TotalScope1Emissions", calc.total_scope1, EMISSIONS_UNIT)
        sub_value(summary, "TotalScope2Emissions", calc.total_scope2, EMISSIONS_UNIT)
        sub_value(summary, "TotalScope3Emissions", calc.total_scope3, EMISSIONS_UNIT)
        sub_value(summary, "GrandTotalEmissions", calc.total_emissions, EMISSIONS_UNIT)
        sub_value(summary, "TotalProductionQuantity", calc.total_production, QUANTITY_UNIT)
        sub(summary, "NumberOfGoods", len(calc.products))

    def _declaration(self, root: ET.Element):
        declaration = sub(root, "Declaration")
        sub(declaration, "DeclarationDate", self.generated_at.date().isoformat())
        sub(declaration, "DeclarantSignature", "ELECTRONIC_SIGNATURE")
        sub(declaration, "Certification", CERTIFICATION_TEXT)


class ReportGenerator:
    """
    Service generating CBAM XML reports.

    Whether a calculation may be reported (VALIDATED or FINALIZED) is decided
    by the caller; this service renders whatever calculation it is given.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.report_repo = ReportRepository(session)

    async def generate(
        self,
        organisation_id: UUID,
        reporting_period_id: UUID,
        calculation_id: UUID,
    ) -> ReportGenerationResult:
        """
        Generate, self-check and store a CBAM XML report.

        Args:
            organisation_id: Organisation UUID
            reporting_period_id: Reporting period UUID
            calculation_id: Calculation to render

        Returns:
            ReportGenerationResult with the stored report and XML content,
            or an error message when an input entity is missing
        """
        try:
            organisation, period, calculation = await self._load(
                organisation_id, reporting_period_id, calculation_id
            )
        except ReportGenerationError as e:
            logger.warning(f"Report generation failed: {e.message}")
            return ReportGenerationResult(success=False, error=e.message)

        facilities = await FacilityRepository(self.session).get_by_organisation(
            organisation_id
        )
        xml_content = CBAMReportBuilder(
            organisation, period, calculation, facilities
        ).render()
        validation = validate_xml(xml_content)
        if not validation.is_valid:
            logger.warning(
                f"Generated XML for calculation {calculation_id} failed self-check: "
                f"{validation.errors}"
            )

        report = await self.report_repo.create(
            organisation_id=organisation_id,
            reporting_period_id=reporting_period_id,
            calculation_id=calculation_id,
            type=ReportType.CBAM_XML.value,
            status=(
                ReportStatus.VALIDATED.value
                if validation.is_valid
                else ReportStatus.COMPLETED.value
            ),
            file_name=build_file_name(organisation.name, period.year, period.quarter),
            mime_type=XML_MIME_TYPE,
            file_size=len(xml_content.encode("utf-8")),
            xml_content=xml_content,
            xsd_version=XSD_VERSION,
            validation_result=validation.model_dump(),
            generated_at=datetime.utcnow(),
        )
        logger.info(f"Generated report {report.file_name} ({report.file_size} bytes)")

        return ReportGenerationResult(
            success=True,
            report=ReportPydModel.model_validate(report),
            xml_content=xml_content,
        )

    async def _load(
        self, organisation_id: UUID, reporting_period_id: UUID, calculation_id: UUID
    ):
        organisation = await OrganisationRepository(self.session).get_by_id(organisation_id)
        if organisation is None:
            raise ReportGenerationError("Organisation not found")

        period = await ReportingPeriodRepository(self.session).get_by_id(reporting_period_id)
        if period is None or period.organisation_id != organisation_id:
            raise ReportGenerationError("Reporting period not found")
        if period.quarter.upper() not in {q.value for q in Quarter}:
            raise ReportGenerationError(f"Invalid reporting period quarter: {period.quarter}")

        calculation = await CalculationRepository(self.session).get_for_period(
            calculation_id, organisation_id, reporting_period_id
        )
        if calculation is None:
            raise ReportGenerationError("Calculation not found")

        return organisation, period, CalculationPydModel.model_validate(calculation)
