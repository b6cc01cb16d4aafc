"""Registry of jurisdiction adapters.

Every jurisdiction (50 states, DC and Puerto Rico) declares its official
source, when one is machine-readable, and the order in which the cross-state
aggregators back it up. Configuration overrides can disable a jurisdiction,
change its fallback policy, or replace its provider chain.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from app.config.models import (
    AdvancedConfig,
    AppConfig,
    FallbackPolicy,
    OrchestratorConfig,
    ProviderSpec,
    ProviderType,
)
from app.domain.jurisdictions import state_name
from app.logging import get_logger

from .factory import get_provider
from .state import StateAdapter

logger = get_logger(__name__, component="adapter")

LAYOFFDATA = ProviderSpec(type=ProviderType.LAYOFFDATA)
WARNTRACKER = ProviderSpec(type=ProviderType.WARNTRACKER)
USATODAY = ProviderSpec(type=ProviderType.USATODAY)

GOOGLE_SHEET_CSV = "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv"


@dataclass(frozen=True)
class JurisdictionSource:
    """Built-in description of one jurisdiction's sources.

    Attributes:
        code: Two-letter jurisdiction code
        source_url: Official WARN page (informational when not machine-readable)
        official: Providers reading the agency's own publication, in order
        name: Provenance name for official providers (defaults to "<State> WARN")
        lead_with_tracker: Try WARNTracker before the official source
        policy: Escalation policy
        min_results: Count that stops escalation under minimum_count
    """

    code: str
    source_url: str
    official: Tuple[ProviderSpec, ...] = ()
    name: Optional[str] = None
    lead_with_tracker: bool = False
    policy: FallbackPolicy = FallbackPolicy.FIRST_NON_EMPTY
    min_results: int = 1

    @property
    def display_name(self) -> str:
        return self.name or f"{state_name(self.code)} WARN"

    def default_chain(self) -> List[ProviderSpec]:
        """Provider chain in priority order."""
        if self.lead_with_tracker:
            return [WARNTRACKER, *self.official, LAYOFFDATA, USATODAY]
        return [*self.official, LAYOFFDATA, WARNTRACKER, USATODAY]


def _html(url: str, **options) -> ProviderSpec:
    return ProviderSpec(type=ProviderType.HTML_TABLE, url=url, **options)


def _sheet(sheet_id: str, suffix: str = "") -> str:
    return GOOGLE_SHEET_CSV.format(sheet_id=sheet_id) + suffix


def _source(code: str, source_url: str, *official: ProviderSpec, **options) -> JurisdictionSource:
    return JurisdictionSource(code=code, source_url=source_url, official=tuple(official), **options)


def _html_source(code: str, url: str, **options) -> JurisdictionSource:
    """Jurisdiction whose official listing is a plain HTML table at its WARN page."""
    return _source(code, url, _html(url), **options)


_KS_SHEET = "1W24JjWtuDSBL1UCK6UYe7zlv04lxi_9Iv0s1Ehc4YhU"
_WI_SHEET = "1cyZiHZcepBI7ShB3dMcRprUFRG24lbwEnEDRBMhAqsA"
_FL_PAGE = (
    "https://floridajobs.org/office-directory/division-of-workforce-services/workforce-programs/"
    "reemployment-and-emergency-assistance-coordination-team-react/warn-notices"
)
_OH_PAGE = (
    "https://jfs.ohio.gov/job-services-and-unemployment/job-services/job-programs-and-services/"
    "submit-a-warn-notice/current-public-notices-of-layoffs-and-closures-sa"
)
_WA_PAGE = (
    "https://esd.wa.gov/employer-requirements/layoffs-and-employee-notifications/"
    "worker-adjustment-and-retraining-notification-warn-layoff-and-closure-database"
)

JURISDICTION_SOURCES: Tuple[JurisdictionSource, ...] = (
    _html_source("AK", "https://labor.alaska.gov/lss/warn.htm"),
    _html_source("AL", "https://labor.alabama.gov/layoff-services/warn-notices"),
    _html_source(
        "AR",
        "https://www.dws.arkansas.gov/employers/warn/",
        lead_with_tracker=True,
        policy=FallbackPolicy.MINIMUM_COUNT,
        min_results=10,
    ),
    _html_source(
        "AZ",
        "https://des.az.gov/services/employment-and-workforce/development-services/employers/warn-layoff-notices",
    ),
    _source(
        "CA",
        "https://edd.ca.gov/en/jobs_and_training/layoff_services_warn/",
        ProviderSpec(
            type=ProviderType.SPREADSHEET,
            url="https://edd.ca.gov/en/jobs_and_training/layoff_services_warn/",
            data_url="https://edd.ca.gov/siteassets/files/jobs_and_training/warn/warn_report1.xlsx",
        ),
        name="California EDD WARN",
    ),
    _html_source("CO", "https://cdle.colorado.gov/warn/public-warn"),
    _source(
        "CT",
        "https://portal.ct.gov/dol/knowledge-base/articles/employment-and-training/rapid-response/warn",
    ),
    _html_source("DC", "https://does.dc.gov/service/warn-notices"),
    _html_source("DE", "https://labor.delaware.gov/divisions/employment-training/employer-services/"),
    _source(
        "FL",
        _FL_PAGE,
        _html("https://reactwarn.floridajobs.org/WarnList/Records", via_text_proxy=True),
    ),
    _source(
        "GA",
        "https://dol.georgia.gov/employers",
        _html("https://www.tcsg.edu/warn-public-view/"),
        lead_with_tracker=True,
    ),
    _html_source("HI", "https://labor.hawaii.gov/warn/"),
    _source(
        "IA",
        "https://www.iowaworkforcedevelopment.gov/employers/resources/warn/notices",
        ProviderSpec(
            type=ProviderType.CSV,
            url="https://www.iowaworkforcedevelopment.gov/employers/resources/warn/notices",
            data_url="https://public.tableau.com/views/IowaWARNNotifications/WARNNotices.csv?:showVizHome=no",
        ),
        name="Iowa WARN (Tableau)",
    ),
    _html_source("ID", "https://labor.idaho.gov/dnn/idl/IdahoWARN.aspx"),
    _source(
        "IL",
        "https://www.illinoisworknet.com/LayoffRecovery/Pages/ArchivedWARNReports.aspx",
    ),
    _html_source("IN", "https://www.in.gov/dwd/warn-notices/current-warn-notices/"),
    _source(
        "KS",
        f"https://docs.google.com/spreadsheets/d/{_KS_SHEET}/edit?usp=sharing",
        ProviderSpec(
            type=ProviderType.CSV,
            url=f"https://docs.google.com/spreadsheets/d/{_KS_SHEET}/edit?usp=sharing",
            data_url=_sheet(_KS_SHEET),
            state_values=["KS"],
        ),
        name="Kansas WARN Database",
    ),
    _html_source("KY", "https://kyworks.ky.gov/Services/Pages/Rapid-Response-Layoffs-and-Closures.aspx"),
    _html_source("LA", "https://www.laworks.net/LaGov/WorkforceInformation/WARN.asp"),
    _source(
        "MA",
        "https://www.mass.gov/orgs/executive-office-of-labor-and-workforce-development",
        lead_with_tracker=True,
    ),
    _html_source("MD", "https://www.labor.maryland.gov/employment/warn.shtml"),
    _source("ME", "https://www.maine.gov/labor/legal/warn/", lead_with_tracker=True),
    _source(
        "MI",
        "https://www.michigan.gov/leo/bureaus-agencies/wd/data-public-notices/warn-notices",
        ProviderSpec(
            type=ProviderType.TEXT_LISTING,
            url="https://www.michigan.gov/leo/bureaus-agencies/wd/data-public-notices/warn-notices",
        ),
        name="Michigan LEO WARN",
    ),
    _source("MN", "https://mn.gov/deed/programs-services/dislocated-worker-program/reports/"),
    _source("MO", "https://jobs.mo.gov/warn"),
    _html_source("MS", "https://mdes.ms.gov/employers/warn-notices/"),
    _html_source("MT", "https://dli.mt.gov/labor-market-information/warn"),
    _html_source("NC", "https://www.commerce.nc.gov/business/business-closure-resources"),
    _source(
        "ND",
        "https://www.jobsnd.com/sites/www/files/documents/jsnd-documents/WARN%20Notices%202015%20to%20present.pdf",
    ),
    _html_source(
        "NE",
        "https://dol.nebraska.gov/ReemploymentServices/LayoffServices/LayoffsAndDownsizingWARN",
        name="Nebraska DOL WARN",
    ),
    _source("NH", "https://www.nh.gov/nhes/terms/employers/index.htm", lead_with_tracker=True),
    _html_source("NJ", "https://www.nj.gov/labor/worker-protections/layoffs/warn/"),
    _html_source("NM", "https://www.dws.state.nm.us/en/Employers/Business-Services/WARN"),
    _html_source("NV", "https://www.nevadaworkforce.com/warn"),
    _html_source("NY", "https://dol.ny.gov/warn-notices"),
    _source("OH", _OH_PAGE, _html(_OH_PAGE, via_text_proxy=True), name="Ohio JFS WARN"),
    _html_source(
        "OK",
        "https://oklahoma.gov/okcommerce/employment-services/workforce-information/warn-notices.html",
    ),
    _html_source("OR", "https://www.qualityinfo.org/labor-market-information/warn"),
    _source(
        "PA",
        "https://www.paworkstats.state.pa.us/LayoffData/",
        lead_with_tracker=True,
        policy=FallbackPolicy.MINIMUM_COUNT,
        min_results=10,
    ),
    _source("PR", "https://www.warntracker.com/?state=PR", lead_with_tracker=True),
    _html_source("RI", "https://dlt.ri.gov/lmi/warn"),
    _html_source("SC", "https://scworks.org/employer/employer-programs/risk-closing"),
    _html_source("SD", "https://dlr.sd.gov/workforce_services/businesses/warn_notices.aspx"),
    _source("TN", "https://stateoftennessee.formstack.com/forms/warn_notice_information"),
    _html_source("TX", "https://www.twc.texas.gov/businesses/warn-notices"),
    _html_source("UT", "https://jobs.utah.gov/employer/layoffs/warn.html"),
    _html_source(
        "VA",
        "https://virginiaworks.gov/im-an-employer/retain-and-grow/warn-notices/",
        name="Virginia Works WARN",
    ),
    _source("VT", "https://labor.vermont.gov/warn", lead_with_tracker=True),
    _source(
        "WA",
        _WA_PAGE,
        _html("https://fortress.wa.gov/esd/file/WARN", table_selector="#ucPSW_gvMain"),
        name="Washington ESD WARN",
    ),
    _source(
        "WI",
        "https://dwd.wisconsin.gov/dislocatedworker/warn/",
        ProviderSpec(
            type=ProviderType.CSV,
            url="https://dwd.wisconsin.gov/dislocatedworker/warn/",
            data_url=_sheet(_WI_SHEET, "&sheet=Originals"),
        ),
        name="Wisconsin DWD WARN",
    ),
    _html_source("WV", "https://workforcewv.org/lmi/warn/"),
    _html_source("WY", "https://wyomingworkforce.org/labor-market-information/warn/"),
)

SOURCES_BY_CODE: Dict[str, JurisdictionSource] = {source.code: source for source in JURISDICTION_SOURCES}


def build_adapter(
    source: JurisdictionSource,
    advanced_config: AdvancedConfig,
    orchestrator_config: OrchestratorConfig,
    providers: Optional[List[ProviderSpec]] = None,
    policy: Optional[FallbackPolicy] = None,
    min_results: Optional[int] = None,
) -> StateAdapter:
    """Instantiate the adapter for one jurisdiction.

    Raises:
        AdapterConfigurationError: If a ProviderSpec cannot be instantiated
    """
    chain = providers or source.default_chain()
    return StateAdapter(
        jurisdiction=source.code,
        name=source.display_name,
        source_url=source.source_url,
        providers=[
            get_provider(
                spec,
                source.code,
                advanced_config,
                orchestrator_config,
                default_name=source.display_name,
            )
            for spec in chain
        ],
        policy=policy or source.policy,
        min_results=min_results or source.min_results,
    )


def list_adapters(
    app_config: Optional[AppConfig] = None,
    states: Optional[Iterable[str]] = None,
) -> List[StateAdapter]:
    """Build the adapters for a run.

    Args:
        app_config: Application configuration (defaults apply when omitted)
        states: Restrict to these codes; falls back to app_config.states, then all

    Returns:
        Enabled adapters in registry order

    Raises:
        AdapterConfigurationError: If an override names an invalid provider
    """
    app_config = app_config or AppConfig()
    selected = {code.upper() for code in (states or app_config.states or [])}

    adapters: List[StateAdapter] = []
    skipped: List[str] = []
    for source in JURISDICTION_SOURCES:
        if selected and source.code not in selected:
            continue
        override = app_config.get_override(source.code)
        if override is not None and not override.enabled:
            skipped.append(source.code)
            continue

        adapters.append(
            build_adapter(
                source,
                app_config.advanced,
                app_config.orchestrator,
                providers=override.providers if override else None,
                policy=FallbackPolicy(override.fallback_policy) if override and override.fallback_policy else None,
                min_results=override.min_results if override else None,
            )
        )

    logger.info(
        f"Registered {len(adapters)} jurisdiction adapter(s)",
        extra={
            "event": "registry.adapters.built",
            "adapter_count": len(adapters),
            "disabled": skipped,
        },
    )
    return adapters
