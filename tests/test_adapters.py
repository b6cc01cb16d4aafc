"""Unit tests for notice providers, jurisdiction adapters, the factory and the registry."""

import io
import logging
import time
from datetime import date, datetime, timezone
from unittest.mock import Mock, patch

import pytest
import requests
import responses
from openpyxl import Workbook
from responses import matchers

from app.adapters import (
    AdapterConfigurationError,
    AdapterError,
    AdapterHTTPError,
    AdapterResponseError,
    AdapterTimeoutError,
    CsvProvider,
    HtmlTableProvider,
    JURISDICTION_SOURCES,
    LayoffDataProvider,
    SpreadsheetProvider,
    StateAdapter,
    TextListingProvider,
    UsaTodayProvider,
    WarnTrackerProvider,
    filter_by_state,
    get_provider,
    list_adapters,
    text_proxy_url,
)
from app.adapters.base import BaseProvider
from app.adapters.usatoday import record_id_from_url
from app.adapters.warntracker import split_location
from app.config.models import (
    AdvancedConfig,
    AppConfig,
    FallbackPolicy,
    JurisdictionConfig,
    OrchestratorConfig,
    ProviderSpec,
)
from app.domain.jurisdictions import StateCode
from app.domain.models import NormalizedNotice, Provenance
from app.extraction import RawRecord, SemanticField
from app.utils.hashing import compute_notice_id

RETRIEVED_AT = datetime(2025, 2, 12, 10, 0, tzinfo=timezone.utc)
PAGE_URL = "https://example.gov/warn"


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def no_sleep():
    """Skip retry backoff sleeps."""
    with patch("app.adapters.base.time.sleep") as sleep:
        yield sleep


def warn_page(rows, next_href=None) -> str:
    body = "".join(
        f"<tr><td>{employer}</td><td>{city}</td><td>{notice_date}</td><td>{count}</td></tr>"
        for employer, city, notice_date, count in rows
    )
    pager = f'<a href="{next_href}">Next</a>' if next_href else ""
    return (
        "<html><body><table>"
        "<tr><th>Company Name</th><th>City</th><th>Notice Date</th><th>Number of Workers</th></tr>"
        f"{body}</table>{pager}</body></html>"
    )


def make_notices(count, provider="Fake"):
    notices = []
    for index in range(count):
        employer = f"Employer {index}"
        notices.append(
            NormalizedNotice(
                id=compute_notice_id("OR", employer, date(2025, 1, 1), "Salem"),
                jurisdiction="OR",
                employer_name=employer,
                notice_date=date(2025, 1, 1),
                city="Salem",
                provenance=Provenance(
                    provider_name=provider, provider_url="https://example.org", retrieved_at=RETRIEVED_AT
                ),
            )
        )
    return notices


def fake_provider(name, notices=None, error=None):
    provider = Mock()
    provider.name = name
    if error is not None:
        provider.fetch_notices.side_effect = error
    else:
        provider.fetch_notices.return_value = notices or []
    return provider


# ============================================================================
# BaseProvider: configuration and HTTP handling
# ============================================================================


class TestBaseProvider:
    """Tests for shared provider behavior."""

    def test_cannot_instantiate_abstract_class(self):
        with pytest.raises(TypeError):
            BaseProvider("OR", "Oregon WARN", PAGE_URL)

    @pytest.mark.parametrize(
        "options",
        [
            {"timeout": 2},
            {"timeout": 301},
            {"retry_attempts": 0},
            {"retry_backoff_seconds": -1},
            {"user_agent": "   "},
        ],
    )
    def test_invalid_settings_rejected(self, options):
        with pytest.raises(AdapterConfigurationError):
            HtmlTableProvider("OR", "Oregon WARN", PAGE_URL, **options)

    def test_jurisdiction_upper_cased(self):
        assert HtmlTableProvider("or", "Oregon WARN", PAGE_URL).jurisdiction == "OR"

    def test_text_proxy_url(self):
        assert text_proxy_url("https://www.example.gov/warn") == "https://r.jina.ai/http://www.example.gov/warn"
        assert text_proxy_url("http://a.gov/x", "https://proxy.local") == "https://proxy.local/http://a.gov/x"

    def test_truncates_to_max_notices(self):
        provider = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL, max_notices=2)

        assert len(provider._truncate_notices(make_notices(5))) == 2
        assert len(HtmlTableProvider("OR", "Oregon WARN", PAGE_URL)._truncate_notices(make_notices(5))) == 5

    def test_truncation_logged_with_event(self, caplog):
        provider = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL, max_notices=2)

        with caplog.at_level(logging.WARNING, logger="app.adapters.base"):
            provider._truncate_notices(make_notices(5))

        (record,) = [r for r in caplog.records if getattr(r, "event", None) == "provider.notices.truncated"]
        assert record.provider == "Oregon WARN"
        assert record.total == 5
        assert record.max == 2


class TestFilterByState:
    """Tests for filter_by_state."""

    def test_codes_names_and_blank_values(self):
        records = []
        for value in ("OR", "Oregon", "WA", None, "Nowhere"):
            record = RawRecord()
            record.set(SemanticField.EMPLOYER, f"Employer {value}")
            record.set(SemanticField.JURISDICTION, value)
            records.append(record)

        kept = filter_by_state(records, ["or"])

        assert [r.get(SemanticField.EMPLOYER) for r in kept] == [
            "Employer OR",
            "Employer Oregon",
            "Employer None",
        ]


class TestHttpRetry:
    """Tests for retry, backoff and error mapping."""

    @responses.activate
    def test_retries_5xx_then_succeeds(self, no_sleep):
        responses.add(responses.GET, PAGE_URL, status=503)
        responses.add(responses.GET, PAGE_URL, body=warn_page([("Acme", "Salem", "01/02/2025", "40")]))

        provider = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL)
        notices = provider.fetch_notices(RETRIEVED_AT)

        assert len(notices) == 1
        assert len(responses.calls) == 2
        no_sleep.assert_called_once_with(1.0)

    @responses.activate
    def test_linear_backoff(self, no_sleep):
        responses.add(responses.GET, PAGE_URL, status=500)
        responses.add(responses.GET, PAGE_URL, status=502)
        responses.add(responses.GET, PAGE_URL, body=warn_page([]))

        provider = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL, retry_attempts=3, retry_backoff_seconds=2.0)
        provider.fetch_notices(RETRIEVED_AT)

        assert [c.args[0] for c in no_sleep.call_args_list] == [2.0, 4.0]

    @responses.activate
    def test_gives_up_after_last_attempt(self, no_sleep):
        responses.add(responses.GET, PAGE_URL, status=503)
        responses.add(responses.GET, PAGE_URL, status=503)

        provider = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL)

        with pytest.raises(AdapterHTTPError) as exc_info:
            provider.fetch_notices(RETRIEVED_AT)

        assert exc_info.value.status_code == 503
        assert exc_info.value.retryable
        assert len(responses.calls) == 2

    @responses.activate
    def test_client_error_not_retried(self, no_sleep):
        responses.add(responses.GET, PAGE_URL, status=404)

        provider = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL)

        with pytest.raises(AdapterHTTPError) as exc_info:
            provider.fetch_notices(RETRIEVED_AT)

        assert exc_info.value.status_code == 404
        assert not exc_info.value.retryable
        assert len(responses.calls) == 1
        no_sleep.assert_not_called()

    @responses.activate
    def test_connection_error_maps_to_status_zero(self, no_sleep):
        responses.add(responses.GET, PAGE_URL, body=requests.exceptions.ConnectionError("refused"))
        responses.add(responses.GET, PAGE_URL, body=requests.exceptions.ConnectionError("refused"))

        provider = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL)

        with pytest.raises(AdapterHTTPError) as exc_info:
            provider.fetch_notices(RETRIEVED_AT)

        assert exc_info.value.status_code == 0
        assert exc_info.value.url == PAGE_URL

    @responses.activate
    def test_timeout_maps_to_timeout_error(self, no_sleep):
        responses.add(responses.GET, PAGE_URL, body=requests.exceptions.ReadTimeout("slow"))
        responses.add(responses.GET, PAGE_URL, body=requests.exceptions.ReadTimeout("slow"))

        provider = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL)

        with pytest.raises(AdapterTimeoutError):
            provider.fetch_notices(RETRIEVED_AT)
        assert no_sleep.call_count == 1

    @responses.activate
    def test_user_agent_sent(self):
        responses.add(responses.GET, PAGE_URL, body=warn_page([]))

        HtmlTableProvider("OR", "Oregon WARN", PAGE_URL, user_agent="TestBot/2.0").fetch_notices(RETRIEVED_AT)

        assert responses.calls[0].request.headers["User-Agent"] == "TestBot/2.0"

    def test_error_hierarchy(self):
        assert issubclass(AdapterHTTPError, AdapterError)
        assert issubclass(AdapterTimeoutError, AdapterError)
        assert AdapterTimeoutError("t", url="u").retryable
        assert not AdapterResponseError("bad").retryable


# ============================================================================
# Official-source providers
# ============================================================================


class TestHtmlTableProvider:
    """Tests for HtmlTableProvider."""

    @responses.activate
    def test_follows_pagination_and_stops_on_loop(self):
        responses.add(
            responses.GET,
            PAGE_URL,
            body=warn_page([("Sunrise SNF", "Portland", "02/10/2025", "120")], next_href="/warn/page/2"),
        )
        responses.add(
            responses.GET,
            f"{PAGE_URL}/page/2",
            body=warn_page([("Acme Widgets", "Salem", "01/02/2025", "40")], next_href="/warn"),
        )

        notices = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL).fetch_notices(RETRIEVED_AT)

        assert [n.employer_name for n in notices] == ["Sunrise SNF", "Acme Widgets"]
        assert len(responses.calls) == 2
        assert notices[0].jurisdiction == "OR"
        assert notices[0].provenance.provider_name == "Oregon WARN"
        assert notices[0].provenance.retrieved_at == RETRIEVED_AT
        assert notices[0].employees_affected == 120
        assert notices[0].impact is not None

    @responses.activate
    def test_max_pages(self):
        responses.add(
            responses.GET, PAGE_URL, body=warn_page([("A Co", "Salem", "", "1")], next_href="/warn/page/2")
        )
        responses.add(
            responses.GET,
            f"{PAGE_URL}/page/2",
            body=warn_page([("B Co", "Salem", "", "1")], next_href="/warn/page/3"),
        )

        notices = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL, max_pages=2).fetch_notices(RETRIEVED_AT)

        assert len(notices) == 2
        assert len(responses.calls) == 2

    @responses.activate
    def test_later_page_failure_keeps_collected_rows(self):
        responses.add(
            responses.GET,
            PAGE_URL,
            body=warn_page([("Sunrise SNF", "Portland", "02/10/2025", "120")], next_href="/warn/page/2"),
        )
        responses.add(responses.GET, f"{PAGE_URL}/page/2", status=404)

        notices = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL).fetch_notices(RETRIEVED_AT)

        assert [n.employer_name for n in notices] == ["Sunrise SNF"]

    @responses.activate
    def test_first_page_failure_raises(self):
        responses.add(responses.GET, PAGE_URL, status=403)

        with pytest.raises(AdapterHTTPError):
            HtmlTableProvider("OR", "Oregon WARN", PAGE_URL).fetch_notices(RETRIEVED_AT)

    @responses.activate
    def test_via_text_proxy_requests_html(self):
        responses.add(
            responses.GET,
            "https://r.jina.ai/http://example.gov/warn",
            body=warn_page([("Acme Widgets", "Salem", "01/02/2025", "40")]),
            match=[matchers.header_matcher({"X-Return-Format": "html"})],
        )

        notices = HtmlTableProvider("OR", "Oregon WARN", PAGE_URL, via_text_proxy=True).fetch_notices(RETRIEVED_AT)

        assert len(notices) == 1


class TestCsvProvider:
    """Tests for CsvProvider."""

    @responses.activate
    def test_state_filter_and_provenance(self):
        data_url = "https://example.gov/export.csv"
        responses.add(
            responses.GET,
            data_url,
            body=(
                "Company,City,State,Notice Date,Employees\n"
                "Acme,Wichita,KS,01/02/2025,40\n"
                "Other,Tulsa,OK,01/03/2025,5\n"
                "No State Co,Topeka,,01/04/2025,3\n"
            ),
        )

        provider = CsvProvider("KS", "Kansas WARN", PAGE_URL, data_url=data_url, state_values=["KS"])
        notices = provider.fetch_notices(RETRIEVED_AT)

        assert [n.employer_name for n in notices] == ["Acme", "No State Co"]
        assert notices[0].provenance.provider_url == PAGE_URL
        assert notices[0].notice_date == date(2025, 1, 2)


def workbook_bytes(rows) -> bytes:
    workbook = Workbook()
    for row in rows:
        workbook.active.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestSpreadsheetProvider:
    """Tests for SpreadsheetProvider."""

    @responses.activate
    def test_reads_workbook(self):
        data_url = "https://example.gov/warn.xlsx"
        responses.add(
            responses.GET,
            data_url,
            body=workbook_bytes(
                [
                    ["WARN Report"],
                    ["Company", "City", "Notice Date", "No. Of Employees"],
                    ["Valley Medical Center", "Fresno", datetime(2025, 1, 5), 250],
                ]
            ),
        )

        notices = SpreadsheetProvider("CA", "California EDD WARN", PAGE_URL, data_url=data_url).fetch_notices(
            RETRIEVED_AT
        )

        assert len(notices) == 1
        assert notices[0].notice_date == date(2025, 1, 5)
        assert notices[0].employees_affected == 250

    @responses.activate
    def test_corrupt_workbook_is_response_error(self):
        data_url = "https://example.gov/warn.xlsx"
        responses.add(responses.GET, data_url, body=b"<html>maintenance</html>")

        provider = SpreadsheetProvider("CA", "California EDD WARN", PAGE_URL, data_url=data_url)

        with pytest.raises(AdapterResponseError):
            provider.fetch_notices(RETRIEVED_AT)


class TestTextListingProvider:
    """Tests for TextListingProvider."""

    @responses.activate
    def test_pdf_links_become_attachments(self):
        responses.add(
            responses.GET,
            "https://r.jina.ai/http://www.michigan.gov/warn",
            body=(
                "* [Acme Manufacturing](https://www.michigan.gov/warn/acme.pdf)\n"
                "  City: Detroit, Wayne County\n"
                "  Layoff date: March 4, 2025\n"
                "  Number of jobs impacted: 120\n"
            ),
        )

        provider = TextListingProvider("MI", "Michigan LEO WARN", "https://www.michigan.gov/warn")
        notices = provider.fetch_notices(RETRIEVED_AT)

        assert len(notices) == 1
        notice = notices[0]
        assert notice.city == "Detroit"
        assert notice.notice_date == date(2025, 3, 4)
        assert notice.attachments[0].url == "https://www.michigan.gov/warn/acme.pdf"
        assert notice.attachments[0].label == "WARN Notice PDF"
        assert notice.attachments[0].mime_type == "application/pdf"


# ============================================================================
# Aggregator providers
# ============================================================================


LAYOFFDATA_CSV = (
    "State,Company,City,WARN Received Date,Number of Workers,Closure / Layoff\n"
    "Oregon,Sunrise SNF,Portland,02/10/2025,120,Closure\n"
    "WA,Acme,Seattle,01/02/2025,40,Layoff\n"
    ",Orphan Co,Salem,01/02/2025,1,Layoff\n"
)


def sheet_url(sheet_id):
    return f"https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv"


class TestLayoffDataProvider:
    """Tests for LayoffDataProvider."""

    @responses.activate
    def test_filters_to_jurisdiction_and_skips_failed_sheet(self):
        responses.add(responses.GET, sheet_url("current"), body=LAYOFFDATA_CSV)
        responses.add(responses.GET, sheet_url("historical"), status=404)

        provider = LayoffDataProvider("OR", sheet_ids=["current", "historical"])
        notices = provider.fetch_notices(RETRIEVED_AT)

        assert [n.employer_name for n in notices] == ["Sunrise SNF"]
        assert notices[0].reason == "Closure"
        assert notices[0].provenance.provider_name == "WARN Database (layoffdata.com)"

    @responses.activate
    def test_every_sheet_failing_raises(self):
        responses.add(responses.GET, sheet_url("current"), status=404)
        responses.add(responses.GET, sheet_url("historical"), status=410)

        provider = LayoffDataProvider("OR", sheet_ids=["current", "historical"])

        with pytest.raises(AdapterHTTPError):
            provider.fetch_notices(RETRIEVED_AT)


WARNTRACKER_PAGE = """Title: WARN Tracker - Oregon

| Company Name | City/Jurisdiction | Notice Date | Layoff Date | # Laid off |
| --- | --- | --- | --- | --- |
| Sunrise SNF | 100 Main St, Portland, OR | 2025-02-10 | 2025-04-11 | 120 |
| [Acme Widgets](https://www.warntracker.com/company/acme) | Salem | 2025-01-02 | | 40 |
"""


class TestWarnTrackerProvider:
    """Tests for WarnTrackerProvider."""

    @responses.activate
    def test_location_split_into_address_and_city(self):
        responses.add(
            responses.GET, "https://r.jina.ai/http://www.warntracker.com/?state=OR", body=WARNTRACKER_PAGE
        )

        provider = WarnTrackerProvider("OR")
        notices = provider.fetch_notices(RETRIEVED_AT)

        assert provider.name == "WARNTracker (OR)"
        assert [n.employer_name for n in notices] == ["Sunrise SNF", "Acme Widgets"]
        sunrise, acme = notices
        assert (sunrise.address, sunrise.city) == ("100 Main St", "Portland")
        assert sunrise.effective_date == date(2025, 4, 11)
        assert acme.city == "Salem"
        assert acme.attachments == []

    @pytest.mark.parametrize(
        "location,expected",
        [
            ("100 Main St, Suite 2, Springfield, IL", ("100 Main St, Suite 2", "Springfield")),
            ("Portland, OR 97201", (None, "Portland")),
            ("Salem", (None, "Salem")),
            ("", (None, None)),
        ],
    )
    def test_split_location(self, location, expected):
        assert split_location(location) == expected


USATODAY_PAGE = """| Name | Reporting State | Notice Date | Number of employees affected |
|---|---|---|---|
| [Acme Corp](https://data.usatoday.com/warn/acme-corp/12345/) | Oregon | 02/10/2025 | 40 |
| [Other Co](https://data.usatoday.com/warn/other-co/999/) | Washington | 02/11/2025 | 10 |
"""


class TestUsaTodayProvider:
    """Tests for UsaTodayProvider."""

    @responses.activate
    def test_detail_link_becomes_provenance(self):
        responses.add(
            responses.GET,
            "https://r.jina.ai/http://data.usatoday.com/see-which-companies-announced-mass-layoffs-closings/",
            body=USATODAY_PAGE,
        )

        notices = UsaTodayProvider("OR").fetch_notices(RETRIEVED_AT)

        assert len(notices) == 1
        notice = notices[0]
        assert notice.employer_name == "Acme Corp"
        assert notice.provenance.provider_url == "https://data.usatoday.com/warn/acme-corp/12345/"
        assert notice.provenance.provider_record_id == "12345"
        assert [a.url for a in notice.attachments] == ["https://data.usatoday.com/warn/acme-corp/12345/"]

    def test_record_id_from_url(self):
        assert record_id_from_url("https://data.usatoday.com/warn/acme/77") == "77"
        assert record_id_from_url(None) is None
        assert record_id_from_url("https://data.usatoday.com/") is None


# ============================================================================
# StateAdapter fallback
# ============================================================================


class TestStateAdapter:
    """Tests for ordered provider fallback."""

    def test_first_non_empty_stops_at_first_result(self):
        empty = fake_provider("Official", [])
        aggregator = fake_provider("WARNTracker", make_notices(2))
        last_resort = fake_provider("USA Today")

        result = StateAdapter("OR", "Oregon WARN", [empty, aggregator, last_resort]).fetch_latest()

        assert len(result.notices) == 2
        assert result.provider_used == "WARNTracker"
        assert result.providers_attempted == ["Official", "WARNTracker"]
        last_resort.fetch_notices.assert_not_called()

    def test_minimum_count_escalates_below_threshold(self):
        thin = fake_provider("Official", make_notices(2))
        fuller = fake_provider("WARN Database", make_notices(6))
        unused = fake_provider("USA Today")

        adapter = StateAdapter(
            "OR", "Oregon WARN", [thin, fuller, unused], policy=FallbackPolicy.MINIMUM_COUNT, min_results=5
        )
        result = adapter.fetch_latest()

        assert len(result.notices) == 6
        assert result.provider_used == "WARN Database"
        unused.fetch_notices.assert_not_called()

    def test_minimum_count_satisfied_by_first_provider(self):
        full = fake_provider("Official", make_notices(6))
        unused = fake_provider("WARN Database")

        adapter = StateAdapter("OR", "Oregon WARN", [full, unused], policy="minimum_count", min_results=5)

        assert adapter.fetch_latest().provider_used == "Official"
        unused.fetch_notices.assert_not_called()

    def test_keeps_best_result_when_threshold_never_met(self):
        providers = [
            fake_provider("Official", make_notices(3)),
            fake_provider("WARN Database", make_notices(1)),
            fake_provider("USA Today", error=AdapterHTTPError("HTTP 500", 500, "https://x")),
        ]

        adapter = StateAdapter("OR", "Oregon WARN", providers, policy=FallbackPolicy.MINIMUM_COUNT, min_results=5)
        result = adapter.fetch_latest()

        assert len(result.notices) == 3
        assert result.provider_used == "Official"
        assert result.providers_attempted == ["Official", "WARN Database", "USA Today"]
        assert result.provider_errors == ["USA Today: HTTP 500"]
        assert not result.exhausted

    def test_all_providers_failing_is_exhausted(self):
        providers = [
            fake_provider("Official", error=AdapterTimeoutError("timed out", url="https://x")),
            fake_provider("WARNTracker", error=AdapterHTTPError("HTTP 404", 404, "https://y")),
        ]

        result = StateAdapter("OR", "Oregon WARN", providers).fetch_latest()

        assert result.notices == []
        assert result.provider_used is None
        assert result.exhausted
        assert len(result.provider_errors) == 2

    def test_unexpected_exception_recorded(self):
        broken = fake_provider("Official", error=ValueError("bad markup"))
        backup = fake_provider("WARNTracker", make_notices(1))

        result = StateAdapter("OR", "Oregon WARN", [broken, backup]).fetch_latest()

        assert result.provider_errors == ["Official: ValueError: bad markup"]
        assert result.provider_used == "WARNTracker"

    def test_empty_everywhere_is_not_exhausted(self):
        result = StateAdapter("OR", "Oregon WARN", [fake_provider("Official", [])]).fetch_latest()

        assert result.notices == []
        assert result.provider_used is None
        assert not result.exhausted

    def test_no_provider_started_after_deadline(self):
        def slow_empty(fetched_at):
            time.sleep(0.1)
            return []

        official = fake_provider("Official")
        official.fetch_notices.side_effect = slow_empty
        aggregator = fake_provider("WARNTracker", make_notices(2))

        result = StateAdapter("OR", "Oregon WARN", [official, aggregator]).fetch_latest(
            deadline=time.monotonic() + 0.05
        )

        assert result.providers_attempted == ["Official"]
        assert result.notices == []
        aggregator.fetch_notices.assert_not_called()

    def test_expired_deadline_starts_nothing(self):
        official = fake_provider("Official", make_notices(1))

        result = StateAdapter("OR", "Oregon WARN", [official]).fetch_latest(deadline=time.monotonic() - 1)

        assert result.providers_attempted == []
        assert not result.exhausted
        official.fetch_notices.assert_not_called()

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            StateAdapter("OR", "Oregon WARN", [])
        with pytest.raises(ValueError):
            StateAdapter("OR", "Oregon WARN", [fake_provider("A")], min_results=0)

    def test_is_sufficient(self):
        first = StateAdapter("OR", "Oregon WARN", [fake_provider("A")])
        minimum = StateAdapter("OR", "Oregon WARN", [fake_provider("A")], policy="minimum_count", min_results=10)

        assert first.is_sufficient(1)
        assert not first.is_sufficient(0)
        assert not minimum.is_sufficient(9)
        assert minimum.is_sufficient(10)


# ============================================================================
# Factory and registry
# ============================================================================


class TestGetProvider:
    """Tests for the provider factory."""

    def test_aggregator_defaults(self):
        provider = get_provider(ProviderSpec(type="warntracker"), "OR", AdvancedConfig())

        assert isinstance(provider, WarnTrackerProvider)
        assert provider.name == "WARNTracker (OR)"

    def test_settings_applied(self):
        advanced = AdvancedConfig(http_request_timeout=20, max_pages=3, max_notices_per_provider=10)
        orchestrator = OrchestratorConfig(retry_attempts=3, retry_backoff_seconds=0.5)
        spec = ProviderSpec(type="html_table", url=PAGE_URL, table_selector="table.warn")

        provider = get_provider(spec, "OR", advanced, orchestrator, default_name="Oregon WARN")

        assert isinstance(provider, HtmlTableProvider)
        assert provider.name == "Oregon WARN"
        assert provider.timeout == 20
        assert provider.max_pages == 3
        assert provider.max_notices == 10
        assert provider.retry_attempts == 3
        assert provider.retry_backoff_seconds == 0.5
        assert provider.extractor.table_selector == "table.warn"

    def test_unknown_type(self):
        spec = ProviderSpec.model_construct(type="ftp", name="X", url=PAGE_URL)

        with pytest.raises(AdapterConfigurationError, match="Unknown provider type"):
            get_provider(spec, "OR", AdvancedConfig())

    def test_official_provider_needs_name(self):
        with pytest.raises(AdapterConfigurationError, match="needs a name"):
            get_provider(ProviderSpec(type="html_table", url=PAGE_URL), "OR", AdvancedConfig())


def provider_types(adapter):
    return [provider.provider_type for provider in adapter.providers]


class TestRegistry:
    """Tests for the jurisdiction registry."""

    def test_covers_every_jurisdiction_once(self):
        codes = [source.code for source in JURISDICTION_SOURCES]

        assert len(codes) == 52
        assert set(codes) == {code.value for code in StateCode}

    def test_list_adapters_all(self):
        adapters = list_adapters(AppConfig())

        assert len(adapters) == 52
        assert all(adapter.providers for adapter in adapters)

    def test_default_chains(self):
        adapters = {adapter.jurisdiction: adapter for adapter in list_adapters(AppConfig())}

        assert provider_types(adapters["OR"]) == ["html_table", "layoffdata", "warntracker", "usatoday"]
        assert provider_types(adapters["CT"]) == ["layoffdata", "warntracker", "usatoday"]
        assert provider_types(adapters["AR"]) == ["warntracker", "html_table", "layoffdata", "usatoday"]
        assert adapters["AR"].policy == FallbackPolicy.MINIMUM_COUNT
        assert adapters["AR"].min_results == 10
        assert provider_types(adapters["MI"])[0] == "text_listing"

    def test_provider_names(self):
        (adapter,) = list_adapters(AppConfig(states=["OR"]))

        assert [p.name for p in adapter.providers] == [
            "Oregon WARN",
            "WARN Database (layoffdata.com)",
            "WARNTracker (OR)",
            "USA Today WARN List",
        ]

    def test_state_selection_in_registry_order(self):
        adapters = list_adapters(AppConfig(states=["wa", "Oregon"]))

        assert [a.jurisdiction for a in adapters] == ["OR", "WA"]
        assert [a.jurisdiction for a in list_adapters(AppConfig(), states=["ca"])] == ["CA"]

    def test_disabled_override_skipped(self):
        config = AppConfig(jurisdictions=[JurisdictionConfig(code="PR", enabled=False)])

        codes = [a.jurisdiction for a in list_adapters(config)]

        assert len(codes) == 51
        assert "PR" not in codes

    def test_override_replaces_chain_and_policy(self):
        config = AppConfig(
            states=["OR"],
            jurisdictions=[
                {
                    "code": "Oregon",
                    "fallback_policy": "minimum_count",
                    "min_results": 5,
                    "providers": [{"type": "warntracker"}, {"type": "usatoday"}],
                }
            ],
        )

        (adapter,) = list_adapters(config)

        assert provider_types(adapter) == ["warntracker", "usatoday"]
        assert adapter.policy == FallbackPolicy.MINIMUM_COUNT
        assert adapter.min_results == 5
