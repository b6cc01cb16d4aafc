"""Unit tests for header recognition and the per-format extractors."""

import io
from datetime import datetime

import pytest
from openpyxl import Workbook

from app.extraction import (
    DelimitedTextExtractor,
    HtmlTableExtractor,
    MarkdownTableExtractor,
    SemanticField,
    SpreadsheetExtractor,
    TextListingExtractor,
    find_next_page_url,
    iter_markdown_tables,
    looks_like_header,
    match_headers,
    normalize_header,
)
from app.extraction.markdown import markdown_links, strip_markdown
from app.extraction.spreadsheet import cell_to_text, find_header_row

BASE_URL = "https://example.gov/warn/list"


# ============================================================================
# Header recognition
# ============================================================================


class TestHeaders:
    """Tests for header normalization and synonym matching."""

    def test_normalize_header(self):
        assert normalize_header("  # of Employees\n(Affected) ") == "of employees affected"
        assert normalize_header(None) == ""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Company Name", True),
            ("Number of Workers Affected", True),
            ("Notice Date", True),
            ("Acme Company", False),
            ("Date", False),
            ("", False),
            (None, False),
        ],
    )
    def test_looks_like_header(self, value, expected):
        assert looks_like_header(value) is expected

    def test_match_headers_common_layout(self):
        index = match_headers(["Company Name", "City", "Notice Date", "Effective Date", "# of Employees"])

        assert index == {
            SemanticField.EMPLOYER: 0,
            SemanticField.CITY: 1,
            SemanticField.NOTICE_DATE: 2,
            SemanticField.EFFECTIVE_DATE: 3,
            SemanticField.EMPLOYEES: 4,
        }

    def test_layoff_date_is_effective_not_reason(self):
        index = match_headers(["Employer", "Layoff Date", "Reason"])

        assert index[SemanticField.EFFECTIVE_DATE] == 1
        assert index[SemanticField.REASON] == 2
        assert SemanticField.NOTICE_DATE not in index

    def test_employer_synonyms_share_field(self):
        assert match_headers(["Employer"]) == {SemanticField.EMPLOYER: 0}
        assert match_headers(["Company Name"]) == {SemanticField.EMPLOYER: 0}

    def test_number_of_workers_affected_is_employee_count(self):
        index = match_headers(["Company Name", "Notice Date", "Number of Workers Affected"])

        assert index[SemanticField.EMPLOYEES] == 2
        assert index[SemanticField.NOTICE_DATE] == 1
        assert SemanticField.REASON not in index

    def test_unmatched_headers_absent(self):
        assert match_headers(["Foo", "Bar"]) == {}


# ============================================================================
# HTML tables and pagination
# ============================================================================


WARN_TABLE = """
<html><body>
<table class="warn">
  <tr><th>Company Name</th><th>City</th><th>Notice Date</th><th>Effective Date</th><th># of Employees</th></tr>
  <tr>
    <td><a href="/warn/1.pdf">Sunrise   SNF</a></td><td>Portland</td><td>02/10/2025</td>
    <td>04/11/2025</td><td>120</td>
  </tr>
  <tr><th>Company Name</th><th>City</th><th>Notice Date</th><th>Effective Date</th><th># of Employees</th></tr>
  <tr><td>Company Name</td><td>City</td><td>Notice Date</td><td>Effective Date</td><td>Employees</td></tr>
  <tr><td>Acme Widgets</td><td>Salem</td><td>01/02/2025</td><td></td><td><a href="details/2">view</a></td></tr>
  <tr><td></td><td>Bend</td><td>01/03/2025</td><td></td><td>5</td></tr>
</table>
<table><tr><th>Date</th><th>Amount</th></tr><tr><td>1/1/2025</td><td>4</td></tr></table>
</body></html>
"""


class TestHtmlTableExtractor:
    """Tests for HtmlTableExtractor."""

    def test_extracts_data_rows(self):
        records = HtmlTableExtractor().extract(WARN_TABLE, BASE_URL)

        assert [r.get(SemanticField.EMPLOYER) for r in records] == ["Sunrise SNF", "Acme Widgets"]
        first = records[0]
        assert first.get(SemanticField.CITY) == "Portland"
        assert first.get(SemanticField.NOTICE_DATE) == "02/10/2025"
        assert first.get(SemanticField.EFFECTIVE_DATE) == "04/11/2025"
        assert first.get(SemanticField.EMPLOYEES) == "120"

    def test_employer_cell_links_resolved(self):
        records = HtmlTableExtractor().extract(WARN_TABLE, BASE_URL)

        assert records[0].links == ["https://example.gov/warn/1.pdf"]

    def test_row_links_used_when_employer_cell_has_none(self):
        records = HtmlTableExtractor().extract(WARN_TABLE, BASE_URL)

        assert records[1].links == ["https://example.gov/warn/details/2"]

    def test_thead_headers(self):
        html = (
            "<table><thead><tr><th>Employer</th><th>Workers Affected</th></tr></thead>"
            "<tbody><tr><td>Acme</td><td>40</td></tr></tbody></table>"
        )

        records = HtmlTableExtractor().extract(html, BASE_URL)

        assert len(records) == 1
        assert records[0].get(SemanticField.EMPLOYEES) == "40"

    def test_table_selector_restricts_tables(self):
        html = WARN_TABLE + "<table><tr><th>Employer</th></tr><tr><td>Other Co</td></tr></table>"

        everything = HtmlTableExtractor().extract(html, BASE_URL)
        selected = HtmlTableExtractor(table_selector="table.warn").extract(html, BASE_URL)

        assert len(everything) == 3
        assert len(selected) == 2

    def test_no_tables(self):
        assert HtmlTableExtractor().extract("<p>No notices this month</p>", BASE_URL) == []


class TestFindNextPageUrl:
    """Tests for find_next_page_url."""

    def test_rel_next(self):
        html = '<a href="?page=1">Prev</a><a rel="next" href="?page=3">3</a>'

        assert find_next_page_url(html, BASE_URL) == "https://example.gov/warn/list?page=3"

    @pytest.mark.parametrize(
        "anchor",
        [
            '<a href="/p/2">Next »</a>',
            '<a href="/p/2">next page</a>',
            '<a href="/p/2" aria-label="Next page">2</a>',
            '<a href="/p/2" class="pager-next">2</a>',
        ],
    )
    def test_next_link_variants(self, anchor):
        assert find_next_page_url(f"<div>{anchor}</div>", BASE_URL) == "https://example.gov/p/2"

    def test_selector_takes_precedence(self):
        html = '<a class="more" href="/more">More</a><a rel="next" href="/p/2">Next</a>'

        assert find_next_page_url(html, BASE_URL, selector="a.more") == "https://example.gov/more"

    def test_fragment_link_ignored(self):
        html = '<a href="#">Next</a>'

        assert find_next_page_url(html, BASE_URL) is None

    def test_last_page(self):
        html = '<a href="?page=1">Previous</a><span>Page 2 of 2</span>'

        assert find_next_page_url(html, BASE_URL) is None


# ============================================================================
# CSV
# ============================================================================


class TestDelimitedTextExtractor:
    """Tests for DelimitedTextExtractor."""

    def test_header_synonyms(self):
        text = "Company,City,Notice Date,Employees\nAcme   Corp,Salem,01/02/2025,40\n,Bend,,3\n"

        records = DelimitedTextExtractor().extract(text)

        assert len(records) == 1
        assert records[0].get(SemanticField.EMPLOYER) == "Acme Corp"
        assert records[0].get(SemanticField.EMPLOYEES) == "40"
        assert records[0].get(SemanticField.NOTICE_DATE) == "01/02/2025"

    def test_byte_order_mark_stripped(self):
        records = DelimitedTextExtractor().extract("﻿Company,City\nAcme,Salem\n")

        assert records[0].get(SemanticField.EMPLOYER) == "Acme"

    def test_explicit_column_map(self):
        extractor = DelimitedTextExtractor(
            column_map={
                SemanticField.EMPLOYER: ["Business Name", "Company"],
                SemanticField.EMPLOYEES: ["Jobs"],
            }
        )

        records = extractor.extract("Company,Jobs,Other\nAcme,12,x\n")

        assert records[0].fields == {SemanticField.EMPLOYER: "Acme", SemanticField.EMPLOYEES: "12"}

    def test_alternate_delimiter(self):
        records = DelimitedTextExtractor(delimiter=";").extract("Employer;City\nAcme;Salem\n")

        assert records[0].get(SemanticField.CITY) == "Salem"

    def test_no_employer_column(self):
        assert DelimitedTextExtractor().extract("Date,Amount\n1/1/2025,4\n") == []

    def test_repeated_header_rows_skipped(self):
        text = (
            "Company Name,City,Notice Date\n"
            "Acme,Salem,01/02/2025\n"
            "Company Name,City,Notice Date\n"
            "Beta,Bend,01/03/2025\n"
        )

        records = DelimitedTextExtractor().extract(text)

        assert [r.get(SemanticField.EMPLOYER) for r in records] == ["Acme", "Beta"]

    @pytest.mark.parametrize("text", ["", "   \n"])
    def test_blank_input(self, text):
        assert DelimitedTextExtractor().extract(text) == []


# ============================================================================
# XLSX
# ============================================================================


def workbook_bytes(rows, sheet_title=None) -> bytes:
    workbook = Workbook()
    worksheet = workbook.active
    if sheet_title:
        worksheet.title = sheet_title
    for row in rows:
        worksheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestSpreadsheetExtractor:
    """Tests for SpreadsheetExtractor."""

    def test_header_row_detected_below_title(self):
        content = workbook_bytes(
            [
                ["Oregon WARN Notices"],
                ["Company Name", "City", "Notice Date", "Number of Workers"],
                ["Acme Widgets", "Salem", datetime(2025, 1, 2), 40],
                [None, "Bend", None, 3],
            ]
        )

        records = SpreadsheetExtractor().extract(content)

        assert len(records) == 1
        assert records[0].get(SemanticField.EMPLOYER) == "Acme Widgets"
        assert records[0].get(SemanticField.NOTICE_DATE) == "01/02/2025"
        assert records[0].get(SemanticField.EMPLOYEES) == "40"

    def test_repeated_header_rows_skipped(self):
        content = workbook_bytes(
            [
                ["Company Name", "City", "Notice Date"],
                ["Acme Widgets", "Salem", "01/02/2025"],
                ["Company Name", "City", "Notice Date"],
                ["Mercy Hospital", "Bend", "01/03/2025"],
            ]
        )

        records = SpreadsheetExtractor().extract(content)

        assert [r.get(SemanticField.EMPLOYER) for r in records] == ["Acme Widgets", "Mercy Hospital"]

    def test_no_header_row(self):
        content = workbook_bytes([["Acme", "Salem"], ["Mercy", "Bend"]])

        assert SpreadsheetExtractor().extract(content) == []

    def test_cell_to_text(self):
        assert cell_to_text(None) == ""
        assert cell_to_text(12.0) == "12"
        assert cell_to_text(12.5) == "12.5"
        assert cell_to_text(datetime(2025, 3, 4, 9, 30)) == "03/04/2025"
        assert cell_to_text("  Acme \n Corp ") == "Acme Corp"

    def test_find_header_row(self):
        rows = [("Report",), ("Employer", "City"), ("Acme", "Salem")]

        assert find_header_row(rows) == 1
        assert find_header_row([("Acme", "Salem")]) is None


# ============================================================================
# Markdown
# ============================================================================


MARKDOWN_PAGE = """Title: WARN Tracker

| Company | City | Notice Date | Employees 0 |
|---|---|---|---|
| [**Acme Corp**](https://example.com/acme) | Salem | 01/02/2025 | 40 |
| Bad row | only two |
| Mercy Hospital | Bend | 2025-02-03 | 12 |

Footer text

| Month | Notices |
| :--: | --- |
| January | 4 |
"""


class TestMarkdownTables:
    """Tests for markdown table parsing and extraction."""

    def test_iter_markdown_tables(self):
        tables = list(iter_markdown_tables(MARKDOWN_PAGE))

        assert [t.headers for t in tables] == [
            ["Company", "City", "Notice Date", "Employees"],
            ["Month", "Notices"],
        ]
        assert len(tables[0].rows) == 2
        assert tables[1].rows == [["January", "4"]]

    def test_extracts_rows_and_links(self):
        records = MarkdownTableExtractor().extract(MARKDOWN_PAGE)

        assert [r.get(SemanticField.EMPLOYER) for r in records] == ["Acme Corp", "Mercy Hospital"]
        assert records[0].links == ["https://example.com/acme"]
        assert records[1].links == []
        assert records[0].get(SemanticField.EMPLOYEES) == "40"

    def test_repeated_header_rows_skipped(self):
        page = (
            "| Company Name | City | Notice Date |\n"
            "|---|---|---|\n"
            "| Acme | Salem | 01/02/2025 |\n"
            "| **Company Name** | City | Notice Date |\n"
            "| Beta | Bend | 01/03/2025 |\n"
        )

        records = MarkdownTableExtractor().extract(page)

        assert [r.get(SemanticField.EMPLOYER) for r in records] == ["Acme", "Beta"]

    def test_missing_required_header(self):
        assert MarkdownTableExtractor(required_header="employer").extract(MARKDOWN_PAGE) == []

    def test_strip_markdown_and_links(self):
        value = "See [the *notice*](https://a.example/n.pdf) and `code`"

        assert strip_markdown(value) == "See the notice and code"
        assert markdown_links(value) == ["https://a.example/n.pdf"]
        assert strip_markdown(None) == ""


# ============================================================================
# Bulleted listings
# ============================================================================


LISTING_PAGE = """WARN notices received

* [Acme Manufacturing](https://agency.gov/warn/acme.pdf)
  Type of company action: Permanent closure
  City: Detroit, Wayne County
  Layoff date: March 4, 2025
  Number of jobs impacted: 120
* [Mercy Hospital](https://agency.gov/warn/mercy.pdf)
  City: Flint
  Number of jobs impacted: 1,050 (approx.)
Follow us on social media
"""


class TestTextListingExtractor:
    """Tests for TextListingExtractor."""

    def test_entries_parsed(self):
        records = TextListingExtractor().extract(LISTING_PAGE)

        assert [r.get(SemanticField.EMPLOYER) for r in records] == ["Acme Manufacturing", "Mercy Hospital"]
        acme, mercy = records
        assert acme.get(SemanticField.REASON) == "Permanent closure"
        assert acme.get(SemanticField.CITY) == "Detroit"
        assert acme.get(SemanticField.NOTICE_DATE) == "March 4, 2025"
        assert acme.get(SemanticField.EMPLOYEES) == "120"
        assert acme.get(SemanticField.COUNTY) is None
        assert acme.links == ["https://agency.gov/warn/acme.pdf"]
        assert mercy.get(SemanticField.EMPLOYEES) == "1,050"
        assert "Follow us" not in (mercy.get(SemanticField.RAW_TEXT) or "")

    def test_empty_page(self):
        assert TextListingExtractor().extract("") == []
        assert TextListingExtractor().extract("No notices at this time.") == []
