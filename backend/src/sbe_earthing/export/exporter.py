"""Tabular export of back-office records.

Records are plain dicts as stored by the document store. Each dataset
export filters the records, flattens them into display rows, and
serializes to CSV, tab-separated text (opened by spreadsheet tools), or
JSON.
"""

import csv
import io
import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

EXPORT_FORMATS = ("csv", "xlsx", "json")


# =============================================================================
# Types
# =============================================================================


@dataclass
class ExportData:
    """Header row plus display rows, ready for serialization."""

    headers: list[str]
    rows: list[list[Any]]
    filename: str

    def select(self, columns: list[str]) -> "ExportData":
        """Keep only the named columns, in the given order."""
        indexes = [self.headers.index(c) for c in columns if c in self.headers]
        return ExportData(
            headers=[self.headers[i] for i in indexes],
            rows=[[row[i] for i in indexes] for row in self.rows],
            filename=self.filename,
        )


@dataclass
class DateRange:
    """Inclusive createdAt window."""

    start: datetime
    end: datetime

    def contains(self, value: datetime) -> bool:
        return _as_utc(self.start) <= _as_utc(value) <= _as_utc(self.end)


@dataclass
class ExportOptions:
    """Filtering and output choices for an export.

    Attributes:
        date_range: Only records created inside this window (contacts, enquiries)
        filters: Field equality filters; "all" or empty values are ignored
        columns: Restrict tabular output to these headers
        format: "csv", "xlsx" (tab-separated) or "json"
    """

    date_range: DateRange | None = None
    filters: dict[str, Any] = field(default_factory=dict)
    columns: list[str] | None = None
    format: str = "csv"

    def __post_init__(self) -> None:
        if self.format not in EXPORT_FORMATS:
            raise ValueError(
                f"Unsupported export format '{self.format}'. "
                f"Expected one of: {', '.join(EXPORT_FORMATS)}"
            )


@dataclass(frozen=True)
class ExportFile:
    """A serialized export, ready to download."""

    filename: str
    content: str
    media_type: str


# =============================================================================
# Helpers
# =============================================================================


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_datetime(value: Any) -> datetime | None:
    """Parse a stored timestamp; None for missing or unparsable values."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value: Any, style: str = "short") -> str:
    """Format a timestamp as M/D/YYYY (short) or "January 5, 2024, 03:04 PM" (long)."""
    parsed = parse_datetime(value)
    if parsed is None:
        return ""
    if style == "long":
        return f"{parsed:%B} {parsed.day}, {parsed.year}, {parsed:%I:%M %p}"
    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def matches_filters(record: dict[str, Any], filters: dict[str, Any]) -> bool:
    for key, value in filters.items():
        if value == "all" or not value:
            continue
        if record.get(key) != value:
            return False
    return True


def _in_range(record: dict[str, Any], date_range: DateRange | None) -> bool:
    if date_range is None:
        return True
    created = parse_datetime(record.get("createdAt"))
    return created is not None and date_range.contains(created)


def _active_label(record: dict[str, Any]) -> str:
    return "Active" if record.get("isActive", True) else "Inactive"


# =============================================================================
# Exporter
# =============================================================================


class DataExporter:
    """Builds ExportFile objects for each back-office dataset."""

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock

    # --- Serializers ---

    @staticmethod
    def to_csv(data: ExportData) -> str:
        """Comma-separated rows; cells with commas, quotes or newlines are quoted."""
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(data.headers)
        writer.writerows(data.rows)
        content = buffer.getvalue()
        return content[:-1] if content.endswith("\n") else content

    @staticmethod
    def to_tsv(data: ExportData) -> str:
        lines = ["\t".join(data.headers)]
        for row in data.rows:
            lines.append("\t".join("" if cell is None else str(cell) for cell in row))
        return "\n".join(lines)

    @staticmethod
    def to_json(data: Any) -> str:
        return json.dumps(data, indent=2, ensure_ascii=False, default=str)

    def _stamp(self) -> str:
        return self._clock().strftime("%Y-%m-%d")

    def _render(
        self,
        dataset: str,
        headers: list[str],
        rows: list[list[Any]],
        records: Any,
        options: ExportOptions,
    ) -> ExportFile:
        filename = f"{dataset}_{self._stamp()}"

        if options.format == "json":
            return ExportFile(f"{filename}.json", self.to_json(records), "application/json")

        data = ExportData(headers=headers, rows=rows, filename=filename)
        if options.columns:
            data = data.select(options.columns)

        if options.format == "xlsx":
            return ExportFile(
                f"{filename}.tsv", self.to_tsv(data), "text/tab-separated-values"
            )
        return ExportFile(f"{filename}.csv", self.to_csv(data), "text/csv")

    # --- Datasets ---

    def export_contacts(
        self, contacts: list[dict[str, Any]], options: ExportOptions | None = None
    ) -> ExportFile:
        options = options or ExportOptions()
        headers = [
            "Name", "Email", "Phone", "Subject", "Category", "Status",
            "Priority", "Created Date", "Updated Date", "Message",
        ]
        rows = [
            [
                c.get("name"),
                c.get("email"),
                c.get("phone") or "",
                c.get("subject"),
                c.get("type"),
                c.get("status"),
                c.get("priority"),
                format_date(c.get("createdAt")),
                format_date(c.get("updatedAt")),
                c.get("message"),
            ]
            for c in contacts
            if _in_range(c, options.date_range) and matches_filters(c, options.filters)
        ]
        return self._render("contacts", headers, rows, contacts, options)

    def export_enquiries(
        self, enquiries: list[dict[str, Any]], options: ExportOptions | None = None
    ) -> ExportFile:
        options = options or ExportOptions()
        headers = [
            "Name", "Email", "Phone", "Company", "Enquiry Type", "Subject",
            "Product", "Status", "Priority", "Source", "Created Date",
            "Updated Date", "Message",
        ]
        rows = [
            [
                e.get("name"),
                e.get("email") or "",
                e.get("phone"),
                e.get("company") or "",
                e.get("enquiryType"),
                e.get("subject"),
                e.get("productName") or "",
                e.get("status"),
                e.get("priority"),
                e.get("source"),
                format_date(e.get("createdAt")),
                format_date(e.get("updatedAt")),
                e.get("message"),
            ]
            for e in enquiries
            if _in_range(e, options.date_range) and matches_filters(e, options.filters)
        ]
        return self._render("enquiries", headers, rows, enquiries, options)

    def export_products(
        self, products: list[dict[str, Any]], options: ExportOptions | None = None
    ) -> ExportFile:
        options = options or ExportOptions()
        headers = [
            "Name", "Category", "Status", "Featured", "Variants Count",
            "Total Stock", "Price Range", "Created Date", "Updated Date",
        ]
        rows = []
        for product in products:
            if not matches_filters(product, options.filters):
                continue

            variants = product.get("variants") or []
            prices = [v["price"] for v in variants if v.get("price") is not None]
            if prices:
                price_range = f"₹{format_number(min(prices))} - ₹{format_number(max(prices))}"
            else:
                price_range = "N/A"
            total_stock = sum(v.get("stock") or 0 for v in variants)

            rows.append([
                product.get("name"),
                product.get("category"),
                _active_label(product),
                "Yes" if product.get("isFeatured") else "No",
                len(variants),
                total_stock,
                price_range,
                format_date(product.get("createdAt")),
                format_date(product.get("updatedAt")),
            ])
        return self._render("products", headers, rows, products, options)

    def export_faqs(
        self, faqs: list[dict[str, Any]], options: ExportOptions | None = None
    ) -> ExportFile:
        options = options or ExportOptions()
        headers = [
            "Question", "Answer", "Category", "Status", "Priority", "Views",
            "Helpful Count", "Not Helpful Count", "Created Date", "Updated Date",
        ]
        rows = []
        for faq in faqs:
            if not matches_filters(faq, options.filters):
                continue
            helpful = faq.get("helpful") or {}
            rows.append([
                faq.get("question"),
                faq.get("answer"),
                faq.get("category"),
                _active_label(faq),
                faq.get("order", 0),
                faq.get("views", 0),
                helpful.get("yes", 0),
                helpful.get("no", 0),
                format_date(faq.get("createdAt")),
                format_date(faq.get("updatedAt")),
            ])
        return self._render("faqs", headers, rows, faqs, options)

    def export_analytics(self, data: dict[str, Any], kind: str = "overview") -> ExportFile:
        """Overview metrics as CSV, or the full analytics payload as JSON."""
        if kind == "overview":
            headers = ["Metric", "Value", "Change"]
            rows = [
                ["Total Products", data.get("totalProducts"), data.get("productsChange") or "N/A"],
                ["Total Contacts", data.get("totalContacts"), data.get("contactsChange") or "N/A"],
                ["Total FAQs", data.get("totalFAQs"), data.get("faqsChange") or "N/A"],
                ["Monthly Queries", data.get("monthlyQueries"), data.get("queriesChange") or "N/A"],
                [
                    "Conversion Rate",
                    f"{data.get('conversionRate') or 0}%",
                    data.get("conversionChange") or "N/A",
                ],
            ]
            return self._render("analytics_overview", headers, rows, data, ExportOptions())

        if kind == "detailed":
            return self._render(
                "analytics_detailed", [], [], data, ExportOptions(format="json")
            )

        raise ValueError(f"Unknown analytics export '{kind}'. Expected overview or detailed")

    def export_summary(
        self,
        contacts_count: int,
        products_count: int,
        faqs_count: int,
        date_range: DateRange | None = None,
    ) -> ExportFile:
        """One-page report of how many records each dataset holds."""
        if date_range:
            range_label = f"{format_date(date_range.start)} to {format_date(date_range.end)}"
        else:
            range_label = "All Time"

        rows: list[list[Any]] = [
            ["Export Summary Report", ""],
            ["Generated On", format_date(self._clock(), "long")],
            ["", ""],
            ["Data Exported", "Count"],
            ["Contacts", contacts_count],
            ["Products", products_count],
            ["FAQs", faqs_count],
            ["", ""],
            ["Date Range", range_label],
        ]
        return self._render("export_summary", ["Field", "Value"], rows, rows, ExportOptions())
