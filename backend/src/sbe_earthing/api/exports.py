"""Admin data export endpoints."""

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from sbe_earthing.auth import UserContext, require_admin
from sbe_earthing.export import (
    DataExporter,
    DateRange,
    ExportFile,
    ExportOptions,
    parse_datetime,
)
from sbe_earthing.persistence import DocumentStore

logger = logging.getLogger(__name__)

DATASETS = ("contacts", "enquiries", "products", "faqs", "analytics", "summary")

# Query parameters that are not record filters
_RESERVED_PARAMS = {"format", "start", "end", "columns", "kind"}


def dashboard_stats(store: DocumentStore, now: datetime | None = None) -> dict[str, Any]:
    """Headline counts for the admin dashboard and the analytics export."""
    now = now or datetime.now(timezone.utc)
    month_ago = now - timedelta(days=30)

    contacts = store.find("contacts")
    enquiries = store.find("enquiries")

    recent_queries = 0
    for record in contacts + enquiries:
        created = parse_datetime(record.get("createdAt"))
        if created and DateRange(month_ago, now).contains(created):
            recent_queries += 1

    return {
        "totalProducts": store.count("products", {"isActive": True}),
        "totalContacts": len(contacts),
        "totalEnquiries": len(enquiries),
        "totalFAQs": store.count("faqs", {"isActive": True}),
        "monthlyQueries": recent_queries,
        "contactsByType": dict(Counter(c.get("type", "general") for c in contacts)),
        "recentContacts": contacts[:5],
    }


def _date_range(start: str | None, end: str | None) -> DateRange | None:
    if not start and not end:
        return None
    start_at = parse_datetime(start)
    end_at = parse_datetime(end)
    if start_at is None or end_at is None:
        raise HTTPException(
            status_code=400,
            detail="start and end must both be ISO 8601 timestamps",
        )
    return DateRange(start_at, end_at)


def _download(export: ExportFile) -> Response:
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


def create_exports_router(
    get_store: Callable[[], DocumentStore | None],
    exporter: DataExporter | None = None,
) -> APIRouter:
    """Create the exports router (admin only)."""
    router = APIRouter(prefix="/api/exports", tags=["exports"])
    exporter = exporter or DataExporter()

    @router.get("/{dataset}")
    async def export_dataset(
        dataset: str,
        request: Request,
        format: str = "csv",
        start: str | None = None,
        end: str | None = None,
        columns: str | None = None,
        kind: str = "overview",
        user: UserContext = Depends(require_admin),
    ) -> Response:
        """Download a dataset as CSV, tab-separated text or JSON.

        Any query parameter other than format/start/end/columns/kind is
        an equality filter on the records (e.g. ?status=new).
        """
        if dataset not in DATASETS:
            raise HTTPException(
                status_code=404,
                detail=f"Unknown dataset '{dataset}'. Expected one of: {', '.join(DATASETS)}",
            )

        store = get_store()
        if store is None:
            raise HTTPException(status_code=503, detail="Store not available")

        date_range = _date_range(start, end)
        try:
            options = ExportOptions(
                date_range=date_range,
                filters={
                    k: v for k, v in request.query_params.items() if k not in _RESERVED_PARAMS
                },
                columns=[c.strip() for c in columns.split(",")] if columns else None,
                format=format,
            )

            if dataset == "analytics":
                export = exporter.export_analytics(dashboard_stats(store), kind)
            elif dataset == "summary":
                export = exporter.export_summary(
                    store.count("contacts"),
                    store.count("products"),
                    store.count("faqs"),
                    date_range,
                )
            else:
                records = store.find(dataset)
                export = getattr(exporter, f"export_{dataset}")(records, options)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        logger.info("Export of %s requested by %s", dataset, user.subject)
        return _download(export)

    return router
