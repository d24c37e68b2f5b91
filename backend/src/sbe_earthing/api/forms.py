"""Form metadata, validation and submission endpoints."""

import logging
from typing import Any, Callable

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sbe_earthing.auth import require_admin
from sbe_earthing.forms import (
    FormConfigLoader,
    FormController,
    FormDefinition,
    FormValidator,
    render_form,
)
from sbe_earthing.persistence import DocumentStore

logger = logging.getLogger(__name__)


class SubmissionRequest(BaseModel):
    """Request body for validate and submit."""

    data: dict[str, Any]


def _client_metadata(request: Request) -> dict[str, Any]:
    return {
        "ipAddress": request.client.host if request.client else None,
        "userAgent": request.headers.get("user-agent"),
    }


def create_forms_router(
    get_form_loader: Callable[[], FormConfigLoader | None],
    get_store: Callable[[], DocumentStore | None],
) -> APIRouter:
    """Create the forms router.

    Args:
        get_form_loader: Returns the loaded form definitions
        get_store: Returns the connected document store
    """
    router = APIRouter(prefix="/api/forms", tags=["forms"])

    def _get_form(request: Request, slug: str) -> FormDefinition:
        loader = get_form_loader()
        definition = loader.get_form(slug) if loader else None
        if not definition:
            raise HTTPException(status_code=404, detail=f"Form '{slug}' not found")
        if not definition.is_public:
            require_admin(request)
        return definition

    @router.get("")
    async def list_forms() -> dict[str, Any]:
        """List all form definitions (summary only)."""
        loader = get_form_loader()
        forms = loader.list_forms() if loader else []
        return {
            "forms": [
                {
                    "slug": f.slug,
                    "name": f.name,
                    "access": f.access,
                    "fieldCount": len(f.fields),
                }
                for f in forms
            ]
        }

    @router.get("/{slug}")
    async def get_form(slug: str, request: Request) -> dict[str, Any]:
        """Form definition plus the field views of a blank form."""
        definition = _get_form(request, slug)

        controller = FormController(
            on_submit=lambda data, is_valid: None,
            validation_rules=definition.rules,
            initial_data=definition.initial_data(),
            options=definition.options,
        )
        return {
            **definition.to_dict(),
            "initialData": controller.data,
            "view": [v.to_dict() for v in render_form(controller, definition.fields)],
        }

    @router.post("/{slug}/validate")
    async def validate_form(slug: str, body: SubmissionRequest, request: Request) -> dict[str, Any]:
        """Validate a payload without storing it."""
        definition = _get_form(request, slug)
        data = {**definition.initial_data(), **definition.coerce(body.data)}
        return FormValidator(definition.rules).validate(data).to_dict()

    @router.post("/{slug}/submit", status_code=201)
    async def submit_form(slug: str, body: SubmissionRequest, request: Request) -> Any:
        """Run a payload through the form controller and store it when valid."""
        definition = _get_form(request, slug)
        if not definition.collection:
            raise HTTPException(
                status_code=405,
                detail=f"Form '{slug}' is validation-only and does not accept submissions",
            )
        if definition.options.disabled:
            raise HTTPException(status_code=403, detail=f"Form '{slug}' is disabled")

        store = get_store()
        if store is None:
            raise HTTPException(status_code=503, detail="Store not available")

        stored: dict[str, Any] = {}

        async def persist(data: dict[str, Any], is_valid: bool) -> None:
            if not is_valid:
                return
            # Blank optional fields fall back to the form defaults
            record = {**definition.defaults, **{k: v for k, v in data.items() if v != ""}}
            if definition.is_public:
                record.setdefault("source", "website")
                record.update(_client_metadata(request))
            stored.update(store.insert(definition.collection, record))

        controller = FormController(
            on_submit=persist,
            validation_rules=definition.rules,
            initial_data=definition.initial_data(),
            options=definition.options,
        )
        for name, value in definition.coerce(body.data).items():
            controller.set_value(name, value)

        await controller.handle_submit()

        if controller.has_errors:
            return JSONResponse(
                status_code=422,
                content={
                    "success": False,
                    "message": "Validation failed",
                    "errors": controller.errors,
                },
            )

        if not stored:
            logger.error("Submission to form '%s' was not stored", slug)
            raise HTTPException(status_code=500, detail="Failed to store submission")

        logger.info("Stored %s submission %s", definition.collection, stored["id"])
        return {
            "success": True,
            "message": definition.success_message,
            "data": {
                "id": stored["id"],
                "submittedAt": stored["createdAt"],
            },
        }

    return router
