"""FastAPI application."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sbe_earthing.api.exports import create_exports_router
from sbe_earthing.api.forms import create_forms_router
from sbe_earthing.auth import AuthMiddleware, JWTService
from sbe_earthing.config import Settings
from sbe_earthing.forms import FormConfigLoader
from sbe_earthing.metadata.validator import validate_forms_dir
from sbe_earthing.persistence import DocumentStore, create_store

logger = logging.getLogger(__name__)


# Global instances (initialized on startup)
settings: Settings | None = None
form_loader: FormConfigLoader | None = None
store: DocumentStore | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize on startup, cleanup on shutdown."""
    global settings, form_loader, store

    settings = Settings.from_env()

    # Validate form YAML against the JSON Schema (warn on errors, don't block startup)
    schema_issues = validate_forms_dir(settings.forms_path)
    if schema_issues:
        for issue in schema_issues:
            if issue.severity == "error":
                logger.error("Form schema error: %s", issue)
            else:
                logger.warning("Form schema warning: %s", issue)
        logger.warning(
            "Form metadata validation: %d issue(s). "
            "Run 'sbe metadata validate' for details.",
            len(schema_issues),
        )

    form_loader = FormConfigLoader(settings.forms_path)
    form_loader.load_all()

    # Ensure parent directory exists for SQLite databases
    db_config = settings.database
    if db_config.is_sqlite and db_config.sqlite_path != ":memory:":
        Path(db_config.sqlite_path).parent.mkdir(parents=True, exist_ok=True)

    store = create_store(db_config)
    store.connect()

    # Admin token gate (can be disabled via environment variable for testing)
    if settings.auth_disabled:
        logger.warning("SBE_DISABLE_AUTH is set; admin endpoints are open")
        app.state.jwt_service = None
    else:
        app.state.jwt_service = JWTService(settings.secret_key)

    yield

    # Cleanup
    if store:
        store.close()
        store = None


app = FastAPI(title="SBE Earthing API", lifespan=lifespan)

# CORS for the storefront dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=Settings.from_env().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AuthMiddleware)

app.include_router(
    create_forms_router(
        get_form_loader=lambda: form_loader,
        get_store=lambda: store,
    )
)
app.include_router(create_exports_router(get_store=lambda: store))


@app.get("/api/health")
async def health() -> dict[str, Any]:
    """Liveness check with the loaded form count."""
    return {
        "status": "ok",
        "forms": len(form_loader.list_forms()) if form_loader else 0,
        "store": store is not None,
    }
