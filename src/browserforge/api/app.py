"""FastAPI application."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from browserforge.browsers import (
    BrowserService,
    MediaSettings,
    RouteConfig,
    ThumbnailResolver,
    make_route_builder,
)
from browserforge.hooks import HookService, register_builtin_hooks
from browserforge.metadata.loader import MetadataLoader
from browserforge.persistence import DatabaseConfig, PersistenceAdapter, create_adapter
from browserforge.repository import EntityNotFoundError, EntityRepository, HookAbortError

logger = logging.getLogger(__name__)

# Global instances (initialized on startup)
metadata_loader: MetadataLoader | None = None
db: PersistenceAdapter | None = None
repository: EntityRepository | None = None


def _resolve_base_path() -> Path:
    """Metadata lives next to the working directory unless configured."""
    configured = os.environ.get("BROWSERFORGE_BASE_PATH")
    if configured:
        return Path(configured)
    return Path.cwd()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize on startup, cleanup on shutdown."""
    global metadata_loader, db, repository

    register_builtin_hooks()

    base_path = _resolve_base_path()
    metadata_loader = MetadataLoader(base_path / "metadata")
    metadata_loader.load_all()

    db_config = DatabaseConfig.from_env(base_path)

    # Ensure parent directory exists for SQLite databases
    if db_config.is_sqlite and db_config.sqlite_path != ":memory:":
        Path(db_config.sqlite_path).parent.mkdir(parents=True, exist_ok=True)

    db = create_adapter(db_config)
    db.connect()

    for entity_name in metadata_loader.list_entities():
        entity = metadata_loader.get_entity(entity_name)
        if entity:
            db.initialize_entity(entity)

    browser_service = BrowserService(
        db,
        route_builder=make_route_builder(RouteConfig.from_env()),
        thumbnail_resolver=ThumbnailResolver(MediaSettings.from_env()),
    )
    repository = EntityRepository(db, metadata_loader, browser_service, HookService())

    logger.info("Loaded %d entities from %s", len(metadata_loader.entities), base_path)

    yield

    # Cleanup
    if db:
        db.close()


app = FastAPI(title="BrowserForge API", lifespan=lifespan)

# CORS for frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_repository() -> EntityRepository:
    if not repository:
        raise HTTPException(500, "Not initialized")
    return repository


def _hook_abort_response(error: HookAbortError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "valid": False,
            "errors": [{
                "message": str(error),
                "code": "HOOK_ABORT",
                "severity": "error",
            }],
        },
    )


# --- Metadata Endpoints ---


@app.get("/api/metadata/{entity}/browsers")
async def get_entity_browsers(entity: str) -> dict[str, Any]:
    """List the resolved browsers of an entity."""
    repo = _get_repository()
    try:
        entity_model = repo.get_entity(entity)
    except EntityNotFoundError as e:
        raise HTTPException(404, str(e))

    return {
        "entity": entity_model.name,
        "browsers": [b.to_dict() for b in entity_model.browsers],
        "relatedBrowsers": entity_model.related_browsers,
    }


# --- Entity Endpoints ---


class SaveRequest(BaseModel):
    """Request body for create and update operations."""

    data: dict[str, Any] = {}
    browsers: dict[str, list[dict[str, Any]]] | None = None


@app.post("/api/entities/{entity}")
async def create_entity(entity: str, request: SaveRequest):
    """Create a record and sync its browsers."""
    repo = _get_repository()
    try:
        saved = await repo.create(entity, request.data, request.browsers)
    except EntityNotFoundError as e:
        raise HTTPException(404, str(e))
    except HookAbortError as e:
        return _hook_abort_response(e)

    return JSONResponse(status_code=201, content={"data": saved})


@app.put("/api/entities/{entity}/{id}")
async def update_entity(entity: str, id: str, request: SaveRequest):
    """Update a record and sync its browsers."""
    repo = _get_repository()
    try:
        saved = await repo.update(entity, id, request.data, request.browsers)
    except EntityNotFoundError as e:
        raise HTTPException(404, str(e))
    except HookAbortError as e:
        return _hook_abort_response(e)

    return {"data": saved}


@app.get("/api/entities/{entity}/{id}/form")
async def get_entity_form(entity: str, id: str) -> dict[str, Any]:
    """Get a record with its browser items for the edit form."""
    repo = _get_repository()
    try:
        return repo.get_form_fields(entity, id)
    except EntityNotFoundError as e:
        raise HTTPException(404, str(e))
