"""FastAPI application serving development help as HTML."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List

from fastapi import FastAPI, HTTPException
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel

from devhelp.config import AppConfig
from devhelp.errors import RegistryUnavailable, RenderingEngineFailure
from devhelp.index.resolver import TopicResolver
from devhelp.index.storage import SQLiteRegistryStore
from devhelp.models import Found, RenderStage
from devhelp.render.engine import RscriptEngine
from devhelp.render.renderer import load_stylesheet
from devhelp.utils.files import new_output_path, session_temp_dir

LOGGER = logging.getLogger(__name__)

app = FastAPI(title="devhelp", version="0.1.0")
app.state.config = AppConfig()


class TopicLocation(BaseModel):
    topic: str
    package: str
    location: str


def _config() -> AppConfig:
    return app.state.config


def _resolve_registry_path(db: Path | None) -> Path:
    config = _config()
    if db is not None:
        config = AppConfig(registry_path=db)
    return config.resolve_registry_path(Path.cwd())


def _open_store(db: Path | None) -> SQLiteRegistryStore:
    resolved_db = _resolve_registry_path(db)
    if not resolved_db.exists():
        raise HTTPException(status_code=404, detail=f"Registry not found at {resolved_db}")
    try:
        return SQLiteRegistryStore(resolved_db)
    except RegistryUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


def _resolve(topic: str, package: str | None, db: Path | None) -> Found:
    store = _open_store(db)
    try:
        resolver = TopicResolver(store)
        searched = [package] if package is not None else None
        result = resolver.resolve(topic, packages=searched)
        dev = resolver.dev_packages() if package is None else [package]
    except RegistryUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    finally:
        store.close()

    if not isinstance(result, Found):
        raise HTTPException(
            status_code=404,
            detail=f"Could not find topic {topic} in: {', '.join(dev)}",
        )
    return result


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.get("/packages")
async def list_packages(db: Path | None = None) -> dict[str, List[str]]:
    """List development packages in load order."""
    resolved_db = _resolve_registry_path(db)
    if not resolved_db.exists():
        return {"packages": []}

    store = _open_store(db)
    try:
        return {"packages": store.list_dev_packages()}
    except RegistryUnavailable as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    finally:
        store.close()


@app.get("/topics/{topic}")
async def resolve_topic(topic: str, package: str | None = None, db: Path | None = None) -> TopicLocation:
    found = _resolve(topic, package, db)
    return TopicLocation(topic=topic, package=found.package, location=str(found.location))


@app.get("/help/R.css")
async def stylesheet() -> Response:
    return Response(content=load_stylesheet(_config().stylesheet_path), media_type="text/css")


def _render_html(found: Found, stage: RenderStage) -> str:
    config = _config()
    engine = RscriptEngine(config.rscript)
    out_dir = Path(config.temp_dir) if config.temp_dir is not None else session_temp_dir()
    out_path = new_output_path(out_dir, "html")
    try:
        engine.render_hypertext(found.location, out_path, found.package, stage, links_enabled=False)
        return out_path.read_text(encoding="utf-8")
    finally:
        out_path.unlink(missing_ok=True)


@app.get("/help/{topic}", response_class=HTMLResponse)
async def show_help(
    topic: str,
    package: str | None = None,
    stage: RenderStage | None = None,
    db: Path | None = None,
) -> HTMLResponse:
    found = _resolve(topic, package, db)
    try:
        html = await asyncio.to_thread(_render_html, found, stage or _config().stage)
    except RenderingEngineFailure as exc:
        LOGGER.error("Rendering %s failed: %s", found.title, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return HTMLResponse(content=html)

