# autogql/app.py
from __future__ import annotations

import time
from typing import Any, Iterable, Mapping, Optional, Sequence
from uuid import uuid4

from ariadne.asgi import GraphQL
from fastapi import FastAPI, Request
from starlette.responses import JSONResponse, PlainTextResponse, Response

from autogql.config import Settings
from autogql.runtime.data_access import SqlDataAccess, databricks_connect
from autogql.runtime.extension_merger import SchemaExtension
from autogql.runtime.model_introspector import EntityDescriptor
from autogql.runtime.observability import get_logger, log_event
from autogql.runtime.pipeline import build_api
from autogql.runtime.registry_loader import Registry
from autogql.runtime.resolver_factory import AccessSource

LOG = get_logger("autogql.http")

OPEN_PATHS = ("/healthz",)


def sql_access(settings: Settings) -> AccessSource:
    """One SqlDataAccess per entity over the configured Databricks warehouse."""
    connect = databricks_connect(settings)

    def factory(entity, model):
        pk = model.primary_key.name
        key_sql = settings.key_sql.format(table=entity.table_name, key=pk) if settings.key_sql else None
        return SqlDataAccess(entity.table_name, model.field_names, pk, connect, key_sql=key_sql)
    return factory


def create_app(
    settings: Optional[Settings] = None,
    entities: Optional[Sequence[EntityDescriptor]] = None,
    access: Optional[AccessSource] = None,
    extensions: Iterable[SchemaExtension] = (),
    custom_resolvers: Iterable[Mapping[str, Any]] = (),
) -> FastAPI:
    settings = settings or Settings.from_env()
    get_logger("autogql", level=settings.log_level)

    if entities is None:
        entities = list(Registry(root=settings.registry_dir).entities())
    if access is None:
        access = sql_access(settings)

    # Build schema at startup; any error here aborts startup
    api = build_api(entities, access, extensions, custom_resolvers, max_limit=settings.max_limit)
    schema = api.executable_schema()

    app = FastAPI(title="autogql")
    app.state.api = api
    app.state.settings = settings

    # ----------------------------------------------------------------------------------
    # API-key guard (x-api-key), enabled when API_KEY is set
    # ----------------------------------------------------------------------------------
    @app.middleware("http")
    async def api_key_guard(request: Request, call_next):
        if not settings.api_key:
            return await call_next(request)
        if request.url.path in OPEN_PATHS or request.url.path.startswith("/.well-known/"):
            return await call_next(request)
        if request.headers.get("x-api-key") != settings.api_key:
            return JSONResponse({"detail": "Invalid or missing x-api-key"}, status_code=401)
        return await call_next(request)

    # ----------------------------------------------------------------------------------
    # Observability (correlation id + one log line per request)
    # ----------------------------------------------------------------------------------
    @app.middleware("http")
    async def observability(request: Request, call_next):
        cid = request.headers.get("x-correlation-id") or str(uuid4())
        started = time.time()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
        finally:
            log_event(
                LOG, "request",
                cid=cid,
                method=request.method,
                path=request.url.path,
                status=getattr(response, "status_code", 500),
                dur_ms=int((time.time() - started) * 1000),
            )
        response.headers["x-correlation-id"] = cid
        return response

    @app.get("/healthz")
    def healthz():
        return {"ok": True, "entities": len(api.models)}

    @app.get("/.well-known/schema.graphql", response_class=PlainTextResponse)
    def get_graphql_sdl():
        """Return the generated GraphQL Schema Definition Language"""
        return api.sdl

    app.mount("/graphql", GraphQL(schema, debug=settings.debug))
    return app
