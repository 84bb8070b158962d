"""FastAPI debug server – HTTP endpoints for manual tool testing.

This is NOT part of the MCP interface.  It is a convenience for local
development without an MCP client.

Run with:
    python -m dealflow.dev.debug_server
    # → http://localhost:8000/health
    # → http://localhost:8000/docs  (Swagger UI)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Body, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from dealflow.config import settings
from dealflow.mcp.server import TOOL_HANDLERS, unknown_tool_payload
from dealflow.mcp.tools import (
    handle_get_company,
    handle_get_company_ranking,
    handle_get_dashboard_stats,
    handle_get_recent_companies,
    handle_list_comments,
    handle_list_companies,
    handle_list_interactions,
)
from dealflow.middleware.security import SecurityHeadersMiddleware, parse_cors_origins

logger = logging.getLogger("dealflow.dev.debug_server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Debug server starting (env=%s)", settings.app_env)
    yield
    logger.info("Debug server shutting down")


app = FastAPI(
    title="Dealflow MCP Server – Debug HTTP",
    description="Developer-only HTTP wrapper around the MCP tool handlers.",
    version=settings.mcp_server_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=parse_cors_origins(settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware)


# ── Health ────────────────────────────────────────────────────────────────────


@app.get("/health")
async def health():
    return {"status": "ok", "version": settings.mcp_server_version}


# ── Read routes ───────────────────────────────────────────────────────────────


@app.get("/debug/list_companies")
async def debug_list_companies(
    status: str | None = Query(None),
    sector: str | None = Query(None),
    rating: str | None = Query(None),
    approval_status: str | None = Query(None, alias="approvalStatus"),
    search: str | None = Query(None),
):
    args = {
        "status": status,
        "sector": sector,
        "rating": rating,
        "approval_status": approval_status,
        "search": search,
    }
    result = await handle_list_companies({k: v for k, v in args.items() if v is not None})
    return JSONResponse(content=result)


@app.get("/debug/get_company")
async def debug_get_company(company_id: str = Query(...)):
    result = await handle_get_company({"company_id": company_id})
    return JSONResponse(content=result)


@app.get("/debug/get_dashboard_stats")
async def debug_get_dashboard_stats():
    result = await handle_get_dashboard_stats({})
    return JSONResponse(content=result)


@app.get("/debug/get_recent_companies")
async def debug_get_recent_companies(limit: int = Query(5)):
    result = await handle_get_recent_companies({"limit": limit})
    return JSONResponse(content=result)


@app.get("/debug/get_company_ranking")
async def debug_get_company_ranking(limit: int = Query(5)):
    result = await handle_get_company_ranking({"limit": limit})
    return JSONResponse(content=result)


@app.get("/debug/list_interactions")
async def debug_list_interactions(company_id: str = Query(...)):
    result = await handle_list_interactions({"company_id": company_id})
    return JSONResponse(content=result)


@app.get("/debug/list_comments")
async def debug_list_comments(company_id: str = Query(...)):
    result = await handle_list_comments({"company_id": company_id})
    return JSONResponse(content=result)


# ── Any tool (writes included) via POST ───────────────────────────────────────


@app.post("/debug/call/{tool_name}")
async def debug_call_tool(tool_name: str, arguments: dict | None = Body(None)):
    handler = TOOL_HANDLERS.get(tool_name)
    if handler is None:
        return JSONResponse(status_code=404, content=unknown_tool_payload(tool_name))
    result = await handler(arguments or {})
    return JSONResponse(content=result)


# ── Run via uvicorn ───────────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "dealflow.dev.debug_server:app",
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=(settings.app_env == "development"),
    )
