"""HTTP entry-point.

The primary interface is the MCP server (``dealflow-mcp`` / ``python -m
dealflow.mcp.server``).  This module re-exports the debug server so
``uvicorn dealflow.main:app`` works.
"""

from dealflow.dev.debug_server import app  # noqa: F401 – re-export for uvicorn

if __name__ == "__main__":
    import logging

    import uvicorn

    from dealflow.config import settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(
        "dealflow.main:app",
        host=settings.fastapi_host,
        port=settings.fastapi_port,
        reload=(settings.app_env == "development"),
    )
