"""MCP server bootstrap – registers tools, resources, prompts and runs the stdio transport."""

from __future__ import annotations

import asyncio
import json
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import (
    GetPromptResult,
    Prompt,
    PromptArgument,
    PromptMessage,
    Resource,
    TextContent,
    Tool,
)

from dealflow.config import settings
from dealflow.mcp.tools import (
    handle_add_comment,
    handle_create_company,
    handle_delete_comment,
    handle_delete_company,
    handle_delete_interaction,
    handle_get_company,
    handle_get_company_ranking,
    handle_get_dashboard_stats,
    handle_get_recent_companies,
    handle_list_comments,
    handle_list_companies,
    handle_list_interactions,
    handle_log_interaction,
    handle_update_company,
    handle_update_interaction,
)
from dealflow.schemas.vocabulary import (
    RATING_LABELS,
    SECTORS,
    ApprovalStatus,
    CompanyRating,
    CompanyStatus,
    InteractionType,
    vocabulary,
)

logger = logging.getLogger("dealflow.mcp.server")

VOCABULARY_URI = "dealflow://vocabulary"

# ---------------------------------------------------------------------------
# Shared JSON-schema fragments
# ---------------------------------------------------------------------------

_STATUS = {"type": "string", "enum": [s.value for s in CompanyStatus]}
_RATING = {"type": "string", "enum": [r.value for r in CompanyRating]}
_APPROVAL = {"type": "string", "enum": [a.value for a in ApprovalStatus]}
_SECTOR = {"type": "string", "enum": list(SECTORS)}
_ID = {"type": "string", "description": "Record id as returned by a previous call"}
_LIMIT = {
    "type": "integer",
    "description": "Max companies to return (1-50)",
    "default": 5,
    "minimum": 1,
    "maximum": 50,
}

_COMPANY_FIELDS = {
    "name": {"type": "string", "description": "Company name"},
    "sector": _SECTOR,
    "status": {**_STATUS, "description": "Pipeline stage (default Contacted)"},
    "rating": _RATING,
    "approval_status": _APPROVAL,
    "estimated_revenue": {"type": "number", "minimum": 0, "description": "Estimated revenue in USD"},
    "location": {"type": "string"},
    "website": {"type": "string"},
    "notes": {"type": "string"},
}

# ---------------------------------------------------------------------------
# Tool registry
# ---------------------------------------------------------------------------

TOOL_DEFINITIONS: list[Tool] = [
    Tool(
        name="list_companies",
        description=(
            "List pipeline companies sorted by name. Every filter is optional and "
            "filters combine with AND; search is a case-insensitive name substring."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "status": _STATUS,
                "sector": {"type": "string", "description": "Sector name"},
                "rating": _RATING,
                "approval_status": _APPROVAL,
                "search": {"type": "string", "description": "Name substring"},
            },
            "required": [],
        },
    ),
    Tool(
        name="get_company",
        description="Get the full record of one company.",
        inputSchema={
            "type": "object",
            "properties": {"company_id": _ID},
            "required": ["company_id"],
        },
    ),
    Tool(
        name="create_company",
        description="Add a company to the pipeline. Status defaults to Contacted.",
        inputSchema={
            "type": "object",
            "properties": _COMPANY_FIELDS,
            "required": ["name"],
        },
    ),
    Tool(
        name="update_company",
        description="Change one or more fields of a company; omitted fields are left as is.",
        inputSchema={
            "type": "object",
            "properties": {"company_id": _ID, **_COMPANY_FIELDS},
            "required": ["company_id"],
        },
    ),
    Tool(
        name="delete_company",
        description="Delete a company together with its interactions and comments.",
        inputSchema={
            "type": "object",
            "properties": {"company_id": _ID},
            "required": ["company_id"],
        },
    ),
    Tool(
        name="get_dashboard_stats",
        description=(
            "Pipeline summary over all companies: counts per status, sector, rating and "
            "approval state, top sector, approval rate, top-rated (A/B) count and "
            "companies added in the last 7 days."
        ),
        inputSchema={"type": "object", "properties": {}, "required": []},
    ),
    Tool(
        name="get_recent_companies",
        description="Most recently added companies, newest first.",
        inputSchema={"type": "object", "properties": {"limit": _LIMIT}, "required": []},
    ),
    Tool(
        name="get_company_ranking",
        description="Rated companies ordered from A to D (unrated companies are skipped).",
        inputSchema={"type": "object", "properties": {"limit": _LIMIT}, "required": []},
    ),
    Tool(
        name="list_interactions",
        description="Interaction history (calls, emails, meetings) of a company, latest first.",
        inputSchema={
            "type": "object",
            "properties": {"company_id": _ID},
            "required": ["company_id"],
        },
    ),
    Tool(
        name="log_interaction",
        description="Log a call, email, meeting or other contact with a company.",
        inputSchema={
            "type": "object",
            "properties": {
                "company_id": _ID,
                "date": {"type": "string", "format": "date", "description": "YYYY-MM-DD"},
                "type": {"type": "string", "enum": [t.value for t in InteractionType]},
                "notes": {"type": "string"},
            },
            "required": ["company_id", "date", "type"],
        },
    ),
    Tool(
        name="update_interaction",
        description="Correct the date, type or notes of a logged interaction.",
        inputSchema={
            "type": "object",
            "properties": {
                "interaction_id": _ID,
                "date": {"type": "string", "format": "date"},
                "type": {"type": "string", "enum": [t.value for t in InteractionType]},
                "notes": {"type": "string"},
            },
            "required": ["interaction_id"],
        },
    ),
    Tool(
        name="delete_interaction",
        description="Delete a logged interaction.",
        inputSchema={
            "type": "object",
            "properties": {"interaction_id": _ID},
            "required": ["interaction_id"],
        },
    ),
    Tool(
        name="list_comments",
        description="Comments and notes on a company, newest first.",
        inputSchema={
            "type": "object",
            "properties": {"company_id": _ID},
            "required": ["company_id"],
        },
    ),
    Tool(
        name="add_comment",
        description="Add a comment to a company.",
        inputSchema={
            "type": "object",
            "properties": {
                "company_id": _ID,
                "content": {"type": "string"},
                "author": {"type": "string"},
            },
            "required": ["company_id", "content"],
        },
    ),
    Tool(
        name="delete_comment",
        description="Delete a comment.",
        inputSchema={
            "type": "object",
            "properties": {"comment_id": _ID},
            "required": ["comment_id"],
        },
    ),
]

TOOL_HANDLERS = {
    "list_companies": handle_list_companies,
    "get_company": handle_get_company,
    "create_company": handle_create_company,
    "update_company": handle_update_company,
    "delete_company": handle_delete_company,
    "get_dashboard_stats": handle_get_dashboard_stats,
    "get_recent_companies": handle_get_recent_companies,
    "get_company_ranking": handle_get_company_ranking,
    "list_interactions": handle_list_interactions,
    "log_interaction": handle_log_interaction,
    "update_interaction": handle_update_interaction,
    "delete_interaction": handle_delete_interaction,
    "list_comments": handle_list_comments,
    "add_comment": handle_add_comment,
    "delete_comment": handle_delete_comment,
}


def unknown_tool_payload(name: str) -> dict:
    return {
        "tool": name,
        "ok": False,
        "error": {
            "error_code": "UNKNOWN_TOOL",
            "message": f"Tool '{name}' is not registered",
            "hint": f"Available tools: {list(TOOL_HANDLERS.keys())}",
        },
        "warnings": [],
        "meta": {"execution_ms": 0, "row_count": 0},
    }


def read_vocabulary() -> str:
    """JSON body of the vocabulary resource."""
    body = vocabulary()
    body["rating_labels"] = RATING_LABELS
    return json.dumps(body, indent=2)


def render_prompt(name: str, arguments: dict | None = None) -> list[PromptMessage]:
    """Return a filled prompt template."""
    args = arguments or {}

    if name == "pipeline_review":
        return [
            PromptMessage(
                role="user",
                content=TextContent(
                    type="text",
                    text=(
                        "Review the acquisition pipeline:\n\n"
                        "1. Call get_dashboard_stats and summarise the count per stage\n"
                        "2. Use list_companies with status='Due Diligence' and status='LOI Sent' "
                        "to list the deals closest to closing\n"
                        "3. For each of those, check list_interactions for the last contact date\n"
                        "4. Flag deals with no interaction in the last 30 days\n"
                        "5. Report the approval rate and how many companies are still Under Review"
                    ),
                ),
            )
        ]

    if name == "sector_review":
        sector = args.get("sector", "Technology")
        return [
            PromptMessage(
                role="user",
                content=TextContent(
                    type="text",
                    text=(
                        f"Review the {sector} companies in the pipeline:\n\n"
                        f"1. Use list_companies with sector='{sector}'\n"
                        "2. Group them by status and by rating\n"
                        "3. For A and B rated companies, read list_comments for open concerns\n"
                        f"4. Recommend which {sector} companies to advance to the next stage"
                    ),
                ),
            )
        ]

    raise ValueError(f"Unknown prompt: {name}")


# ---------------------------------------------------------------------------
# Server factory
# ---------------------------------------------------------------------------


def create_mcp_server() -> Server:
    """Create and configure the MCP server instance."""
    server = Server(settings.mcp_server_name)

    # ── Tools ─────────────────────────────────────────────────────────────

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return TOOL_DEFINITIONS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict | None) -> list[TextContent]:
        handler = TOOL_HANDLERS.get(name)
        if handler is None:
            payload = unknown_tool_payload(name)
            return [TextContent(type="text", text=json.dumps(payload, default=str))]

        result = await handler(arguments or {})
        return [TextContent(type="text", text=json.dumps(result, default=str))]

    # ── Resources ─────────────────────────────────────────────────────────

    @server.list_resources()
    async def list_resources() -> list[Resource]:
        return [
            Resource(
                uri=VOCABULARY_URI,
                name="Pipeline Vocabulary",
                description="Valid statuses, sectors, ratings, approval states and interaction types",
                mimeType="application/json",
            ),
        ]

    @server.read_resource()
    async def read_resource(uri) -> str:
        if str(uri) == VOCABULARY_URI:
            return read_vocabulary()
        raise ValueError(f"Unknown resource: {uri}")

    # ── Prompts ───────────────────────────────────────────────────────────

    @server.list_prompts()
    async def list_prompts() -> list[Prompt]:
        return [
            Prompt(
                name="pipeline_review",
                description="Review deal progress across all pipeline stages",
                arguments=[],
            ),
            Prompt(
                name="sector_review",
                description="Review the companies of one sector and pick the ones to advance",
                arguments=[
                    PromptArgument(
                        name="sector",
                        description="Sector to review (e.g. Technology, Healthcare)",
                        required=True,
                    ),
                ],
            ),
        ]

    @server.get_prompt()
    async def get_prompt(name: str, arguments: dict | None = None) -> GetPromptResult:
        return GetPromptResult(messages=render_prompt(name, arguments))

    return server


# ---------------------------------------------------------------------------
# Entry-point: run MCP server over stdio
# ---------------------------------------------------------------------------


async def run_mcp_server() -> None:
    """Start the MCP server using stdio transport."""
    server = create_mcp_server()
    logger.info(
        "Starting MCP server '%s' v%s (stdio)",
        settings.mcp_server_name,
        settings.mcp_server_version,
    )

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """CLI entry-point."""
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    asyncio.run(run_mcp_server())


if __name__ == "__main__":
    main()
