# pyright: reportMissingImports=false, reportCallIssue=false, reportGeneralTypeIssues=false
"""MCP server factory for memory_companion (requires the ``mcp-use`` extra).

Usage::

    from memory_companion import MemoryCompanion
    from memory_companion.ext.mcp_use.server import create_server

    companion = MemoryCompanion.from_config({...})
    server = create_server(companion)
    server.run(transport="streamable-http")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from memory_companion.exceptions import IdentityNotFoundError

if TYPE_CHECKING:
    from mcp_use.server import MCPServer

    from memory_companion.facade.core import MemoryCompanion
    from memory_companion.models import Identity
    from memory_companion.store.base import TranscriptSearchResult


def _format_identity(identity: Identity) -> dict:
    return {
        "id": identity.id,
        "name": identity.name,
        "first_seen": identity.first_seen.isoformat(),
        "last_seen": identity.last_seen.isoformat(),
        "times_recognized": identity.times_recognized,
        "conversation_count": identity.conversation_count,
    }


def _format_results(results: list[TranscriptSearchResult]) -> list[dict]:
    return [
        {
            "id": r.transcript.id,
            "person_id": r.transcript.identity_id,
            "timestamp": r.transcript.timestamp.isoformat(),
            "text": r.transcript.text,
            "score": round(r.score, 4),
        }
        for r in results
    ]


def create_server(
    companion: MemoryCompanion,
    *,
    name: str = "memory-companion",
    version: str = "0.1.0",
) -> MCPServer:
    """Build an MCPServer with read-only people and conversation tools.

    Requires the ``mcp-use`` extra (``pip install memory-companion[mcp-use]``).
    """
    try:
        from mcp.types import ToolAnnotations
        from mcp_use.server import MCPServer as _MCPServer
    except ImportError:
        raise ImportError(
            "mcp-use is required for MCP server support. "
            "Install it with: pip install memory-companion[mcp-use]"
        ) from None

    server = _MCPServer(
        name=name,
        version=version,
        instructions=(
            "Memory of people the user has met. Use list_people to see who "
            "is known, get_person for one person's conversations, and "
            "search_conversations to recall what was said."
        ),
    )
    read_only = ToolAnnotations(readOnlyHint=True, idempotentHint=True)

    @server.tool(title="List People", annotations=read_only)
    async def list_people() -> list[dict]:
        """List everyone the user has met, most recently seen first."""
        return [_format_identity(i) for i in await companion.list_people()]

    @server.tool(title="Get Person", annotations=read_only)
    async def get_person(person_id: str, limit: int = 10) -> dict:
        """Get one person and their most recent conversations."""
        try:
            details = await companion.get_person(person_id)
        except IdentityNotFoundError:
            return {"error": f"No person with id {person_id}"}
        entry = _format_identity(details.identity)
        entry["conversations"] = [
            {"timestamp": t.timestamp.isoformat(), "text": t.text}
            for t in details.transcripts[:limit]
        ]
        return entry

    @server.tool(title="Search Conversations", annotations=read_only)
    async def search_conversations(
        query: str,
        person_id: str | None = None,
        limit: int = 5,
    ) -> list[dict]:
        """Search past conversations by meaning, optionally for one person."""
        results = await companion.search_conversations(
            query, identity_id=person_id, limit=limit
        )
        return _format_results(results)

    return server
