from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from memory_companion.llm.prompts import build_summary_prompt

if TYPE_CHECKING:
    from memory_companion.llm.base import BaseLLMClient
    from memory_companion.models import Identity, Transcript

logger = logging.getLogger(__name__)

NO_CONVERSATIONS_SUMMARY = (
    "No conversations yet. Start talking to build a conversation history!"
)


def format_history(transcripts: Sequence[Transcript]) -> str:
    """Render transcripts (newest first) as one numbered history block."""
    blocks = [
        f"[Conversation {idx} - {t.timestamp:%Y-%m-%d %H:%M}]\n{t.text}"
        for idx, t in enumerate(transcripts, start=1)
    ]
    return "\n\n---\n\n".join(blocks)


async def summarize_person(
    identity: Identity,
    transcripts: Sequence[Transcript],
    llm: BaseLLMClient,
) -> str:
    """Summarise everything said with *identity*.

    ``ProviderError`` propagates; there is nothing useful to return
    without the model.
    """
    if not transcripts:
        return NO_CONVERSATIONS_SUMMARY

    prompt = build_summary_prompt(
        name=identity.name,
        conversation_count=len(transcripts),
        first_seen=f"{identity.first_seen:%Y-%m-%d}",
        last_seen=f"{identity.last_seen:%Y-%m-%d}",
        history=format_history(transcripts),
    )
    summary = await llm.completion(prompt)
    logger.info(
        "[%s] Summary generated from %d conversations (%d chars)",
        identity.id,
        len(transcripts),
        len(summary),
    )
    return summary.strip()
