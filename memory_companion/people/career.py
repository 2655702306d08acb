"""Best-effort career enrichment for a person.

Both steps swallow provider failures (logged with traceback) and return
``None``: a summary without career details is still a summary.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from memory_companion.exceptions import ProviderError
from memory_companion.llm.prompts import (
    NO_CAREER,
    build_career_lookup_prompt,
    build_career_prompt,
)
from memory_companion.people.summary import format_history

if TYPE_CHECKING:
    from memory_companion.llm.base import BaseLLMClient
    from memory_companion.models import Transcript

logger = logging.getLogger(__name__)

_LINKEDIN_URL_RE = re.compile(r"https?://(?:www\.)?linkedin\.com/[^\s)\]>\"']+")


@dataclass(frozen=True)
class CareerInfo:
    summary: str
    source: str
    linkedin_url: str | None = None
    # False when the URL came from model output rather than a search hit.
    verified: bool = False


def _is_none_answer(text: str) -> bool:
    return not text or text.strip().upper() == NO_CAREER


def find_linkedin_url(text: str) -> str | None:
    match = _LINKEDIN_URL_RE.search(text)
    return match.group(0).rstrip(".,;") if match else None


async def extract_career_info(
    transcripts: Sequence[Transcript],
    llm: BaseLLMClient,
) -> str | None:
    """Pull a short, search-friendly career line out of the conversations."""
    if not transcripts:
        return None

    try:
        answer = await llm.completion(build_career_prompt(format_history(transcripts)))
    except ProviderError:
        logger.warning("Career extraction failed", exc_info=True)
        return None

    answer = answer.strip()
    if _is_none_answer(answer):
        logger.debug("No career information in %d transcripts", len(transcripts))
        return None
    return answer


class CareerLookup(ABC):
    """Looks up professional information about a named person."""

    @abstractmethod
    async def lookup(self, name: str, career_hint: str | None) -> CareerInfo | None:
        """Return what is known about *name*, or ``None``.  Must not raise."""
        ...


class LLMCareerLookup(CareerLookup):
    """Asks the completion model for a short professional summary.

    There is no web search behind this: the answer comes from the model's
    training data, so it may be stale or wrong, and any ``linkedin_url``
    is unverified and can be invented.  Plug in a ``CareerLookup`` backed
    by a search service when accuracy matters.
    """

    source = "llm"

    def __init__(self, llm: BaseLLMClient) -> None:
        self._llm = llm

    async def lookup(self, name: str, career_hint: str | None) -> CareerInfo | None:
        try:
            answer = await self._llm.completion(
                build_career_lookup_prompt(name, career_hint)
            )
        except ProviderError:
            logger.warning("Career lookup for %r failed", name, exc_info=True)
            return None

        answer = answer.strip()
        if _is_none_answer(answer):
            return None
        return CareerInfo(
            summary=answer,
            source=self.source,
            linkedin_url=find_linkedin_url(answer),
        )
