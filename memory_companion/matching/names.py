"""Placeholder-name upgrade policy.

An identity created from a capture is named ``Unknown-<millis>`` until a
real name turns up in conversation.  Only placeholder names are ever
replaced; a real name is never overwritten from this path, whatever the
extractor says.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from memory_companion.exceptions import ProviderError
from memory_companion.models import is_placeholder_name

if TYPE_CHECKING:
    from memory_companion.llm.base import NameExtractor

logger = logging.getLogger(__name__)

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 50
MIN_TRANSCRIPT_LENGTH = 10

_NAME_RE = re.compile(r"^[A-Za-z\s\-']+$")
_LEAD_IN_RE = re.compile(r"^(the name is|name is|name:|it's|it is)\s*", re.IGNORECASE)


def clean_name(candidate: str) -> str:
    """Strip quotes and "name is"-style lead-ins from an extractor answer."""
    cleaned = candidate.replace('"', "").strip()
    cleaned = _LEAD_IN_RE.sub("", cleaned)
    return cleaned.strip().strip("'").strip()


def validate_name(candidate: str | None) -> str | None:
    """Return the cleaned name, or ``None`` if it fails the format rules.

    Accepted names are 2-50 characters of ASCII letters, whitespace,
    hyphens and apostrophes.
    """
    if not candidate:
        return None
    cleaned = clean_name(candidate)
    if not MIN_NAME_LENGTH <= len(cleaned) <= MAX_NAME_LENGTH:
        logger.debug("Rejected name candidate (length): %r", cleaned)
        return None
    if not _NAME_RE.match(cleaned):
        logger.debug("Rejected name candidate (characters): %r", cleaned)
        return None
    return cleaned


async def maybe_extract_name(
    current_name: str,
    text: str,
    extractor: NameExtractor,
) -> str | None:
    """Return a validated real name for a placeholder identity, else ``None``.

    Extraction is a best-effort enrichment: provider failures are logged
    and treated as "no name found".
    """
    if not is_placeholder_name(current_name):
        return None
    if len(text.strip()) < MIN_TRANSCRIPT_LENGTH:
        logger.debug("Transcript too short to extract a name")
        return None

    try:
        candidate = await extractor.extract_name(text)
    except ProviderError:
        logger.warning("Name extraction failed for %s", current_name, exc_info=True)
        return None

    name = validate_name(candidate)
    if name is not None:
        logger.info("Extracted name %r for %s", name, current_name)
    return name
