from memory_companion.people.career import (
    CareerInfo,
    CareerLookup,
    LLMCareerLookup,
    extract_career_info,
    find_linkedin_url,
)
from memory_companion.people.summary import (
    NO_CONVERSATIONS_SUMMARY,
    format_history,
    summarize_person,
)

__all__ = [
    "NO_CONVERSATIONS_SUMMARY",
    "CareerInfo",
    "CareerLookup",
    "LLMCareerLookup",
    "extract_career_info",
    "find_linkedin_url",
    "format_history",
    "summarize_person",
]
