"""Prompt templates sent to the completion model."""

from __future__ import annotations

NO_FACE = "NO_FACE"
NO_NAME = "NO_NAME"
NO_CAREER = "NONE"

FACE_DESCRIPTION_PROMPT = f"""\
Analyze this image for a human face. If a face is present, provide an \
extremely detailed description that would distinguish this person from \
others. If no face is visible, answer exactly "{NO_FACE}".

For a detected face, describe precisely:
1. Face structure: shape, jawline, cheekbones, forehead
2. Eyes: colour, shape, spacing, eyebrows, glasses (frame style and colour)
3. Nose: bridge, nostrils, tip, size relative to the face
4. Mouth and lips: thickness, width, symmetry
5. Hair: colour, length, style, texture, hairline, facial hair
6. Skin: tone and texture, visible marks
7. Distinctive features: moles, scars, dimples, piercings, tattoos
8. Approximate age range
9. Any other identifying features

Do not describe the background, clothing or expression."""


def build_name_prompt(transcript: str) -> str:
    return f"""\
Analyze this conversation transcript and extract the speaker's name if they \
introduce themselves ("My name is ...", "I'm ...", "Call me ...", \
"This is ...", "... speaking").

Transcript:
"{transcript}"

Rules:
1. Return ONLY the person's first name, or full name if clearly stated.
2. Do not return nicknames unless that is all they provided.
3. If no name is mentioned, return exactly: {NO_NAME}

Response:"""


def build_summary_prompt(
    name: str,
    conversation_count: int,
    first_seen: str,
    last_seen: str,
    history: str,
) -> str:
    return f"""\
You are analyzing conversation history to provide meaningful insights.

Person's name: {name}
Total conversations: {conversation_count}
First met: {first_seen}
Last seen: {last_seen}

CONVERSATION HISTORY:
{history}

Provide a concise summary (3-5 bullet points) covering key topics discussed, \
interests and preferences mentioned, important details about the person, and \
anything useful for future interactions. Reference actual conversation \
content."""


def build_career_prompt(history: str) -> str:
    return f"""\
Extract any career-related information from these conversations: job title \
or role, company, industry, professional skills, education.

Conversations:
{history}

Respond with ONLY the career information in a brief, search-friendly form \
(e.g. "Software Engineer at Google"). If there is none, respond with \
"{NO_CAREER}"."""


def build_career_lookup_prompt(name: str, career_hint: str | None) -> str:
    subject = f"{name}, {career_hint}" if career_hint else name
    return f"""\
Give a short professional summary (2-3 sentences) of {subject}. If you know \
a public LinkedIn profile URL for this person, include it verbatim. If you \
have no reliable information, respond with "{NO_CAREER}"."""
