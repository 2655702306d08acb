"""Shared ID generators for the domain models."""

from __future__ import annotations

import secrets
import uuid


def generate_id() -> str:
    """Return a new random UUID string (v4)."""
    return str(uuid.uuid4())


def generate_person_id() -> str:
    """Return an identity id of the form ``person-<16 hex chars>``."""
    return f"person-{secrets.token_hex(8)}"
