"""Configuration management for the memory-companion CLI.

Reads/writes a TOML config file and provides a typed Config dataclass.
Default location: ``~/.config/memory-companion/config.toml``.
Override with the ``MEMORY_COMPANION_CONFIG`` environment variable.

Data directory layout::

    data/
      screenshots/   <- one PNG per capture
      transcripts/   <- one text file per saved conversation
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_DEFAULT_CONFIG_DIR = Path("~/.config/memory-companion").expanduser()
_DEFAULT_DATA_DIR = Path("./data")

LLM_PROVIDERS = ("gemini", "openai")


def _config_path() -> Path:
    env = os.environ.get("MEMORY_COMPANION_CONFIG")
    if env:
        return Path(env).expanduser()
    return _DEFAULT_CONFIG_DIR / "config.toml"


@dataclass
class Config:
    # LLM provider: "gemini" (default) or "openai", both via litellm
    llm_provider: str = "gemini"
    gemini_api_key: str = ""
    openai_api_key: str = ""

    # Store backend: "memory" (default, no external deps) or "postgres"
    store_provider: str = "memory"

    # Postgres settings (only used when store_provider == "postgres")
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "memory_companion"
    db_user: str = "postgres"
    db_password: str = "postgres"

    data_dir: str = str(_DEFAULT_DATA_DIR)

    @property
    def api_key(self) -> str:
        """Key for the selected LLM provider."""
        if self.llm_provider == "openai":
            return self.openai_api_key
        return self.gemini_api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def uses_postgres(self) -> bool:
        return self.store_provider == "postgres"

    def to_dict(self) -> dict[str, Any]:
        """Convert into the config dict accepted by ``parse_config``."""
        store_config: dict[str, Any] = {}
        if self.uses_postgres:
            store_config = {
                "host": self.db_host,
                "port": self.db_port,
                "database": self.db_name,
                "user": self.db_user,
                "password": self.db_password,
            }
        return {
            "storage": {"provider": "disk", "config": {"base_path": self.data_dir}},
            "store": {"provider": self.store_provider, "config": store_config},
            "llm": {"provider": self.llm_provider, "api_key": self.api_key},
        }


def load_config() -> Config:
    """Load config from disk, falling back to defaults + env overrides."""
    path = _config_path()
    cfg = Config()

    if path.exists():
        with open(path, "rb") as f:
            data = tomllib.load(f)
        llm_section = data.get("llm", {})
        store_section = data.get("store", {})
        db_section = data.get("database", {})
        data_section = data.get("data", {})

        cfg.llm_provider = llm_section.get("provider", cfg.llm_provider)
        cfg.gemini_api_key = llm_section.get("gemini_api_key", cfg.gemini_api_key)
        cfg.openai_api_key = llm_section.get("openai_api_key", cfg.openai_api_key)

        cfg.store_provider = store_section.get("provider", cfg.store_provider)

        cfg.db_host = db_section.get("host", cfg.db_host)
        cfg.db_port = int(db_section.get("port", cfg.db_port))
        cfg.db_name = db_section.get("name", cfg.db_name)
        cfg.db_user = db_section.get("user", cfg.db_user)
        cfg.db_password = db_section.get("password", cfg.db_password)

        cfg.data_dir = data_section.get("dir", cfg.data_dir)

    # Environment variables always take precedence
    cfg.gemini_api_key = os.environ.get("GEMINI_API_KEY", cfg.gemini_api_key)
    cfg.openai_api_key = os.environ.get("OPENAI_API_KEY", cfg.openai_api_key)
    cfg.llm_provider = os.environ.get("MEMORY_COMPANION_LLM", cfg.llm_provider)
    cfg.store_provider = os.environ.get("MEMORY_COMPANION_STORE", cfg.store_provider)
    cfg.db_host = os.environ.get("POSTGRES_HOST", cfg.db_host)
    cfg.db_port = int(os.environ.get("POSTGRES_PORT", str(cfg.db_port)))
    cfg.db_name = os.environ.get("POSTGRES_DB", cfg.db_name)
    cfg.db_user = os.environ.get("POSTGRES_USER", cfg.db_user)
    cfg.db_password = os.environ.get("POSTGRES_PASSWORD", cfg.db_password)

    return cfg


def save_config(cfg: Config) -> Path:
    """Write config to the TOML file. Returns the path written."""
    path = _config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    lines = [
        "[llm]",
        f'provider = "{cfg.llm_provider}"',
        f'gemini_api_key = "{cfg.gemini_api_key}"',
        f'openai_api_key = "{cfg.openai_api_key}"',
        "",
        "[store]",
        f'provider = "{cfg.store_provider}"',
        "",
    ]

    if cfg.uses_postgres:
        lines.extend(
            [
                "[database]",
                f'host = "{cfg.db_host}"',
                f"port = {cfg.db_port}",
                f'name = "{cfg.db_name}"',
                f'user = "{cfg.db_user}"',
                f'password = "{cfg.db_password}"',
                "",
            ]
        )

    lines.extend(
        [
            "[data]",
            f'dir = "{cfg.data_dir}"',
            "",
        ]
    )

    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def config_exists() -> bool:
    return _config_path().exists()


def config_path_display() -> str:
    return str(_config_path())
