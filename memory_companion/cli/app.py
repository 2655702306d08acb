from __future__ import annotations

import argparse
import asyncio
import logging
import mimetypes
import sys
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from memory_companion.cli import output as out
from memory_companion.cli.config import (
    LLM_PROVIDERS,
    Config,
    config_exists,
    config_path_display,
    load_config,
    save_config,
)
from memory_companion.exceptions import (
    DimensionMismatchError,
    IdentityNotFoundError,
    ProviderError,
)

DESCRIPTION = """\
memory-companion: remember the people you talk to

Capture a screenshot of whoever you are talking to, and the companion
recognises them (or starts a new profile). Save the conversation
transcript and it learns their name, indexes what was said for
semantic search, and can summarise your history together."""


# ── Infrastructure helpers ──────────────────────────────────────────


def _build_companion(cfg: Config):
    from memory_companion import MemoryCompanion

    return MemoryCompanion.from_config(cfg.to_dict())


def _require_api_key(cfg: Config) -> None:
    """Exit with guidance if no API key is configured for the provider."""
    if cfg.api_key:
        return
    env = "OPENAI_API_KEY" if cfg.llm_provider == "openai" else "GEMINI_API_KEY"
    out.error(
        f"{cfg.llm_provider} API key not configured. "
        f"Run 'memory-companion config set-key {cfg.llm_provider}' or set {env}."
    )
    sys.exit(1)


def _require_persistent(cfg: Config, command: str) -> None:
    """Exit with guidance if the store is not PostgreSQL."""
    if cfg.uses_postgres:
        return
    out.error(f"'{command}' requires PostgreSQL for persistent storage.")
    print()
    out.info("The in-memory store only lives for one command. Either capture")
    out.info("and save a transcript in one go:")
    out.next_step('memory-companion capture face.png --transcript "Hi, I\'m Ada"')
    print()
    out.info("or set up PostgreSQL:")
    out.next_step("memory-companion config set-store postgres")
    sys.exit(1)


def _read_text_arg(text: str | None, path: str | None) -> str:
    if path is not None:
        return Path(path).read_text(encoding="utf-8")
    return text or ""


# ── capture ─────────────────────────────────────────────────────────


async def cmd_capture(args: argparse.Namespace) -> None:
    cfg = load_config()
    _require_api_key(cfg)

    image_path = Path(args.image)
    if not image_path.is_file():
        out.error(f"Image not found: {image_path}")
        sys.exit(1)
    mime_type = args.mime_type or mimetypes.guess_type(image_path.name)[0] or "image/png"
    transcript = _read_text_arg(args.transcript, args.transcript_file)

    companion = _build_companion(cfg)
    await companion.init()
    try:
        result = await companion.capture(image_path.read_bytes(), mime_type)

        if result.no_face_detected:
            out.warn("No face detected.")
            out.kv("Screenshot", result.screenshot_key)
            return

        identity = result.identity
        assert identity is not None
        if result.is_new:
            out.success(f"New person: {out.bold(identity.name)}")
        else:
            out.success(
                f"Recognised {out.bold(identity.name)} "
                f"(confidence {result.confidence:.2f})"
            )
        out.kv("Person ID", identity.id)
        out.kv("Times seen", identity.times_recognized)
        out.kv("Screenshot", result.screenshot_key)

        if transcript.strip():
            saved = await companion.save_transcript(
                transcript, identity.id, result.screenshot_key
            )
            out.success(f"Transcript saved ({saved.transcript.word_count} words)")
            if saved.name_extracted:
                out.success(f"Learned name: {out.bold(saved.new_name or '')}")
    finally:
        await companion.close()


# ── transcript save ─────────────────────────────────────────────────


async def cmd_transcript_save(args: argparse.Namespace) -> None:
    cfg = load_config()
    _require_persistent(cfg, "transcript save")
    _require_api_key(cfg)

    text = _read_text_arg(args.text, args.file)
    if not text.strip():
        out.error("Transcript is empty. Pass TEXT or --file PATH.")
        sys.exit(1)

    companion = _build_companion(cfg)
    await companion.init()
    try:
        result = await companion.save_transcript(
            text, args.person, screenshot_key=args.screenshot
        )
    finally:
        await companion.close()

    out.success(
        f"Transcript {result.transcript.id} saved "
        f"({result.transcript.word_count} words)"
    )
    if result.identity is not None:
        out.kv("Person", f"{result.identity.name} ({result.identity.id})")
        out.kv("Conversations", result.identity.conversation_count)
    if result.name_extracted:
        out.success(f"Learned name: {out.bold(result.new_name or '')}")


# ── search ──────────────────────────────────────────────────────────


async def cmd_search(args: argparse.Namespace) -> None:
    cfg = load_config()
    _require_persistent(cfg, "search")
    _require_api_key(cfg)

    companion = _build_companion(cfg)
    await companion.init()
    try:
        results = await companion.search_conversations(
            args.query, identity_id=args.person, limit=args.limit
        )
    finally:
        await companion.close()

    if not results:
        out.warn("No matching conversations found.")
        return

    out.header(f"Search results ({len(results)})")
    print()
    for i, r in enumerate(results, 1):
        t = r.transcript
        who = t.identity_id or "unlinked"
        print(f"  {i}. [{out.short_date(t.timestamp)}] {who}  {out.dim(f'score={r.score:.4f}')}")
        print(f"     {t.text}")
    print()


# ── people ──────────────────────────────────────────────────────────


async def cmd_people_list(args: argparse.Namespace) -> None:
    cfg = load_config()
    _require_persistent(cfg, "people list")

    companion = _build_companion(cfg)
    await companion.init()
    try:
        people = await companion.list_people()
    finally:
        await companion.close()

    if not people:
        out.warn("Nobody captured yet. Run 'memory-companion capture IMAGE' first.")
        return

    out.header(f"People ({len(people)})")
    print()
    for p in people:
        print(f"  {out.bold(p.name)}  {out.dim(p.id)}")
        print(
            f"    seen {p.times_recognized}x, {p.conversation_count} conversations, "
            f"last seen {out.short_date(p.last_seen)}"
        )
    print()


async def cmd_people_show(args: argparse.Namespace) -> None:
    cfg = load_config()
    _require_persistent(cfg, "people show")

    companion = _build_companion(cfg)
    await companion.init()
    try:
        details = await companion.get_person(args.person_id)
    finally:
        await companion.close()

    p = details.identity
    out.header(p.name)
    print()
    out.kv("ID", p.id)
    out.kv("First seen", out.short_date(p.first_seen))
    out.kv("Last seen", out.short_date(p.last_seen))
    out.kv("Times seen", p.times_recognized)
    out.kv("Conversations", p.conversation_count)
    if p.profile_photo_key:
        out.kv("Photo", p.profile_photo_key)
    print()

    for t in details.transcripts[: args.limit]:
        print(f"  [{out.short_date(t.timestamp)}] {out.dim(f'{t.word_count} words')}")
        print(f"    {t.text}")
    if len(details.transcripts) > args.limit:
        out.info(out.dim(f"... {len(details.transcripts) - args.limit} more"))
    print()


async def cmd_people_summary(args: argparse.Namespace) -> None:
    cfg = load_config()
    _require_persistent(cfg, "people summary")
    _require_api_key(cfg)

    companion = _build_companion(cfg)
    await companion.init()
    try:
        summary = await companion.summarize_person(args.person_id)
    finally:
        await companion.close()

    out.header(f"{summary.name} ({summary.conversation_count} conversations)")
    print()
    print(summary.summary)
    print()
    if summary.career_info:
        out.kv("Career", summary.career_info)
    if summary.career_lookup is not None:
        out.kv("Profile", summary.career_lookup.summary)
        if summary.career_lookup.linkedin_url:
            label = "LinkedIn"
            if not summary.career_lookup.verified:
                label += " (unverified)"
            out.kv(label, summary.career_lookup.linkedin_url)
    print()


# ── reset ───────────────────────────────────────────────────────────


async def cmd_reset(args: argparse.Namespace) -> None:
    cfg = load_config()

    if not args.yes:
        answer = input("  Delete all people, transcripts and files? [y/N] ")
        if answer.strip().lower() not in ("y", "yes"):
            out.info("Aborted.")
            return

    companion = _build_companion(cfg)
    try:
        await companion.reset()
    finally:
        await companion.close()
    out.success("All records and artifacts deleted")


# ── config ──────────────────────────────────────────────────────────


async def cmd_config_show(args: argparse.Namespace) -> None:
    cfg = load_config()

    out.header(f"Configuration ({config_path_display()})")
    print()

    out.kv("LLM provider", cfg.llm_provider)
    for label, key in (
        ("Gemini API key", cfg.gemini_api_key),
        ("OpenAI API key", cfg.openai_api_key),
    ):
        out.kv(label, out.mask_key(key) if key else out.dim("not set"))

    if cfg.uses_postgres:
        out.kv("Store", f"postgres ({cfg.db_host}:{cfg.db_port}/{cfg.db_name})")
    else:
        out.kv("Store", "memory (in-memory, no persistence)")

    out.kv("Data directory", cfg.data_dir)

    print()
    out.info("To change settings:")
    out.next_step("memory-companion config set-key gemini", "change Gemini API key")
    out.next_step("memory-companion config set-store postgres", "set up PostgreSQL")
    print()


async def cmd_config_set_key(args: argparse.Namespace) -> None:
    cfg = load_config() if config_exists() else Config()
    provider = args.provider

    current = cfg.openai_api_key if provider == "openai" else cfg.gemini_api_key
    if current:
        out.kv("Current key", out.mask_key(current))

    key = input(f"  New {provider} API key: ").strip()
    if not key:
        out.warn("No key entered, keeping current value.")
        return

    if provider == "openai":
        cfg.openai_api_key = key
    else:
        cfg.gemini_api_key = key
    cfg.llm_provider = provider
    path = save_config(cfg)
    out.success(f"API key saved to {path}")


async def cmd_config_set_store(args: argparse.Namespace) -> None:
    cfg = load_config() if config_exists() else Config()

    if args.backend == "memory":
        cfg.store_provider = "memory"
        path = save_config(cfg)
        out.success(f"Store set to in-memory. Config written to {path}")
        out.info("Data will only persist for the duration of a single command.")
        return

    cfg.store_provider = "postgres"
    host = input(f"  Database host [{cfg.db_host}]: ").strip() or cfg.db_host
    port = input(f"  Database port [{cfg.db_port}]: ").strip() or str(cfg.db_port)
    name = input(f"  Database name [{cfg.db_name}]: ").strip() or cfg.db_name
    user = input(f"  Database user [{cfg.db_user}]: ").strip() or cfg.db_user
    password = (
        input(f"  Database password [{cfg.db_password}]: ").strip() or cfg.db_password
    )
    cfg.db_host = host
    cfg.db_port = int(port)
    cfg.db_name = name
    cfg.db_user = user
    cfg.db_password = password

    path = save_config(cfg)
    out.success(f"PostgreSQL configured. Config written to {path}")

    companion = _build_companion(cfg)
    try:
        await companion.init()
        out.success("Database initialised")
    except (OSError, SQLAlchemyError) as exc:
        out.warn(f"Could not initialise database: {exc}")
        out.info("You can retry later with: memory-companion config set-store postgres")
    finally:
        await companion.close()


async def cmd_config_path(args: argparse.Namespace) -> None:
    print(config_path_display())


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memory-companion",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Get started (no setup needed):\n"
            "  memory-companion config set-key gemini\n"
            '  memory-companion capture face.png --transcript "Hi, I\'m Ada"\n'
            "\n"
            "With PostgreSQL:\n"
            "  memory-companion config set-store postgres\n"
            "  memory-companion people list\n"
            '  memory-companion search "where did Ada go on holiday"\n'
            "  memory-companion people summary PERSON_ID\n"
            "\n"
            "MCP server:\n"
            "  python -m memory_companion.ext.mcp_use.run\n"
        ),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress logs",
    )
    sub = parser.add_subparsers(dest="command", title="commands")

    # capture
    p_cap = sub.add_parser("capture", help="Recognise the person in a screenshot")
    p_cap.add_argument("image", help="Path to an image file")
    p_cap.add_argument("--mime-type", default=None, help="Override the image type")
    p_cap_text = p_cap.add_mutually_exclusive_group()
    p_cap_text.add_argument(
        "--transcript", default=None, help="Conversation text to save with it"
    )
    p_cap_text.add_argument(
        "--transcript-file", metavar="PATH", default=None, help="Read text from file"
    )

    # transcript
    p_tr = sub.add_parser("transcript", help="Manage transcripts (requires PostgreSQL)")
    tr_sub = p_tr.add_subparsers(dest="transcript_command", title="transcript commands")
    p_tr_save = tr_sub.add_parser("save", help="Save and index a transcript")
    p_tr_save.add_argument("text", nargs="?", default=None, help="Transcript text")
    p_tr_save.add_argument("--file", metavar="PATH", default=None, help="Read from file")
    p_tr_save.add_argument("--person", default=None, help="Person ID to link")
    p_tr_save.add_argument("--screenshot", default=None, help="Screenshot key to link")

    # search
    p_search = sub.add_parser(
        "search", help="Semantic search over conversations (requires PostgreSQL)"
    )
    p_search.add_argument("query", help="What to look for")
    p_search.add_argument("--person", default=None, help="Only this person ID")
    p_search.add_argument("--limit", type=int, default=10, help="Number of results")

    # people
    p_people = sub.add_parser("people", help="Browse people (requires PostgreSQL)")
    people_sub = p_people.add_subparsers(dest="people_command", title="people commands")
    people_sub.add_parser("list", help="List everyone, most recent first")
    p_show = people_sub.add_parser("show", help="Show a person and their conversations")
    p_show.add_argument("person_id")
    p_show.add_argument("--limit", type=int, default=10, help="Conversations to show")
    p_sum = people_sub.add_parser("summary", help="Summarise a person's history")
    p_sum.add_argument("person_id")

    # reset
    p_reset = sub.add_parser("reset", help="Delete all records and artifacts")
    p_reset.add_argument("-y", "--yes", action="store_true", help="Do not ask")

    # config
    p_cfg = sub.add_parser("config", help="View and change settings")
    cfg_sub = p_cfg.add_subparsers(dest="config_command", title="config commands")

    cfg_sub.add_parser("show", help="Show current settings")
    p_cfg_key = cfg_sub.add_parser("set-key", help="Set an LLM API key")
    p_cfg_key.add_argument(
        "provider", nargs="?", choices=LLM_PROVIDERS, default="gemini"
    )
    p_cfg_store = cfg_sub.add_parser("set-store", help="Configure the store backend")
    p_cfg_store.add_argument(
        "backend",
        choices=["postgres", "memory"],
        help="Store backend to use",
    )
    cfg_sub.add_parser("path", help="Print config file location")

    return parser


# ── Dispatch ────────────────────────────────────────────────────────

_CommandHandler = Callable[[argparse.Namespace], Coroutine[Any, Any, None]]

_COMMAND_MAP: dict[str, _CommandHandler] = {
    "capture": cmd_capture,
    "search": cmd_search,
    "reset": cmd_reset,
}

_TRANSCRIPT_MAP: dict[str, _CommandHandler] = {
    "save": cmd_transcript_save,
}

_PEOPLE_MAP: dict[str, _CommandHandler] = {
    "list": cmd_people_list,
    "show": cmd_people_show,
    "summary": cmd_people_summary,
}

_CONFIG_MAP: dict[str, _CommandHandler] = {
    "show": cmd_config_show,
    "set-key": cmd_config_set_key,
    "set-store": cmd_config_set_store,
    "path": cmd_config_path,
}

_GROUPS: dict[str, tuple[str, dict[str, _CommandHandler]]] = {
    "transcript": ("transcript_command", _TRANSCRIPT_MAP),
    "people": ("people_command", _PEOPLE_MAP),
    "config": ("config_command", _CONFIG_MAP),
}


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.INFO,
            format="  %(name)s: %(message)s",
        )
    logging.getLogger("LiteLLM").setLevel(logging.CRITICAL)
    logging.getLogger("litellm").setLevel(logging.CRITICAL)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return

    if args.command in _GROUPS:
        dest, handlers = _GROUPS[args.command]
        sub_command = getattr(args, dest)
        if not sub_command:
            parser.parse_args([args.command, "--help"])
            return
        handler = handlers.get(sub_command)
    else:
        handler = _COMMAND_MAP.get(args.command)

    if handler is None:
        parser.print_help()
        return

    try:
        asyncio.run(handler(args))
    except KeyboardInterrupt:
        print()
    except (ProviderError, IdentityNotFoundError, DimensionMismatchError) as exc:
        out.error(str(exc))
        sys.exit(1)
    except ValueError as exc:
        out.error(str(exc))
        sys.exit(2)


if __name__ == "__main__":
    main()
