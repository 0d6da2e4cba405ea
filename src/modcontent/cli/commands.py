"""CLI command implementations"""

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, Iterator, NoReturn, Optional

import typer
from sqlmodel import Session, SQLModel

from modcontent.config import Settings, load_config
from modcontent.core.collaborators import LoggingInvalidator, StaticIdentity
from modcontent.core.content_view import get_module_content
from modcontent.core.diagnostics import collect_counts, seed_sample_content
from modcontent.core.models import Actor
from modcontent.core.orchestrator import ContentOrchestrator
from modcontent.core.registry import StaticRegistry, default_registry, load_registry
from modcontent.core.results import Failure
from modcontent.crud.database import get_url, init_db, make_engine
from modcontent.crud.sql_repo import SQLAuditStore, SQLContentStore


ActorId = Annotated[Optional[str], typer.Option("--actor-id", help="Actor id recorded on the audit event")]
ActorEmail = Annotated[Optional[str], typer.Option("--actor-email", help="Actor email recorded on the audit event")]


def _fail(msg: str, cause: Exception = None) -> NoReturn:
    """Report msg (and the underlying cause, if any) on stderr, then exit with status 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling and configure logging."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return settings


def _registry(settings: Settings) -> StaticRegistry:
    if not settings.registry_file:
        return default_registry()
    try:
        return load_registry(settings.registry_file)
    except (OSError, ValueError) as e:
        _fail("Could not load module registry", e)


@contextmanager
def _orchestrator(settings: Settings) -> Iterator[ContentOrchestrator]:
    engine = make_engine(get_url(settings.db_url))
    init_db(engine)
    with Session(engine) as session:
        yield ContentOrchestrator(
            content=SQLContentStore(session),
            audit=SQLAuditStore(session),
            registry=_registry(settings),
            identity=StaticIdentity(Actor(id=settings.actor_id, email=settings.actor_email)),
            cache=LoggingInvalidator(),
        )


def _check(result) -> None:
    if isinstance(result, Failure):
        _fail(f"{result.error} [{result.kind.value}]")


def _echo_mutation(verb: str, result) -> None:
    event = result.audit_event
    typer.echo(f"{verb} {event.module_slug}/{event.section_key}: {len(result.blocks)} block(s)")
    typer.echo(f"  updated_at: {result.updated_at.isoformat()}")
    typer.echo(f"  audit: {event.id} ({event.action.value})")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop the section and audit tables first")] = False,
    ):
    """Create the section and audit tables, then report how many rows each holds."""
    settings = _settings()
    engine = make_engine(get_url(settings.db_url))
    if reset:
        SQLModel.metadata.drop_all(engine)
    init_db(engine)
    typer.echo(f"{'Reset' if reset else 'Ready'}: {get_url(settings.db_url)}")
    with _orchestrator(settings) as orch:
        counts = collect_counts(orch)
    _check(counts)
    typer.echo(f"  module_sections: {counts.module_sections}")
    typer.echo(f"  module_section_audit: {counts.audit_events}")


def save_draft_cmd(
    module: Annotated[str, typer.Argument(help="Module slug")],
    section: Annotated[str, typer.Argument(help="Section key")],
    blocks_file: Annotated[Path, typer.Argument(help="JSON file holding the block list")],
    actor_id: ActorId = None,
    actor_email: ActorEmail = None,
    ):
    """Validate a JSON block list and save it as the section draft."""
    settings = _settings(overrides={"actor_id": actor_id, "actor_email": actor_email})
    try:
        raw = json.loads(blocks_file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        _fail(f"Could not read blocks from {blocks_file}", e)
    with _orchestrator(settings) as orch:
        result = orch.save_draft(module, section, raw)
    _check(result)
    _echo_mutation("Saved draft", result)


def publish_cmd(
    module: Annotated[str, typer.Argument(help="Module slug")],
    section: Annotated[str, typer.Argument(help="Section key")],
    actor_id: ActorId = None,
    actor_email: ActorEmail = None,
    ):
    """Publish the current draft of a section."""
    settings = _settings(overrides={"actor_id": actor_id, "actor_email": actor_email})
    with _orchestrator(settings) as orch:
        result = orch.publish(module, section)
    _check(result)
    _echo_mutation("Published", result)
    typer.echo(f"  published_at: {result.published_at.isoformat()}")


def copy_published_cmd(
    module: Annotated[str, typer.Argument(help="Module slug")],
    section: Annotated[str, typer.Argument(help="Section key")],
    actor_id: ActorId = None,
    actor_email: ActorEmail = None,
    ):
    """Replace the draft with the currently published content."""
    settings = _settings(overrides={"actor_id": actor_id, "actor_email": actor_email})
    with _orchestrator(settings) as orch:
        result = orch.copy_published_to_draft(module, section)
    _check(result)
    _echo_mutation("Copied published into draft", result)


def restore_cmd(
    audit_id: Annotated[str, typer.Argument(help="Audit event id to restore into the draft")],
    actor_id: ActorId = None,
    actor_email: ActorEmail = None,
    ):
    """Restore a section draft from a past audit event."""
    settings = _settings(overrides={"actor_id": actor_id, "actor_email": actor_email})
    with _orchestrator(settings) as orch:
        result = orch.restore_from_audit(audit_id)
    _check(result)
    _echo_mutation("Restored draft", result)


def history_cmd(
    module: Annotated[str, typer.Argument(help="Module slug")],
    section: Annotated[str, typer.Argument(help="Section key")],
    limit: Annotated[Optional[int], typer.Option("--limit", help="Number of events (1-50)")] = None,
    ):
    """List audit events for a section, most recent first."""
    settings = _settings()
    with _orchestrator(settings) as orch:
        result = orch.list_audit_events(module, section, limit if limit is not None else settings.audit_limit)
    _check(result)
    if not result.events:
        typer.echo("No audit events recorded.")
        return
    for event in result.events:
        who = event.actor_email or event.actor_id
        typer.echo(f"  {event.created_at.isoformat()}  {event.action.value:<10}  {event.id}  {who}")


def show_cmd(
    module: Annotated[str, typer.Argument(help="Module slug")],
    draft: Annotated[bool, typer.Option("--draft", help="Include draft content")] = False,
    ):
    """Print the resolved content of a module as JSON."""
    settings = _settings()
    with _orchestrator(settings) as orch:
        content = get_module_content(orch.content, orch.registry, module, include_draft=draft)
    if content is None:
        _fail(f"Unknown module slug: {module}")
    typer.echo(content.model_dump_json(indent=2))


def seed_cmd(
    module: Annotated[str, typer.Argument(help="Module slug")],
    section: Annotated[str, typer.Argument(help="Section key")],
    ):
    """Seed sample draft content unless the section already has content."""
    settings = _settings()
    with _orchestrator(settings) as orch:
        result = seed_sample_content(orch, module, section)
    _check(result)
    typer.echo(result.message)
