"""CLI main entry point."""

import logging
from contextlib import contextmanager
from pathlib import Path

import click

from .config import Config
from .db import close_db, create_tables, init_db
from .enums import ExportKind, SchemaFormat, SegmentKind
from .errors import GenerationBlocked, PromptorException, UnpublishableSchema
from .form import FormSession, export_filename, write_export
from .log import setup as setup_log
from .placeholders import check_publishable, classify
from .schema import Schema, find_schema_issues
from .schema_io import dump_schema, load_schema_file
from .store import SchemaStore, load_schema_for_display
from .utils import parse_assignment

logger = logging.getLogger(__name__)

SEGMENT_STYLES = {
    SegmentKind.RESOLVABLE: {"fg": "green", "bold": True},
    SegmentKind.UNRESOLVABLE: {"fg": "white", "bg": "red", "bold": True},
}


@contextmanager
def open_store(cfg: Config):
    """Bind the database for the duration of one command."""
    init_db(cfg.database.path)
    try:
        create_tables()
        yield SchemaStore()
    finally:
        close_db()


def _load_schema(cfg: Config, key: str | None, schema_file: str | None) -> Schema:
    if schema_file:
        return load_schema_file(schema_file)
    if not key:
        raise click.UsageError("Give a schema KEY or --file")
    with open_store(cfg) as store:
        schema, message = load_schema_for_display(store, key)
    if schema is None:
        raise click.ClickException(message)
    return schema


def _read_input(input_file: str) -> str:
    try:
        return Path(input_file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.BadParameter(
            f"Cannot read {input_file}: {e}", param_hint="--input"
        ) from e


def _echo_issues(schema: Schema) -> None:
    for issue in find_schema_issues(schema):
        label = "error" if issue.blocking else "warning"
        click.echo(f"{label}: [{issue.code.value}] {issue.message}", err=True)


@click.group()
@click.option(
    "--config",
    "-c",
    default=None,
    help="Configuration file path (default: config.toml if present)",
)
@click.pass_context
def cli(ctx, config: str | None):
    """Promptor - fill in forms and generate text from templates."""
    ctx.ensure_object(dict)
    try:
        cfg = Config.load(config)
    except PromptorException as e:
        raise click.ClickException(str(e))

    setup_log(cfg.log.file, level=cfg.log.level)
    ctx.obj["config"] = cfg


@cli.command(name="init-db")
@click.pass_context
def init_database(ctx):
    """Create the schema database."""
    cfg = ctx.obj["config"]
    with open_store(cfg):
        click.echo(f"Database ready: {cfg.database.path}")


@cli.command(name="list")
@click.pass_context
def list_schemas(ctx):
    """List stored UI definitions."""
    cfg = ctx.obj["config"]
    try:
        with open_store(cfg) as store:
            summaries = store.list_schemas()
    except PromptorException as e:
        raise click.ClickException(str(e))

    if not summaries:
        click.echo("No schemas stored.")
        return

    click.echo("key\ttitle\tsections")
    for summary in summaries:
        click.echo(f"{summary.key}\t{summary.title}\t{summary.section_count}")


@cli.command(name="import")
@click.argument("schema_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--key", "-k", default=None, help="Storage key (defaults to file name)")
@click.pass_context
def import_schema(ctx, schema_file: str, key: str | None):
    """Check a JSON or TOML UI definition and store it."""
    cfg = ctx.obj["config"]
    key = key or Path(schema_file).stem

    try:
        schema = load_schema_file(schema_file)
        with open_store(cfg) as store:
            store.save(key, schema)
    except UnpublishableSchema as e:
        for ref in e.offending:
            click.echo(f"Unresolvable ref: {{{{{ref}}}}}", err=True)
        for issue in e.issues:
            click.echo(f"error: [{issue.code.value}] {issue.message}", err=True)
        raise click.ClickException(f"Schema '{key}' was not saved")
    except PromptorException as e:
        raise click.ClickException(str(e))

    click.echo(f"Saved schema: {key}")


@cli.command(name="export")
@click.argument("key")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in SchemaFormat]),
    default=SchemaFormat.JSON.value,
)
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None)
@click.pass_context
def export_schema(ctx, key: str, fmt: str, output: str | None):
    """Write a stored UI definition as JSON or TOML."""
    cfg = ctx.obj["config"]
    try:
        with open_store(cfg) as store:
            content = dump_schema(store.get(key), SchemaFormat(fmt))
        if output:
            write_export(Path(output).parent, Path(output).name, content)
    except PromptorException as e:
        raise click.ClickException(str(e))

    if not output:
        click.echo(content)


@cli.command(name="check")
@click.argument("key", required=False)
@click.option("--file", "-f", "schema_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def check(ctx, key: str | None, schema_file: str | None):
    """Report unresolvable refs and structural issues."""
    cfg = ctx.obj["config"]
    try:
        schema = _load_schema(cfg, key, schema_file)
    except PromptorException as e:
        raise click.ClickException(str(e))

    _echo_issues(schema)
    result = check_publishable(schema.template_text, schema.known_refs())
    blocking = any(issue.blocking for issue in find_schema_issues(schema))

    if not result.publishable:
        click.echo(f"Unresolvable refs: {', '.join(result.offending)}")
    if not result.publishable or blocking:
        raise click.ClickException("Schema is not publishable")

    click.echo("Schema is publishable")


@cli.command(name="highlight")
@click.argument("key", required=False)
@click.option("--file", "-f", "schema_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def highlight(ctx, key: str | None, schema_file: str | None):
    """Print the template with placeholders marked."""
    cfg = ctx.obj["config"]
    try:
        schema = _load_schema(cfg, key, schema_file)
    except PromptorException as e:
        raise click.ClickException(str(e))

    parts = []
    for segment in classify(schema.template_text, schema.known_refs()):
        style = SEGMENT_STYLES.get(segment.kind)
        parts.append(click.style(segment.text, **style) if style else segment.text)
    click.echo("".join(parts))


@cli.command(name="generate")
@click.argument("key", required=False)
@click.option("--file", "-f", "schema_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--set", "-s", "assignments", multiple=True, help="Answer as ref=value")
@click.option(
    "--input",
    "-i",
    "input_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Previously exported answers (JSON)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory for the saved prompt (implies --save)",
)
@click.option("--save", is_flag=True, default=False, help="Write the prompt to a file")
@click.option(
    "--save-input",
    is_flag=True,
    default=False,
    help="Also export the answers (implies --save)",
)
@click.pass_context
def generate(
    ctx,
    key: str | None,
    schema_file: str | None,
    assignments: tuple[str, ...],
    input_file: str | None,
    output: str | None,
    save: bool,
    save_input: bool,
):
    """Fill in a UI definition and print or save the generated text."""
    cfg = ctx.obj["config"]
    try:
        schema = _load_schema(cfg, key, schema_file)
        session = FormSession(schema, unresolved=cfg.generation.unresolved)

        if input_file:
            session.load_input_json(_read_input(input_file))
        for raw in assignments:
            ref, value = parse_assignment(raw)
            session.set_value(ref, value)

        content = session.generate()
    except GenerationBlocked as e:
        for ref in e.missing:
            click.echo(f"Missing required field: {ref or '<unnamed>'}", err=True)
        raise click.ClickException("Generation is disabled until required fields are filled")
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--set")
    except PromptorException as e:
        raise click.ClickException(str(e))

    if not (output or save or save_input):
        click.echo(content)
        return

    name = key or Path(schema_file).stem
    directory = Path(output or cfg.export.directory)
    try:
        path = write_export(
            directory, export_filename(name, ExportKind.PROMPT), content
        )
        click.echo(f"Prompt saved: {path}")
        if save_input:
            path = write_export(
                directory,
                export_filename(name, ExportKind.INPUT),
                session.export_input_json(),
            )
            click.echo(f"Input saved: {path}")
    except PromptorException as e:
        raise click.ClickException(str(e))


@cli.command(name="serve")
@click.option("--host", "-h", default=None, help="Override host from config")
@click.option("--port", "-p", default=None, type=int, help="Override port from config")
@click.pass_context
def serve(ctx, host, port):
    """Start the HTTP API."""
    cfg = ctx.obj["config"]

    import uvicorn

    from .api import create_app

    host = host or cfg.web.host
    port = port or cfg.web.port

    try:
        app = create_app(cfg)
    except PromptorException as e:
        logger.error(f"Application error: {e}", exc_info=True)
        raise click.ClickException(str(e))

    logger.info(f"Starting server on {host}:{port}")
    uvicorn.run(app, host=host, port=port)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
