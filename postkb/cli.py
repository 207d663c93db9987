"""postkb CLI - Check, list and export the post archive."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import click

from postkb.config import AppConfig, load_config, site_timezone
from postkb.logging_config import setup_logging
from postkb.pipeline.loader import read_sources
from postkb.storage.docstore import DocumentStore, LoadError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = "postkb.yaml"


def _load_app_config(config: str) -> tuple[AppConfig, Path]:
    """Load config, falling back to defaults when the default file is absent."""
    path = Path(config)
    if config == DEFAULT_CONFIG and not path.exists():
        return load_config(None), Path.cwd()
    return load_config(path), path.resolve().parent


def _open_store(cfg: AppConfig, base: Path) -> DocumentStore:
    store = DocumentStore(tz=site_timezone(cfg.catalog))
    store.load(read_sources(cfg.content, base=base))
    return store


def _echo_load_error(exc: LoadError) -> None:
    click.echo(f"✗ {len(exc.failures)} document(s) failed to load:", err=True)
    for failure in exc.failures:
        click.echo(f"  - {failure.doc_id}: {failure.field} ({failure.reason})", err=True)


@click.group()
@click.option("--log-level", default=None, help="Override the configured log level")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """postkb CLI - Post archive checking and export."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Configuration file path")
@click.pass_context
def validate(ctx: click.Context, config: str):
    """Validate configuration file."""
    try:
        cfg, _ = _load_app_config(config)
        setup_logging(cfg.logging, level=ctx.obj.get("log_level"))
        site_timezone(cfg.catalog)

        click.echo("✓ Configuration is valid")
        click.echo(f"  Content roots: {cfg.content.content_roots}")
        click.echo(f"  File extensions: {cfg.content.file_extensions}")
        click.echo(f"  Timezone: {cfg.catalog.timezone}")

    except Exception as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        raise click.Abort()


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Configuration file path")
@click.pass_context
def check(ctx: click.Context, config: str):
    """Parse every post and report all front-matter errors."""
    try:
        cfg, base = _load_app_config(config)
        setup_logging(cfg.logging, level=ctx.obj.get("log_level"))
        store = _open_store(cfg, base)
    except LoadError as exc:
        _echo_load_error(exc)
        raise click.Abort()
    except Exception as e:
        click.echo(f"✗ Check failed: {e}", err=True)
        raise click.Abort()

    catalog = store.catalog()
    click.echo(f"✓ {len(store)} posts loaded")
    for name, count in catalog.category_counts().items():
        click.echo(f"  {name}: {count}")


@cli.command(name="list")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Configuration file path")
@click.option("--category", default=None, help="Only posts in this category")
@click.option("--ascending", is_flag=True, help="Oldest first")
@click.pass_context
def list_posts(ctx: click.Context, config: str, category: str | None, ascending: bool):
    """List posts by date."""
    try:
        cfg, base = _load_app_config(config)
        setup_logging(cfg.logging, level=ctx.obj.get("log_level"))
        store = _open_store(cfg, base)
    except LoadError as exc:
        _echo_load_error(exc)
        raise click.Abort()
    except Exception as e:
        click.echo(f"✗ List failed: {e}", err=True)
        raise click.Abort()

    catalog = store.catalog()
    if category:
        documents = catalog.by_category(category, descending=not ascending)
    else:
        documents = catalog.by_date(descending=not ascending)

    for doc in documents:
        click.echo(f"{doc.published_at.date().isoformat()}  {doc.id}  {doc.title}")


@cli.command()
@click.argument("doc_id")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Configuration file path")
@click.pass_context
def show(ctx: click.Context, doc_id: str, config: str):
    """Show one post's metadata."""
    try:
        cfg, base = _load_app_config(config)
        setup_logging(cfg.logging, level=ctx.obj.get("log_level"))
        store = _open_store(cfg, base)
        doc = store.get(doc_id)
    except LoadError as exc:
        _echo_load_error(exc)
        raise click.Abort()
    except NotFoundError as exc:
        click.echo(f"✗ {exc}", err=True)
        raise click.Abort()
    except Exception as e:
        click.echo(f"✗ Show failed: {e}", err=True)
        raise click.Abort()

    click.echo(f"id: {doc.id}")
    click.echo(f"title: {doc.title}")
    click.echo(f"date: {doc.published_at.isoformat()}")
    click.echo(f"categories: {' '.join(sorted(doc.categories))}")
    click.echo(f"layout: {doc.layout}")
    for key, value in doc.extras.items():
        click.echo(f"{key}: {value}")
    if doc.source_path:
        click.echo(f"source: {doc.source_path}")


@cli.command()
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Configuration file path")
@click.option("--output", "-o", required=True, type=click.Path(dir_okay=False), help="Manifest JSON path")
@click.option("--with-body", is_flag=True, help="Include post bodies in the manifest")
@click.pass_context
def export(ctx: click.Context, config: str, output: str, with_body: bool):
    """Write a JSON manifest of all posts, newest first."""
    try:
        cfg, base = _load_app_config(config)
        setup_logging(cfg.logging, level=ctx.obj.get("log_level"))
        store = _open_store(cfg, base)
    except LoadError as exc:
        _echo_load_error(exc)
        raise click.Abort()
    except Exception as e:
        click.echo(f"✗ Export failed: {e}", err=True)
        raise click.Abort()

    catalog = store.catalog()
    posts = []
    for doc in catalog.by_date(descending=True):
        entry = doc.to_dict()
        if not with_body:
            entry.pop("body")
        posts.append(entry)

    manifest = {
        "version": store.version,
        "fingerprint": store.snapshot.fingerprint,
        "created_at": datetime.now(timezone.utc).isoformat(),
        "total_posts": len(posts),
        "posts": posts,
        "categories": {
            name: [doc.id for doc in catalog.by_category(name)]
            for name in catalog.categories()
        },
    }

    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(manifest, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info(f"Wrote manifest with {len(posts)} posts to {output_path}")
    click.echo(f"✓ Manifest saved to: {output_path}")


def main():
    """CLI entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
