"""Demo and test-runner commands.

    flask --app demo demo setup        migrate + seed
    flask --app demo demo reset        drop everything, then setup
    flask --app demo demo seed
    flask --app demo demo server [--port 3000]
    flask --app demo demo console
    flask --app demo demo dbconsole
    flask --app demo demo info
    flask --app demo spec integration
    flask --app demo spec controller books
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

import click
from flask import current_app
from flask.cli import AppGroup
from sqlalchemy import inspect

from elaine_crud import routes_for

from . import db, run_migrations

logger = logging.getLogger("demo.cli")

REPO_ROOT = Path(__file__).resolve().parent.parent
INTEGRATION_DIR = Path("tests") / "integration"

demo_cli = AppGroup("demo", help="Run and manage the demo application.")
spec_cli = AppGroup("spec", help="Run the test suite.")


def run_command(args: List[str], description: str, cwd: Optional[Path] = None) -> None:
    """Run an external command; abort with its exit status when it fails."""
    click.echo("$ " + " ".join(str(a) for a in args))
    result = subprocess.run([str(a) for a in args], cwd=str(cwd) if cwd else None)
    if result.returncode != 0:
        raise click.ClickException(f"{description} failed (exit status {result.returncode})")


def flask_command(*args: str) -> List[str]:
    return [sys.executable, "-m", "flask", "--app", "demo", *args]


def print_summary(counts) -> None:
    click.echo("=" * 60)
    click.echo("Summary:")
    for table, count in counts.items():
        click.echo(f"  {table}: {count}")
    click.echo("=" * 60)


@demo_cli.command("server")
@click.option("--port", default=3000, show_default=True, type=int)
@click.option("--host", default="127.0.0.1", show_default=True)
def server(port, host):
    """Start the demo web server."""
    click.echo(f"Starting demo server on http://{host}:{port}")
    run_command(flask_command("run", "--host", host, "--port", str(port)), "Server", cwd=REPO_ROOT)


@demo_cli.command("setup")
def setup():
    """Create the database, apply migrations and load the demo data."""
    from .seeds import seed

    app = current_app._get_current_object()
    os.makedirs(app.instance_path, exist_ok=True)
    click.echo("Applying migrations...")
    try:
        run_migrations(app)
    except Exception as exc:
        logger.error("Migration failed: %s", exc)
        raise click.ClickException(f"Database migration failed: {exc}") from exc
    click.echo("Seeding demo data...")
    try:
        counts = seed()
    except Exception as exc:
        db.session.rollback()
        logger.error("Seeding failed: %s", exc)
        raise click.ClickException(f"Database seed failed: {exc}") from exc
    click.echo("Demo database ready.")
    print_summary(counts)


@demo_cli.command("reset")
@click.pass_context
def reset(ctx):
    """Drop every table and run setup again."""
    click.echo("Dropping all tables...")
    db.session.remove()
    try:
        db.drop_all()
        with db.engine.begin() as conn:
            conn.exec_driver_sql("DROP TABLE IF EXISTS alembic_version")
    except Exception as exc:
        logger.error("Reset failed: %s", exc)
        raise click.ClickException(f"Database reset failed: {exc}") from exc
    ctx.invoke(setup)


@demo_cli.command("seed")
def seed_command():
    """Replace the database content with the demo data."""
    from .seeds import seed

    print_summary(seed())


@demo_cli.command("console")
def console():
    """Open a Python shell with the app context loaded."""
    run_command(flask_command("shell"), "Console", cwd=REPO_ROOT)


@demo_cli.command("dbconsole")
def dbconsole():
    """Open the sqlite3 client on the demo database."""
    url = db.engine.url
    if url.get_backend_name() != "sqlite" or not url.database:
        raise click.ClickException(f"dbconsole only supports SQLite databases (got {url.get_backend_name()})")
    client = shutil.which("sqlite3")
    if client is None:
        raise click.ClickException("sqlite3 client not found; install it to use dbconsole")
    run_command([client, url.database], "Database console")


@demo_cli.command("info")
def info():
    """Show the database location, row counts and resource URLs."""
    app = current_app._get_current_object()
    click.echo(f"Database: {app.config['SQLALCHEMY_DATABASE_URI']}")
    tables = set(inspect(db.engine).get_table_names())
    click.echo("")
    click.echo("Records:")
    for mapper in sorted(db.Model.registry.mappers, key=lambda m: m.class_.__name__):
        model = mapper.class_
        table = model.__tablename__
        if table not in tables:
            click.echo(f"  {model.__name__}: table missing (run 'flask --app demo demo setup')")
            continue
        click.echo(f"  {model.__name__}: {db.session.query(model).count()}")
    click.echo("")
    click.echo("Resources:")
    for route in routes_for(app):
        click.echo(f"  {route['name']:<12} {route['index']}  (export: {route['export']})")


def available_controllers(root: Path = REPO_ROOT) -> List[str]:
    folder = root / INTEGRATION_DIR
    return sorted(p.stem[len("test_"):-len("_crud")] for p in folder.glob("test_*_crud.py"))


@spec_cli.command("integration")
def integration():
    """Run the integration tests."""
    run_command([sys.executable, "-m", "pytest", str(INTEGRATION_DIR)], "Integration tests", cwd=REPO_ROOT)


@spec_cli.command("controller")
@click.argument("name")
def controller(name):
    """Run the integration tests of one resource (e.g. books)."""
    target = INTEGRATION_DIR / f"test_{name}_crud.py"
    if not (REPO_ROOT / target).is_file():
        names = ", ".join(available_controllers()) or "none"
        raise click.ClickException(f"No tests for controller '{name}'. Available: {names}")
    run_command([sys.executable, "-m", "pytest", str(target)], f"Tests for {name}", cwd=REPO_ROOT)
