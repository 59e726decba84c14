import click
from flask.cli import AppGroup

from .tasks import build_css

elaine_crud_cli = AppGroup("elaine-crud", help="ElaineCrud engine tasks.")


@elaine_crud_cli.command("build-css")
def build_css_command():
    """Compile elaine_crud.css with the standalone Tailwind CSS binary."""
    status = build_css.run()
    if status != 0:
        raise click.exceptions.Exit(status)
