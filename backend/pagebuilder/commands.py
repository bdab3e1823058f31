import click
from flask import Flask
from pagebuilder.application.pages import copy_site
from pagebuilder.application.sites import create_site
from pagebuilder.models.page_type import seed_page_types
from pagebuilder.utils.transaction import transactional


def register_commands(app: Flask) -> None:
    @app.cli.command("seed-page-types")
    def seed_page_types_command():
        """Insert the page_type rows."""
        with transactional():
            created = seed_page_types()
        click.echo(f"Created {created} page types")

    @app.cli.command("create-site")
    @click.argument("name")
    @click.option("--organization-id", type=int, default=None)
    def create_site_command(name, organization_id):
        """Create a site with its default homepage."""
        try:
            site = create_site(name=name, organization_id=organization_id)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="NAME") from exc
        click.echo(f"Created site {site.id}")

    @app.cli.command("copy-site")
    @click.argument("from_site_id", type=int)
    @click.argument("to_site_id", type=int)
    @click.option("--no-widgets", is_flag=True, help="Copy pages without their widgets.")
    @click.option("--reset-map", is_flag=True, help="Forget earlier copies first.")
    def copy_site_command(from_site_id, to_site_id, no_widgets, reset_map):
        """Copy every page of one site onto another."""
        copies = copy_site(
            from_site_id=from_site_id,
            to_site_id=to_site_id,
            copy_widgets=not no_widgets,
            reset_map=reset_map,
        )
        click.echo(f"Copied {len(copies)} pages")
