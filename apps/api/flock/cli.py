"""CLI tools for Flock administration."""

import json
import uuid
from pathlib import Path

import click

from flock.core.structured_logging import configure_logging
from flock.db.enums import Role
from flock.db.models import Organization
from flock.db.session import SessionLocal


def _open_session(ctx: click.Context):
    factory = (ctx.obj or {}).get("session_factory", SessionLocal)
    return factory()


def _find_org(db, slug: str) -> Organization | None:
    return db.query(Organization).filter(Organization.slug == slug.lower().strip()).first()


@click.group()
@click.option("--log-level", default=None, help="Override LOG_LEVEL")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None):
    """Flock CLI tools."""
    ctx.ensure_object(dict)
    configure_logging(log_level)


@cli.command()
@click.option("--name", required=True, help="Organization name")
@click.option("--slug", required=True, help="URL-friendly slug (lowercase, no spaces)")
@click.option("--id", "org_id", default=None, help="Fixed organization UUID (e.g. DEV_ORG_ID)")
@click.pass_context
def create_org(ctx: click.Context, name: str, slug: str, org_id: str | None):
    """
    Create an organization.

    Example:
        flock create-org --name "Grace Chapel" --slug "grace"
    """
    db = _open_session(ctx)
    try:
        slug = slug.lower().strip()
        if not slug.replace("-", "").replace("_", "").isalnum():
            click.echo("❌ Slug must be alphanumeric (with optional hyphens/underscores)")
            ctx.exit(1)

        if _find_org(db, slug):
            click.echo(f"❌ Organization with slug '{slug}' already exists")
            ctx.exit(1)

        org = Organization(name=name, slug=slug)
        if org_id:
            try:
                org.id = uuid.UUID(org_id)
            except ValueError:
                click.echo(f"❌ Invalid organization id: {org_id}")
                ctx.exit(1)
        db.add(org)
        db.commit()

        click.echo(f"✓ Created organization: {name}")
        click.echo(f"  ID: {org.id}")
        click.echo(f"  Slug: {slug}")
    finally:
        db.close()


@cli.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--org-slug", required=True, help="Organization slug")
@click.option(
    "--mapping",
    default=None,
    help='JSON object of CSV header -> field key; defaults to automatic mapping',
)
@click.pass_context
def import_people(ctx: click.Context, csv_file: Path, org_slug: str, mapping: str | None):
    """
    Import people from a CSV file.

    Example:
        flock import-people members.csv --org-slug grace
    """
    from flock.services import csv_import_service, profile_field_service
    from flock.services.entity_client import get_entity_clients

    db = _open_session(ctx)
    try:
        org = _find_org(db, org_slug)
        if not org:
            click.echo(f"❌ Organization '{org_slug}' not found")
            ctx.exit(1)

        try:
            parsed = csv_import_service.parse_csv(csv_file.read_bytes())
            column_mapping = (
                json.loads(mapping) if mapping else csv_import_service.auto_map(parsed.headers)
            )
            if not isinstance(column_mapping, dict):
                raise ValueError("Mapping must be a JSON object of header -> field key")
            clients = get_entity_clients(db, org.id)
            fields = profile_field_service.list_fields(clients.profile_fields)
            csv_import_service.check_mapping_targets(column_mapping, fields)
        except ValueError as exc:
            click.echo(f"❌ {exc}")
            ctx.exit(1)

        click.echo(f"Importing {parsed.total_rows} rows from {csv_file.name}")
        for header, target in column_mapping.items():
            click.echo(f"  {header} -> {target or '(skipped)'}")

        try:
            result = csv_import_service.execute_import(
                clients.people, parsed, column_mapping, fields
            )
        except csv_import_service.ImportValidationError as exc:
            click.echo("❌ Please fix validation errors before importing:")
            for error in exc.errors:
                click.echo(f"  - {error}")
            ctx.exit(1)

        click.echo(f"✓ {result.message}")
    finally:
        db.close()


@cli.command()
@click.option("--org-slug", required=True, help="Organization slug")
@click.option("--columns", default=None, help="Comma-separated column keys (default: core set)")
@click.option(
    "--role",
    type=click.Choice([r.value for r in Role]),
    default=Role.OWNER.value,
    help="Role whose column visibility applies",
)
@click.option("--output", "output", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_context
def export_people(
    ctx: click.Context,
    org_slug: str,
    columns: str | None,
    role: str,
    output: Path | None,
):
    """
    Export people to a CSV file.

    Example:
        flock export-people --org-slug grace --columns first_name,last_name,tags
    """
    from flock.services import csv_export_service, person_service, profile_field_service, tag_service
    from flock.services.entity_client import get_entity_clients

    db = _open_session(ctx)
    try:
        org = _find_org(db, org_slug)
        if not org:
            click.echo(f"❌ Organization '{org_slug}' not found")
            ctx.exit(1)

        clients = get_entity_clients(db, org.id)
        selected = (
            [c.strip() for c in columns.split(",") if c.strip()]
            if columns is not None
            else csv_export_service.DEFAULT_COLUMNS
        )
        people = person_service.list_people(clients)
        try:
            content = csv_export_service.build_csv(
                people,
                selected,
                profile_field_service.list_all_fields(clients.profile_fields),
                tag_service.list_tags(clients),
                Role(role),
            )
        except ValueError as exc:
            click.echo(f"❌ {exc}")
            ctx.exit(1)

        output = output or Path(csv_export_service.export_filename())
        output.write_text(content, encoding="utf-8")
        click.echo(f"✓ Exported {len(people)} people to {output}")
    finally:
        db.close()


if __name__ == "__main__":
    cli()
