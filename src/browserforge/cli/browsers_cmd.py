"""Browser CLI commands: inspect inferred browser configuration."""

from pathlib import Path

import click

from browserforge.browsers import BrowserConfigError, resolve_browser
from browserforge.metadata.loader import MetadataLoader


def _resolve_metadata_path(path: Path | None) -> Path:
    """Metadata directory from --path, or ./metadata."""
    return path if path is not None else Path.cwd() / "metadata"


@click.group()
def browsers():
    """Browser field commands."""
    pass


@browsers.command("show")
@click.argument("entity_name")
@click.option(
    "--path",
    "metadata_path",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Metadata directory (defaults to ./metadata).",
)
def show(entity_name: str, metadata_path: Path | None):
    """Show the resolved browsers of ENTITY_NAME."""
    metadata_path = _resolve_metadata_path(metadata_path)
    if not metadata_path.exists():
        click.echo(f"Error: Metadata directory not found at {metadata_path}", err=True)
        raise SystemExit(1)

    try:
        loader = MetadataLoader(metadata_path)
        loader.load_all()
    except ValueError as e:
        click.echo(click.style(f"Metadata is invalid: {e}", fg="red"), err=True)
        raise SystemExit(1)

    entity = loader.get_entity(entity_name)
    if entity is None:
        click.echo(f"Error: Entity '{entity_name}' not found", err=True)
        raise SystemExit(1)

    if not entity.browsers and not entity.related_browsers:
        click.echo(f"{entity.name} declares no browsers.")
        return

    click.echo(click.style(f"{entity.name} browsers:", bold=True))
    for browser in entity.browsers:
        click.echo(f"  {browser.browser_name}")
        for key, value in browser.to_dict().items():
            if key == "browserName":
                continue
            click.echo(f"    {key}: {value if value is not None else '-'}")

    for browser_name in entity.related_browsers:
        click.echo(f"  {browser_name} (related)")


@browsers.command("infer")
@click.argument("names", nargs=-1, required=True)
def infer(names: tuple[str, ...]):
    """Show what NAMES infer to when declared without overrides."""
    for name in names:
        try:
            browser = resolve_browser(name)
        except BrowserConfigError as e:
            click.echo(click.style(str(e), fg="red"), err=True)
            raise SystemExit(1)
        click.echo(
            f"{browser.browser_name}: relation={browser.relation} "
            f"module={browser.module_name} model={browser.model}"
        )
