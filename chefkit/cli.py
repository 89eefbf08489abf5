"""CLI entry point for chefkit."""

import logging
from pathlib import Path

import click

from . import __version__
from .config import (
    DOTENV_FILE,
    ConfigError,
    get_base_path,
    get_max_depth,
    is_collection,
)
from .fs import FsError, FsIndex, all_recipes
from .quantity import Fixed, Number, Quantity
from .units import BasicConverter


def get_index(ctx: click.Context) -> FsIndex:
    """Get or create the index for the selected recipes path."""
    if ctx.obj.get("index") is None:
        ctx.obj["index"] = FsIndex(ctx.obj["path"], ctx.obj["max_depth"])
    return ctx.obj["index"]


@click.group()
@click.version_option(version=__version__, prog_name="chefkit")
@click.option(
    "--path",
    "-p",
    type=click.Path(file_okay=False, path_type=Path),
    help="Recipes directory (default: $CHEFKIT_PATH or current directory)",
)
@click.option("--max-depth", "-d", type=click.IntRange(min=0), help="Maximum directory depth")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def cli(ctx: click.Context, path: Path | None, max_depth: int | None, verbose: bool):
    """Find cooklang recipes and their images in a recipes directory."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )

    try:
        ctx.obj = {
            "path": path or get_base_path(),
            "max_depth": max_depth if max_depth is not None else get_max_depth(),
        }
    except ConfigError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None


# ============================================================================
# Recipe Commands
# ============================================================================


@cli.command()
@click.argument("name")
@click.pass_context
def find(ctx: click.Context, name: str):
    """Find a recipe by name or relative path.

    Examples:

    \b
        chefkit find Soup
        chefkit find dinners/Soup
    """
    try:
        entry = get_index(ctx).get(name)
    except FsError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None

    click.echo(entry.path)


@cli.command("list")
@click.pass_context
def list_recipes(ctx: click.Context):
    """List all recipes as a tree."""
    base_path = ctx.obj["path"]
    count = 0

    for entry in all_recipes(base_path, ctx.obj["max_depth"]):
        if entry.depth == 0:
            continue
        indent = "  " * (entry.depth - 1)
        if entry.is_dir:
            click.echo(f"{indent}{entry.file_name}/")
        else:
            count += 1
            click.echo(f"{indent}{entry.file_stem}")

    click.echo()
    click.echo(f"{count} recipe(s) in {base_path}")


@cli.command()
@click.argument("name")
@click.pass_context
def images(ctx: click.Context, name: str):
    """Show the images of a recipe."""
    try:
        entry = get_index(ctx).get(name)
    except FsError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1) from None

    found = entry.images()
    if not found:
        click.echo(f"No images for {entry.name}.")
        return

    for image in found:
        if image.indexes is None:
            click.echo(f"recipe        {image.path.name}")
        else:
            section, step = image.indexes
            click.echo(f"{section:>3}.{step:<9} {image.path.name}")


# ============================================================================
# Quantity Commands
# ============================================================================


@cli.command()
@click.argument("amount", type=float)
@click.argument("unit")
def fit(amount: float, unit: str):
    """Show a quantity in its best fitting unit.

    Examples:

    \b
        chefkit fit 1500 g
        chefkit fit 0.25 l
    """
    converter = BasicConverter()
    quantity = Quantity(Fixed(Number(amount)), unit)
    quantity.fit(converter)
    click.echo(str(quantity))


# ============================================================================
# Configuration Commands
# ============================================================================


@cli.command()
@click.pass_context
def config(ctx: click.Context):
    """Show the current configuration."""
    path = ctx.obj["path"]
    click.echo(f"Recipes path: {path}")
    if not is_collection(path):
        click.echo("  (not a collection, no .cooklang dir)")
    click.echo(f"Max depth: {ctx.obj['max_depth']}")
    click.echo(f"Env file: {DOTENV_FILE or 'none'}")


# ============================================================================
# Entry Point
# ============================================================================


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
