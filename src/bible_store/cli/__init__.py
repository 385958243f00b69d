"""Command-line interface for bible-store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import click

from ..config import get_config, reload_config
from .admin import admin
from .notes import notes
from .read import read


@click.group()
@click.version_option(package_name="bible-store")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to config.yaml (default: ~/.bible-store/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log progress to stderr")
def main(config_path: Optional[Path], verbose: bool):
    """Bible Store - local persistent store for highlights, topics and reflections.

    Commands are organized into three groups:

    \b
      admin  Store setup, diagnostics, backup and restore
      read   Browse and search the bundled content
      notes  Highlights, topics and daily reflections
    """
    config = reload_config(config_path) if config_path else get_config()
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )


# Register command groups
main.add_command(admin)
main.add_command(read)
main.add_command(notes)


if __name__ == "__main__":
    main()
