"""CLI utility functions."""

from __future__ import annotations

import json
import sqlite3
import sys
from contextlib import contextmanager
from typing import Any, Generator

import click

from ..config import get_config
from ..db import Bootstrap, bootstrap
from ..errors import StoreError


@contextmanager
def open_bootstrap() -> Generator[Bootstrap, None, None]:
    """Bootstrap the configured store, exiting with the failure reason if it cannot open."""
    config = get_config()
    try:
        boot = bootstrap(config)
    except StoreError as e:
        click.echo(f"Error: store unavailable: {e}", err=True)
        sys.exit(1)

    try:
        yield boot
    finally:
        boot.conn.close()


@contextmanager
def store_connection() -> Generator[sqlite3.Connection, None, None]:
    """Yield an open store connection for a single command."""
    with open_bootstrap() as boot:
        yield boot.conn


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))
