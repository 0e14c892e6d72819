from __future__ import annotations

import typer

from sports_feed.core.config import settings
from sports_feed.providers.defaults import build_default_registry

app = typer.Typer(help="Inspect configured providers.")


@app.command("list")
def list_providers_cmd() -> None:
    """List enabled adapters in merge order with their trust tier."""

    registry = build_default_registry(settings)
    for key in registry.keys():
        adapter = registry.get(key)
        try:
            typer.echo(f"{key:<12} tier={adapter.trust_tier}")
        finally:
            close = getattr(adapter, "close", None)
            if callable(close):
                close()
