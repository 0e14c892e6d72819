from __future__ import annotations

import typer

from sports_feed.cli.events import app as events_app
from sports_feed.cli.providers import app as providers_app
from sports_feed.cli.sports import app as sports_app

app = typer.Typer(no_args_is_help=True)
app.add_typer(events_app, name="events")
app.add_typer(sports_app, name="sports")
app.add_typer(providers_app, name="providers")
