from __future__ import annotations

import typer

from sports_feed.classification.classifier import classify
from sports_feed.classification.taxonomy import TAXONOMY

app = typer.Typer(help="Inspect the sport taxonomy and classifier.")


@app.command("list")
def list_sports_cmd() -> None:
    """List canonical sports and whether a draw price is allowed."""

    for entry in TAXONOMY:
        draw = "draw" if entry.draw_eligible else "no-draw"
        typer.echo(f"{entry.sport.value:<17} {entry.name:<20} {draw}")


@app.command("classify")
def classify_cmd(
    label: str = typer.Argument(..., help="Raw sport label as a provider sends it."),
    provider: str = typer.Option("*", "--provider", help="Provider key (e.g. espn, odds_api)."),
    league: str | None = typer.Option(None, "--league", help="League name, used as a hint."),
) -> None:
    """Run the classifier on a provider label."""

    result = classify(label, provider, league=league)
    typer.echo(
        " ".join(
            [
                f"sport={result.sport.value}",
                f"confident={str(result.confident).lower()}",
                f"matched_by={result.matched_by.value}",
            ]
        )
    )
