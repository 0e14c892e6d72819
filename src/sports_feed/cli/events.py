from __future__ import annotations

import json

import typer

from sports_feed.cli.common import aggregator_scope, parse_sport_option

app = typer.Typer(help="Run an aggregation cycle and print events.")


@app.command("list")
def list_events_cmd(
    sport: str | None = typer.Option(
        None, "--sport", help="Sport id or alias (e.g. football, nba, ice hockey)."
    ),
    live: bool | None = typer.Option(
        None,
        "--live/--upcoming",
        help="Only live, or only upcoming events. Default: both.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print events as a JSON array."),
) -> None:
    """Fetch events from every enabled provider (cache, cascade, synthetic fallback)."""

    sport_enum = parse_sport_option(sport)

    with aggregator_scope() as aggregator:
        events = aggregator.get_events(sport=sport_enum, is_live=live)
        result = aggregator.last_result

    if as_json:
        typer.echo(json.dumps([e.to_dict() for e in events], indent=2))
        return

    for e in events:
        flag = "LIVE" if e.is_live else e.start_time.strftime("%Y-%m-%d %H:%M")
        score = f" {e.score.home}-{e.score.away}" if e.score is not None else ""
        odds = ""
        if e.odds is not None:
            draw = f" / {e.odds.draw}" if e.odds.draw is not None else ""
            odds = f" [{e.odds.home}{draw} / {e.odds.away}]"
        source = "synthetic" if e.synthetic else e.provenance.provider_key
        typer.echo(
            f"{flag:>16}  {e.sport.value:<17} {e.home} vs {e.away}{score}{odds}"
            f"  ({e.league or '-'}; {source})"
        )

    summary = [f"events={len(events)}"]
    if result is not None:
        summary += [
            f"authentic={result.authentic_count}",
            f"synthetic={result.synthetic_count}",
            f"failures={len(result.failures)}",
            f"elapsed_s={result.elapsed_s:.2f}",
        ]
    typer.echo(" ".join(summary))
