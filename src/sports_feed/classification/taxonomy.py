"""
Static sport taxonomy.

Providers disagree on sport identifiers: ESPN's "football" is American
football, API-Sports' "football" is soccer, SofaScore says "ice-hockey" while
The Odds API says "icehockey". Provider-specific aliases are therefore looked
up before the provider-agnostic ("*") ones.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from sports_feed.domain.enums import ProviderEnum, SportEnum

ANY_PROVIDER = "*"


def normalize_alias(value: str | int) -> str:
    return str(value).strip().lower()


@dataclass(frozen=True)
class SportTaxonomyEntry:
    sport: SportEnum
    name: str
    draw_eligible: bool
    aliases: Mapping[str, frozenset[str]] = field(default_factory=dict)


def _aliases(**by_provider: set[str]) -> dict[str, frozenset[str]]:
    out: dict[str, frozenset[str]] = {}
    for provider, values in by_provider.items():
        key = ANY_PROVIDER if provider == "any" else provider
        out[key] = frozenset(normalize_alias(v) for v in values)
    return out


_API_SPORTS = ProviderEnum.API_SPORTS.value
_ODDS_API = ProviderEnum.ODDS_API.value
_ESPN = ProviderEnum.ESPN.value
_THESPORTSDB = ProviderEnum.THESPORTSDB.value
_SOFASCORE = ProviderEnum.SOFASCORE.value


TAXONOMY: tuple[SportTaxonomyEntry, ...] = (
    SportTaxonomyEntry(
        sport=SportEnum.FOOTBALL,
        name="Football",
        draw_eligible=True,
        aliases=_aliases(
            any={"football", "soccer", "association football"},
            **{
                _API_SPORTS: {"football"},
                _ODDS_API: {"soccer"},
                _ESPN: {"soccer"},
                _THESPORTSDB: {"soccer"},
                _SOFASCORE: {"football"},
            },
        ),
    ),
    SportTaxonomyEntry(
        sport=SportEnum.BASKETBALL,
        name="Basketball",
        draw_eligible=False,
        aliases=_aliases(
            any={"basketball"},
            **{
                _API_SPORTS: {"basketball"},
                _ODDS_API: {"basketball"},
                _ESPN: {"basketball"},
                _THESPORTSDB: {"basketball"},
                _SOFASCORE: {"basketball"},
            },
        ),
    ),
    SportTaxonomyEntry(
        sport=SportEnum.TENNIS,
        name="Tennis",
        draw_eligible=False,
        aliases=_aliases(
            any={"tennis"},
            **{
                _ODDS_API: {"tennis"},
                _ESPN: {"tennis"},
                _THESPORTSDB: {"tennis"},
                _SOFASCORE: {"tennis"},
            },
        ),
    ),
    SportTaxonomyEntry(
        sport=SportEnum.BASEBALL,
        name="Baseball",
        draw_eligible=False,
        aliases=_aliases(
            any={"baseball"},
            **{
                _API_SPORTS: {"baseball"},
                _ODDS_API: {"baseball"},
                _ESPN: {"baseball"},
                _THESPORTSDB: {"baseball"},
                _SOFASCORE: {"baseball"},
            },
        ),
    ),
    SportTaxonomyEntry(
        sport=SportEnum.ICE_HOCKEY,
        name="Ice Hockey",
        draw_eligible=False,
        aliases=_aliases(
            any={"ice hockey", "ice_hockey", "ice-hockey", "hockey"},
            **{
                _API_SPORTS: {"hockey"},
                _ODDS_API: {"icehockey"},
                _ESPN: {"hockey"},
                _THESPORTSDB: {"ice hockey"},
                _SOFASCORE: {"ice-hockey"},
            },
        ),
    ),
    SportTaxonomyEntry(
        sport=SportEnum.AMERICAN_FOOTBALL,
        name="American Football",
        draw_eligible=False,
        aliases=_aliases(
            any={"american football", "american_football", "american-football", "nfl"},
            **{
                _API_SPORTS: {"american-football"},
                _ODDS_API: {"americanfootball"},
                _ESPN: {"football"},
                _THESPORTSDB: {"american football"},
                _SOFASCORE: {"american-football"},
            },
        ),
    ),
    SportTaxonomyEntry(
        sport=SportEnum.RUGBY,
        name="Rugby",
        draw_eligible=True,
        aliases=_aliases(
            any={"rugby", "rugby union", "rugby league"},
            **{
                _API_SPORTS: {"rugby"},
                _ODDS_API: {"rugbyleague", "rugbyunion"},
                _ESPN: {"rugby", "rugby-league"},
                _THESPORTSDB: {"rugby"},
                _SOFASCORE: {"rugby"},
            },
        ),
    ),
    SportTaxonomyEntry(
        sport=SportEnum.CRICKET,
        name="Cricket",
        draw_eligible=True,
        aliases=_aliases(
            any={"cricket"},
            **{
                _ODDS_API: {"cricket"},
                _ESPN: {"cricket"},
                _THESPORTSDB: {"cricket"},
                _SOFASCORE: {"cricket"},
            },
        ),
    ),
    SportTaxonomyEntry(
        sport=SportEnum.MMA,
        name="MMA",
        draw_eligible=False,
        aliases=_aliases(
            any={"mma", "mixed martial arts", "ufc"},
            **{
                _ODDS_API: {"mma"},
                _ESPN: {"mma"},
                _THESPORTSDB: {"fighting"},
                _SOFASCORE: {"mma"},
            },
        ),
    ),
    SportTaxonomyEntry(
        sport=SportEnum.BOXING,
        name="Boxing",
        draw_eligible=True,
        aliases=_aliases(
            any={"boxing"},
            **{
                _ODDS_API: {"boxing"},
                _ESPN: {"boxing"},
                _SOFASCORE: {"boxing"},
            },
        ),
    ),
)

_BY_SPORT: dict[SportEnum, SportTaxonomyEntry] = {e.sport: e for e in TAXONOMY}


def _build_alias_index() -> dict[tuple[str, str], SportEnum]:
    index: dict[tuple[str, str], SportEnum] = {}
    for entry in TAXONOMY:
        for provider, values in entry.aliases.items():
            for alias in values:
                key = (provider, alias)
                if key in index and index[key] != entry.sport:
                    raise ValueError(f"Alias {alias!r} for provider {provider} is ambiguous")
                index[key] = entry.sport
    return index


ALIAS_INDEX: Mapping[tuple[str, str], SportEnum] = _build_alias_index()

if set(_BY_SPORT) != set(SportEnum):  # pragma: no cover
    raise RuntimeError("Every SportEnum member needs a taxonomy entry")


def get_entry(sport: SportEnum) -> SportTaxonomyEntry:
    return _BY_SPORT[sport]


def is_draw_eligible(sport: SportEnum) -> bool:
    return get_entry(sport).draw_eligible
