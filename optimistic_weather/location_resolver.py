# ABOUTME: Turns a free-text or postal query into one geocoded location.
# ABOUTME: Ranks provider candidates by edit distance adjusted with country and US-state hints.

import logging
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from babel import Locale

from optimistic_weather import weather_service
from optimistic_weather.deps import ForecastDeps
from optimistic_weather.errors import EmptyQueryError, MalformedDataError, NotFoundError, ProviderError
from optimistic_weather.models import GeoLocation
from optimistic_weather.string_distance import distance

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 5
DEFAULT_POSTAL_COUNTRY = "US"

COUNTRY_MATCH_BONUS = 40
COUNTRY_MISMATCH_PENALTY = 20
STATE_MATCH_BONUS = 25
STATE_MISMATCH_PENALTY = 15
US_STATE_HINT_PREFERENCE = 10

# Code part must carry a digit so "Lisbon, PT" stays a place-name query.
POSTAL_QUERY_RE = re.compile(r"^(?=[^,]*\d)([A-Za-z0-9-]{3,10})(?:\s*,\s*([A-Za-z]{2}))?$")

_TOKEN_SPLIT_RE = re.compile(r"[^A-Za-z0-9]+")

US_STATE_CODE_TO_NAME = {
    "AL": "Alabama",
    "AK": "Alaska",
    "AZ": "Arizona",
    "AR": "Arkansas",
    "CA": "California",
    "CO": "Colorado",
    "CT": "Connecticut",
    "DE": "Delaware",
    "FL": "Florida",
    "GA": "Georgia",
    "HI": "Hawaii",
    "ID": "Idaho",
    "IL": "Illinois",
    "IN": "Indiana",
    "IA": "Iowa",
    "KS": "Kansas",
    "KY": "Kentucky",
    "LA": "Louisiana",
    "ME": "Maine",
    "MD": "Maryland",
    "MA": "Massachusetts",
    "MI": "Michigan",
    "MN": "Minnesota",
    "MS": "Mississippi",
    "MO": "Missouri",
    "MT": "Montana",
    "NE": "Nebraska",
    "NV": "Nevada",
    "NH": "New Hampshire",
    "NJ": "New Jersey",
    "NM": "New Mexico",
    "NY": "New York",
    "NC": "North Carolina",
    "ND": "North Dakota",
    "OH": "Ohio",
    "OK": "Oklahoma",
    "OR": "Oregon",
    "PA": "Pennsylvania",
    "RI": "Rhode Island",
    "SC": "South Carolina",
    "SD": "South Dakota",
    "TN": "Tennessee",
    "TX": "Texas",
    "UT": "Utah",
    "VT": "Vermont",
    "VA": "Virginia",
    "WA": "Washington",
    "WV": "West Virginia",
    "WI": "Wisconsin",
    "WY": "Wyoming",
    "DC": "District of Columbia",
}

US_STATE_NAME_TO_CODE = {name.lower(): code for code, name in US_STATE_CODE_TO_NAME.items()}


def parse_postal_query(query: str) -> tuple[str, str] | None:
    """Split a postal query into (code, country). Country is returned as typed, defaulting to US."""
    match = POSTAL_QUERY_RE.match(query.strip())
    if not match:
        return None
    code, country = match.groups()
    return code, country or DEFAULT_POSTAL_COUNTRY


def us_state_code(state: str | None) -> str | None:
    """Two-letter code for a US state given either its name or its code."""
    if not state:
        return None
    cleaned = state.strip()
    if cleaned.upper() in US_STATE_CODE_TO_NAME:
        return cleaned.upper()
    return US_STATE_NAME_TO_CODE.get(cleaned.lower())


class RegionNames:
    """Lazily built ISO 3166 alpha-2 to English country name table.

    Names are CLDR display names ("Russia", not "Russian Federation"). Owned
    by a resolver rather than cached at module level; the table is loaded from
    babel on first lookup.
    """

    def __init__(self, names: dict[str, str] | None = None):
        self._names = names

    def _table(self) -> dict[str, str]:
        if self._names is None:
            # CLDR also lists numeric regions such as "001" (world).
            self._names = {
                code: name for code, name in Locale("en").territories.items() if len(code) == 2 and code.isalpha()
            }
        return self._names

    def name_for(self, code: str) -> str | None:
        return self._table().get(code.strip().upper())


def _words(text: str) -> str:
    return " ".join(token for token in _TOKEN_SPLIT_RE.split(text.lower()) if token)


@dataclass(frozen=True)
class QueryHints:
    """Tokens and US-state references extracted from one query."""

    normalized: str
    words: str
    tokens: frozenset[str]
    state_hints: frozenset[str]

    @classmethod
    def parse(cls, query: str) -> "QueryHints":
        normalized = query.strip().lower()
        words = _words(query)
        tokens = frozenset(words.split())
        padded = f" {words} "

        hints: set[str] = set()
        for name, code in US_STATE_NAME_TO_CODE.items():
            if f" {name} " in padded:
                hints.update((name, code.lower()))
        for token in tokens:
            name = US_STATE_CODE_TO_NAME.get(token.upper())
            if name:
                hints.update((token, name.lower()))
        return cls(normalized=normalized, words=words, tokens=tokens, state_hints=frozenset(hints))

    def mentions_phrase(self, phrase: str) -> bool:
        phrase_words = _words(phrase)
        return bool(phrase_words) and f" {phrase_words} " in f" {self.words} "


class LocationScorer(Protocol):
    """Ranking strategy: lower scores are better matches."""

    def score(self, query: str, candidate: GeoLocation) -> float: ...


ScorerFactory = Callable[[Sequence[GeoLocation], RegionNames], LocationScorer]


class HintScorer:
    """Edit distance to the candidate label, adjusted by country and state hints in the query.

    Country hints are judged against the whole candidate set: a candidate is only
    penalized for a country mismatch when the query named some candidate's country.
    """

    def __init__(self, candidates: Sequence[GeoLocation], region_names: RegionNames):
        self.candidates = list(candidates)
        self.region_names = region_names

    def matches_country(self, hints: QueryHints, country: str) -> bool:
        if not country:
            return False
        if country.lower() in hints.tokens:
            return True
        name = self.region_names.name_for(country)
        return bool(name) and name.lower() in hints.normalized

    def matches_state(self, hints: QueryHints, candidate: GeoLocation) -> bool:
        if not candidate.state:
            return False
        state = candidate.state.strip().lower()
        if state in hints.state_hints or hints.mentions_phrase(state):
            return True
        if candidate.country.upper() == "US":
            code = us_state_code(candidate.state)
            return bool(code) and code.lower() in hints.state_hints
        return False

    def score(self, query: str, candidate: GeoLocation) -> float:
        hints = QueryHints.parse(query)
        score = float(distance(hints.normalized, candidate.label().lower()))

        if self.matches_country(hints, candidate.country):
            score -= COUNTRY_MATCH_BONUS
        elif any(self.matches_country(hints, option.country) for option in self.candidates):
            score += COUNTRY_MISMATCH_PENALTY

        if self.matches_state(hints, candidate):
            score -= STATE_MATCH_BONUS
        elif hints.state_hints:
            score += STATE_MISMATCH_PENALTY
            if candidate.country.upper() == "US":
                score -= US_STATE_HINT_PREFERENCE
        return score


def rank_candidates(
    query: str,
    candidates: Sequence[GeoLocation],
    region_names: RegionNames | None = None,
    scorer_factory: ScorerFactory = HintScorer,
) -> list[GeoLocation]:
    """Order candidates best-first. Ties keep provider order."""
    if not candidates:
        return []
    scorer = scorer_factory(candidates, region_names or RegionNames())
    trimmed = query.strip()
    return sorted(candidates, key=lambda option: scorer.score(trimmed, option))


def pick_best_match(
    query: str,
    candidates: Sequence[GeoLocation],
    region_names: RegionNames | None = None,
    scorer_factory: ScorerFactory = HintScorer,
) -> GeoLocation | None:
    ranked = rank_candidates(query, candidates, region_names, scorer_factory)
    return ranked[0] if ranked else None


def fallback_query(query: str) -> str | None:
    """The text before the first comma, when the query has one and it is not blank."""
    if "," not in query:
        return None
    prefix = query.split(",", 1)[0].strip()
    return prefix or None


class LocationResolver:
    """Resolves queries to a single GeoLocation using OpenWeather geocoding."""

    def __init__(
        self,
        deps: ForecastDeps,
        scorer_factory: ScorerFactory = HintScorer,
        region_names: RegionNames | None = None,
    ):
        self.deps = deps
        self.scorer_factory = scorer_factory
        self.region_names = region_names or RegionNames()

    async def lookup_postal(self, query: str) -> GeoLocation | None:
        """Direct postal lookup; None when the query is not postal or the lookup fails."""
        parsed = parse_postal_query(query)
        if parsed is None:
            return None
        code, country = parsed
        try:
            return await weather_service.geocode_by_zip(self.deps, code, country.upper())
        except (ProviderError, MalformedDataError) as e:
            logger.debug("Postal lookup for %s,%s failed: %s", code, country, e)
            return None

    async def search(self, query: str) -> list[GeoLocation]:
        """Free-text candidates in provider order, restricted to the accepted countries."""
        results = await weather_service.geocode_direct(self.deps, query, limit=SEARCH_LIMIT)
        allowed = self.deps.settings.allowed_countries
        if allowed is None:
            return results
        return [option for option in results if option.country.upper() in allowed]

    def rank(self, query: str, candidates: Sequence[GeoLocation]) -> list[GeoLocation]:
        return rank_candidates(query, candidates, self.region_names, self.scorer_factory)

    async def ranked_search(self, query: str) -> list[GeoLocation]:
        return self.rank(query, await self.search(query))

    async def best_match(self, query: str) -> GeoLocation | None:
        return pick_best_match(query, await self.search(query), self.region_names, self.scorer_factory)

    async def resolve(self, query: str) -> GeoLocation:
        """Resolve a query to one location.

        Postal lookups are authoritative. Otherwise the best-ranked free-text
        candidate wins, broadening to the text before the first comma when the
        full query finds nothing.
        """
        trimmed = query.strip()
        if not trimmed:
            raise EmptyQueryError()

        postal = await self.lookup_postal(trimmed)
        if postal is not None:
            return postal

        best = await self.best_match(trimmed)
        if best is None:
            broader = fallback_query(trimmed)
            if broader:
                logger.debug("No match for %r, retrying with %r", trimmed, broader)
                best = await self.best_match(broader)

        if best is None:
            raise NotFoundError(query)
        return best

    async def resolve_coordinates(self, lat: float, lon: float) -> GeoLocation:
        """Reverse-geocode coordinates, bypassing text matching."""
        results = await weather_service.reverse_geocode(self.deps, lat, lon)
        if not results:
            raise NotFoundError(
                f"{lat},{lon}",
                "Unable to determine your current city from coordinates. Try searching manually.",
            )
        return results[0]
