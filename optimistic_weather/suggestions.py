# ABOUTME: Ranked, deduplicated location suggestions for incremental search.
# ABOUTME: Never raises; a sequence-number tracker discards results superseded by newer queries.

import logging
from collections.abc import Iterable

from optimistic_weather.errors import ForecastError
from optimistic_weather.location_resolver import LocationResolver, fallback_query, parse_postal_query, us_state_code
from optimistic_weather.models import GeoLocation, LocationSuggestion

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MAX_SUGGESTIONS = 5


def build_search_value(location: GeoLocation) -> str:
    """Canonical text that reproduces this location when submitted as a query."""
    if location.country.upper() == "US":
        code = us_state_code(location.state)
        if code:
            return f"{location.name}, {code}"
        return f"{location.name}, US"
    return location.label()


def dedupe_suggestions(suggestions: Iterable[LocationSuggestion]) -> list[LocationSuggestion]:
    """Drop repeats by location identity key, keeping the first occurrence."""
    seen: set[tuple] = set()
    unique = []
    for suggestion in suggestions:
        key = suggestion.location.identity_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(suggestion)
    return unique


class SuggestionEngine:
    """Builds up to five suggestions from postal, ranked and comma-fallback searches."""

    def __init__(self, resolver: LocationResolver):
        self.resolver = resolver

    async def _postal(self, query: str) -> list[LocationSuggestion]:
        parsed = parse_postal_query(query)
        if parsed is None:
            return []
        try:
            location = await self.resolver.lookup_postal(query)
        except ForecastError as e:
            logger.debug("Postal suggestions for %r failed: %s", query, e)
            return []
        if location is None:
            return []
        code, country = parsed
        search_value = code if country.upper() == "US" else f"{code}, {country.upper()}"
        return [LocationSuggestion(location=location, search_value=search_value)]

    async def _ranked(self, query: str) -> list[LocationSuggestion]:
        try:
            ranked = await self.resolver.ranked_search(query)
        except ForecastError as e:
            logger.debug("Suggestion search for %r failed: %s", query, e)
            return []
        return [LocationSuggestion(location=option, search_value=build_search_value(option)) for option in ranked]

    async def suggest(self, query: str) -> list[LocationSuggestion]:
        """Suggestions best-first. An empty list means too short or no matches."""
        trimmed = query.strip()
        if len(trimmed) < MIN_QUERY_LENGTH:
            return []

        candidates = await self._postal(trimmed)
        candidates += await self._ranked(trimmed)
        broader = fallback_query(trimmed)
        if broader and broader != trimmed:
            candidates += await self._ranked(broader)

        return dedupe_suggestions(candidates)[:MAX_SUGGESTIONS]


class SuggestionTracker:
    """Applies only the latest incremental search.

    Each request takes the next sequence number; a result whose number is no
    longer the latest is discarded. In-flight HTTP calls are not cancelled.
    """

    def __init__(self, engine: SuggestionEngine):
        self.engine = engine
        self._latest = 0
        self.suggestions: list[LocationSuggestion] = []

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, sequence: int) -> bool:
        return sequence == self._latest

    async def request(self, query: str) -> list[LocationSuggestion] | None:
        """Run a search; returns None when a newer request superseded it."""
        sequence = self.issue()
        results = await self.engine.suggest(query)
        if not self.is_current(sequence):
            logger.debug("Discarding superseded suggestions #%d for %r", sequence, query)
            return None
        self.suggestions = results
        return results
