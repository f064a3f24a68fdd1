# ABOUTME: Short optimistic copy for a single day of the extended outlook.
# ABOUTME: Combines a dryness snippet, a temperature mood and weekend flavour.

from optimistic_weather.models import DailyStory, OptimisticDailyOutlook, Units
from optimistic_weather.units import round_half_up, temperature_unit_label

# (minimum dry percent, headline, caption template)
DRYNESS_BANDS = (
    (80, "Sun streak ahead.", "{dry}% dry hours."),
    (60, "Dry breaks queued.", "{dry}% stay splash-free."),
    (40, "Sunny pulses mix in.", "{dry}% bright pockets."),
    (25, "Showers with gaps.", "{dry}% quick clears."),
)
SOGGY_SNIPPET = ("Cozy rain stretch.", "Few dry windows.")
UNKNOWN_SNIPPET = ("Weather wildcard.", "Surprises likely.")

# (maximum Celsius day average, mood)
TEMPERATURE_MOODS = (
    (0, "Bundle up."),
    (10, "Crisp layers."),
    (18, "Sweater-perfect."),
    (26, "Just-right temps."),
    (32, "Poolside warm."),
)
HOT_MOOD = "Shade recommended."


def format_temperature(value: float, units: Units) -> str:
    return f"{round_half_up(value)}{temperature_unit_label(units)}"


def dryness_snippet(precipitation_chance_percent: int | None) -> tuple[str, str]:
    if precipitation_chance_percent is None:
        return UNKNOWN_SNIPPET
    dry = 100 - precipitation_chance_percent
    for minimum, headline, caption in DRYNESS_BANDS:
        if dry >= minimum:
            return headline, caption.format(dry=dry)
    return SOGGY_SNIPPET


def temperature_mood(day_average: float, units: Units) -> str:
    celsius = day_average if units == "metric" else (day_average - 32) * 5 / 9
    for ceiling, mood in TEMPERATURE_MOODS:
        if celsius <= ceiling:
            return mood
    return HOT_MOOD


def add_weekend_flavor(headline: str, outlook: OptimisticDailyOutlook) -> str:
    weekday = outlook.date.weekday()
    if weekday == 5:
        return f"{headline} Saturday vibes."
    if weekday == 6:
        return f"{headline} Sunday reset."
    return headline


def build_optimistic_daily_story(outlook: OptimisticDailyOutlook, units: Units) -> DailyStory:
    headline, detail = dryness_snippet(outlook.precipitation_chance_percent)
    return DailyStory(
        headline=add_weekend_flavor(headline, outlook),
        detail=detail,
        mood=temperature_mood(outlook.day_average, units),
        temperature_summary=(
            f"{format_temperature(outlook.high, units)} high / {format_temperature(outlook.low, units)} low"
        ),
    )
