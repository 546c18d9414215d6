"""
Begin date normalization and damage trend series.

BGN_DATE values look like "4/18/1950 0:00:00": a month/day/year date
without leading zeros followed by a fixed time suffix. The width of the
date part is recovered from the total string length, which matches the
layout of the source export. It is not a general date parser.
"""
import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from pyspark.sql import DataFrame
from pyspark.sql import functions as F

from .parser import BEGIN_DATE_COLUMN

logger = logging.getLogger(__name__)


DATE_FORMAT = "%m/%d/%Y"
SPARK_DATE_FORMAT = "M/d/yyyy"

# Total string length -> width of the leading date part
DATE_WIDTHS = {16: 8, 17: 9}
DEFAULT_DATE_WIDTH = 10

EVENT_DATE_COLUMN = "event_date"
TOTAL_DAMAGE_COLUMN = "total_damage"

TREND_PERIODS = ("day", "year")


class MalformedDateError(ValueError):
    """Raised when a begin date cannot be parsed"""


def extract_date_text(raw: str) -> str:
    """Return the leading date part of a raw BGN_DATE string."""
    width = DATE_WIDTHS.get(len(raw), DEFAULT_DATE_WIDTH)
    return raw[:width]


def parse_begin_date(raw: str) -> date:
    """
    Parse a raw BGN_DATE string.

    Args:
        raw: Value such as "11/15/1951 0:00:00"

    Returns:
        Calendar date

    Raises:
        MalformedDateError: If the value is not a string or the extracted
            text is not a valid month/day/year date
    """
    if not isinstance(raw, str):
        raise MalformedDateError(f"Begin date is not a string: {raw!r}")

    text = extract_date_text(raw)
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError as e:
        raise MalformedDateError(f"Cannot parse begin date {raw!r}: {e}") from e


def normalize_begin_date(raw: Optional[str]) -> Optional[date]:
    """Parse a raw BGN_DATE string, returning None when it is malformed."""
    try:
        return parse_begin_date(raw)
    except MalformedDateError:
        return None


def with_event_date(df: DataFrame, source: str = BEGIN_DATE_COLUMN) -> DataFrame:
    """
    Add a normalized event_date column.

    Uses the same width rule as extract_date_text, evaluated by Spark.
    Rows with a malformed begin date get a NULL event_date; no row is
    dropped, so the result can still feed the group means.
    """
    raw = F.col(source)

    width = F.lit(DEFAULT_DATE_WIDTH)
    for length, date_width in sorted(DATE_WIDTHS.items(), reverse=True):
        width = F.when(F.length(raw) == length, date_width).otherwise(width)

    text = raw.substr(F.lit(1), width)
    parsed = F.try_to_timestamp(text, F.lit(SPARK_DATE_FORMAT))
    return df.withColumn(EVENT_DATE_COLUMN, F.to_date(parsed))


def count_missing_dates(df: DataFrame) -> int:
    """Number of rows whose event_date could not be derived."""
    if EVENT_DATE_COLUMN not in df.columns:
        df = with_event_date(df)
    missing = df.filter(F.col(EVENT_DATE_COLUMN).isNull()).count()
    logger.info(f"Rows with missing begin date: {missing}")
    return missing


def build_damage_trend(df: DataFrame, period: str = "day") -> DataFrame:
    """
    Total property plus crop damage per day or per year.

    A missing damage component counts as zero for the record total.
    Rows without a valid event date are excluded.

    Args:
        df: Records with numeric PROPDMG and CROPDMG columns
        period: "day" or "year"

    Returns:
        DataFrame of (event_date | year, total_damage) ordered by time
    """
    if period not in TREND_PERIODS:
        raise ValueError(
            f"Unknown trend period: {period}. Must be one of {list(TREND_PERIODS)}"
        )

    if EVENT_DATE_COLUMN not in df.columns:
        df = with_event_date(df)

    df = df.filter(F.col(EVENT_DATE_COLUMN).isNotNull()).withColumn(
        TOTAL_DAMAGE_COLUMN,
        F.coalesce(F.expr("try_cast(PROPDMG AS DOUBLE)"), F.lit(0.0))
        + F.coalesce(F.expr("try_cast(CROPDMG AS DOUBLE)"), F.lit(0.0)),
    )

    if period == "year":
        key = F.year(EVENT_DATE_COLUMN).alias("year")
        key_name = "year"
    else:
        key = F.col(EVENT_DATE_COLUMN)
        key_name = EVENT_DATE_COLUMN

    return (
        df.groupBy(key)
        .agg(F.sum(TOTAL_DAMAGE_COLUMN).alias(TOTAL_DAMAGE_COLUMN))
        .orderBy(key_name)
    )


def collect_damage_trend(df: DataFrame, period: str = "day") -> List[Tuple[object, float]]:
    """Collect the damage trend as (date or year, total damage) pairs."""
    trend = build_damage_trend(df, period)
    key_name = trend.columns[0]
    return [(row[key_name], float(row[TOTAL_DAMAGE_COLUMN])) for row in trend.collect()]
