"""
Data cleaning and event type filtering

Coerces damage and casualty columns to numbers and drops records whose
event type is too rare to be meaningful.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pyspark.sql import DataFrame
from pyspark.sql import functions as F
from pyspark.sql.window import Window

from .parser import EVENT_TYPE_COLUMN, NUMERIC_COLUMNS, validate_schema

logger = logging.getLogger(__name__)


DEFAULT_FREQUENCY_THRESHOLD = 150


@dataclass(frozen=True)
class CategoryFilterResult:
    """Outputs of the event type filter"""
    frequencies: Dict[Optional[str], int]
    records: DataFrame
    threshold: int

    @property
    def total_records(self) -> int:
        return sum(self.frequencies.values())

    @property
    def retained_event_types(self) -> List[Optional[str]]:
        return [k for k, n in self.frequencies.items() if n > self.threshold]

    @property
    def retained_records(self) -> int:
        return sum(n for n in self.frequencies.values() if n > self.threshold)


class DataCleaner:
    """Numeric coercion and rare event type filtering for storm records"""

    def __init__(self, frequency_threshold: int = DEFAULT_FREQUENCY_THRESHOLD):
        """
        Initialize cleaner

        Args:
            frequency_threshold: Event types must occur strictly more often
                than this to be retained
        """
        if frequency_threshold < 0:
            raise ValueError(
                f"frequency_threshold must be >= 0, got {frequency_threshold}"
            )
        self.frequency_threshold = frequency_threshold
        logger.info(
            f"Initialized DataCleaner, frequency threshold: {frequency_threshold}"
        )

    def clean(self, df: DataFrame) -> CategoryFilterResult:
        """
        Main cleaning pipeline

        Args:
            df: Parsed storm records

        Returns:
            CategoryFilterResult with the frequency table of the full input
            and the filtered records
        """
        logger.info("Starting cleaning pipeline")
        validate_schema(df)

        df = self.coerce_numeric(df)
        frequencies = self.build_frequency_table(df)
        filtered = self.filter_rare_event_types(df)

        result = CategoryFilterResult(
            frequencies=frequencies,
            records=filtered,
            threshold=self.frequency_threshold,
        )

        logger.info(
            f"Retained {len(result.retained_event_types)}/{len(frequencies)} "
            f"event types, {result.retained_records}/{result.total_records} rows"
        )
        if result.retained_records == 0:
            logger.warning(
                f"No event type occurs more than {self.frequency_threshold} "
                f"times, filtered set is empty"
            )

        return result

    def coerce_numeric(self, df: DataFrame) -> DataFrame:
        """
        Cast casualty and damage columns to double

        Non-numeric text becomes NULL, so it is ignored by the group means
        rather than counted as zero.
        """
        for col in NUMERIC_COLUMNS:
            if col in df.columns:
                df = df.withColumn(col, F.expr(f"try_cast(`{col}` AS DOUBLE)"))
        return df

    def build_frequency_table(self, df: DataFrame) -> Dict[Optional[str], int]:
        """
        Count exact event type strings across all records

        No trimming or case folding is applied. The counts sum to the
        number of input rows.

        Returns:
            Mapping of event type to count, most frequent first
        """
        rows = (
            df.groupBy(EVENT_TYPE_COLUMN)
            .count()
            .orderBy(F.col("count").desc(), F.col(EVENT_TYPE_COLUMN).asc_nulls_first())
            .collect()
        )
        return {row[EVENT_TYPE_COLUMN]: int(row["count"]) for row in rows}

    def filter_rare_event_types(self, df: DataFrame) -> DataFrame:
        """
        Keep records whose event type count exceeds the threshold

        Returns an empty DataFrame when the threshold is at or above the
        largest count.
        """
        logger.info(f"Filtering event types by threshold: {self.frequency_threshold}")

        by_type = Window.partitionBy(EVENT_TYPE_COLUMN)
        return (
            df.withColumn("_type_count", F.count(F.lit(1)).over(by_type))
            .filter(F.col("_type_count") > self.frequency_threshold)
            .drop("_type_count")
        )

    def compute_quality_metrics(self, df: DataFrame) -> Dict[str, Any]:
        """
        Count missing numeric values per column

        Returns:
            Dictionary with row count and missingness per numeric column
        """
        logger.info("Computing quality metrics")

        total = df.count()
        metrics = {"total_rows": total, "missingness": {}}

        for col in NUMERIC_COLUMNS:
            if col in df.columns:
                missing = df.filter(F.col(col).isNull()).count()
                ratio = missing / total if total > 0 else 0
                metrics["missingness"][col] = {
                    "count": missing,
                    "ratio": round(ratio, 4)
                }

        logger.info(f"Quality metrics: {metrics}")
        return metrics


def create_cleaner(frequency_threshold: int = DEFAULT_FREQUENCY_THRESHOLD) -> DataCleaner:
    """
    Factory function to create a cleaner instance

    Args:
        frequency_threshold: Minimum (exclusive) event type count

    Returns:
        DataCleaner instance
    """
    return DataCleaner(frequency_threshold)
