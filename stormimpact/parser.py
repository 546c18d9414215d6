"""
Storm data parser

Reads the NOAA storm event CSV (plain or bz2-compressed) into a Spark
DataFrame and validates that the columns the analysis needs are present.
"""
import logging
from typing import Any, Dict, List, Sequence

from pyspark.sql import SparkSession, DataFrame
from pyspark.sql import functions as F

logger = logging.getLogger(__name__)


EVENT_TYPE_COLUMN = "EVTYPE"
BEGIN_DATE_COLUMN = "BGN_DATE"

NUMERIC_COLUMNS = ["FATALITIES", "INJURIES", "PROPDMG", "CROPDMG"]

REQUIRED_COLUMNS = [EVENT_TYPE_COLUMN, BEGIN_DATE_COLUMN] + NUMERIC_COLUMNS


class SchemaViolation(ValueError):
    """Raised when the input table lacks columns the analysis requires"""

    def __init__(self, missing_columns: Sequence[str]):
        self.missing_columns = sorted(missing_columns)
        super().__init__(
            f"Input table is missing required column(s): "
            f"{', '.join(self.missing_columns)}"
        )


def missing_columns(df: DataFrame, required: Sequence[str] = REQUIRED_COLUMNS) -> List[str]:
    """Return the required columns that are absent from df"""
    return [c for c in required if c not in df.columns]


def validate_schema(df: DataFrame, required: Sequence[str] = REQUIRED_COLUMNS) -> None:
    """
    Fail fast if any required column is absent

    Args:
        df: Input DataFrame
        required: Column names that must be present

    Raises:
        SchemaViolation: If one or more columns are missing
    """
    missing = missing_columns(df, required)
    if missing:
        logger.error(f"Schema validation failed, missing columns: {missing}")
        raise SchemaViolation(missing)


class StormDataParser:
    """Parser for the storm event CSV export"""

    def __init__(self, spark: SparkSession):
        """
        Initialize parser

        Args:
            spark: SparkSession instance
        """
        self.spark = spark
        logger.info("Initialized StormDataParser")

    def parse_file(self, path: str) -> DataFrame:
        """
        Parse a storm data CSV file

        All columns are read as strings; numeric coercion happens in the
        cleaner so malformed values become nulls instead of failing the read.

        Args:
            path: Local or remote path to the CSV (bz2 is decompressed by Spark)

        Returns:
            DataFrame restricted to the required columns

        Raises:
            SchemaViolation: If the header lacks a required column
        """
        logger.info(f"Parsing file: {path}")

        try:
            df = self.spark.read.csv(
                path,
                header=True,
                inferSchema=False,
                multiLine=True,  # REMARKS fields contain embedded newlines
                escape='"',
                mode="PERMISSIVE",
            )
        except Exception as e:
            logger.error(f"Failed to parse {path}: {e}")
            raise

        validate_schema(df)
        df = df.select(*REQUIRED_COLUMNS)

        logger.info(f"Parsed storm data from {path}")
        return df

    def validate_data(self, df: DataFrame) -> Dict[str, Any]:
        """
        Collect basic metrics for a parsed DataFrame

        Args:
            df: Parsed DataFrame

        Returns:
            Dictionary with row count, null counts and distinct event types
        """
        logger.info("Validating parsed data")
        validate_schema(df)

        null_counts = df.agg(*[
            F.sum(F.when(F.col(c).isNull(), 1).otherwise(0)).alias(c)
            for c in REQUIRED_COLUMNS
        ]).collect()[0]

        metrics = {
            "total_rows": df.count(),
            "null_counts": {c: int(null_counts[c] or 0) for c in REQUIRED_COLUMNS},
            "distinct_event_types": df.select(EVENT_TYPE_COLUMN).distinct().count(),
        }

        logger.info(f"Validation metrics: {metrics}")
        return metrics


def create_parser(spark: SparkSession) -> StormDataParser:
    """
    Factory function to create a parser instance

    Args:
        spark: SparkSession

    Returns:
        StormDataParser instance
    """
    return StormDataParser(spark)
