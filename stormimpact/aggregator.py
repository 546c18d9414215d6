"""
Per event type aggregation of casualty and damage fields.
"""
import logging
from typing import Dict, Iterable, Optional

from pyspark.sql import DataFrame
from pyspark.sql import functions as F

from .parser import EVENT_TYPE_COLUMN

logger = logging.getLogger(__name__)


# Field name -> source column
FIELD_COLUMNS = {
    "fatalities": "FATALITIES",
    "injuries": "INJURIES",
    "property_damage": "PROPDMG",
    "crop_damage": "CROPDMG",
}

# Event type -> mean of one field, ordered by event type
GroupSummary = Dict[Optional[str], float]


def _resolve_column(field: str) -> str:
    if field not in FIELD_COLUMNS:
        raise ValueError(
            f"Unknown field: {field}. Must be one of {list(FIELD_COLUMNS.keys())}"
        )
    return FIELD_COLUMNS[field]


class GroupAggregator:
    """Computes per event type means over filtered storm records."""

    def __init__(self, group_column: str = EVENT_TYPE_COLUMN):
        """
        Initialize aggregator.

        Args:
            group_column: Column holding the event type
        """
        self.group_column = group_column

    def group_means(self, df: DataFrame, field: str) -> GroupSummary:
        """
        Mean of one field per event type.

        NULL values are left out of both the sum and the count, so a group
        with [10, NULL, 20] has mean 15. Groups with no value at all for the
        field are omitted.

        Args:
            df: Filtered records with numeric columns
            field: One of FIELD_COLUMNS

        Returns:
            GroupSummary keyed by event type in ascending order
        """
        return self.summarize(df, [field])[field]

    def summarize(
        self,
        df: DataFrame,
        fields: Iterable[str] = tuple(FIELD_COLUMNS),
    ) -> Dict[str, GroupSummary]:
        """
        Group means for several fields in one pass.

        Each field is averaged independently: a NULL in one column does not
        affect the mean of another.

        Returns:
            Mapping of field name to its GroupSummary
        """
        fields = list(fields)
        columns = {field: _resolve_column(field) for field in fields}

        grouped = df.groupBy(self.group_column).agg(*[
            F.mean(F.expr(f"try_cast(`{column}` AS DOUBLE)")).alias(field)
            for field, column in columns.items()
        ])
        rows = grouped.orderBy(F.col(self.group_column).asc_nulls_first()).collect()

        summaries = {}
        for field in fields:
            summaries[field] = {
                row[self.group_column]: float(row[field])
                for row in rows
                if row[field] is not None
            }
            logger.info(f"Computed {field} means for {len(summaries[field])} event types")

        return summaries
