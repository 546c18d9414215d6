"""
Orchestration and CLI for the storm impact analysis.

This module coordinates the analysis pipeline:
1. Fetch (or reuse the cached copy of) the storm event dataset
2. Parse it with Spark and validate the schema
3. Coerce numeric fields and drop rare event types
4. Compute per event type means
5. Rank event types by health and economic impact
6. Derive the damage trend from normalized begin dates
"""
import argparse
import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pyspark.sql import SparkSession, DataFrame

from .aggregator import GroupAggregator
from .cleaner import create_cleaner
from .client import StormDataClient
from .config import AnalysisConfig, get_config
from .dates import collect_damage_trend, count_missing_dates, with_event_date
from .parser import create_parser, validate_schema
from .scoring import Scorer

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """Orchestrates the storm impact analysis pipeline."""

    def __init__(self, spark: SparkSession, config: Optional[AnalysisConfig] = None):
        """
        Initialize orchestrator.

        Args:
            spark: Active SparkSession
            config: Configuration object (defaults to environment settings)
        """
        self.spark = spark
        self.config = config or get_config()
        self.aggregator = GroupAggregator()

    def analyze(self, df: DataFrame) -> Dict[str, Any]:
        """
        Run the analysis over an in-memory table.

        Args:
            df: Storm records with at least the required columns

        Returns:
            Dictionary with frequencies, summaries, rankings and trend

        Raises:
            SchemaViolation: If a required column is missing
        """
        validate_schema(df)

        cleaner = create_cleaner(self.config.frequency_threshold)
        scorer = Scorer(self.config.fatality_weight, self.config.top_n)

        cleaned = cleaner.clean(df)
        records = cleaned.records.cache()

        try:
            quality_metrics = cleaner.compute_quality_metrics(records)
            summaries = self.aggregator.summarize(records)

            health_scores = scorer.health_scores(
                summaries["fatalities"], summaries["injuries"]
            )
            economic_scores = scorer.economic_scores(
                summaries["property_damage"], summaries["crop_damage"]
            )

            dated = with_event_date(records)
            missing_dates = count_missing_dates(dated)
            trend = collect_damage_trend(dated, self.config.trend_period)
        finally:
            records.unpersist()

        return {
            "frequency_threshold": cleaned.threshold,
            "frequencies": cleaned.frequencies,
            "total_records": cleaned.total_records,
            "retained_records": cleaned.retained_records,
            "retained_event_types": cleaned.retained_event_types,
            "quality_metrics": quality_metrics,
            "summaries": summaries,
            "health_scores": health_scores,
            "economic_scores": economic_scores,
            "health_ranking": scorer.truncate(health_scores),
            "economic_ranking": scorer.truncate(economic_scores),
            "missing_dates": missing_dates,
            "trend_period": self.config.trend_period,
            "damage_trend": trend,
        }

    def run_file(self, path: str) -> Dict[str, Any]:
        """
        Parse a dataset file and analyze it.

        Failures are logged and reported in the returned status instead of
        being raised.

        Args:
            path: Path to the storm data CSV

        Returns:
            Analysis results with status and timing
        """
        start_time = time.time()
        metrics = {
            "input_path": path,
            "status": "running",
            "start_time": datetime.now(timezone.utc).isoformat(),
        }

        logger.info(f"Starting analysis of {path}")

        try:
            parser = create_parser(self.spark)
            df = parser.parse_file(path)
            metrics["parse_metrics"] = parser.validate_data(df)
            metrics.update(self.analyze(df))
            metrics["status"] = "success"

        except Exception as e:
            logger.error(f"Analysis failed: {e}", exc_info=True)
            metrics["status"] = "failed"
            metrics["error"] = str(e)

        metrics["elapsed_seconds"] = round(time.time() - start_time, 2)
        metrics["end_time"] = datetime.now(timezone.utc).isoformat()

        logger.info(f"Analysis {metrics['status']} in {metrics['elapsed_seconds']}s")
        return metrics


def create_spark_session(config: AnalysisConfig) -> SparkSession:
    """
    Create and configure Spark session

    Args:
        config: Analysis configuration

    Returns:
        Configured SparkSession
    """
    builder = (
        SparkSession.builder
        .appName(config.spark_app_name)
        .master(config.spark_master)
        .config("spark.sql.shuffle.partitions", str(config.shuffle_partitions))
        .config("spark.sql.adaptive.enabled", "true")
        # Malformed begin dates parse to NULL instead of raising upgrade errors
        .config("spark.sql.legacy.timeParserPolicy", "CORRECTED")
    )

    spark = builder.getOrCreate()

    logger.info(f"Spark session created: {spark.version}")
    return spark


def _format_ranking(title: str, ranking) -> str:
    lines = [title]
    if not ranking:
        lines.append("  (no event types above the frequency threshold)")
    for position, (event_type, score) in enumerate(ranking, start=1):
        lines.append(f"  {position:>2}. {str(event_type):<30} {score:>14.4f}")
    return "\n".join(lines)


def _format_missingness(quality_metrics) -> str:
    if not quality_metrics:
        return "N/A"
    return ", ".join(
        f"{column}={stats['count']}"
        for column, stats in quality_metrics["missingness"].items()
    )


def render_report(results: Dict[str, Any]) -> str:
    """Render analysis results as a plain text report."""
    lines = [
        "=" * 60,
        "STORM IMPACT ANALYSIS",
        "=" * 60,
        f"Status:             {results['status']}",
    ]

    if results["status"] != "success":
        lines.append(f"Error:              {results.get('error', 'N/A')}")
        lines.append("=" * 60)
        return "\n".join(lines)

    trend = results["damage_trend"]
    lines.extend([
        f"Input Records:      {results['total_records']}",
        f"Event Types:        {len(results['frequencies'])}",
        f"Threshold:          > {results['frequency_threshold']}",
        f"Retained Types:     {len(results['retained_event_types'])}",
        f"Retained Records:   {results['retained_records']}",
        f"Missing Dates:      {results['missing_dates']}",
        f"Missing Values:     {_format_missingness(results.get('quality_metrics'))}",
        f"Elapsed Time:       {results.get('elapsed_seconds', 'N/A')}s",
        "",
        _format_ranking("Most harmful to population health:", results["health_ranking"]),
        "",
        _format_ranking("Greatest economic consequences:", results["economic_ranking"]),
        "",
    ])

    if trend:
        first, last = trend[0], trend[-1]
        peak = max(trend, key=lambda point: point[1])
        lines.extend([
            f"Damage trend by {results['trend_period']}:",
            f"  First:  {first[0]}  {first[1]:.2f}",
            f"  Last:   {last[0]}  {last[1]:.2f}",
            f"  Peak:   {peak[0]}  {peak[1]:.2f}",
        ])
    else:
        lines.append("Damage trend: no dated records")

    lines.append("=" * 60)
    return "\n".join(lines)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Rank storm event types by health and economic impact",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Download (or reuse the cached) dataset and print the report
  stormimpact

  # Analyze a local file with a lower threshold and top 10 lists
  stormimpact --data-path data/StormData.csv.bz2 --threshold 50 --top-n 10
        """
    )
    parser.add_argument(
        "--data-path",
        help="Local CSV to analyze (default: download to the cache directory)"
    )
    parser.add_argument(
        "--threshold",
        type=int,
        help="Keep event types occurring more than this many times"
    )
    parser.add_argument(
        "--fatality-weight",
        type=float,
        help="Multiplier applied to mean fatalities in the health score"
    )
    parser.add_argument(
        "--top-n",
        type=int,
        help="Number of event types to list per ranking"
    )
    parser.add_argument(
        "--trend-period",
        choices=["day", "year"],
        help="Roll-up period for the damage trend"
    )
    parser.add_argument(
        "--spark-master",
        help="Spark master URL (default: local[*])"
    )
    parser.add_argument(
        "--force-download",
        action="store_true",
        help="Download the dataset even if a cached copy exists"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON instead of a text report"
    )
    return parser


def main(argv=None):
    """Main entry point for CLI"""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    args = build_arg_parser().parse_args(argv)

    overrides = {
        "frequency_threshold": args.threshold,
        "fatality_weight": args.fatality_weight,
        "top_n": args.top_n,
        "trend_period": args.trend_period,
        "spark_master": args.spark_master,
    }
    config = get_config(**{k: v for k, v in overrides.items() if v is not None})

    data_path = args.data_path
    if data_path is None:
        client = StormDataClient(config)
        try:
            data_path = str(client.fetch(force=args.force_download))
        except Exception as e:
            logger.error(f"Could not obtain dataset: {e}")
            sys.exit(1)
        finally:
            client.close()

    spark = create_spark_session(config)

    try:
        orchestrator = AnalysisOrchestrator(spark, config)
        results = orchestrator.run_file(data_path)

        if args.json:
            print(json.dumps(results, indent=2, default=str))
        else:
            print(render_report(results))

        sys.exit(0 if results["status"] == "success" else 1)

    finally:
        spark.stop()


if __name__ == "__main__":
    main()
