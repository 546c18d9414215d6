"""
StormImpact Analysis

Spark-based analysis of the NOAA storm event database.
Filters noisy event types, computes per-type means, and ranks
event types by health and economic impact.
"""

__version__ = "0.1.0"
