"""
Pytest configuration and fixtures for storm impact tests.
"""
import pytest
from pyspark.sql import SparkSession
from pyspark.sql.types import StructType, StructField, StringType, DoubleType


RECORD_SCHEMA = StructType([
    StructField("EVTYPE", StringType(), True),
    StructField("BGN_DATE", StringType(), True),
    StructField("FATALITIES", DoubleType(), True),
    StructField("INJURIES", DoubleType(), True),
    StructField("PROPDMG", DoubleType(), True),
    StructField("CROPDMG", DoubleType(), True),
])

RAW_RECORD_SCHEMA = StructType([
    StructField(field.name, StringType(), True) for field in RECORD_SCHEMA.fields
])


@pytest.fixture(scope="session")
def spark():
    """Create a Spark session for testing."""
    spark = (
        SparkSession.builder
        .appName("StormImpact-Tests")
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.sql.legacy.timeParserPolicy", "CORRECTED")
        .getOrCreate()
    )
    
    yield spark
    
    spark.stop()


@pytest.fixture
def make_records(spark):
    """Build a typed storm record DataFrame from tuples."""
    def _make(rows):
        return spark.createDataFrame(rows, RECORD_SCHEMA)
    return _make


@pytest.fixture
def make_raw_records(spark):
    """Build an all-string storm record DataFrame, as read from CSV."""
    def _make(rows):
        return spark.createDataFrame(rows, RAW_RECORD_SCHEMA)
    return _make


@pytest.fixture
def sample_storm_data(make_records):
    """
    Three frequent event types and one rare one.

    TORNADO: 4 records, HEAT: 3 records, FLOOD: 3 records, "tornado": 1 record
    """
    rows = [
        ("TORNADO", "4/18/1950 0:00:00", 1.0, 10.0, 25.0, 0.0),
        ("TORNADO", "4/18/1950 0:00:00", 0.0, 20.0, 2.5, 0.0),
        ("TORNADO", "11/15/1951 0:00:00", 3.0, None, 25.0, 0.0),
        ("TORNADO", "1/6/1950 0:00:00", 0.0, 30.0, None, 0.0),
        ("HEAT", "7/1/1995 0:00:00", 5.0, 2.0, 0.0, 1.0),
        ("HEAT", "7/12/1995 0:00:00", 4.0, 0.0, 0.0, 2.0),
        ("HEAT", "7/13/1995 0:00:00", 0.0, 1.0, 0.0, 3.0),
        ("FLOOD", "not a date", 0.0, 0.0, 100.0, 50.0),
        ("FLOOD", "8/30/2005 0:00:00", 0.0, 0.0, 200.0, 50.0),
        ("FLOOD", "8/31/2005 0:00:00", 0.0, 0.0, 300.0, 50.0),
        ("tornado", "5/5/2000 0:00:00", 50.0, 50.0, 1000.0, 1000.0),
    ]
    return make_records(rows)
