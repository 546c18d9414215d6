"""
Configuration for the storm impact analysis
"""
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class AnalysisConfig(BaseSettings):
    """Analysis configuration"""
    
    # Source data
    data_url: str = (
        "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2FStormData.csv.bz2"
    )
    cache_dir: str = "data"
    data_filename: str = "StormData.csv.bz2"
    
    # HTTP configuration
    timeout: int = 60
    max_retries: int = 3
    retry_delay: int = 5
    
    # Spark configuration
    spark_app_name: str = "StormImpact-Analysis"
    spark_master: str = "local[*]"
    shuffle_partitions: int = 8
    
    # Analysis configuration
    frequency_threshold: int = Field(default=150, ge=0)  # Keep event types with count > threshold
    fatality_weight: float = 2.0  # One fatality counts as two injuries
    top_n: int = Field(default=5, ge=0)
    trend_period: Literal["day", "year"] = "day"
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "STORM_"
    
    @property
    def cache_path(self) -> Path:
        """Local path of the cached dataset"""
        return Path(self.cache_dir) / self.data_filename


def get_config(**overrides) -> AnalysisConfig:
    """Get analysis configuration instance"""
    return AnalysisConfig(**overrides)
