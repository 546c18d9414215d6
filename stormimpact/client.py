"""Client for fetching and caching the storm event dataset."""
import hashlib
import logging
from pathlib import Path

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import AnalysisConfig

logger = logging.getLogger(__name__)


class StormDataClient:
    """Downloads the storm data archive once and serves it from a local cache."""

    def __init__(self, config: AnalysisConfig):
        """Initialize client.

        Args:
            config: Analysis configuration
        """
        self.config = config
        self.session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create requests session with retry logic."""
        session = requests.Session()
        retry_strategy = Retry(
            total=self.config.max_retries,
            backoff_factor=self.config.retry_delay,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET", "HEAD"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def fetch(self, force: bool = False) -> Path:
        """Return the local dataset path, downloading it if needed.

        Args:
            force: Download even if a cached copy exists

        Returns:
            Path to the cached file

        Raises:
            requests.RequestException: If the download fails
        """
        output_path = self.config.cache_path

        if output_path.exists() and output_path.stat().st_size > 0 and not force:
            logger.info(f"Using cached dataset at {output_path}")
            return output_path

        return self.download(output_path)

    def download(self, output_path: Path) -> Path:
        """Stream the dataset to output_path.

        A partial download is written to a temporary file and only moved
        into place once complete.
        """
        url = self.config.data_url
        logger.info(f"Downloading dataset from {url}")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        partial_path = output_path.with_name(output_path.name + ".part")

        try:
            response = self.session.get(url, timeout=self.config.timeout, stream=True)
            response.raise_for_status()

            with open(partial_path, 'wb') as f:
                for chunk in response.iter_content(chunk_size=8192):
                    f.write(chunk)

        except requests.RequestException as e:
            logger.error(f"Failed to download {url}: {e}")
            partial_path.unlink(missing_ok=True)
            raise

        partial_path.replace(output_path)
        checksum = self._calculate_checksum(output_path)
        logger.info(f"Downloaded dataset to {output_path} (sha256={checksum})")
        return output_path

    def _calculate_checksum(self, file_path: Path, algorithm: str = "sha256") -> str:
        """Calculate file checksum.

        Args:
            file_path: Path to file
            algorithm: Hash algorithm (sha256 or md5)

        Returns:
            Hex digest of checksum
        """
        hash_obj = hashlib.new(algorithm)
        with open(file_path, 'rb') as f:
            while chunk := f.read(8192):
                hash_obj.update(chunk)
        return hash_obj.hexdigest()

    def close(self):
        """Close the HTTP session."""
        self.session.close()
