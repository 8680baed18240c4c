"""Figma REST API client with Bearer authentication and typed error mapping."""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import AuthError, NetworkError, NotFoundError, ResponseDecodeError

logger = logging.getLogger('figma_asset_exporter.client')

DEFAULT_API_BASE = 'https://api.figma.com/v1/'
DEFAULT_TIMEOUT = 30
DOWNLOAD_CHUNK_SIZE = 64 * 1024


class FigmaClient:
    """
    Authenticated session against the Figma REST API.

    One client is created per export run and owns the access token for its
    lifetime; use it as a context manager so the underlying session is closed
    when the run ends.
    """

    def __init__(
        self,
        api_token: str,
        api_base: str = DEFAULT_API_BASE,
        timeout: Union[int, float] = DEFAULT_TIMEOUT,
        max_retries: int = 0,
        retry_backoff_factor: float = 2.0,
        pool_size: int = 10
    ):
        """
        Initialize Figma client.

        Args:
            api_token: Figma personal access token (sent as a Bearer token)
            api_base: API base URL, must end with a slash
            timeout: HTTP request timeout in seconds
            max_retries: Transport-level retries for 429/5xx responses (0 = single attempt)
            retry_backoff_factor: Exponential backoff factor between retries
            pool_size: Connection pool size, should cover the worker count
        """
        if not api_token:
            raise ValueError("FigmaClient requires an api_token")

        self.api_base = api_base if api_base.endswith('/') else api_base + '/'
        self.timeout = timeout
        self.max_retries = max_retries

        self.session = requests.Session()
        self.session.headers['Authorization'] = f'Bearer {api_token}'
        self.session.headers['Accept'] = 'application/json'

        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=retry_backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["HEAD", "GET", "OPTIONS"],
            raise_on_status=False
        )
        adapter = HTTPAdapter(
            max_retries=retry_strategy,
            pool_connections=pool_size,
            pool_maxsize=pool_size
        )
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

        logger.debug(f"Client configured for {self.api_base} with timeout={timeout}s, "
                     f"max_retries={max_retries}, backoff_factor={retry_backoff_factor}")

    def __enter__(self) -> 'FigmaClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def _request(self, url: str, **kwargs) -> requests.Response:
        """
        Perform a GET request and map failures to the exporter error taxonomy.

        Raises:
            AuthError: Token rejected (401/403)
            NotFoundError: Resource does not exist (404)
            NetworkError: Timeout, connection failure or other non-2xx status
        """
        start_time = time.time()
        logger.debug(f"API Request: GET {url}")

        try:
            response = self.session.get(url, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            logger.error(f"Request timeout after {self.timeout}s: GET {url}")
            raise NetworkError(f"Request to {url} timed out after {self.timeout}s", url=url) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error: GET {url} - {str(e)}")
            raise NetworkError(f"Request to {url} failed: {e}", url=url) from e

        elapsed = time.time() - start_time
        logger.debug(f"API Response: {response.status_code} {url} ({elapsed:.3f}s)")

        if response.ok:
            return response

        status = response.status_code
        details = self._extract_error_details(response)
        response.close()

        if status in (401, 403):
            raise AuthError(
                f"Figma rejected the access token (HTTP {status}){details}",
                status_code=status,
                url=url
            )
        if status == 404:
            raise NotFoundError(f"Not found: {url}{details}", status_code=status, url=url)

        logger.error(f"HTTP Error {status}: GET {url}")
        raise NetworkError(f"HTTP {status} for {url}{details}", status_code=status, url=url)

    @staticmethod
    def _extract_error_details(response: requests.Response) -> str:
        """Pull a human-readable message out of a Figma error body."""
        try:
            error_json = response.json()
        except ValueError:
            return ""
        if isinstance(error_json, dict):
            for key in ('err', 'message', 'error'):
                if error_json.get(key) and isinstance(error_json[key], str):
                    return f" - {error_json[key]}"
        return ""

    def get_json(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        GET an API endpoint relative to ``api_base`` and decode its JSON body.

        Args:
            endpoint: Endpoint path (e.g. "files/ABC123")
            params: Optional query parameters

        Returns:
            Decoded JSON payload

        Raises:
            ResponseDecodeError: If the body is not valid JSON
        """
        url = urljoin(self.api_base, endpoint.lstrip('/'))
        response = self._request(url, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise ResponseDecodeError(
                f"Invalid JSON in response from {url}: {e}",
                status_code=response.status_code,
                url=url
            ) from e

    def download_file(self, url: str, destination: Union[str, Path]) -> int:
        """
        Download ``url`` to ``destination``, creating parent directories.

        Args:
            url: Absolute URL of the resource
            destination: Local file path

        Returns:
            Number of bytes written
        """
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)

        response = self._request(url, stream=True)
        written = 0
        try:
            with open(destination, 'wb') as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Download of {url} interrupted: {e}", url=url) from e
        finally:
            response.close()

        logger.debug(f"Downloaded {written} bytes: {url} -> {destination}")
        return written

    @classmethod
    def from_config(cls, config: Dict[str, Any], api_token: Optional[str] = None) -> 'FigmaClient':
        """
        Initialize Figma client from configuration dictionary.

        Args:
            config: Configuration dictionary with figma and advanced settings
            api_token: Explicit token, overrides ``figma.api_token``

        Returns:
            FigmaClient instance
        """
        figma_config = config.get('figma', {})
        advanced_config = config.get('advanced', {})
        export_config = config.get('export', {})

        return cls(
            api_token=api_token or figma_config.get('api_token'),
            api_base=figma_config.get('api_base', DEFAULT_API_BASE),
            timeout=advanced_config.get('request_timeout', DEFAULT_TIMEOUT),
            max_retries=advanced_config.get('max_retries', 0),
            retry_backoff_factor=advanced_config.get('retry_backoff_factor', 2.0),
            pool_size=max(10, export_config.get('max_workers', 4))
        )


__all__ = ['FigmaClient', 'DEFAULT_API_BASE']
