"""HTTP client utilities for the provider clients"""

import logging
from typing import Any

import requests

logger = logging.getLogger(__name__)


class HTTPClient:
    """Simple HTTP client wrapper around a requests session"""

    def __init__(self, base_url: str, timeout: int = 30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    def get(
        self, path: str, params: dict | None = None, headers: dict | None = None
    ) -> Any:
        """Make GET request and return the decoded JSON body"""
        url = f"{self.base_url}{path}"
        query = {key: value for key, value in (params or {}).items() if value is not None}
        logger.debug(f"GET {url} params={query}")

        response = self.session.get(url, params=query, headers=headers, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def health_check(self) -> bool:
        """Check proxy health"""
        try:
            response = self.session.get(f"{self.base_url}/health", timeout=5)
            return response.status_code == 200
        except requests.RequestException as e:
            logger.warning(f"Health check against {self.base_url} failed: {e}")
            return False
