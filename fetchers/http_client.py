"""
Blocking HTTP transport shared by the grade fetcher and the notification channels.
Every network problem is returned as a failed FetchResult instead of raised.
"""

import logging
from typing import Optional, Dict, Any

import requests

from utils.exceptions import TransportError
from models.fetch_result import FetchResult

DEFAULT_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/110.0.0.0 Safari/537.36'
)


class HTTPClient:
    """Thin wrapper around a requests session with timeout, proxy and TLS settings."""

    def __init__(
        self,
        settings: Dict[str, Any] = None,
        session: requests.Session = None
    ):
        """
        Initialize the client.

        Args:
            settings: Application settings; only the 'http' section is read
            session: Optional pre-built session (tests pass a mock)
        """
        http_settings = (settings or {}).get('http', {}) or {}
        self.connect_timeout = float(http_settings.get('connect_timeout', 5))
        self.read_timeout = float(http_settings.get('read_timeout', 5))
        self.max_retries = max(1, int(http_settings.get('max_retries', 1)))
        self.user_agent = http_settings.get('user_agent') or DEFAULT_USER_AGENT
        self.proxies = self._build_proxies(http_settings.get('proxy'))
        # A custom CA bundle applies to this client's requests only.
        self.verify = http_settings.get('ca_bundle') or True
        self.session = session or requests.Session()
        self.logger = logging.getLogger('HTTPClient')

    @staticmethod
    def _build_proxies(proxy: Optional[str]) -> Optional[Dict[str, str]]:
        if not proxy:
            return None
        return {'http': proxy, 'https': proxy}

    @property
    def timeout(self) -> tuple:
        return (self.connect_timeout, self.read_timeout)

    def request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str] = None,
        params: Dict[str, Any] = None,
        data: Any = None,
        json_body: Any = None,
        max_retries: int = None
    ) -> FetchResult:
        """
        Perform one request, retrying transport failures.

        Args:
            method: HTTP verb
            url: Target URL
            headers: Extra request headers
            params: Query parameters merged into the URL
            data: Form or raw body
            json_body: JSON-serializable body
            max_retries: Attempts for this call (defaults to the configured value)

        Returns:
            FetchResult carrying the body, or a TransportError
        """
        request_headers = {'User-Agent': self.user_agent}
        request_headers.update(headers or {})
        attempts = max(1, max_retries or self.max_retries)
        last_error = None

        for attempt in range(attempts):
            try:
                self.logger.debug(f"{method} {url} (attempt {attempt + 1})")
                response = self.session.request(
                    method,
                    url,
                    headers=request_headers,
                    params=params,
                    data=data,
                    json=json_body,
                    timeout=self.timeout,
                    proxies=self.proxies,
                    verify=self.verify
                )
                response.raise_for_status()

                return FetchResult(
                    url=url,
                    body=response.text,
                    status_code=response.status_code,
                    headers=dict(response.headers)
                )

            except requests.exceptions.RequestException as e:
                self.logger.warning(f"Attempt {attempt + 1} failed: {e}")
                last_error = TransportError(
                    f"{type(e).__name__}: {e}",
                    url=url,
                    cause=e
                )

        return FetchResult(url=url, error=last_error)

    def get(self, url: str, **kwargs) -> FetchResult:
        return self.request('GET', url, **kwargs)

    def post(self, url: str, **kwargs) -> FetchResult:
        return self.request('POST', url, **kwargs)
