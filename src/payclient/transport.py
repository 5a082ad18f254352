"""
Transport module performing single HTTP exchanges over a requests session
"""

import logging
import requests
from typing import Dict, Optional, Protocol

from .responses import HttpResponse


class TransportError(Exception):
    """Raised when no HTTP response could be obtained for an exchange"""
    pass


class Transport(Protocol):
    """Protocol for anything able to perform one HTTP exchange"""

    def send(self, method: str, url: str, headers: Dict[str, str],
             body: Optional[str] = None) -> HttpResponse:
        """Send one request and return its response, or raise TransportError"""
        ...

    def close(self) -> None:
        ...


class RequestsTransport:
    """Transport backed by a lazily created requests.Session"""

    def __init__(self, timeout: float = 30.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session
        self.logger = logging.getLogger(__name__)

    def send(self, method: str, url: str, headers: Dict[str, str],
             body: Optional[str] = None) -> HttpResponse:
        """
        Send a single HTTP request without retrying

        Args:
            method: HTTP verb
            url: Absolute URL including query string
            headers: Complete header set for this attempt
            body: Serialised JSON body, if any

        Returns:
            HttpResponse with status, headers and body text

        Raises:
            TransportError: On connection failures, timeouts and other
                exchanges that produced no response
        """
        if self.session is None:
            self.session = requests.Session()

        self.logger.debug(f"Sending {method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                data=body.encode('utf-8') if body is not None else None,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e

        return HttpResponse(
            status_code=response.status_code,
            body=response.text,
            headers=response.headers
        )

    def close(self) -> None:
        """
        Close HTTP session and release resources
        """
        if self.session:
            self.session.close()
            self.session = None
