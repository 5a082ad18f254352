"""
HTTPClient module executing API requests with bounded retries, idempotency keys
and conflict-to-read reconciliation
"""

import json
import time
import logging
import platform
import requests
from typing import Dict, Any, Optional

from .config_loader import ClientConfig, ConfigLoader
from .errors import InvalidStateError, NetworkError
from .pagination import PaginatingIterator
from .request import ApiRequest
from .response_parser import ResponseParser
from .responses import ApiResponse, HttpResponse, Page
from .transport import RequestsTransport, Transport, TransportError
from .url_formatter import UrlFormatter
from .version import __version__


USER_AGENT = (
    f"payclient/{__version__} python/{platform.python_version()} "
    f"requests/{requests.__version__}"
)


class HTTPClient:
    """
    Executes ApiRequests over an injected transport

    Transport failures and 5xx responses are retried up to the configured number
    of attempts; every other response is terminal. Idempotent creates carry the
    same Idempotency-Key on every attempt, and a create that collides with an
    existing resource is answered by reading that resource instead.

    Holds no per-call mutable state, so one instance may serve many threads as
    long as each thread sends its own ApiRequest objects.
    """

    MEDIA_TYPE = 'application/json'
    API_VERSION_HEADER = 'GoCardless-Version'

    def __init__(self, config: ClientConfig, transport: Optional[Transport] = None,
                 response_parser: Optional[ResponseParser] = None):
        """
        Initialise HTTPClient with its configuration and collaborators

        Args:
            config: Immutable client configuration
            transport: Transport used for each attempt, a RequestsTransport by default
            response_parser: Parser for response bodies

        Raises:
            ConfigurationError: If the authentication settings are unusable
            EnvironmentVariableError: If a credential environment variable is unset
        """
        self.config = config
        self.transport = transport or RequestsTransport(timeout=config.timeout_seconds)
        self.response_parser = response_parser or ResponseParser()
        self.url_formatter = UrlFormatter(config.base_url)
        self.credentials = ConfigLoader.resolve_credentials(config)
        self.logger = logging.getLogger(__name__)

    def send(self, request: ApiRequest) -> Any:
        """
        Execute a request and return its decoded result

        Args:
            request: Fully built request

        Returns:
            Decoded resource, Page or tuple depending on the request's shape

        Raises:
            NetworkError: If no response was received after all attempts
            ApiError: For error responses, after retries where applicable
            MalformedResponseError: If a response body is not JSON
        """
        return self.send_wrapped(request).resource

    def send_wrapped(self, request: ApiRequest) -> ApiResponse:
        """
        Execute a request and return its decoded result with status and headers

        Args:
            request: Fully built request

        Returns:
            ApiResponse wrapping the decoded result
        """
        try:
            response = self._execute_with_retries(request)
        except InvalidStateError as e:
            follow_up = self._conflict_follow_up(request, e)
            if follow_up is None:
                raise
            # The follow-up read goes through the same retry policy
            return self.send_wrapped(follow_up)

        resource = self.response_parser.parse(request, response)
        return ApiResponse(resource=resource, status_code=response.status_code,
                           headers=response.headers)

    def fetch_page(self, request: ApiRequest, after: Optional[str] = None) -> Page:
        """
        Fetch the page of a list request positioned after a cursor

        Args:
            request: List request
            after: Cursor from the previous page, None for the first page

        Returns:
            Page of decoded items
        """
        return self.send(request.with_after(after))

    def iterate(self, request: ApiRequest) -> PaginatingIterator:
        """
        Lazily iterate every item of a list request across all of its pages

        Args:
            request: List request

        Returns:
            Single-pass iterator that fetches pages on demand
        """
        return PaginatingIterator(request, self.fetch_page)

    def _conflict_follow_up(self, request: ApiRequest,
                            error: InvalidStateError) -> Optional[ApiRequest]:
        """
        Build the read that replaces a conflicting create, if one applies

        Args:
            request: Request that received the invalid state error
            error: The invalid state error

        Returns:
            Follow-up GET request, or None if the error should propagate
        """
        if request.conflict_handler is None or self.config.error_on_idempotency_conflict:
            return None

        resource_id = error.conflicting_resource_id()
        if resource_id is None:
            return None

        self.logger.info(
            f"Idempotent creation conflict on {request.path_template}, "
            f"fetching existing resource {resource_id}"
        )
        return request.conflict_request(resource_id)

    def _execute_with_retries(self, request: ApiRequest) -> HttpResponse:
        """
        Drive attempts of one request until a terminal outcome

        Args:
            request: Request to send

        Returns:
            The terminal 2xx response

        Raises:
            NetworkError: If every attempt failed at the transport level
            ApiError: For terminal non-2xx responses
            MalformedResponseError: If a terminal error body is not JSON
        """
        url = self.url_formatter.format_url(request.path_template, request.path_params,
                                            request.query_params)
        # Built once so every attempt carries identical headers and body
        headers = self._build_headers(request)
        body = self._serialise_body(request)
        max_attempts = self.config.max_attempts if request.retryable else 1

        attempt = 0
        while True:
            attempt += 1
            try:
                response = self._send_once(request.method, url, headers, body)
            except TransportError as e:
                if attempt >= max_attempts:
                    self.logger.error(
                        f"Giving up on {request.method} {url} after {attempt} attempt(s): {e}"
                    )
                    raise NetworkError(
                        f"Failed to execute request after {attempt} attempt(s): {e}",
                        attempts=attempt
                    ) from e
                self._wait_before_retry(attempt, max_attempts, str(e))
                continue

            if response.is_server_error and attempt < max_attempts:
                self._wait_before_retry(attempt, max_attempts, f"HTTP {response.status_code}")
                continue

            break

        if response.is_success:
            return response

        raise self.response_parser.parse_error(response.body, response.status_code,
                                               response.headers)

    def _send_once(self, method: str, url: str, headers: Dict[str, str],
                   body: Optional[str]) -> HttpResponse:
        start_time = time.perf_counter()
        response = self.transport.send(method, url, headers, body)
        elapsed = time.perf_counter() - start_time
        self.logger.info(
            f"API request [{method}] [{url}] returned [{response.status_code}] "
            f"(took [{elapsed:.3f}s])"
        )
        return response

    def _wait_before_retry(self, attempt: int, max_attempts: int, reason: str) -> None:
        """
        Sleep before the next attempt

        The delay is wait_seconds * backoff_factor ** (attempt - 1); with the
        default factor of 1.0 this is a fixed wait.
        """
        delay = self.config.wait_seconds * (self.config.backoff_factor ** (attempt - 1))
        self.logger.warning(
            f"Attempt {attempt}/{max_attempts} failed ({reason}), retrying in {delay:.2f}s"
        )
        if delay > 0:
            time.sleep(delay)

    def _build_headers(self, request: ApiRequest) -> Dict[str, str]:
        headers = {
            'Accept': self.MEDIA_TYPE,
            'User-Agent': USER_AGENT,
            self.API_VERSION_HEADER: self.config.api_version
        }
        if request.has_body:
            headers['Content-Type'] = self.MEDIA_TYPE

        headers.update(request.request_headers())
        headers['Authorization'] = self.credentials
        return headers

    @staticmethod
    def _serialise_body(request: ApiRequest) -> Optional[str]:
        payload = request.serialise_body()
        if payload is None:
            return None
        return json.dumps(payload)

    def close(self) -> None:
        """
        Close the underlying transport and release its connections
        """
        self.transport.close()

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
