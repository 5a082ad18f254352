"""
Resilience core for a typed payments REST client
Provides retrying request execution, error classification, cursor pagination
and webhook signature verification
"""

from .version import __version__
from .config_loader import (
    ClientConfig, ConfigLoader, ConfigurationError, EnvironmentVariableError, MAX_RETRIES
)
from .errors import (
    PayClientError,
    NetworkError,
    MalformedResponseError,
    ResponseDecodeError,
    InvalidSignatureError,
    ApiError,
    InternalApiError,
    InvalidApiUsageError,
    AuthenticationError,
    PermissionDeniedError,
    RateLimitError,
    InvalidStateError,
    ValidationFailedError,
    ErrorType,
    FieldError,
    ApiErrorResponse
)
from .request import ApiRequest, ResponseShape
from .responses import ApiResponse, HttpResponse, Page
from .transport import Transport, TransportError, RequestsTransport
from .response_parser import ResponseParser
from .http_client import HTTPClient
from .pagination import PaginatingIterator
from .webhook import Webhook
from .resources import WireEnum, Event, EventResourceType
from .services import EventService
from .client import PayClient
from .logging_setup import configure_logging

__all__ = [
    '__version__',
    'ClientConfig',
    'ConfigLoader',
    'ConfigurationError',
    'EnvironmentVariableError',
    'MAX_RETRIES',
    'PayClientError',
    'NetworkError',
    'MalformedResponseError',
    'ResponseDecodeError',
    'InvalidSignatureError',
    'ApiError',
    'InternalApiError',
    'InvalidApiUsageError',
    'AuthenticationError',
    'PermissionDeniedError',
    'RateLimitError',
    'InvalidStateError',
    'ValidationFailedError',
    'ErrorType',
    'FieldError',
    'ApiErrorResponse',
    'ApiRequest',
    'ResponseShape',
    'ApiResponse',
    'HttpResponse',
    'Page',
    'Transport',
    'TransportError',
    'RequestsTransport',
    'ResponseParser',
    'HTTPClient',
    'PaginatingIterator',
    'Webhook',
    'WireEnum',
    'Event',
    'EventResourceType',
    'EventService',
    'PayClient',
    'configure_logging'
]
