"""
Errors module defining the exception taxonomy raised by the client
"""

from enum import Enum
from dataclasses import dataclass, field as dataclass_field
from typing import Dict, Any, Optional, Tuple, Mapping


class ErrorType(Enum):
    """Types of error that can be returned by the API"""
    INTERNAL = "gocardless"
    INVALID_API_USAGE = "invalid_api_usage"
    INVALID_STATE = "invalid_state"
    VALIDATION_FAILED = "validation_failed"

    @classmethod
    def from_wire(cls, value: Optional[str]) -> "ErrorType":
        """
        Map a wire `type` discriminator onto an ErrorType

        Args:
            value: The `type` field of an error envelope

        Returns:
            The matching ErrorType

        Raises:
            ValueError: If the discriminator is missing or not recognised
        """
        if value is None:
            raise ValueError("Error envelope is missing its 'type' discriminator")

        normalised = value.replace('-', '_')
        if normalised == 'internal':
            return cls.INTERNAL

        for member in cls:
            if member.value == normalised:
                return member

        raise ValueError(f"Unknown error type: {value}")


@dataclass(frozen=True)
class FieldError:
    """An individual error describing one problem with a request"""
    message: str
    reason: str
    field: Optional[str] = None
    request_pointer: Optional[str] = None
    links: Mapping[str, str] = dataclass_field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldError":
        return cls(
            message=data.get('message', ''),
            reason=data.get('reason', ''),
            field=data.get('field'),
            request_pointer=data.get('request_pointer'),
            links=dict(data.get('links') or {})
        )

    def __str__(self) -> str:
        return " ".join(part for part in (self.field, self.message) if part)


@dataclass(frozen=True)
class ApiErrorResponse:
    """Decoded `error` envelope returned with non-2xx responses"""
    message: str
    type: ErrorType
    code: int
    documentation_url: Optional[str] = None
    request_id: Optional[str] = None
    errors: Tuple[FieldError, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApiErrorResponse":
        """
        Build an ApiErrorResponse from the contents of the `error` envelope

        Raises:
            ValueError: If the `type` discriminator is not recognised
        """
        return cls(
            message=data.get('message', ''),
            type=ErrorType.from_wire(data.get('type')),
            code=int(data.get('code') or 0),
            documentation_url=data.get('documentation_url'),
            request_id=data.get('request_id'),
            errors=tuple(FieldError.from_dict(item) for item in data.get('errors') or [])
        )

    def __str__(self) -> str:
        if not self.errors:
            return self.message
        return ", ".join(str(error) for error in self.errors)


class PayClientError(Exception):
    """Base class for every error raised by this library"""
    pass


class NetworkError(PayClientError):
    """Raised when the transport could not complete the exchange after all attempts"""

    def __init__(self, message: str, attempts: int = 1):
        super().__init__(message)
        self.attempts = attempts


class MalformedResponseError(PayClientError):
    """
    Raised when a response body is not valid JSON (for example an HTML error page
    returned by a load balancer)
    """

    def __init__(self, response_body: str, status_code: Optional[int] = None):
        super().__init__("Malformed response received from server")
        self.response_body = response_body
        self.status_code = status_code


class ResponseDecodeError(PayClientError):
    """Raised when a JSON response does not have the expected envelope structure"""

    def __init__(self, message: str, response_body: Optional[str] = None):
        super().__init__(message)
        self.response_body = response_body


class InvalidSignatureError(PayClientError):
    """Raised when a webhook signature does not match the one computed from its body"""

    def __init__(self, message: str = "Webhook signature does not match the request body"):
        super().__init__(message)


class ApiError(PayClientError):
    """Base class for errors decoded from an API error envelope"""

    def __init__(self, error: ApiErrorResponse):
        super().__init__(str(error))
        self.error = error

    @property
    def error_message(self) -> str:
        return self.error.message

    @property
    def error_type(self) -> ErrorType:
        return self.error.type

    @property
    def documentation_url(self) -> Optional[str]:
        return self.error.documentation_url

    @property
    def request_id(self) -> Optional[str]:
        """ID of the failed request, quote this when contacting support"""
        return self.error.request_id

    @property
    def code(self) -> int:
        return self.error.code

    @property
    def errors(self) -> Tuple[FieldError, ...]:
        return self.error.errors


class InternalApiError(ApiError):
    """Raised when the API reports an internal error (HTTP 5xx)"""
    pass


class InvalidApiUsageError(ApiError):
    """Raised when the request itself was invalid (bad URL, auth, rate limit, syntax)"""
    pass


class AuthenticationError(InvalidApiUsageError):
    """Raised when the credentials provided are invalid"""
    pass


class PermissionDeniedError(InvalidApiUsageError):
    """Raised when the credentials are not permitted to perform the action"""
    pass


class RateLimitError(InvalidApiUsageError):
    """Raised when the rate limit for the credentials has been exceeded"""

    def __init__(self, error: ApiErrorResponse, reset_at: Optional[str] = None):
        super().__init__(error)
        self.reset_at = reset_at


class InvalidStateError(ApiError):
    """Raised when the action is invalid given the current state of the resource"""

    CONFLICT_REASON = 'idempotent_creation_conflict'

    def conflicting_resource_id(self) -> Optional[str]:
        """
        Find the id of the resource that an idempotent create collided with

        Returns:
            The conflicting resource id, or None if this is not a creation conflict
        """
        for error in self.errors:
            if error.reason == self.CONFLICT_REASON:
                return error.links.get('conflicting_resource_id')
        return None


class ValidationFailedError(ApiError):
    """Raised when the parameters submitted with a request were invalid"""
    pass


class ErrorMapper:
    """Maps decoded error envelopes onto exception classes"""

    TYPE_MAPPING = {
        ErrorType.INTERNAL: InternalApiError,
        ErrorType.INVALID_API_USAGE: InvalidApiUsageError,
        ErrorType.INVALID_STATE: InvalidStateError,
        ErrorType.VALIDATION_FAILED: ValidationFailedError
    }

    # Refinements of invalid_api_usage keyed on HTTP status
    USAGE_STATUS_MAPPING = {
        401: AuthenticationError,
        403: PermissionDeniedError,
        429: RateLimitError
    }

    @classmethod
    def to_exception(cls, error: ApiErrorResponse,
                     headers: Optional[Mapping[str, str]] = None) -> ApiError:
        """
        Map an error response to the exception that represents it

        Args:
            error: Decoded error envelope
            headers: Response headers, used for rate limit details

        Returns:
            An ApiError subclass instance (not raised)
        """
        if error.type is ErrorType.INVALID_API_USAGE:
            refined = cls.USAGE_STATUS_MAPPING.get(error.code)
            if refined is RateLimitError:
                headers = headers or {}
                reset_at = headers.get('RateLimit-Reset') or headers.get('Retry-After')
                return RateLimitError(error, reset_at=reset_at)
            if refined is not None:
                return refined(error)

        return cls.TYPE_MAPPING[error.type](error)
