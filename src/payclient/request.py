"""
Request module describing a single API call independently of how it is sent
"""

import uuid
import threading
from enum import Enum
from dataclasses import dataclass, field, replace
from typing import Dict, Any, Optional, Callable


IDEMPOTENCY_KEY_HEADER = 'Idempotency-Key'


class ResponseShape(Enum):
    """How the envelope of a successful response should be decoded"""
    SINGLE = "single"
    PAGE = "page"
    LIST = "list"


def _identity(data: Any) -> Any:
    return data


@dataclass
class ApiRequest:
    """
    Immutable description of one API call

    Behaviour differences between endpoints (verb, body, response shape, decoder,
    conflict handling) are carried as values on the request rather than through
    subclasses. The only field that changes after construction is the idempotency
    key, which is assigned at most once for the lifetime of the instance.
    """
    method: str
    path_template: str
    envelope: str
    decoder: Callable[[Dict[str, Any]], Any] = _identity
    path_params: Dict[str, str] = field(default_factory=dict)
    query_params: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Dict[str, Any]] = None
    request_envelope: Optional[str] = None
    shape: ResponseShape = ResponseShape.SINGLE
    idempotent_create: bool = False
    conflict_handler: Optional[Callable[[str], "ApiRequest"]] = None
    idempotency_key: Optional[str] = None
    _key_lock: threading.Lock = field(default_factory=threading.Lock, init=False,
                                      repr=False, compare=False)

    BODY_METHODS = ('POST', 'PUT')

    def __post_init__(self):
        self.method = self.method.upper()
        # A key passed as a plain header is treated as the caller's idempotency key
        header_key = self.headers.get(IDEMPOTENCY_KEY_HEADER)
        if header_key is not None:
            if self.idempotency_key is not None and self.idempotency_key != header_key:
                raise ValueError("Conflicting idempotency keys supplied")
            self.idempotency_key = header_key
            self.headers = {k: v for k, v in self.headers.items() if k != IDEMPOTENCY_KEY_HEADER}

    @classmethod
    def get(cls, path_template: str, envelope: str, decoder: Callable = _identity,
            path_params: Optional[Dict[str, str]] = None,
            query_params: Optional[Dict[str, Any]] = None,
            headers: Optional[Dict[str, str]] = None) -> "ApiRequest":
        """Build a GET request for a single resource"""
        return cls('GET', path_template, envelope, decoder,
                   path_params=path_params or {}, query_params=query_params or {},
                   headers=headers or {})

    @classmethod
    def list(cls, path_template: str, envelope: str, decoder: Callable = _identity,
             path_params: Optional[Dict[str, str]] = None,
             query_params: Optional[Dict[str, Any]] = None,
             headers: Optional[Dict[str, str]] = None) -> "ApiRequest":
        """Build a GET request for one cursor-paginated page of resources"""
        return cls('GET', path_template, envelope, decoder,
                   path_params=path_params or {}, query_params=query_params or {},
                   headers=headers or {}, shape=ResponseShape.PAGE)

    @classmethod
    def create(cls, path_template: str, envelope: str, body: Dict[str, Any],
               decoder: Callable = _identity,
               conflict_handler: Optional[Callable[[str], "ApiRequest"]] = None,
               path_params: Optional[Dict[str, str]] = None,
               headers: Optional[Dict[str, str]] = None,
               idempotency_key: Optional[str] = None) -> "ApiRequest":
        """
        Build an idempotent create (POST) request

        Args:
            path_template: Path with `:name` placeholders
            envelope: Envelope name wrapping the request and response bodies
            body: Attributes of the resource to create
            decoder: Converts the enveloped JSON object into the result type
            conflict_handler: Builds the GET used when the resource already exists
            path_params: Values for the placeholders in path_template
            headers: Caller supplied headers, sent verbatim on every attempt
            idempotency_key: Caller chosen key, generated on first send if omitted

        Returns:
            ApiRequest carrying an idempotency key on every attempt
        """
        return cls('POST', path_template, envelope, decoder,
                   path_params=path_params or {}, headers=headers or {}, body=body,
                   idempotent_create=True, conflict_handler=conflict_handler,
                   idempotency_key=idempotency_key)

    @classmethod
    def action(cls, path_template: str, envelope: str, body: Optional[Dict[str, Any]] = None,
               decoder: Callable = _identity,
               path_params: Optional[Dict[str, str]] = None,
               headers: Optional[Dict[str, str]] = None) -> "ApiRequest":
        """Build a non-idempotent POST action such as a cancellation"""
        return cls('POST', path_template, envelope, decoder,
                   path_params=path_params or {}, headers=headers or {}, body=body)

    @classmethod
    def update(cls, path_template: str, envelope: str, body: Dict[str, Any],
               decoder: Callable = _identity,
               path_params: Optional[Dict[str, str]] = None,
               headers: Optional[Dict[str, str]] = None) -> "ApiRequest":
        """Build a PUT request updating an existing resource"""
        return cls('PUT', path_template, envelope, decoder,
                   path_params=path_params or {}, headers=headers or {}, body=body)

    @classmethod
    def delete(cls, path_template: str, envelope: str, decoder: Callable = _identity,
               path_params: Optional[Dict[str, str]] = None,
               headers: Optional[Dict[str, str]] = None) -> "ApiRequest":
        """Build a DELETE request"""
        return cls('DELETE', path_template, envelope, decoder,
                   path_params=path_params or {}, headers=headers or {})

    @property
    def has_body(self) -> bool:
        return self.body is not None or self.method in self.BODY_METHODS

    @property
    def retryable(self) -> bool:
        """
        Whether failed attempts of this request may be repeated

        Plain POST actions carry no idempotency key, so the server cannot tell a
        retry from a second call and they are sent exactly once.
        """
        return self.method != 'POST' or self.idempotent_create or self.idempotency_key is not None

    def set_idempotency_key(self, key: str) -> None:
        """
        Fix the idempotency key for this request

        Raises:
            ValueError: If a different key has already been assigned
        """
        with self._key_lock:
            if self.idempotency_key is not None and self.idempotency_key != key:
                raise ValueError(
                    f"Idempotency key already set to {self.idempotency_key!r}"
                )
            self.idempotency_key = key

    def ensure_idempotency_key(self) -> Optional[str]:
        """
        Return the idempotency key for this request, generating it on first use

        Returns:
            The key to send, or None if this request does not use one
        """
        with self._key_lock:
            if self.idempotency_key is None and self.idempotent_create:
                self.idempotency_key = str(uuid.uuid4())
            return self.idempotency_key

    def request_headers(self) -> Dict[str, str]:
        """Caller headers plus the idempotency key where one applies"""
        headers = dict(self.headers)
        key = self.ensure_idempotency_key()
        if key is not None:
            headers[IDEMPOTENCY_KEY_HEADER] = key
        return headers

    def serialise_body(self) -> Optional[Dict[str, Any]]:
        """Body wrapped in its request envelope, or None if nothing is sent"""
        if not self.has_body:
            return None
        return {self.request_envelope or self.envelope: self.body or {}}

    def with_after(self, cursor: Optional[str]) -> "ApiRequest":
        """
        Copy of this request positioned after the given cursor

        Args:
            cursor: `after` cursor from the previous page, None for the first page
        """
        if cursor is None:
            query_params = {k: v for k, v in self.query_params.items() if k != 'after'}
        else:
            # Updating in place keeps the declared parameter order
            query_params = {**self.query_params, 'after': cursor}
        return replace(self, query_params=query_params)

    def conflict_request(self, resource_id: str) -> Optional["ApiRequest"]:
        """
        Build the follow-up GET used when a create collided with an existing resource

        Args:
            resource_id: Id of the resource that already exists

        Returns:
            GET request carrying this request's caller headers, or None if this
            request has no conflict handler
        """
        if self.conflict_handler is None:
            return None
        follow_up = self.conflict_handler(resource_id)
        follow_up.headers = {**self.headers, **follow_up.headers}
        return follow_up
