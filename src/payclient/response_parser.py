"""
ResponseParser module for decoding enveloped JSON bodies and error responses
"""

import json
from typing import Dict, Any, Optional, Callable, Tuple, Mapping

from .errors import (
    ApiError, ApiErrorResponse, ErrorMapper, ErrorType, InternalApiError, MalformedResponseError,
    ResponseDecodeError
)
from .request import ApiRequest, ResponseShape
from .responses import HttpResponse, Page


class ResponseParser:
    """Decodes envelope-wrapped JSON into values, pages and typed errors"""

    ERROR_ENVELOPE = 'error'

    def parse(self, request: ApiRequest, response: HttpResponse) -> Any:
        """
        Decode a successful response according to the request's response shape

        Args:
            request: Request that produced the response
            response: Terminal 2xx response

        Returns:
            Decoded value, Page or tuple of values
        """
        if request.shape is ResponseShape.PAGE:
            return self.parse_page(response.body, request.envelope, request.decoder)
        if request.shape is ResponseShape.LIST:
            return self.parse_list(response.body, request.envelope, request.decoder)
        return self.parse_single(response.body, request.envelope, request.decoder)

    def parse_single(self, body: str, envelope: str, decoder: Callable[[Dict[str, Any]], Any]) -> Any:
        """
        Decode a single enveloped resource

        Args:
            body: Raw response body
            envelope: Name of the key wrapping the resource
            decoder: Converts the wrapped JSON object into the result type

        Returns:
            Decoded resource

        Raises:
            MalformedResponseError: If the body is not JSON
            ResponseDecodeError: If the envelope is missing or cannot be decoded
        """
        payload = self._enveloped(self._load(body), envelope, body)
        return self._decode(decoder, payload, body)

    def parse_list(self, body: str, envelope: str,
                   decoder: Callable[[Dict[str, Any]], Any]) -> Tuple[Any, ...]:
        """Decode an enveloped JSON array of resources without pagination metadata"""
        items = self._enveloped(self._load(body), envelope, body)
        if not isinstance(items, list):
            raise ResponseDecodeError(f"Envelope '{envelope}' does not contain a list", body)
        return tuple(self._decode(decoder, item, body) for item in items)

    def parse_page(self, body: str, envelope: str, decoder: Callable[[Dict[str, Any]], Any]) -> Page:
        """
        Decode one page of a cursor-paginated list

        Args:
            body: Raw response body
            envelope: Name of the key wrapping the list
            decoder: Converts each JSON object into the item type

        Returns:
            Page with items, cursors, limit and any linked resources

        Raises:
            MalformedResponseError: If the body is not JSON
            ResponseDecodeError: If the envelope or meta section is invalid
        """
        data = self._load(body)
        items = self._enveloped(data, envelope, body)
        if not isinstance(items, list):
            raise ResponseDecodeError(f"Envelope '{envelope}' does not contain a list", body)

        meta = data.get('meta') or {}
        if not isinstance(meta, dict):
            raise ResponseDecodeError("Page 'meta' section is not an object", body)
        cursors = meta.get('cursors') or {}
        if not isinstance(cursors, dict):
            raise ResponseDecodeError("Page 'meta.cursors' section is not an object", body)

        return Page(
            items=tuple(self._decode(decoder, item, body) for item in items),
            before=cursors.get('before'),
            after=cursors.get('after'),
            limit=meta.get('limit'),
            linked=dict(data.get('linked') or {})
        )

    def parse_error(self, body: str, status_code: Optional[int] = None,
                    headers: Optional[Mapping[str, str]] = None) -> ApiError:
        """
        Decode an error envelope into the matching exception

        Args:
            body: Raw response body of a non-2xx response
            status_code: HTTP status, used when the envelope omits its code
            headers: Response headers

        Returns:
            ApiError subclass instance for the caller to raise

        Raises:
            MalformedResponseError: If the body is not JSON
            ResponseDecodeError: If a non-5xx body has no error envelope
            ValueError: If the error type is not one the client knows about
        """
        data = self._load(body, status_code)
        if self.ERROR_ENVELOPE not in data and status_code is not None and status_code >= 500:
            # Proxies and load balancers answer 5xx with their own JSON bodies
            return self._internal_error(data, status_code)

        envelope = self._enveloped(data, self.ERROR_ENVELOPE, body)
        if not isinstance(envelope, dict):
            raise ResponseDecodeError("Error envelope is not an object", body)

        if not envelope.get('code') and status_code is not None:
            envelope = {**envelope, 'code': status_code}

        error = ApiErrorResponse.from_dict(envelope)
        return ErrorMapper.to_exception(error, headers)

    @staticmethod
    def _internal_error(data: Dict[str, Any], status_code: int) -> InternalApiError:
        message = data.get('message')
        if not isinstance(message, str) or not message:
            message = f"Server error (HTTP {status_code})"
        return InternalApiError(ApiErrorResponse(message=message, type=ErrorType.INTERNAL,
                                                 code=status_code))

    @staticmethod
    def _load(body: str, status_code: Optional[int] = None) -> Dict[str, Any]:
        try:
            data = json.loads(body)
        except (TypeError, ValueError):
            raise MalformedResponseError(body, status_code)

        if not isinstance(data, dict):
            raise ResponseDecodeError("Response body is not a JSON object", body)
        return data

    @staticmethod
    def _enveloped(data: Dict[str, Any], envelope: str, body: str) -> Any:
        if envelope not in data:
            raise ResponseDecodeError(f"Response is missing the '{envelope}' envelope", body)
        return data[envelope]

    @staticmethod
    def _decode(decoder: Callable[[Dict[str, Any]], Any], payload: Any, body: str) -> Any:
        try:
            return decoder(payload)
        except (KeyError, TypeError, ValueError) as e:
            raise ResponseDecodeError(f"Could not decode response: {e}", body) from e
