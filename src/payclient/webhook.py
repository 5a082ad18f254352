"""
Webhook module for verifying webhook signatures and decoding their events
"""

import hmac
import hashlib
import logging
from typing import List, Union

from .errors import InvalidSignatureError, MalformedResponseError
from .resources import Event
from .response_parser import ResponseParser


logger = logging.getLogger(__name__)

SIGNATURE_HEADER = 'Webhook-Signature'
EVENTS_ENVELOPE = 'events'


def _as_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode('utf-8')


class Webhook:
    """Validates that webhooks were genuinely sent by the API and parses their events"""

    @staticmethod
    def compute_signature(request_body: Union[str, bytes], webhook_endpoint_secret: str) -> str:
        """
        Compute the lowercase hex HMAC-SHA256 of a raw request body

        Args:
            request_body: Raw, unparsed request body
            webhook_endpoint_secret: Secret configured for the webhook endpoint

        Returns:
            Hex digest
        """
        return hmac.new(
            _as_bytes(webhook_endpoint_secret),
            _as_bytes(request_body),
            hashlib.sha256
        ).hexdigest()

    @staticmethod
    def is_valid_signature(request_body: Union[str, bytes], signature_header: str,
                           webhook_endpoint_secret: str) -> bool:
        """
        Check the `Webhook-Signature` header against the signature of the body

        The comparison is constant time so a mismatch does not reveal how many
        leading characters matched.

        Args:
            request_body: Raw, unparsed request body
            signature_header: Value of the `Webhook-Signature` header
            webhook_endpoint_secret: Secret configured for the webhook endpoint

        Returns:
            True if the signature matches
        """
        if not signature_header:
            return False
        computed = Webhook.compute_signature(request_body, webhook_endpoint_secret)
        return hmac.compare_digest(_as_bytes(signature_header), computed.encode('ascii'))

    @staticmethod
    def parse(request_body: Union[str, bytes], signature_header: str,
              webhook_endpoint_secret: str) -> List[Event]:
        """
        Verify a webhook and decode the events it carries

        The body is only decoded after its signature has been accepted.

        Args:
            request_body: Raw, unparsed request body
            signature_header: Value of the `Webhook-Signature` header
            webhook_endpoint_secret: Secret configured for the webhook endpoint

        Returns:
            Events included in the webhook, in delivery order

        Raises:
            InvalidSignatureError: If the signature does not match
            MalformedResponseError: If a correctly signed body is not UTF-8 encoded JSON
        """
        if not Webhook.is_valid_signature(request_body, signature_header, webhook_endpoint_secret):
            logger.warning("Rejected webhook with invalid signature")
            raise InvalidSignatureError()

        if isinstance(request_body, bytes):
            try:
                body = request_body.decode('utf-8')
            except UnicodeDecodeError as e:
                raise MalformedResponseError(repr(request_body)) from e
        else:
            body = request_body
        events = ResponseParser().parse_list(body, EVENTS_ENVELOPE, Event.from_dict)
        logger.debug(f"Parsed {len(events)} webhook event(s)")
        return list(events)
