"""
Resources module with the decoded API entities needed by the core client
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, Mapping


class WireEnum(str, Enum):
    """
    Enum whose members map one-to-one onto wire strings

    Subclasses must declare an UNKNOWN member. Decoding a value the library does
    not know yet yields UNKNOWN rather than failing, so new server-side values do
    not break existing clients. Encoding UNKNOWN is refused.
    """

    @classmethod
    def from_wire(cls, value: Optional[str]) -> Optional["WireEnum"]:
        """
        Decode a wire string into a member of this enum

        Args:
            value: Wire value, possibly None

        Returns:
            The matching member, UNKNOWN for unrecognised values, None for null
        """
        if value is None:
            return None
        try:
            return cls(value)
        except ValueError:
            return cls['UNKNOWN']

    def to_wire(self) -> str:
        """
        Encode this member as its wire string

        Raises:
            ValueError: If this member is UNKNOWN
        """
        if self.name == 'UNKNOWN':
            raise ValueError(f"{type(self).__name__}.UNKNOWN has no wire representation")
        return self.value

    def __str__(self) -> str:
        return self.value


class EventResourceType(WireEnum):
    """Type of resource an event refers to"""
    BILLING_REQUESTS = "billing_requests"
    CREDITORS = "creditors"
    INSTALMENT_SCHEDULES = "instalment_schedules"
    MANDATES = "mandates"
    PAYER_AUTHORISATIONS = "payer_authorisations"
    PAYMENTS = "payments"
    PAYOUTS = "payouts"
    REFUNDS = "refunds"
    SCHEME_IDENTIFIERS = "scheme_identifiers"
    SUBSCRIPTIONS = "subscriptions"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Event:
    """An event describing a change to a resource, as delivered by webhooks and /events"""
    id: str
    created_at: Optional[str] = None
    action: Optional[str] = None
    resource_type: Optional[EventResourceType] = None
    links: Mapping[str, str] = field(default_factory=dict)
    details: Mapping[str, Any] = field(default_factory=dict)
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """
        Build an Event from its JSON representation

        Args:
            data: Decoded JSON object for a single event

        Returns:
            Event instance

        Raises:
            KeyError: If the event has no id
        """
        return cls(
            id=data['id'],
            created_at=data.get('created_at'),
            action=data.get('action'),
            resource_type=EventResourceType.from_wire(data.get('resource_type')),
            links=dict(data.get('links') or {}),
            details=dict(data.get('details') or {}),
            metadata=dict(data.get('metadata') or {})
        )
