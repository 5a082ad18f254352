"""
Services module building endpoint requests on top of the HTTP client
"""

from typing import Dict, Any, Optional, List

from .http_client import HTTPClient
from .pagination import PaginatingIterator
from .request import ApiRequest
from .resources import Event, EventResourceType
from .responses import Page


class EventService:
    """Service for listing and fetching events"""

    PATH = '/events'
    ENVELOPE = 'events'

    def __init__(self, http_client: HTTPClient):
        self.http_client = http_client

    def list_request(self, after: Optional[str] = None, before: Optional[str] = None,
                     limit: Optional[int] = None,
                     resource_type: Optional[EventResourceType] = None,
                     action: Optional[str] = None,
                     created_at: Optional[Dict[str, str]] = None,
                     include: Optional[List[str]] = None,
                     headers: Optional[Dict[str, str]] = None) -> ApiRequest:
        """
        Build the list request for events

        Args:
            after: Cursor to return the page after
            before: Cursor to return the page before
            limit: Maximum number of events per page
            resource_type: Only events about this type of resource
            action: Only events with this action, e.g. 'created'
            created_at: Range filters keyed by 'gt', 'gte', 'lt' or 'lte'
            include: Linked resource types to side-load
            headers: Extra headers sent with every page request

        Returns:
            ApiRequest for one page of events
        """
        query_params: Dict[str, Any] = {
            'action': action,
            'after': after,
            'before': before,
            'created_at': created_at,
            'include': include,
            'limit': limit,
            'resource_type': resource_type
        }
        return ApiRequest.list(self.PATH, self.ENVELOPE, Event.from_dict,
                               query_params=query_params, headers=headers)

    def list(self, **filters: Any) -> Page:
        """Return a single page of events, see list_request for the filters"""
        return self.http_client.send(self.list_request(**filters))

    def all(self, **filters: Any) -> PaginatingIterator:
        """Lazily iterate every event matching the filters across all pages"""
        return self.http_client.iterate(self.list_request(**filters))

    def get(self, identity: str, headers: Optional[Dict[str, str]] = None) -> Event:
        """
        Retrieve a single event

        Args:
            identity: Unique identifier, beginning with "EV"
            headers: Extra headers for the request
        """
        request = ApiRequest.get(f"{self.PATH}/:identity", self.ENVELOPE, Event.from_dict,
                                 path_params={'identity': identity}, headers=headers)
        return self.http_client.send(request)
