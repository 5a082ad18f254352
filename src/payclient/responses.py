"""
Response wrappers shared by the transport, parser and executor
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Generic, TypeVar, Mapping

from requests.structures import CaseInsensitiveDict


T = TypeVar('T')


@dataclass(frozen=True)
class HttpResponse:
    """Raw result of one transport exchange"""
    status_code: int
    body: str
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """Decoded resource together with the status code and headers it arrived with"""
    resource: T
    status_code: int
    headers: Mapping[str, str] = field(default_factory=CaseInsensitiveDict)


@dataclass(frozen=True)
class Page(Generic[T]):
    """
    One page of a cursor-paginated list

    A page without an `after` cursor is the last page.
    """
    items: Tuple[T, ...]
    before: Optional[str] = None
    after: Optional[str] = None
    limit: Optional[int] = None
    linked: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_last(self) -> bool:
        return self.after is None

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)
