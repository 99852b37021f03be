"""Cursor pagination over GraphQL ``pageInfo``."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Mapping, Optional

from singer_sdk.pagination import BaseAPIPaginator


@dataclass(frozen=True)
class PageInfo:
    has_next_page: bool = False
    has_previous_page: bool = False
    start_cursor: Optional[str] = None
    end_cursor: Optional[str] = None

    @classmethod
    def from_dict(cls, page_info: Optional[Mapping[str, Any]]) -> "PageInfo":
        """Build from a GraphQL ``pageInfo`` object; None gives an empty page."""
        if not page_info:
            return cls()
        return cls(
            has_next_page=bool(page_info.get("hasNextPage")),
            has_previous_page=bool(page_info.get("hasPreviousPage")),
            start_cursor=page_info.get("startCursor"),
            end_cursor=page_info.get("endCursor"),
        )


class PaginatedResult:
    """One page of records and the cursors to move from it.

    Args:
        records: The model instances on this page.
        page_info: The page's PageInfo.
        fetch_page: Callable taking ``after=`` / ``before=`` cursors and
            returning the adjacent PaginatedResult.
    """

    def __init__(
        self,
        records: List[Any],
        page_info: PageInfo,
        fetch_page: Optional[Callable[..., "PaginatedResult"]] = None,
    ) -> None:
        self.records = list(records)
        self.page_info = page_info
        self._fetch_page = fetch_page

    @property
    def has_next_page(self) -> bool:
        return self.page_info.has_next_page

    @property
    def has_previous_page(self) -> bool:
        return self.page_info.has_previous_page

    def next_page(self) -> Optional["PaginatedResult"]:
        if not self.has_next_page or self._fetch_page is None:
            return None
        return self._fetch_page(after=self.page_info.end_cursor)

    def previous_page(self) -> Optional["PaginatedResult"]:
        if not self.has_previous_page or self._fetch_page is None:
            return None
        return self._fetch_page(before=self.page_info.start_cursor)

    def all_records(self) -> List[Any]:
        """Records of this page and every following page."""
        records: List[Any] = []
        page: Optional[PaginatedResult] = self
        while page is not None:
            records.extend(page.records)
            page = page.next_page()
        return records

    def __iter__(self) -> Iterator[Any]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __repr__(self) -> str:
        return f"PaginatedResult(records={len(self.records)}, page_info={self.page_info})"


class PageInfoPaginator(BaseAPIPaginator):
    """Follow ``endCursor`` while ``hasNextPage`` is true.

    ``advance`` receives the PaginatedResult of the page just read.
    """

    def __init__(self, start_value: Optional[str] = None) -> None:
        super().__init__(start_value)

    def has_more(self, response: PaginatedResult) -> bool:
        return response.page_info.has_next_page

    def get_next(self, response: PaginatedResult) -> Optional[str]:
        return response.page_info.end_cursor
