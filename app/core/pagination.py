from fastapi import Query

from app.repositories.base import DEFAULT_LIST_LIMIT

MAX_LIST_LIMIT = 500


class PaginationParams:
    def __init__(
        self,
        limit: int = Query(
            default=DEFAULT_LIST_LIMIT,
            ge=1,
            le=MAX_LIST_LIMIT,
            description="Number of items to return",
        ),
        offset: int = Query(default=0, ge=0, description="Number of items to skip"),
    ) -> None:
        self.limit = limit
        self.offset = offset
