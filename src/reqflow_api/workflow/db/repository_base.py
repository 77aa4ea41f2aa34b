"""
Base Repository

Abstract request store shared by the in-memory and PostgreSQL implementations.
The transition engine is the only caller of `apply_transition`.
"""

from abc import ABC
from abc import abstractmethod
from datetime import datetime
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict

from reqflow_api.workflow.models.request import HistoryEntry
from reqflow_api.workflow.models.request import Request
from reqflow_api.workflow.models.request import RequestFilter


class TransitionMutation(BaseModel):
    """State change the engine asks the store to commit atomically."""

    model_config = ConfigDict(frozen=True)

    to_status: str
    entry: HistoryEntry
    notes: Optional[str] = None  # None keeps the current notes
    updated_at: datetime


class RequestStore(ABC):
    """
    Collection of requests keyed by id.

    Implementations must make `apply_transition` a single compare-and-swap on
    (status, version): of two racing callers only the one whose expectation
    still holds at apply time commits, the other gets InvalidTransitionError.
    """

    @abstractmethod
    async def insert(self, request: Request) -> Request:
        """
        Insert a newly created request.

        Raises:
            ValidationError: If a request with the same id already exists
        """

    @abstractmethod
    async def get(self, request_id: str) -> Request:
        """
        Get a request by id.

        Raises:
            NotFoundError: If the request does not exist
        """

    @abstractmethod
    async def list(self, request_filter: Optional[RequestFilter] = None) -> List[Request]:
        """List requests in insertion order, optionally filtered by status, kind or submitter."""

    @abstractmethod
    async def apply_transition(
        self,
        request_id: str,
        expected_status: str,
        expected_version: int,
        mutation: TransitionMutation,
    ) -> Request:
        """
        Commit a transition if the request is still in `expected_status` at `expected_version`.

        Returns:
            The updated request

        Raises:
            NotFoundError: If the request does not exist
            InvalidTransitionError: If status or version moved since the caller read it
        """

    async def health_check(self) -> bool:
        """Check whether the backing storage is reachable."""
        return True
