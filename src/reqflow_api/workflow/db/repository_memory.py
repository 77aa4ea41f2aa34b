"""
In-Memory Repository

Request store held in process memory. Used for local development, demos and tests.
"""

import asyncio
from typing import Dict
from typing import List
from typing import Optional

from loguru import logger

from reqflow_api.workflow.db.repository_base import RequestStore
from reqflow_api.workflow.db.repository_base import TransitionMutation
from reqflow_api.workflow.exceptions import InvalidTransitionError
from reqflow_api.workflow.exceptions import NotFoundError
from reqflow_api.workflow.exceptions import ValidationError
from reqflow_api.workflow.models.request import Request
from reqflow_api.workflow.models.request import RequestFilter


class InMemoryRequestStore(RequestStore):
    """
    Dict-backed request store.

    Requests are kept in insertion order and handed out as deep copies, so
    nothing outside the store can mutate stored state.
    """

    def __init__(self) -> None:
        self._requests: Dict[str, Request] = {}
        self._lock = asyncio.Lock()

    async def insert(self, request: Request) -> Request:
        async with self._lock:
            if request.id in self._requests:
                raise ValidationError(
                    f"Request {request.id} already exists",
                    errors=[{"field": "id", "msg": "already exists"}],
                )
            self._requests[request.id] = request.model_copy(deep=True)
            return request.model_copy(deep=True)

    async def get(self, request_id: str) -> Request:
        stored = self._requests.get(request_id)
        if stored is None:
            raise NotFoundError(f"Request not found: {request_id}", request_id=request_id)
        return stored.model_copy(deep=True)

    async def list(self, request_filter: Optional[RequestFilter] = None) -> List[Request]:
        request_filter = request_filter or RequestFilter()
        return [
            request.model_copy(deep=True)
            for request in list(self._requests.values())
            if request_filter.matches(request)
        ]

    async def apply_transition(
        self,
        request_id: str,
        expected_status: str,
        expected_version: int,
        mutation: TransitionMutation,
    ) -> Request:
        async with self._lock:
            stored = self._requests.get(request_id)
            if stored is None:
                raise NotFoundError(f"Request not found: {request_id}", request_id=request_id)

            if stored.status != expected_status or stored.version != expected_version:
                logger.debug(
                    "Compare-and-swap lost",
                    request_id=request_id,
                    expected_status=expected_status,
                    expected_version=expected_version,
                    current_status=stored.status,
                    current_version=stored.version,
                )
                raise InvalidTransitionError(
                    f"Request {request_id} is '{stored.status}', expected '{expected_status}'",
                    request_id=request_id,
                    current_status=stored.status,
                    action=mutation.entry.action,
                )

            updated = stored.model_copy(
                update={
                    "status": mutation.to_status,
                    "history": [*stored.history, mutation.entry],
                    "notes": mutation.notes if mutation.notes is not None else stored.notes,
                    "version": stored.version + 1,
                    "updated_at": mutation.updated_at,
                },
                deep=True,
            )
            self._requests[request_id] = updated
            return updated.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._requests)
