"""
Request Repository

PostgreSQL-backed request store. Current state lives in reqflow.requests,
every transition appends a row to reqflow.request_history in the same transaction.
"""

import json
from collections import defaultdict
from typing import Any
from typing import Dict
from typing import List
from typing import Mapping
from typing import Optional

import asyncpg
from loguru import logger

from reqflow_api.workflow.db.repository_base import RequestStore
from reqflow_api.workflow.db.repository_base import TransitionMutation
from reqflow_api.workflow.exceptions import InvalidTransitionError
from reqflow_api.workflow.exceptions import NotFoundError
from reqflow_api.workflow.exceptions import ValidationError
from reqflow_api.workflow.models.request import HistoryEntry
from reqflow_api.workflow.models.request import Request
from reqflow_api.workflow.models.request import RequestFilter

_REQUEST_COLUMNS = (
    "request_id, kind, submitter_id, submitter_name, payload, status, notes, version, created_at, updated_at"
)
_HISTORY_COLUMNS = "request_id, seq, action, actor_role, actor_name, from_status, to_status, timestamp, notes"


def _decode_payload(value: Any) -> Dict[str, Any]:
    """asyncpg returns JSONB as text unless a codec is registered."""
    if value is None:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


def _row_to_entry(row: Mapping[str, Any]) -> HistoryEntry:
    return HistoryEntry(
        action=row["action"],
        actor_role=row["actor_role"],
        actor_name=row["actor_name"],
        from_status=row["from_status"],
        to_status=row["to_status"],
        timestamp=row["timestamp"],
        notes=row["notes"],
    )


def _row_to_request(row: Mapping[str, Any], history_rows: List[Mapping[str, Any]]) -> Request:
    return Request(
        id=row["request_id"],
        kind=row["kind"],
        submitter_id=row["submitter_id"],
        submitter_name=row["submitter_name"],
        payload=_decode_payload(row["payload"]),
        status=row["status"],
        notes=row["notes"],
        version=row["version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        history=[_row_to_entry(h) for h in history_rows],
    )


class PostgresRequestStore(RequestStore):
    """
    Request store on the workflow domain database.

    Optimistic concurrency: a transition is a single
    `UPDATE ... WHERE status = $expected AND version = $expected` inside a
    transaction. No internal retry loop - losing callers get InvalidTransitionError.
    """

    def __init__(self, pool):
        """
        Initialize request store.

        Args:
            pool: DomainDBPool or asyncpg pool (anything exposing acquire())
        """
        self.pool = pool

    async def insert(self, request: Request) -> Request:
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                inserted = await conn.fetchval(
                    f"""
                    INSERT INTO reqflow.requests ({_REQUEST_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                    ON CONFLICT (request_id) DO NOTHING
                    RETURNING request_id
                    """,
                    request.id,
                    request.kind,
                    request.submitter_id,
                    request.submitter_name,
                    json.dumps(request.payload, default=str),
                    request.status,
                    request.notes,
                    request.version,
                    request.created_at,
                    request.updated_at,
                )
                if inserted is None:
                    raise ValidationError(
                        f"Request {request.id} already exists",
                        errors=[{"field": "id", "msg": "already exists"}],
                    )

                for seq, entry in enumerate(request.history, start=1):
                    await self._insert_history(conn, request.id, seq, entry)

        logger.debug("Request inserted", request_id=request.id, kind=request.kind)
        return request

    async def get(self, request_id: str) -> Request:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_REQUEST_COLUMNS} FROM reqflow.requests WHERE request_id = $1",
                request_id,
            )
            if row is None:
                raise NotFoundError(f"Request not found: {request_id}", request_id=request_id)

            history_rows = await conn.fetch(
                f"SELECT {_HISTORY_COLUMNS} FROM reqflow.request_history WHERE request_id = $1 ORDER BY seq",
                request_id,
            )
            return _row_to_request(row, history_rows)

    async def list(self, request_filter: Optional[RequestFilter] = None) -> List[Request]:
        request_filter = request_filter or RequestFilter()

        clauses: List[str] = []
        params: List[Any] = []
        for column, value in (
            ("status", request_filter.status),
            ("kind", request_filter.kind),
            ("submitter_id", request_filter.submitter_id),
        ):
            if value is not None:
                params.append(value)
                clauses.append(f"{column} = ${len(params)}")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT {_REQUEST_COLUMNS} FROM reqflow.requests {where} ORDER BY seq",
                *params,
            )
            if not rows:
                return []

            history_rows = await conn.fetch(
                f"""
                SELECT {_HISTORY_COLUMNS} FROM reqflow.request_history
                WHERE request_id = ANY($1::text[])
                ORDER BY request_id, seq
                """,
                [row["request_id"] for row in rows],
            )

        history_by_request: Dict[str, List[Mapping[str, Any]]] = defaultdict(list)
        for h in history_rows:
            history_by_request[h["request_id"]].append(h)

        return [_row_to_request(row, history_by_request[row["request_id"]]) for row in rows]

    async def apply_transition(
        self,
        request_id: str,
        expected_status: str,
        expected_version: int,
        mutation: TransitionMutation,
    ) -> Request:
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                row = await conn.fetchrow(
                    f"""
                    UPDATE reqflow.requests
                    SET status = $4,
                        notes = COALESCE($5, notes),
                        version = version + 1,
                        updated_at = $6
                    WHERE request_id = $1 AND status = $2 AND version = $3
                    RETURNING {_REQUEST_COLUMNS}
                    """,
                    request_id,
                    expected_status,
                    expected_version,
                    mutation.to_status,
                    mutation.notes,
                    mutation.updated_at,
                )

                if row is None:
                    current = await conn.fetchrow(
                        "SELECT status, version FROM reqflow.requests WHERE request_id = $1",
                        request_id,
                    )
                    if current is None:
                        raise NotFoundError(f"Request not found: {request_id}", request_id=request_id)
                    raise InvalidTransitionError(
                        f"Request {request_id} is '{current['status']}', expected '{expected_status}'",
                        request_id=request_id,
                        current_status=current["status"],
                        action=mutation.entry.action,
                    )

                await self._insert_history(conn, request_id, row["version"], mutation.entry)

                history_rows = await conn.fetch(
                    f"SELECT {_HISTORY_COLUMNS} FROM reqflow.request_history WHERE request_id = $1 ORDER BY seq",
                    request_id,
                )

        return _row_to_request(row, history_rows)

    async def health_check(self) -> bool:
        health_check = getattr(self.pool, "health_check", None)
        if health_check is None:
            return True
        return await health_check()

    async def _insert_history(
        self,
        conn: asyncpg.Connection,
        request_id: str,
        seq: int,
        entry: HistoryEntry,
    ) -> None:
        await conn.execute(
            f"""
            INSERT INTO reqflow.request_history ({_HISTORY_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            """,
            request_id,
            seq,
            entry.action,
            entry.actor_role,
            entry.actor_name,
            entry.from_status,
            entry.to_status,
            entry.timestamp,
            entry.notes,
        )
