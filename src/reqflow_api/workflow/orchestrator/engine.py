"""
Transition Engine

Creates requests and moves them through their kind's state machine.
One generic `transition` operation driven entirely by the rule book; the
store commits each transition with a compare-and-swap on (status, version).
"""

from datetime import datetime
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Union
from uuid import uuid4

from loguru import logger

from reqflow_api.workflow.authorization import actionable_statuses
from reqflow_api.workflow.authorization import allowed_actions
from reqflow_api.workflow.authorization import is_authorized
from reqflow_api.workflow.authorization import parse_role
from reqflow_api.workflow.db.repository_base import RequestStore
from reqflow_api.workflow.db.repository_base import TransitionMutation
from reqflow_api.workflow.enums import CREATE_ACTION
from reqflow_api.workflow.enums import Role
from reqflow_api.workflow.exceptions import InvalidTransitionError
from reqflow_api.workflow.exceptions import UnauthorizedError
from reqflow_api.workflow.exceptions import UnknownActionError
from reqflow_api.workflow.exceptions import ValidationError
from reqflow_api.workflow.models.request import Actor
from reqflow_api.workflow.models.request import HistoryEntry
from reqflow_api.workflow.models.request import Request
from reqflow_api.workflow.models.request import RequestFilter
from reqflow_api.workflow.models.request import utc_now
from reqflow_api.workflow.models.rulebook import TransitionRule
from reqflow_api.workflow.models.rulebook import WorkflowDefinition
from reqflow_api.workflow.notifications.dispatcher import NotificationDispatcher
from reqflow_api.workflow.notifications.messages import build_event
from reqflow_api.workflow.rulebook import RuleBook
from reqflow_api.workflow.validators.payload_validator import validate_payload

Clock = Callable[[], datetime]


def generate_request_id(prefix: str) -> str:
    """Generate a request id such as `SR-1A2B3C4D5E`."""
    return f"{prefix}-{uuid4().hex[:10].upper()}"


class RequestWorkflowEngine:
    """
    Transition engine over an explicit request store.

    Never swallows errors: every rejected operation raises a typed
    WorkflowError and leaves the store untouched. Only notification delivery
    is best-effort.
    """

    def __init__(
        self,
        store: RequestStore,
        rulebook: RuleBook,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the engine.

        Args:
            store: Request store holding current state
            rulebook: Rule table (states, transitions, authorized roles)
            dispatcher: Audit/notification dispatcher, None disables notifications
            clock: Callable returning the current UTC time (injectable for tests)
        """
        self.store = store
        self.rulebook = rulebook
        self.dispatcher = dispatcher
        self.clock = clock or utc_now

    # ════════════════════════════════════════════════════════════════════════
    # Commands
    # ════════════════════════════════════════════════════════════════════════

    async def create(
        self,
        kind: str,
        payload: Dict[str, Any],
        submitter: Actor,
        request_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Request:
        """
        Submit a new request in its kind's initial state.

        Args:
            kind: Request kind declared in the rule book
            payload: Kind-specific payload
            submitter: Actor creating the request
            request_id: Optional caller-supplied id, generated from the kind's prefix otherwise
            notes: Optional free-text notes

        Returns:
            The stored request (status = initial, one history entry, version 1)

        Raises:
            ValidationError: Unknown kind, invalid payload or duplicate id
            UnknownRoleError: Submitter role is not a known role
        """
        definition = self.rulebook.get(kind)
        if definition is None:
            raise ValidationError(
                f"Unknown request kind: '{kind}'",
                errors=[{"field": "kind", "msg": f"must be one of: {', '.join(self.rulebook.kinds)}"}],
            )

        role = parse_role(submitter.role)
        normalized_payload = validate_payload(definition, payload)

        now = self.clock()
        request = Request(
            id=(request_id or "").strip() or generate_request_id(definition.id_prefix),
            kind=kind,
            submitter_id=submitter.id or submitter.name,
            submitter_name=submitter.name,
            payload=normalized_payload,
            status=definition.initial,
            history=[
                HistoryEntry(
                    action=CREATE_ACTION,
                    actor_role=role.value,
                    actor_name=submitter.name,
                    from_status=None,
                    to_status=definition.initial,
                    timestamp=now,
                    notes=notes,
                )
            ],
            notes=notes,
            version=1,
            created_at=now,
            updated_at=now,
        )

        stored = await self.store.insert(request)
        logger.info(
            "Request submitted",
            request_id=stored.id,
            kind=kind,
            submitter=submitter.name,
            role=role.value,
        )

        await self._notify(definition, stored, None)
        return stored

    async def transition(
        self,
        request_id: str,
        action: str,
        actor: Actor,
        notes: Optional[str] = None,
    ) -> Request:
        """
        Apply an action to a request.

        Args:
            request_id: Request to act on
            action: Action name from the kind's rule table ("acknowledge", "approve", ...)
            actor: Role and identity performing the action
            notes: Optional notes, overwrite the request's notes when given

        Returns:
            The request as committed by the store

        Raises:
            NotFoundError: Request does not exist
            UnknownRoleError: Actor role is not a known role
            UnknownActionError: Action is not declared for the request's kind
            UnauthorizedError: Actor role is not listed on the action's rule
            InvalidTransitionError: Request is not in the action's source state
                (stale view, double submission, skipped step, terminal state, lost race)
        """
        request = await self.store.get(request_id)
        role = parse_role(actor.role)
        definition = self.rulebook.require(request.kind)

        rule = definition.rule_for(action)
        if rule is None:
            raise UnknownActionError(
                f"Action '{action}' is not defined for {request.kind} requests",
                request_id=request_id,
                current_status=request.status,
                action=action,
            )

        if not is_authorized(self.rulebook, request.kind, rule.from_status, rule.action, role):
            raise UnauthorizedError(
                f"Role '{role.value}' may not {rule.action} {request.kind} requests",
                request_id=request_id,
                role=role.value,
            )

        if request.status != rule.from_status:
            if definition.is_terminal(request.status):
                message = f"Request {request_id} is {request.status} and can no longer change"
            else:
                message = f"Cannot {rule.action} request {request_id}: status is '{request.status}', expected '{rule.from_status}'"
            raise InvalidTransitionError(
                message,
                request_id=request_id,
                current_status=request.status,
                action=rule.action,
            )

        now = self.clock()
        mutation = TransitionMutation(
            to_status=rule.to_status,
            entry=HistoryEntry(
                action=rule.action,
                actor_role=role.value,
                actor_name=actor.name,
                from_status=rule.from_status,
                to_status=rule.to_status,
                timestamp=now,
                notes=notes,
            ),
            notes=notes,
            updated_at=now,
        )

        updated = await self.store.apply_transition(
            request_id,
            expected_status=request.status,
            expected_version=request.version,
            mutation=mutation,
        )
        logger.info(
            "Request transitioned",
            request_id=request_id,
            kind=request.kind,
            action=rule.action,
            from_status=rule.from_status,
            to_status=rule.to_status,
            actor=actor.name,
            role=role.value,
        )

        await self._notify(definition, updated, rule)
        return updated

    # ════════════════════════════════════════════════════════════════════════
    # Queries
    # ════════════════════════════════════════════════════════════════════════

    async def get(self, request_id: str) -> Request:
        """Get a request by id (NotFoundError if missing)."""
        return await self.store.get(request_id)

    async def list(self, request_filter: Optional[RequestFilter] = None) -> List[Request]:
        """List requests, optionally filtered by status, kind or submitter."""
        return await self.store.list(request_filter)

    async def allowed_actions(self, request_id: str, role: Union[Role, str]) -> List[TransitionRule]:
        """Actions `role` may take on a request right now (empty in terminal states)."""
        request = await self.store.get(request_id)
        return allowed_actions(self.rulebook, request.kind, request.status, role)

    async def list_actionable(self, role: Union[Role, str], kind: Optional[str] = None) -> List[Request]:
        """Requests currently waiting on `role`, optionally restricted to one kind."""
        parsed = parse_role(role)
        kinds = [kind] if kind else self.rulebook.kinds

        actionable: List[Request] = []
        for k in kinds:
            statuses = actionable_statuses(self.rulebook, k, parsed)
            if not statuses:
                continue
            for request in await self.store.list(RequestFilter(kind=k)):
                if request.status in statuses:
                    actionable.append(request)
        return actionable

    async def _notify(
        self,
        definition: WorkflowDefinition,
        request: Request,
        rule: Optional[TransitionRule],
    ) -> None:
        if self.dispatcher is None:
            return
        await self.dispatcher.dispatch(build_event(definition, request, rule))
