"""Test suite for the transition engine."""

import asyncio

import pytest

from reqflow_api.workflow.db.repository_base import TransitionMutation
from reqflow_api.workflow.enums import Role
from reqflow_api.workflow.exceptions import InvalidTransitionError
from reqflow_api.workflow.exceptions import NotFoundError
from reqflow_api.workflow.exceptions import UnauthorizedError
from reqflow_api.workflow.exceptions import UnknownActionError
from reqflow_api.workflow.exceptions import UnknownRoleError
from reqflow_api.workflow.exceptions import ValidationError
from reqflow_api.workflow.models.request import Actor
from reqflow_api.workflow.models.request import HistoryEntry
from reqflow_api.workflow.models.request import RequestFilter
from reqflow_api.workflow.notifications.dispatcher import NotificationDispatcher
from reqflow_api.workflow.orchestrator.engine import RequestWorkflowEngine
from reqflow_api.workflow.orchestrator.engine import generate_request_id
from tests.consts import FUEL_PAYLOAD
from tests.consts import GENERAL_PAYLOAD
from tests.consts import MATERIAL_PAYLOAD
from tests.consts import PURCHASE_PAYLOAD
from tests.consts import SAFETY_EQUIPMENT_PAYLOAD
from tests.fixtures.workflow_fixtures import FIXED_START
from tests.fixtures.workflow_fixtures import FailingSink
from tests.fixtures.workflow_fixtures import YieldingRequestStore


class TestCreate:
    """Tests for RequestWorkflowEngine.create."""

    @pytest.mark.asyncio
    async def test_create_starts_in_initial_status(self, engine, technician):
        """A new safety equipment request is pending with one creation entry."""
        request = await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        assert request.id == "SR-100"
        assert request.status == "pending"
        assert len(request.history) == 1
        assert request.version == 1
        assert request.submitter_id == "tech-001"
        assert request.submitter_name == "Tomas Tech"

        entry = request.history[0]
        assert entry.action == "create"
        assert entry.from_status is None
        assert entry.to_status == "pending"
        assert entry.actor_role == "technician"
        assert entry.timestamp == FIXED_START
        assert request.created_at == request.updated_at == FIXED_START

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kind,payload,prefix",
        [
            ("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, "SR-"),
            ("purchase", PURCHASE_PAYLOAD, "PR-"),
            ("fuel", FUEL_PAYLOAD, "FR-"),
            ("material", MATERIAL_PAYLOAD, "MR-"),
            ("general", GENERAL_PAYLOAD, "GR-"),
        ],
        ids=["safety", "purchase", "fuel", "material", "general"],
    )
    async def test_generated_id_uses_kind_prefix(self, engine, technician, kind, payload, prefix):
        """Generated ids carry the kind's prefix."""
        request = await engine.create(kind, payload, technician)

        assert request.id.startswith(prefix)
        assert len(request.id) == len(prefix) + 10

    @pytest.mark.asyncio
    async def test_create_persists_to_store(self, engine, memory_store, technician):
        """Created request can be read back from the store."""
        request = await engine.create("purchase", PURCHASE_PAYLOAD, technician)

        stored = await memory_store.get(request.id)
        assert stored == request

    @pytest.mark.asyncio
    async def test_create_normalizes_payload(self, engine, technician):
        """Payload is normalized by the kind's schema (plate uppercased)."""
        request = await engine.create("fuel", FUEL_PAYLOAD, technician)

        assert request.payload["vehicle_plate"] == "KBX 123A"

    @pytest.mark.asyncio
    async def test_create_unknown_kind_raises_validation_error(self, engine, technician, memory_store):
        """Unknown kinds are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            await engine.create("vacation", {}, technician)

        assert exc_info.value.errors[0]["field"] == "kind"
        assert len(memory_store) == 0

    @pytest.mark.asyncio
    async def test_create_invalid_payload_raises_validation_error(self, engine, technician, memory_store):
        """Missing kind-specific fields are rejected and nothing is stored."""
        with pytest.raises(ValidationError):
            await engine.create("purchase", {"item": "Pens"}, technician)

        assert len(memory_store) == 0

    @pytest.mark.asyncio
    async def test_create_duplicate_id_raises_validation_error(self, engine, technician):
        """Caller-supplied ids must be unique."""
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        with pytest.raises(ValidationError):
            await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

    @pytest.mark.asyncio
    async def test_create_unknown_submitter_role(self, engine):
        """Submitter role must be a known role."""
        with pytest.raises(UnknownRoleError):
            await engine.create("purchase", PURCHASE_PAYLOAD, Actor(role="intern", name="Ivy"))

    @pytest.mark.asyncio
    async def test_create_dispatches_submitted_event(self, engine, technician, recording_sink):
        """Creation produces one 'submitted' audit event."""
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        assert recording_sink.messages == ["Safety equipment request SR-100 has been submitted by Tomas Tech"]
        assert recording_sink.events[0].action == "create"


class TestSafetyEquipmentScenario:
    """End-to-end safety equipment walk-through."""

    @pytest.mark.asyncio
    async def test_scenario(self, engine, technician):
        """Create, acknowledge, double-submit, wrong role, approve, skipped step."""
        # 1. create
        request = await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")
        assert request.status == "pending"
        assert len(request.history) == 1

        # 2. acknowledge
        morgan = Actor(role="implementation_manager", name="Morgan")
        request = await engine.transition("SR-100", "acknowledge", morgan)
        assert request.status == "acknowledged"
        assert len(request.history) == 2

        # 3. repeat acknowledge
        with pytest.raises(InvalidTransitionError):
            await engine.transition("SR-100", "acknowledge", morgan)

        # 4. approve by the wrong role
        with pytest.raises(UnauthorizedError):
            await engine.transition("SR-100", "approve", Actor(role="warehouse", name="Sam"))

        # 5. approve by project manager
        request = await engine.transition("SR-100", "approve", Actor(role="project_manager", name="Casey"))
        assert request.status == "approved"

        # 6. close before issue
        with pytest.raises(InvalidTransitionError):
            await engine.transition("SR-100", "close", Actor(role="ehs", name="Drew"))

        final = await engine.get("SR-100")
        assert final.status == "approved"
        assert [e.action for e in final.history] == ["create", "acknowledge", "approve"]
        assert final.version == 3

    @pytest.mark.asyncio
    async def test_full_lifecycle_to_closed(self, engine, technician, implementation_manager, project_manager, warehouse, ehs):
        """A request walks every step to closed, one history entry per step."""
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-200")

        for action, actor in [
            ("acknowledge", implementation_manager),
            ("approve", project_manager),
            ("issue", warehouse),
            ("close", ehs),
        ]:
            await engine.transition("SR-200", action, actor)

        request = await engine.get("SR-200")
        assert request.status == "closed"
        assert [e.to_status for e in request.history] == ["pending", "acknowledged", "approved", "issued", "closed"]
        assert request.entry_for("issued").actor_name == "Walt Warehouse"

        timestamps = [e.timestamp for e in request.history]
        assert timestamps == sorted(timestamps)
        assert len(set(timestamps)) == len(timestamps)


class TestGeneralRequestScenario:
    """General requests: implementation manager, project manager, finance, then logistics."""

    @pytest.mark.asyncio
    async def test_full_lifecycle_to_fulfilled(
        self, engine, technician, implementation_manager, project_manager, finance, logistics, recording_sink
    ):
        """Each step is taken by its own role and recorded in order."""
        request = await engine.create("general", GENERAL_PAYLOAD, technician)
        assert request.id.startswith("GR-")
        assert request.status == "pending"

        for action, actor in [
            ("acknowledge", implementation_manager),
            ("approve_pm", project_manager),
            ("approve_finance", finance),
            ("fulfil", logistics),
        ]:
            request = await engine.transition(request.id, action, actor)

        assert request.status == "fulfilled"
        assert [e.to_status for e in request.history] == ["pending", "acknowledged", "pm_approved", "approved", "fulfilled"]
        assert request.entry_for("approved").actor_role == "finance"
        assert recording_sink.messages[-2] == f"General request {request.id} has been approved by Fiona Finance"

    @pytest.mark.asyncio
    async def test_finance_cannot_skip_project_manager(self, engine, technician, implementation_manager, finance):
        """Finance approval waits for the project manager."""
        request = await engine.create("general", GENERAL_PAYLOAD, technician)
        await engine.transition(request.id, "acknowledge", implementation_manager)

        with pytest.raises(InvalidTransitionError) as exc_info:
            await engine.transition(request.id, "approve_finance", finance)

        assert exc_info.value.current_status == "acknowledged"

    @pytest.mark.asyncio
    async def test_pending_queues_per_role(self, engine, technician, implementation_manager, project_manager, finance):
        """Each role's queue holds the general requests waiting on that role."""
        fresh = await engine.create("general", GENERAL_PAYLOAD, technician)
        with_pm = await engine.create("general", GENERAL_PAYLOAD, technician)
        with_finance = await engine.create("general", GENERAL_PAYLOAD, technician)
        approved = await engine.create("general", GENERAL_PAYLOAD, technician)

        for request, steps in [
            (with_pm, [("acknowledge", implementation_manager)]),
            (with_finance, [("acknowledge", implementation_manager), ("approve_pm", project_manager)]),
            (
                approved,
                [("acknowledge", implementation_manager), ("approve_pm", project_manager), ("approve_finance", finance)],
            ),
        ]:
            for action, actor in steps:
                await engine.transition(request.id, action, actor)

        finance_queue = await engine.list_actionable("finance")
        logistics_queue = await engine.list_actionable("logistics", kind="general")
        pm_queue = await engine.list_actionable("project_manager", kind="general")
        im_queue = await engine.list_actionable("implementation_manager", kind="general")

        assert [r.id for r in finance_queue] == [with_finance.id]
        assert [r.id for r in logistics_queue] == [approved.id]
        assert [r.id for r in pm_queue] == [with_pm.id]
        assert [r.id for r in im_queue] == [fresh.id]


class TestTransitionChecks:
    """Tests for the order and outcome of transition checks."""

    @pytest.mark.asyncio
    async def test_missing_request_raises_not_found(self, engine, implementation_manager):
        """Unknown id raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await engine.transition("SR-404", "acknowledge", implementation_manager)

    @pytest.mark.asyncio
    async def test_unknown_role_is_unauthorized(self, engine, technician):
        """Roles outside the closed enumeration are rejected as unauthorized."""
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        with pytest.raises(UnauthorizedError) as exc_info:
            await engine.transition("SR-100", "acknowledge", Actor(role="superuser", name="Root"))

        assert isinstance(exc_info.value, UnknownRoleError)

    @pytest.mark.asyncio
    async def test_role_is_case_insensitive(self, engine, technician):
        """Role strings are normalized before lookup."""
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        request = await engine.transition("SR-100", "acknowledge", Actor(role=" Implementation_Manager ", name="Morgan"))

        assert request.status == "acknowledged"
        assert request.last_entry.actor_role == "implementation_manager"

    @pytest.mark.asyncio
    async def test_unknown_action(self, engine, technician, implementation_manager):
        """Actions not declared for the kind raise UnknownActionError (an InvalidTransitionError)."""
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        with pytest.raises(InvalidTransitionError) as exc_info:
            await engine.transition("SR-100", "reject", implementation_manager)

        assert isinstance(exc_info.value, UnknownActionError)

    @pytest.mark.asyncio
    async def test_invalid_transition_carries_current_status(self, engine, technician, ehs):
        """InvalidTransitionError reports where the request actually is."""
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        with pytest.raises(InvalidTransitionError) as exc_info:
            await engine.transition("SR-100", "close", ehs)

        assert exc_info.value.current_status == "pending"
        assert exc_info.value.action == "close"
        assert exc_info.value.request_id == "SR-100"

    @pytest.mark.asyncio
    async def test_role_outside_rule_is_unauthorized_in_any_status(self, engine, technician, recording_sink):
        """A role not listed on the action's rule is refused even before the request reaches that step."""
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        with pytest.raises(UnauthorizedError) as exc_info:
            await engine.transition("SR-100", "close", Actor(role="technician", name="Tomas Tech"))

        assert exc_info.value.role == "technician"
        assert (await engine.get("SR-100")).status == "pending"
        assert len(recording_sink.events) == 1

    @pytest.mark.asyncio
    async def test_notes_overwrite_last_writer_wins(self, engine, technician, implementation_manager, project_manager):
        """Notes given with a transition replace the request notes; omitted notes keep them."""
        await engine.create(
            "safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100", notes="urgent"
        )

        request = await engine.transition("SR-100", "acknowledge", implementation_manager, notes="seen")
        assert request.notes == "seen"
        assert request.last_entry.notes == "seen"

        request = await engine.transition("SR-100", "approve", project_manager)
        assert request.notes == "seen"
        assert request.last_entry.notes is None

    @pytest.mark.asyncio
    async def test_transition_dispatches_audit_message(self, engine, technician, recording_sink):
        """Each committed transition produces exactly one human-readable event."""
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")
        await engine.transition("SR-100", "acknowledge", Actor(role="implementation_manager", name="Morgan"))

        assert recording_sink.messages[-1] == "Safety equipment request SR-100 has been acknowledged by Morgan"
        event = recording_sink.events[-1]
        assert event.from_status == "pending"
        assert event.to_status == "acknowledged"
        assert event.actor_role == "implementation_manager"
        assert event.title == "Request Acknowledged"

    @pytest.mark.asyncio
    async def test_failed_transition_dispatches_nothing(self, engine, technician, recording_sink, warehouse):
        """Rejected transitions produce no audit event."""
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        with pytest.raises(UnauthorizedError):
            await engine.transition("SR-100", "acknowledge", warehouse)

        assert len(recording_sink.events) == 1


class TestInvariants:
    """Property-style checks over the default rule book."""

    @pytest.mark.asyncio
    async def test_unauthorized_roles_never_mutate(self, engine, rulebook, technician):
        """For every rule, every role outside its roles fails with UnauthorizedError and nothing changes."""
        payloads = {
            "safety-equipment": SAFETY_EQUIPMENT_PAYLOAD,
            "purchase": PURCHASE_PAYLOAD,
            "fuel": FUEL_PAYLOAD,
            "material": MATERIAL_PAYLOAD,
            "general": GENERAL_PAYLOAD,
        }

        for kind in rulebook.kinds:
            definition = rulebook.require(kind)
            for rule in definition.transitions:
                request = await engine.create(kind, payloads[kind], technician)
                # drive the request to the rule's source state along authorized rules
                path = _path_to(definition, rule.from_status)
                for step in path:
                    await engine.transition(request.id, step.action, Actor(role=step.roles[0].value, name="Setup"))

                before = await engine.get(request.id)
                for role in Role:
                    if role in rule.roles:
                        continue
                    with pytest.raises(UnauthorizedError):
                        await engine.transition(request.id, rule.action, Actor(role=role.value, name="Nope"))

                after = await engine.get(request.id)
                assert after == before

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kind,payload,path",
        [
            ("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, ["acknowledge", "approve", "issue", "close"]),
            ("purchase", PURCHASE_PAYLOAD, ["approve", "complete"]),
            ("purchase", PURCHASE_PAYLOAD, ["reject"]),
            ("fuel", FUEL_PAYLOAD, ["approve", "complete"]),
            ("fuel", FUEL_PAYLOAD, ["reject"]),
            ("material", MATERIAL_PAYLOAD, ["approve", "prepare", "deliver"]),
            ("general", GENERAL_PAYLOAD, ["acknowledge", "approve_pm", "approve_finance", "fulfil"]),
        ],
        ids=[
            "safety_closed",
            "purchase_completed",
            "purchase_rejected",
            "fuel_completed",
            "fuel_rejected",
            "material_delivered",
            "general_fulfilled",
        ],
    )
    async def test_terminal_absorption(self, engine, rulebook, technician, kind, payload, path):
        """Once terminal, no action by any role succeeds."""
        definition = rulebook.require(kind)
        request = await engine.create(kind, payload, technician)
        for action in path:
            rule = definition.rule_for(action)
            request = await engine.transition(request.id, action, Actor(role=rule.roles[0].value, name="Setup"))

        assert definition.is_terminal(request.status)

        for rule in definition.transitions:
            for role in Role:
                with pytest.raises((InvalidTransitionError, UnauthorizedError)):
                    await engine.transition(request.id, rule.action, Actor(role=role.value, name="Late"))

        final = await engine.get(request.id)
        assert final.status == request.status
        assert len(final.history) == len(path) + 1

    @pytest.mark.asyncio
    async def test_status_always_declared(self, engine, rulebook, technician, procurement):
        """Every stored request's status belongs to its kind's declared states."""
        a = await engine.create("purchase", PURCHASE_PAYLOAD, technician)
        await engine.create("material", MATERIAL_PAYLOAD, technician)
        await engine.transition(a.id, "approve", procurement)

        for request in await engine.list():
            assert request.status in rulebook.require(request.kind).states

    @pytest.mark.asyncio
    async def test_rejection_only_for_purchase_and_fuel(self, engine, technician, implementation_manager, warehouse):
        """Safety equipment and material requests have no reject action."""
        safety = await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician)
        material = await engine.create("material", MATERIAL_PAYLOAD, technician)

        with pytest.raises(UnknownActionError):
            await engine.transition(safety.id, "reject", implementation_manager)
        with pytest.raises(UnknownActionError):
            await engine.transition(material.id, "reject", warehouse)

    @pytest.mark.asyncio
    async def test_purchase_cannot_be_rejected_after_approval(self, engine, technician, procurement):
        """Rejection is only reachable from pending."""
        request = await engine.create("purchase", PURCHASE_PAYLOAD, technician)
        await engine.transition(request.id, "approve", procurement)

        with pytest.raises(InvalidTransitionError):
            await engine.transition(request.id, "reject", procurement)


class TestConcurrency:
    """Racing transitions on the same request."""

    @pytest.mark.asyncio
    async def test_exactly_one_racing_transition_wins(self, rulebook, technician):
        """Two acknowledgements read the same pending request; the store commits one and refuses the other."""
        store = YieldingRequestStore()
        engine = RequestWorkflowEngine(store, rulebook)
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        results = await asyncio.gather(
            engine.transition("SR-100", "acknowledge", Actor(role="implementation_manager", name="A")),
            engine.transition("SR-100", "acknowledge", Actor(role="implementation_manager", name="B")),
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert isinstance(failures[0], InvalidTransitionError)
        assert failures[0].current_status == "acknowledged"
        # both callers passed the engine checks and reached the store
        assert store.commit_attempts == 2

        request = await engine.get("SR-100")
        assert len(request.history) == 2
        assert request.version == 2

    @pytest.mark.asyncio
    async def test_stale_version_loses(self, memory_store, rulebook, technician, implementation_manager):
        """A transition computed from a stale read is refused by the store."""
        engine = RequestWorkflowEngine(memory_store, rulebook)
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")
        stale = await memory_store.get("SR-100")
        await engine.transition("SR-100", "acknowledge", implementation_manager)

        mutation = TransitionMutation(
            to_status="acknowledged",
            entry=HistoryEntry(
                action="acknowledge",
                actor_role="implementation_manager",
                actor_name="Late",
                from_status="pending",
                to_status="acknowledged",
                timestamp=FIXED_START,
            ),
            updated_at=FIXED_START,
        )
        with pytest.raises(InvalidTransitionError):
            await memory_store.apply_transition("SR-100", stale.status, stale.version, mutation)


class TestNotificationFailures:
    """Sink failures never unwind a committed transition."""

    @pytest.mark.asyncio
    async def test_sink_failure_keeps_transition(self, memory_store, rulebook, technician, implementation_manager):
        """A failing sink is parked for retry while the transition stays committed."""
        failing = FailingSink(failures=2)
        dispatcher = NotificationDispatcher([failing])
        engine = RequestWorkflowEngine(memory_store, rulebook, dispatcher=dispatcher)

        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")
        request = await engine.transition("SR-100", "acknowledge", implementation_manager)

        assert request.status == "acknowledged"
        assert (await memory_store.get("SR-100")).status == "acknowledged"
        assert len(dispatcher.failed) == 2

        delivered = await dispatcher.retry_failed()
        assert delivered == 2
        assert dispatcher.failed == []
        assert len(failing.events) == 2

    @pytest.mark.asyncio
    async def test_engine_without_dispatcher(self, memory_store, rulebook, technician, implementation_manager):
        """Notifications are optional."""
        engine = RequestWorkflowEngine(memory_store, rulebook)
        await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician, request_id="SR-100")

        request = await engine.transition("SR-100", "acknowledge", implementation_manager)

        assert request.status == "acknowledged"


class TestQueries:
    """Tests for list, allowed_actions and list_actionable."""

    @pytest.mark.asyncio
    async def test_list_filters(self, engine, technician, procurement):
        """List filters by status and kind."""
        purchase = await engine.create("purchase", PURCHASE_PAYLOAD, technician)
        await engine.create("fuel", FUEL_PAYLOAD, technician)
        await engine.transition(purchase.id, "approve", procurement)

        approved = await engine.list(RequestFilter(status="approved"))
        fuel = await engine.list(RequestFilter(kind="fuel"))

        assert [r.id for r in approved] == [purchase.id]
        assert [r.kind for r in fuel] == ["fuel"]
        assert len(await engine.list()) == 2

    @pytest.mark.asyncio
    async def test_allowed_actions(self, engine, technician):
        """Allowed actions depend on status and role."""
        request = await engine.create("purchase", PURCHASE_PAYLOAD, technician)

        procurement_actions = await engine.allowed_actions(request.id, "procurement")
        technician_actions = await engine.allowed_actions(request.id, Role.TECHNICIAN)

        assert [r.action for r in procurement_actions] == ["approve", "reject"]
        assert technician_actions == []

    @pytest.mark.asyncio
    async def test_list_actionable(self, engine, technician, implementation_manager):
        """Each role sees only requests waiting on it."""
        first = await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician)
        second = await engine.create("safety-equipment", SAFETY_EQUIPMENT_PAYLOAD, technician)
        await engine.create("purchase", PURCHASE_PAYLOAD, technician)
        await engine.transition(first.id, "acknowledge", implementation_manager)

        im_queue = await engine.list_actionable("implementation_manager")
        pm_queue = await engine.list_actionable("project_manager")
        procurement_queue = await engine.list_actionable("procurement", kind="purchase")
        warehouse_queue = await engine.list_actionable("warehouse", kind="safety-equipment")

        assert [r.id for r in im_queue] == [second.id]
        assert [r.id for r in pm_queue] == [first.id]
        assert len(procurement_queue) == 1
        assert warehouse_queue == []


def test_generate_request_id():
    """Generated ids are prefix + 10 uppercase hex characters."""
    request_id = generate_request_id("SR")

    prefix, suffix = request_id.split("-")
    assert prefix == "SR"
    assert len(suffix) == 10
    assert suffix == suffix.upper()
    int(suffix, 16)


def _path_to(definition, target_status):
    """Shortest chain of rules from the initial status to `target_status`."""
    frontier = [(definition.initial, [])]
    seen = {definition.initial}
    while frontier:
        status, path = frontier.pop(0)
        if status == target_status:
            return path
        for rule in definition.rules_from(status):
            if rule.to_status not in seen:
                seen.add(rule.to_status)
                frontier.append((rule.to_status, path + [rule]))
    raise AssertionError(f"{target_status} unreachable")
