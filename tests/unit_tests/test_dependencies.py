"""Unit tests for dependencies.py."""

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from reqflow_api.dependencies import get_actor
from reqflow_api.dependencies import get_dispatcher
from reqflow_api.dependencies import get_engine
from reqflow_api.dependencies import get_notification_log
from reqflow_api.dependencies import get_rulebook
from reqflow_api.dependencies import get_settings


class TestGetActor:
    """Tests for the session-provider identity dependency."""

    @pytest.mark.asyncio
    async def test_builds_actor(self):
        actor = await get_actor(x_actor_role=" EHS ", x_actor_name=" Drew ", x_actor_id="emp-7")

        assert actor.role == "ehs"
        assert actor.name == "Drew"
        assert actor.id == "emp-7"

    @pytest.mark.asyncio
    async def test_blank_id_becomes_none(self):
        actor = await get_actor(x_actor_role="technician", x_actor_name="Tomas", x_actor_id="  ")

        assert actor.id is None

    @pytest.mark.asyncio
    async def test_unknown_role_passes_through(self):
        """Role values are checked by the authorization gate, not here."""
        actor = await get_actor(x_actor_role="intern", x_actor_name="Ivy", x_actor_id=None)

        assert actor.role == "intern"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "role,name",
        [("", "Drew"), ("ehs", "   "), (" ", "")],
        ids=["blank_role", "blank_name", "both_blank"],
    )
    async def test_blank_identity_rejected(self, role, name):
        with pytest.raises(HTTPException) as exc_info:
            await get_actor(x_actor_role=role, x_actor_name=name, x_actor_id=None)

        assert exc_info.value.status_code == 401


class TestAppStateDependencies:
    """Tests for dependencies reading app state."""

    def test_reads_app_state(self):
        request = MagicMock()
        state = request.app.state

        assert get_settings(request) is state.settings
        assert get_engine(request) is state.engine
        assert get_rulebook(request) is state.engine.rulebook
        assert get_dispatcher(request) is state.dispatcher
        assert get_notification_log(request) is state.notification_log
