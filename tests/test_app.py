"""
Tests for the public application facade and the host event hook.
"""
import asyncio
from unittest.mock import patch

import pytest

from tag_autocompletion.app import TagAutocompletionApp
from tag_autocompletion.coordination import InMemoryProfileSwitch, LeaseState
from tag_autocompletion.exceptions import AppNotInitializedError, ConfigurationError
from tag_autocompletion.models import GenerationMode
from tag_autocompletion.schemas import PromptProcessingEvent
from tag_autocompletion.search import TagSearchClient
from fakes import EVALUATION, SELECTION, VALIDATION, ScriptedChatModel, SearchServiceStub, keyword_responder


@pytest.fixture
def stub():
    return SearchServiceStub({
        "blonde_hair": ["blonde hair"],
        "padded_room": ["padded walls", "room"],
    })


@pytest.fixture
def llm():
    return ScriptedChatModel(responder=keyword_responder({
        EVALUATION: "YES",
        SELECTION: "padded walls",
        VALIDATION: "VALID",
    }))


@pytest.fixture
def switch():
    return InMemoryProfileSwitch(["default", "tagger"], active="default")


@pytest.fixture
def app(fast_config, switch, stub, llm):
    app = TagAutocompletionApp(
        fast_config,
        switch,
        search_client=TagSearchClient(fast_config.api_endpoint, client=stub.client()),
        llm=llm,
    )
    app.initialize()
    return app


class TestInitialization:
    """Tests for app wiring."""

    def test_use_before_initialize_raises(self, fast_config, switch):
        app = TagAutocompletionApp(fast_config, switch, llm=ScriptedChatModel())

        with pytest.raises(AppNotInitializedError):
            asyncio.run(app.correct_prompt("smile", GenerationMode.FREE))

    def test_initialize_builds_llm_from_config(self, fast_config, switch):
        """Test that the LLM factory is used when no model is injected."""
        with patch("tag_autocompletion.app.get_llm_instance", return_value=ScriptedChatModel()) as factory:
            app = TagAutocompletionApp(fast_config, switch)
            app.initialize()
            app.initialize()

        factory.assert_called_once_with(provider="groq", model="llama-3.1-8b-instant")
        assert app.initialized

    def test_debug_raises_package_log_level(self, fast_config, switch):
        import logging

        fast_config.debug = True
        TagAutocompletionApp(fast_config, switch, llm=ScriptedChatModel()).initialize()

        assert logging.getLogger("tag_autocompletion").level == logging.DEBUG
        logging.getLogger("tag_autocompletion").setLevel(logging.NOTSET)


class TestCorrectPrompt:
    """Tests for TagAutocompletionApp.correct_prompt."""

    def test_corrects_prompt(self, app):
        result = asyncio.run(app.correct_prompt("blonde_hair, padded_room", GenerationMode.FREE))

        assert result == "blonde hair, padded walls"
        assert app.status()["oracle_calls"] == 3


class TestPromptProcessingEvent:
    """Tests for the host event hook."""

    def test_replaces_prompt_in_place(self, app, switch):
        event = PromptProcessingEvent(prompt="blonde_hair, padded_room", generation_type=6)

        asyncio.run(app.on_prompt_processing(event))

        assert event.prompt == "blonde hair, padded walls"
        assert app.lease_manager.state == LeaseState.IDLE
        assert app.registries.active_count == 0
        assert len(app.registries) == 0
        assert asyncio.run(switch.get_active()) == "default"

    def test_disabled_leaves_event_untouched(self, app, stub):
        app.set_enabled(False)
        event = PromptProcessingEvent(prompt="padded_room", generation_type=6)

        asyncio.run(app.on_prompt_processing(event))

        assert event.prompt == "padded_room"
        assert stub.queries == []

    def test_never_raises(self, fast_config, switch):
        app = TagAutocompletionApp(fast_config, switch, llm=ScriptedChatModel())
        event = PromptProcessingEvent(prompt="padded_room", generation_type=6)

        asyncio.run(app.on_prompt_processing(event))

        assert event.prompt == "padded_room"

    def test_empty_prompt_is_ignored(self, app, stub):
        event = PromptProcessingEvent(prompt=None)

        asyncio.run(app.on_prompt_processing(event))

        assert event.prompt is None
        assert stub.queries == []

    def test_idle_wait_is_bounded(self, app):
        """Test that the hook waits for the lease no longer than the wait and drain bounds."""
        event = PromptProcessingEvent(prompt="padded_room", generation_type=6)

        with patch.object(
            app.lease_manager, "wait_until_idle", wraps=app.lease_manager.wait_until_idle
        ) as wait:
            asyncio.run(app.on_prompt_processing(event))

        wait.assert_awaited_once_with(max_wait=1.5)


class TestDiagnostics:
    """Tests for toggles and diagnostics."""

    def test_enabling_requires_profile(self, fast_config):
        app = TagAutocompletionApp(fast_config, InMemoryProfileSwitch(["default"]), llm=ScriptedChatModel())

        assert not app.check_profile()
        with pytest.raises(ConfigurationError):
            app.set_enabled(True)

    def test_enabling_with_profile(self, app):
        app.set_enabled(False)
        app.set_enabled(True)

        assert app.config.enabled
        assert app.check_profile()

    def test_check_connection(self, app, stub):
        result = asyncio.run(app.check_connection())

        assert result.ok
        assert stub.queries == ["blonde_hair"]

    def test_reset_all_operations(self, app):
        app.registries.open().start("select_stuck")
        app.lease_manager._in_progress = True

        app.reset_all_operations()

        status = app.status()
        assert status["active_operations"] == []
        assert status["lease"]["in_progress"] is False
