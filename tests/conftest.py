"""
Shared fixtures for oracle-backed components.
"""
import pytest

from tag_autocompletion.config import TagAutocompletionConfig
from tag_autocompletion.coordination import OperationRegistry
from tag_autocompletion.oracle import OracleSession, TagOracle
from fakes import ScriptedChatModel


@pytest.fixture
def fast_config():
    """Enabled configuration without pauses or settle delays."""
    return TagAutocompletionConfig(
        enabled=True,
        profile_name="tagger",
        selection_pause=0,
        batch_pause=0,
        profile_settle_delay=0,
        lease_poll_interval=0.01,
        lease_wait_timeout=1.0,
        drain_timeout=0.5,
    )


@pytest.fixture
def make_session():
    """Build an OracleSession around a ScriptedChatModel."""
    def factory(responder=None, fail_with=None):
        llm = ScriptedChatModel(responder=responder or (lambda prompt: ""), fail_with=fail_with)
        session = OracleSession(TagOracle(llm), OperationRegistry())
        return session, llm
    return factory
