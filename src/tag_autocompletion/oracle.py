"""
Generative oracle access.

TagOracle wraps a LangChain chat model and makes each call cancellable
through a CancellationToken. OracleSession binds the oracle to the
OperationRegistry of one resolution run.
"""
import asyncio
import logging
from typing import Any, List, Optional

from langchain_core.callbacks import BaseCallbackHandler
from langchain_core.messages import HumanMessage

from .coordination.cancellation import CancellationToken
from .coordination.operation_registry import OperationRegistry
from .exceptions import OracleCancelledError, OracleError

logger = logging.getLogger(__name__)


def _message_text(result: Any) -> str:
    """Extract plain text from a chat model result."""
    if isinstance(result, str):
        return result

    content = getattr(result, "content", result)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return str(content)


class TagOracle:
    """Text-completion capability backed by a LangChain chat model."""

    def __init__(self, llm: Any, callbacks: Optional[List[BaseCallbackHandler]] = None):
        """
        :param llm: Chat model exposing ``ainvoke`` (e.g. ChatGroq, ChatOpenAI)
        :param callbacks: LangChain callbacks attached to every call
        """
        self._llm = llm
        self._callbacks = callbacks or []

    async def complete(self, prompt: str, token: Optional[CancellationToken] = None) -> str:
        """
        Run one prompt through the model.

        :raises OracleCancelledError: The token was cancelled mid-call
        :raises OracleError: The model call failed
        """
        config = {"callbacks": self._callbacks} if self._callbacks else None
        task = asyncio.ensure_future(
            self._llm.ainvoke([HumanMessage(content=prompt)], config=config)
        )
        if token is not None:
            token.attach(task)

        try:
            result = await task
        except asyncio.CancelledError:
            if token is not None and token.cancelled:
                raise OracleCancelledError("Oracle call cancelled") from None
            raise
        except Exception as exc:
            raise OracleError(f"Oracle call failed: {exc}") from exc

        return _message_text(result)


class OracleSession:
    """Registers every oracle call of a run in its OperationRegistry."""

    def __init__(self, oracle: TagOracle, registry: OperationRegistry):
        self.oracle = oracle
        self.registry = registry

    async def ask(self, operation_name: str, prompt: str) -> str:
        token = CancellationToken()
        operation_id = self.registry.start(operation_name, token)
        try:
            answer = await self.oracle.complete(prompt, token)
            logger.debug(f"Oracle answer for {operation_id}: {answer[:200]!r}")
            return answer
        finally:
            self.registry.end(operation_id)
