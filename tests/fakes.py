"""
Test doubles shared across the test suite.

ScriptedChatModel is a LangChain-compatible chat model whose answers come
from a plain function of the prompt text, so oracle behaviour is scripted
per test without network access.
"""
import asyncio
import json
from typing import Any, Callable, Dict, List, Optional

import httpx
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage
from langchain_core.outputs import ChatGeneration, ChatResult
from pydantic import Field


def keyword_responder(rules: Dict[str, str], default: str = "") -> Callable[[str], str]:
    """Answer with the value of the first rule whose key occurs in the prompt."""
    def respond(prompt: str) -> str:
        for keyword, answer in rules.items():
            if keyword in prompt:
                return answer
        return default
    return respond


# Markers of the oracle prompt templates
EVALUATION = "Are these search results good quality matches"
FALLBACK = "generate 3-5 simpler"
SUFFICIENCY = "Can you find ALL the core components"
SELECTION = "You must select the BEST"
VALIDATION = "You are a semantic validator"


class ScriptedChatModel(BaseChatModel):
    """LangChain-compatible chat model answering via a responder function."""

    responder: Callable[[str], str] = Field(default=lambda prompt: "")
    delay: float = 0.0
    fail_with: Optional[str] = None
    prompts: List[str] = Field(default_factory=list)

    @property
    def _llm_type(self) -> str:
        return "scripted-chat"

    def _answer(self, messages: List[BaseMessage]) -> ChatResult:
        prompt = str(messages[-1].content)
        self.prompts.append(prompt)
        if self.fail_with is not None:
            raise RuntimeError(self.fail_with)
        generation = ChatGeneration(message=AIMessage(content=self.responder(prompt)))
        return ChatResult(generations=[generation])

    def _generate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Optional[Any] = None,
        **kwargs: Any,
    ) -> ChatResult:
        return self._answer(messages)

    async def _agenerate(
        self,
        messages: List[BaseMessage],
        stop: Optional[List[str]] = None,
        run_manager: Optional[Any] = None,
        **kwargs: Any,
    ) -> ChatResult:
        if self.delay:
            await asyncio.sleep(self.delay)
        return self._answer(messages)

    def prompts_containing(self, marker: str) -> List[str]:
        return [prompt for prompt in self.prompts if marker in prompt]


class SearchServiceStub:
    """
    In-memory vocabulary search service behind an httpx.MockTransport.

    ``results`` maps a query to its candidates; unknown queries return none.
    """

    def __init__(self, results: Optional[Dict[str, List[str]]] = None, status_code: int = 200):
        self.results = results or {}
        self.status_code = status_code
        self.queries: List[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.queries.append(body["query"])
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"detail": "error"})
        candidates = self.results.get(body["query"], [])[: body["limit"]]
        return httpx.Response(200, json={"candidates": candidates})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
