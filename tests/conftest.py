import io
from typing import Callable, List, Optional

import pytest
from langchain_core.messages import AIMessage, BaseMessage

from rollchat.llm import LLMService, PromptManager
from rollchat.memory import ConversationMemoryService, Summarizer
from rollchat.utils.config_parser import PROMPTS_DIR
from rollchat.workflows.orchestrator import ChatOrchestrator


class StubChatClient:
    """Stands in for a LangChain chat model: records every call and replies from a script."""

    def __init__(self, prefix: str = "reply", fail_on: Optional[set] = None, on_invoke: Optional[Callable] = None):
        self.prefix = prefix
        self.fail_on = fail_on or set()
        self.on_invoke = on_invoke
        self.calls: List[List[BaseMessage]] = []

    def invoke(self, messages):
        self.calls.append(list(messages))
        if self.on_invoke is not None:
            self.on_invoke()
        if len(self.calls) in self.fail_on:
            raise RuntimeError("service unavailable")
        return AIMessage(content=f"{self.prefix} {len(self.calls)}")


class ScriptedReader:
    """Feeds lines to the orchestrator, then signals end of input."""

    def __init__(self, lines: List[str], then: Optional[BaseException] = None):
        self._lines = list(lines)
        self._then = then
        self.reads = 0

    def __call__(self) -> Optional[str]:
        self.reads += 1
        if self._lines:
            return self._lines.pop(0)
        if self._then is not None:
            raise self._then
        return None


def make_summarizer(client) -> Summarizer:
    prompt_manager = PromptManager(PROMPTS_DIR)
    system_prompt, user_prompt = prompt_manager.get_standard_prompts("summarizer")
    llm_service = LLMService(client, system_prompt_template=system_prompt, human_prompt_template=user_prompt)
    return Summarizer(llm_service, update_prompt_template=prompt_manager.load_prompt("summarizer", "update.prompt"))


@pytest.fixture
def chat_client() -> StubChatClient:
    return StubChatClient()


@pytest.fixture
def summary_client() -> StubChatClient:
    return StubChatClient(prefix="summary")


@pytest.fixture
def memory(summary_client) -> ConversationMemoryService:
    return ConversationMemoryService(summarizer=make_summarizer(summary_client))


@pytest.fixture
def orchestrator(memory, chat_client) -> ChatOrchestrator:
    return ChatOrchestrator(
        memory=memory,
        chat_llm=LLMService(chat_client),
        model_name="test-model",
        out=io.StringIO(),
        err=io.StringIO(),
    )


def fill_exchanges(memory: ConversationMemoryService, count: int) -> None:
    for i in range(count):
        memory.add_message(role="user", content=f"u{i}")
        memory.add_message(role="assistant", content=f"a{i}")
