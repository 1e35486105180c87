import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from conftest import StubChatClient, fill_exchanges, make_summarizer
from rollchat.errors import SummarizationError
from rollchat.memory import ConversationMemoryService
from rollchat.models import ChatMessage


EXCHANGE = [
    ChatMessage(role="user", content="My name is Ada."),
    ChatMessage(role="assistant", content="Nice to meet you, Ada."),
]


def test_fresh_summary_asks_for_a_short_digest(summary_client) -> None:
    text = make_summarizer(summary_client).summarize(None, EXCHANGE)

    assert text == "summary 1"
    system, user = summary_client.calls[0]
    assert isinstance(system, SystemMessage)
    assert "summarizing a conversation" in system.content
    assert isinstance(user, HumanMessage)
    assert "under 200 words" in user.content
    assert "user: My name is Ada.\nassistant: Nice to meet you, Ada." in user.content
    assert "Current summary" not in user.content


def test_existing_summary_is_extended_not_recompressed(summary_client) -> None:
    make_summarizer(summary_client).summarize("Ada introduced herself.", EXCHANGE)

    user = summary_client.calls[0][-1]
    assert user.content.startswith("Current summary:\nAda introduced herself.")
    assert "retain as much information as possible" in user.content
    assert "user: My name is Ada." in user.content


def test_remote_failure_becomes_summarization_error() -> None:
    summarizer = make_summarizer(StubChatClient(fail_on={1}))
    with pytest.raises(SummarizationError):
        summarizer.summarize(None, EXCHANGE)


def test_empty_text_becomes_summarization_error() -> None:
    class BlankClient:
        def invoke(self, messages):
            return AIMessage(content="   ")

    with pytest.raises(SummarizationError):
        make_summarizer(BlankClient()).summarize("prior", EXCHANGE)


def test_no_summary_while_the_log_fits(memory, summary_client) -> None:
    fill_exchanges(memory, 10)
    assert memory.pending_summary_input() is None
    assert memory.update_summary_if_needed() is False
    assert summary_client.calls == []


def test_first_summary_covers_everything_before_the_window(memory, summary_client) -> None:
    fill_exchanges(memory, 14)
    log = memory.log

    assert memory.update_summary_if_needed() is True

    assert memory.summary.text == "summary 1"
    assert memory.summary.covered == len(log) - 20
    sent = summary_client.calls[0][-1].content
    for message in log.slice(0, len(log) - 20):
        assert message.as_line() in sent
    assert log.slice(len(log) - 20, len(log))[0].as_line() not in sent


def test_later_summaries_take_exactly_the_exchange_that_fell_out(memory, summary_client) -> None:
    fill_exchanges(memory, 11)
    memory.update_summary_if_needed()

    fill_exchanges(memory, 1)
    log = memory.log
    assert memory.pending_summary_input() == log.slice(len(log) - 22, len(log) - 20)

    memory.update_summary_if_needed()
    merge_prompt = summary_client.calls[1][-1].content
    assert merge_prompt.startswith("Current summary:\nsummary 1")
    assert memory.summary.text == "summary 2"
    assert memory.summary.covered == len(log) - 20


def test_failed_update_keeps_summary_and_is_caught_up_next_time() -> None:
    client = StubChatClient(prefix="summary", fail_on={2})
    memory = ConversationMemoryService(summarizer=make_summarizer(client))
    fill_exchanges(memory, 11)
    memory.update_summary_if_needed()

    fill_exchanges(memory, 1)
    with pytest.raises(SummarizationError):
        memory.update_summary_if_needed()
    assert memory.summary.text == "summary 1"
    assert memory.summary.covered == 2

    fill_exchanges(memory, 1)
    pending = memory.pending_summary_input()
    assert pending == memory.log.slice(2, 6)

    memory.update_summary_if_needed()
    assert memory.summary.text == "summary 3"
    assert memory.summary.covered == len(memory.log) - 20


def test_odd_log_after_a_failed_turn_is_summarized_without_gaps(memory) -> None:
    fill_exchanges(memory, 11)
    memory.update_summary_if_needed()

    memory.add_message(role="user", content="lost reply")
    fill_exchanges(memory, 1)

    log = memory.log
    assert len(log) == 25
    assert memory.pending_summary_input() == log.slice(2, 5)
    memory.update_summary_if_needed()
    assert memory.summary.covered == 5
