from __future__ import annotations

import logging
import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional, TextIO

from langgraph.graph import END, StateGraph
from omegaconf import DictConfig

from rollchat.errors import EmptyResponseError, InputIoError, SummarizationError, TransportOrRemoteError
from rollchat.llm import LLMService
from rollchat.memory import ConversationMemoryService, Summarizer
from rollchat.memory.context import needs_compaction
from rollchat.utils.config_parser import PROMPTS_DIR
from rollchat.utils.transcript import DebugDumpWriter
from rollchat.workflows.state import TurnGraphState, TurnOutcome, TurnState

logger = logging.getLogger(__name__)

LineReader = Callable[[], Optional[str]]


def read_stdin_line() -> Optional[str]:
    """Reads one line from standard input, returning None at end of input."""
    try:
        return input()
    except EOFError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        raise InputIoError(f"Failed to read from standard input: {e}") from e


class ChatOrchestrator:
    """
    The interactive control loop of the chat client.

    Each non-blank line runs through a compiled LangGraph turn workflow:
    the user message is logged, the bounded context is sent to the chat model,
    the reply is logged and, once the conversation outgrows the active window,
    the rolling summary is advanced. Remote failures are recovered inside the
    graph so the loop always returns to awaiting input.
    """

    def __init__(
        self,
        memory: ConversationMemoryService,
        chat_llm: LLMService,
        model_name: str,
        debug_writer: Optional[DebugDumpWriter] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ):
        self.memory = memory
        self.chat_llm = chat_llm
        self.model_name = model_name
        self.debug_writer = debug_writer
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr

        self.state = TurnState.AWAITING_INPUT
        self._cancel_requested = False
        self._read_pending = False

        self.workflow = self._build_graph()
        self.app = self.workflow.compile()

    @classmethod
    def from_config(
        cls,
        app_config: DictConfig,
        model: Optional[str] = None,
        debug: bool = False,
        output_dir: Optional[Path] = None,
    ) -> ChatOrchestrator:
        chat_config = app_config.app.chat
        model_name = model or chat_config.default_model
        chat_llm = LLMService.from_config(
            provider_key=chat_config.provider_key,
            llm_config=app_config.llms,
            model_override=model_name,
        )
        memory = ConversationMemoryService(
            summarizer=Summarizer.from_config(app_config, prompts_base_path=PROMPTS_DIR)
        )
        debug_writer = None
        if debug:
            debug_writer = DebugDumpWriter(
                output_dir=output_dir or Path.cwd(),
                context_file=app_config.app.debug.context_file,
                transcript_prefix=app_config.app.debug.transcript_prefix,
            )
        return cls(memory=memory, chat_llm=chat_llm, model_name=model_name, debug_writer=debug_writer)

    # --- Turn workflow ---

    def _build_graph(self) -> StateGraph:
        """Builds the LangGraph workflow for a single turn."""
        graph = StateGraph(TurnGraphState)

        graph.add_node("append_user", self.append_user_node)
        graph.add_node("request_completion", self.request_completion_node)
        graph.add_node("summarize", self.summarize_node)
        graph.add_node("finish", self.finish_node)

        graph.set_entry_point("append_user")
        graph.add_edge("append_user", "request_completion")
        graph.add_conditional_edges(
            "request_completion",
            self.decide_after_request,
            {
                "summarize": "summarize",
                "done": "finish",
                "error": "finish",
            },
        )
        graph.add_edge("summarize", "finish")
        graph.add_edge("finish", END)

        return graph

    def _enter(self, state: TurnState) -> Dict[str, Any]:
        logger.debug(f"Turn state: {self.state.value} -> {state.value}")
        self.state = state
        return {"trace": [state]}

    def append_user_node(self, state: TurnGraphState) -> Dict[str, Any]:
        self.memory.add_message(role="user", content=state["user_prompt"])
        return self._enter(TurnState.REQUEST_IN_FLIGHT)

    def request_completion_node(self, state: TurnGraphState) -> Dict[str, Any]:
        """Sends the bounded context to the chat model and logs the reply."""
        context = self.memory.get_context_window()
        logger.info(f"Sending {len(context)} message(s) to '{self.model_name}'.")
        try:
            reply = self.chat_llm.complete(context)
        except (TransportOrRemoteError, EmptyResponseError) as e:
            logger.warning(f"Completion failed; the turn ends without a reply: {e}")
            return {"error": str(e)}

        self.memory.add_message(role="assistant", content=reply)
        return {"reply": reply}

    def decide_after_request(self, state: TurnGraphState) -> str:
        if state.get("error"):
            return "error"
        elif needs_compaction(self.memory.log):
            return "summarize"
        else:
            return "done"

    def summarize_node(self, state: TurnGraphState) -> Dict[str, Any]:
        update = self._enter(TurnState.SUMMARIZING)
        try:
            update["summary_updated"] = self.memory.update_summary_if_needed()
        except SummarizationError as e:
            logger.warning(f"Summary not updated this turn: {e}")
            update["summary_error"] = str(e)
        return update

    def finish_node(self, state: TurnGraphState) -> Dict[str, Any]:
        # The orchestrator only becomes idle again when the next read starts.
        return {"trace": [TurnState.AWAITING_INPUT]}

    # --- Interactive loop ---

    def handle_line(self, line: str) -> TurnOutcome:
        """Runs one turn for a line of input. Blank lines are a no-op."""
        prompt = line.strip()
        if not prompt:
            return TurnOutcome(user_prompt="", trace=(TurnState.AWAITING_INPUT,))

        initial_state: TurnGraphState = {
            "user_prompt": prompt,
            "reply": None,
            "summary_updated": False,
            "error": None,
            "summary_error": None,
            "trace": [],
        }
        final_state = self.app.invoke(initial_state)
        outcome = TurnOutcome(
            user_prompt=prompt,
            reply=final_state.get("reply"),
            error=final_state.get("error"),
            summary_error=final_state.get("summary_error"),
            summary_updated=final_state.get("summary_updated", False),
            trace=tuple(final_state.get("trace", [])),
        )
        self._report(outcome)
        if self.debug_writer is not None:
            self._write_debug(final=False)
        return outcome

    def _report(self, outcome: TurnOutcome) -> None:
        if outcome.reply is not None:
            print(f"{self.model_name}: {outcome.reply}\n", file=self.out)
        if outcome.error is not None:
            print(f"Error: {outcome.error}", file=self.err)
        if outcome.summary_error is not None:
            print(f"Error: {outcome.summary_error}", file=self.err)

    def request_cancel(self) -> None:
        """Asks the loop to stop. Honoured only between turns, never mid-request."""
        self._cancel_requested = True

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    def run(self, read_line: Optional[LineReader] = None) -> None:
        """
        Reads and handles lines until end of input or cancellation.

        Raises:
            InputIoError: If reading the input stream fails.
        """
        read_line = read_line or read_stdin_line
        print(
            f"Interactive Chat Session (model: {self.model_name}). "
            "Type your message below. Press Ctrl+C to exit.\n",
            file=self.out,
        )

        try:
            while True:
                if self._cancel_requested:
                    print("\nTermination signal received.", file=self.out)
                    break
                try:
                    self.state = TurnState.AWAITING_INPUT
                    self._read_pending = True
                    line = read_line()
                except KeyboardInterrupt:
                    self._cancel_requested = True
                    print("\nTermination signal received.", file=self.out)
                    break
                finally:
                    self._read_pending = False
                if line is None:
                    break
                self.handle_line(line)
        finally:
            self.state = TurnState.TERMINATED
            logger.info(f"Session ended after {self.memory.log.exchange_count} exchange(s).")

        if self.debug_writer is not None:
            self._write_debug(final=True)

    @contextmanager
    def cancel_on_interrupt(self) -> Iterator[ChatOrchestrator]:
        """
        Routes SIGINT through the turn state: while a read is pending it stops
        that read; at any other point (a turn running, its reply being printed
        or dumped) it only marks the loop for cancellation before the next read.
        """

        def handler(signum, frame):
            if self._read_pending:
                raise KeyboardInterrupt
            logger.info("Interrupt received mid-turn; exiting after the turn completes.")
            self.request_cancel()

        previous = signal.signal(signal.SIGINT, handler)
        try:
            yield self
        finally:
            signal.signal(signal.SIGINT, previous)

    def _write_debug(self, final: bool) -> None:
        if final:
            try:
                self.debug_writer.write_transcript(self.memory.log)
            except OSError as e:
                print(f"Transcript file error: {e}", file=self.err)
        try:
            self.debug_writer.write_context_snapshot(self.memory.get_context_window())
        except OSError as e:
            print(f"Debug file error: {e}", file=self.err)
