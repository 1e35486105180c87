import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, List, Optional, Tuple, TypedDict


class TurnState(str, Enum):
    """The states a conversation turn moves through."""

    AWAITING_INPUT = "awaiting_input"
    REQUEST_IN_FLIGHT = "request_in_flight"
    SUMMARIZING = "summarizing"
    TERMINATED = "terminated"


class TurnGraphState(TypedDict):
    """
    Represents the state of a single turn's workflow.
    This is the single source of truth passed between nodes in the turn graph.
    """

    # -- Inputs --
    user_prompt: str

    # -- Outputs --
    reply: Optional[str]
    summary_updated: bool

    # -- Errors (recovered locally, never raised out of the graph) --
    error: Optional[str]
    summary_error: Optional[str]

    # -- Every state entered, in order --
    trace: Annotated[List[TurnState], operator.add]


@dataclass(frozen=True)
class TurnOutcome:
    """What one line of input did to the conversation."""

    user_prompt: str
    reply: Optional[str] = None
    error: Optional[str] = None
    summary_error: Optional[str] = None
    summary_updated: bool = False
    trace: Tuple[TurnState, ...] = field(default_factory=tuple)

    @property
    def skipped(self) -> bool:
        """A blank line: nothing was appended and no request was made."""
        return not self.user_prompt

    @property
    def half_applied(self) -> bool:
        """The user message was logged but the request failed, so no reply follows it."""
        return self.error is not None
