"""
Dashboard Application State

Immutable state plus pure reducer functions. Each reducer takes the current
state and an action payload and returns (new_state, effect); the effect is the
request object the caller must execute (or None for plain state changes).
SentinelStore holds the current state and serialises reducers.

Every declaration selection bumps a generation counter. An analysis request
captures the generation it was started under; when it finishes under a
different generation the result is discarded.
"""
import logging
import threading
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, List, Optional, Tuple

from customs_sentinel.agent_prompts import SENTINEL_CHAT_FALLBACK, SENTINEL_CHAT_GREETING
from customs_sentinel.errors import EmptyInputError
from customs_sentinel.models.customs import AnalysisResult, CaseRecord, ChatRole, Turn

logger = logging.getLogger('customs_sentinel.state')


class View(str, Enum):
    DASHBOARD = "dashboard"
    UPLOAD = "upload"
    DECLARATIONS = "declarations"
    RISK_ENGINE = "risk-engine"
    SIMULATOR = "simulator"
    CASE_HISTORY = "case-history"
    ADMIN = "admin"


VIEW_TITLES = {
    View.DASHBOARD: "Strategic Dashboard",
    View.UPLOAD: "Data Ingestion Hub",
    View.DECLARATIONS: "Inbound Queue",
    View.RISK_ENGINE: "Risk Engine Logic",
    View.SIMULATOR: "Scenario Simulator",
    View.CASE_HISTORY: "Forensic Archive",
    View.ADMIN: "System Admin",
}


class RequestStatus(str, Enum):
    IDLE = "IDLE"
    REQUESTING = "REQUESTING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class AnalysisKind(str, Enum):
    ASSESSMENT = "assessment"
    DOCUMENT_SCAN = "document_scan"


@dataclass(frozen=True)
class AnalysisRequest:
    case: CaseRecord
    generation: int
    kind: AnalysisKind


@dataclass(frozen=True)
class AnalysisSlot:
    status: RequestStatus = RequestStatus.IDLE
    declaration_id: Optional[str] = None
    generation: int = 0
    kind: Optional[AnalysisKind] = None
    in_flight: int = 0
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.in_flight > 0


@dataclass(frozen=True)
class SimulationRequest:
    scenario: str


@dataclass(frozen=True)
class SimulationSlot:
    status: RequestStatus = RequestStatus.IDLE
    scenario: str = ""
    in_flight: int = 0
    narrative: Optional[str] = None
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.in_flight > 0


@dataclass(frozen=True)
class ChatRequest:
    history: Tuple[Turn, ...]
    operator_turn: Turn

    @property
    def message(self) -> str:
        return self.operator_turn.text


@dataclass(frozen=True)
class ChatState:
    transcript: Tuple[Turn, ...] = field(
        default_factory=lambda: (Turn(role=ChatRole.ASSISTANT, text=SENTINEL_CHAT_GREETING),)
    )
    awaiting: Tuple[Turn, ...] = ()

    @property
    def typing(self) -> bool:
        return bool(self.awaiting)


@dataclass(frozen=True)
class SentinelState:
    view: View = View.DASHBOARD
    selected_id: Optional[str] = None
    generation: int = 0
    analysis: AnalysisSlot = field(default_factory=AnalysisSlot)
    simulation: SimulationSlot = field(default_factory=SimulationSlot)
    chat: ChatState = field(default_factory=ChatState)


Transition = Tuple[SentinelState, object]


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

def select_view(state: SentinelState, view: View) -> Transition:
    return replace(state, view=view), None


def select_declaration(state: SentinelState, declaration_id: Optional[str]) -> Transition:
    """Change (or clear) the selection; any analysis for the old case is dropped"""
    generation = state.generation + 1
    return replace(
        state,
        selected_id=declaration_id,
        generation=generation,
        analysis=AnalysisSlot(declaration_id=declaration_id, generation=generation),
    ), None


# ---------------------------------------------------------------------------
# Analysis Gateway requests
# ---------------------------------------------------------------------------

def start_analysis(state: SentinelState, case: CaseRecord, kind: AnalysisKind) -> Transition:
    if case.id != state.selected_id:
        raise ValueError(f"{case.id} is not the selected declaration")

    slot = state.analysis
    analysis = replace(
        slot,
        status=RequestStatus.REQUESTING,
        declaration_id=case.id,
        generation=state.generation,
        kind=kind,
        in_flight=slot.in_flight + 1,
    )
    request = AnalysisRequest(case=case, generation=state.generation, kind=kind)
    return replace(state, analysis=analysis), request


def _is_current(state: SentinelState, request: AnalysisRequest) -> bool:
    return request.generation == state.generation and request.case.id == state.selected_id


def complete_analysis(state: SentinelState, request: AnalysisRequest, result: AnalysisResult) -> Transition:
    """Store a result; returns (state, applied) where applied is False for stale requests"""
    if not _is_current(state, request):
        return state, False

    slot = state.analysis
    analysis = replace(
        slot,
        status=RequestStatus.SUCCEEDED,
        kind=request.kind,
        in_flight=max(slot.in_flight - 1, 0),
        result=result,
        error=None,
    )
    return replace(state, analysis=analysis), True


def fail_analysis(state: SentinelState, request: AnalysisRequest, message: str) -> Transition:
    if not _is_current(state, request):
        return state, False

    slot = state.analysis
    analysis = replace(
        slot,
        status=RequestStatus.FAILED,
        kind=request.kind,
        in_flight=max(slot.in_flight - 1, 0),
        result=None,
        error=message,
    )
    return replace(state, analysis=analysis), True


# ---------------------------------------------------------------------------
# Scenario simulator
# ---------------------------------------------------------------------------

def start_simulation(state: SentinelState, scenario: str) -> Transition:
    if not scenario or not scenario.strip():
        raise EmptyInputError("Scenario text is empty")

    slot = state.simulation
    simulation = replace(
        slot,
        status=RequestStatus.REQUESTING,
        scenario=scenario,
        in_flight=slot.in_flight + 1,
    )
    return replace(state, simulation=simulation), SimulationRequest(scenario=scenario)


def complete_simulation(state: SentinelState, request: SimulationRequest, narrative: str) -> Transition:
    slot = state.simulation
    simulation = replace(
        slot,
        status=RequestStatus.SUCCEEDED,
        scenario=request.scenario,
        in_flight=max(slot.in_flight - 1, 0),
        narrative=narrative,
        error=None,
    )
    return replace(state, simulation=simulation), None


def fail_simulation(state: SentinelState, request: SimulationRequest, message: str) -> Transition:
    slot = state.simulation
    simulation = replace(
        slot,
        status=RequestStatus.FAILED,
        scenario=request.scenario,
        in_flight=max(slot.in_flight - 1, 0),
        narrative=None,
        error=message,
    )
    return replace(state, simulation=simulation), None


# ---------------------------------------------------------------------------
# Assistant chat
# ---------------------------------------------------------------------------

def start_chat_turn(state: SentinelState, message: str) -> Transition:
    """Queue an operator message; the transcript itself is untouched until a reply arrives"""
    if not message or not message.strip():
        raise EmptyInputError("Message is empty")

    operator_turn = Turn(role=ChatRole.OPERATOR, text=message)
    chat = replace(state.chat, awaiting=state.chat.awaiting + (operator_turn,))
    request = ChatRequest(history=state.chat.transcript, operator_turn=operator_turn)
    return replace(state, chat=chat), request


def finish_chat_turn(state: SentinelState, request: ChatRequest, reply: Optional[str]) -> Transition:
    """Append the operator turn and the reply, or the fallback text when reply is None"""
    awaiting = tuple(turn for turn in state.chat.awaiting if turn is not request.operator_turn)
    assistant_turn = Turn(role=ChatRole.ASSISTANT, text=reply if reply is not None else SENTINEL_CHAT_FALLBACK)
    chat = replace(
        state.chat,
        transcript=state.chat.transcript + (request.operator_turn, assistant_turn),
        awaiting=awaiting,
    )
    return replace(state, chat=chat), None


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

Listener = Callable[[SentinelState], None]


class SentinelStore:
    """Holds the current SentinelState and applies reducers one at a time"""

    def __init__(self, initial: Optional[SentinelState] = None):
        self._state = initial or SentinelState()
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> SentinelState:
        return self._state

    def dispatch(self, reducer: Callable[..., Transition], *args, **kwargs):
        """Apply reducer to the current state and return its effect"""
        with self._lock:
            new_state, effect = reducer(self._state, *args, **kwargs)
            changed = new_state is not self._state
            self._state = new_state
            listeners = list(self._listeners)

        if changed:
            for listener in listeners:
                listener(new_state)
        return effect

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
