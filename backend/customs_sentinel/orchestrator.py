"""
Sentinel Orchestrator
Runs the adapter calls for dashboard actions and folds the outcome back into the store.
Adapter failures never escape: they become FAILED slots or the chat fallback turn.
"""
import asyncio
import logging
from typing import Optional

from customs_sentinel.agent_prompts import ANALYSIS_FALLBACK, SIMULATION_FALLBACK
from customs_sentinel.config import Config
from customs_sentinel.errors import AnalysisError, ConversationError, SchemaValidationError, SimulationError
from customs_sentinel.models.customs import CaseRecord
from customs_sentinel.services.analysis_gateway import AnalysisGateway
from customs_sentinel.services.declaration_repository import DeclarationRepository
from customs_sentinel.services.hs_code_reference import HSCodeReferenceService
from customs_sentinel.services.llm_client import LLMService
from customs_sentinel.services.scenario_simulator import ScenarioSimulator
from customs_sentinel.services.sentinel_chat import SentinelChat
from customs_sentinel import state as actions
from customs_sentinel.state import (
    AnalysisKind,
    AnalysisSlot,
    ChatState,
    SentinelStore,
    SimulationSlot,
)

logger = logging.getLogger('customs_sentinel.orchestrator')


class DeclarationNotFound(LookupError):
    pass


class NoSelectionError(RuntimeError):
    pass


def run_async(coro):
    """Run an async coroutine in a sync context."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


class SentinelOrchestrator:
    def __init__(
        self,
        store: SentinelStore,
        repository: DeclarationRepository,
        gateway: AnalysisGateway,
        simulator: ScenarioSimulator,
        chat: SentinelChat,
    ):
        self.store = store
        self.repository = repository
        self.gateway = gateway
        self.simulator = simulator
        self.chat = chat

    @classmethod
    def from_config(
        cls,
        config: Config,
        llm: Optional[LLMService] = None,
        repository: Optional[DeclarationRepository] = None,
        hs_codes: Optional[HSCodeReferenceService] = None,
    ) -> 'SentinelOrchestrator':
        llm = llm or LLMService(config)
        return cls(
            store=SentinelStore(),
            repository=repository or DeclarationRepository(),
            gateway=AnalysisGateway(llm, hs_codes=hs_codes, deployment=config.AZURE_OPENAI_DEPLOYMENT),
            simulator=ScenarioSimulator(llm, deployment=config.AZURE_OPENAI_SIMULATION_DEPLOYMENT),
            chat=SentinelChat(llm, deployment=config.AZURE_OPENAI_CHAT_DEPLOYMENT),
        )

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------
    def select_declaration(self, declaration_id: Optional[str]) -> Optional[CaseRecord]:
        case = None
        if declaration_id is not None:
            case = self.repository.get(declaration_id)
            if case is None:
                raise DeclarationNotFound(declaration_id)
        self.store.dispatch(actions.select_declaration, declaration_id)
        logger.info(f"Selected declaration: {declaration_id or 'none'} (generation {self.store.state.generation})")
        return case

    def selected_declaration(self) -> Optional[CaseRecord]:
        selected_id = self.store.state.selected_id
        return self.repository.get(selected_id) if selected_id else None

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------
    async def analyze_selected(self, kind: AnalysisKind = AnalysisKind.ASSESSMENT) -> AnalysisSlot:
        """Evaluate the selected declaration and return the resulting analysis slot.

        If the selection changes while the call is in flight the late result
        is discarded and the slot for the new selection is returned untouched.
        """
        case = self.selected_declaration()
        if case is None:
            raise NoSelectionError("No declaration selected")

        try:
            request = self.store.dispatch(actions.start_analysis, case, kind)
        except ValueError as e:
            # selection was changed or cleared by another request since it was read
            raise NoSelectionError(f"{case.id} is no longer the selected declaration") from e

        try:
            result = await self.gateway.evaluate(case)
        except SchemaValidationError as e:
            applied = self.store.dispatch(actions.fail_analysis, request, f"{ANALYSIS_FALLBACK} ({e})")
        except AnalysisError as e:
            applied = self.store.dispatch(actions.fail_analysis, request, ANALYSIS_FALLBACK)
            logger.debug(f"Analysis failure detail: {e.__cause__!r}")
        else:
            applied = self.store.dispatch(actions.complete_analysis, request, result)

        if not applied:
            logger.info(f"Discarded stale analysis for {case.id} (generation {request.generation})")
        return self.store.state.analysis

    # ------------------------------------------------------------------
    # Scenario simulator
    # ------------------------------------------------------------------
    async def run_simulation(self, scenario: str) -> SimulationSlot:
        """Raises EmptyInputError for blank scenarios before any call is made"""
        request = self.store.dispatch(actions.start_simulation, scenario)
        try:
            narrative = await self.simulator.simulate(request.scenario)
        except SimulationError:
            self.store.dispatch(actions.fail_simulation, request, SIMULATION_FALLBACK)
        else:
            self.store.dispatch(actions.complete_simulation, request, narrative)
        return self.store.state.simulation

    # ------------------------------------------------------------------
    # Assistant chat
    # ------------------------------------------------------------------
    async def send_chat_message(self, message: str) -> ChatState:
        """Raises EmptyInputError for blank messages before any call is made"""
        request = self.store.dispatch(actions.start_chat_turn, message)
        try:
            reply = await self.chat.converse(request.history, request.message)
        except ConversationError:
            reply = None
        self.store.dispatch(actions.finish_chat_turn, request, reply)
        return self.store.state.chat
