"""
Scenario Simulator
Free-text what-if analysis; the model's Markdown narrative is passed through untouched
"""
import logging
from typing import Optional

from customs_sentinel.agent_prompts import SCENARIO_SIMULATION_PROMPT_TEMPLATE
from customs_sentinel.errors import SentinelError, SimulationError
from customs_sentinel.services.llm_client import LLMService

logger = logging.getLogger('customs_sentinel.simulator')


class ScenarioSimulator:
    """Runs a hypothetical scenario through the model.

    Callers reject blank scenarios before calling simulate(); the only
    contract on the reply is that it is a non-empty string.
    """

    def __init__(self, llm: LLMService, deployment: Optional[str] = None):
        self.llm = llm
        self.deployment = deployment

    def build_prompt(self, scenario_text: str) -> str:
        return SCENARIO_SIMULATION_PROMPT_TEMPLATE.format(scenario=scenario_text.strip())

    async def simulate(self, scenario_text: str) -> str:
        logger.info(f"🧪 Simulating scenario ({len(scenario_text)} chars)")
        messages = [{"role": "user", "content": self.build_prompt(scenario_text)}]
        try:
            narrative = await self.llm.complete(messages, deployment=self.deployment)
        except SentinelError as e:
            logger.error(f"❌ Simulation failed: {e}")
            raise SimulationError(f"Scenario simulation failed: {e}") from e

        if not narrative.strip():
            raise SimulationError("Model returned an empty narrative")
        return narrative
