import copy

import pytest

from conftest import FakeLLM
from customs_sentinel.errors import ConversationError, SimulationError, TransportError
from customs_sentinel.models.customs import ChatRole, Turn
from customs_sentinel.services.scenario_simulator import ScenarioSimulator
from customs_sentinel.services.sentinel_chat import SentinelChat, build_messages


@pytest.mark.asyncio
async def test_simulate_passes_narrative_through():
    narrative = "## Predicted Risk Level\nHIGH\n\n## Primary Risk Factors\n- Transshipment"
    llm = FakeLLM([narrative])

    result = await ScenarioSimulator(llm, deployment="gpt-4o-sim").simulate("  Solar panels routed via Malaysia ")

    assert result == narrative
    prompt = llm.calls[0]["messages"][0]["content"]
    assert '"Solar panels routed via Malaysia"' in prompt
    assert "Recommended Countermeasures" in prompt
    assert llm.calls[0]["deployment"] == "gpt-4o-sim"
    assert llm.calls[0]["json_output"] is False


@pytest.mark.asyncio
async def test_simulate_failure_and_empty_reply():
    cause = TransportError("down")
    with pytest.raises(SimulationError) as exc_info:
        await ScenarioSimulator(FakeLLM(error=cause)).simulate("scenario")
    assert exc_info.value.__cause__ is cause

    with pytest.raises(SimulationError):
        await ScenarioSimulator(FakeLLM(["   "])).simulate("scenario")


def _history():
    return [
        Turn(role=ChatRole.ASSISTANT, text="Ready to assist."),
        Turn(role=ChatRole.OPERATOR, text="Check DEC-910234"),
        Turn(role=ChatRole.ASSISTANT, text="Bill of Lading is missing."),
    ]


def test_messages_keep_history_order():
    messages = build_messages(_history(), "What should I request?")

    assert messages[0]["role"] == "system"
    assert [(m["role"], m["content"]) for m in messages[1:]] == [
        ("assistant", "Ready to assist."),
        ("user", "Check DEC-910234"),
        ("assistant", "Bill of Lading is missing."),
        ("user", "What should I request?"),
    ]


@pytest.mark.asyncio
async def test_converse_does_not_mutate_history():
    history = _history()
    snapshot = copy.deepcopy(history)
    llm = FakeLLM(["Request the original Bill of Lading."])

    reply = await SentinelChat(llm).converse(history, "What should I request?")

    assert reply == "Request the original Bill of Lading."
    assert history == snapshot
    assert len(llm.calls[0]["messages"]) == len(history) + 2


@pytest.mark.asyncio
async def test_converse_failure_is_not_retried():
    llm = FakeLLM(error=TransportError("down"))
    with pytest.raises(ConversationError):
        await SentinelChat(llm).converse([], "hello")
    assert len(llm.calls) == 1
