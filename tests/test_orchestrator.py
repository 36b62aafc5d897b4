import asyncio

import pytest

from conftest import FakeLLM, analysis_reply
from customs_sentinel.errors import EmptyInputError, TransportError
from customs_sentinel.orchestrator import DeclarationNotFound, NoSelectionError
from customs_sentinel.state import RequestStatus


@pytest.mark.asyncio
async def test_analysis_result_lands_in_state(make_orchestrator):
    sentinel = make_orchestrator(FakeLLM([analysis_reply()]))
    sentinel.select_declaration("DEC-910234")

    slot = await sentinel.analyze_selected()

    assert slot.status == RequestStatus.SUCCEEDED
    assert slot.declaration_id == "DEC-910234"
    assert slot.result.score == 82


@pytest.mark.asyncio
async def test_analysis_failure_becomes_failed_slot(make_orchestrator):
    sentinel = make_orchestrator(FakeLLM(error=TransportError("timed out")))
    sentinel.select_declaration("DEC-910234")

    slot = await sentinel.analyze_selected()

    assert slot.status == RequestStatus.FAILED
    assert slot.result is None
    assert "unavailable" in slot.error


@pytest.mark.asyncio
async def test_stale_analysis_does_not_overwrite_new_selection(make_orchestrator):
    release = asyncio.Event()
    started = asyncio.Event()

    async def hold_reply():
        started.set()
        await release.wait()

    sentinel = make_orchestrator(FakeLLM([analysis_reply()], on_call=hold_reply))
    sentinel.select_declaration("DEC-882190")

    task = asyncio.ensure_future(sentinel.analyze_selected())
    await started.wait()
    sentinel.select_declaration("DEC-774412")
    release.set()
    slot = await task

    assert slot.declaration_id == "DEC-774412"
    assert slot.status == RequestStatus.IDLE
    assert slot.result is None
    assert sentinel.store.state.analysis.result is None


@pytest.mark.asyncio
async def test_analysis_requires_selection(make_orchestrator):
    llm = FakeLLM([analysis_reply()])
    sentinel = make_orchestrator(llm)

    with pytest.raises(NoSelectionError):
        await sentinel.analyze_selected()
    assert llm.calls == []


@pytest.mark.asyncio
async def test_selection_cleared_before_analysis_starts(make_orchestrator, monkeypatch):
    llm = FakeLLM([analysis_reply()])
    sentinel = make_orchestrator(llm)
    sentinel.select_declaration("DEC-910234")
    read_selection = sentinel.selected_declaration

    def read_then_clear():
        case = read_selection()
        sentinel.select_declaration(None)
        return case

    monkeypatch.setattr(sentinel, "selected_declaration", read_then_clear)

    with pytest.raises(NoSelectionError):
        await sentinel.analyze_selected()
    assert llm.calls == []
    assert sentinel.store.state.analysis.status == RequestStatus.IDLE


def test_unknown_declaration_cannot_be_selected(make_orchestrator):
    sentinel = make_orchestrator(FakeLLM())
    with pytest.raises(DeclarationNotFound):
        sentinel.select_declaration("DEC-000")
    assert sentinel.store.state.generation == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("scenario", ["", "    ", "\n"])
async def test_blank_scenario_never_reaches_the_model(make_orchestrator, scenario):
    llm = FakeLLM(["narrative"])
    sentinel = make_orchestrator(llm)

    with pytest.raises(EmptyInputError):
        await sentinel.run_simulation(scenario)

    assert llm.calls == []
    assert sentinel.store.state.simulation.status == RequestStatus.IDLE


@pytest.mark.asyncio
async def test_simulation_narrative_and_fallback(make_orchestrator):
    sentinel = make_orchestrator(FakeLLM(["## Predicted Risk Level: HIGH"]))
    slot = await sentinel.run_simulation("Lithium batteries declared as toys")
    assert slot.status == RequestStatus.SUCCEEDED
    assert slot.narrative == "## Predicted Risk Level: HIGH"

    failing = make_orchestrator(FakeLLM(error=TransportError("down")))
    slot = await failing.run_simulation("Lithium batteries declared as toys")
    assert slot.status == RequestStatus.FAILED
    assert slot.error == "Failed to run simulation. Please try again."


@pytest.mark.asyncio
async def test_chat_sends_transcript_and_records_reply(make_orchestrator):
    llm = FakeLLM(["First reply", "Second reply"])
    sentinel = make_orchestrator(llm)

    await sentinel.send_chat_message("first question")
    chat = await sentinel.send_chat_message("second question")

    texts = [turn.text for turn in chat.transcript]
    assert texts[1:] == ["first question", "First reply", "second question", "Second reply"]

    sent = [m["content"] for m in llm.calls[1]["messages"][1:]]
    assert sent == [texts[0], "first question", "First reply", "second question"]


@pytest.mark.asyncio
async def test_chat_failure_appends_fallback(make_orchestrator):
    sentinel = make_orchestrator(FakeLLM(error=TransportError("down")))
    chat = await sentinel.send_chat_message("hello?")
    assert chat.transcript[-1].text == "Connection error. Please try again."
    assert not chat.typing
