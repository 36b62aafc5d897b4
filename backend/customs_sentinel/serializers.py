"""
JSON views of application state for the API routes
"""
from typing import Any, Dict

from customs_sentinel.models.customs import Turn
from customs_sentinel.state import VIEW_TITLES, AnalysisSlot, ChatState, SentinelState, SimulationSlot


def analysis_to_dict(slot: AnalysisSlot) -> Dict[str, Any]:
    return {
        'status': slot.status.value,
        'declaration_id': slot.declaration_id,
        'generation': slot.generation,
        'kind': slot.kind.value if slot.kind else None,
        'loading': slot.loading,
        'result': slot.result.to_wire() if slot.result else None,
        'error': slot.error,
    }


def simulation_to_dict(slot: SimulationSlot) -> Dict[str, Any]:
    return {
        'status': slot.status.value,
        'scenario': slot.scenario,
        'loading': slot.loading,
        'narrative': slot.narrative,
        'error': slot.error,
    }


def turn_to_dict(turn: Turn) -> Dict[str, Any]:
    return {
        'role': turn.role.value,
        'text': turn.text,
        'timestamp': turn.timestamp.isoformat(),
    }


def chat_to_dict(chat: ChatState) -> Dict[str, Any]:
    return {
        'transcript': [turn_to_dict(turn) for turn in chat.transcript],
        'awaiting': [turn_to_dict(turn) for turn in chat.awaiting],
        'typing': chat.typing,
    }


def view_to_dict(state: SentinelState) -> Dict[str, Any]:
    return {
        'view': state.view.value,
        'title': VIEW_TITLES[state.view],
        'selected_id': state.selected_id,
    }
