"""
Pytest configuration and fixtures
"""
import json
from typing import Any, Dict, List, Optional

import pytest

from customs_sentinel import create_app
from customs_sentinel.config import Config
from customs_sentinel.models.customs import CaseRecord
from customs_sentinel.orchestrator import SentinelOrchestrator


VALID_ANALYSIS = {
    "score": 82,
    "level": "HIGH",
    "analysis": "Bill of Lading missing and declared value far below expected unit value.",
    "flags": ["MISSING_BOL", "UNDERVALUATION"],
    "valuationAnomaly": -0.42,
    "documentAnalysis": [
        {"indicator_id": "RI-001", "finding": "Bill of Lading not provided", "severity": "HIGH"},
    ],
}


class FakeLLM:
    """Stands in for LLMService; records every call and replays canned replies"""

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[Exception] = None, on_call=None):
        self.replies = list(replies or [])
        self.error = error
        self.on_call = on_call
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, messages, deployment=None, json_output=False):
        self.calls.append({
            "messages": [dict(m) for m in messages],
            "deployment": deployment,
            "json_output": json_output,
        })
        if self.on_call is not None:
            await self.on_call()
        if self.error is not None:
            raise self.error
        if len(self.replies) > 1:
            return self.replies.pop(0)
        return self.replies[0] if self.replies else ""


@pytest.fixture()
def config() -> Config:
    return Config(
        AZURE_OPENAI_ENDPOINT="https://sentinel-test.openai.azure.com",
        AZURE_OPENAI_KEY="test-key",
        AZURE_OPENAI_DEPLOYMENT="gpt-4o",
        AZURE_OPENAI_SIMULATION_DEPLOYMENT="gpt-4o-sim",
        REQUEST_TIMEOUT_SECONDS=5,
    )


@pytest.fixture()
def dec1() -> CaseRecord:
    return CaseRecord(
        id="DEC-1",
        itemDescription="Industrial valves",
        declaredValue=1000,
        currency="USD",
        originCountry="Turkey",
        hsCode="8481.80",
        documentStatus=[{"name": "Bill of Lading", "status": "MISSING"}],
    )


@pytest.fixture()
def make_orchestrator(config):
    def _make(llm: FakeLLM) -> SentinelOrchestrator:
        return SentinelOrchestrator.from_config(config, llm=llm)
    return _make


@pytest.fixture()
def make_client(config, make_orchestrator):
    def _make(llm: FakeLLM):
        orchestrator = make_orchestrator(llm)
        app = create_app(config=config, orchestrator=orchestrator)
        app.config['TESTING'] = True
        return app.test_client(), orchestrator
    return _make


def analysis_reply(**overrides) -> str:
    payload = dict(VALID_ANALYSIS)
    payload.update(overrides)
    return json.dumps(payload)
