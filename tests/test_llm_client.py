from types import SimpleNamespace

import httpx
import openai
import pytest
from openai import AsyncAzureOpenAI

from customs_sentinel.config import Config
from customs_sentinel.errors import ConfigurationError, TransportError
from customs_sentinel.services import llm_client
from customs_sentinel.services.llm_client import LLMService, build_azure_client

REQUEST = httpx.Request("POST", "https://sentinel-test.openai.azure.com/openai/deployments/gpt-4o/chat/completions")


class FakeCompletions:
    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.reply


class FakeClient:
    def __init__(self, completions):
        self.chat = SimpleNamespace(completions=completions)
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        self.closed = True


def _reply(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def _service(config, completions):
    client = FakeClient(completions)
    return LLMService(config, client_factory=lambda _config: client), client


@pytest.mark.asyncio
async def test_complete_returns_reply_text_and_closes_client(config):
    completions = FakeCompletions(reply=_reply('{"score": 10}'))
    service, client = _service(config, completions)

    text = await service.complete([{"role": "user", "content": "hi"}], json_output=True)

    assert text == '{"score": 10}'
    assert client.closed
    request = completions.requests[0]
    assert request["model"] == "gpt-4o"
    assert request["response_format"] == {"type": "json_object"}


@pytest.mark.asyncio
async def test_plain_text_request_uses_given_deployment(config):
    completions = FakeCompletions(reply=_reply(None))
    service, _ = _service(config, completions)

    text = await service.complete([{"role": "user", "content": "hi"}], deployment="gpt-4o-sim")

    assert text == ""
    assert completions.requests[0]["model"] == "gpt-4o-sim"
    assert "response_format" not in completions.requests[0]


@pytest.mark.asyncio
@pytest.mark.parametrize("error, expected", [
    (openai.APITimeoutError(request=REQUEST), TransportError),
    (openai.APIConnectionError(request=REQUEST), TransportError),
    (openai.InternalServerError("boom", response=httpx.Response(500, request=REQUEST), body=None), TransportError),
    (openai.AuthenticationError("bad key", response=httpx.Response(401, request=REQUEST), body=None), ConfigurationError),
])
async def test_sdk_errors_are_mapped(config, error, expected):
    service, _ = _service(config, FakeCompletions(error=error))

    with pytest.raises(expected) as exc_info:
        await service.complete([{"role": "user", "content": "hi"}])

    assert exc_info.value.__cause__ is error


@pytest.mark.asyncio
async def test_missing_key_is_reported_on_first_call():
    service = LLMService(Config(AZURE_OPENAI_ENDPOINT="https://sentinel-test.openai.azure.com"))

    with pytest.raises(ConfigurationError, match="AZURE_OPENAI_KEY"):
        await service.complete([{"role": "user", "content": "hi"}])


def test_missing_endpoint_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="endpoint"):
        build_azure_client(Config(AZURE_OPENAI_KEY="k"))


def test_client_disables_retries_and_applies_timeout(config):
    client = build_azure_client(config)
    assert isinstance(client, AsyncAzureOpenAI)
    assert client.max_retries == 0
    assert client.timeout == 5


def test_entra_credential_is_built_once_per_service(monkeypatch):
    built = []

    def fake_token_provider():
        built.append(1)
        return lambda: "entra-token"

    monkeypatch.setattr(llm_client, "entra_token_provider", fake_token_provider)
    config = Config(AZURE_OPENAI_ENDPOINT="https://sentinel-test.openai.azure.com", AZURE_OPENAI_AUTH_MODE="entra")
    service = LLMService(config)

    first = service._client_factory(config)
    second = service._client_factory(config)

    assert isinstance(first, AsyncAzureOpenAI)
    assert isinstance(second, AsyncAzureOpenAI)
    assert len(built) == 1
