"""
Azure OpenAI LLM Service
Single transport shared by the analysis gateway, scenario simulator and assistant chat
"""
import logging
import time
from typing import Callable, Dict, List, Optional

import openai
from openai import AsyncAzureOpenAI
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import DefaultAzureCredential, get_bearer_token_provider

from customs_sentinel.config import Config
from customs_sentinel.errors import ConfigurationError, TransportError

logger = logging.getLogger('customs_sentinel.llm')

COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"


def entra_token_provider() -> Callable[[], str]:
    """Bearer token provider backed by DefaultAzureCredential (managed identity, az login, ...)"""
    return get_bearer_token_provider(DefaultAzureCredential(), COGNITIVE_SERVICES_SCOPE)


def build_azure_client(config: Config, token_provider: Optional[Callable[[], str]] = None) -> AsyncAzureOpenAI:
    """Create an async Azure OpenAI client from the injected config.

    Raises ConfigurationError when the endpoint or credential is missing.
    Automatic retries are disabled; a failed call is reported once and the
    operator decides whether to try again.
    In Entra mode pass a long-lived token_provider so the credential and its
    token cache are shared across calls.
    """
    if not config.AZURE_OPENAI_ENDPOINT:
        raise ConfigurationError("Azure OpenAI endpoint not configured (AZURE_OPENAI_ENDPOINT)")
    if not config.AZURE_OPENAI_DEPLOYMENT:
        raise ConfigurationError("Azure OpenAI deployment name not configured")

    common = dict(
        api_version=config.AZURE_OPENAI_API_VERSION,
        azure_endpoint=config.AZURE_OPENAI_ENDPOINT,
        timeout=config.REQUEST_TIMEOUT_SECONDS,
        max_retries=0,
    )

    if config.uses_entra_auth():
        return AsyncAzureOpenAI(azure_ad_token_provider=token_provider or entra_token_provider(), **common)

    if not config.AZURE_OPENAI_KEY:
        raise ConfigurationError("Azure OpenAI API key not configured (AZURE_OPENAI_KEY)")
    return AsyncAzureOpenAI(api_key=config.AZURE_OPENAI_KEY, **common)


class LLMService:
    """Async chat-completion transport over Azure OpenAI.

    A new client is opened per call so each request owns its connection pool
    for the lifetime of the event loop that awaits it.
    """

    def __init__(self, config: Config, client_factory: Optional[Callable[[Config], AsyncAzureOpenAI]] = None):
        self.config = config
        self._client_factory = client_factory or self._build_client
        self._token_provider: Optional[Callable[[], str]] = None

    def _build_client(self, config: Config) -> AsyncAzureOpenAI:
        # one DefaultAzureCredential per service
        if config.uses_entra_auth() and self._token_provider is None:
            self._token_provider = entra_token_provider()
        return build_azure_client(config, token_provider=self._token_provider)

    async def complete(
        self,
        messages: List[Dict[str, str]],
        deployment: Optional[str] = None,
        json_output: bool = False,
    ) -> str:
        """
        Send a chat completion request and return the reply text

        Args:
            messages: OpenAI-style role/content messages, oldest first
            deployment: Deployment name, defaults to the analysis deployment
            json_output: Ask the service for a JSON object reply

        Returns:
            Reply text ('' when the service returned no content)

        Raises:
            ConfigurationError: credential or endpoint missing or rejected
            TransportError: connection failure, timeout or error status
        """
        model = deployment or self.config.AZURE_OPENAI_DEPLOYMENT
        request = {"model": model, "messages": messages}
        if json_output:
            request["response_format"] = {"type": "json_object"}

        started = time.monotonic()
        try:
            async with self._client_factory(self.config) as client:
                response = await client.chat.completions.create(**request)
        except ConfigurationError:
            raise
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            logger.error(f"Azure OpenAI rejected the credential: {e}")
            raise ConfigurationError(f"Azure OpenAI rejected the credential: {e}") from e
        except ClientAuthenticationError as e:
            logger.error(f"Could not acquire Entra ID token: {e}")
            raise ConfigurationError(f"Could not acquire Entra ID token: {e}") from e
        except openai.APITimeoutError as e:
            logger.warning(f"Azure OpenAI call timed out after {self.config.REQUEST_TIMEOUT_SECONDS}s")
            raise TransportError(f"Request timed out after {self.config.REQUEST_TIMEOUT_SECONDS}s") from e
        except openai.APIConnectionError as e:
            logger.warning(f"Could not reach Azure OpenAI: {e}")
            raise TransportError(f"Could not reach Azure OpenAI: {e}") from e
        except openai.APIStatusError as e:
            logger.warning(f"Azure OpenAI returned status {e.status_code}")
            raise TransportError(f"Azure OpenAI returned status {e.status_code}") from e

        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.debug(f"{model} replied in {elapsed_ms}ms")

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
