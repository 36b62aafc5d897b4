"""
Configuration Management
Loads environment variables into an explicit Config object
"""
import os
from typing import Optional


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


class Config:
    """Runtime settings for the Customs Sentinel backend.

    Values are read when the object is built, so tests and the app factory
    can construct one after loading a .env file or patching the environment.
    Nothing here is validated eagerly: a missing credential is only reported
    when the first model call is made.
    """

    def __init__(
        self,
        AZURE_OPENAI_ENDPOINT: Optional[str] = None,
        AZURE_OPENAI_KEY: Optional[str] = None,
        AZURE_OPENAI_AUTH_MODE: str = 'key',
        AZURE_OPENAI_API_VERSION: str = '2024-06-01',
        AZURE_OPENAI_DEPLOYMENT: str = 'gpt-4o',
        AZURE_OPENAI_SIMULATION_DEPLOYMENT: Optional[str] = None,
        AZURE_OPENAI_CHAT_DEPLOYMENT: Optional[str] = None,
        REQUEST_TIMEOUT_SECONDS: float = 30.0,
        FLASK_ENV: str = 'development',
        FLASK_DEBUG: bool = False,
    ):
        # Azure OpenAI (AI Foundry)
        self.AZURE_OPENAI_ENDPOINT = AZURE_OPENAI_ENDPOINT
        self.AZURE_OPENAI_KEY = AZURE_OPENAI_KEY
        self.AZURE_OPENAI_AUTH_MODE = (AZURE_OPENAI_AUTH_MODE or 'key').lower()
        self.AZURE_OPENAI_API_VERSION = AZURE_OPENAI_API_VERSION
        self.AZURE_OPENAI_DEPLOYMENT = AZURE_OPENAI_DEPLOYMENT
        # Simulation and chat fall back to the analysis deployment
        self.AZURE_OPENAI_SIMULATION_DEPLOYMENT = AZURE_OPENAI_SIMULATION_DEPLOYMENT or AZURE_OPENAI_DEPLOYMENT
        self.AZURE_OPENAI_CHAT_DEPLOYMENT = AZURE_OPENAI_CHAT_DEPLOYMENT or AZURE_OPENAI_DEPLOYMENT

        if REQUEST_TIMEOUT_SECONDS <= 0:
            raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive")
        self.REQUEST_TIMEOUT_SECONDS = REQUEST_TIMEOUT_SECONDS

        self.FLASK_ENV = FLASK_ENV
        self.FLASK_DEBUG = FLASK_DEBUG

    @classmethod
    def from_env(cls) -> 'Config':
        """Build a Config from the process environment"""
        return cls(
            AZURE_OPENAI_ENDPOINT=os.getenv('AZURE_OPENAI_ENDPOINT'),
            AZURE_OPENAI_KEY=os.getenv('AZURE_OPENAI_KEY'),
            AZURE_OPENAI_AUTH_MODE=os.getenv('AZURE_OPENAI_AUTH_MODE', 'key'),
            AZURE_OPENAI_API_VERSION=os.getenv('AZURE_OPENAI_API_VERSION', '2024-06-01'),
            AZURE_OPENAI_DEPLOYMENT=os.getenv('AZURE_OPENAI_DEPLOYMENT', 'gpt-4o'),
            AZURE_OPENAI_SIMULATION_DEPLOYMENT=os.getenv('AZURE_OPENAI_SIMULATION_DEPLOYMENT'),
            AZURE_OPENAI_CHAT_DEPLOYMENT=os.getenv('AZURE_OPENAI_CHAT_DEPLOYMENT'),
            REQUEST_TIMEOUT_SECONDS=_env_float('SENTINEL_REQUEST_TIMEOUT', 30.0),
            FLASK_ENV=os.getenv('FLASK_ENV', 'development'),
            FLASK_DEBUG=os.getenv('FLASK_DEBUG', 'False').lower() == 'true',
        )

    def uses_entra_auth(self) -> bool:
        """Entra ID (DefaultAzureCredential) instead of an API key"""
        return self.AZURE_OPENAI_AUTH_MODE == 'entra'

    def is_openai_configured(self) -> bool:
        """Check if Azure OpenAI is properly configured"""
        has_credential = bool(self.AZURE_OPENAI_KEY) or self.uses_entra_auth()
        return bool(
            self.AZURE_OPENAI_ENDPOINT and
            self.AZURE_OPENAI_DEPLOYMENT and
            has_credential
        )
