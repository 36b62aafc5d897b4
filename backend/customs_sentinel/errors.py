"""
Customs Sentinel Error Taxonomy

Transport-level failures (ConfigurationError, TransportError) are raised by
the LLM service; each adapter wraps them in its own component error so the
caller can tell which feature failed while __cause__ keeps the reason.
"""


class SentinelError(Exception):
    """Base class for every error raised by Customs Sentinel"""


class ConfigurationError(SentinelError):
    """Missing or rejected credential/endpoint. Never retried."""


class TransportError(SentinelError):
    """Network failure, timeout or error status from the model service"""


class AnalysisError(SentinelError):
    """The Analysis Gateway could not produce a validated result"""


class SchemaValidationError(AnalysisError):
    """The model reply did not match the analysis schema"""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = errors or []


class SimulationError(SentinelError):
    """The scenario simulation call failed"""


class ConversationError(SentinelError):
    """The assistant chat call failed"""


class EmptyInputError(SentinelError):
    """Blank operator input rejected before any call is made"""
