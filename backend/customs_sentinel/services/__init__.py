"""
Services Package
Azure OpenAI transport, model adapters and reference data
"""

from .analysis_gateway import AnalysisGateway, parse_analysis_payload
from .declaration_repository import DeclarationRepository
from .hs_code_reference import HSCodeReferenceService
from .llm_client import LLMService
from .scenario_simulator import ScenarioSimulator
from .sentinel_chat import SentinelChat

__all__ = [
    'AnalysisGateway',
    'parse_analysis_payload',
    'DeclarationRepository',
    'HSCodeReferenceService',
    'LLMService',
    'ScenarioSimulator',
    'SentinelChat',
]
