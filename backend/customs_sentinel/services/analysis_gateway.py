"""
Analysis Gateway
Turns a declaration into a risk-analysis prompt and validates the model's JSON reply
"""
import json
import logging
import re
from typing import List, Optional, Set

from pydantic import ValidationError

from customs_sentinel.agent_prompts import (
    DOCUMENT_INDICATORS,
    RISK_ANALYSIS_SCHEMA,
    RISK_ANALYSIS_SYSTEM_PROMPT,
    RISK_ANALYSIS_USER_PROMPT_TEMPLATE,
    format_indicator_checklist,
)
from customs_sentinel.errors import AnalysisError, SchemaValidationError, SentinelError
from customs_sentinel.models.customs import AnalysisResult, CaseRecord, DocumentFinding, DocumentState
from customs_sentinel.services.hs_code_reference import HSCodeReferenceService
from customs_sentinel.services.llm_client import LLMService

logger = logging.getLogger('customs_sentinel.analysis')

_FENCED_JSON = re.compile(r'```(?:json)?\s*(.*?)\s*```', re.DOTALL)


def _reject_non_finite(token: str):
    # NaN and Infinity are not JSON numbers
    raise SchemaValidationError(
        f"Model response contains a non-finite number: {token}",
        errors=[{"type": "finite_number", "loc": (), "msg": f"{token} is not a JSON number", "input": token}],
    )


def parse_analysis_payload(text: str) -> AnalysisResult:
    """
    Parse and validate a model reply into an AnalysisResult.

    Accepts a bare JSON object or one wrapped in a ```json fence. Anything
    else, or any schema violation, raises SchemaValidationError.
    """
    if not text or not text.strip():
        raise SchemaValidationError("Model returned an empty response")

    candidate = text.strip()
    try:
        payload = json.loads(candidate, parse_constant=_reject_non_finite)
    except json.JSONDecodeError:
        match = _FENCED_JSON.search(candidate)
        if not match:
            raise SchemaValidationError("Model response is not valid JSON")
        try:
            payload = json.loads(match.group(1), parse_constant=_reject_non_finite)
        except json.JSONDecodeError as e:
            raise SchemaValidationError(f"Model response is not valid JSON: {e.msg}") from e

    if not isinstance(payload, dict):
        raise SchemaValidationError(f"Expected a JSON object, got {type(payload).__name__}")

    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as e:
        raise SchemaValidationError(
            f"Model response failed schema validation ({e.error_count()} errors)",
            errors=e.errors(include_url=False),
        ) from e


class AnalysisGateway:
    """Evaluates a single declaration through the external model"""

    def __init__(
        self,
        llm: LLMService,
        hs_codes: Optional[HSCodeReferenceService] = None,
        deployment: Optional[str] = None,
    ):
        self.llm = llm
        self.hs_codes = hs_codes or HSCodeReferenceService()
        self.deployment = deployment

    def build_prompt(self, case: CaseRecord) -> str:
        description = self.hs_codes.describe(case.hs_code)
        documents = [
            {"name": doc.name, "status": doc.status.value} for doc in case.document_status
        ]
        return RISK_ANALYSIS_USER_PROMPT_TEMPLATE.format(
            id=case.id,
            exporter=case.exporter or "Not specified",
            importer=case.importer or "Not specified",
            item_description=case.item_description,
            declared_value=_format_amount(case.declared_value),
            currency=case.currency,
            origin_country=case.origin_country,
            hs_code=case.hs_code,
            hs_description=f" ({description})" if description else "",
            document_status=json.dumps(documents),
            indicator_checklist=format_indicator_checklist(),
            schema=json.dumps(RISK_ANALYSIS_SCHEMA, indent=2),
        )

    async def evaluate(self, case: CaseRecord) -> AnalysisResult:
        """
        Run a risk analysis for one declaration.

        Args:
            case: The declaration to evaluate

        Returns:
            Validated AnalysisResult

        Raises:
            SchemaValidationError: reply could not be parsed or validated
            AnalysisError: configuration or transport failure (chained as __cause__)
        """
        logger.info(f"🔍 Evaluating {case.id} ({case.hs_code}, {case.origin_country})")

        messages = [
            {"role": "system", "content": RISK_ANALYSIS_SYSTEM_PROMPT},
            {"role": "user", "content": self.build_prompt(case)},
        ]
        try:
            reply = await self.llm.complete(messages, deployment=self.deployment, json_output=True)
        except SentinelError as e:
            logger.error(f"❌ Analysis call failed for {case.id}: {e}")
            raise AnalysisError(f"Risk analysis failed for {case.id}: {e}") from e

        try:
            result = parse_analysis_payload(reply)
        except SchemaValidationError as e:
            logger.error(f"❌ Invalid analysis payload for {case.id}: {e}")
            raise

        result = self._drop_present_document_findings(case, result)
        logger.info(f"✅ {case.id}: score {result.score:g}, level {result.level.value}, {len(result.flags)} flags")
        return result

    def _drop_present_document_findings(self, case: CaseRecord, result: AnalysisResult) -> AnalysisResult:
        """Remove document findings that point at a document the case marks PRESENT"""
        if not result.document_analysis:
            return result

        present = {name.lower() for name in case.documents_in(DocumentState.PRESENT)}
        if not present:
            return result

        known_documents = [doc.name.lower() for doc in case.document_status]
        kept: List[DocumentFinding] = []
        for finding in result.document_analysis:
            referenced = _referenced_documents(finding, known_documents)
            if referenced & present:
                logger.warning(
                    f"Dropping {finding.indicator_id} for {case.id}: references a document marked PRESENT"
                )
                continue
            kept.append(finding)

        return result.model_copy(update={'document_analysis': kept})


def _referenced_documents(finding: DocumentFinding, known_documents: List[str]) -> Set[str]:
    indicator = DOCUMENT_INDICATORS.get(finding.indicator_id.strip().upper())
    if indicator:
        return {indicator[0].lower()}
    text = f"{finding.indicator_id} {finding.finding}".lower()
    return {name for name in known_documents if name in text}



def _format_amount(value: float) -> str:
    return f"{value:.0f}" if float(value).is_integer() else f"{value:.2f}"
