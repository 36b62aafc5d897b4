import pytest
from pydantic import ValidationError

from conftest import VALID_ANALYSIS
from customs_sentinel.models.customs import AnalysisResult, CaseRecord, DocumentState
from customs_sentinel.services.hs_code_reference import HSCodeReferenceService

MINIMAL_CASE = {
    "id": "DEC-1",
    "itemDescription": "Industrial valves",
    "declaredValue": 1000,
    "currency": "USD",
    "originCountry": "Turkey",
    "hsCode": "8481.80",
}


def test_minimal_case_defaults_to_no_documents():
    case = CaseRecord.model_validate(MINIMAL_CASE)
    assert case.document_status == ()
    assert case.documents_in(DocumentState.MISSING) == []


@pytest.mark.parametrize("missing", ["id", "itemDescription", "declaredValue", "currency", "originCountry", "hsCode"])
def test_required_case_fields(missing):
    payload = {k: v for k, v in MINIMAL_CASE.items() if k != missing}
    with pytest.raises(ValidationError):
        CaseRecord.model_validate(payload)


def test_unknown_document_state_is_rejected():
    with pytest.raises(ValidationError):
        CaseRecord.model_validate({**MINIMAL_CASE, "documentStatus": [{"name": "Bill of Lading", "status": "LOST"}]})


def test_case_record_is_immutable():
    case = CaseRecord.model_validate(MINIMAL_CASE)
    with pytest.raises(ValidationError):
        case.declared_value = 5


def test_hs_code_normalisation():
    service = HSCodeReferenceService()
    assert service.lookup_code("8542.31.0000")["code"] == "8542.31"
    assert service.lookup_code("8542.32") is None
    assert service.validate_code_format("12")["is_valid_format"] is False


@pytest.mark.parametrize("field", ["score", "valuationAnomaly"])
def test_analysis_result_rejects_non_finite_numbers(field):
    with pytest.raises(ValidationError):
        AnalysisResult.model_validate({**VALID_ANALYSIS, field: float("inf")})
