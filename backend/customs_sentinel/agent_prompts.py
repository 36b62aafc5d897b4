"""
Agent System Instructions and Prompt Templates
"""

# Required-document checklist the model cross-checks declarations against.
# indicator id -> (document name, state that triggers the indicator)
DOCUMENT_INDICATORS = {
    "RI-001": ("Bill of Lading", "MISSING"),
    "RI-002": ("Commercial Invoice", "INCONSISTENT"),
    "RI-003": ("Packing List", "MISSING"),
    "RI-005": ("Certificate of Origin", "MISSING"),
}

# JSON shape the Analysis Gateway validates against
RISK_ANALYSIS_SCHEMA = {
    "type": "object",
    "properties": {
        "score": {"type": "number", "minimum": 0, "maximum": 100},
        "level": {"type": "string", "enum": ["LOW", "MEDIUM", "HIGH", "CRITICAL"]},
        "analysis": {"type": "string"},
        "flags": {"type": "array", "items": {"type": "string"}},
        "valuationAnomaly": {"type": "number"},
        "documentAnalysis": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "indicator_id": {"type": "string"},
                    "finding": {"type": "string"},
                    "severity": {"type": "string", "enum": ["LOW", "MEDIUM", "HIGH"]},
                },
                "required": ["indicator_id", "finding", "severity"],
            },
        },
    },
    "required": ["score", "level", "analysis", "flags"],
}

RISK_ANALYSIS_SYSTEM_PROMPT = """You are Customs Sentinel, a high-precision risk evaluation engine for customs declarations.
You assess structural integrity and fraud risk of a single declaration.

OUTPUT: a single JSON object that matches the schema given in the request.
- score: number 0-100
- level: exactly one of "LOW", "MEDIUM", "HIGH", "CRITICAL"
- analysis: non-empty rationale explaining the logic behind each flag
- flags: array of short flag labels (may be empty)
- valuationAnomaly: optional signed ratio (Actual - Expected) / Expected
- documentAnalysis: optional array of {indicator_id, finding, severity}; severity is "LOW", "MEDIUM" or "HIGH"

Never report a document finding for a document whose status is PRESENT.
Return only valid JSON, no explanations outside the object."""

RISK_ANALYSIS_USER_PROMPT_TEMPLATE = """Analyze the following declaration for structural integrity and fraud risk:

DECLARATION DATA:
ID: {id}
Exporter: {exporter}
Importer: {importer}
Commodity: {item_description}
Value: {declared_value} {currency}
Origin: {origin_country}
HS Code: {hs_code}{hs_description}
Document Status: {document_status}

ANALYSIS REQUIREMENTS:
1. VALUATION REGRESSION: Predict the 'Expected Unit Value' based on HS Code and Origin.
   Return 'valuationAnomaly' as (Actual - Expected) / Expected.

2. DOCUMENT ANALYSIS: Compare the provided 'Document Status' against legal requirements.
{indicator_checklist}
   - Emit one documentAnalysis finding for every document whose status is MISSING or INCONSISTENT.

3. RISK SCORING: Provide a 0-100 score and a categorical risk level (LOW, MEDIUM, HIGH, CRITICAL).

4. FINDINGS: Detail the specific logic for each flag triggered in 'analysis'.

Respond with JSON matching this schema:
{schema}"""

SCENARIO_SIMULATION_PROMPT_TEMPLATE = """Act as a senior Customs Risk Analyst. Simulate the potential risk outcome for the following scenario: "{scenario}".
Provide a structured response including:
- Predicted Risk Level (LOW, MEDIUM, HIGH, CRITICAL)
- Primary Risk Factors
- Recommended Countermeasures
- Historical Precedents if any.
Return as Markdown."""

SENTINEL_CHAT_SYSTEM_PROMPT = (
    "You are 'Sentinel', a Customs Intelligence Assistant. You help customs officers "
    "evaluate risk. Focus on regulatory compliance, fraud detection, and safety."
)

SENTINEL_CHAT_GREETING = "Ready to assist. How can I help you evaluate today's declarations?"

SENTINEL_CHAT_FALLBACK = "Connection error. Please try again."

SIMULATION_FALLBACK = "Failed to run simulation. Please try again."

ANALYSIS_FALLBACK = "Risk analysis unavailable. Please try again."


def format_indicator_checklist() -> str:
    lines = []
    for indicator_id, (document, trigger) in DOCUMENT_INDICATORS.items():
        verb = "is missing" if trigger == "MISSING" else "is INCONSISTENT"
        lines.append(f"   - {indicator_id}: {document} {verb}.")
    return "\n".join(lines)
