"""
Declaration Repository
In-memory inbound queue, intelligence events and Border Queue System traffic
"""
import logging
from typing import Dict, Iterable, List, Optional

from customs_sentinel.models.customs import (
    ELEVATED_SCORE_THRESHOLD,
    CaseRecord,
    CustomsEvent,
    RiskLevel,
    TrafficSegment,
)

logger = logging.getLogger('customs_sentinel.services.declarations')

ALL_LEVELS = 'ALL'

MOCK_DECLARATIONS = [
    CaseRecord(
        id="DEC-882190",
        exporter="Global Dynamics Ltd, Shenzen",
        importer="Tech-West Solutions, USA",
        itemDescription="Microelectronic sub-assemblies for consumer electronics",
        declaredValue=45000,
        currency="USD",
        originCountry="China",
        hsCode="8542.31",
        riskScore=12,
        riskLevel=RiskLevel.LOW,
        timestamp="2024-05-20T10:30:00Z",
        status="PENDING",
        documentRefs=["BOL-CN-882", "INV-2024-001"],
        documentStatus=[
            {"name": "Bill of Lading", "status": "PRESENT"},
            {"name": "Commercial Invoice", "status": "PRESENT"},
        ],
    ),
    CaseRecord(
        id="DEC-910234",
        exporter="Artemis Logistics, Colombia",
        importer="Import-Export Corp, UK",
        itemDescription="Agricultural equipment spare parts",
        declaredValue=2100,
        currency="USD",
        originCountry="Colombia",
        hsCode="8433.90",
        riskScore=68,
        riskLevel=RiskLevel.HIGH,
        timestamp="2024-05-20T11:15:00Z",
        status="FLAGGED",
        documentRefs=["INV-UK-910"],
        documentStatus=[
            {"name": "Bill of Lading", "status": "MISSING"},
            {"name": "Commercial Invoice", "status": "PRESENT"},
        ],
    ),
    CaseRecord(
        id="DEC-774412",
        exporter="Naphtha Energy Trading",
        importer="Local Refineries Inc.",
        itemDescription="Industrial Lubricants and Compounds",
        declaredValue=850000,
        currency="USD",
        originCountry="Russia",
        hsCode="2710.19",
        riskScore=92,
        riskLevel=RiskLevel.CRITICAL,
        timestamp="2024-05-20T09:00:00Z",
        status="INSPECTING",
        documentRefs=["BOL-RU-774"],
        documentStatus=[
            {"name": "Bill of Lading", "status": "PRESENT"},
            {"name": "Commercial Invoice", "status": "INCONSISTENT"},
            {"name": "Certificate of Origin", "status": "MISSING"},
        ],
    ),
]

MOCK_EVENTS = [
    CustomsEvent(
        id="EVT-001",
        date="2023-12-15",
        type="SEIZURE",
        description="Undisclosed high-capacity batteries found in crates marked as 'Office Furniture'",
        entities=["B-Logistics Group", "Furniture Direct Co"],
        severity=RiskLevel.CRITICAL,
        outcome="Goods seized, $50k fine issued",
    ),
    CustomsEvent(
        id="EVT-002",
        date="2024-01-22",
        type="FRAUD",
        description="Systematic undervaluation of silk textiles from Vietnam",
        entities=["SilkRoad Imports"],
        severity=RiskLevel.HIGH,
        outcome="Audit triggered, 3-year monitoring",
    ),
    CustomsEvent(
        id="EVT-003",
        date="2024-03-05",
        type="SANCTION_HIT",
        description="Dual-use hardware components linked to prohibited end-user",
        entities=["Precision Parts SA", "Undisclosed Buyer"],
        severity=RiskLevel.CRITICAL,
        outcome="Blocked entry, reported to intelligence",
    ),
]

BQS_VOLUME_DATA = [
    TrafficSegment(
        category="Empty Trucks",
        volume=3229,
        riskAnalysis="High volume, low complexity.",
        context="Allows for 'Green Lane' optimization to prioritize loaded assets.",
    ),
    TrafficSegment(
        category="Standard Loaded Cargo",
        volume=1700,
        riskAnalysis="Standard risk profile.",
        context="Requires standard documentary and physical checks.",
    ),
    TrafficSegment(
        category="AEO (Authorized Economic Operator)",
        volume=2896,
        riskAnalysis="Low-risk/High-trust.",
        context="Represents 34% of total traffic. BQS allows these 'Green Lane' partners to bypass standard congestion, rewarding compliance.",
    ),
    TrafficSegment(
        category="International Transit",
        volume=590,
        riskAnalysis="High risk for 'leakage'.",
        context="Requires strict monitoring of entry/exit timestamps to prevent domestic market infusion.",
    ),
]


def parse_risk_filter(raw: Optional[str]) -> Optional[RiskLevel]:
    """'ALL' or empty means no filter; anything else must be a RiskLevel name"""
    if raw is None or raw.strip().upper() in ('', ALL_LEVELS):
        return None
    try:
        return RiskLevel(raw.strip().upper())
    except ValueError:
        raise ValueError(f"Unknown risk level: {raw}")


class DeclarationRepository:
    """Read-only queue of declarations plus dashboard reference data"""

    def __init__(
        self,
        declarations: Iterable[CaseRecord] = MOCK_DECLARATIONS,
        events: Iterable[CustomsEvent] = MOCK_EVENTS,
        traffic: Iterable[TrafficSegment] = BQS_VOLUME_DATA,
    ):
        self._declarations: Dict[str, CaseRecord] = {}
        for declaration in declarations:
            self._declarations[declaration.id] = declaration
        self._events = list(events)
        self._traffic = list(traffic)

    def list(self, risk_filter: Optional[RiskLevel] = None) -> List[CaseRecord]:
        declarations = list(self._declarations.values())
        if risk_filter is None:
            return declarations
        return [d for d in declarations if d.risk_level == risk_filter]

    def get(self, declaration_id: str) -> Optional[CaseRecord]:
        return self._declarations.get(declaration_id)

    def events(self) -> List[CustomsEvent]:
        return list(self._events)

    def traffic(self) -> List[TrafficSegment]:
        return list(self._traffic)

    def stats(self) -> Dict[str, object]:
        declarations = list(self._declarations.values())
        by_level = {level.value: 0 for level in RiskLevel}
        for declaration in declarations:
            if declaration.risk_level is not None:
                by_level[declaration.risk_level.value] += 1

        return {
            'queue_size': len(declarations),
            'seizures': sum(1 for e in self._events if e.type == 'SEIZURE'),
            'elevated': sum(
                1 for d in declarations
                if d.risk_score is not None and d.risk_score > ELEVATED_SCORE_THRESHOLD
            ),
            'by_level': by_level,
            'traffic_volume': sum(segment.volume for segment in self._traffic),
        }
