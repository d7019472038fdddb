# data_model.py

from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Tuple

# --- Knowledge base records (immutable, loaded once) ---

@dataclass(frozen=True)
class DosageBand:
    dose: str           # Display text, e.g. '10-20mg once daily'
    frequency: str      # Machine-usable frequency, e.g. 'once daily'

@dataclass(frozen=True)
class MedicineRecord:
    id: str                                   # Canonical lowercase key, e.g. 'ibuprofen'
    name: str
    generic_name: str
    category: str                             # e.g. 'NSAIDs', 'Antibiotics'
    indications: Tuple[str, ...]
    dosage_by_band: Mapping[str, DosageBand]  # 'adult' | 'elderly' | 'child'
    interactions: Tuple[str, ...] = ()
    contraindications: Tuple[str, ...] = ()
    allergens: Tuple[str, ...] = ()           # Canonical allergen codes, e.g. 'penicillin'
    side_effects: Tuple[str, ...] = ()
    max_daily_dose: Optional[str] = None
    duration: Optional[str] = None            # Fixed course length, e.g. antibiotics
    pregnancy_category: Optional[str] = None

@dataclass(frozen=True)
class ProtocolRecord:
    condition_key: str
    first_line: Tuple[str, ...] = ()
    second_line: Tuple[str, ...] = ()
    supportive: Tuple[str, ...] = ()

    def all_tiers(self) -> Tuple[str, ...]:
        return self.first_line + self.second_line + self.supportive

@dataclass(frozen=True)
class RelevanceRule:
    keywords: Tuple[str, ...]
    hit: int            # Base confidence when any keyword appears in the search text
    miss: int

# --- Request models ---

@dataclass
class MedicalCondition:
    condition: str
    severity: str = "moderate"  # "mild", "moderate" or "severe"
    symptoms: List[str] = field(default_factory=list)
    duration: Optional[str] = None

@dataclass
class PatientProfile:
    age: int
    weight: Optional[float] = None
    height: Optional[float] = None
    allergies: List[str] = field(default_factory=list)
    current_medications: List[str] = field(default_factory=list)
    medical_history: List[str] = field(default_factory=list)
    conditions: List[MedicalCondition] = field(default_factory=list)

@dataclass
class TreatmentContext:
    treatment_type: str
    condition: str
    severity: str
    symptoms: List[str] = field(default_factory=list)
    start_date: str = ""
    target_duration: Optional[str] = None

# --- Engine intermediates ---

@dataclass
class SafetyAssessment:
    safe: bool
    warnings: List[str] = field(default_factory=list)

@dataclass
class DosagePlan:
    dosage: str
    frequency: str

@dataclass(frozen=True)
class ProtocolResolution:
    condition_key: str
    medicine_ids: Tuple[str, ...]             # Resolution order, duplicates allowed
    exact: bool = False
    matched_keys: Tuple[str, ...] = ()
    first_line: Tuple[str, ...] = ()          # First-line ids of every matched protocol
    fallback: bool = False

# --- Output ---

@dataclass
class RecommendationResult:
    name: str
    generic_name: str
    dosage: str
    frequency: str
    duration: str
    instructions: str
    category: str
    interactions: List[str]
    contraindications: List[str]
    confidence: int     # Always within 0..100
    reasoning: str
    side_effects: List[str]
    safe: bool = True
    warnings: List[str] = field(default_factory=list)


def default_patient_profile() -> PatientProfile:
    """Profile used when the profile store has no record for a user."""
    return PatientProfile(
        age=35,
        weight=70,
        height=170,
        allergies=[],
        current_medications=[],
        medical_history=[],
        conditions=[MedicalCondition(condition="general", severity="mild", symptoms=[])],
    )
