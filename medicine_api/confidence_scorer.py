# confidence_scorer.py

import math
from typing import Iterable, List, Optional

from medicine_api.data_model import MedicineRecord, SafetyAssessment
from medicine_api.knowledge_base import KnowledgeBase, get_knowledge_base

# Structured weights
INDICATION_MATCH = 40
SYMPTOM_OVERLAP = 30
SAFE_BONUS = 20
UNSAFE_PENALTY = 30
FIRST_LINE_BONUS = 10

# Free-text weights
EXACT_PROTOCOL_BONUS = 15
FREE_TEXT_SAFE_BONUS = 5
WARNING_PENALTY = 10
FREE_TEXT_CAP = 95


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: float, low: int = 0, high: int = 100) -> int:
    return _round_half_up(max(low, min(high, value)))


class ScoringStrategy:
    """Turns a medicine and its safety verdict into a 0-100 confidence."""

    name = "base"

    def score(self, medicine: MedicineRecord, safety: SafetyAssessment) -> int:
        raise NotImplementedError


class StructuredScoring(ScoringStrategy):
    """
    Scoring for a structured treatment context:
      +40  normalized condition listed in the medicine's indications
      +30  scaled by the share of symptoms found inside an indication
      +20  safe, or -30 when the allergy check failed
      +10  medicine is first-line for the resolved condition
    Clamped to 0..100 on both sides.
    """

    name = "structured"

    def __init__(self, condition_key: str, symptoms: Optional[Iterable[str]] = None, first_line: Iterable[str] = ()):
        self.condition_key = (condition_key or "").lower().strip()
        self.symptoms: List[str] = [s.lower().strip() for s in symptoms or []]
        self.first_line = {m.lower() for m in first_line}

    def symptom_overlap(self, medicine: MedicineRecord) -> float:
        if not self.symptoms:
            return 0.0
        indications = [i.lower() for i in medicine.indications]
        matched = [s for s in self.symptoms if any(s in indication for indication in indications)]
        return len(matched) / len(self.symptoms)

    def score(self, medicine: MedicineRecord, safety: SafetyAssessment) -> int:
        confidence = 0.0

        if self.condition_key in (i.lower() for i in medicine.indications):
            confidence += INDICATION_MATCH

        confidence += SYMPTOM_OVERLAP * self.symptom_overlap(medicine)

        if safety.safe:
            confidence += SAFE_BONUS
        else:
            confidence -= UNSAFE_PENALTY

        if medicine.id in self.first_line:
            confidence += FIRST_LINE_BONUS

        return clamp(confidence)


class FreeTextScoring(ScoringStrategy):
    """
    Scoring for a treatment name + description. Starts from the keyword
    relevance table, then +15 for an exact protocol match, +5 if safe and
    -10 if there is any warning. Only capped from above, at 95.
    """

    name = "free_text"

    def __init__(self, search_text: str, exact_match: bool = False, kb: Optional[KnowledgeBase] = None):
        self.search_text = (search_text or "").lower()
        self.exact_match = exact_match
        self.kb = kb or get_knowledge_base()

    def score(self, medicine: MedicineRecord, safety: SafetyAssessment) -> int:
        confidence = self.kb.relevance_base(medicine.id, self.search_text)
        if self.exact_match:
            confidence += EXACT_PROTOCOL_BONUS
        if safety.safe:
            confidence += FREE_TEXT_SAFE_BONUS
        if safety.warnings:
            confidence -= WARNING_PENALTY
        return min(confidence, FREE_TEXT_CAP)


class KeywordScoring(FreeTextScoring):
    """Relevance table only; used when no patient profile is available."""

    name = "keyword"

    def score(self, medicine: MedicineRecord, safety: SafetyAssessment) -> int:
        return min(self.kb.relevance_base(medicine.id, self.search_text), FREE_TEXT_CAP)
