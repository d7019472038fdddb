# recommendation_engine.py
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Optional

from medicine_api import config
from medicine_api.condition_normalizer import normalize_condition
from medicine_api.confidence_scorer import FreeTextScoring, KeywordScoring, ScoringStrategy, StructuredScoring
from medicine_api.data_model import (
    PatientProfile,
    ProtocolResolution,
    RecommendationResult,
    SafetyAssessment,
    TreatmentContext,
)
from medicine_api.dosage_calculator import personalize_dosage
from medicine_api.explanation_utils import build_instructions, build_reasoning, estimate_duration
from medicine_api.knowledge_base import KnowledgeBase, get_knowledge_base
from medicine_api.protocol_resolver import resolve_protocol, resolve_treatment_text, take_first, take_unique
from medicine_api.safety_checks import evaluate_safety

logger = logging.getLogger(__name__)

# Unsafe medicines still surface while fewer than this many safe ones are accumulated
MIN_SAFE_ALTERNATIVES = 2


def _sort_by_confidence(results: List[RecommendationResult]) -> List[RecommendationResult]:
    # sorted() is stable: ties keep resolution order
    return sorted(results, key=lambda r: r.confidence, reverse=True)


def assemble(
    candidate_ids: Iterable[str],
    patient: PatientProfile,
    context: TreatmentContext,
    resolution: ProtocolResolution,
    strategy: ScoringStrategy,
    kb: Optional[KnowledgeBase] = None,
) -> List[RecommendationResult]:
    """
    Builds RecommendationResults for the capped candidate ids.

    Ids missing from the knowledge base are skipped. An unsafe medicine is
    dropped once two safe recommendations exist; before that it is kept,
    carrying its warnings.
    """
    kb = kb or get_knowledge_base()
    first_line = {m.lower() for m in resolution.first_line}
    results: List[RecommendationResult] = []
    safe_count = 0

    for medicine_id in candidate_ids:
        medicine = kb.get_medicine(medicine_id)
        if medicine is None:
            logger.debug("Skipping '%s': not in knowledge base", medicine_id)
            continue

        safety = evaluate_safety(medicine, patient)
        if not safety.safe and safe_count >= MIN_SAFE_ALTERNATIVES:
            logger.debug("Excluding unsafe '%s': %d safe alternatives available", medicine.id, safe_count)
            continue
        if safety.safe:
            safe_count += 1

        dosage = personalize_dosage(medicine, patient, context)
        results.append(RecommendationResult(
            name=medicine.name,
            generic_name=medicine.generic_name,
            dosage=dosage.dosage,
            frequency=dosage.frequency,
            duration=estimate_duration(medicine, context),
            instructions=build_instructions(medicine, patient),
            category=medicine.category,
            interactions=list(medicine.interactions),
            contraindications=list(medicine.contraindications),
            confidence=strategy.score(medicine, safety),
            reasoning=build_reasoning(medicine, context, first_line=medicine.id in first_line),
            side_effects=list(medicine.side_effects),
            safe=safety.safe,
            warnings=list(safety.warnings),
        ))

    return _sort_by_confidence(results)


def generate(
    context: TreatmentContext,
    patient: PatientProfile,
    kb: Optional[KnowledgeBase] = None,
    candidate_cap: Optional[int] = None,
) -> List[RecommendationResult]:
    """
    Structured entry point: condition, severity and symptoms are known.
    Takes the first `candidate_cap` resolved ids as-is (duplicates possible).
    """
    kb = kb or get_knowledge_base()
    cap = config.STRUCTURED_CANDIDATE_CAP if candidate_cap is None else candidate_cap

    condition_key = normalize_condition(context.condition, kb)
    resolution = resolve_protocol(condition_key, kb)
    if not resolution.exact:
        # First-line status only counts for the protocol keyed by the condition itself
        resolution = replace(resolution, first_line=())
    strategy = StructuredScoring(condition_key, context.symptoms, resolution.first_line)

    results = assemble(take_first(resolution.medicine_ids, cap), patient, context, resolution, strategy, kb)
    logger.info(
        "Structured recommendations for '%s' (protocols=%s): %d results",
        condition_key, ",".join(resolution.matched_keys), len(results),
    )
    return results


def generate_from_text(
    treatment_name: str,
    description: str,
    patient: PatientProfile,
    kb: Optional[KnowledgeBase] = None,
    candidate_cap: Optional[int] = None,
) -> List[RecommendationResult]:
    """
    Free-text entry point: only a treatment name and description are known.
    Resolved ids are deduplicated before the cap is applied.
    """
    kb = kb or get_knowledge_base()
    cap = config.FREE_TEXT_CANDIDATE_CAP if candidate_cap is None else candidate_cap

    resolution = resolve_treatment_text(treatment_name, description, kb)
    severity = patient.conditions[0].severity if patient.conditions else "moderate"
    context = TreatmentContext(
        treatment_type=treatment_name,
        condition=treatment_name,
        severity=severity,
        symptoms=[],
    )
    search_text = f"{treatment_name} {description or ''}"
    strategy = FreeTextScoring(search_text, exact_match=resolution.exact, kb=kb)

    results = assemble(take_unique(resolution.medicine_ids, cap), patient, context, resolution, strategy, kb)
    logger.info(
        "Free-text recommendations for '%s' (exact=%s, fallback=%s): %d results",
        treatment_name, resolution.exact, resolution.fallback, len(results),
    )
    return results


def generate_keyword_suggestions(
    treatment_name: str,
    description: str = "",
    kb: Optional[KnowledgeBase] = None,
    candidate_cap: Optional[int] = None,
) -> List[RecommendationResult]:
    """
    Quick suggestions from keywords alone, without a patient profile.
    Every keyword found in the name or description contributes its medicines;
    with no keyword hit the general suggestions are used.
    """
    kb = kb or get_knowledge_base()
    cap = config.KEYWORD_CANDIDATE_CAP if candidate_cap is None else candidate_cap
    search_text = f"{treatment_name} {description or ''}".lower()

    suggested: List[str] = []
    for keyword, medicine_ids in kb.keyword_suggestions.items():
        if keyword in search_text:
            suggested.extend(medicine_ids)
    if not suggested:
        suggested = list(kb.general_suggestions)

    strategy = KeywordScoring(search_text, kb=kb)
    no_patient = SafetyAssessment(safe=True)
    results = []
    for medicine_id in take_unique(suggested, cap):
        medicine = kb.get_medicine(medicine_id)
        if medicine is None:
            continue
        results.append(RecommendationResult(
            name=medicine.name,
            generic_name=medicine.generic_name,
            dosage=medicine.dosage_by_band["adult"].dose,
            frequency="As directed by physician",
            duration="7-14 days",
            instructions=f"Take {medicine.name} as prescribed for {treatment_name}",
            category=medicine.category,
            interactions=list(medicine.interactions),
            contraindications=list(medicine.contraindications),
            confidence=strategy.score(medicine, no_patient),
            reasoning=f"Recommended for {treatment_name} based on standard medical protocols",
            side_effects=list(medicine.side_effects),
        ))

    return _sort_by_confidence(results)
