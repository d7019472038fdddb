# safety_checks.py

from typing import List, Optional

from medicine_api.data_model import MedicineRecord, PatientProfile, SafetyAssessment

ALLERGY_WARNING = "Patient has known allergy to this medication"
INTERACTION_WARNING = "Potential drug interaction detected"
ELDERLY_NSAID_WARNING = "Use with caution in elderly patients"

ELDERLY_AGE = 65


def find_allergy_conflict(medicine: MedicineRecord, allergies: List[str]) -> Optional[str]:
    """
    Returns the first patient allergy that conflicts with the medicine, or None.

    An allergy conflicts when it is a substring of a contraindication (or the
    other way round), case-insensitively, or when it equals one of the
    medicine's canonical allergen codes.
    """
    contraindications = [c.lower() for c in medicine.contraindications]
    for allergy in allergies or []:
        allergy_lower = allergy.lower().strip()
        if not allergy_lower:
            continue
        if allergy_lower in medicine.allergens:
            return allergy
        if any(allergy_lower in contra or contra in allergy_lower for contra in contraindications):
            return allergy
    return None


def find_interactions(medicine: MedicineRecord, current_medications: List[str]) -> List[str]:
    """Current medications listed in the medicine's interaction set (case-insensitive, exact)."""
    interactions = {i.lower() for i in medicine.interactions}
    return [med for med in current_medications or [] if med.lower().strip() in interactions]


def evaluate_safety(medicine: MedicineRecord, patient: PatientProfile) -> SafetyAssessment:
    # Only the allergy check makes a medicine unsafe; the rest are advisory
    warnings = []
    safe = True

    if find_allergy_conflict(medicine, patient.allergies):
        safe = False
        warnings.append(ALLERGY_WARNING)

    if find_interactions(medicine, patient.current_medications):
        warnings.append(INTERACTION_WARNING)

    if patient.age > ELDERLY_AGE and medicine.category == "NSAIDs":
        warnings.append(ELDERLY_NSAID_WARNING)

    return SafetyAssessment(safe=safe, warnings=warnings)
