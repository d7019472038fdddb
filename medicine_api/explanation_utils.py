# explanation_utils.py

from medicine_api.data_model import MedicineRecord, PatientProfile, TreatmentContext
from medicine_api.safety_checks import ELDERLY_AGE

BASE_INSTRUCTION = "Take as directed by your healthcare provider."
ANTIBIOTIC_INSTRUCTION = "Complete the full course even if symptoms improve."
METFORMIN_INSTRUCTION = "Take with meals to reduce stomach upset."
ELDERLY_INSTRUCTION = "Monitor for side effects closely due to age."


def build_instructions(medicine: MedicineRecord, patient: PatientProfile) -> str:
    parts = [BASE_INSTRUCTION]

    if medicine.category == "Antibiotics":
        parts.append(ANTIBIOTIC_INSTRUCTION)

    if medicine.name == "Metformin":
        parts.append(METFORMIN_INSTRUCTION)

    if patient.age > ELDERLY_AGE:
        parts.append(ELDERLY_INSTRUCTION)

    return " ".join(parts)


def build_reasoning(medicine: MedicineRecord, context: TreatmentContext, first_line: bool = False) -> str:
    """
    Human-readable justification for a recommendation. Free text only;
    nothing downstream parses it.
    """
    condition = context.condition
    tier = "first-line" if first_line else "effective"
    return (
        f"{medicine.name} is recommended for {condition} based on current clinical guidelines. "
        f"This medication is {tier} treatment for {context.severity} {condition}. "
        "The recommendation considers the patient's specific symptoms and medical profile."
    )


def estimate_duration(medicine: MedicineRecord, context: TreatmentContext) -> str:
    """
    Treatment length: the medicine's fixed course if it has one, otherwise a
    default by condition type, then the context's target duration.
    """
    if medicine.duration:
        return medicine.duration

    condition = (context.condition or "").lower()
    if "infection" in condition:
        return "7-10 days"
    if "pain" in condition:
        return "as needed"
    if "chronic" in condition or "diabetes" in condition or "hypertension" in condition:
        return "ongoing"

    return context.target_duration or "as directed by physician"
