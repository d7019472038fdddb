# dosage_calculator.py

from typing import Optional

from medicine_api.data_model import DosagePlan, MedicineRecord, PatientProfile, TreatmentContext
from medicine_api.safety_checks import ELDERLY_AGE

DEFAULT_FREQUENCY = "as directed"


def get_band_key(medicine: MedicineRecord, age: int) -> str:
    # Binary adult/elderly selection; the child band is never picked automatically
    if age > ELDERLY_AGE and "elderly" in medicine.dosage_by_band:
        return "elderly"
    return "adult"


def derive_frequency(dose: str) -> str:
    """
    Reads a frequency off the dose text:
      "200mg every 6-8 hours"        -> "6-8 hours"
      "500mg twice daily with meals" -> "twice daily"
      anything else                  -> "as directed"
    """
    if "every" in dose:
        return dose.split("every")[1].strip()
    if "once daily" in dose:
        return "once daily"
    if "twice daily" in dose:
        return "twice daily"
    return DEFAULT_FREQUENCY


def personalize_dosage(
    medicine: MedicineRecord,
    patient: PatientProfile,
    context: Optional[TreatmentContext] = None,
) -> DosagePlan:
    """
    Picks the age-appropriate dose band for the patient.
    The frequency comes from the band's structured field; bands without one
    fall back to reading it off the dose text.
    """
    # TODO: use context.severity once the knowledge base carries per-severity starting doses
    band = medicine.dosage_by_band[get_band_key(medicine, patient.age)]
    frequency = band.frequency or derive_frequency(band.dose)
    return DosagePlan(dosage=band.dose, frequency=frequency)
