import pytest
from medicine_api.data_model import PatientProfile
from medicine_api.dosage_calculator import derive_frequency, get_band_key, personalize_dosage
from medicine_api.knowledge_base import KnowledgeBase, get_knowledge_base


@pytest.mark.parametrize("dose, expected", [
    ("200mg every 6-8 hours", "6-8 hours"),
    ("2 puffs every 4-6 hours as needed", "4-6 hours as needed"),
    ("500mg twice daily with meals", "twice daily"),
    ("10mg once daily in evening", "once daily"),
    ("1-2 sprays each nostril daily", "as directed"),
])
def test_derive_frequency(dose, expected):
    assert derive_frequency(dose) == expected


def test_band_selection_by_age():
    lisinopril = get_knowledge_base().get_medicine("lisinopril")
    assert get_band_key(lisinopril, 45) == "adult"
    assert get_band_key(lisinopril, 65) == "adult"
    assert get_band_key(lisinopril, 66) == "elderly"


def test_elderly_without_elderly_band_gets_adult_dose():
    amoxicillin = get_knowledge_base().get_medicine("amoxicillin")
    plan = personalize_dosage(amoxicillin, PatientProfile(age=80))
    assert plan.dosage == "250-500mg every 8 hours"
    assert plan.frequency == "8 hours"


def test_child_band_is_never_selected():
    cetirizine = get_knowledge_base().get_medicine("cetirizine")
    plan = personalize_dosage(cetirizine, PatientProfile(age=8))
    assert plan.dosage == "10mg once daily"


def test_structured_frequency_is_used():
    lisinopril = get_knowledge_base().get_medicine("lisinopril")
    plan = personalize_dosage(lisinopril, PatientProfile(age=70))
    assert plan.dosage == "5-10mg once daily"
    assert plan.frequency == "once daily"


def test_frequency_falls_back_to_dose_text():
    kb = KnowledgeBase.from_dict({
        "medicines": {
            "naproxen": {
                "name": "Naproxen",
                "category": "NSAIDs",
                "indications": ["pain"],
                "dosage": {"adult": "250mg every 12 hours"},
            }
        },
        "protocols": {"general treatment": {"first_line": ["naproxen"]}},
    })
    plan = personalize_dosage(kb.get_medicine("naproxen"), PatientProfile(age=40))
    assert plan.frequency == "12 hours"
