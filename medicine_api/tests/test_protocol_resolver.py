import pytest
from medicine_api.condition_normalizer import normalize_condition
from medicine_api.protocol_resolver import resolve_protocol, resolve_treatment_text, take_first, take_unique


def test_exact_key_resolves_all_tiers():
    resolution = resolve_protocol("respiratory")
    assert resolution.exact
    assert resolution.medicine_ids == (
        "albuterol", "dextromethorphan", "guaifenesin",
        "fluticasone", "montelukast", "cetirizine",
        "saline spray", "humidifier",
    )
    assert resolution.first_line == ("albuterol", "dextromethorphan", "guaifenesin")


def test_partial_match_concatenates_protocols_with_duplicates():
    resolution = resolve_protocol("asthma allergies")
    assert not resolution.exact
    assert resolution.matched_keys == ("asthma", "allergies")
    assert resolution.medicine_ids.count("fluticasone") == 2


def test_unknown_condition_uses_default_protocol():
    resolution = resolve_protocol("something unheard of")
    assert resolution.fallback
    assert resolution.medicine_ids == ("acetaminophen", "ibuprofen", "multivitamin")


def test_empty_condition_uses_default_protocol():
    assert resolve_protocol("").fallback


def test_hypertension_variants_resolve_to_same_candidates():
    a = resolve_protocol(normalize_condition("High Blood Pressure (Hypertension)"))
    b = resolve_protocol(normalize_condition("hypertension"))
    assert set(a.medicine_ids) == set(b.medicine_ids)


def test_treatment_text_matches_name_and_description():
    resolution = resolve_treatment_text("Respiratory infection follow-up", "chest congestion and cough")
    assert not resolution.exact
    assert resolution.matched_keys == ("respiratory", "respiratory infection", "infection", "cough")


def test_treatment_text_exact_after_synonyms():
    resolution = resolve_treatment_text("High blood pressure", "")
    assert resolution.exact
    assert resolution.condition_key == "hypertension"


def test_treatment_text_fallback():
    resolution = resolve_treatment_text("Annual checkup", "nothing specific")
    assert resolution.fallback


@pytest.mark.parametrize("ids, cap, expected", [
    (["a", "b", "a", "c"], 3, ["a", "b", "a"]),
    (["a", "b"], 6, ["a", "b"]),
    ([], 6, []),
])
def test_take_first(ids, cap, expected):
    assert take_first(ids, cap) == expected


@pytest.mark.parametrize("ids, cap, expected", [
    (["a", "b", "a", "c"], 3, ["a", "b", "c"]),
    (["a", "a", "a"], 8, ["a"]),
])
def test_take_unique(ids, cap, expected):
    assert take_unique(ids, cap) == expected
