import pytest
from medicine_api.condition_normalizer import (
    extract_conditions_from_description,
    extract_protocol_keys,
    normalize_condition,
)


@pytest.mark.parametrize("text, expected", [
    ("High Blood Pressure", "hypertension"),
    ("  hypertension ", "hypertension"),
    ("Type 2 Diabetes", "diabetes"),
    ("bacterial infection", "infection"),
    ("Some Rare Disease", "some rare disease"),
    ("", ""),
])
def test_normalize_condition(text, expected):
    assert normalize_condition(text) == expected


def test_extract_protocol_keys_keeps_catalog_order():
    keys = extract_protocol_keys("respiratory infection follow-up")
    assert keys == ["respiratory", "respiratory infection", "infection"]


def test_extract_protocol_keys_reverse_containment():
    # "asthm" is contained in the key "asthma"
    assert extract_protocol_keys("asthm") == ["asthma"]


def test_extract_protocol_keys_empty_text():
    assert extract_protocol_keys("   ") == []


def test_extract_conditions_from_description():
    conditions = extract_conditions_from_description("Sore throat and a lot of worry")
    assert conditions == ["pain", "anxiety", "cough"]


def test_extract_conditions_nothing_found():
    assert extract_conditions_from_description("routine checkup") == []
