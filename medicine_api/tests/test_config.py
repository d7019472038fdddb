import pytest
from medicine_api.config import _int_env


def test_int_env_default_when_unset(monkeypatch):
    monkeypatch.delenv("STRUCTURED_CANDIDATE_CAP", raising=False)
    assert _int_env("STRUCTURED_CANDIDATE_CAP", 6) == 6


def test_int_env_reads_value(monkeypatch):
    monkeypatch.setenv("STRUCTURED_CANDIDATE_CAP", "4")
    assert _int_env("STRUCTURED_CANDIDATE_CAP", 6) == 4


@pytest.mark.parametrize("raw", ["0", "-1", "abc", "  "])
def test_int_env_rejects_invalid_caps(monkeypatch, raw):
    monkeypatch.setenv("FREE_TEXT_CANDIDATE_CAP", raw)
    assert _int_env("FREE_TEXT_CANDIDATE_CAP", 8) == 8
