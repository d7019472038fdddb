import unittest

from medicine_api.confidence_scorer import (
    FREE_TEXT_CAP,
    FreeTextScoring,
    KeywordScoring,
    StructuredScoring,
    clamp,
)
from medicine_api.data_model import SafetyAssessment
from medicine_api.knowledge_base import get_knowledge_base

SAFE = SafetyAssessment(safe=True)
UNSAFE = SafetyAssessment(safe=False, warnings=["Patient has known allergy to this medication"])


class TestClamp(unittest.TestCase):
    def test_rounds_half_up(self):
        self.assertEqual(clamp(12.5), 13)
        self.assertEqual(clamp(12.4), 12)

    def test_bounds(self):
        self.assertEqual(clamp(-20), 0)
        self.assertEqual(clamp(130), 100)


class TestStructuredScoring(unittest.TestCase):
    def setUp(self):
        self.kb = get_knowledge_base()
        self.ibuprofen = self.kb.get_medicine("ibuprofen")

    def test_all_components(self):
        strategy = StructuredScoring("pain", ["pain", "nausea"], first_line=["ibuprofen"])
        # 40 + 30 * 1/2 + 20 + 10
        self.assertEqual(strategy.score(self.ibuprofen, SAFE), 85)

    def test_symptom_overlap_is_substring_of_indication(self):
        strategy = StructuredScoring("x", ["ear infection"])
        amoxicillin = self.kb.get_medicine("amoxicillin")
        self.assertEqual(strategy.symptom_overlap(amoxicillin), 1.0)

    def test_no_symptoms_no_overlap(self):
        strategy = StructuredScoring("pain", [])
        self.assertEqual(strategy.symptom_overlap(self.ibuprofen), 0.0)

    def test_unsafe_penalty_replaces_bonus(self):
        strategy = StructuredScoring("pain", [])
        self.assertEqual(strategy.score(self.ibuprofen, SAFE) - strategy.score(self.ibuprofen, UNSAFE), 50)

    def test_never_negative(self):
        strategy = StructuredScoring("unrelated", [])
        self.assertEqual(strategy.score(self.ibuprofen, UNSAFE), 0)


class TestFreeTextScoring(unittest.TestCase):
    def setUp(self):
        self.kb = get_knowledge_base()

    def test_capped_at_95(self):
        strategy = FreeTextScoring("bacterial infection", exact_match=True, kb=self.kb)
        self.assertEqual(strategy.score(self.kb.get_medicine("amoxicillin"), SAFE), FREE_TEXT_CAP)

    def test_warning_penalty(self):
        strategy = FreeTextScoring("sore throat", kb=self.kb)
        # miss 60, no safe bonus, -10 for the warning
        self.assertEqual(strategy.score(self.kb.get_medicine("amoxicillin"), UNSAFE), 50)

    def test_safe_with_advisory_warning(self):
        strategy = FreeTextScoring("pain", kb=self.kb)
        advisory = SafetyAssessment(safe=True, warnings=["Potential drug interaction detected"])
        # hit 90 + 5 - 10
        self.assertEqual(strategy.score(self.kb.get_medicine("ibuprofen"), advisory), 85)

    def test_unlisted_medicine_uses_default_relevance(self):
        strategy = FreeTextScoring("anything", kb=self.kb)
        self.assertEqual(strategy.score(self.kb.get_medicine("amlodipine"), SAFE), 80)

    def test_keyword_scoring_ignores_safety(self):
        strategy = KeywordScoring("headache pain", kb=self.kb)
        self.assertEqual(strategy.score(self.kb.get_medicine("acetaminophen"), SAFE), 95)
        self.assertEqual(strategy.score(self.kb.get_medicine("ibuprofen"), SAFE), 90)


if __name__ == "__main__":
    unittest.main()
