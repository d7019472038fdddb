# condition_normalizer.py

from typing import List, Optional

from medicine_api.knowledge_base import KnowledgeBase, get_knowledge_base


def normalize_condition(text: str, kb: Optional[KnowledgeBase] = None) -> str:
    """
    Maps a free-text condition to a canonical protocol key.
      1. lowercase + trim
      2. exact synonym lookup ("high blood pressure" -> "hypertension")
      3. otherwise the cleaned text itself
    Unknown conditions are not an error; the protocol resolver falls back.
    """
    kb = kb or get_knowledge_base()
    normalized = (text or "").lower().strip()
    return kb.synonyms.get(normalized, normalized)


def extract_protocol_keys(text: str, kb: Optional[KnowledgeBase] = None) -> List[str]:
    """Protocol keys mentioned in (or containing) the text, in catalog order."""
    kb = kb or get_knowledge_base()
    lower_text = (text or "").lower().strip()
    if not lower_text:
        return []
    return [key for key in kb.protocol_keys if key in lower_text or lower_text in key]


def extract_conditions_from_description(description: str, kb: Optional[KnowledgeBase] = None) -> List[str]:
    """
    Returns condition labels whose keywords appear in the description,
    e.g. "sore throat and worry" -> ["pain", "anxiety", "cough"].
    """
    kb = kb or get_knowledge_base()
    lower_description = (description or "").lower()
    conditions = []
    for condition, keywords in kb.condition_keywords.items():
        if any(keyword in lower_description for keyword in keywords):
            conditions.append(condition)
    return conditions
