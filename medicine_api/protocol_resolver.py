# protocol_resolver.py

import logging
from typing import Iterable, List, Optional, Sequence

from medicine_api.condition_normalizer import extract_protocol_keys, normalize_condition
from medicine_api.data_model import ProtocolResolution
from medicine_api.knowledge_base import KnowledgeBase, get_knowledge_base

logger = logging.getLogger(__name__)


def _from_keys(condition_key: str, keys: Sequence[str], kb: KnowledgeBase, exact: bool = False) -> ProtocolResolution:
    medicine_ids: List[str] = []
    first_line: List[str] = []
    for key in keys:
        protocol = kb.protocols[key]
        medicine_ids.extend(protocol.all_tiers())
        first_line.extend(protocol.first_line)
    return ProtocolResolution(
        condition_key=condition_key,
        medicine_ids=tuple(medicine_ids),
        exact=exact,
        matched_keys=tuple(keys),
        first_line=tuple(first_line),
    )


def _fallback(condition_key: str, kb: KnowledgeBase) -> ProtocolResolution:
    # Default protocol contributes first- and second-line only
    protocol = kb.protocols[kb.default_protocol]
    logger.debug("No protocol for '%s', using '%s'", condition_key, kb.default_protocol)
    return ProtocolResolution(
        condition_key=condition_key,
        medicine_ids=protocol.first_line + protocol.second_line,
        matched_keys=(kb.default_protocol,),
        first_line=protocol.first_line,
        fallback=True,
    )


def resolve_protocol(condition_key: str, kb: Optional[KnowledgeBase] = None) -> ProtocolResolution:
    """
    Expands a canonical condition key into ordered candidate medicine ids.

    Exact key -> first_line + second_line + supportive.
    Otherwise every key that contains, or is contained in, the condition key
    contributes its tiers in catalog order. Otherwise the default protocol.
    Duplicates are kept; each entry point decides how to handle them.
    """
    kb = kb or get_knowledge_base()
    key = (condition_key or "").lower().strip()

    if key in kb.protocols:
        return _from_keys(key, [key], kb, exact=True)

    partial = extract_protocol_keys(key, kb)
    if partial:
        return _from_keys(key, partial, kb)

    return _fallback(key, kb)


def resolve_treatment_text(treatment_name: str, description: str, kb: Optional[KnowledgeBase] = None) -> ProtocolResolution:
    """
    Resolution for the free-text entry point. Besides substring matches on
    the treatment name, protocol keys mentioned anywhere in the name or the
    description contribute their tiers too.
    """
    kb = kb or get_knowledge_base()
    key = normalize_condition(treatment_name, kb)

    if key in kb.protocols:
        return _from_keys(key, [key], kb, exact=True)

    keys = extract_protocol_keys(key, kb)
    keys += extract_protocol_keys(f"{key} {description or ''}", kb)
    resolution = _from_keys(key, list(dict.fromkeys(keys)), kb)
    if not resolution.medicine_ids:
        return _fallback(key, kb)
    return resolution


def take_first(medicine_ids: Iterable[str], cap: int) -> List[str]:
    """Structured mode: the first `cap` ids as resolved, duplicates included."""
    return list(medicine_ids)[:cap]


def take_unique(medicine_ids: Iterable[str], cap: int) -> List[str]:
    """Free-text mode: ids deduplicated in encounter order, then capped."""
    return list(dict.fromkeys(medicine_ids))[:cap]
