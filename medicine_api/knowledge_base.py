# knowledge_base.py

import json
import logging
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

from medicine_api import config
from medicine_api.data_model import DosageBand, MedicineRecord, ProtocolRecord, RelevanceRule

logger = logging.getLogger(__name__)

DOSAGE_BANDS = ("adult", "elderly", "child")

# Lowest relevance base; free-text scores stay >= 0 after the 10 point warning penalty
MIN_RELEVANCE = 10


class KnowledgeBaseError(Exception):
    pass


def _strings(value: Any, where: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise KnowledgeBaseError(f"{where}: expected a list of strings, got {value!r}")
    return tuple(value)


def _parse_medicine(med_id: str, raw: Dict[str, Any]) -> MedicineRecord:
    try:
        bands = {}
        for band, entry in (raw.get("dosage") or {}).items():
            if band not in DOSAGE_BANDS:
                raise KnowledgeBaseError(f"medicine '{med_id}': unknown dosage band '{band}'")
            if isinstance(entry, str):
                # Bare dose text; frequency is derived by the dosage calculator
                bands[band] = DosageBand(dose=entry, frequency="")
            else:
                bands[band] = DosageBand(dose=entry["dose"], frequency=entry.get("frequency", ""))
        if "adult" not in bands:
            raise KnowledgeBaseError(f"medicine '{med_id}': missing 'adult' dosage band")

        return MedicineRecord(
            id=med_id.lower(),
            name=raw["name"],
            generic_name=raw.get("generic_name", med_id.lower()),
            category=raw["category"],
            indications=_strings(raw.get("indications"), f"{med_id}.indications"),
            dosage_by_band=MappingProxyType(bands),
            interactions=_strings(raw.get("interactions"), f"{med_id}.interactions"),
            contraindications=_strings(raw.get("contraindications"), f"{med_id}.contraindications"),
            allergens=tuple(a.lower() for a in _strings(raw.get("allergens"), f"{med_id}.allergens")),
            side_effects=_strings(raw.get("side_effects"), f"{med_id}.side_effects"),
            max_daily_dose=raw.get("max_daily_dose"),
            duration=raw.get("duration"),
            pregnancy_category=raw.get("pregnancy_category"),
        )
    except KeyError as e:
        raise KnowledgeBaseError(f"medicine '{med_id}': missing field {e}") from e


def _parse_protocol(key: str, raw: Dict[str, Any]) -> ProtocolRecord:
    return ProtocolRecord(
        condition_key=key.lower(),
        first_line=_strings(raw.get("first_line"), f"protocol '{key}'.first_line"),
        second_line=_strings(raw.get("second_line"), f"protocol '{key}'.second_line"),
        supportive=_strings(raw.get("supportive"), f"protocol '{key}'.supportive"),
    )


def _parse_relevance(med_id: str, raw: Dict[str, Any]) -> RelevanceRule:
    rule = RelevanceRule(
        keywords=_strings(raw.get("keywords"), f"relevance '{med_id}'.keywords"),
        hit=raw.get("hit"),
        miss=raw.get("miss"),
    )
    for value in (rule.hit, rule.miss):
        if not isinstance(value, int) or not MIN_RELEVANCE <= value <= 100:
            raise KnowledgeBaseError(
                f"relevance '{med_id}': values must be integers in {MIN_RELEVANCE}..100, got {value!r}"
            )
    return rule


class KnowledgeBase:
    """
    Read-only catalog of medicines, treatment protocols and the text tables
    used for matching. Built once and shared by every recommendation call.
    """

    _instance = None
    _lock = threading.Lock()

    def __init__(
        self,
        medicines: Mapping[str, MedicineRecord],
        protocols: Mapping[str, ProtocolRecord],
        synonyms: Mapping[str, str],
        relevance: Mapping[str, RelevanceRule],
        keyword_suggestions: Mapping[str, Tuple[str, ...]],
        condition_keywords: Mapping[str, Tuple[str, ...]],
        default_protocol: str = "general treatment",
        default_relevance: int = 75,
        general_suggestions: Iterable[str] = (),
        version: Optional[str] = None,
    ):
        if default_protocol not in protocols:
            raise KnowledgeBaseError(f"default protocol '{default_protocol}' is not in the protocol catalog")
        if not MIN_RELEVANCE <= default_relevance <= 100:
            raise KnowledgeBaseError(f"default relevance must be in {MIN_RELEVANCE}..100, got {default_relevance}")

        self.medicines = MappingProxyType(dict(medicines))
        self.protocols = MappingProxyType(dict(protocols))
        self.synonyms = MappingProxyType({k.lower(): v.lower() for k, v in synonyms.items()})
        self.relevance = MappingProxyType(dict(relevance))
        self.keyword_suggestions = MappingProxyType(dict(keyword_suggestions))
        self.condition_keywords = MappingProxyType(dict(condition_keywords))
        self.default_protocol = default_protocol
        self.default_relevance = default_relevance
        self.general_suggestions = tuple(general_suggestions)
        self.version = version

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KnowledgeBase":
        if not isinstance(data, dict):
            raise KnowledgeBaseError("knowledge base root must be a JSON object")

        medicines = {k.lower(): _parse_medicine(k, v) for k, v in (data.get("medicines") or {}).items()}
        protocols = {k.lower(): _parse_protocol(k, v) for k, v in (data.get("protocols") or {}).items()}
        relevance = {k.lower(): _parse_relevance(k, v) for k, v in (data.get("relevance") or {}).items()}
        keyword_suggestions = {
            k.lower(): _strings(v, f"keyword_suggestions '{k}'")
            for k, v in (data.get("keyword_suggestions") or {}).items()
        }
        condition_keywords = {
            k: _strings(v, f"condition_keywords '{k}'")
            for k, v in (data.get("condition_keywords") or {}).items()
        }

        return cls(
            medicines=medicines,
            protocols=protocols,
            synonyms=data.get("synonyms") or {},
            relevance=relevance,
            keyword_suggestions=keyword_suggestions,
            condition_keywords=condition_keywords,
            default_protocol=data.get("default_protocol", "general treatment"),
            default_relevance=data.get("default_relevance", 75),
            general_suggestions=_strings(data.get("general_suggestions"), "general_suggestions"),
            version=data.get("version"),
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> "KnowledgeBase":
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise KnowledgeBaseError(f"knowledge base file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise KnowledgeBaseError(f"knowledge base file is not valid JSON: {e}") from e

        kb = cls.from_dict(data)
        logger.info(
            "Loaded knowledge base %s from %s (%d medicines, %d protocols)",
            kb.version or "<unversioned>", path, len(kb.medicines), len(kb.protocols),
        )
        return kb

    @classmethod
    def default(cls, force_reload: bool = False) -> "KnowledgeBase":
        with cls._lock:
            if cls._instance is None or force_reload:
                cls._instance = cls.load(config.KNOWLEDGE_BASE_PATH)
            return cls._instance

    # --- Lookups ---

    @property
    def protocol_keys(self) -> Tuple[str, ...]:
        return tuple(self.protocols.keys())

    def get_medicine(self, medicine_id: str) -> Optional[MedicineRecord]:
        return self.medicines.get(medicine_id.lower())

    def relevance_base(self, medicine_id: str, search_text: str) -> int:
        rule = self.relevance.get(medicine_id.lower())
        if rule is None:
            return self.default_relevance
        text = search_text.lower()
        return rule.hit if any(k in text for k in rule.keywords) else rule.miss


def get_knowledge_base(force_reload: bool = False) -> KnowledgeBase:
    return KnowledgeBase.default(force_reload)
