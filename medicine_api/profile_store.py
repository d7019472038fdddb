# profile_store.py

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from medicine_api.data_model import MedicalCondition, PatientProfile, RecommendationResult, default_patient_profile
from medicine_api.recommendation_engine import generate_from_text

logger = logging.getLogger(__name__)

RECOMMENDATION_STATUSES = ("accepted", "rejected")


class ProfileStoreError(Exception):
    pass


def _split_list(value: Any) -> List[str]:
    # Profiles keep some lists as comma-separated text
    if not value:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(v).strip() for v in value if str(v).strip()]


def dict_to_patient(profile: Dict[str, Any], current_medications: Optional[List[str]] = None) -> PatientProfile:
    return PatientProfile(
        age=profile.get("age") or 30,
        weight=profile.get("weight"),
        height=profile.get("height"),
        allergies=_split_list(profile.get("allergies")),
        current_medications=current_medications or [],
        medical_history=_split_list(profile.get("medical_history")),
        conditions=[MedicalCondition(
            condition=profile.get("medical_condition") or "general",
            severity="moderate",
            symptoms=[],
        )],
    )


def recommendation_to_row(rec: RecommendationResult, user_id: str, treatment_id: str) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "treatment_id": treatment_id,
        "medicine_name": rec.name,
        "generic_name": rec.generic_name,
        "dosage": rec.dosage,
        "frequency": rec.frequency,
        "duration": rec.duration,
        "instructions": rec.instructions,
        "category": rec.category,
        "confidence_score": rec.confidence,
        "reasoning": rec.reasoning,
        "side_effects": rec.side_effects,
        "interactions": rec.interactions,
        "contraindications": rec.contraindications,
    }


def status_update_payload(status: str, reason: Optional[str] = None) -> Dict[str, Any]:
    if status == "accepted":
        return {"is_accepted": True, "accepted_at": datetime.now(timezone.utc).isoformat()}
    if status == "rejected":
        return {"is_rejected": True, "rejection_reason": reason}
    raise ValueError(f"Unknown recommendation status '{status}', expected one of {RECOMMENDATION_STATUSES}")


class ProfileStore:
    """Persistence collaborator of the recommendation engine."""

    def get_patient_profile(self, user_id: str) -> Optional[PatientProfile]:
        raise NotImplementedError

    def save_recommendations(self, results: List[RecommendationResult], user_id: str, treatment_id: str) -> None:
        raise NotImplementedError

    def update_recommendation_status(self, recommendation_id: str, status: str, reason: Optional[str] = None) -> None:
        raise NotImplementedError


class SupabaseProfileStore(ProfileStore):
    def __init__(self, client=None):
        if client is None:
            from medicine_api.supabase_client import get_supabase
            try:
                client = get_supabase()
            except Exception as e:
                raise ProfileStoreError(f"Supabase client unavailable: {e}") from e
        self.client = client

    def get_patient_profile(self, user_id: str) -> Optional[PatientProfile]:
        """
        Reads the patient's profile row plus the medicine names of their
        active treatments. Returns None when the user has no profile.
        """
        try:
            rows = self.client.table("profiles").select("*").eq("id", user_id).limit(1).execute().data
            if not rows:
                return None
            treatments = (
                self.client.table("treatments")
                .select("medicines(name)")
                .eq("patient_id", user_id)
                .eq("status", "active")
                .execute()
                .data
            )
        except Exception as e:
            raise ProfileStoreError(f"Failed to fetch profile for {user_id}: {e}") from e

        medications = []
        for treatment in treatments or []:
            joined = treatment.get("medicines") or []
            # Many-to-one joins come back as a single object
            if isinstance(joined, dict):
                joined = [joined]
            medications.extend(m["name"] for m in joined if m.get("name"))
        return dict_to_patient(rows[0], medications)

    def save_recommendations(self, results: List[RecommendationResult], user_id: str, treatment_id: str) -> None:
        if not results:
            return
        rows = [recommendation_to_row(r, user_id, treatment_id) for r in results]
        try:
            self.client.table("medicine_recommendations").insert(rows).execute()
        except Exception as e:
            raise ProfileStoreError(f"Failed to save {len(rows)} recommendations: {e}") from e

    def update_recommendation_status(self, recommendation_id: str, status: str, reason: Optional[str] = None) -> None:
        payload = status_update_payload(status, reason)
        try:
            self.client.table("medicine_recommendations").update(payload).eq("id", recommendation_id).execute()
        except Exception as e:
            raise ProfileStoreError(f"Failed to update recommendation {recommendation_id}: {e}") from e


def recommend_for_treatment(
    store: ProfileStore,
    user_id: str,
    treatment_id: str,
    treatment_name: str,
    description: str = "",
) -> Dict[str, Any]:
    """
    Fetches the patient's profile (default profile when none exists), runs
    the free-text engine and persists the results. A failed save is logged
    and reported as saved=False; the recommendations are returned anyway.
    """
    patient = store.get_patient_profile(user_id)
    profile_source = "store"
    if patient is None:
        logger.info("No profile for user %s, using default profile", user_id)
        patient = default_patient_profile()
        profile_source = "default"

    results = generate_from_text(treatment_name, description, patient)

    saved = True
    try:
        store.save_recommendations(results, user_id, treatment_id)
    except ProfileStoreError as e:
        logger.error("Error saving recommendations for treatment %s: %s", treatment_id, e)
        saved = False

    return {
        "user_id": user_id,
        "treatment_id": treatment_id,
        "profile_source": profile_source,
        "recommendations": [asdict(r) for r in results],
        "saved": saved,
    }
