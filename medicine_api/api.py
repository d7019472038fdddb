from dataclasses import asdict
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from dotenv import load_dotenv
import logging

load_dotenv()

from medicine_api import config
from medicine_api.data_model import (
    MedicalCondition,
    PatientProfile,
    TreatmentContext,
    default_patient_profile,
)
from medicine_api.profile_store import (
    ProfileStore,
    ProfileStoreError,
    SupabaseProfileStore,
    recommend_for_treatment,
)
from medicine_api.recommendation_engine import generate, generate_from_text, generate_keyword_suggestions

app = FastAPI()

# -----------------------------
# Middleware
# -----------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # replace "*" with your frontend URL in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
@app.head("/")
def root():
    return {"message": "Welcome to the Medicine Recommendation API"}

logger = logging.getLogger("uvicorn.error")
logging.getLogger("medicine_api").setLevel(config.LOG_LEVEL)

# -----------------------------
# Input models
# -----------------------------
class ConditionInput(BaseModel):
    condition: str
    severity: str = "moderate"
    symptoms: List[str] = Field(default_factory=list)
    duration: Optional[str] = None


class PatientInput(BaseModel):
    age: int = Field(..., ge=0)
    weight: Optional[float] = None
    height: Optional[float] = None
    allergies: List[str] = Field(default_factory=list)
    current_medications: List[str] = Field(default_factory=list)
    medical_history: List[str] = Field(default_factory=list)
    conditions: List[ConditionInput] = Field(default_factory=list)

    def to_profile(self) -> PatientProfile:
        return PatientProfile(
            age=self.age,
            weight=self.weight,
            height=self.height,
            allergies=list(self.allergies),
            current_medications=list(self.current_medications),
            medical_history=list(self.medical_history),
            conditions=[
                MedicalCondition(
                    condition=c.condition,
                    severity=c.severity,
                    symptoms=list(c.symptoms),
                    duration=c.duration,
                )
                for c in self.conditions
            ],
        )


class ContextInput(BaseModel):
    treatment_type: str = ""
    condition: str
    severity: str = "moderate"
    symptoms: List[str] = Field(default_factory=list)
    start_date: str = ""
    target_duration: Optional[str] = None

    def to_context(self) -> TreatmentContext:
        return TreatmentContext(
            treatment_type=self.treatment_type,
            condition=self.condition,
            severity=self.severity,
            symptoms=list(self.symptoms),
            start_date=self.start_date,
            target_duration=self.target_duration,
        )


class StructuredRequest(BaseModel):
    context: ContextInput
    patient: PatientInput


class TextRequest(BaseModel):
    treatment_name: str
    description: str = ""
    patient: Optional[PatientInput] = None


class KeywordRequest(BaseModel):
    treatment_name: str
    description: str = ""


class TreatmentRequest(BaseModel):
    user_id: str
    treatment_name: str
    description: str = ""


class StatusUpdate(BaseModel):
    status: str
    reason: Optional[str] = None


def get_profile_store() -> ProfileStore:
    """Overridden in tests via app.dependency_overrides."""
    try:
        return SupabaseProfileStore()
    except ProfileStoreError as e:
        logger.error(f"Profile store unavailable: {e}")
        raise HTTPException(status_code=502, detail="Profile store temporarily unavailable.")


# -----------------------------
# Endpoints
# -----------------------------
@app.post("/recommend", response_model=dict)
def recommend(body: StructuredRequest):
    try:
        results = generate(body.context.to_context(), body.patient.to_profile())
        return {"recommendations": [asdict(r) for r in results]}
    except Exception as e:
        logger.error(f"Error in /recommend endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500,
                            detail="Internal Server Error. Please check your input and try again.")


@app.post("/recommend/text", response_model=dict)
def recommend_text(body: TextRequest):
    try:
        patient = body.patient.to_profile() if body.patient else default_patient_profile()
        results = generate_from_text(body.treatment_name, body.description, patient)
        return {"recommendations": [asdict(r) for r in results]}
    except Exception as e:
        logger.error(f"Error in /recommend/text endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500,
                            detail="Internal Server Error. Please check your input and try again.")


@app.post("/recommend/keywords", response_model=dict)
def recommend_keywords(body: KeywordRequest):
    try:
        results = generate_keyword_suggestions(body.treatment_name, body.description)
        return {"recommendations": [asdict(r) for r in results]}
    except Exception as e:
        logger.error(f"Error in /recommend/keywords endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500,
                            detail="Internal Server Error. Please check your input and try again.")


@app.post("/treatments/{treatment_id}/recommendations", response_model=dict)
def recommend_treatment(treatment_id: str, body: TreatmentRequest,
                        store: ProfileStore = Depends(get_profile_store)):
    try:
        out = recommend_for_treatment(store, body.user_id, treatment_id,
                                      body.treatment_name, body.description)
        return {"recommendations": out["recommendations"], "saved": out["saved"]}
    except ProfileStoreError as e:
        logger.error(f"Profile store error: {e}")
        raise HTTPException(status_code=502,
                            detail="Patient profile temporarily unavailable. Please try again later.")
    except Exception as e:
        logger.error(f"Error in /treatments/{treatment_id}/recommendations endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500,
                            detail="Internal Server Error. Please check your input and try again.")


@app.patch("/recommendations/{recommendation_id}", response_model=dict)
def update_recommendation(recommendation_id: str, body: StatusUpdate,
                          store: ProfileStore = Depends(get_profile_store)):
    try:
        store.update_recommendation_status(recommendation_id, body.status, body.reason)
        return {"id": recommendation_id, "status": body.status}
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ProfileStoreError as e:
        logger.error(f"Profile store error: {e}")
        raise HTTPException(status_code=502,
                            detail="Recommendation status could not be saved. Please try again later.")
    except Exception as e:
        logger.error(f"Error in /recommendations/{recommendation_id} endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=500,
                            detail="Internal Server Error. Please check your input and try again.")
