"""
Request/response models for the pain-management API.

Request models accept both snake_case keys and the camelCase / short keys the
Pain Management page sends (doseMgPerDose, dosesPerDay, strengthMcgPerHr,
respiratory, sleep_apnea, pregnancy ...). Responses serialise in camelCase,
matching what that page reads (totalMME, perMedication, riskFlags).
"""
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from pain_safety.core.regimen.base import MedicationEntry, PatientContext, Route


def _aliases(*names: str) -> AliasChoices:
    return AliasChoices(*names)


# ---- Requests ----

class MedicationInput(BaseModel):
    """One medication row."""
    name: str = ""
    rxcui: Optional[str] = None
    route: Optional[Route] = None
    dose_mg_per_administration: Optional[float] = Field(
        None, ge=0,
        validation_alias=_aliases("dose_mg_per_administration", "doseMgPerAdministration", "doseMgPerDose"),
    )
    administrations_per_day: Optional[float] = Field(
        None, ge=0,
        validation_alias=_aliases("administrations_per_day", "administrationsPerDay", "dosesPerDay"),
    )
    patch_strength_mcg_per_hr: Optional[float] = Field(
        None, ge=0,
        validation_alias=_aliases("patch_strength_mcg_per_hr", "patchStrengthMcgPerHr", "strengthMcgPerHr"),
    )
    frequency: Optional[str] = None

    model_config = ConfigDict(json_schema_extra={"example": {
        "name": "oxycodone", "route": "oral", "doseMgPerDose": 5, "dosesPerDay": 4
    }})

    @field_validator("route", mode="before")
    @classmethod
    def _lower_route(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value

    def to_entry(self) -> MedicationEntry:
        return MedicationEntry(
            name=self.name,
            route=self.route or Route.ORAL,
            dose_mg_per_administration=self.dose_mg_per_administration,
            administrations_per_day=self.administrations_per_day,
            patch_strength_mcg_per_hr=self.patch_strength_mcg_per_hr,
            frequency=self.frequency or "",
            rxcui=self.rxcui,
        )


class PatientContextInput(BaseModel):
    """Patient covariates; every field is optional."""
    age: Optional[float] = Field(None, ge=0, le=130)
    renal_clearance: Optional[float] = Field(
        None, ge=0, validation_alias=_aliases("renal_clearance", "renalClearance", "crcl"))
    has_respiratory_disease: Optional[bool] = Field(
        None, validation_alias=_aliases("has_respiratory_disease", "hasRespiratoryDisease", "respiratory"))
    has_sleep_apnea: Optional[bool] = Field(
        None, validation_alias=_aliases("has_sleep_apnea", "hasSleepApnea", "sleep_apnea"))
    is_pregnant: Optional[bool] = Field(
        None, validation_alias=_aliases("is_pregnant", "isPregnant", "pregnancy"))
    cyp2d6_phenotype: Optional[str] = Field(
        None, validation_alias=_aliases("cyp2d6_phenotype", "cyp2d6Phenotype", "cyp2d6"))
    has_liver_disease: Optional[bool] = Field(
        None, validation_alias=_aliases("has_liver_disease", "hasLiverDisease", "liver_disease"))
    has_opioid_use_disorder: Optional[bool] = Field(
        None, validation_alias=_aliases("has_opioid_use_disorder", "hasOpioidUseDisorder", "opioid_use_disorder"))
    history_of_substance_abuse: Optional[bool] = Field(
        None, validation_alias=_aliases("history_of_substance_abuse", "historyOfSubstanceAbuse"))
    has_depression_or_anxiety: Optional[bool] = Field(
        None, validation_alias=_aliases("has_depression_or_anxiety", "hasDepressionOrAnxiety"))
    has_chronic_pain: Optional[bool] = Field(
        None, validation_alias=_aliases("has_chronic_pain", "hasChronicPain"))
    multiple_prescribers: Optional[bool] = Field(
        None, validation_alias=_aliases("multiple_prescribers", "multiplePrescribers"))

    def to_context(self, phenotypes: Optional[Dict[str, Optional[str]]] = None) -> PatientContext:
        phenotype = self.cyp2d6_phenotype
        if phenotypes:
            phenotype = phenotypes.get("CYP2D6") or phenotypes.get("cyp2d6") or phenotype
        return PatientContext(
            age=self.age,
            renal_clearance=self.renal_clearance,
            has_respiratory_disease=bool(self.has_respiratory_disease),
            has_sleep_apnea=bool(self.has_sleep_apnea),
            is_pregnant=bool(self.is_pregnant),
            cyp2d6_phenotype=phenotype,
            has_liver_disease=bool(self.has_liver_disease),
            has_opioid_use_disorder=bool(self.has_opioid_use_disorder),
            history_of_substance_abuse=bool(self.history_of_substance_abuse),
            has_depression_or_anxiety=bool(self.has_depression_or_anxiety),
            has_chronic_pain=bool(self.has_chronic_pain),
            multiple_prescribers=bool(self.multiple_prescribers),
        )


class MmeRequest(BaseModel):
    medications: List[MedicationInput] = Field(default_factory=list)
    patient_context: PatientContextInput = Field(
        default_factory=PatientContextInput,
        validation_alias=_aliases("patient_context", "patientContext"),
    )

    @field_validator("medications", mode="before")
    @classmethod
    def _names_as_rows(cls, value: Any) -> Any:
        # Bare strings are accepted as name-only rows
        if isinstance(value, list):
            return [{"name": v} if isinstance(v, str) else v for v in value]
        return value

    @field_validator("patient_context", mode="before")
    @classmethod
    def _null_context(cls, value: Any) -> Any:
        return {} if value is None else value

    def entries(self) -> List[MedicationEntry]:
        return [m.to_entry() for m in self.medications]

    def context(self) -> PatientContext:
        return self.patient_context.to_context()


class SafetyCheckRequest(MmeRequest):
    phenotypes: Dict[str, Optional[str]] = Field(default_factory=dict)

    @field_validator("phenotypes", mode="before")
    @classmethod
    def _null_phenotypes(cls, value: Any) -> Any:
        return {} if value is None else value

    def context(self) -> PatientContext:
        return self.patient_context.to_context(self.phenotypes)


class ReportRequest(SafetyCheckRequest):
    patient_id: str = Field(default="ANONYMOUS", validation_alias=_aliases("patient_id", "patientId"))
    include_misuse_risk: bool = Field(
        default=True, validation_alias=_aliases("include_misuse_risk", "includeMisuseRisk"))


class ParseRequest(BaseModel):
    lines: List[str] = Field(default_factory=list)


# ---- Responses ----

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MedicationMmeResponse(CamelModel):
    name: str
    route: str
    drug: Optional[str] = None
    daily_dose: float = 0.0
    dose_unit: str = "mg/day"
    conversion_factor: Optional[float] = None
    mme_per_day: float = 0.0
    excluded: bool = False
    note: Optional[str] = None


class MmeResponse(CamelModel):
    total_mme: float = Field(..., alias="totalMME")
    per_medication: List[MedicationMmeResponse] = Field(default_factory=list)
    risk_flags: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    thresholds: Dict[str, bool] = Field(default_factory=dict)
    notes: List[str] = Field(default_factory=list)


class ReferenceResponse(CamelModel):
    label: str
    url: str


class FindingResponse(CamelModel):
    finding_id: str
    issue: str
    severity: str
    reason: str = ""
    explanation: str = ""
    recommendation: str = ""
    references: List[ReferenceResponse] = Field(default_factory=list)
    triggering_medications: List[str] = Field(default_factory=list)


class SafetyCheckResponse(CamelModel):
    findings: List[FindingResponse] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    total_mme: float = Field(0.0, alias="totalMME")
    major_count: int = 0
    moderate_count: int = 0


class RowHighlightResponse(CamelModel):
    name: str
    severity: Optional[str] = None
    reasons: List[str] = Field(default_factory=list)


class HighlightResponse(CamelModel):
    rows: List[RowHighlightResponse] = Field(default_factory=list)


class RiskFactorResponse(CamelModel):
    factor: str
    present: bool
    weight: int
    description: str


class RiskAssessmentResponse(CamelModel):
    overall_risk: str
    risk_score: int
    max_score: int
    risk_factors: List[RiskFactorResponse] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class ParsedMedicationResponse(CamelModel):
    name: str
    route: str
    dose_mg_per_administration: Optional[float] = None
    administrations_per_day: Optional[float] = None
    patch_strength_mcg_per_hr: Optional[float] = None
    frequency: str = ""
    rxcui: Optional[str] = None


class ParseResponse(CamelModel):
    medications: List[ParsedMedicationResponse] = Field(default_factory=list)


class ConversionFactorResponse(CamelModel):
    drug: str
    route: str
    factor: float
    unit: str


class ConversionFactorsResponse(CamelModel):
    factors: List[ConversionFactorResponse] = Field(default_factory=list)
    excluded: List[str] = Field(default_factory=list)


class ReportResponse(CamelModel):
    report_id: str
    format: str
    generated_at: str
    pdf_path: Optional[str] = None
    download_url: Optional[str] = None
    report: Dict[str, Any] = Field(default_factory=dict)


class HealthResponse(CamelModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
    rules: List[str] = Field(default_factory=list)
