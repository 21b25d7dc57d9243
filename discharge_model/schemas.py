from dataclasses import dataclass
from typing import Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

CATEGORICAL = "categorical"
NUMERIC = "numeric"
LABEL = "label"


@dataclass(frozen=True)
class ColumnSpec:
    index: int
    name: str
    field: str
    kind: str


# Training CSVs are bound by position, so this order is the file format
COLUMNS = (
    ColumnSpec(0, "PrimaryDiagnosis", "primary_diagnosis", CATEGORICAL),
    ColumnSpec(1, "Age", "age", NUMERIC),
    ColumnSpec(2, "AdmissionType", "admission_type", CATEGORICAL),
    ColumnSpec(3, "PastHospitalizations", "past_hospitalizations", NUMERIC),
    ColumnSpec(4, "LengthOfStay", "length_of_stay", LABEL),
)

COLUMN_NAMES = [c.name for c in COLUMNS]
CATEGORICAL_FEATURES = [c.name for c in COLUMNS if c.kind == CATEGORICAL]
NUMERIC_FEATURES = [c.name for c in COLUMNS if c.kind == NUMERIC]
FEATURE_COLUMNS = [c.name for c in COLUMNS if c.kind != LABEL]
LABEL_COLUMN = next(c.name for c in COLUMNS if c.kind == LABEL)

DIAGNOSES = (
    "Heart Failure",
    "Arrhythmia",
    "Angina",
    "Myocardial Infarction",
    "Hypertension Crisis",
)
ADMISSION_TYPES = ("Emergency", "Elective")

AGE_RANGE = (0, 120)
PAST_HOSPITALIZATIONS_RANGE = (0, 20)


class PatientRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    primary_diagnosis: str = Field(..., alias="PrimaryDiagnosis")
    age: float = Field(..., ge=0, alias="Age")
    admission_type: str = Field(..., alias="AdmissionType")
    past_hospitalizations: float = Field(..., ge=0, alias="PastHospitalizations")
    length_of_stay: Optional[float] = Field(default=None, alias="LengthOfStay")

    def to_frame(self) -> pd.DataFrame:
        """One-row frame of the feature columns, as the fitted pipeline expects."""
        row = {c.name: getattr(self, c.field) for c in COLUMNS if c.kind != LABEL}
        return pd.DataFrame([row], columns=FEATURE_COLUMNS)


class LengthOfStayPrediction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    length_of_stay_prediction: float = Field(..., alias="LengthOfStayPrediction")
