from discharge_model.schemas import (
    ADMISSION_TYPES,
    AGE_RANGE,
    COLUMNS,
    DIAGNOSES,
    PAST_HOSPITALIZATIONS_RANGE,
    LengthOfStayPrediction,
    PatientRecord,
)
from discharge_model.settings import Settings
