import logging
import sys
from typing import Callable, Sequence, Tuple

from discharge_app.predict import PredictionService
from discharge_model.errors import ModelNotFoundError
from discharge_model.logging_config import setup_logging
from discharge_model.schemas import (
    ADMISSION_TYPES,
    AGE_RANGE,
    DIAGNOSES,
    PAST_HOSPITALIZATIONS_RANGE,
    PatientRecord,
)
from discharge_model.settings import Settings

logger = logging.getLogger(__name__)


def validate_range(value: int, bounds: Tuple[int, int]) -> bool:
    low, high = bounds
    return low <= value <= high


def prompt_choice(
    title: str,
    choices: Sequence[str],
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> str:
    """Show a numbered menu and return the chosen label. Accepts the number or the label itself."""
    output_fn(title)
    for i, choice in enumerate(choices, start=1):
        output_fn(f"  {i}. {choice}")
    while True:
        answer = input_fn("> ").strip()
        if answer.isdecimal() and 1 <= int(answer) <= len(choices):
            return choices[int(answer) - 1]
        if answer in choices:
            return answer
        output_fn(f"Invalid choice, enter 1-{len(choices)}")


def prompt_int(
    label: str,
    bounds: Tuple[int, int],
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> int:
    while True:
        answer = input_fn(f"Enter {label}: ").strip()
        try:
            value = int(answer)
        except ValueError:
            output_fn(f"Invalid {label.lower()}: not a whole number")
            continue
        if not validate_range(value, bounds):
            output_fn(f"Invalid {label.lower()}: must be between {bounds[0]} and {bounds[1]}")
            continue
        return value


def collect_patient(
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> PatientRecord:
    diagnosis = prompt_choice("Select Primary Diagnosis:", DIAGNOSES, input_fn, output_fn)
    admission_type = prompt_choice("Select Admission Type:", ADMISSION_TYPES, input_fn, output_fn)
    age = prompt_int("Age", AGE_RANGE, input_fn, output_fn)
    past = prompt_int("Number of Past Hospitalizations", PAST_HOSPITALIZATIONS_RANGE, input_fn, output_fn)
    return PatientRecord(
        primary_diagnosis=diagnosis,
        admission_type=admission_type,
        age=age,
        past_hospitalizations=past,
    )


def run(
    service: PredictionService,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> float:
    output_fn("Predict Patient Length of Stay")
    record = collect_patient(input_fn, output_fn)
    result = service.predict(record)
    output_fn(f"Predicted Length of Stay: {result.length_of_stay_prediction:.2f} days")
    return result.length_of_stay_prediction


def main() -> int:
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_dir)

    try:
        service = PredictionService(settings.model_path)
    except ModelNotFoundError as e:
        print(f"Error: {e}")
        return 1

    try:
        run(service)
    except (EOFError, KeyboardInterrupt):
        print()
        logger.info("Prediction cancelled")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
