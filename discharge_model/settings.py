import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

INPUT_CSV_PATH = Path("data/input.csv")
MODEL_PATH = Path("data/model.joblib")

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    input_csv_path: Path = INPUT_CSV_PATH
    model_path: Path = MODEL_PATH
    log_level: str = "INFO"
    log_dir: Optional[str] = None

    # Off unless DISCHARGE_MLFLOW is set
    mlflow_enabled: bool = False
    mlflow_experiment: str = "length-of-stay"

    def __post_init__(self):
        self.input_csv_path = Path(self.input_csv_path)
        self.model_path = Path(self.model_path)

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        """Build settings from DISCHARGE_* environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        return cls(
            input_csv_path=Path(env.get("DISCHARGE_INPUT_CSV", INPUT_CSV_PATH)),
            model_path=Path(env.get("DISCHARGE_MODEL_PATH", MODEL_PATH)),
            log_level=env.get("DISCHARGE_LOG_LEVEL", "INFO"),
            log_dir=env.get("DISCHARGE_LOG_DIR") or None,
            mlflow_enabled=env.get("DISCHARGE_MLFLOW", "").strip().lower() in _TRUTHY,
            mlflow_experiment=env.get("DISCHARGE_MLFLOW_EXPERIMENT", "length-of-stay"),
        )
