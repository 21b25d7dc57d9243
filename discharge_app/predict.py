import logging
from pathlib import Path
from typing import Dict, List, Optional

import joblib

from discharge_model.errors import ModelNotFoundError
from discharge_model.schemas import CATEGORICAL_FEATURES, LengthOfStayPrediction, PatientRecord
from discharge_model.settings import MODEL_PATH

logger = logging.getLogger(__name__)


class PredictionService:
    def __init__(self, model_path: Optional[Path] = None):
        self.model_path = Path(model_path or MODEL_PATH)
        if not self.model_path.exists():
            logger.error(f"Model file not found: {self.model_path}")
            raise ModelNotFoundError(
                f"Model not found at {self.model_path}. Train it first with: discharge-train"
            )
        logger.info(f"Loading model from: {self.model_path}")
        self.model = joblib.load(self.model_path)
        self._categories = self._read_categories()

    def _read_categories(self) -> Dict[str, List[str]]:
        preprocess = self.model.named_steps["preprocess"]
        return {
            col: [str(c) for c in preprocess.named_transformers_[col].categories_[0]]
            for col in CATEGORICAL_FEATURES
        }

    def known_categories(self) -> Dict[str, List[str]]:
        """Category vocabulary each encoder learned at training time."""
        return {col: list(values) for col, values in self._categories.items()}

    def predict(self, record: PatientRecord) -> LengthOfStayPrediction:
        df = record.to_frame()
        for col in CATEGORICAL_FEATURES:
            value = df.at[0, col]
            if value not in self._categories[col]:
                # Encodes to all zeros; the forest still returns a value
                logger.warning(f"{col} value {value!r} was not seen during training")
        value = float(self.model.predict(df)[0])
        return LengthOfStayPrediction(length_of_stay_prediction=value)
