import logging
import os
import pickle
import sys
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

import joblib
import mlflow
import numpy as np
import pandas as pd
from mlflow.exceptions import MlflowException
from sklearn.compose import ColumnTransformer
from sklearn.ensemble import RandomForestRegressor
from sklearn.metrics import mean_squared_error, r2_score
from sklearn.model_selection import train_test_split
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder

from discharge_model.errors import DataFormatError
from discharge_model.logging_config import setup_logging
from discharge_model.schemas import (
    CATEGORICAL_FEATURES,
    FEATURE_COLUMNS,
    LABEL_COLUMN,
    NUMERIC_FEATURES,
)
from discharge_model.settings import Settings
from discharge_trainer.data_prep import load_training_data

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainingContext:
    """Seed and hyperparameters for one training run."""

    seed: int = 42
    test_fraction: float = 0.2
    n_trees: int = 120
    max_leaves: int = 32
    min_samples_leaf: int = 5


class TrainingStatus(Enum):
    SUCCESS = "success"
    MISSING_INPUT = "missing_input"
    INVALID_DATA = "invalid_data"
    TRAINING_FAILED = "training_failed"
    SERIALIZATION_FAILED = "serialization_failed"


@dataclass(frozen=True)
class RegressionMetrics:
    r_squared: float
    rmse: float


@dataclass
class TrainingResult:
    status: TrainingStatus
    metrics: Optional[RegressionMetrics] = None
    model_path: Optional[Path] = None
    message: str = ""
    rows: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status is TrainingStatus.SUCCESS


def split_data(df: pd.DataFrame, context: TrainingContext):
    X = df[FEATURE_COLUMNS]
    y = df[LABEL_COLUMN]
    return train_test_split(
        X, y, test_size=context.test_fraction, random_state=context.seed
    )


def build_pipeline(context: TrainingContext) -> Pipeline:
    """
    One-hot encode each categorical column on its own, append the numeric
    columns unchanged, and feed the result to a random forest.
    Categories not seen while fitting encode to all zeros.
    """
    transformers = [
        (col, OneHotEncoder(handle_unknown="ignore"), [col]) for col in CATEGORICAL_FEATURES
    ]
    transformers.append(("num", "passthrough", NUMERIC_FEATURES))

    preprocessor = ColumnTransformer(transformers=transformers)

    regressor = RandomForestRegressor(
        n_estimators=context.n_trees,
        max_leaf_nodes=context.max_leaves,
        min_samples_leaf=context.min_samples_leaf,
        random_state=context.seed,
    )

    return Pipeline(steps=[
        ("preprocess", preprocessor),
        ("model", regressor),
    ])


def evaluate(pipeline: Pipeline, X_test: pd.DataFrame, y_test: pd.Series) -> RegressionMetrics:
    preds = pipeline.predict(X_test)
    # R-squared is undefined for a single held-out row
    if len(y_test) < 2:
        r2 = float("nan")
    else:
        r2 = float(r2_score(y_test, preds))
    rmse = float(np.sqrt(mean_squared_error(y_test, preds)))
    return RegressionMetrics(r_squared=r2, rmse=rmse)


def format_metrics(metrics: RegressionMetrics) -> str:
    table = pd.DataFrame(
        {
            "Metric": ["R-squared", "RMSE"],
            "Value": [f"{metrics.r_squared:0.3f}", f"{metrics.rmse:.3f}"],
        }
    )
    return table.to_string(index=False)


def save_model(pipeline: Pipeline, model_path) -> Path:
    """Dump to a temp file beside the target, then rename it into place."""
    model_path = Path(model_path)
    model_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=model_path.parent, prefix=f".{model_path.name}.", suffix=".tmp")
    os.close(fd)
    try:
        joblib.dump(pipeline, tmp_name)
        os.replace(tmp_name, model_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return model_path


def log_run(settings: Settings, context: TrainingContext, result: TrainingResult):
    mlflow.set_experiment(settings.mlflow_experiment)
    with mlflow.start_run():
        mlflow.log_param("model", "random_forest_regressor")
        mlflow.log_param("seed", context.seed)
        mlflow.log_param("test_fraction", context.test_fraction)
        mlflow.log_param("n_trees", context.n_trees)
        mlflow.log_param("max_leaves", context.max_leaves)
        mlflow.log_param("min_samples_leaf", context.min_samples_leaf)
        mlflow.log_param("cat_features", ",".join(CATEGORICAL_FEATURES))
        mlflow.log_param("num_features", ",".join(NUMERIC_FEATURES))
        for name, count in result.rows.items():
            mlflow.log_param(f"{name}_rows", count)

        mlflow.log_metric("r_squared", result.metrics.r_squared)
        mlflow.log_metric("rmse", result.metrics.rmse)

        mlflow.log_artifact(str(result.model_path), artifact_path="model_local")


def train(
    input_csv_path,
    output_model_path,
    context: Optional[TrainingContext] = None,
    settings: Optional[Settings] = None,
) -> TrainingResult:
    """
    Train the length-of-stay model on a CSV and save the fitted pipeline.
    Failures are reported through the returned TrainingResult, never raised.
    """
    context = context or TrainingContext()
    settings = settings or Settings()
    input_csv_path = Path(input_csv_path)
    output_model_path = Path(output_model_path)

    logger.info("Training LoS regression model")

    if not input_csv_path.exists():
        message = f"Missing input file: {input_csv_path}"
        logger.error(message)
        return TrainingResult(TrainingStatus.MISSING_INPUT, message=message)

    logger.info("Loading data...")
    try:
        df = load_training_data(input_csv_path)
    except DataFormatError as e:
        logger.error(f"Invalid training data: {e}")
        return TrainingResult(TrainingStatus.INVALID_DATA, message=str(e))
    except OSError as e:
        logger.error(f"Could not read {input_csv_path}: {e}")
        return TrainingResult(TrainingStatus.INVALID_DATA, message=str(e))

    try:
        logger.info("Splitting data...")
        X_train, X_test, y_train, y_test = split_data(df, context)

        logger.info("Building training pipeline...")
        pipeline = build_pipeline(context)

        logger.info("Training model...")
        pipeline.fit(X_train, y_train)

        logger.info("Evaluating model...")
        metrics = evaluate(pipeline, X_test, y_test)
    except Exception as e:
        logger.exception("Training failed")
        return TrainingResult(TrainingStatus.TRAINING_FAILED, message=str(e))

    print(format_metrics(metrics))

    logger.info("Saving model...")
    try:
        saved_path = save_model(pipeline, output_model_path)
    except (OSError, pickle.PicklingError) as e:
        logger.error(f"Could not save model to {output_model_path}: {e}")
        return TrainingResult(TrainingStatus.SERIALIZATION_FAILED, metrics=metrics, message=str(e))
    logger.info(f"Model saved to: {saved_path}")

    result = TrainingResult(
        TrainingStatus.SUCCESS,
        metrics=metrics,
        model_path=saved_path,
        rows={"total": len(df), "train": len(X_train), "test": len(X_test)},
    )

    if settings.mlflow_enabled:
        try:
            log_run(settings, context, result)
            logger.info("Logged run to MLflow.")
        except (MlflowException, OSError) as e:
            logger.warning(f"MLflow logging failed: {e}")

    return result


def main() -> int:
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_dir)
    result = train(settings.input_csv_path, settings.model_path, settings=settings)
    if not result.ok:
        print(f"Error: {result.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
