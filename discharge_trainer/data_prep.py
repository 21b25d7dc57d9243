import logging
from pathlib import Path

import pandas as pd

from discharge_model.errors import DataFormatError
from discharge_model.schemas import CATEGORICAL, COLUMN_NAMES, COLUMNS

logger = logging.getLogger(__name__)


def bind_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Bind CSV columns to the record schema by position.
    Header names in the file are ignored; only the column order matters.
    """
    if len(df.columns) != len(COLUMNS):
        raise DataFormatError(
            f"Expected {len(COLUMNS)} columns ({', '.join(COLUMN_NAMES)}), got {len(df.columns)}."
        )
    df = df.copy()
    df.columns = COLUMN_NAMES

    for col in COLUMNS:
        if col.kind == CATEGORICAL:
            df[col.name] = df[col.name].where(df[col.name].isna(), df[col.name].astype(str).str.strip())
        else:
            try:
                df[col.name] = pd.to_numeric(df[col.name], errors="raise").astype(float)
            except (TypeError, ValueError) as e:
                raise DataFormatError(f"Column {col.name} must be numeric: {e}") from e

    return df


def load_training_data(path) -> pd.DataFrame:
    """
    Load a training CSV (header row, then PrimaryDiagnosis, Age, AdmissionType,
    PastHospitalizations, LengthOfStay) and drop incomplete rows.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing input file: {path}")

    try:
        raw = pd.read_csv(path, header=0, skipinitialspace=True)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise DataFormatError(f"Could not parse {path}: {e}") from e

    df = bind_columns(raw)

    before = len(df)
    df = df.dropna(subset=COLUMN_NAMES).reset_index(drop=True)
    dropped = before - len(df)
    if dropped:
        logger.warning(f"Dropped {dropped} incomplete rows from {path}")

    if df.empty:
        raise DataFormatError(f"No usable rows in {path}")

    logger.info(f"Loaded {len(df)} rows from {path}")
    return df
