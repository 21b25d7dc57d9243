import csv

import numpy as np

from discharge_model.schemas import ADMISSION_TYPES, COLUMN_NAMES, DIAGNOSES

DIAGNOSIS_BASE_DAYS = {
    "Heart Failure": 5.0,
    "Arrhythmia": 3.0,
    "Angina": 2.0,
    "Myocardial Infarction": 6.0,
    "Hypertension Crisis": 2.5,
}

FIVE_ROWS = [
    ("Heart Failure", 65, "Emergency", 2, 4.0),
    ("Arrhythmia", 54, "Elective", 0, 2.0),
    ("Angina", 71, "Emergency", 1, 3.0),
    ("Myocardial Infarction", 80, "Emergency", 4, 7.5),
    ("Hypertension Crisis", 45, "Elective", 0, 1.5),
]


def make_rows(n=80, seed=7):
    rng = np.random.default_rng(seed)
    rows = []
    for _ in range(n):
        diagnosis = DIAGNOSES[rng.integers(len(DIAGNOSES))]
        admission = ADMISSION_TYPES[rng.integers(len(ADMISSION_TYPES))]
        age = int(rng.integers(20, 95))
        past = int(rng.integers(0, 10))
        los = DIAGNOSIS_BASE_DAYS[diagnosis] + 0.04 * age + 0.5 * past
        if admission == "Emergency":
            los += 1.5
        los += float(rng.normal(0, 0.5))
        rows.append((diagnosis, age, admission, past, round(max(los, 0.5), 2)))
    return rows


def write_csv(path, rows, header=COLUMN_NAMES):
    with open(path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path
