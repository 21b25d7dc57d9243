import math
import tempfile
import unittest
from pathlib import Path

from discharge_app.predict import PredictionService
from discharge_model.errors import ModelNotFoundError
from discharge_model.schemas import DIAGNOSES, PatientRecord
from discharge_trainer.train import train
from synthetic import FIVE_ROWS, make_rows, write_csv


def record_from_row(row):
    diagnosis, age, admission, past, _ = row
    return PatientRecord(
        primary_diagnosis=diagnosis,
        age=age,
        admission_type=admission,
        past_hospitalizations=past,
    )


class TestPredictionServiceMissingModel(unittest.TestCase):
    def test_missing_model_raises_not_found(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ModelNotFoundError) as ctx:
                PredictionService(Path(tmp) / "model.joblib")
        self.assertIsInstance(ctx.exception, FileNotFoundError)


class TestPredictionService(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.tmp = tempfile.TemporaryDirectory()
        tmp = Path(cls.tmp.name)
        csv_path = write_csv(tmp / "input.csv", make_rows())
        cls.model_path = tmp / "model.joblib"
        result = train(csv_path, cls.model_path)
        assert result.ok, result.message
        cls.service = PredictionService(cls.model_path)

    @classmethod
    def tearDownClass(cls):
        cls.tmp.cleanup()

    def test_predict_is_idempotent(self):
        record = record_from_row(FIVE_ROWS[0])
        first = self.service.predict(record)
        second = self.service.predict(record)
        self.assertEqual(first, second)

    def test_known_categories(self):
        categories = self.service.known_categories()
        self.assertEqual(sorted(categories["PrimaryDiagnosis"]), sorted(DIAGNOSES))
        self.assertEqual(sorted(categories["AdmissionType"]), ["Elective", "Emergency"])

    def test_unseen_category_still_predicts(self):
        record = PatientRecord(
            primary_diagnosis="Pneumonia",
            admission_type="Emergency",
            age=60,
            past_hospitalizations=1,
        )
        with self.assertLogs("discharge_app.predict", level="WARNING") as logs:
            result = self.service.predict(record)
        self.assertTrue(math.isfinite(result.length_of_stay_prediction))
        self.assertIn("Pneumonia", logs.output[0])


class TestEndToEnd(unittest.TestCase):
    def test_five_row_dataset(self):
        with tempfile.TemporaryDirectory() as tmp:
            tmp = Path(tmp)
            csv_path = write_csv(tmp / "input.csv", FIVE_ROWS)
            model_path = tmp / "data" / "model.joblib"

            result = train(csv_path, model_path)
            self.assertTrue(result.ok, result.message)
            self.assertTrue(model_path.exists())

            service = PredictionService(model_path)
            prediction = service.predict(record_from_row(FIVE_ROWS[0]))

        value = prediction.length_of_stay_prediction
        labels = [row[4] for row in FIVE_ROWS]
        self.assertTrue(math.isfinite(value))
        self.assertGreaterEqual(value, min(labels))
        self.assertLessEqual(value, max(labels))


if __name__ == "__main__":
    unittest.main()
