from discharge_app.predict import PredictionService
