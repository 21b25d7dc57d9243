from discharge_trainer.train import (
    TrainingContext,
    TrainingResult,
    TrainingStatus,
    train,
)
