class DataFormatError(ValueError):
    """Raised when a training CSV cannot be bound to the record columns."""


class ModelNotFoundError(FileNotFoundError):
    """Raised when the trained model file is missing."""
