"""
Domain exceptions for the prediction system.
"""

class PredictionException(Exception):
    """Base exception for prediction-related errors."""
    pass

class InsufficientDataException(PredictionException):
    """Exception raised when required identifiers or match history are missing."""
    pass

class InvalidInputException(PredictionException):
    """
    Exception for degenerate model inputs (e.g. non-positive average goals).

    The scoring grids do not raise it: they return an empty result set instead,
    since a team with no recorded goals is a legitimate input.
    """
    pass

class MalformedRecordException(PredictionException):
    """Exception raised when a match score cannot be parsed as two integers."""
    pass

class DataSourceUnavailableException(PredictionException):
    """Exception raised when an upstream data source cannot be reached."""
    pass
