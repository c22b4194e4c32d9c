"""
Exceptions for the Lead Intent Scoring Engine
"""


class IntentEngineError(Exception):
    """Base class for engine errors"""


class ConfigurationError(IntentEngineError):
    """Required LLM credential or setting is missing"""


class MalformedAIResponse(IntentEngineError):
    """LLM response text does not follow the JSON contract"""


class PreconditionMissing(IntentEngineError):
    """Scoring was requested before an offer and leads were saved"""

    def __init__(self, error: str, message: str):
        super().__init__(message)
        self.error = error
        self.message = message


class CSVFormatError(IntentEngineError):
    """Uploaded lead file could not be read as CSV"""
