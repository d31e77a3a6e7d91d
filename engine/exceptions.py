# engine/exceptions.py

class AnalysisError(Exception):
    pass


class SpanValidationError(AnalysisError, ValueError):
    pass


class TraceValidationError(AnalysisError, ValueError):
    pass


class CycleDetectedError(AnalysisError):
    pass


class TraceContextError(AnalysisError, ValueError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class CompressionError(AnalysisError, ValueError):
    pass
