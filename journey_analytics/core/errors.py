class AnalyticsError(Exception):
    """Base class for journey analytics errors."""


class DataFetchError(AnalyticsError):
    """
    A collaborator could not deliver raw data (timeout, exhausted quota,
    malformed payload).

    Raised by event stores; the pipeline catches it and carries on with an
    empty input for the affected report section.
    """

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        message = f"{source}: {reason}" if reason else source
        super().__init__(message)


class ValidationError(AnalyticsError):
    """
    A raw record is unusable (missing session id, missing query, bad
    timestamp).

    Only strict normalizers raise it; the default path skips the record.
    """

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")
