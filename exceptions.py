# exceptions.py


class BriefingError(Exception):
    """Base exception for project briefing errors."""

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)


class APIError(BriefingError):
    """Exception raised for errors in a remote tracker or chat API."""

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(APIError):
    """Exception raised when an API rate limit is exceeded."""

    pass


class ConfigurationError(BriefingError):
    """Exception raised for errors in the configuration."""

    pass


class InvalidURLError(BriefingError):
    """Exception raised when an issue URL does not match a known tracker."""

    pass


class IssueNotFoundError(BriefingError):
    """Exception raised when the root issue of an analysis cannot be fetched."""

    pass


class LLMError(BriefingError):
    """Exception raised when the language model call fails."""

    pass


class HistoryError(BriefingError):
    """Exception raised for errors reading or writing the history file."""

    pass


class HistoryEntryNotFoundError(HistoryError):
    """Exception raised when a history entry id is unknown."""

    pass
