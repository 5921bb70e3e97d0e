"""
Analyzer exceptions.
"""


class AnalyzerError(Exception):
    """Base exception for analyzer errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(AnalyzerError):
    """Required configuration (API key, ...) is missing."""


class InvalidVideoError(AnalyzerError):
    """Uploaded file is not a video."""

    def __init__(self, content_type: str, message: str = "Please upload a valid video file."):
        super().__init__(message)
        self.content_type = content_type


class AnalysisInProgressError(AnalyzerError):
    """An analysis is already running for this session."""

    def __init__(self, message: str = "An analysis is already in progress for this session."):
        super().__init__(message)


class InvalidTransitionError(AnalyzerError):
    """Action is not allowed in the current session state."""

    def __init__(self, action: str, state: str):
        super().__init__(f"Cannot {action} while session is {state}.")
        self.action = action
        self.state = state


class SessionNotFoundError(AnalyzerError):
    """No session with the given id."""

    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id
