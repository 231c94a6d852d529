class TideError(Exception):
    """Base exception for errors surfaced to API clients."""
    status_code = 500

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)
        self.message = message

class ValidationError(TideError):
    """Raised for malformed or out-of-range coordinates and ids."""
    status_code = 404

class NotFound(TideError):
    """Raised when a station id is unknown or the directory is empty."""
    status_code = 404

    def __init__(self, message: str = "Not Found"):
        super().__init__(message)

class FetchError(TideError):
    """Raised when a NOAA call fails or returns unusable data."""
    status_code = 404

class MethodNotAllowed(TideError):
    """Raised for any HTTP method other than GET or OPTIONS."""
    status_code = 405

    def __init__(self, message: str = "Method Not Allowed"):
        super().__init__(message)

class ConfigurationError(Exception):
    """Raised at startup when required settings are missing."""
    pass
