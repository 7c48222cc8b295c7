class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler is handed something it cannot work with."""
    def __init__(self, message: str, details: dict = None, status_code: int = 400):
        super().__init__(message, status_code=status_code, details=details)

class InvalidTimetableInputError(SchedulerError):
    """Raised when generate/validate receive a malformed collection (e.g. None)."""
    def __init__(self, argument: str):
        super().__init__(
            f"{argument} must be a list, got None",
            details={"argument": argument},
            status_code=422,
        )

class ConfigurationError(AppError):
    """Raised when static scheduling configuration is invalid."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=500, details=details)
