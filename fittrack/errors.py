class FitTrackError(Exception):
    """Base class for errors shown inline to the user."""
    status_code = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(FitTrackError):
    status_code = 400


class ConflictError(FitTrackError):
    status_code = 409


class AuthenticationFailure(FitTrackError):
    status_code = 401


class StorageFailure(FitTrackError):
    status_code = 500
