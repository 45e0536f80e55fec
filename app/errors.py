"""Domain error taxonomy shared by the services and mapped to HTTP in ``app.main``."""


class AppError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DomainError(AppError):
    """Generic rule violation, surfaced as 400."""


class ConflictError(AppError):
    """Duplicate username/email or an existing membership."""


class NotFoundError(AppError):
    status_code = 404


class ForbiddenError(AppError):
    status_code = 403


class AuthenticationError(AppError):
    status_code = 401
