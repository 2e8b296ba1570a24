"""Exception hierarchy for the booking client."""

from typing import Optional


class BookingError(Exception):
    """Base class for every error raised by this package."""

    @property
    def user_message(self) -> str:
        """Message suitable for a notification."""
        return str(self)


class BookingValidationError(BookingError):
    """A local precondition failed; nothing was sent to the backend."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidTransitionError(BookingError):
    """The wizard received an event its current step does not accept."""


class InvalidStatusTransitionError(BookingError):
    """An appointment status change the lifecycle does not allow."""


class ApiError(BookingError):
    """Error returned by (or while reaching) the backend."""

    default_message = "Error desconocido"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: int = 0,
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message or self.default_message)
        self.status_code = status_code
        self.code = code
        self.details = details or {}

    @property
    def retryable(self) -> bool:
        """Whether repeating the request may succeed."""
        return False


class BadRequestError(ApiError):
    default_message = "Datos inválidos"

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message, 400, "VALIDATION_ERROR", details)

    def field_errors(self, field: str) -> Optional[list]:
        """Get backend validation errors for one field."""
        return self.details.get(field)


class UnauthorizedError(ApiError):
    default_message = "No autenticado"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, 401, "UNAUTHORIZED")

    @property
    def user_message(self) -> str:
        return "Tu sesión no es válida. Por favor, inicia sesión de nuevo."


class ForbiddenError(ApiError):
    default_message = "No tienes permisos para realizar esta acción"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, 403, "FORBIDDEN")


class NotFoundError(ApiError):
    default_message = "Recurso no encontrado"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, 404, "NOT_FOUND")


class ConflictError(ApiError):
    default_message = "El horario seleccionado ya no está disponible"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, 409, "CONFLICT")


class ServerError(ApiError):
    default_message = "Error interno del servidor"

    def __init__(self, message: Optional[str] = None, status_code: int = 500):
        super().__init__(message, status_code, "SERVER_ERROR")

    @property
    def retryable(self) -> bool:
        return True

    @property
    def user_message(self) -> str:
        return "Ocurrió un error inesperado. Por favor, intenta nuevamente más tarde."


class NetworkError(ApiError):
    default_message = "Error de conexión"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message, 0, "NETWORK_ERROR")

    @property
    def retryable(self) -> bool:
        return True

    @property
    def user_message(self) -> str:
        return "No se pudo conectar con el servidor. Verifica tu conexión a internet."


def parse_api_error(status_code: int, data: Optional[dict] = None) -> ApiError:
    """
    Map a failed backend response to the matching ApiError.

    Args:
        status_code: HTTP status of the response
        data: Decoded JSON body, if any ({"error", "code", "details"})

    Returns:
        ApiError subclass instance
    """
    data = data or {}
    message = data.get("error")
    details = data.get("details")

    if status_code == 400:
        return BadRequestError(message, details)
    if status_code == 401:
        return UnauthorizedError(message)
    if status_code == 403:
        return ForbiddenError(message)
    if status_code == 404:
        return NotFoundError(message)
    if status_code == 409:
        return ConflictError(message)
    if status_code >= 500:
        return ServerError(message, status_code)
    return ApiError(message, status_code, data.get("code"), details)
