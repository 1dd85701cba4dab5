"""API exception hierarchy for consistent error handling.

All API exceptions inherit from DemandasAPIError, which provides
status_code and error_code attributes used by the global exception
handler to generate consistent error responses. Domain errors raised by
the service layer are mapped onto this hierarchy by `from_domain_error`.
"""

from gestao_demandas.api.models.errors import ErrorCode
from gestao_demandas.backup.errors import BackupError, CorruptBackupError
from gestao_demandas.db.errors import ConflictError, NotFoundError, StoreError
from gestao_demandas.demandas.validation import DemandaValidationError


class DemandasAPIError(Exception):
    """Base exception for all API errors.

    Subclasses set status_code and error_code to define the HTTP response.
    """

    status_code: int = 500
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.message = message
        self.errors = errors
        super().__init__(message)


class InvalidRequestError(DemandasAPIError):
    """Raised when query or body values cannot be used."""

    status_code = 400
    error_code = ErrorCode.INVALID_REQUEST


class ValidationFailedError(DemandasAPIError):
    """Raised when a payload breaks business rules."""

    status_code = 400
    error_code = ErrorCode.VALIDATION_FAILED


class DemandaNotFoundError(DemandasAPIError):
    status_code = 404
    error_code = ErrorCode.DEMANDA_NOT_FOUND


class BackupNotFoundError(DemandasAPIError):
    status_code = 404
    error_code = ErrorCode.BACKUP_NOT_FOUND


class TagConflictError(DemandasAPIError):
    status_code = 409
    error_code = ErrorCode.TAG_CONFLICT


class CorruptBackupAPIError(DemandasAPIError):
    status_code = 500
    error_code = ErrorCode.CORRUPT_BACKUP


class BackupFailedError(DemandasAPIError):
    status_code = 500
    error_code = ErrorCode.BACKUP_FAILED


class StorageError(DemandasAPIError):
    status_code = 500
    error_code = ErrorCode.STORE_ERROR


def from_domain_error(exc: Exception, *, expose_details: bool = True) -> DemandasAPIError:
    """Map a service-layer exception to its API counterpart.

    Args:
        exc: Exception raised below the routes
        expose_details: Include backend error text for storage failures
    """
    if isinstance(exc, DemandaValidationError):
        return ValidationFailedError("Dados inválidos", errors=exc.errors)
    if isinstance(exc, CorruptBackupError):
        return CorruptBackupAPIError("Erro ao processar arquivo de backup")
    if isinstance(exc, BackupError):
        return BackupFailedError("Erro ao criar backup")
    if isinstance(exc, NotFoundError):
        return DemandaNotFoundError(str(exc))
    if isinstance(exc, ConflictError):
        return TagConflictError(str(exc))
    if isinstance(exc, StoreError):
        return StorageError(str(exc) if expose_details else "Erro no banco de dados")
    return DemandasAPIError("Erro interno do servidor")
