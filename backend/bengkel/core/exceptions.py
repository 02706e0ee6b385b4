"""
Eccezioni Custom per l'applicazione.
Progetto: Bengkel Manager (Gestionale Officina)

Eccezioni di dominio convertite in risposte HTTP dagli handler
registrati in main.py.

NOTA: BusinessValidationError è distinta da pydantic.ValidationError.
- pydantic.ValidationError: errori di formato/tipo nei dati di input (gestiti da FastAPI → 422)
- BusinessValidationError: violazioni delle regole di business (gestite dal nostro handler → 422)
"""

from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NotFoundError",
    "DuplicateError",
    "BusinessValidationError",
    "ConflictError",
    "AuthorizationError",
]


class AppException(Exception):
    """
    Base exception per l'applicazione.

    Attributes:
        status_code: HTTP status code da restituire al client
        error_code: Identificativo univoco dell'errore per il frontend
        detail: Messaggio di errore leggibile per l'utente
        extra: Dati aggiuntivi per il frontend
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"
    default_detail: str = "Errore interno del server"

    def __init__(
        self,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.detail = detail if detail is not None else self.default_detail
        self.error_code = error_code if error_code is not None else self.__class__.error_code
        self.extra = extra
        self.status_code = self.__class__.status_code
        super().__init__(self.detail)

    def to_content(self) -> Dict[str, Any]:
        """Corpo JSON della risposta di errore."""
        content: Dict[str, Any] = {
            "detail": self.detail,
            "error_code": self.error_code,
        }
        if self.extra:
            content["extra"] = self.extra
        return content


class NotFoundError(AppException):
    """
    Risorsa non trovata.

    Es. veicolo, articolo di catalogo o fattura inesistenti.
    """

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"
    default_detail: str = "Risorsa non trovata"


class DuplicateError(AppException):
    """Violazione di un vincolo unique (es. targa o email già registrate)."""

    status_code: int = 409
    error_code: str = "DUPLICATE_RESOURCE"
    default_detail: str = "Risorsa già esistente"


class BusinessValidationError(ValueError, AppException):
    """
    Violazione delle regole di business logic.

    Eredita da ValueError per essere catturata dai validatori Pydantic.

    Esempi di utilizzo:
        - "Selezionare veicolo e officina"
        - "Aggiungere almeno una voce alla fattura"
    """

    status_code: int = 422
    error_code: str = "BUSINESS_VALIDATION_ERROR"
    default_detail: str = "Validazione dati fallita"

    def __init__(
        self,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Chiama AppException.__init__ direttamente per evitare ValueError
        AppException.__init__(self, detail, error_code, extra)


class ConflictError(AppException):
    """
    Conflitto di stato.

    Es. numero fattura già assegnato da una richiesta concorrente.
    """

    status_code: int = 409
    error_code: str = "CONFLICT_STATE"
    default_detail: str = "Conflitto di stato"


class AuthorizationError(AppException):
    """
    Operazione non consentita al ruolo corrente.

    Es. "Solo il proprietario può modificare i ruoli".
    """

    status_code: int = 403
    error_code: str = "FORBIDDEN"
    default_detail: str = "Accesso non autorizzato"
