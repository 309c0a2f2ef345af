# storefront/api/deps.py
from fastapi import HTTPException, Request

from storefront.domain.errors import (
    AuthenticationError,
    ConflictError,
    EmptyCart,
    StorageFailure,
    StoreError,
    ValidationError,
)
from storefront.services.conversion_service import ConversionService
from storefront.services.experiment_service import ExperimentService
from storefront.services.lock_service import BaseLockService

_STATUS_CODES = {
    ValidationError: 400,
    EmptyCart: 400,
    AuthenticationError: 401,
    ConflictError: 409,
    StorageFailure: 500,
}


def to_http(e: StoreError) -> HTTPException:
    """Wyjatek domeny -> HTTPException z bezpiecznym komunikatem."""
    for exc_type, status_code in _STATUS_CODES.items():
        if isinstance(e, exc_type):
            return HTTPException(status_code=status_code, detail=e.message)
    return HTTPException(status_code=500, detail="Wewnętrzny błąd serwera")


def get_experiments(request: Request) -> ExperimentService:
    return request.app.state.experiments


def get_lock_service(request: Request) -> BaseLockService:
    return request.app.state.lock_service


def get_conversions(request: Request) -> ConversionService:
    return request.app.state.conversions


def require_tables(*table_names: str):
    """Endpoint dotyka tabel, ktorych migracja sie nie udala -> 503 zamiast zapisu."""

    def _check(request: Request) -> None:
        report = getattr(request.app.state, "migration_report", None)
        if report is None:
            raise HTTPException(status_code=503, detail="Schemat bazy nie jest jeszcze gotowy")
        missing = [t for t in table_names if not report.is_table_ready(t)]
        if missing:
            raise HTTPException(
                status_code=503,
                detail=f"Tabele niedostępne (migracja nieudana): {', '.join(missing)}",
            )

    return _check
