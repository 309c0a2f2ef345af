# storefront/domain/errors.py


class StoreError(Exception):
    """Bazowy wyjatek domeny sklepu. `message` jest bezpieczny do pokazania klientowi."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    """Brak wymaganych pol lub niepoprawne dane wejsciowe."""


class AuthenticationError(StoreError):
    """Niepoprawny email lub haslo."""


class ConflictError(StoreError):
    """Duplikat unikalnego klucza, np. ponowna rejestracja tego samego emaila."""


class EmptyCart(StoreError):
    def __init__(self, message: str = "Koszyk jest pusty"):
        super().__init__(message)


class StorageFailure(StoreError):
    """Blad odczytu/zapisu w bazie. Szczegoly tylko w logach."""

    def __init__(self, message: str = "Blad bazy danych"):
        super().__init__(message)


class ExperimentationUnavailable(Exception):
    """Backend eksperymentow niedostepny. Nigdy nie wychodzi poza ExperimentService."""


class LockNotAcquired(Exception):
    def __init__(self, key: str):
        super().__init__(f"Lock {key} jest zajety")
        self.key = key
