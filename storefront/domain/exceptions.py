# storefront/domain/exceptions.py
"""
Wyjatki domenowe sklepu.

Kazdy wyjatek niesie:
- code: kod maszynowy (np. "insufficient_stock", "line_not_found")
- message: komunikat dla klienta API
- context: dodatkowe dane (np. dostepny zapas)

Mapowanie na HTTP jest w storefront/api/errors.py.
"""


class StorefrontError(Exception):
    status_code = 500

    def __init__(self, message: str = "", code: str = "error", context: dict | None = None):
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(message)


class ValidationError(StorefrontError):
    """Zle dane wejsciowe, brak zapasu, nieaktywny produkt, zerowa delta."""

    status_code = 400


class NotFoundError(StorefrontError):
    """Nieznany produkt/uzytkownik albo brak linii koszyka przy zmniejszaniu."""

    status_code = 404


class ConflictError(StorefrontError):
    """Rownolegla modyfikacja tego samego produktu w koszyku."""

    status_code = 409
