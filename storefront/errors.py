"""
Taxonomie d'erreurs du pipeline commande/paiement.
- InvalidInput (400): client, adresse, panier ou taux de TVA invalides
- ConfigurationMissing (500): identifiants absents
- ProviderRequestFailed (400/500): réponse non-succès de Mollie
- NotificationFailed: échec d'envoi d'email (toujours avalé, journalisé)
Le handler enregistré par la factory rend {"error": ..., "details"?: ...}.
"""
from typing import Any, Optional


class CheckoutError(Exception):
    status_code = 500
    error = "create-order failed"

    def __init__(self, error: Optional[str] = None, details: Any = None):
        self.error = error or self.error
        self.details = details
        super().__init__(self.error)

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidInput(CheckoutError):
    status_code = 400
    error = "Invalid input"


class MissingCustomerFields(InvalidInput):
    error = "Missing customer fields"


class InvalidVatRate(InvalidInput):
    error = "Invalid vatRate"


class InvalidProduct(InvalidInput):
    error = "Invalid productOption"


class EmptyCart(InvalidInput):
    error = "No valid cart items"


class ConfigurationMissing(CheckoutError):
    status_code = 500
    error = "Missing configuration"


class ProviderRequestFailed(CheckoutError):
    error = "create-order failed"

    def __init__(self, details: Any = None, provider_status: Optional[int] = None):
        super().__init__(details=details)
        self.provider_status = provider_status
        # Mollie rejette un payload invalide en 400/422: erreur corrigeable côté client
        self.status_code = 400 if provider_status in (400, 422) else 500


class NotificationFailed(Exception):
    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body
