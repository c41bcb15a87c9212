"""
Error taxonomy for the payment service.

Every error carries a machine-readable ``code`` and the HTTP status the entry
facade answers with. ``ProviderIntegrationError`` never reaches HTTP: the
create-payment handler folds it into a FAILED payment.
"""


class PaymentServiceError(Exception):
    code = "payment_error"
    status_code = 500

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message}


class PaymentValidationError(PaymentServiceError):
    code = "validation_error"
    status_code = 422

    def __init__(self, message: str, code: str | None = None, field: str | None = None):
        super().__init__(message, code)
        self.field = field

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class ProviderNotFoundError(PaymentServiceError):
    code = "provider_not_found"
    status_code = 400

    def __init__(self, provider_name: str):
        super().__init__(f"Payment provider '{provider_name}' is not registered")
        self.provider_name = provider_name


class ProviderIntegrationError(PaymentServiceError):
    """Transport-level failure talking to a provider (unreachable, malformed reply)."""

    code = "provider_integration_error"
    status_code = 502

    def __init__(self, provider_name: str, message: str):
        super().__init__(f"{provider_name}: {message}")
        self.provider_name = provider_name


class PaymentPersistenceError(PaymentServiceError):
    code = "persistence_error"
    status_code = 500


class PaymentNotFoundError(PaymentServiceError):
    code = "payment_not_found"
    status_code = 404

    def __init__(self, payment_id: str):
        super().__init__(f"Payment '{payment_id}' not found")
        self.payment_id = payment_id


class InvalidStatusTransition(PaymentServiceError):
    code = "invalid_status_transition"
    status_code = 409

    def __init__(self, payment_id: str, current: str, requested: str):
        super().__init__(f"Payment '{payment_id}' cannot move from {current} to {requested}")
        self.payment_id = payment_id
        self.current = current
        self.requested = requested
