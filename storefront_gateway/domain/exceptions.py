"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    status_code = 500
    public_message = "Internal server error"


class UnauthorizedError(DomainException):
    """No session, an invalid session, or a role outside the allow-list"""

    status_code = 401
    public_message = "Unauthorized"


class UpstreamServiceError(DomainException):
    """Database or third-party service failed"""

    service = "upstream"


class ConfigurationError(UpstreamServiceError):
    """A required API key or setting is not configured"""

    service = "config"

    @property
    def public_message(self) -> str:
        return str(self)


class PaymentProviderError(UpstreamServiceError):
    """Stripe returned an error or is unavailable"""

    service = "stripe"

    @property
    def public_message(self) -> str:
        return str(self)


class AIServiceError(UpstreamServiceError):
    """OpenAI returned an error or is unavailable"""

    service = "openai"


class EmailDeliveryError(UpstreamServiceError):
    """Transactional email could not be sent"""

    service = "ses"
