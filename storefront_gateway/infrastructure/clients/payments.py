"""Stripe REST API client for payment intents, checkout sessions and refunds"""

from typing import Any, Dict, List, Optional, Tuple

import httpx

from storefront_gateway.config import settings
from storefront_gateway.domain.exceptions import ConfigurationError, PaymentProviderError
from storefront_gateway.domain.models import CheckoutSession, PaymentIntent, Refund
from storefront_gateway.infrastructure.observability.metrics import upstream_latency_histogram


def encode_form(params: Dict[str, Any], prefix: str = "") -> List[Tuple[str, str]]:
    """
    Flatten nested params into Stripe's bracketed form encoding.

    {"metadata": {"order": 7}} -> [("metadata[order]", "7")]
    None values are dropped.
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else key
        if value is None:
            continue
        if isinstance(value, dict):
            pairs.extend(encode_form(value, name))
        elif isinstance(value, (list, tuple)):
            for i, item in enumerate(value):
                if isinstance(item, dict):
                    pairs.extend(encode_form(item, f"{name}[{i}]"))
                else:
                    pairs.append((f"{name}[{i}]", str(item)))
        elif isinstance(value, bool):
            pairs.append((name, "true" if value else "false"))
        else:
            pairs.append((name, str(value)))
    return pairs


class StripeClient:
    """Client for the Stripe payments API"""

    def __init__(self, secret_key: str | None = None, base_url: str | None = None, timeout: float | None = None):
        self.secret_key = secret_key or settings.stripe_secret_key
        self.base_url = base_url or settings.stripe_api_base
        self.timeout = timeout or settings.http_timeout_seconds

    async def _post(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST form-encoded params to Stripe and return the decoded JSON.

        Raises:
            ConfigurationError: When no secret key is configured
            PaymentProviderError: On timeout, network errors, or Stripe errors
        """
        if not self.secret_key:
            raise ConfigurationError("Stripe secret key is not configured")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with upstream_latency_histogram.labels(service="stripe").time():
                    response = await client.post(
                        f"{self.base_url}{path}",
                        data=encode_form(params),
                        headers={"Authorization": f"Bearer {self.secret_key}"},
                    )
                data = response.json()
            except httpx.TimeoutException as e:
                raise PaymentProviderError(f"Stripe API timeout after {self.timeout}s") from e
            except httpx.RequestError as e:
                raise PaymentProviderError(f"Stripe API unreachable: {e}") from e
            except ValueError as e:
                raise PaymentProviderError(f"Invalid response from Stripe: {e}") from e

        if response.is_error:
            error = data.get("error", {}) if isinstance(data, dict) else {}
            raise PaymentProviderError(error.get("message") or f"Stripe API error: {response.status_code}")

        return data

    async def create_payment_intent(
        self,
        amount_cents: int,
        payment_method_id: Optional[str],
        description: str,
        metadata: Optional[Dict[str, Any]] = None,
        currency: str = "usd",
        manual_confirmation: bool = False,
        shipping: Optional[Dict[str, Any]] = None,
    ) -> PaymentIntent:
        """Create and immediately confirm a payment intent"""
        params: Dict[str, Any] = {
            "amount": amount_cents,
            "currency": currency,
            "payment_method": payment_method_id,
            "confirm": True,
            "description": description,
            "metadata": metadata or {},
            "shipping": shipping,
        }
        if manual_confirmation:
            params["confirmation_method"] = "manual"

        data = await self._post("/payment_intents", params)
        try:
            return PaymentIntent(id=data["id"], status=data["status"], client_secret=data.get("client_secret"))
        except KeyError as e:
            raise PaymentProviderError(f"Invalid payment intent from Stripe: missing {e}") from e

    async def create_refund(self, payment_intent_id: str, amount_cents: Optional[int] = None) -> Refund:
        """Refund a payment intent, fully when no amount is given"""
        data = await self._post(
            "/refunds",
            {"payment_intent": payment_intent_id, "amount": amount_cents},
        )
        try:
            return Refund(id=data["id"], status=data["status"], amount=data["amount"], raw=data)
        except KeyError as e:
            raise PaymentProviderError(f"Invalid refund from Stripe: missing {e}") from e

    async def create_checkout_session(
        self,
        line_items: List[Dict[str, Any]],
        success_url: str,
        cancel_url: str,
        customer_email: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> CheckoutSession:
        """Create a hosted card checkout page in payment mode"""
        data = await self._post(
            "/checkout/sessions",
            {
                "payment_method_types": ["card"],
                "line_items": line_items,
                "mode": "payment",
                "success_url": success_url,
                "cancel_url": cancel_url,
                "customer_email": customer_email,
                "metadata": metadata or {},
            },
        )
        try:
            return CheckoutSession(id=data["id"], url=data.get("url"))
        except KeyError as e:
            raise PaymentProviderError(f"Invalid checkout session from Stripe: missing {e}") from e
