"""Unit tests for external service clients"""

import asyncio
import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError
from storefront_gateway.domain.exceptions import ConfigurationError, EmailDeliveryError
from storefront_gateway.domain.models import EmailContent
from storefront_gateway.infrastructure.clients.ai import OpenAIClient
from storefront_gateway.infrastructure.clients.mailer import EmailClient
from storefront_gateway.infrastructure.clients.payments import StripeClient, encode_form


def test_encode_form_flattens_nested_params():
    pairs = encode_form(
        {
            "amount": 1999,
            "confirm": True,
            "payment_method": None,
            "metadata": {"orderId": 7},
            "shipping": {"name": "Jane", "address": {"line1": "Main St 1"}},
        }
    )

    assert pairs == [
        ("amount", "1999"),
        ("confirm", "true"),
        ("metadata[orderId]", "7"),
        ("shipping[name]", "Jane"),
        ("shipping[address][line1]", "Main St 1"),
    ]


def test_encode_form_lists():
    assert encode_form({"expand": ["latest_charge", "customer"]}) == [
        ("expand[0]", "latest_charge"),
        ("expand[1]", "customer"),
    ]


def test_stripe_client_without_key_raises_configuration_error():
    client = StripeClient(secret_key="sk")
    client.secret_key = ""

    with pytest.raises(ConfigurationError):
        asyncio.run(client.create_payment_intent(1000, "pm_card_visa", "Order"))


def test_openai_client_without_key_raises_configuration_error():
    client = OpenAIClient(api_key="sk")
    client.api_key = ""

    assert client.configured is False
    with pytest.raises(ConfigurationError):
        asyncio.run(client.embed("hello"))


def test_email_client_sends_html_and_text():
    ses = MagicMock()
    ses.send_email.return_value = {"MessageId": "msg-1"}
    client = EmailClient(source="shop@example.com", region="eu-west-1", ses_client=ses)

    message_id = asyncio.run(client.send("jane@example.com", EmailContent(subject="Hi", html="<p>Hi</p>", text="Hi")))

    assert message_id == "msg-1"
    kwargs = ses.send_email.call_args.kwargs
    assert kwargs["Source"] == "shop@example.com"
    assert kwargs["Destination"] == {"ToAddresses": ["jane@example.com"]}
    assert kwargs["Message"]["Body"]["Html"]["Data"] == "<p>Hi</p>"


def test_email_client_wraps_ses_errors():
    ses = MagicMock()
    ses.send_email.side_effect = ClientError(
        {"Error": {"Code": "MessageRejected", "Message": "Email address is not verified."}},
        "SendEmail",
    )
    client = EmailClient(ses_client=ses)

    with pytest.raises(EmailDeliveryError):
        asyncio.run(client.send("jane@example.com", EmailContent(subject="Hi", html="", text="")))
