"""Unit tests for email masking"""

import pytest
from storefront_gateway.utils.mask_email import mask_email


def test_mask_email_long_username():
    assert mask_email("john.doe@example.com") == "jo***@example.com"


def test_mask_email_short_username_unchanged():
    assert mask_email("a@b.com") == "a@b.com"
    assert mask_email("ab@b.com") == "ab@b.com"


def test_mask_email_mask_grows_up_to_three():
    assert mask_email("abc@x.io") == "ab*@x.io"
    assert mask_email("abcd@x.io") == "ab**@x.io"


@pytest.mark.parametrize("value", ["not-an-email", "@example.com", "user@"])
def test_mask_email_invalid_returned_as_is(value):
    assert mask_email(value) == value


@pytest.mark.parametrize("value", ["", None])
def test_mask_email_empty(value):
    assert mask_email(value) == ""
