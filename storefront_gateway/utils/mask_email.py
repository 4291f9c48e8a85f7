"""Email masking for logs and customer-facing displays"""

VISIBLE_CHARS = 2
MAX_MASK_CHARS = 3


def mask_email(email: str | None) -> str:
    """
    Mask the username part of an email address.

    Keeps the first two characters of the username and replaces the rest
    with at most three asterisks. Usernames of two characters or fewer are
    left as they are, and strings that are not shaped like an email are
    returned unchanged.

    Example:
        john.doe@example.com -> jo***@example.com
    """
    if not email:
        return ""

    username, _, domain = email.partition("@")
    if not username or not domain:
        return email

    if len(username) <= VISIBLE_CHARS:
        masked = username
    else:
        masked = username[:VISIBLE_CHARS] + "*" * min(len(username) - VISIBLE_CHARS, MAX_MASK_CHARS)

    return f"{masked}@{domain}"
