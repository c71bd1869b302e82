"""
ID Generator Utility

Generates prefixed alphanumeric IDs for authoring sessions and stored snapshots.
Uses cryptographically secure random generation.
"""

import secrets
import string


def generate_id(prefix: str, length: int = 10) -> str:
    """
    Generate a prefixed alphanumeric ID.

    Args:
        prefix: The prefix for the ID (e.g., "SES_", "SNP_")
        length: Length of the random part (default 10)

    Returns:
        A string like "SES_7xK9mN2pQ4"
    """
    alphabet = string.ascii_letters + string.digits
    return prefix + "".join(secrets.choice(alphabet) for _ in range(length))


def generate_session_id() -> str:
    return generate_id("SES_")
