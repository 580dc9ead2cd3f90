# src/id_generator.py
"""
Typed Public ID Generator
Generates IDs in format: PREFIX-TIMESTAMP-RANDOM
Example: CPY-1699564234-A7K9M2
"""

import secrets
import string
import time


# Prefix mapping for all resource types
PREFIX_MAP = {
    "company": "CPY",
    "community": "CMY",
}

_RANDOM_ALPHABET = string.ascii_uppercase + string.digits


def generate_public_id(prefix: str) -> str:
    """
    Generate a typed public ID with format: PREFIX-TIMESTAMP-RANDOM

    Args:
        prefix: 3-letter type prefix (e.g., "CPY") or resource type name (e.g., "company")

    Returns:
        str: Public ID, e.g. "CMY-1699564234-Z5R7N4"
    """
    # If prefix is a resource type name, look it up in PREFIX_MAP
    if prefix in PREFIX_MAP:
        prefix = PREFIX_MAP[prefix]

    timestamp = int(time.time())
    random_part = "".join(secrets.choice(_RANDOM_ALPHABET) for _ in range(6))

    return f"{prefix}-{timestamp}-{random_part}"


def generate_company_id() -> str:
    """Generate a company public ID: CPY-1699564234-X3P8Q1"""
    return generate_public_id(PREFIX_MAP["company"])


def generate_community_id() -> str:
    """Generate a community public ID: CMY-1699564234-Z5R7N4"""
    return generate_public_id(PREFIX_MAP["community"])


def parse_public_id(public_id: str) -> dict:
    """
    Parse a public ID into its components.

    Example:
        >>> parse_public_id("CPY-1699564234-A7K9M2")
        {
            "prefix": "CPY",
            "timestamp": 1699564234,
            "random": "A7K9M2",
            "resource_type": "company"
        }
    """
    try:
        parts = public_id.split("-")
        if len(parts) != 3:
            raise ValueError(f"Invalid public ID format: {public_id}")

        prefix, timestamp_str, random_part = parts

        # Reverse lookup resource type from prefix
        resource_type = None
        for rtype, rpref in PREFIX_MAP.items():
            if rpref == prefix:
                resource_type = rtype
                break

        return {
            "prefix": prefix,
            "timestamp": int(timestamp_str),
            "random": random_part,
            "resource_type": resource_type,
        }
    except (ValueError, IndexError, AttributeError) as e:
        raise ValueError(f"Failed to parse public ID '{public_id}': {e}")


def validate_public_id(public_id: str, expected_prefix: str = None) -> bool:
    """
    Validate a public ID format and optionally check the prefix.

    Example:
        >>> validate_public_id("CPY-1699564234-A7K9M2", "CPY")
        True
        >>> validate_public_id("CMY-1699564234-A7K9M2", "CPY")
        False
        >>> validate_public_id("Acme Homes")
        False
    """
    if not isinstance(public_id, str):
        return False
    try:
        parsed = parse_public_id(public_id)
    except ValueError:
        return False

    if expected_prefix and parsed["prefix"] != expected_prefix:
        return False
    if parsed["resource_type"] is None:
        return False
    random_part = parsed["random"]
    if len(random_part) != 6 or any(ch not in _RANDOM_ALPHABET for ch in random_part):
        return False

    return True


__all__ = [
    "PREFIX_MAP",
    "generate_public_id",
    "generate_company_id",
    "generate_community_id",
    "parse_public_id",
    "validate_public_id",
]
