"""
ASIN utilities for the Amazon Listing Optimizer.

An ASIN is exactly 10 characters, uppercase letters and digits only.
The POST /api/optimize body is validated strictly; history lookups only
uppercase the path parameter.
"""

import re

ASIN_LENGTH = 10
ASIN_PATTERN = re.compile(r'^[A-Z0-9]{10}$')

AMAZON_PRODUCT_PATH = '/dp/{asin}'


def validate_asin(asin) -> dict:
    """
    Validate an ASIN before any network or AI call is made.

    Returns dict with:
        valid: bool - True if the ASIN has the expected shape
        errors: list - List of error messages

    Examples:
        >>> validate_asin('B07H65KP63')
        {'valid': True, 'errors': []}

        >>> validate_asin('b07h65kp63')['errors']
        ['ASIN must contain only uppercase letters and numbers']
    """
    errors = []

    if asin is None or asin == '':
        errors.append('ASIN is required')
        return {'valid': False, 'errors': errors}

    if not isinstance(asin, str):
        errors.append('ASIN must be a string')
        return {'valid': False, 'errors': errors}

    if len(asin) != ASIN_LENGTH:
        errors.append(f'ASIN must be {ASIN_LENGTH} characters')

    if not ASIN_PATTERN.match(asin):
        errors.append('ASIN must contain only uppercase letters and numbers')

    return {
        'valid': len(errors) == 0,
        'errors': errors
    }


def normalize_asin(asin: str) -> str:
    """Trim and uppercase a user-supplied ASIN (used for history lookups)."""
    if not asin:
        return ''
    return asin.strip().upper()


def build_product_url(asin: str, base_url: str = 'https://www.amazon.com') -> str:
    """Build the canonical product page URL for an ASIN."""
    return base_url.rstrip('/') + AMAZON_PRODUCT_PATH.format(asin=asin)
