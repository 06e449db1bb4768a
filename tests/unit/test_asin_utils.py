"""
Unit tests for ASIN utilities.
"""

import pytest

from shared.asin_utils import (
    build_product_url,
    normalize_asin,
    validate_asin,
)


class TestValidateAsin:
    """Tests for validate_asin()"""

    def test_valid_asin(self):
        assert validate_asin('B07H65KP63') == {'valid': True, 'errors': []}

    def test_all_digits_valid(self):
        assert validate_asin('0123456789')['valid'] is True

    def test_lowercase_rejected(self):
        result = validate_asin('b07h65kp63')
        assert result['valid'] is False
        assert result['errors'] == ['ASIN must contain only uppercase letters and numbers']

    def test_too_short(self):
        result = validate_asin('B07H65')
        assert result['valid'] is False
        assert 'ASIN must be 10 characters' in result['errors']

    def test_too_long(self):
        result = validate_asin('B07H65KP63X')
        assert result['valid'] is False
        assert 'ASIN must be 10 characters' in result['errors']

    @pytest.mark.parametrize('asin', ['B07H65-P63', 'B07H65 P63', 'B07H65KP6!'])
    def test_symbols_rejected(self, asin):
        assert validate_asin(asin)['valid'] is False

    def test_missing(self):
        assert validate_asin(None) == {'valid': False, 'errors': ['ASIN is required']}

    def test_empty_string(self):
        assert validate_asin('')['errors'] == ['ASIN is required']

    def test_non_string(self):
        assert validate_asin(1234567890)['errors'] == ['ASIN must be a string']


class TestNormalizeAsin:
    """Tests for normalize_asin()"""

    def test_uppercases(self):
        assert normalize_asin('b07h65kp63') == 'B07H65KP63'

    def test_strips_whitespace(self):
        assert normalize_asin('  B07H65KP63 ') == 'B07H65KP63'

    def test_empty(self):
        assert normalize_asin('') == ''


class TestBuildProductUrl:
    """Tests for build_product_url()"""

    def test_default_base(self):
        assert build_product_url('B07H65KP63') == 'https://www.amazon.com/dp/B07H65KP63'

    def test_custom_base_trailing_slash(self):
        assert build_product_url('B07H65KP63', 'https://www.amazon.co.uk/') == 'https://www.amazon.co.uk/dp/B07H65KP63'
