"""
Shared pytest fixtures for Amazon Listing Optimizer tests.
"""

import json
import pytest
import sys
import importlib.util
from pathlib import Path
from unittest.mock import MagicMock

# Project root for finding Cloud Function modules
PROJECT_ROOT = Path(__file__).parent.parent


def _load_module_from_path(module_name: str, file_path: Path):
    """Load a module from a specific file path."""
    spec = importlib.util.spec_from_file_location(module_name, file_path)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


# Load the Cloud Function module at module load time (directory name is hyphenated)
_listing_optimizer_module = _load_module_from_path(
    'listing_optimizer_main',
    PROJECT_ROOT / 'listing-optimizer' / 'main.py'
)

from shared.schemas import OptimizedListing, ProductListing  # noqa: E402
from shared.storage import create_store  # noqa: E402


VALID_ASIN = 'B07H65KP63'


# ============================================================================
# Cloud Function Fixtures
# ============================================================================

@pytest.fixture
def optimizer_module():
    """Returns the listing-optimizer main module."""
    return _listing_optimizer_module


@pytest.fixture
def fetch_product_page():
    """Returns fetch_product_page function from listing-optimizer."""
    return _listing_optimizer_module.fetch_product_page


@pytest.fixture
def scrape_product():
    """Returns scrape_product function from listing-optimizer."""
    return _listing_optimizer_module.scrape_product


@pytest.fixture
def generate_optimization():
    """Returns generate_optimization function from listing-optimizer."""
    return _listing_optimizer_module.generate_optimization


@pytest.fixture
def handle_request():
    """Returns the request router from listing-optimizer."""
    return _listing_optimizer_module.handle_request


@pytest.fixture
def product_url():
    """Canonical product URL for VALID_ASIN, as the function builds it."""
    return f"{_listing_optimizer_module.AMAZON_BASE_URL}/dp/{VALID_ASIN}"


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture
def sample_listing():
    """A scraped listing for VALID_ASIN."""
    return ProductListing(
        asin=VALID_ASIN,
        title='Acme Noise Cancelling Headphones',
        bullets=['Long battery life for all-day listening', 'Soft memory foam ear cushions'],
        description='Wireless over-ear headphones with active noise cancelling.',
    )


@pytest.fixture
def optimized_payload():
    """A well-formed Gemini response payload."""
    return {
        'optimizedTitle': 'Acme Wireless Noise Cancelling Over-Ear Headphones with 40H Battery',
        'optimizedBullets': [
            'ALL-DAY BATTERY: Up to 40 hours of playback on a single charge',
            'QUIET ANYWHERE: Active noise cancelling blocks out commuter noise',
            'COMFORT FIT: Memory foam cushions for long listening sessions',
            'RICH SOUND: 40mm drivers deliver deep bass and clear highs',
            'UNIVERSAL: Bluetooth 5.0 pairs with phones, tablets and laptops',
        ],
        'optimizedDescription': 'Enjoy immersive, uninterrupted sound wherever you go.',
        'suggestedKeywords': ['bluetooth headphones', 'anc headset', 'travel headphones'],
    }


@pytest.fixture
def optimized_listing(optimized_payload):
    return OptimizedListing.model_validate(optimized_payload)


@pytest.fixture
def gemini_model_factory():
    """Factory for a fake Gemini model whose response has the given text."""
    def _factory(text=None, error=None):
        model = MagicMock()
        if error is not None:
            model.generate_content.side_effect = error
        else:
            model.generate_content.return_value = MagicMock(text=text)
        return model

    return _factory


@pytest.fixture
def store():
    """Fresh in-memory optimization store."""
    return create_store('sqlite://')


@pytest.fixture
def listing_optimizer(store, sample_listing, optimized_listing):
    """Optimizer wired to stub scraper/generator and an in-memory store."""
    return _listing_optimizer_module.ListingOptimizer(
        store,
        scraper=MagicMock(return_value=sample_listing),
        generator=MagicMock(return_value=optimized_listing),
    )


@pytest.fixture
def mock_flask_request():
    """Factory for creating mock Flask request objects."""
    class MockRequest:
        def __init__(self, json_data=None, method='POST', path='/api/optimize'):
            self._json = json_data
            self.method = method
            self.path = path
            self.data = json.dumps(json_data).encode() if json_data is not None else b''

        def get_json(self, force=False, silent=False):
            return self._json

    return MockRequest


# ============================================================================
# Markup Fixtures
# ============================================================================

@pytest.fixture
def product_page_html():
    """A product page where every primary selector matches."""
    return """
    <!DOCTYPE html>
    <html>
    <head><title>Amazon.com: Acme Headphones</title></head>
    <body>
        <h1 id="title"><span id="productTitle">
            Acme Noise Cancelling Headphones
        </span></h1>
        <div id="feature-bullets">
            <ul>
                <li><span class="a-list-item"> 40-hour battery life with fast charging </span></li>
                <li><span class="a-list-item">Active noise cancelling for travel</span></li>
                <li><span class="a-list-item">See more product details</span></li>
                <li><span class="a-list-item">Memory foam ear cushions</span></li>
            </ul>
        </div>
        <div id="productDescription">
            <p>Wireless over-ear headphones
               with   active noise cancelling.</p>
        </div>
    </body>
    </html>
    """


@pytest.fixture
def captcha_page_html():
    """Amazon's robot check page (no product title)."""
    return """
    <html>
    <head><title>Amazon.com</title></head>
    <body>
        <h4>Enter the characters you see below</h4>
        <p>Sorry, we just need to make sure you're not a robot.</p>
    </body>
    </html>
    """
