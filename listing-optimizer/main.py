"""
Amazon Listing Optimizer Cloud Function

Scrapes an Amazon product page by ASIN, asks Gemini for an optimized listing
and keyword suggestions, and stores both versions for later retrieval.

Routes:
- POST /api/optimize          {"asin": "B07H65KP63"}
- GET  /api/history           all optimizations, newest first
- GET  /api/history/<asin>    optimizations for one ASIN, newest first

Pipeline (strictly sequential, no retries):
1. Validate ASIN (400 on failure)
2. Scrape product page, degrading to placeholder data when Amazon blocks us
3. Optimize with Gemini (500 on empty/malformed response)
4. Store the record (500 on failure, nothing partial is written)
"""

import functions_framework
import requests
import google.generativeai as genai
import os
import sys
import json
import threading

# Add shared module to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.asin_utils import build_product_url, normalize_asin, validate_asin
from shared.errors import (
    AIOptimizationError,
    AsinValidationError,
    FetchError,
    OptimizationStepError,
    ProductTitleNotFound,
    StorageError,
)
from shared.extraction_utils import extract_listing, get_placeholder_listing
from shared.optimization_utils import (
    RESPONSE_SCHEMA,
    SYSTEM_PROMPT,
    build_user_prompt,
    check_optimization_counts,
    parse_optimization_response,
)
from shared.schemas import OptimizedListing, ProductListing
from shared.storage import create_store

MIN_FETCH_TIMEOUT = 10
MAX_FETCH_TIMEOUT = 15


def parse_fetch_timeout(value) -> int:
    """Fetch timeout in seconds, clamped to 10-15. Unparseable values use 15."""
    try:
        seconds = int(value)
    except (TypeError, ValueError):
        return MAX_FETCH_TIMEOUT
    return max(MIN_FETCH_TIMEOUT, min(MAX_FETCH_TIMEOUT, seconds))


# Configuration
GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY') or os.environ.get('GOOGLE_API_KEY')
GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.5-flash')
# Only /tmp is writable on Cloud Functions; set DATABASE_URL for durable storage
DATABASE_URL = os.environ.get('DATABASE_URL', 'sqlite:////tmp/optimizations.db')
AMAZON_BASE_URL = os.environ.get('AMAZON_BASE_URL', 'https://www.amazon.com')
FETCH_TIMEOUT = parse_fetch_timeout(os.environ.get('FETCH_TIMEOUT', MAX_FETCH_TIMEOUT))
MAX_REDIRECTS = 5
USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'

BROWSER_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Accept-Encoding': 'gzip, deflate',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
    'Sec-Fetch-Dest': 'document',
    'Sec-Fetch-Mode': 'navigate',
    'Sec-Fetch-Site': 'none',
    'Cache-Control': 'max-age=0',
}

# Amazon answers bot detection with these
BLOCKED_STATUS_CODES = (403, 405, 503)

CORS_HEADERS = {'Access-Control-Allow-Origin': '*'}

# Lazily built on first request
_optimizer = None
_optimizer_lock = threading.Lock()


# ============================================================================
# Scraping (never fails: degrades to placeholder data)
# ============================================================================

def fetch_product_page(asin: str) -> tuple:
    """Fetch an Amazon product page. Returns (html, error)."""
    url = build_product_url(asin, AMAZON_BASE_URL)

    try:
        with requests.Session() as session:
            session.max_redirects = MAX_REDIRECTS
            response = session.get(
                url,
                headers=BROWSER_HEADERS,
                timeout=FETCH_TIMEOUT,
                allow_redirects=True
            )
            response.raise_for_status()

            return response.text, None

    except requests.exceptions.Timeout:
        return None, 'Request timed out'
    except requests.exceptions.TooManyRedirects:
        return None, f'More than {MAX_REDIRECTS} redirects'
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code
        if status in BLOCKED_STATUS_CODES:
            return None, f'Amazon blocked request ({status})'
        if status == 404:
            # TODO: a 404 is a genuinely unknown ASIN; consider surfacing it instead of degrading
            return None, f'ASIN not found ({status})'
        return None, f'HTTP error: {status}'
    except requests.exceptions.RequestException as e:
        return None, f'Request failed: {str(e)}'


def scrape_product(asin: str) -> ProductListing:
    """
    Scrape the listing for an ASIN.

    Any fetch failure (blocked, 404, timeout, connection error) or a page
    without a product title yields the placeholder listing instead, so the
    pipeline stays usable when Amazon refuses to serve us.
    """
    html, fetch_error = fetch_product_page(asin)

    if fetch_error:
        print(f"Amazon scraping failed ({fetch_error}), using placeholder data for ASIN: {asin}")
        return get_placeholder_listing(asin)

    try:
        return extract_listing(html, asin)
    except ProductTitleNotFound as e:
        print(f"{e} on product page, using placeholder data for ASIN: {asin}")
    except Exception as e:
        print(f"Unexpected scraping error ({e}), using placeholder data for ASIN: {asin}")

    return get_placeholder_listing(asin)


# ============================================================================
# Gemini optimization
# ============================================================================

def get_gemini_model():
    """Gemini model configured with the optimization instructions."""
    genai.configure(api_key=GEMINI_API_KEY)
    return genai.GenerativeModel(GEMINI_MODEL, system_instruction=SYSTEM_PROMPT)


def _response_text(response):
    """Text of a Gemini response, or None when it has no text part."""
    try:
        return response.text
    except (ValueError, AttributeError, IndexError):
        return None


def generate_optimization(listing: ProductListing, model=None) -> OptimizedListing:
    """
    Ask Gemini for an optimized version of a listing.

    Raises:
        AIOptimizationError: Gemini call failed, or returned an empty or
            malformed response
    """
    try:
        if model is None:
            model = get_gemini_model()

        response = model.generate_content(
            build_user_prompt(listing),
            generation_config=genai.GenerationConfig(
                response_mime_type='application/json',
                response_schema=RESPONSE_SCHEMA,
            ),
        )
    except Exception as e:
        raise AIOptimizationError(f'Failed to optimize listing with AI: {e}') from e

    optimized = parse_optimization_response(_response_text(response))

    for warning in check_optimization_counts(optimized):
        print(f"Gemini response warning for ASIN {listing.asin}: {warning}")

    return optimized


# ============================================================================
# Orchestration
# ============================================================================

class ListingOptimizer:
    """Runs validate -> scrape -> optimize -> store for one ASIN."""

    def __init__(self, store, scraper=None, generator=None):
        self.store = store
        self.scraper = scraper or scrape_product
        self.generator = generator or generate_optimization

    def optimize(self, asin) -> dict:
        """
        Run the full pipeline for one ASIN and return the stored record.

        Raises:
            AsinValidationError: Malformed ASIN, before any I/O
            FetchError: Unexpected failure inside the scraper
            AIOptimizationError: Gemini failed; nothing was stored
            StorageError: The record could not be written
        """
        validation = validate_asin(asin)
        if not validation['valid']:
            raise AsinValidationError(validation['errors'])

        try:
            listing = self.scraper(asin)
        except Exception as e:
            raise FetchError(str(e) or 'Failed to fetch product data from Amazon') from e

        try:
            optimized = self.generator(listing)
        except AIOptimizationError as e:
            print(f"Gemini optimization error for ASIN {asin}: {e}")
            raise
        except Exception as e:
            print(f"Gemini optimization error for ASIN {asin}: {e}")
            raise AIOptimizationError(f'Failed to optimize listing with AI: {e}') from e

        try:
            return self.store.create_optimization({
                'asin': asin,
                'original_title': listing.title,
                'original_bullets': listing.bullets,
                'original_description': listing.description,
                'optimized_title': optimized.optimized_title,
                'optimized_bullets': optimized.optimized_bullets,
                'optimized_description': optimized.optimized_description,
                'suggested_keywords': optimized.suggested_keywords,
            })
        except Exception as e:
            print(f"Storage error for ASIN {asin}: {e}")
            raise StorageError(f'Failed to save optimization: {e}') from e

    def history(self, asin=None) -> list:
        """Stored optimizations, newest first (optionally for one ASIN)."""
        if asin is None:
            return self.store.get_all_optimizations()
        return self.store.get_optimizations_by_asin(asin)


def get_optimizer() -> ListingOptimizer:
    """Process-wide optimizer built from configuration."""
    global _optimizer
    if _optimizer is None:
        # Threaded workers may race on the first request
        with _optimizer_lock:
            if _optimizer is None:
                _optimizer = ListingOptimizer(create_store(DATABASE_URL))
    return _optimizer


# ============================================================================
# HTTP handlers
# ============================================================================

def _json_response(body, status: int = 200) -> tuple:
    headers = dict(CORS_HEADERS)
    headers['Content-Type'] = 'application/json'
    return (json.dumps(body), status, headers)


def handle_optimize(request, optimizer: ListingOptimizer) -> tuple:
    request_json = request.get_json(silent=True)
    asin = request_json.get('asin') if isinstance(request_json, dict) else None

    try:
        record = optimizer.optimize(asin)
    except OptimizationStepError as e:
        return _json_response(e.to_dict(), e.status_code)

    return _json_response(record)


def handle_history(optimizer: ListingOptimizer, asin=None) -> tuple:
    try:
        if asin is None:
            records = optimizer.history()
        else:
            records = optimizer.history(normalize_asin(asin))
    except Exception as e:
        print(f"History fetch error: {e}")
        message = 'Failed to fetch optimization history' if asin is None else 'Failed to fetch ASIN history'
        return _json_response({'stage': 'storage', 'message': message}, 500)

    return _json_response(records)


def handle_request(request, optimizer: ListingOptimizer) -> tuple:
    """Route a request to the matching handler."""
    # Handle CORS
    if request.method == 'OPTIONS':
        headers = {
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Methods': 'GET, POST',
            'Access-Control-Allow-Headers': 'Content-Type',
            'Access-Control-Max-Age': '3600'
        }
        return ('', 204, headers)

    path = (request.path or '/').rstrip('/')

    try:
        if path == '/api/optimize':
            if request.method != 'POST':
                return _json_response({'message': 'Method not allowed'}, 405)
            return handle_optimize(request, optimizer)

        if path == '/api/history':
            if request.method != 'GET':
                return _json_response({'message': 'Method not allowed'}, 405)
            return handle_history(optimizer)

        if path.startswith('/api/history/'):
            if request.method != 'GET':
                return _json_response({'message': 'Method not allowed'}, 405)
            return handle_history(optimizer, path[len('/api/history/'):])

        return _json_response({'message': 'Not found'}, 404)

    except Exception as e:
        print(f"Optimization error: {e}")
        return _json_response({
            'stage': 'processing',
            'message': str(e) or 'An unexpected error occurred'
        }, 500)


@functions_framework.http
def optimize_listing(request):
    """
    Main Cloud Function entry point.

    Expected JSON input for POST /api/optimize:
    {
        "asin": "B07H65KP63"
    }
    """
    try:
        optimizer = get_optimizer()
    except Exception as e:
        print(f"Storage initialization error: {e}")
        return _json_response({
            'stage': 'storage',
            'message': 'Failed to connect to optimization storage'
        }, 500)

    return handle_request(request, optimizer)
