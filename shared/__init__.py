"""Shared utilities for the Amazon Listing Optimizer."""

from .asin_utils import (
    ASIN_LENGTH,
    build_product_url,
    validate_asin,
    normalize_asin,
)

from .errors import (
    OptimizationStepError,
    AsinValidationError,
    FetchError,
    AIOptimizationError,
    StorageError,
    ProductTitleNotFound,
)

from .extraction_utils import (
    DEFAULT_BULLETS,
    PLACEHOLDER_BULLETS,
    PLACEHOLDER_DESCRIPTION,
    extract_listing,
    get_placeholder_listing,
    normalize_description,
)

from .optimization_utils import (
    SYSTEM_PROMPT,
    RESPONSE_SCHEMA,
    build_user_prompt,
    parse_optimization_response,
    check_optimization_counts,
)

from .schemas import ProductListing, OptimizedListing

from .storage import Optimization, OptimizationStore, create_store

__all__ = [
    # ASIN utilities
    'ASIN_LENGTH',
    'build_product_url',
    'validate_asin',
    'normalize_asin',
    # Errors
    'OptimizationStepError',
    'AsinValidationError',
    'FetchError',
    'AIOptimizationError',
    'StorageError',
    'ProductTitleNotFound',
    # Extraction
    'DEFAULT_BULLETS',
    'PLACEHOLDER_BULLETS',
    'PLACEHOLDER_DESCRIPTION',
    'extract_listing',
    'get_placeholder_listing',
    'normalize_description',
    # Gemini prompt/response
    'SYSTEM_PROMPT',
    'RESPONSE_SCHEMA',
    'build_user_prompt',
    'parse_optimization_response',
    'check_optimization_counts',
    # Models
    'ProductListing',
    'OptimizedListing',
    # Storage
    'Optimization',
    'OptimizationStore',
    'create_store',
]
