"""
Error taxonomy for the listing optimization pipeline.

Every error that can abort a run carries the pipeline stage that produced it,
so the HTTP layer can render a stage-specific message:

    validation       -> 400 (caller must fix the ASIN)
    fetch            -> 400 (unexpected failure in the scrape wrapper)
    ai_optimization  -> 500 (empty or malformed Gemini response, resubmit)
    storage          -> 500 (nothing was written)

Scrape failures (blocked, 404, timeout, missing title) are NOT errors here:
they are absorbed into placeholder data and only logged.
"""

from typing import List, Optional


class OptimizationStepError(Exception):
    """Base class for errors that abort an optimization run."""

    stage = 'processing'
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'stage': self.stage, 'message': self.message}


class AsinValidationError(OptimizationStepError):
    stage = 'validation'
    status_code = 400

    def __init__(self, errors: List[str], message: str = 'Invalid ASIN format'):
        super().__init__(message)
        self.errors = list(errors)

    def to_dict(self) -> dict:
        result = super().to_dict()
        result['errors'] = self.errors
        return result


class FetchError(OptimizationStepError):
    stage = 'fetch'
    status_code = 400


class AIOptimizationError(OptimizationStepError):
    stage = 'ai_optimization'
    status_code = 500


class StorageError(OptimizationStepError):
    stage = 'storage'
    status_code = 500


class ProductTitleNotFound(Exception):
    """Raised by the extraction policy when the page has no product title.

    The page loaded but was not a real product page (captcha, interstitial,
    search results). The scrape wrapper treats this as a scrape failure.
    """

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or 'Product title not found')
