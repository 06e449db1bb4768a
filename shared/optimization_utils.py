"""
Gemini prompt and response utilities for the Listing Optimizer.

Builds the system/user prompts and the JSON response schema sent to Gemini,
and parses the response text into an OptimizedListing. Anything that is not
well-formed JSON with all four required fields is rejected.
"""

from typing import List

from pydantic import ValidationError

from .errors import AIOptimizationError
from .schemas import OptimizedListing, ProductListing

EXPECTED_BULLET_COUNT = 5
MIN_KEYWORDS = 3
MAX_KEYWORDS = 5

SYSTEM_PROMPT = """You are an expert Amazon listing optimization specialist. Your goal is to improve product listings for better visibility, conversion, and compliance with Amazon's guidelines.

When optimizing:
1. Title: Make it keyword-rich, readable, and compelling (150-200 characters max)
2. Bullet Points: Make them clear, concise, benefit-focused (5 bullets, each 150-200 characters)
3. Description: Make it persuasive, detailed, and compliant with Amazon guidelines (avoid unsubstantiated claims)
4. Keywords: Suggest 3-5 highly relevant SEO keywords not already in the title

Respond ONLY with valid JSON in this exact format:
{
  "optimizedTitle": "string",
  "optimizedBullets": ["string", "string", "string", "string", "string"],
  "optimizedDescription": "string",
  "suggestedKeywords": ["string", "string", "string"]
}"""

# Gemini structured output schema (all four fields required)
RESPONSE_SCHEMA = {
    'type': 'OBJECT',
    'properties': {
        'optimizedTitle': {'type': 'STRING'},
        'optimizedBullets': {'type': 'ARRAY', 'items': {'type': 'STRING'}},
        'optimizedDescription': {'type': 'STRING'},
        'suggestedKeywords': {'type': 'ARRAY', 'items': {'type': 'STRING'}},
    },
    'required': [
        'optimizedTitle',
        'optimizedBullets',
        'optimizedDescription',
        'suggestedKeywords',
    ],
}


def format_bullets(bullets: List[str]) -> str:
    """Number bullets one per line: '1. first'."""
    return '\n'.join(f'{i}. {bullet}' for i, bullet in enumerate(bullets, start=1))


def build_user_prompt(listing: ProductListing) -> str:
    """Embed the original listing verbatim in the user prompt."""
    return f"""Optimize this Amazon product listing:

ORIGINAL TITLE:
{listing.title}

ORIGINAL BULLET POINTS:
{format_bullets(listing.bullets)}

ORIGINAL DESCRIPTION:
{listing.description}

Provide optimized version following best practices for Amazon SEO and conversion."""


def parse_optimization_response(response_text: str) -> OptimizedListing:
    """
    Parse Gemini's JSON response into an OptimizedListing.

    Args:
        response_text: Raw text returned by Gemini

    Returns:
        OptimizedListing

    Raises:
        AIOptimizationError: Empty response, invalid JSON, or a missing or
            mistyped field
    """
    if not response_text or not response_text.strip():
        raise AIOptimizationError('Empty response from Gemini AI')

    try:
        return OptimizedListing.model_validate_json(response_text)
    except ValidationError as e:
        raise AIOptimizationError(f'Invalid response from Gemini AI: {e}') from e


def check_optimization_counts(optimized: OptimizedListing) -> List[str]:
    """
    Report advisory count mismatches (5 bullets, 3-5 keywords).

    These are warnings only; the response is still accepted.
    """
    warnings = []

    bullet_count = len(optimized.optimized_bullets)
    if bullet_count != EXPECTED_BULLET_COUNT:
        warnings.append(f'Expected {EXPECTED_BULLET_COUNT} bullets, got {bullet_count}')

    keyword_count = len(optimized.suggested_keywords)
    if not MIN_KEYWORDS <= keyword_count <= MAX_KEYWORDS:
        warnings.append(f'Expected {MIN_KEYWORDS}-{MAX_KEYWORDS} keywords, got {keyword_count}')

    return warnings
