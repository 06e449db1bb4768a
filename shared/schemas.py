"""Listing models passed between the scrape, AI and storage steps."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field

MAX_BULLETS = 5
MAX_DESCRIPTION_LENGTH = 2000
ELLIPSIS = '...'


class ProductListing(BaseModel):
    """Original listing content, scraped or placeholder."""

    asin: str = Field(min_length=10, max_length=10)
    title: str = Field(min_length=1)
    bullets: List[str] = Field(default_factory=list, max_length=MAX_BULLETS)
    description: str = Field(max_length=MAX_DESCRIPTION_LENGTH + len(ELLIPSIS))


class OptimizedListing(BaseModel):
    """Gemini output. Field aliases match the JSON keys the model is asked for."""

    model_config = ConfigDict(extra='ignore')

    optimized_title: str = Field(alias='optimizedTitle')
    optimized_bullets: List[str] = Field(alias='optimizedBullets')
    optimized_description: str = Field(alias='optimizedDescription')
    suggested_keywords: List[str] = Field(alias='suggestedKeywords')
