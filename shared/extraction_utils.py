"""
Amazon product page extraction for the Listing Optimizer.

Derives {title, bullets, description} from product page markup. Each field is
an ordered list of selector strategies; the first non-empty result wins, and
bullets/description fall back to fixed filler text so they are never empty.

The only hard failure is a missing title: the page loaded, but it was not a
real product page. Callers treat ProductTitleNotFound as a scrape failure.
"""

import re
from typing import Callable, List, Optional

from bs4 import BeautifulSoup

from .errors import ProductTitleNotFound
from .schemas import ELLIPSIS, MAX_BULLETS, MAX_DESCRIPTION_LENGTH, ProductListing

SEE_MORE_MARKER = 'See more'
MIN_LOOSE_BULLET_LENGTH = 10

# Used when neither bullet strategy finds anything (order matters)
DEFAULT_BULLETS = [
    'High-quality product with excellent features',
    'Durable construction and reliable performance',
    'Easy to use and maintain',
    'Great value for money',
    'Customer satisfaction guaranteed',
]

DESCRIPTION_FALLBACK_TEMPLATE = (
    '{title}. This product offers excellent quality and value. '
    'Perfect for customers looking for reliable performance and durability.'
)

# Placeholder listing served when Amazon cannot be scraped
PLACEHOLDER_TITLE_TEMPLATE = 'Premium Wireless Bluetooth Headphones - {asin}'

PLACEHOLDER_BULLETS = [
    'Advanced Active Noise Cancellation (ANC) technology blocks out ambient noise for immersive listening experience',
    '40-hour battery life with quick charge feature - 5 minutes of charging provides 2 hours of playback',
    'Premium sound quality with 40mm drivers delivering deep bass and crystal-clear highs',
    'Comfortable over-ear design with memory foam cushions for all-day wear',
    'Universal compatibility with Bluetooth 5.0 - works with all smartphones, tablets, and laptops',
]

PLACEHOLDER_DESCRIPTION = (
    'Experience superior audio quality with our Premium Wireless Bluetooth Headphones. '
    'Featuring advanced Active Noise Cancellation technology, these headphones create an '
    'immersive listening environment by blocking out unwanted ambient noise. The 40mm drivers '
    'deliver exceptional sound quality with deep, powerful bass and crystal-clear treble. '
    'With an impressive 40-hour battery life and quick charge capability, you can enjoy your '
    'music all day long. The comfortable over-ear design with memory foam cushions ensures '
    'maximum comfort during extended listening sessions. Perfect for music lovers, '
    'professionals, and anyone seeking high-quality wireless audio.'
)


def _select_text(soup: BeautifulSoup, selector: str) -> str:
    """Combined trimmed text of every element matching a CSS selector."""
    parts = [element.get_text() for element in soup.select(selector)]
    return ' '.join(parts).strip()


def _select_items(soup: BeautifulSoup, selector: str, min_length: int = 0) -> List[str]:
    """Trimmed text of each matching element, skipping 'See more' toggles."""
    items = []
    for element in soup.select(selector):
        text = element.get_text().strip()
        if not text or SEE_MORE_MARKER in text:
            continue
        if len(text) <= min_length:
            continue
        items.append(text)
    return items


# ============================================================================
# Strategies (markup -> optional result), tried in order
# ============================================================================

def title_from_product_title(soup: BeautifulSoup) -> Optional[str]:
    return _select_text(soup, '#productTitle') or None


def title_from_title_span(soup: BeautifulSoup) -> Optional[str]:
    return _select_text(soup, 'span#productTitle') or None


def bullets_from_feature_list(soup: BeautifulSoup) -> Optional[List[str]]:
    return _select_items(soup, '#feature-bullets ul li span.a-list-item') or None


def bullets_from_feature_items(soup: BeautifulSoup) -> Optional[List[str]]:
    # Looser selector picks up boilerplate, so short fragments are dropped
    return _select_items(
        soup, 'div#feature-bullets li', min_length=MIN_LOOSE_BULLET_LENGTH
    ) or None


def description_from_paragraphs(soup: BeautifulSoup) -> Optional[str]:
    return _select_text(soup, '#productDescription p') or None


def description_from_container(soup: BeautifulSoup) -> Optional[str]:
    return _select_text(soup, 'div#productDescription') or None


def description_from_aplus(soup: BeautifulSoup) -> Optional[str]:
    return _select_text(soup, '#aplus .aplus-v2') or None


TITLE_STRATEGIES = [title_from_product_title, title_from_title_span]
BULLET_STRATEGIES = [bullets_from_feature_list, bullets_from_feature_items]
DESCRIPTION_STRATEGIES = [
    description_from_paragraphs,
    description_from_container,
    description_from_aplus,
]


def first_match(strategies: List[Callable], soup: BeautifulSoup):
    """Return the first non-empty strategy result, or None."""
    for strategy in strategies:
        result = strategy(soup)
        if result:
            return result
    return None


# ============================================================================
# Field extraction
# ============================================================================

def extract_title(soup: BeautifulSoup) -> str:
    """Extract the product title. Raises ProductTitleNotFound if absent."""
    title = first_match(TITLE_STRATEGIES, soup)
    if not title:
        raise ProductTitleNotFound()
    return title


def extract_bullets(soup: BeautifulSoup) -> List[str]:
    """Extract up to 5 feature bullets, falling back to DEFAULT_BULLETS."""
    bullets = first_match(BULLET_STRATEGIES, soup)
    if not bullets:
        bullets = list(DEFAULT_BULLETS)
    return bullets[:MAX_BULLETS]


def normalize_description(description: str) -> str:
    """
    Collapse whitespace and cap the description length.

    Examples:
        >>> normalize_description('  Great\\n\\n  product  ')
        'Great product'
    """
    description = re.sub(r'\s+', ' ', description or '').strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        description = description[:MAX_DESCRIPTION_LENGTH] + ELLIPSIS
    return description


def extract_description(soup: BeautifulSoup, title: str) -> str:
    """Extract the product description, synthesizing one from the title if absent."""
    description = first_match(DESCRIPTION_STRATEGIES, soup)
    if not description:
        description = DESCRIPTION_FALLBACK_TEMPLATE.format(title=title)
    return normalize_description(description)


def extract_listing(html: str, asin: str) -> ProductListing:
    """
    Run the extraction policy over a product page.

    Args:
        html: Raw product page markup
        asin: ASIN the page was fetched for

    Returns:
        ProductListing with a non-empty title, 1-5 bullets and a normalized
        description

    Raises:
        ProductTitleNotFound: The page has no product title
    """
    soup = BeautifulSoup(html or '', 'html.parser')

    title = extract_title(soup)
    bullets = extract_bullets(soup)
    description = extract_description(soup, title)

    return ProductListing(asin=asin, title=title, bullets=bullets, description=description)


def get_placeholder_listing(asin: str) -> ProductListing:
    """Deterministic listing used when the live page cannot be scraped."""
    return ProductListing(
        asin=asin,
        title=PLACEHOLDER_TITLE_TEMPLATE.format(asin=asin),
        bullets=list(PLACEHOLDER_BULLETS),
        description=PLACEHOLDER_DESCRIPTION,
    )
