"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator

import pytest

from synthcrawl.config import Settings
from synthcrawl.core.induction import Site, SoupParser

PRICE_PAGE = """
<html>
  <body>
    <div class="product">
      <span class="price">$9.99</span>
    </div>
  </body>
</html>
"""

CATALOG_PAGE = """
<html>
  <body>
    <div class="product">
      <h1>Living Clojure</h1>
      <span class="price">$9.99</span>
    </div>
    <div class="product">
      <h1>Joy of Clojure</h1>
      <span class="price">$19.99</span>
    </div>
  </body>
</html>
"""


@pytest.fixture
def test_settings() -> Generator[Settings, None, None]:
    """
    Provide test configuration with overrides.

    Yields:
        Settings instance for testing
    """
    # Save original environment
    original_env = os.environ.copy()

    os.environ["SYNTHCRAWL_SIMILARITY_THRESHOLD"] = "0.6"
    os.environ["SYNTHCRAWL_MAX_ITERATIONS"] = "4"
    os.environ["SYNTHCRAWL_LOG_LEVEL"] = "debug"

    yield Settings(_env_file=None)

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def parser() -> SoupParser:
    """Default BeautifulSoup-backed parser."""
    return SoupParser()


@pytest.fixture
def price_page() -> str:
    """Single product page with one price."""
    return PRICE_PAGE


@pytest.fixture
def catalog_page() -> str:
    """Listing page with two products."""
    return CATALOG_PAGE


@pytest.fixture
def shop_site(price_page: str) -> Site:
    """Site with one product page."""
    return Site(
        url_pattern=r"^https://shop\.example/",
        pages={"https://shop.example/p/1": price_page},
    )
