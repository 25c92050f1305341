"""Unit tests for deriving selector fragments from located nodes."""

from synthcrawl.core.induction.document import SoupParser
from synthcrawl.core.induction.localizer import LocatedPage, find_nodes_in_page
from synthcrawl.core.induction.refinement import (
    candidate_fragments,
    derive_fragment,
    refine_extractor,
)


def locate(parser: SoupParser, knowledge: dict[str, set[str]], *pages: str) -> list[LocatedPage]:
    located = find_nodes_in_page(
        {f"https://shop.example/{i}": page for i, page in enumerate(pages)}, knowledge, parser
    )
    return list(located.values())


class TestCandidateFragments:
    """Test suite for candidate generation."""

    def test_root_scope_offers_every_suffix(self, parser: SoupParser, price_page: str) -> None:
        document = parser.parse(price_page)
        span = parser.select(document, "span")[0]

        candidates = candidate_fragments(span, document, parser, rooted=True)

        assert candidates["span.price"] == (1, 0)
        assert candidates["span"] == (1, 1)
        assert candidates["div.product > span.price"] == (2, 0)
        assert candidates["html > body > div.product > span.price"] == (4, 0)
        assert candidates["html > body > div > span"] == (4, 1)

    def test_container_scope_offers_full_chain_only(self, parser: SoupParser) -> None:
        document = parser.parse(
            '<div class="product"><p class="meta"><b>$9.99</b></p></div>'
        )
        scope = parser.select(document, "div.product")[0]
        price = parser.select(document, "b")[0]

        assert candidate_fragments(price, scope, parser, rooted=False) == {
            "p.meta > b": (2, 0),
            "p > b": (2, 1),
        }


class TestDeriveFragment:
    """Test suite for derive_fragment."""

    def test_single_price(self, parser: SoupParser, price_page: str) -> None:
        """Test that the class-qualified element is preferred."""
        pages = locate(parser, {"price": {"$9.99"}}, price_page)
        assert derive_fragment("price", "", pages, parser) == "span.price"

    def test_shared_class_across_pages(self, parser: SoupParser) -> None:
        """Test that a fragment must reach the located nodes on every page."""
        pages = locate(
            parser,
            {"price": {"$9.99", "$5.00"}},
            '<span class="price">$9.99</span>',
            '<span class="sale price">$5.00</span>',
        )
        assert derive_fragment("price", "", pages, parser) == "span.price"

    def test_falls_back_to_bare_tags(self, parser: SoupParser) -> None:
        """Test that differing classes fall back to tag-only steps."""
        pages = locate(
            parser,
            {"price": {"$9.99", "$5.00"}},
            '<p><em class="cost">$9.99</em></p>',
            '<p><em class="amount">$5.00</em></p>',
        )
        assert derive_fragment("price", "", pages, parser) == "em"

    def test_shortest_path_wins_over_precision(self, parser: SoupParser) -> None:
        """Test that fewer steps rank before fewer extraneous matches."""
        pages = locate(
            parser,
            {"price": {"$9.99"}},
            '<div class="a"><span>$9.99</span></div><div class="b"><span>$1.00</span></div>',
        )
        assert derive_fragment("price", "", pages, parser) == "span"

    def test_extraneous_matches_break_ties(self, parser: SoupParser) -> None:
        """Test that among equally short paths the more precise one wins."""
        pages = locate(
            parser,
            {"price": {"$9.99"}},
            '<p class="x">$9.99</p><p>$1.00</p>',
        )
        assert derive_fragment("price", "", pages, parser) == "p.x"

    def test_relative_to_container(self, parser: SoupParser, catalog_page: str) -> None:
        """Test that fragments under a container start right below it."""
        pages = locate(parser, {"title": {"Living Clojure"}}, catalog_page)
        assert derive_fragment("title", "div.product", pages, parser) == "h1"

    def test_nodes_outside_container(self, parser: SoupParser, catalog_page: str) -> None:
        """Test that nodes outside every scope give no fragment."""
        pages = locate(parser, {"title": {"Living Clojure"}}, catalog_page)
        assert derive_fragment("title", "section.missing", pages, parser) is None

    def test_no_located_nodes(self, parser: SoupParser, price_page: str) -> None:
        """Test that nothing is derived without evidence."""
        pages = locate(parser, {"price": {"$42.00"}}, price_page)
        assert derive_fragment("price", "", pages, parser) is None


class TestRefineExtractor:
    """Test suite for refine_extractor."""

    def test_fills_only_missing_fragments(self, parser: SoupParser, catalog_page: str) -> None:
        """Test that learned fragments are kept and holes are filled."""
        located = find_nodes_in_page(
            {"https://shop.example/catalog": catalog_page},
            {"price": {"$9.99"}, "title": {"Living Clojure"}},
            parser,
        )
        extractor = {"div.product": {"title": "h1.custom", "price": None, "sku": ""}}

        refined = refine_extractor(extractor, located, parser)

        assert refined == {
            "div.product": {"title": "h1.custom", "price": "span.price", "sku": ""}
        }
        assert extractor["div.product"]["price"] is None
