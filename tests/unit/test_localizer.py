"""Unit tests for node localization."""

from synthcrawl.core.induction.document import SoupParser
from synthcrawl.core.induction.localizer import (
    find_attribute_nodes,
    find_nodes_in_page,
    in_head,
    innermost,
    reach,
)
from synthcrawl.core.induction.refinement import derive_fragment
from synthcrawl.utils.exceptions import MalformedMarkupError


class TestFindAttributeNodes:
    """Test suite for find_attribute_nodes."""

    def test_enclosing_elements_match_too(self, parser: SoupParser, price_page: str) -> None:
        """Test that every element whose text resembles the value is returned."""
        document = parser.parse(price_page)
        nodes = find_attribute_nodes(parser.all_elements(document), {"$9.99"}, parser)

        assert [node.name for node in nodes] == ["html", "body", "div", "span"]
        assert [node.name for node in innermost(nodes, parser)] == ["span"]

    def test_fuzzy_match(self, parser: SoupParser) -> None:
        """Test that formatting differences still match."""
        document = parser.parse("<p><b>LIVING   clojure</b> <i>2nd</i></p><p>Other</p>")
        nodes = find_attribute_nodes(parser.all_elements(document), ["Living Clojure"], parser)

        assert [parser.text_of(node) for node in nodes] == ["LIVING clojure 2nd", "LIVING clojure"]

    def test_blank_elements_never_match(self, parser: SoupParser) -> None:
        """Test that elements without text are ignored even for blank knowledge."""
        document = parser.parse("<div><p></p><br></div>")
        assert find_attribute_nodes(parser.all_elements(document), {""}, parser) == []


class TestReach:
    """Test suite for the ancestor/descendant test."""

    def test_descendant_is_reachable(self, parser: SoupParser, price_page: str) -> None:
        document = parser.parse(price_page)
        div = parser.select(document, "div.product")[0]
        span = parser.select(document, "span.price")[0]

        assert reach(div, span, parser)
        assert reach(document, span, parser)
        assert reach(span, span, parser)
        assert not reach(span, div, parser)

    def test_identical_siblings_are_distinct(self, parser: SoupParser) -> None:
        """Test that structurally equal elements are not confused."""
        document = parser.parse("<ul><li>a</li><li>a</li></ul>")
        first, second = parser.select(document, "li")

        assert not reach(first, second, parser)
        assert innermost([first, second], parser) == [first, second]


class TestFindNodesInPage:
    """Test suite for find_nodes_in_page."""

    def test_locates_per_page_and_attribute(
        self, parser: SoupParser, price_page: str, catalog_page: str
    ) -> None:
        """Test aggregation per page and per attribute."""
        pages = {
            "https://shop.example/p/1": price_page,
            "https://shop.example/catalog": catalog_page,
            "https://shop.example/p/2": None,
        }
        knowledge = {"price": {"$9.99"}, "title": {"Joy of Clojure"}}

        located = find_nodes_in_page(pages, knowledge, parser)

        assert sorted(located) == ["https://shop.example/catalog", "https://shop.example/p/1"]

        single = located["https://shop.example/p/1"]
        assert single.nodes["title"] == []
        assert [n.name for n in innermost(single.nodes["price"], parser)] == ["span"]

        catalog = located["https://shop.example/catalog"]
        titles = innermost(catalog.nodes["title"], parser)
        assert [parser.text_of(n) for n in titles] == ["Joy of Clojure"]
        assert parser.select(catalog.document, "h1")[1] is titles[0]

    def test_missing_and_malformed_pages_are_skipped(self) -> None:
        """Test that unusable pages are absent while the others are still located."""

        class PickyParser(SoupParser):
            def parse(self, text: str):
                if text.startswith("<<"):
                    raise MalformedMarkupError("unbalanced markup")
                return super().parse(text)

        pages = {
            "https://shop.example/broken": "<<span>$9.99",
            "https://shop.example/empty": None,
            "https://shop.example/ok": '<span class="price">$9.99</span>',
        }

        located = find_nodes_in_page(pages, {"price": {"$9.99"}}, PickyParser())

        assert list(located) == ["https://shop.example/ok"]
        assert [n.name for n in located["https://shop.example/ok"].nodes["price"]] == ["span"]

    def test_head_is_never_located(self, parser: SoupParser) -> None:
        """Test that a value repeated in <title> does not block generalization."""
        page = (
            "<html><head><title>Living Clojure</title></head>"
            "<body><h1>Living Clojure</h1></body></html>"
        )
        located = find_nodes_in_page(
            {"https://shop.example/1": page}, {"title": {"Living Clojure"}}, parser
        )
        nodes = innermost(located["https://shop.example/1"].nodes["title"], parser)

        assert [n.name for n in nodes] == ["h1"]
        assert derive_fragment("title", "", located.values(), parser) == "h1"


class TestInHead:
    """Test suite for the document metadata check."""

    def test_head_and_descendants(self, parser: SoupParser) -> None:
        document = parser.parse(
            "<html><head><title>Shop</title></head><body><p>Shop</p></body></html>"
        )
        head, title, body, p = (
            parser.select(document, tag)[0] for tag in ("head", "title", "body", "p")
        )

        assert in_head(head, parser)
        assert in_head(title, parser)
        assert not in_head(body, parser)
        assert not in_head(p, parser)
