"""Custom exceptions for Synthcrawl."""


class SynthCrawlError(Exception):
    """Base exception for all Synthcrawl errors."""

    pass


class InvalidExtractorError(SynthCrawlError):
    """Exception raised when an extractor does not have the expected shape."""

    pass


class InvalidSiteError(SynthCrawlError):
    """Exception raised when a site descriptor fails validation."""

    pass


class InvalidKnowledgeError(SynthCrawlError):
    """Exception raised when seeded knowledge is not attribute -> strings."""

    pass


class MalformedMarkupError(SynthCrawlError):
    """Exception raised when page markup cannot be parsed."""

    pass


class SelectorError(SynthCrawlError):
    """Exception raised when the selector engine rejects an expression."""

    def __init__(self, selector: str, message: str) -> None:
        super().__init__(f"Invalid selector {selector!r}: {message}")
        self.selector = selector
