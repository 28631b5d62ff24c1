"""Custom exceptions for webbook."""


class WebbookError(Exception):
    """Base exception for webbook operations."""


class FetchError(WebbookError):
    """Error while retrieving a page or an image."""


class PolicyError(WebbookError):
    """Scraping options that cannot be combined."""


class RenderError(WebbookError):
    """Error while writing an output artifact."""


class ConversionError(RenderError):
    """Error during conversion to a derived format."""
