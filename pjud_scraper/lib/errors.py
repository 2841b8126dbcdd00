"""Failure kinds raised by the scraper.

Scrape-level failures abort the navigation sequence and reach the caller as a
single exception carrying the failed step and its root cause. An empty search
is not a failure and has no exception type.
"""

from typing import Optional


class ScrapeError(Exception):
    """Base class for every failure surfaced by the scraper."""

    def __init__(self, step: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.step = step
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return f"{self.step}: {self.message}"


class NavigationTimeout(ScrapeError):
    """A page transition or element did not appear within its timeout."""


class UnexpectedPageLayout(ScrapeError):
    """Controls or tables were not found in the expected shape."""


class SessionLaunchFailure(ScrapeError):
    """The browser could not be started."""


class QueryValueError(ScrapeError, ValueError):
    """A query value is not among the options the portal offers."""


class PartialExtractionFailure(ScrapeError):
    """One data section could not be read. Absorbed by the scraper service."""
