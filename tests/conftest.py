"""Pytest configuration and fixtures."""

import pytest

from pjud_scraper.lib.proxy import NoProxyProvider
from pjud_scraper.models.case_query import CaseQuery
from pjud_scraper.services.case_scraper_service import CaseScraperService
from pjud_scraper.services.portal_layout import NINE_CELL_LAYOUT
from tests.utils.fake_session import FakeSession, make_row


@pytest.fixture
def sample_query():
    """Civil case in the 5th civil court of Santiago."""
    return CaseQuery(
        competencia="Civil",
        corte="C.A. de Santiago",
        tribunal="5° Juzgado Civil de Santiago",
        libro_tipo="C",
        rol="2011",
        ano="2022",
    )


@pytest.fixture
def five_row_session():
    """Detail page with 5 history rows and one pending writing."""
    return FakeSession(
        rows=[make_row(n) for n in range(1, 6)],
        writings_block=["  Pendiente de resolución \n"],
    )


@pytest.fixture
def make_service():
    """Build a CaseScraperService wired to a given fake session."""

    def _make(session, **kwargs):
        kwargs.setdefault("layout", NINE_CELL_LAYOUT)
        kwargs.setdefault("keep_count", 3)
        kwargs.setdefault("entry_url", "https://oficinajudicialvirtual.pjud.cl/indexN.php")
        kwargs.setdefault("proxy_provider", NoProxyProvider())
        return CaseScraperService(session_factory=lambda proxy: session, **kwargs)

    return _make
