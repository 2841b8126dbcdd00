import pytest

from pjud_scraper.lib.errors import (
    NavigationTimeout,
    QueryValueError,
    SessionLaunchFailure,
    UnexpectedPageLayout,
)
from pjud_scraper.lib.proxy import RotatingProxyProvider
from pjud_scraper.models.scrape_result import UnresolvedWriting
from pjud_scraper.services.portal_layout import NINE_CELL_LAYOUT as L
from tests.utils.fake_session import FakeSession, make_row, never_appears


def test_example_case(sample_query, five_row_session, make_service):
    lines = []
    result = make_service(five_row_session).scrape(sample_query, on_log=lines.append)

    assert [e.folio for e in result.history] == ["3", "4", "5"]
    assert result.unresolved_writings == [UnresolvedWriting(content="Pendiente de resolución")]
    assert five_row_session.close_count == 1
    assert lines[-1] == "Browser closed."
    assert "Scrape completed: 3 history entries, 1 unresolved writings." in lines


def test_no_match_returns_empty_result(sample_query, make_service):
    session = FakeSession(has_result=False, rows=[make_row(1)])
    lines = []

    result = make_service(session).scrape(sample_query, on_log=lines.append)

    assert result.history == []
    assert result.unresolved_writings == []
    assert result.is_empty
    assert session.close_count == 1
    assert "No results found; returning an empty result." in lines


def test_navigation_timeout_closes_and_reports_step(sample_query, make_service):
    session = FakeSession(failures={L.detail_container: never_appears(L.detail_container)})
    lines = []

    with pytest.raises(NavigationTimeout) as exc:
        make_service(session).scrape(sample_query, on_log=lines.append)

    assert exc.value.step == "open case detail"
    assert session.close_count == 1
    assert any("Scraping failed at step 'open case detail'" in line for line in lines)
    assert session.diagnostics == [sample_query.label]
    assert lines[-1] == "Browser closed."


def test_partial_history_failure_keeps_writings(sample_query, make_service):
    session = FakeSession(read_error=RuntimeError("node detached"), writings_block=["Escrito"])
    lines = []

    result = make_service(session).scrape(sample_query, on_log=lines.append)

    assert result.history == []
    assert [w.content for w in result.unresolved_writings] == ["Escrito"]
    assert session.close_count == 1
    assert any(line.startswith("Extraction failed at step 'read history table'") for line in lines)


def test_partial_writings_failure_keeps_history(sample_query, make_service):
    session = FakeSession(
        rows=[make_row(1)],
        failures={L.writings_container: never_appears(L.writings_container)},
    )

    result = make_service(session).scrape(sample_query)

    assert [e.folio for e in result.history] == ["1"]
    assert result.unresolved_writings == []
    assert session.close_count == 1


def test_absent_writings_tab(sample_query, make_service):
    session = FakeSession(rows=[make_row(1)], writings_tab=False)
    result = make_service(session).scrape(sample_query)
    assert result.unresolved_writings == []
    assert session.close_count == 1


def test_layout_failure_is_scrape_level(sample_query, make_service):
    session = FakeSession(rows=[make_row(n, cell_count=7) for n in range(3)])
    with pytest.raises(UnexpectedPageLayout):
        make_service(session).scrape(sample_query)
    assert session.close_count == 1


def test_unknown_option_surfaces_after_cleanup(sample_query, make_service):
    session = FakeSession(options={L.corte_select: ["C.A. de Valparaíso"]})
    with pytest.raises(QueryValueError):
        make_service(session).scrape(sample_query)
    assert session.close_count == 1


def test_session_launch_failure_has_no_session_to_close(sample_query, make_service):
    session = FakeSession(open_error=RuntimeError("chrome not found"))
    lines = []

    with pytest.raises(SessionLaunchFailure) as exc:
        make_service(session).scrape(sample_query, on_log=lines.append)

    assert "chrome not found" in str(exc.value)
    assert session.close_count == 0
    assert any("launch browser" in line for line in lines)


def test_interrupt_still_closes_session(sample_query, make_service):
    session = FakeSession(failures={L.search_button: KeyboardInterrupt()})
    with pytest.raises(KeyboardInterrupt):
        make_service(session).scrape(sample_query)
    assert session.close_count == 1


def test_unexpected_error_is_layout_failure_at_its_step(sample_query, make_service):
    session = FakeSession(failures={L.search_button: RuntimeError("boom")})
    lines = []

    with pytest.raises(UnexpectedPageLayout) as exc:
        make_service(session).scrape(sample_query, on_log=lines.append)

    assert exc.value.step == "submit search"
    assert "RuntimeError: boom" in exc.value.message
    assert isinstance(exc.value.cause, RuntimeError)
    assert session.close_count == 1
    assert "Scraping failed at step 'submit search': RuntimeError: boom" in lines


def test_proxy_is_passed_to_session_factory(sample_query):
    from pjud_scraper.services.case_scraper_service import CaseScraperService

    seen = []

    def factory(proxy):
        seen.append(proxy)
        return FakeSession(has_result=False)

    svc = CaseScraperService(
        session_factory=factory,
        proxy_provider=RotatingProxyProvider(["http://10.0.0.1:8080"]),
        layout=L,
        entry_url="https://example.test",
    )
    lines = []
    svc.scrape(sample_query, on_log=lines.append)
    assert seen == ["http://10.0.0.1:8080"]
    assert "Using outbound proxy http://10.0.0.1:8080" in lines


def test_each_scrape_gets_a_fresh_session(sample_query):
    from pjud_scraper.lib.proxy import NoProxyProvider
    from pjud_scraper.services.case_scraper_service import CaseScraperService

    sessions = []

    def factory(proxy):
        sessions.append(FakeSession(rows=[make_row(1)]))
        return sessions[-1]

    svc = CaseScraperService(session_factory=factory, proxy_provider=NoProxyProvider(), layout=L, entry_url="x")
    svc.scrape(sample_query)
    svc.scrape(sample_query)
    assert len(sessions) == 2
    assert [s.close_count for s in sessions] == [1, 1]
