"""Drives a browser session from the portal entry page to the case detail view."""

from contextlib import contextmanager
from typing import Iterator

from selenium.common.exceptions import TimeoutException
from selenium.common.exceptions import WebDriverException

from pjud_scraper.lib.errors import NavigationTimeout
from pjud_scraper.lib.errors import ScrapeError
from pjud_scraper.lib.errors import UnexpectedPageLayout
from pjud_scraper.lib.log_sink import LogSink
from pjud_scraper.models.case_query import CaseQuery
from pjud_scraper.services.portal_layout import PortalLayout

# Results are already rendered once the search navigation settled
RESULT_PROBE_SECONDS = 3


class Navigator:
    """Runs the portal's click/select/type sequence for one query.

    Every milestone is reported to the log sink. Failures are re-labelled with
    the milestone they happened in and propagate to the caller.
    """

    def __init__(self, session, layout: PortalLayout, sink: LogSink, entry_url: str):
        self.session = session
        self.layout = layout
        self.sink = sink
        self.entry_url = entry_url

    @contextmanager
    def _step(self, name: str) -> Iterator[None]:
        try:
            yield
        except ScrapeError as exc:
            if exc.step != name:
                exc.message = f"{exc.step}: {exc.message}"
                exc.step = name
            raise
        except TimeoutException as exc:
            raise NavigationTimeout(name, exc.msg or "timed out", exc) from exc
        except WebDriverException as exc:
            raise UnexpectedPageLayout(name, exc.msg or type(exc).__name__, exc) from exc
        except Exception as exc:
            raise UnexpectedPageLayout(name, f"{type(exc).__name__}: {exc}", exc) from exc

    def run(self, query: CaseQuery) -> bool:
        """Go from the entry page to the History tab of the matching case.

        Returns:
            bool: False when the search matched no case
        """
        self.open_portal()
        self.open_case_search()
        self.fill_form(query)
        self.submit_search()
        if not self.has_result():
            return False
        self.open_case_detail()
        self.activate_history_tab()
        return True

    def open_portal(self) -> None:
        self.sink.emit("Navigating to PJUD website...")
        with self._step("load entry page"):
            self.session.navigate(self.entry_url, self.layout.search_mode_select)
        self.sink.emit("Entered PJUD website.")

    def open_case_search(self) -> None:
        with self._step("open case search"):
            self.session.select(self.layout.search_mode_select, self.layout.search_mode_value)
        self.sink.emit('Entered "Consulta de Causas".')

    def fill_form(self, query: CaseQuery) -> None:
        layout = self.layout
        selects = [
            ("competencia", layout.competencia_select, query.competencia),
            ("corte", layout.corte_select, query.corte),
            ("tribunal", layout.tribunal_select, query.tribunal),
            ("libro/tipo", layout.libro_select, query.libro_tipo),
        ]
        for label, selector, value in selects:
            with self._step(f"set {label}"):
                self.session.select(selector, value)
            self.sink.emit(f"Set {label}: {value}")

        for label, selector, value in (("rol", layout.rol_input, query.rol), ("año", layout.ano_input, query.ano)):
            with self._step(f"set {label}"):
                self.session.type(selector, value)
            self.sink.emit(f"Set {label}: {value}")
        self.sink.emit("Filled in the form with the provided parameters.")

    def submit_search(self) -> None:
        self.sink.emit("Clicking the search button...")
        with self._step("submit search"):
            self.session.click_and_wait(self.layout.search_button, self.layout.results_container)
        self.sink.emit("Search button clicked and navigation completed.")

    def has_result(self) -> bool:
        with self._step("check search results"):
            found = self.session.exists(self.layout.view_case_control, timeout=RESULT_PROBE_SECONDS)
        if not found:
            self.sink.emit("No case matched the search.")
        return found

    def open_case_detail(self) -> None:
        self.sink.emit("Opening case detail...")
        with self._step("open case detail"):
            self.session.click_and_wait(self.layout.view_case_control, self.layout.detail_container)
        self.sink.emit("Case detail opened.")

    def activate_tab(self, tab_selector: str, pane_selector: str, label: str, required: bool) -> bool:
        """Click a detail tab and wait for its pane.

        Returns:
            bool: False when an optional tab is not rendered for this case
        """
        step = f'activate "{label}" tab'
        with self._step(step):
            if not self.session.exists(tab_selector):
                if required:
                    raise UnexpectedPageLayout(step, f"tab {tab_selector} not found")
                self.sink.emit(f'The "{label}" tab is not present.')
                return False
            self.session.click(tab_selector)
            self.session.wait_for_selector(pane_selector)
        self.sink.emit(f'Clicked on the "{label}" tab.')
        return True

    def activate_history_tab(self) -> bool:
        return self.activate_tab(self.layout.history_tab, self.layout.history_table, "Historia", required=True)

    def activate_writings_tab(self) -> bool:
        return self.activate_tab(
            self.layout.writings_tab, self.layout.writings_container, "Escritos por Resolver", required=False
        )
