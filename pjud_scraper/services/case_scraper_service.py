"""Case scraping service for the PJUD virtual judicial office."""

from typing import Callable, Optional

from pjud_scraper.lib.config import Config
from pjud_scraper.lib.errors import PartialExtractionFailure
from pjud_scraper.lib.errors import ScrapeError
from pjud_scraper.lib.errors import SessionLaunchFailure
from pjud_scraper.lib.log_sink import LogCallback
from pjud_scraper.lib.log_sink import LogSink
from pjud_scraper.lib.proxy import ProxyProvider
from pjud_scraper.lib.proxy import provider_from_config
from pjud_scraper.models.case_query import CaseQuery
from pjud_scraper.models.scrape_result import ScrapeResult
from pjud_scraper.services.browser_session import BrowserSession
from pjud_scraper.services.extractor import Extractor
from pjud_scraper.services.navigator import Navigator
from pjud_scraper.services.portal_layout import PortalLayout
from pjud_scraper.services.portal_layout import layout_for


SessionFactory = Callable[[Optional[str]], object]


class CaseScraperService:
    """Looks up one case per `scrape` call.

    Each call owns a fresh browser session that is closed before the call
    returns, whichever way it ends. Instances hold no per-scrape state, so one
    service may be used from several threads.
    """

    def __init__(
        self,
        headless: Optional[bool] = None,
        layout: Optional[PortalLayout] = None,
        proxy_provider: Optional[ProxyProvider] = None,
        session_factory: Optional[SessionFactory] = None,
        keep_count: Optional[int] = None,
        entry_url: Optional[str] = None,
    ):
        """Initialize the case scraper service.

        Args:
            headless: Whether to run browser in headless mode (default: config)
            layout: Portal selectors and history row shape (default: config)
            proxy_provider: Source of an outbound proxy per session (default: config)
            session_factory: Builds an unopened session from a proxy URL (default: Chrome)
            keep_count: Number of most recent history entries kept (default: config)
            entry_url: Portal entry page (default: config)
        """
        self.headless = headless
        self.layout = layout or layout_for(Config.get_history_layout())
        self.proxy_provider = proxy_provider or provider_from_config()
        self.session_factory = session_factory or self._default_session_factory
        self.keep_count = keep_count or Config.get_history_keep_count()
        self.entry_url = entry_url or Config.get_entry_url()

    def _default_session_factory(self, proxy: Optional[str]) -> BrowserSession:
        return BrowserSession.from_config(proxy=proxy, headless=self.headless)

    def _launch_session(self, sink: LogSink):
        proxy = self.proxy_provider.next_proxy()
        if proxy:
            sink.emit(f"Using outbound proxy {proxy}")
        sink.emit("Launching browser...")
        try:
            session = self.session_factory(proxy)
            session.open()
        except SessionLaunchFailure as exc:
            sink.error(f"Scraping failed at step '{exc.step}': {exc.message}")
            raise
        except Exception as exc:
            sink.error(f"Scraping failed at step 'launch browser': {exc}")
            raise SessionLaunchFailure("launch browser", str(exc) or type(exc).__name__, exc) from exc
        return session

    def _extract_section(self, sink: LogSink, read: Callable[[], list]) -> list:
        try:
            return read()
        except PartialExtractionFailure as exc:
            sink.error(f"Extraction failed at step '{exc.step}': {exc.message}. Continuing with an empty section.")
            return []

    def scrape(self, query: CaseQuery, on_log: Optional[LogCallback] = None) -> ScrapeResult:
        """Search the portal for `query` and read its recent history and pending writings.

        Args:
            query: Case to look up
            on_log: Receives each progress line as soon as it happens

        Returns:
            ScrapeResult: empty when the search matched no case

        Raises:
            NavigationTimeout, UnexpectedPageLayout, SessionLaunchFailure, QueryValueError
        """
        sink = LogSink(on_log, max_lines=Config.get_max_log_lines())
        sink.emit(f"Starting scrape of case {query.label} ({query.tribunal})")
        session = self._launch_session(sink)
        try:
            navigator = Navigator(session, self.layout, sink, self.entry_url)
            if not navigator.run(query):
                sink.emit("No results found; returning an empty result.")
                return ScrapeResult.empty()

            extractor = Extractor(navigator, keep_count=self.keep_count)
            history = self._extract_section(sink, extractor.extract_history)
            writings = self._extract_section(sink, extractor.extract_unresolved_writings)
            sink.emit(
                f"Scrape completed: {len(history)} history entries, {len(writings)} unresolved writings."
            )
            return ScrapeResult(history=history, unresolved_writings=writings)
        except ScrapeError as exc:
            sink.error(f"Scraping failed at step '{exc.step}': {exc.message}")
            session.save_diagnostics(query.label)
            raise
        except Exception as exc:
            sink.error(f"Scraping failed: {type(exc).__name__}: {exc}")
            raise
        finally:
            session.close()
            sink.emit("Browser closed.")


def scrape(query: CaseQuery, on_log: Optional[LogCallback] = None, **service_kwargs) -> ScrapeResult:
    """Scrape one case with a throwaway `CaseScraperService`."""
    return CaseScraperService(**service_kwargs).scrape(query, on_log)
