"""Concurrent lookups of several cases, one browser session per case."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from pjud_scraper.lib.config import Config
from pjud_scraper.lib.log_sink import LogCallback
from pjud_scraper.lib.log_sink import LogSink
from pjud_scraper.lib.logging_config import get_logger
from pjud_scraper.models.case_query import CaseQuery
from pjud_scraper.models.scrape_result import ScrapeResult
from pjud_scraper.services.case_scraper_service import CaseScraperService

logger = get_logger()


@dataclass
class BatchOutcome:
    query: CaseQuery
    result: Optional[ScrapeResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchService:
    """Runs queries in parallel; a failing query never affects the others."""

    def __init__(
        self,
        max_workers: Optional[int] = None,
        scraper_factory: Optional[Callable[[], CaseScraperService]] = None,
    ):
        self.max_workers = max_workers or Config.get_max_workers()
        self.scraper_factory = scraper_factory or CaseScraperService

    def _run_one(self, query: CaseQuery, sink: LogSink) -> ScrapeResult:
        scraper = self.scraper_factory()
        return scraper.scrape(query, on_log=lambda line: sink.emit(f"[{query.label}] {line}"))

    def run(self, queries: Iterable[CaseQuery], on_log: Optional[LogCallback] = None) -> list[BatchOutcome]:
        """Scrape every query and return one outcome per query, in input order."""
        queries = list(queries)
        outcomes = [BatchOutcome(query=q) for q in queries]
        if not queries:
            return outcomes

        # per-case sinks already echo to the logger
        sink = LogSink(on_log, max_lines=Config.get_max_log_lines(), echo=False)
        workers = max(1, min(self.max_workers, len(queries)))
        logger.info(f"Starting batch of {len(queries)} cases with {workers} workers")

        with ThreadPoolExecutor(max_workers=workers) as executor:
            future_to_index = {
                executor.submit(self._run_one, query, sink): i for i, query in enumerate(queries)
            }
            try:
                for future in as_completed(future_to_index):
                    outcome = outcomes[future_to_index[future]]
                    try:
                        outcome.result = future.result()
                    except Exception as exc:
                        outcome.error = exc
                        logger.warning(f"Case {outcome.query.label} failed: {exc}")
            except BaseException:
                # Queued cases never launch a browser; running ones close their own
                logger.warning("Batch interrupted, cancelling cases that have not started")
                executor.shutdown(wait=True, cancel_futures=True)
                raise

        succeeded = sum(1 for o in outcomes if o.ok)
        logger.info(f"Batch finished: {succeeded}/{len(outcomes)} cases succeeded")
        return outcomes
