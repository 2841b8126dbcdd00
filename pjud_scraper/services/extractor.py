"""Reads history entries and unresolved writings from the case detail view."""

from typing import Sequence

from pjud_scraper.lib.errors import PartialExtractionFailure
from pjud_scraper.lib.errors import UnexpectedPageLayout
from pjud_scraper.models.history_entry import HistoryEntry
from pjud_scraper.models.scrape_result import UnresolvedWriting
from pjud_scraper.services.browser_session import Cell
from pjud_scraper.services.navigator import Navigator


class Extractor:
    """Turns the rendered detail page into typed records.

    History keeps the last `keep_count` well-formed rows in table order, so
    the oldest of the kept rows comes first. Rows with the wrong number of
    cells are skipped (one log line each) before the retention slice.
    """

    def __init__(self, navigator: Navigator, keep_count: int = 3):
        if keep_count < 1:
            raise ValueError(f"keep_count must be positive, got: {keep_count}")
        self.navigator = navigator
        self.session = navigator.session
        self.layout = navigator.layout
        self.sink = navigator.sink
        self.keep_count = keep_count

    def _entry_from_cells(self, cells: Sequence[Cell]) -> HistoryEntry:
        layout = self.layout

        def text(index: int) -> str:
            return (cells[index].text or "").strip()

        return HistoryEntry(
            folio=text(layout.folio_index),
            stage=text(layout.stage_index),
            step=text(layout.step_index),
            description=text(layout.description_index),
            date=text(layout.date_index),
            page=text(layout.page_index),
            document_url=(cells[layout.document_index].link or "").strip(),
        )

    def parse_history_rows(self, rows: Sequence[Sequence[Cell]]) -> list[HistoryEntry]:
        """Apply the completeness and retention rules to raw table rows.

        Raises:
            UnexpectedPageLayout: rows with data exist but none has the expected shape
        """
        expected = self.layout.cell_count
        entries = []
        data_rows = 0
        for number, cells in enumerate(rows, start=1):
            # single-cell rows are the portal's "no records" placeholder
            if len(cells) > 1:
                data_rows += 1
            if len(cells) != expected:
                self.sink.emit(f"Skipped history row {number}: expected {expected} cells, found {len(cells)}.")
                continue
            entries.append(self._entry_from_cells(cells))

        if data_rows and not entries:
            raise UnexpectedPageLayout(
                "read history table",
                f"none of {len(rows)} rows has the {expected}-cell layout",
            )

        kept = entries[-self.keep_count:]
        if len(entries) > len(kept):
            self.sink.emit(f"Keeping the last {len(kept)} of {len(entries)} history entries.")
        for entry in kept:
            self.sink.emit(f"Extracted history entry: {entry.summary()}")
        return kept

    def extract_history(self) -> list[HistoryEntry]:
        """Read the History tab, which the navigator has already activated.

        Raises:
            UnexpectedPageLayout: scrape-level, see `parse_history_rows`
            PartialExtractionFailure: the table could not be read
        """
        self.sink.emit('Extracting data from the "Historia" tab...')
        try:
            rows = self.session.read_rows(self.layout.history_rows)
        except Exception as exc:
            raise PartialExtractionFailure("read history table", str(exc) or type(exc).__name__, exc) from exc
        self.sink.emit(f"Found {len(rows)} rows in the history table.")
        entries = self.parse_history_rows(rows)
        self.sink.emit('Extracted data from the "Historia" tab.')
        return entries

    def extract_unresolved_writings(self) -> list[UnresolvedWriting]:
        """Read the "Escritos por Resolver" tab when the case has one.

        A table of cells wins over the single paragraph block. Blank texts are
        kept: an element that exists is a writing even without content.

        Raises:
            PartialExtractionFailure: the tab or its content could not be read
        """
        self.sink.emit('Extracting data from the "Escritos por Resolver" tab...')
        try:
            if not self.navigator.activate_writings_tab():
                return []
            texts = self.session.read_texts(self.layout.writings_cells)
            if not texts:
                texts = self.session.read_texts(self.layout.writings_block)
        except Exception as exc:
            raise PartialExtractionFailure(
                "read unresolved writings", str(exc) or type(exc).__name__, exc
            ) from exc

        writings = [UnresolvedWriting(content=(t or "").strip()) for t in texts]
        for writing in writings:
            self.sink.emit(f"Extracted unresolved writing: {writing.content}")
        self.sink.emit('Extracted data from the "Escritos por Resolver" tab.')
        return writings
