import pytest

from pjud_scraper.lib.errors import PartialExtractionFailure, UnexpectedPageLayout
from pjud_scraper.lib.log_sink import LogSink
from pjud_scraper.services.browser_session import Cell
from pjud_scraper.services.extractor import Extractor
from pjud_scraper.services.navigator import Navigator
from pjud_scraper.services.portal_layout import NINE_CELL_LAYOUT, TEN_CELL_LAYOUT
from tests.utils.fake_session import FakeSession, make_row, never_appears


def _extractor(session, layout=NINE_CELL_LAYOUT, keep_count=3):
    sink = LogSink()
    nav = Navigator(session, layout, sink, "https://example.test")
    return Extractor(nav, keep_count=keep_count), sink


def test_keeps_last_three_rows_in_table_order():
    session = FakeSession(rows=[make_row(n) for n in range(1, 6)])
    extractor, _ = _extractor(session)

    entries = extractor.extract_history()

    assert [e.folio for e in entries] == ["3", "4", "5"]


def test_fields_are_trimmed_and_mapped():
    session = FakeSession(rows=[make_row(4)])
    extractor, _ = _extractor(session)

    (entry,) = extractor.extract_history()

    assert entry.folio == "4"
    assert entry.stage == "Etapa 4"
    assert entry.step == "Trámite 4"
    assert entry.description == "Descripción 4"
    assert entry.date == "04/03/2022"
    assert entry.page == "8"
    assert entry.document_url.endswith("dtaDoc=4")
    for value in entry.to_dict().values():
        assert value == value.strip()


def test_fewer_rows_are_not_padded():
    session = FakeSession(rows=[make_row(1), make_row(2)])
    extractor, _ = _extractor(session)
    assert [e.folio for e in extractor.extract_history()] == ["1", "2"]


def test_row_without_link_leaves_document_url_empty():
    session = FakeSession(rows=[make_row(1, link=False)])
    extractor, _ = _extractor(session)
    assert extractor.extract_history()[0].document_url == ""


def test_malformed_rows_are_skipped_with_one_line_each():
    rows = [make_row(1), make_row(2, cell_count=5), make_row(3), make_row(4, cell_count=8), make_row(5)]
    session = FakeSession(rows=rows)
    extractor, sink = _extractor(session)

    entries = extractor.extract_history()

    assert [e.folio for e in entries] == ["1", "3", "5"]
    skipped = [line for line in sink.lines if line.startswith("Skipped history row")]
    assert skipped == [
        "Skipped history row 2: expected 9 cells, found 5.",
        "Skipped history row 4: expected 9 cells, found 8.",
    ]


def test_wrong_cell_count_everywhere_is_a_layout_failure():
    session = FakeSession(rows=[make_row(n, cell_count=10) for n in range(1, 4)])
    extractor, _ = _extractor(session)
    with pytest.raises(UnexpectedPageLayout):
        extractor.extract_history()


def test_ten_cell_layout():
    session = FakeSession(layout=TEN_CELL_LAYOUT, rows=[make_row(n, cell_count=10) for n in range(1, 5)])
    extractor, _ = _extractor(session, layout=TEN_CELL_LAYOUT)

    entries = extractor.extract_history()

    assert [e.folio for e in entries] == ["2", "3", "4"]
    assert entries[-1].document_url.endswith("dtaDoc=4")


def test_placeholder_row_means_empty_history():
    session = FakeSession(rows=[[Cell(text="No se encontraron registros")]])
    extractor, sink = _extractor(session)
    assert extractor.extract_history() == []
    assert any(line.startswith("Skipped history row 1") for line in sink.lines)


def test_read_failure_is_partial():
    session = FakeSession(read_error=RuntimeError("stale element"))
    extractor, _ = _extractor(session)
    with pytest.raises(PartialExtractionFailure) as exc:
        extractor.extract_history()
    assert exc.value.step == "read history table"


def test_writings_block_is_trimmed():
    session = FakeSession(writings_block=["  Pendiente de resolución \n"])
    extractor, _ = _extractor(session)

    writings = extractor.extract_unresolved_writings()

    assert [w.content for w in writings] == ["Pendiente de resolución"]
    assert ("click", NINE_CELL_LAYOUT.writings_tab, None) in session.calls


def test_writing_cells_take_precedence_and_blank_content_is_kept():
    session = FakeSession(writings_block=["ignored"], writings_cells=[" Escrito 1 ", "   ", "Escrito 1"])
    extractor, _ = _extractor(session)

    writings = extractor.extract_unresolved_writings()

    assert [w.content for w in writings] == ["Escrito 1", "", "Escrito 1"]


def test_absent_writings_tab_yields_empty_list():
    session = FakeSession(writings_tab=False, writings_block=["never read"])
    extractor, sink = _extractor(session)

    assert extractor.extract_unresolved_writings() == []
    assert not any(call[0] == "read_texts" for call in session.calls)
    assert 'The "Escritos por Resolver" tab is not present.' in sink.lines


def test_writings_tab_timeout_is_partial():
    layout = NINE_CELL_LAYOUT
    session = FakeSession(failures={layout.writings_container: never_appears(layout.writings_container)})
    extractor, _ = _extractor(session)
    with pytest.raises(PartialExtractionFailure):
        extractor.extract_unresolved_writings()


def test_keep_count_must_be_positive():
    with pytest.raises(ValueError):
        _extractor(FakeSession(), keep_count=0)
