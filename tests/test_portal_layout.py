import pytest

from pjud_scraper.services.portal_layout import NINE_CELL_LAYOUT, TEN_CELL_LAYOUT, layout_for


def test_layout_lookup():
    assert layout_for("9") is NINE_CELL_LAYOUT
    assert layout_for(" 10 ") is TEN_CELL_LAYOUT


def test_ten_cell_layout_moves_document_link():
    assert TEN_CELL_LAYOUT.cell_count == 10
    assert TEN_CELL_LAYOUT.document_index == 9
    assert TEN_CELL_LAYOUT.history_rows == NINE_CELL_LAYOUT.history_rows


def test_unknown_layout():
    with pytest.raises(ValueError):
        layout_for("11")
