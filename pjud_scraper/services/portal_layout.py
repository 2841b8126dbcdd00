"""Selectors and table shapes of the PJUD portal.

All DOM knowledge lives here so a portal redesign only touches this module.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class PortalLayout:
    name: str

    # search form
    search_mode_select: str = "select#id_tipo_busqueda"
    search_mode_value: str = "1"
    competencia_select: str = "select#id_competencia"
    corte_select: str = "select#id_corte"
    tribunal_select: str = "select#id_tribunal"
    libro_select: str = "select#id_libro"
    rol_input: str = "input#rol_numero"
    ano_input: str = "input#rol_anio"
    search_button: str = 'input[name="Buscar"]'
    results_container: str = "#resultados"

    # result list and case detail
    view_case_control: str = 'img[name="boton_consulta_causa"]'
    detail_container: str = "#tab_detalle_causa"
    history_tab: str = "#tab_detalle_causa > ul > li:nth-child(2) > a"
    history_table: str = "table#tabla_historial"
    history_rows: str = "table#tabla_historial > tbody > tr"
    writings_tab: str = "#tab_detalle_causa > ul > li:nth-child(3) > a"
    writings_container: str = "#contenedor_escritos_resolver"
    writings_block: str = "#contenedor_escritos_resolver > div > p"
    writings_cells: str = "#contenedor_escritos_resolver table > tbody > tr > td"

    # history row shape
    cell_count: int = 9
    folio_index: int = 0
    stage_index: int = 3
    step_index: int = 4
    description_index: int = 5
    date_index: int = 6
    page_index: int = 7
    document_index: int = 8


# Currently deployed: folio, doc, anexo, etapa, tramite, desc. tramite, fecha, foja, pdf
NINE_CELL_LAYOUT = PortalLayout(name="9")

# Older portal release with a geo-reference column before the document link
TEN_CELL_LAYOUT = replace(NINE_CELL_LAYOUT, name="10", cell_count=10, document_index=9)

_LAYOUTS = {layout.name: layout for layout in (NINE_CELL_LAYOUT, TEN_CELL_LAYOUT)}


def layout_for(name: str) -> PortalLayout:
    try:
        return _LAYOUTS[str(name).strip()]
    except KeyError:
        raise ValueError(f"Unknown portal layout: {name!r} (expected one of {sorted(_LAYOUTS)})") from None
