#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Excel Writer MCP (Multi-purpose Connector for Python with Excel)
-------------------------------------------------------
Biblioteca para escribir y dar formato a archivos Excel:
- Escritura de datos por filas desde una celda de anclaje
- Formateo y estilo de rangos (fuente, relleno, bordes, alineación,
  formato numérico, protección)
- Formato condicional
- Gestión de celdas combinadas

Author: MCP Team
Version: 1.0
"""

import json
import logging
import re
from typing import List, Dict, Optional, Any, Union

from openpyxl.formatting.rule import CellIsRule, ColorScaleRule, FormulaRule, Rule
from openpyxl.styles import Font, PatternFill, Border, Side, Alignment, Protection
from openpyxl.styles.differential import DifferentialStyle
from openpyxl.utils import get_column_letter

from excel_errors import ExcelMCPError, CellReferenceError, RangeError, FormattingError
from excel_number_formats import resolve_number_format, number_format_string
from excel_range import ExcelRange, MAX_ROW, MAX_COLUMN

logger = logging.getLogger("excel_tools.writer")

UNDERLINE_STYLES = frozenset(["single", "double", "singleAccounting", "doubleAccounting"])

FILL_PATTERNS = {
    "none": None,
    "solid": "solid",
    "darkGray": "darkGray",
    "mediumGray": "mediumGray",
    "lightGray": "lightGray",
    "gray125": "gray125",
    "gray0625": "gray0625",
}

BORDER_STYLES = {
    "none": None,
    "thin": "thin",
    "medium": "medium",
    "dashed": "dashed",
    "dotted": "dotted",
    "thick": "thick",
    "double": "double",
    "hair": "hair",
    "mediumDashed": "mediumDashed",
    "dashDot": "dashDot",
    "mediumDashDot": "mediumDashDot",
    "dashDotDot": "dashDotDot",
    "mediumDashDotDot": "mediumDashDotDot",
    "slantDashDot": "slantDashDot",
}

HORIZONTAL_ALIGNMENTS = frozenset([
    "left", "center", "right", "fill", "justify", "centerContinuous", "distributed"
])
VERTICAL_ALIGNMENTS = frozenset(["top", "center", "bottom", "justify", "distributed"])

CONDITIONAL_RULE_TYPES = frozenset([
    "cellIs", "expression", "colorScale", "containsText", "duplicateValues"
])

DEFAULT_FONT_NAME = "Calibri"
DEFAULT_FONT_SIZE = 11
MIN_FONT_SIZE = 1
MAX_FONT_SIZE = 409

_HEX_COLOR = re.compile(r"^(?:[0-9A-F]{6}|[0-9A-F]{8})$")


# 4. Escritura de Datos
def write_sheet_data(ws, start_cell: str, data: List[List[Any]]) -> int:
    """
    Escribe un array bidimensional de valores o fórmulas.

    Cada sublista es una fila; la fila i se escribe en start_row + i a partir
    de la columna de start_cell. Un valor None deja la celda vacía.

    Args:
        ws: Objeto worksheet de openpyxl
        start_cell (str): Celda de anclaje (e.j. "A1")
        data (List[List]): Valores o cadenas "=FÓRMULA(...)"

    Returns:
        Número de filas escritas.

    Raises:
        CellReferenceError: Si la celda es inválida o los datos salen de la hoja
    """
    if not isinstance(data, list):
        raise ExcelMCPError("data must be an array")

    try:
        start_row, start_col = ExcelRange.parse_cell_ref(start_cell)
    except ValueError as e:
        raise CellReferenceError(f"invalid start cell: {e}")

    if data and start_row + len(data) - 1 > MAX_ROW:
        raise CellReferenceError(
            f"failed to calculate cell position: {len(data)} rows from {start_cell} exceed row {MAX_ROW}")

    for row_data in data:
        if not isinstance(row_data, list):
            raise ExcelMCPError("each data element must be an array")
        if row_data and start_col + len(row_data) - 1 > MAX_COLUMN:
            raise CellReferenceError(
                f"failed to calculate cell position: {len(row_data)} columns from {start_cell} "
                f"exceed column {get_column_letter(MAX_COLUMN)}")

    for i, row_data in enumerate(data):
        for j, value in enumerate(row_data):
            ws.cell(row=start_row + i, column=start_col + j).value = value

    return len(data)


# 5. Formatos y Estilos
def _normalize_color(value: str, option: str) -> str:
    color = value.strip().lstrip("#").upper()
    if not _HEX_COLOR.match(color):
        raise FormattingError(f"invalid {option}: {value!r} (expected hex RGB such as 'FF0000')")
    return color

def _text_rotation(degrees: float) -> int:
    # Excel guarda los ángulos negativos como 90 + |ángulo|
    rotation = int(degrees)
    if not -90 <= rotation <= 90:
        raise FormattingError(f"invalid text rotation: {degrees} (expected -90 to 90)")
    return rotation if rotation >= 0 else 90 - rotation

def build_cell_style(bold: bool = False,
                     italic: bool = False,
                     underline: Optional[str] = None,
                     font_size: Optional[float] = None,
                     font_family: Optional[str] = None,
                     font_color: Optional[str] = None,
                     bg_color: Optional[str] = None,
                     fill_pattern: Optional[str] = None,
                     border_type: Optional[str] = None,
                     border_color: Optional[str] = None,
                     number_format: Optional[str] = None,
                     horizontal_align: Optional[str] = None,
                     vertical_align: Optional[str] = None,
                     wrap_text: bool = False,
                     text_rotation: Optional[float] = None,
                     protection_lock: Optional[bool] = None) -> Dict[str, Any]:
    """
    Valida las opciones de formato y construye los objetos de estilo de openpyxl.

    Returns:
        Diccionario con 'font', 'fill', 'border', 'alignment', 'number_format'
        y 'protection' listos para asignar a cada celda.

    Raises:
        FormattingError: Si alguna opción no es válida.
        InvalidFormatError: Si el formato numérico no es válido.
    """
    font_kwargs: Dict[str, Any] = {
        "name": DEFAULT_FONT_NAME,
        "size": DEFAULT_FONT_SIZE,
        "bold": bool(bold),
        "italic": bool(italic),
    }
    if underline:
        if underline not in UNDERLINE_STYLES:
            raise FormattingError(f"invalid underline style: {underline}")
        font_kwargs["underline"] = underline
    if font_size is not None:
        if not MIN_FONT_SIZE <= font_size <= MAX_FONT_SIZE:
            raise FormattingError(f"invalid font size: {font_size} (expected 1-409)")
        font_kwargs["size"] = font_size
    if font_family:
        font_kwargs["name"] = font_family
    if font_color:
        font_kwargs["color"] = _normalize_color(font_color, "font color")

    fill = PatternFill()
    if fill_pattern and fill_pattern not in FILL_PATTERNS:
        raise FormattingError(f"invalid fill pattern: {fill_pattern}")
    if bg_color or fill_pattern:
        pattern = FILL_PATTERNS[fill_pattern] if fill_pattern else "solid"
        if pattern:
            color = _normalize_color(bg_color, "background color") if bg_color else "FFFFFF"
            fill = PatternFill(fill_type=pattern, start_color=color, end_color=color)

    border = Border()
    if border_type:
        if border_type not in BORDER_STYLES:
            raise FormattingError(f"invalid border type: {border_type}")
        side_style = BORDER_STYLES[border_type]
        if side_style:
            color = _normalize_color(border_color, "border color") if border_color else None
            side = Side(style=side_style, color=color)
            border = Border(left=side, right=side, top=side, bottom=side)

    if horizontal_align and horizontal_align not in HORIZONTAL_ALIGNMENTS:
        raise FormattingError(f"invalid horizontal alignment: {horizontal_align}")
    if vertical_align and vertical_align not in VERTICAL_ALIGNMENTS:
        raise FormattingError(f"invalid vertical alignment: {vertical_align}")
    alignment = Alignment(
        horizontal=horizontal_align or None,
        vertical=vertical_align or None,
        wrap_text=bool(wrap_text),
        text_rotation=_text_rotation(text_rotation) if text_rotation is not None else 0,
    )

    fmt = "General"
    if number_format:
        code = resolve_number_format(number_format)
        fmt = number_format_string(number_format, code)
        logger.debug(f"Formato numérico '{number_format}' resuelto al código {code}")

    protection = Protection(locked=True if protection_lock is None else bool(protection_lock))

    return {
        "font": Font(**font_kwargs),
        "fill": fill,
        "border": border,
        "alignment": alignment,
        "number_format": fmt,
        "protection": protection,
    }

def parse_conditional_format(conditional_format: Union[str, Dict[str, Any], List[Dict[str, Any]]],
                             anchor_cell: str = "A1") -> List[Rule]:
    """
    Convierte una definición de formato condicional (JSON o dict) en reglas de openpyxl.

    Cada regla es un objeto con 'type' ('cellIs', 'expression', 'colorScale',
    'containsText', 'duplicateValues') y sus parámetros. 'font_color',
    'bg_color' y 'bold' definen el estilo diferencial de la regla.

    Raises:
        FormattingError: Si la definición no es válida.
    """
    definition = conditional_format
    if isinstance(definition, str):
        try:
            definition = json.loads(definition)
        except json.JSONDecodeError as e:
            raise FormattingError(f"invalid conditional format JSON: {e}")

    if isinstance(definition, dict):
        definition = [definition]
    if not isinstance(definition, list) or not all(isinstance(r, dict) for r in definition):
        raise FormattingError("conditional format must be an object or a list of objects")

    return [_build_rule(params, anchor_cell) for params in definition]

def _differential_style(params: Dict[str, Any]) -> Dict[str, Any]:
    style: Dict[str, Any] = {}
    if params.get("font_color") or params.get("bold"):
        font_kwargs: Dict[str, Any] = {"bold": bool(params.get("bold"))}
        if params.get("font_color"):
            font_kwargs["color"] = _normalize_color(params["font_color"], "font color")
        style["font"] = Font(**font_kwargs)
    if params.get("bg_color"):
        color = _normalize_color(params["bg_color"], "background color")
        style["fill"] = PatternFill(fill_type="solid", start_color=color, end_color=color)
    return style

def _build_rule(params: Dict[str, Any], anchor_cell: str) -> Rule:
    rule_type = params.get("type")
    if rule_type not in CONDITIONAL_RULE_TYPES:
        raise FormattingError(f"unsupported conditional format type: {rule_type!r}")

    stop = bool(params.get("stop_if_true", False))
    style = _differential_style(params)

    if rule_type == "cellIs":
        formula = params.get("formula")
        if formula is None and "value" in params:
            value = params["value"]
            # Los textos se comparan entre comillas
            formula = f'"{value}"' if isinstance(value, str) else str(value)
        if formula is None:
            raise FormattingError("cellIs rules require 'formula' or 'value'")
        formulas = formula if isinstance(formula, list) else [formula]
        return CellIsRule(operator=params.get("operator", "equal"),
                          formula=[str(f) for f in formulas], stopIfTrue=stop, **style)

    if rule_type == "expression":
        formula = params.get("formula")
        if not formula:
            raise FormattingError("expression rules require 'formula'")
        return FormulaRule(formula=[str(formula).lstrip("=")], stopIfTrue=stop, **style)

    if rule_type == "containsText":
        text = params.get("text")
        if not text:
            raise FormattingError("containsText rules require 'text'")
        # Las fórmulas condicionales son relativas a la celda superior izquierda
        anchor = params.get("anchor_cell") or anchor_cell
        escaped = str(text).replace('"', '""')
        formula = f'NOT(ISERROR(SEARCH("{escaped}",{anchor})))'
        return FormulaRule(formula=[formula], stopIfTrue=stop, **style)

    if rule_type == "duplicateValues":
        return Rule(type="duplicateValues", stopIfTrue=stop, dxf=DifferentialStyle(**style))

    min_color = _normalize_color(params.get("min_color", "F8696B"), "min color")
    max_color = _normalize_color(params.get("max_color", "63BE7B"), "max color")
    if params.get("mid_color"):
        mid_color = _normalize_color(params["mid_color"], "mid color")
        return ColorScaleRule(start_type="min", start_color=min_color,
                              mid_type="percentile", mid_value=50, mid_color=mid_color,
                              end_type="max", end_color=max_color)
    return ColorScaleRule(start_type="min", start_color=min_color,
                          end_type="max", end_color=max_color)

def format_range(ws, start_cell: str, end_cell: Optional[str] = None,
                 merge_cells: bool = False,
                 conditional_format: Optional[Union[str, Dict[str, Any], List[Dict[str, Any]]]] = None,
                 **style_options) -> str:
    """
    Aplica formato a un rango de celdas.

    El estilo construido sustituye al estilo previo de cada celda del rango.
    Todas las opciones se validan antes de modificar la hoja.

    Args:
        ws: Objeto worksheet de openpyxl
        start_cell (str): Celda superior izquierda
        end_cell (str, opcional): Celda inferior derecha; por defecto start_cell
        merge_cells (bool): Combina el rango tras aplicar el estilo
        conditional_format: Reglas de formato condicional (ver parse_conditional_format)
        **style_options: Opciones aceptadas por build_cell_style

    Returns:
        Rango formateado en notación A1.

    Raises:
        RangeError: Si el rango es inválido
        FormattingError: Si alguna opción no es válida
    """
    end_cell = end_cell or start_cell
    try:
        min_row, min_col, max_row, max_col = ExcelRange.parse_range(f"{start_cell}:{end_cell}")
    except ValueError as e:
        raise RangeError(f"invalid range {start_cell}:{end_cell}: {e}")
    cell_range = ExcelRange.range_to_a1(min_row, min_col, max_row, max_col)

    style = build_cell_style(**style_options)
    anchor_cell = ExcelRange.cell_to_a1(min_row, min_col)
    rules = parse_conditional_format(conditional_format, anchor_cell) if conditional_format else []

    for row in ws.iter_rows(min_row=min_row, max_row=max_row, min_col=min_col, max_col=max_col):
        for cell in row:
            cell.font = style["font"]
            cell.fill = style["fill"]
            cell.border = style["border"]
            cell.alignment = style["alignment"]
            cell.number_format = style["number_format"]
            cell.protection = style["protection"]

    for rule in rules:
        ws.conditional_formatting.add(cell_range, rule)

    if merge_cells and ":" in cell_range:
        ws.merge_cells(cell_range)

    return cell_range

def unmerge_cells(ws, start_cell: str, end_cell: str) -> str:
    """
    Separa celdas previamente combinadas.

    Raises:
        RangeError: Si el rango es inválido o no está combinado
    """
    try:
        min_row, min_col, max_row, max_col = ExcelRange.parse_range(f"{start_cell}:{end_cell}")
    except ValueError as e:
        raise RangeError(f"invalid range {start_cell}:{end_cell}: {e}")
    cell_range = ExcelRange.range_to_a1(min_row, min_col, max_row, max_col)

    if cell_range not in [str(r) for r in ws.merged_cells.ranges]:
        raise RangeError(f"range {cell_range} is not merged")

    ws.unmerge_cells(cell_range)
    return cell_range
