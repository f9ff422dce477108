#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Excel Reader MCP (Model Context Protocol for Excel)
-------------------------------------------------------
Biblioteca para leer y explorar archivos Excel:
- Lectura de hojas o rangos como filas de texto
- Cálculo del rango usado de cada hoja
- Metadatos del workbook (hojas y rangos)

Author: MCP Team
Version: 1.0
"""

import datetime
import logging
from typing import List, Dict, Optional, Tuple, Any

from excel_errors import RangeError
from excel_range import ExcelRange
from workbook_manager_mcp import list_sheets

logger = logging.getLogger("excel_tools.reader")


def cell_text(value: Any) -> str:
    """
    Convierte el valor de una celda en el texto que se devuelve al cliente.

    None se convierte en cadena vacía, los booleanos en TRUE/FALSE y los
    números decimales enteros pierden la parte decimal (3.0 -> "3").
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime.datetime):
        return value.isoformat(sep=" ")
    return str(value)

def _trim_rows(rows: List[List[str]]) -> List[List[str]]:
    # Quitar celdas vacías al final de cada fila y filas vacías al final
    trimmed = []
    for row in rows:
        end = len(row)
        while end and row[end - 1] == "":
            end -= 1
        trimmed.append(row[:end])

    while trimmed and not trimmed[-1]:
        trimmed.pop()
    return trimmed

def read_sheet_rows(ws, range_str: Optional[str] = None) -> List[List[str]]:
    """
    Lee los valores de una hoja como filas de texto.

    Args:
        ws: Objeto worksheet de openpyxl
        range_str: Rango en formato A1:B5, o None para toda la hoja

    Returns:
        Lista de filas. Las celdas vacías al final de cada fila y las filas
        vacías al final se omiten; las filas vacías intermedias se devuelven
        como listas vacías.

    Raises:
        RangeError: Si el rango es inválido
    """
    if range_str:
        try:
            min_row, min_col, max_row, max_col = ExcelRange.parse_range(range_str)
        except ValueError as e:
            raise RangeError(f"invalid range '{range_str}': {e}")
    else:
        min_row, min_col = 1, 1
        max_row, max_col = ws.max_row, ws.max_column

    rows = [
        [cell_text(value) for value in row]
        for row in ws.iter_rows(min_row=min_row, max_row=max_row,
                                min_col=min_col, max_col=max_col, values_only=True)
    ]
    return _trim_rows(rows)

def used_range(ws) -> Optional[Tuple[str, str]]:
    """
    Devuelve el rango usado de una hoja como (celda_inicio, celda_fin).

    El rango empieza siempre en A1 y llega hasta la columna de la fila más
    ancha y la última fila con datos. Devuelve None si la hoja está vacía.
    """
    rows = read_sheet_rows(ws)
    if not rows:
        return None

    max_col = max(len(row) for row in rows)
    return ExcelRange.cell_to_a1(1, 1), ExcelRange.cell_to_a1(len(rows), max_col)

def get_workbook_metadata(wb, include_ranges: bool = False) -> Dict[str, Any]:
    """
    Obtiene los metadatos de un workbook.

    Returns:
        Diccionario con 'sheets', 'ranges' (solo si include_ranges y alguna
        hoja tiene datos) y 'num_sheets'.
    """
    sheets = list_sheets(wb)
    metadata: Dict[str, Any] = {"sheets": sheets}

    if include_ranges:
        ranges = {}
        for sheet_name in sheets:
            bounds = used_range(wb[sheet_name])
            if bounds:
                ranges[sheet_name] = [list(bounds)]
        if ranges:
            metadata["ranges"] = ranges

    metadata["num_sheets"] = len(sheets)
    return metadata
