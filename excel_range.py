#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Excel Range
-------------------------------------------------------
Clase auxiliar para convertir referencias de celda y rangos en notación A1.

Author: MCP Team
Version: 1.0
"""

from typing import Tuple

from openpyxl.utils import get_column_letter
from openpyxl.utils.cell import coordinate_from_string, column_index_from_string
from openpyxl.utils.exceptions import CellCoordinatesException

# Límites de una hoja .xlsx
MAX_ROW = 1048576
MAX_COLUMN = 16384


class ExcelRange:
    """
    Clase para manipular y convertir rangos de Excel.

    Convierte entre notación de Excel (A1:B5) y coordenadas (fila, columna)
    en base 1, tal y como las usa openpyxl.
    """

    @staticmethod
    def parse_cell_ref(cell_ref: str) -> Tuple[int, int]:
        """
        Convierte una referencia de celda en estilo A1 a coordenadas (fila, columna) 1-based.

        Args:
            cell_ref: Referencia de celda en formato Excel (ej: 'A1', '$B$5')

        Returns:
            Tupla (fila, columna) con índices base 1

        Raises:
            ValueError: Si la referencia de celda no es válida
        """
        if not cell_ref or not isinstance(cell_ref, str):
            raise ValueError(f"invalid cell reference: {cell_ref!r}")

        try:
            col_str, row = coordinate_from_string(cell_ref.replace("$", "").upper())
            col = column_index_from_string(col_str)
        except CellCoordinatesException as e:
            raise ValueError(str(e))

        if not 1 <= row <= MAX_ROW or not 1 <= col <= MAX_COLUMN:
            raise ValueError(f"cell reference out of bounds: {cell_ref}")
        return row, col

    @staticmethod
    def parse_range(range_str: str) -> Tuple[int, int, int, int]:
        """
        Convierte un rango A1:B5 a (fila_inicio, col_inicio, fila_fin, col_fin) 1-based.

        El rango se normaliza: las esquinas pueden venir en cualquier orden.
        Una sola celda es un rango de 1x1.
        """
        if not range_str or not isinstance(range_str, str):
            raise ValueError(f"invalid range: {range_str!r}")

        # Ignorar la referencia a hoja ('Hoja1'!A1:B2)
        if "!" in range_str:
            range_str = range_str.rsplit("!", 1)[1]

        if ":" in range_str:
            start_cell, end_cell = range_str.split(":", 1)
        else:
            start_cell = end_cell = range_str

        row1, col1 = ExcelRange.parse_cell_ref(start_cell)
        row2, col2 = ExcelRange.parse_cell_ref(end_cell)
        return min(row1, row2), min(col1, col2), max(row1, row2), max(col1, col2)

    @staticmethod
    def cell_to_a1(row: int, col: int) -> str:
        """Convierte coordenadas (fila, columna) 1-based a referencia A1."""
        if row < 1 or col < 1:
            raise ValueError(f"invalid coordinates: row={row}, column={col}")
        return f"{get_column_letter(col)}{row}"

    @staticmethod
    def range_to_a1(start_row: int, start_col: int, end_row: int, end_col: int) -> str:
        """Convierte coordenadas de rango 1-based a rango A1:B5."""
        start_cell = ExcelRange.cell_to_a1(start_row, start_col)
        end_cell = ExcelRange.cell_to_a1(end_row, end_col)

        if start_cell == end_cell:
            return start_cell
        return f"{start_cell}:{end_cell}"
