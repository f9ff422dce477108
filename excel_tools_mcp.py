#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Excel Tools MCP (Model Context Protocol for Excel)
-------------------------------------------------------
Servidor MCP que expone la manipulación de archivos Excel como herramientas:
- create_workbook, get_workbook_metadata
- create_worksheet, delete_worksheet, rename_worksheet, copy_worksheet
- write_data_to_excel, read_data_from_excel
- format_range, unmerge_cells

Cada herramienta abre el archivo, lo modifica, lo guarda y devuelve texto o
JSON. Los errores de la operación se devuelven al cliente como ToolError.

Configuración (variables de entorno):
- EXCEL_FILES_PATH: directorio base para rutas relativas
- EXCEL_MCP_TRANSPORT: stdio (por defecto), sse o streamable-http
- EXCEL_MCP_LOG_LEVEL: nivel de logging (INFO por defecto)
- EXCEL_MCP_LOG_FILE: fichero de log adicional (opcional)

Author: MCP Team
Version: 1.0
"""

import os
import sys
import json
import logging
from typing import List, Dict, Union, Optional, Any

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError

from excel_errors import ExcelMCPError, InvalidFormatError, SheetNotFoundError
from excel_reader_mcp import read_sheet_rows, get_workbook_metadata
from excel_writer_mcp import write_sheet_data, format_range, unmerge_cells
from workbook_manager_mcp import (
    create_workbook, open_workbook, save_workbook, close_workbook,
    get_sheet, add_sheet, delete_sheet, rename_sheet, copy_sheet
)

SERVER_NAME = "Excel Tools Server"
SERVER_VERSION = "1.0.0"
TRANSPORTS = ("stdio", "sse", "streamable-http")

EXCEL_FILES_PATH = os.environ.get("EXCEL_FILES_PATH") or None
LOG_LEVEL = os.environ.get("EXCEL_MCP_LOG_LEVEL", "INFO").upper()
LOG_FILE = os.environ.get("EXCEL_MCP_LOG_FILE") or None

# Configuración de logging (stdout queda reservado para el transporte stdio)
logger = logging.getLogger("excel_tools")
logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
handler = logging.StreamHandler(sys.stderr)
handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logger.addHandler(handler)
if LOG_FILE:
    file_handler = logging.FileHandler(LOG_FILE)
    file_handler.setFormatter(handler.formatter)
    logger.addHandler(file_handler)


def get_excel_path(filepath: str) -> str:
    """
    Obtiene la ruta completa de un archivo Excel.

    Las rutas absolutas se usan tal cual; las relativas se resuelven contra
    EXCEL_FILES_PATH si está configurado.
    """
    if not filepath:
        raise ToolError("filepath is required and must be a non-empty string")
    if os.path.isabs(filepath) or EXCEL_FILES_PATH is None:
        return filepath
    return os.path.join(EXCEL_FILES_PATH, filepath)


# Crear el servidor MCP como variable global
mcp = FastMCP(SERVER_NAME,
              instructions="Excel tools: create workbooks, read and write cell ranges, "
                           "manage worksheets and format cells in .xlsx files.",
              dependencies=["openpyxl"])


@mcp.tool(name="create_workbook", description="Create a new Excel workbook")
def create_workbook_tool(filepath: str, overwrite: bool = True) -> str:
    """Crea un nuevo fichero Excel con una hoja 'Sheet1'.

    Args:
        filepath: Path where to create the new Excel file
        overwrite: Replace the file if it already exists (default: true)
    """
    path = get_excel_path(filepath)
    logger.info(f"Creando workbook en {path}")
    try:
        wb = create_workbook(path, overwrite)
        close_workbook(wb)
    except ExcelMCPError as e:
        raise ToolError(str(e))
    return f"Excel workbook created at: {path}"

@mcp.tool(name="write_data_to_excel", description="Write data to an Excel worksheet")
def write_data_to_excel_tool(filepath: str, sheet_name: str, data: List[List[Any]],
                             start_cell: str = "A1") -> str:
    """Escribe filas de datos en una hoja; la hoja se crea si no existe.

    Args:
        filepath: Path to the Excel file
        sheet_name: Name of the worksheet to write to
        data: List of lists containing data to write (sublists are rows)
        start_cell: Cell to start writing to (default: A1)
    """
    path = get_excel_path(filepath)
    try:
        wb = open_workbook(path)
        try:
            ws = get_sheet(wb, sheet_name)
        except SheetNotFoundError:
            ws = add_sheet(wb, sheet_name)
        rows_written = write_sheet_data(ws, start_cell or "A1", data)
        save_workbook(wb, path)
        close_workbook(wb)
    except ExcelMCPError as e:
        raise ToolError(str(e))
    logger.info(f"Escritas {rows_written} filas en '{ws.title}'!{start_cell} de {path}")
    return f"Successfully wrote {rows_written} rows to Excel"

@mcp.tool(name="read_data_from_excel", description="Read data from an Excel worksheet")
def read_data_from_excel_tool(filepath: str, sheet_name: str,
                              cell_range: Optional[str] = None) -> str:
    """Lee una hoja (o un rango) y devuelve una lista de filas en JSON.

    Args:
        filepath: Path to the Excel file
        sheet_name: Name of the worksheet to read from
        cell_range: Optional range in A1 notation (e.g. 'A1:C10'); whole sheet by default
    """
    path = get_excel_path(filepath)
    try:
        wb = open_workbook(path)
        rows = read_sheet_rows(get_sheet(wb, sheet_name), cell_range)
        close_workbook(wb)
    except SheetNotFoundError as e:
        raise ToolError(f"failed to read sheet: {e}")
    except ExcelMCPError as e:
        raise ToolError(str(e))
    return json.dumps(rows, ensure_ascii=False)

@mcp.tool(name="create_worksheet", description="Create new worksheet in workbook")
def create_worksheet_tool(filepath: str, sheet_name: str) -> str:
    """Añade una hoja vacía al final del workbook.

    Args:
        filepath: Path to the Excel file
        sheet_name: Name of the worksheet to create
    """
    path = get_excel_path(filepath)
    try:
        wb = open_workbook(path)
        add_sheet(wb, sheet_name)
        save_workbook(wb, path)
        close_workbook(wb)
    except ExcelMCPError as e:
        raise ToolError(str(e))
    return f"Worksheet '{sheet_name}' created successfully"

@mcp.tool(name="delete_worksheet", description="Delete worksheet from workbook")
def delete_worksheet_tool(filepath: str, sheet_name: str) -> str:
    """Elimina una hoja; la última hoja de un workbook no se puede eliminar.

    Args:
        filepath: Path to the Excel file
        sheet_name: Name of the worksheet to delete
    """
    path = get_excel_path(filepath)
    try:
        wb = open_workbook(path)
        delete_sheet(wb, sheet_name)
        save_workbook(wb, path)
        close_workbook(wb)
    except ExcelMCPError as e:
        raise ToolError(str(e))
    return f"Worksheet '{sheet_name}' deleted successfully"

@mcp.tool(name="rename_worksheet", description="Rename worksheet in workbook")
def rename_worksheet_tool(filepath: str, old_name: str, new_name: str) -> str:
    """Renombra una hoja.

    Args:
        filepath: Path to the Excel file
        old_name: Current name of the worksheet
        new_name: New name for the worksheet
    """
    path = get_excel_path(filepath)
    try:
        wb = open_workbook(path)
        rename_sheet(wb, old_name, new_name)
        save_workbook(wb, path)
        close_workbook(wb)
    except ExcelMCPError as e:
        raise ToolError(str(e))
    return f"Worksheet renamed from '{old_name}' to '{new_name}' successfully"

@mcp.tool(name="copy_worksheet", description="Copy worksheet within workbook")
def copy_worksheet_tool(filepath: str, source_sheet: str, target_sheet: str) -> str:
    """Duplica una hoja completa (valores, estilos y celdas combinadas).

    Args:
        filepath: Path to the Excel file
        source_sheet: Name of the worksheet to copy
        target_sheet: Name of the new worksheet
    """
    path = get_excel_path(filepath)
    try:
        wb = open_workbook(path)
        copy_sheet(wb, source_sheet, target_sheet)
        save_workbook(wb, path)
        close_workbook(wb)
    except ExcelMCPError as e:
        raise ToolError(str(e))
    return f"Worksheet '{source_sheet}' copied to '{target_sheet}' successfully"

@mcp.tool(name="get_workbook_metadata",
          description="Get metadata about workbook including sheets, ranges, etc.")
def get_workbook_metadata_tool(filepath: str, include_ranges: bool = False) -> str:
    """Devuelve en JSON las hojas del workbook y, opcionalmente, sus rangos usados.

    Args:
        filepath: Path to the Excel file
        include_ranges: Whether to include range information (optional)
    """
    path = get_excel_path(filepath)
    try:
        wb = open_workbook(path)
        metadata = get_workbook_metadata(wb, include_ranges)
        close_workbook(wb)
    except ExcelMCPError as e:
        raise ToolError(str(e))
    return json.dumps(metadata, ensure_ascii=False)

@mcp.tool(name="format_range",
          description="Apply comprehensive formatting to a range of cells in an Excel worksheet. "
                      "Supports text formatting, borders, alignment, number formats, and more. "
                      "All parameters are optional except filepath, sheet_name and start_cell.")
def format_range_tool(filepath: str,
                      sheet_name: str,
                      start_cell: str,
                      end_cell: Optional[str] = None,
                      bold: bool = False,
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
                      merge_cells: bool = False,
                      protection_lock: Optional[bool] = None,
                      conditional_format: Optional[Union[str, Dict[str, Any], List[Dict[str, Any]]]] = None) -> str:
    """Aplica formato a un rango de celdas.

    Args:
        filepath: Absolute or relative path to the Excel (.xlsx) file
        sheet_name: Name of the worksheet where formatting should be applied
        start_cell: Top-left cell of the target range in A1 notation
        end_cell: Bottom-right cell of the target range; defaults to start_cell
        bold: Make cell text bold
        italic: Make cell text italic
        underline: 'single', 'double', 'singleAccounting' or 'doubleAccounting'
        font_size: Font size in points (1-409)
        font_family: Font family name, e.g. 'Calibri'
        font_color: Font color in hexadecimal RGB, e.g. 'FF0000'
        bg_color: Background fill color in hexadecimal RGB, e.g. 'FFFF00'
        fill_pattern: 'solid', 'darkGray', 'mediumGray', 'lightGray', 'gray125', 'gray0625' or 'none'
        border_type: 'none', 'thin', 'medium', 'thick', 'dashed', 'dotted', 'double', 'hair',
            'mediumDashed', 'dashDot', 'mediumDashDot', 'dashDotDot', 'mediumDashDotDot', 'slantDashDot'
        border_color: Color for all borders in hexadecimal RGB, e.g. '000000'
        number_format: Built-in format name ('general', '0.00', '#,##0', '0%', 'mm-dd-yy', ...)
            or a custom format code such as 'yyyy-mm-dd'
        horizontal_align: 'left', 'center', 'right', 'fill', 'justify', 'centerContinuous', 'distributed'
        vertical_align: 'top', 'center', 'bottom', 'justify', 'distributed'
        wrap_text: Enable text wrapping
        text_rotation: Degrees to rotate text (-90 to 90)
        merge_cells: Merge the range into one cell (top-left content is kept)
        protection_lock: Lock cells (requires sheet protection to take effect)
        conditional_format: Conditional formatting rule(s) as JSON string or object
    """
    path = get_excel_path(filepath)
    if not sheet_name:
        raise ToolError("sheet_name is required and must be a non-empty string")
    if not start_cell:
        raise ToolError("start_cell is required and must be a non-empty string")

    style_options = {
        "bold": bold,
        "italic": italic,
        "underline": underline,
        "font_size": font_size,
        "font_family": font_family,
        "font_color": font_color,
        "bg_color": bg_color,
        "fill_pattern": fill_pattern,
        "border_type": border_type,
        "border_color": border_color,
        "number_format": number_format,
        "horizontal_align": horizontal_align,
        "vertical_align": vertical_align,
        "wrap_text": wrap_text,
        "text_rotation": text_rotation,
        "protection_lock": protection_lock,
    }

    try:
        wb = open_workbook(path)
        ws = get_sheet(wb, sheet_name)
        cell_range = format_range(ws, start_cell, end_cell,
                                  merge_cells=merge_cells,
                                  conditional_format=conditional_format,
                                  **style_options)
        save_workbook(wb, path)
        close_workbook(wb)
    except InvalidFormatError as e:
        raise ToolError(f"invalid number format: {e}")
    except ExcelMCPError as e:
        raise ToolError(str(e))

    logger.info(f"Formato aplicado a {cell_range} en '{sheet_name}' de {path}")
    start, _, end = cell_range.partition(":")
    return f"Successfully formatted range {start}:{end or start} in sheet '{sheet_name}'"

@mcp.tool(name="unmerge_cells", description="Unmerge a previously merged range of cells")
def unmerge_cells_tool(filepath: str, sheet_name: str, start_cell: str, end_cell: str) -> str:
    """Separa celdas previamente combinadas.

    Args:
        filepath: Path to the Excel file
        sheet_name: Name of the worksheet
        start_cell: Top-left cell of the merged range
        end_cell: Bottom-right cell of the merged range
    """
    path = get_excel_path(filepath)
    try:
        wb = open_workbook(path)
        cell_range = unmerge_cells(get_sheet(wb, sheet_name), start_cell, end_cell)
        save_workbook(wb, path)
        close_workbook(wb)
    except ExcelMCPError as e:
        raise ToolError(str(e))
    return f"Successfully unmerged range {cell_range} in sheet '{sheet_name}'"


def main(argv: Optional[List[str]] = None) -> None:
    """Arranca el servidor con el transporte indicado (stdio por defecto)."""
    args = sys.argv[1:] if argv is None else argv
    transport = (args[0] if args else os.environ.get("EXCEL_MCP_TRANSPORT", "stdio")).lower()
    if transport not in TRANSPORTS:
        logger.error(f"Transporte no reconocido: {transport}")
        logger.info(f"Uso: excel-tools-server [{'|'.join(TRANSPORTS)}]")
        sys.exit(2)

    if EXCEL_FILES_PATH:
        os.makedirs(EXCEL_FILES_PATH, exist_ok=True)

    logger.info(f"{SERVER_NAME} {SERVER_VERSION} starting ({transport})...")
    try:
        mcp.run(transport=transport)
    except KeyboardInterrupt:
        logger.info("Servidor detenido por el usuario")
    except Exception as e:
        logger.error(f"Server error: {e}")
        raise
    finally:
        logger.info("Servidor detenido")


if __name__ == "__main__":
    main()
