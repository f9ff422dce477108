#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Workbook Manager MCP (Model Context Protocol for Excel)
-------------------------------------------------------
Gestión de workbooks y hojas para el servidor Excel Tools:
- Creación, apertura y guardado de workbooks
- Alta, baja, renombrado y copia de hojas

Author: MCP Team
Version: 1.0
"""

import os
import logging
from typing import List, Optional, Any

import openpyxl

from excel_errors import (
    ExcelMCPError, WorkbookExistsError, WorkbookNotFoundError,
    SheetExistsError, SheetNotFoundError
)

logger = logging.getLogger("excel_tools.workbook_manager")

# Nombre de la hoja inicial de un workbook nuevo
DEFAULT_SHEET_NAME = "Sheet1"


# 1. Gestión de Workbooks

def create_workbook(filename: str, overwrite: bool = True) -> Any:
    """
    Crea un nuevo fichero Excel con una única hoja vacía y lo guarda.

    Args:
        filename (str): Ruta y nombre del archivo a crear.
        overwrite (bool, opcional): Si es False y el archivo existe, falla.

    Returns:
        Objeto Workbook.

    Raises:
        WorkbookExistsError: Si el archivo existe y overwrite es False.
    """
    if os.path.exists(filename) and not overwrite:
        raise WorkbookExistsError(f"file '{filename}' already exists")

    wb = openpyxl.Workbook()
    wb.active.title = DEFAULT_SHEET_NAME
    save_workbook(wb, filename)
    return wb

def open_workbook(filename: str) -> Any:
    """
    Carga un archivo .xlsx existente con openpyxl.

    Raises:
        WorkbookNotFoundError: Si el archivo no existe.
        ExcelMCPError: Si openpyxl no puede leer el archivo.
    """
    if not os.path.exists(filename):
        raise WorkbookNotFoundError(f"failed to open Excel file: file '{filename}' does not exist")

    try:
        return openpyxl.load_workbook(filename)
    except Exception as e:
        logger.error(f"Error al abrir el archivo '{filename}': {e}")
        raise ExcelMCPError(f"failed to open Excel file: {e}")

def save_workbook(wb: Any, filename: str) -> str:
    """
    Escribe el workbook en la ruta indicada.

    Returns:
        La misma ruta recibida.

    Raises:
        ExcelMCPError: Si hay error al guardar.
    """
    if not wb:
        raise ExcelMCPError("workbook cannot be None")

    try:
        wb.save(filename)
        return filename
    except Exception as e:
        logger.error(f"Error al guardar el workbook en '{filename}': {e}")
        raise ExcelMCPError(f"failed to save workbook: {e}")

def close_workbook(wb: Any) -> None:
    """Cierra el Workbook en memoria."""
    if not wb:
        return

    try:
        # openpyxl solo mantiene abierto el archivo en modo read_only
        wb.close()
    except Exception as e:
        logger.warning(f"Advertencia al cerrar workbook: {e}")

def list_sheets(wb: Any) -> List[str]:
    """Devuelve lista de nombres de hojas en el orden de las pestañas."""
    if not wb:
        raise ExcelMCPError("workbook cannot be None")
    return list(wb.sheetnames)


# 2. Gestión de Hojas (Sheets)

def find_sheet_name(wb: Any, sheet_name: str) -> Optional[str]:
    """
    Busca una hoja sin distinguir mayúsculas, como hace Excel.

    Returns:
        El título real de la hoja, o None si no existe.
    """
    if not sheet_name:
        return None
    wanted = sheet_name.lower()
    for title in list_sheets(wb):
        if title.lower() == wanted:
            return title
    return None

def get_sheet(wb: Any, sheet_name: str) -> Any:
    """
    Obtiene una hoja de Excel por nombre (sin distinguir mayúsculas).

    Raises:
        SheetNotFoundError: Si la hoja no existe
    """
    title = find_sheet_name(wb, sheet_name)
    if title is None:
        raise SheetNotFoundError(f"worksheet '{sheet_name}' not found")
    return wb[title]

def add_sheet(wb: Any, sheet_name: str, index: Optional[int] = None) -> Any:
    """
    Crea una hoja vacía (al final, salvo que se indique index).

    Args:
        wb: Objeto Workbook.
        sheet_name (str): Título de la hoja nueva.
        index (int, opcional): Posición de la pestaña, empezando en 0.

    Returns:
        Hoja creada.

    Raises:
        SheetExistsError: Si el título ya está en uso.
    """
    if not sheet_name:
        raise ExcelMCPError("sheet name cannot be empty")

    if find_sheet_name(wb, sheet_name) is not None:
        raise SheetExistsError(f"worksheet '{sheet_name}' already exists")

    try:
        return wb.create_sheet(sheet_name, index)
    except ValueError as e:
        # openpyxl rechaza títulos con caracteres no permitidos
        raise ExcelMCPError(f"failed to create worksheet: {e}")

def delete_sheet(wb: Any, sheet_name: str) -> None:
    """
    Elimina la hoja indicada. Un workbook no puede quedarse sin hojas.

    Raises:
        SheetNotFoundError: Si la hoja no existe.
        ExcelMCPError: Si es la última hoja del workbook.
    """
    if len(list_sheets(wb)) == 1:
        raise ExcelMCPError("cannot delete the last worksheet in a workbook")

    wb.remove(get_sheet(wb, sheet_name))

def rename_sheet(wb: Any, old_name: str, new_name: str) -> None:
    """
    Cambia el título de una hoja sin moverla de posición.

    Raises:
        SheetNotFoundError: Si old_name no existe.
        SheetExistsError: Si new_name ya está en uso.
    """
    ws = get_sheet(wb, old_name)
    # openpyxl compara los títulos sin distinguir mayúsculas
    if find_sheet_name(wb, new_name) is not None:
        raise SheetExistsError(f"worksheet '{new_name}' already exists")

    try:
        ws.title = new_name
    except ValueError as e:
        logger.error(f"Error al renombrar la hoja '{old_name}' a '{new_name}': {e}")
        raise ExcelMCPError(f"failed to rename worksheet: {e}")

def copy_sheet(wb: Any, source_name: str, target_name: str) -> Any:
    """
    Duplica una hoja al final del workbook con openpyxl (valores, estilos,
    celdas combinadas y dimensiones de filas y columnas).

    Returns:
        La hoja nueva.

    Raises:
        SheetNotFoundError: Si no existe la hoja a copiar.
        SheetExistsError: Si el nombre destino ya está en uso.
    """
    source_sheet = get_sheet(wb, source_name)
    if not target_name:
        raise ExcelMCPError("sheet name cannot be empty")
    if find_sheet_name(wb, target_name) is not None:
        raise SheetExistsError(f"worksheet '{target_name}' already exists")

    target_sheet = wb.copy_worksheet(source_sheet)
    try:
        target_sheet.title = target_name
    except ValueError as e:
        wb.remove(target_sheet)
        raise ExcelMCPError(f"failed to copy worksheet: {e}")

    logger.debug(f"Hoja '{source_name}' copiada como '{target_name}'")
    return target_sheet
