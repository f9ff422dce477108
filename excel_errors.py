#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Excepciones del Excel Tools Server
-------------------------------------------------------
Jerarquía común de errores para todos los módulos. Los mensajes de las
excepciones son los que recibe el cliente MCP, por eso están en inglés.

Author: MCP Team
Version: 1.0
"""


class ExcelMCPError(Exception):
    """Excepción base para todos los errores de Excel MCP."""
    pass

class WorkbookNotFoundError(ExcelMCPError):
    """Se lanza cuando no se encuentra un archivo Excel."""
    pass

class WorkbookExistsError(ExcelMCPError):
    """Se lanza cuando se intenta crear un archivo que ya existe."""
    pass

class SheetNotFoundError(ExcelMCPError):
    """Se lanza cuando no se encuentra una hoja en el archivo Excel."""
    pass

class SheetExistsError(ExcelMCPError):
    """Se lanza cuando se intenta crear una hoja que ya existe."""
    pass

class CellReferenceError(ExcelMCPError):
    """Se lanza cuando hay un problema con una referencia de celda."""
    pass

class RangeError(ExcelMCPError):
    """Se lanza cuando hay un problema con un rango de celdas."""
    pass

class FormattingError(ExcelMCPError):
    """Se lanza cuando una opción de formato no es válida."""
    pass

class InvalidFormatError(FormattingError):
    """Se lanza cuando un formato numérico no supera la validación."""

    def __init__(self, specifier: str):
        self.specifier = specifier
        super().__init__(f'invalid Excel number format: "{specifier}"')
