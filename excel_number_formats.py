#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Excel Number Formats
-------------------------------------------------------
Resolución de formatos numéricos a códigos de formato de Excel:
- Tabla de formatos integrados (comparación sin distinguir mayúsculas)
- Tabla de formatos personalizados comunes (comparación exacta)
- Validación básica de formatos personalizados
- Registro opcional de códigos personalizados por workbook

Los códigos 0-163 están reservados para formatos integrados y nunca se
reasignan. Los códigos a partir de 164 son formatos personalizados.

Author: MCP Team
Version: 1.0
"""

import string
from typing import Dict, Optional

from openpyxl.styles.numbers import BUILTIN_FORMATS as OPENPYXL_BUILTIN_FORMATS

from excel_errors import InvalidFormatError

# Formatos integrados (nombre -> código). Se comparan sin distinguir mayúsculas.
BUILTIN_FORMATS: Dict[str, int] = {
    # Números
    "general": 0,
    "0": 1,
    "0.00": 2,
    "#,##0": 3,
    "#,##0.00": 4,
    "0%": 9,
    "0.00%": 10,
    "0.00e+00": 11,
    "# ?/?": 12,
    "# ??/??": 13,

    # Fechas y horas
    "mm-dd-yy": 14,
    "d-mmm-yy": 15,
    "d-mmm": 16,
    "mmm-yy": 17,
    "h:mm am/pm": 18,
    "h:mm:ss am/pm": 19,
    "h:mm": 20,
    "h:mm:ss": 21,
    "m/d/yy h:mm": 22,

    # Moneda
    "$#,##0_);($#,##0)": 7,
    "$#,##0_);[Red]($#,##0)": 8,
    "$#,##0.00_);($#,##0.00)": 39,
    "$#,##0.00_);[Red]($#,##0.00)": 40,
}

# Formatos personalizados comunes (patrón -> código). Comparación exacta.
CUSTOM_FORMATS: Dict[str, int] = {
    # Números
    "#,##0_);(#,##0)": 164,
    "#,##0.00_);(#,##0.00)": 165,
    "[Blue]#,##0_);[Red](#,##0)": 166,
    "[Blue]#,##0.00_);[Red](#,##0.00)": 167,

    # Fechas
    "yyyy-mm-dd": 168,
    "dd/mm/yyyy": 169,
    "mm/dd/yyyy": 170,
    "dd-mmm-yyyy": 171,
    "dd-mmm-yy": 172,
    "mmm-yy": 173,

    # Horas
    "[h]:mm": 174,
    "[h]:mm:ss": 175,
    "hh:mm:ss": 176,
    "hh:mm:ss.000": 177,

    # Moneda
    '"$"#,##0_);"$"(#,##0)': 178,
    '"$"#,##0.00_);"$"(#,##0.00)': 179,

    # Contabilidad
    '_("$"* #,##0_);_("$"* (#,##0);_("$"* "-"_);_(@_)': 180,
}

FIRST_CUSTOM_CODE = 164
CUSTOM_ALLOCATION_START = 181
MAX_FORMAT_SECTIONS = 4

# Caracteres admitidos en un formato personalizado
ALLOWED_FORMAT_CHARS = frozenset(
    string.digits + string.ascii_letters + '.,#?/\\*_()[]"$-+ :'
)

_BUILTIN_LOOKUP = {name.lower(): code for name, code in BUILTIN_FORMATS.items()}
_BUILTIN_NAMES = {code: name for name, code in BUILTIN_FORMATS.items()}


class CustomFormatRegistry:
    """
    Asignación de códigos para formatos personalizados dentro de un workbook.

    Cada patrón distinto recibe un código propio a partir de 181 y lo
    conserva mientras viva el registro. El llamador decide su alcance
    (normalmente una sesión de edición de un workbook).
    """

    def __init__(self, start: int = CUSTOM_ALLOCATION_START):
        self._codes: Dict[str, int] = {}
        self._next_code = start

    def code_for(self, specifier: str) -> int:
        code = self._codes.get(specifier)
        if code is None:
            code = self._next_code
            self._codes[specifier] = code
            self._next_code += 1
        return code

    def as_dict(self) -> Dict[str, int]:
        return dict(self._codes)

    def __len__(self) -> int:
        return len(self._codes)

    def __contains__(self, specifier) -> bool:
        return specifier in self._codes


def is_valid_number_format(specifier: str) -> bool:
    """
    Comprueba la validez básica de un formato personalizado.

    Un formato admite entre 1 y 4 secciones separadas por ';'
    (positivo; negativo; cero; texto) y solo caracteres de ALLOWED_FORMAT_CHARS.
    """
    if not specifier:
        return False

    sections = specifier.split(";")
    if len(sections) > MAX_FORMAT_SECTIONS:
        return False

    for section in sections:
        if not ALLOWED_FORMAT_CHARS.issuperset(section):
            return False
    return True


def resolve_number_format(specifier: str,
                          registry: Optional[CustomFormatRegistry] = None) -> int:
    """
    Convierte un formato numérico (nombre o patrón) en un código de Excel.

    Args:
        specifier: Nombre de formato integrado o patrón personalizado.
        registry: Registro de formatos personalizados del workbook. Sin él,
            todo formato personalizado no reconocido devuelve 181.

    Returns:
        Código de formato.

    Raises:
        InvalidFormatError: Si el patrón personalizado no es válido.
    """
    code = _BUILTIN_LOOKUP.get(specifier.lower())
    if code is not None:
        return code

    code = CUSTOM_FORMATS.get(specifier)
    if code is not None:
        return code

    if not is_valid_number_format(specifier):
        raise InvalidFormatError(specifier)

    if registry is None:
        return CUSTOM_ALLOCATION_START
    return registry.code_for(specifier)


def number_format_string(specifier: str, code: int) -> str:
    """
    Devuelve el texto de formato que se escribe en la celda para un código.

    Para los formatos integrados se usa el patrón de BUILTIN_FORMATS. El texto
    de openpyxl solo se toma cuando es el mismo patrón salvo mayúsculas
    ("general" -> "General"); en los códigos de moneda 7, 8, 39 y 40 difiere.
    """
    name = _BUILTIN_NAMES.get(code) if code < FIRST_CUSTOM_CODE else None
    if name is None:
        return specifier

    openpyxl_text = OPENPYXL_BUILTIN_FORMATS.get(code)
    if openpyxl_text is not None and openpyxl_text.lower() == name.lower():
        return openpyxl_text
    return name
