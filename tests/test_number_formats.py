#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Tests for number format code resolution."""

import pytest

from excel_errors import FormattingError, InvalidFormatError
from excel_number_formats import (
    BUILTIN_FORMATS, CUSTOM_FORMATS, CUSTOM_ALLOCATION_START,
    CustomFormatRegistry, is_valid_number_format, number_format_string,
    resolve_number_format,
)


class TestBuiltinFormats:
    """Built-in names are matched case-insensitively."""

    def test_known_codes(self):
        assert resolve_number_format("general") == 0
        assert resolve_number_format("0.00") == 2
        assert resolve_number_format("#,##0") == 3
        assert resolve_number_format("0%") == 9
        assert resolve_number_format("mm-dd-yy") == 14
        assert resolve_number_format("h:mm") == 20

    @pytest.mark.parametrize("name", sorted(BUILTIN_FORMATS))
    def test_case_insensitive(self, name):
        code = BUILTIN_FORMATS[name]
        assert resolve_number_format(name) == code
        assert resolve_number_format(name.upper()) == code
        assert resolve_number_format(name.lower()) == code

    def test_mixed_case_name(self):
        assert resolve_number_format("General") == 0
        assert resolve_number_format("H:MM AM/PM") == 18

    def test_builtin_wins_over_custom_table(self):
        # 'mmm-yy' is in both tables
        assert resolve_number_format("mmm-yy") == 17


class TestCustomFormats:
    """Common custom patterns are matched exactly."""

    def test_exact_match(self):
        assert resolve_number_format("yyyy-mm-dd") == 168
        assert resolve_number_format("hh:mm:ss") == 176
        assert resolve_number_format("[Blue]#,##0_);[Red](#,##0)") == 166
        assert resolve_number_format('_("$"* #,##0_);_("$"* (#,##0);_("$"* "-"_);_(@_)') == 180

    def test_custom_table_is_case_sensitive(self):
        assert resolve_number_format("YYYY-MM-DD") != CUSTOM_FORMATS["yyyy-mm-dd"]
        assert resolve_number_format("YYYY-MM-DD") == CUSTOM_ALLOCATION_START

    def test_unrecognized_valid_format_uses_fixed_code(self):
        assert resolve_number_format("0.0000") == 181
        assert resolve_number_format("#,##0.000") == 181

    def test_idempotent(self):
        assert resolve_number_format("0.0000") == resolve_number_format("0.0000")
        assert resolve_number_format("yyyy-mm-dd") == resolve_number_format("yyyy-mm-dd")


class TestValidation:
    """Generic validation of custom format strings."""

    def test_too_many_sections(self):
        with pytest.raises(InvalidFormatError):
            resolve_number_format("a;b;c;d;e")

    def test_four_sections_allowed(self):
        assert is_valid_number_format("a;b;c;d")
        assert is_valid_number_format("0.00;-0.00;0;General")

    def test_disallowed_character(self):
        with pytest.raises(InvalidFormatError) as exc_info:
            resolve_number_format("0.00€")
        assert exc_info.value.specifier == "0.00€"
        assert "0.00€" in str(exc_info.value)

    def test_empty_specifier(self):
        assert not is_valid_number_format("")
        with pytest.raises(InvalidFormatError):
            resolve_number_format("")

    def test_percent_and_at_sign_are_not_allowed(self):
        assert not is_valid_number_format("0.000%")
        assert not is_valid_number_format("@")

    def test_invalid_format_is_formatting_error(self):
        with pytest.raises(FormattingError):
            resolve_number_format("0.0{0}")


class TestCustomFormatRegistry:
    """Per-workbook allocation of custom format codes."""

    def test_distinct_formats_get_distinct_codes(self):
        registry = CustomFormatRegistry()
        assert resolve_number_format("0.0000", registry) == 181
        assert resolve_number_format("0.00000", registry) == 182
        assert resolve_number_format("0.0000", registry) == 181
        assert registry.as_dict() == {"0.0000": 181, "0.00000": 182}

    def test_table_formats_do_not_consume_codes(self):
        registry = CustomFormatRegistry()
        assert resolve_number_format("yyyy-mm-dd", registry) == 168
        assert resolve_number_format("0.00", registry) == 2
        assert len(registry) == 0
        assert "yyyy-mm-dd" not in registry

    def test_invalid_formats_are_not_registered(self):
        registry = CustomFormatRegistry()
        with pytest.raises(InvalidFormatError):
            resolve_number_format("0.00€", registry)
        assert len(registry) == 0


class TestNumberFormatString:
    """Codes are turned into the text openpyxl writes."""

    def test_builtin_code_uses_openpyxl_text(self):
        assert number_format_string("general", 0) == "General"
        assert number_format_string("GENERAL", 0) == "General"
        assert number_format_string("0.00", 2) == "0.00"

    def test_currency_codes_keep_table_pattern(self):
        # openpyxl's text for codes 7, 8, 39 and 40 is a different pattern
        assert number_format_string("$#,##0_);($#,##0)", 7) == "$#,##0_);($#,##0)"
        assert number_format_string("$#,##0.00_);[red]($#,##0.00)", 40) == "$#,##0.00_);[Red]($#,##0.00)"

    def test_case_only_differences_use_openpyxl_text(self):
        assert number_format_string("h:mm am/pm", 18) == "h:mm AM/PM"
        assert number_format_string("0.00E+00", 11) == "0.00E+00"

    def test_custom_code_uses_specifier(self):
        assert number_format_string("yyyy-mm-dd", 168) == "yyyy-mm-dd"
        assert number_format_string("0.0000", 181) == "0.0000"
