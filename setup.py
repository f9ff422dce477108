#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""Setup script for Excel Tools MCP Server."""

from setuptools import setup

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read requirements
with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="excel-tools-mcp-server",
    version="1.0.0",
    author="MCP Team",
    description="MCP server exposing Excel workbook, worksheet, data and formatting tools",
    long_description=long_description,
    long_description_content_type="text/markdown",
    py_modules=[
        "excel_errors",
        "excel_number_formats",
        "excel_range",
        "excel_reader_mcp",
        "excel_tools_mcp",
        "excel_writer_mcp",
        "workbook_manager_mcp",
    ],
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Office/Business :: Financial :: Spreadsheet",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "excel-tools-server=excel_tools_mcp:main",
        ],
    },
    keywords="mcp excel openpyxl automation ai llm spreadsheet",
    include_package_data=True,
    zip_safe=False,
)
