"""Spreadsheet skills built on openpyxl."""
