"""Export-Modul: Excel (openpyxl) für Klassen und Kurstermine."""

from export.excel_export import ExcelExporter

__all__ = ["ExcelExporter"]
