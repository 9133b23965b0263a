"""Export module for JSON, HTML and PDF reports."""
from export.html_exporter import export_html
from export.json_exporter import export_json
from export.pdf_exporter import export_pdf

__all__ = ["export_html", "export_json", "export_pdf"]
