"""Document loading and block extraction over BeautifulSoup trees."""
from extraction.document_tree import clone_document, load_document
from extraction.line_extractor import extract_formatting, extract_lines

__all__ = ["clone_document", "extract_formatting", "extract_lines", "load_document"]
