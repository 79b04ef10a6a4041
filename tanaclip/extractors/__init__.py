"""Extraction sub-package: fragment linearization, dates and page metadata."""

from .dates import extract_first_date, normalize_date, year_from_url
from .linearize import linearize
from .page import collect_page

__all__ = [
    "collect_page",
    "extract_first_date",
    "linearize",
    "normalize_date",
    "year_from_url",
]
