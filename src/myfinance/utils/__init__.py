"""Utility functions for myfinance."""

from myfinance.utils.date_parser import parse_date, parse_ofx_date
from myfinance.utils.amount_parser import parse_amount, to_minor_units, to_major_units

__all__ = ["parse_date", "parse_ofx_date", "parse_amount", "to_minor_units", "to_major_units"]
