"""Validation package."""

from src.validation.validator import LedgerValidator, parse_payload

__all__ = ["LedgerValidator", "parse_payload"]
