from __future__ import annotations


class StatementError(Exception):
    """Base class for bank statement ingestion failures."""


class StatementValidationError(StatementError):
    """Required input is missing or unusable (file, bank account, file type)."""


class StatementExtractionError(StatementError):
    """Extraction and parsing together produced no usable transactions."""


class StatementPersistenceError(StatementError):
    """The parsed statement could not be stored."""
