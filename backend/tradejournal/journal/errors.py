class JournalError(Exception):
    """Base class for trading journal errors."""

class TradeValidationError(JournalError, ValueError):
    """A trade or settings payload is missing a required field or is inconsistent."""

class TradeNotFoundError(JournalError, LookupError):
    def __init__(self, trade_id: int):
        super().__init__(f"trade {trade_id} not found")
        self.trade_id = trade_id

class CsvImportError(JournalError, ValueError):
    """The CSV document as a whole cannot be imported (no header, no rows)."""

class BackupFormatError(JournalError, ValueError):
    pass

class PersistenceError(JournalError):
    """The backing store rejected a read or write."""
