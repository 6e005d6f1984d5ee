"""Exception hierarchy for receipt-riser."""


class ReceiptRiserError(Exception):
    """Base class for all receipt-riser errors."""


class ConfigurationError(ReceiptRiserError):
    """Invalid or unreadable configuration."""


class StorageError(ReceiptRiserError):
    """A persistence operation failed."""


class TrainingDataError(ReceiptRiserError):
    """A training example or correction record is malformed."""
