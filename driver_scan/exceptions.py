"""Custom exception classes for the driver scanner."""


class DriverScanError(Exception):
    """Base exception for all driver scanner errors."""


class TableLoadError(DriverScanError):
    """Raised when the rule table resource is missing, unreadable, or empty."""


class RecognitionError(DriverScanError):
    """Raised when a label image cannot be decoded or the OCR engine fails."""


class ScanInProgressError(DriverScanError):
    """Raised when a scan is requested while another one is still running."""
