"""
Error Taxonomy
==============

Consistent error types for the receipt pipeline.

Recovery rules:
    - ImageDecodeError / RouteDataError: recovered locally, the receipt
      prints a text placeholder (or skips the photo) and continues
    - PrinterDiscoveryMiss: recovered locally, the job goes to the
      system default printer
    - SpoolSubmissionError: logged; surfaced to the caller only for
      single-shot jobs, paced jobs continue with the next section
    - RequestValidationError: surfaced as a client error (400)
    - InternalError: caught at the HTTP boundary, surfaced as 500

Pure Python, no FastAPI imports, so it can be used from tests and scripts.
"""

from typing import List, Tuple, Type


class ReceiptError(Exception):
    """Base exception for all receipt pipeline errors."""


class ImageDecodeError(ReceiptError):
    """Raised when an image is missing, corrupt, unsupported or empty."""


class RouteDataError(ReceiptError):
    """Raised when a route point list is degenerate or malformed."""


class PrinterDiscoveryMiss(ReceiptError):
    """No candidate printer name resolved against the OS print queue."""


class SpoolSubmissionError(ReceiptError):
    """The OS print command failed or could not be started."""


class RequestValidationError(ReceiptError):
    """A print request is missing required fields or is malformed."""


class InternalError(ReceiptError):
    """Any other failure during composition or transmission."""


# =============================================================================
# Error Mapping
# =============================================================================

_SUBMISSION_PATTERNS: List[Tuple[Type[BaseException], str]] = [
    (FileNotFoundError, "Print command not found. Is CUPS installed?"),
    (PermissionError, "Permission denied while writing or submitting the spool file."),
    (TimeoutError, "Print submission timed out."),
    (OSError, "Operating system error while submitting the print job."),
]


def _chain(new: ReceiptError, cause: BaseException) -> ReceiptError:
    """Attach *cause* as ``__cause__`` (same as ``raise new from cause``)."""
    new.__cause__ = cause
    return new


def map_exception(exc: BaseException) -> ReceiptError:
    """
    Wrap a low-level exception into the matching ``ReceiptError``.

    ``ReceiptError`` instances are returned unchanged. OS-level failures
    become ``SpoolSubmissionError``; everything else is an ``InternalError``
    carrying the original message.
    """
    if isinstance(exc, ReceiptError):
        return exc

    for exc_type, message in _SUBMISSION_PATTERNS:
        if isinstance(exc, exc_type):
            return _chain(SpoolSubmissionError(f"{message} ({exc})"), exc)

    return _chain(InternalError(str(exc) or exc.__class__.__name__), exc)


def friendly_message(exc: BaseException) -> str:
    """Return a short, response-safe description for *exc*."""
    return str(map_exception(exc))
