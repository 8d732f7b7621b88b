"""
Exceptions raised by the transcript segmentation package.

Transcript content never raises; these are reserved for programmer errors
such as a malformed configuration handed to the parser.
"""


class SegmentationError(Exception):
    """Base class for segmentation errors."""


class ConfigurationError(SegmentationError, ValueError):
    """Raised when a parser configuration or one of its maps is malformed."""
