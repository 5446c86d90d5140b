"""Exception hierarchy for the PRISM requirement analyzer."""

from __future__ import annotations


class PrismError(Exception):
    """Base class for every error raised by PRISM."""


class InputError(PrismError):
    """Raised when requirement text is empty or cannot be analysed.

    The pipeline recovers from this error: analysis continues with empty
    entities and the message is recorded in ``AnalysisResult.warnings``.
    """


class AugmentationFailure(PrismError):
    """Raised inside the AI augmentation stage when the provider fails.

    Never escapes :func:`prism.analysis.augment.augment`; it is converted into
    a ``degraded`` marker on the result.
    """


class ConfigurationError(PrismError):
    """Raised for an invalid generation request or configuration value."""
