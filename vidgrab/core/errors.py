# vidgrab/core/errors.py
from __future__ import annotations


class VidgrabError(Exception):
    """Base class for errors raised by vidgrab."""


class SetupError(VidgrabError):
    """A tool the session cannot run without could not be provisioned."""


class SetupAborted(VidgrabError):
    """The user chose not to continue setup (e.g. no connectivity)."""
