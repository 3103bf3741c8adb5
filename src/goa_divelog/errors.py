from __future__ import annotations


class DecoderError(Exception):
    """Base class for decoder failures. `status` names the failure kind."""
    status = "error"


class InvalidArgumentError(DecoderError, ValueError):
    status = "invalidargs"


class DataFormatError(DecoderError):
    status = "dataformat"


class UnsupportedError(DecoderError):
    status = "unsupported"
