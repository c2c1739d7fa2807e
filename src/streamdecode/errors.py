"""Error types for streamdecode."""


class DecoderContractError(AssertionError):
    """Raised when a caller breaks an ImageDecoder precondition.

    Appending data after the final chunk, or asking for the completeness of
    a frame the source does not report yet. These are programming errors,
    not conditions to recover from; missing data is reported as ``None``.
    """
