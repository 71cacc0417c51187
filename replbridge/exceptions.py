"""
REPL Bridge Exceptions - Custom exception hierarchy for the bridge.

All exceptions inherit from BridgeError for easy catching of bridge-specific errors.
None of these cross the public boundary: Bridge and DispatchEngine turn them into
a boolean result plus a single message for the user.
"""


class BridgeError(Exception):
    """
    Base exception for all bridge errors.

    Example:
        try:
            manager.spawn()
        except BridgeError as e:
            host.notify(str(e), error=True)
    """
    pass


class ConfigurationError(BridgeError):
    """
    Invalid or unusable configuration.

    Raised when:
    - REPL command is empty or cannot be parsed
    - REPL executable cannot be resolved on PATH
    - Chunk start/end pattern is not a valid regular expression
    - View width is outside the allowed range
    """
    pass


class SessionError(BridgeError):
    """
    Error creating or keeping a REPL session.

    Raised when:
    - Spawning the REPL process fails
    - A stored process handle turns out to be stale

    The session reverts to Absent and is recreated by the next ensure().
    """
    pass


class ExtractionError(BridgeError):
    """
    Error extracting a region from the document.

    Raised when:
    - No chunk start delimiter is found above the cursor
    - A chunk start is found but no end delimiter follows
    - The cursor lies outside the chunk that was found
    - A bracketed block is never closed
    """
    pass


class TransmissionError(BridgeError):
    """
    Error writing to the REPL process.

    Raised when:
    - The process input pipe is closed or broken
    - The temporary source file cannot be written
    """
    pass
