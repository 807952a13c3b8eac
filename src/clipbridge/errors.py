class ClipBridgeError(Exception):
    pass


class ClientError(ClipBridgeError):
    """Request-level failure reported to the caller as HTTP 400."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class CodecError(ClipBridgeError):
    pass


class MalformedBatch(CodecError):
    """Names and blobs of a file push do not pair up one to one."""


class StagingError(ClipBridgeError):
    pass


class StagingUnavailable(StagingError):
    pass


class StageWriteError(StagingError):
    pass


class ClipboardError(ClipBridgeError):
    """The native clipboard could not be read or written."""
