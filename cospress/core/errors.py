from cospress.core.error_codes import ErrorCode


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        self.status_code = status_code
        self.code = str(code)
        self.message = message
        super().__init__(message)


class ConfigurationMissing(ApiError):
    """A required COS field (credential, bucket or region) is empty."""

    def __init__(self, fields: list[str] | None = None, message: str | None = None):
        self.fields = list(fields or [])
        if message is None:
            message = f"COS is not configured: missing {', '.join(self.fields)}"
        super().__init__(status_code=503, code=ErrorCode.COS_NOT_CONFIGURED, message=message)


class TransportFailure(ApiError):
    def __init__(self, message: str):
        super().__init__(status_code=502, code=ErrorCode.COS_UNREACHABLE, message=message)


class RemoteRejection(ApiError):
    def __init__(self, remote_status: int, message: str | None = None):
        self.remote_status = int(remote_status)
        super().__init__(
            status_code=502,
            code=ErrorCode.COS_REJECTED,
            message=message or f"COS rejected the upload with HTTP {self.remote_status}",
        )


class EncodingFailure(ApiError, ValueError):
    def __init__(self, message: str):
        super().__init__(status_code=400, code=ErrorCode.ENCODING_FAILURE, message=message)


class InvalidExtension(ApiError, ValueError):
    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(
            status_code=400,
            code=ErrorCode.INVALID_EXTENSION,
            message=f"Unsupported file extension: {extension!r}",
        )


class EmptyUpload(ApiError):
    def __init__(self):
        super().__init__(status_code=400, code=ErrorCode.EMPTY_UPLOAD, message="Uploaded file is empty")


class UploadTooLarge(ApiError):
    def __init__(self, size: int, limit: int):
        super().__init__(
            status_code=413,
            code=ErrorCode.UPLOAD_TOO_LARGE,
            message=f"Upload of {size} bytes exceeds the {limit} byte limit",
        )
