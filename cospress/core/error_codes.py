class ErrorCode:
    COS_NOT_CONFIGURED = "COS_NOT_CONFIGURED"
    COS_UNREACHABLE = "COS_UNREACHABLE"
    COS_REJECTED = "COS_REJECTED"
    ENCODING_FAILURE = "ENCODING_FAILURE"
    INVALID_EXTENSION = "INVALID_EXTENSION"
    EMPTY_UPLOAD = "EMPTY_UPLOAD"
    UPLOAD_TOO_LARGE = "UPLOAD_TOO_LARGE"
