"""Request-terminal failures of the service.

Every error carries the HTTP status it is reported with and a stable ``code``
string; the web app renders them as ``{"detail": ..., "code": ...}``.
"""

import typing as t


class TubelyError(Exception):
    status_code: t.ClassVar[int] = 500
    code: t.ClassVar[str] = "internal_error"
    default_detail: t.ClassVar[str] = "internal error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Unauthenticated(TubelyError):
    status_code = 401
    code = "unauthenticated"
    default_detail = "not authenticated"


class Forbidden(TubelyError):
    status_code = 403
    code = "forbidden"
    default_detail = "not the owner of this resource"


class NotFound(TubelyError):
    status_code = 404
    code = "not_found"
    default_detail = "not found"


class PayloadTooLarge(TubelyError):
    status_code = 413
    code = "payload_too_large"
    default_detail = "upload exceeds the size limit"


class UnsupportedMediaType(TubelyError):
    status_code = 415
    code = "unsupported_media_type"
    default_detail = "unsupported media type"


class ProbeFailed(TubelyError):
    status_code = 422
    code = "probe_failed"
    default_detail = "could not inspect the uploaded media"


class StorageIOError(TubelyError):
    status_code = 500
    code = "storage_io_error"
    default_detail = "could not stage the upload"


class RemuxFailed(TubelyError):
    status_code = 500
    code = "remux_failed"
    default_detail = "could not process the uploaded media"


class MetadataUpdateFailed(TubelyError):
    status_code = 500
    code = "metadata_update_failed"
    default_detail = "could not record the upload"


class UploadFailed(TubelyError):
    status_code = 502
    code = "upload_failed"
    default_detail = "could not store the upload"


class Conflict(TubelyError):
    status_code = 409
    code = "conflict"
    default_detail = "already exists"


class BadRequest(TubelyError):
    status_code = 400
    code = "bad_request"
    default_detail = "malformed request"
