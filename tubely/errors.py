"""
Failure kinds raised by the ingest pipeline and the upload routes.
Each carries the HTTP status it maps to; main.py renders them as JSON.
"""


class IngestError(Exception):
    kind = "ingest_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(IngestError):
    kind = "bad_request"
    status_code = 400


class ForbiddenError(IngestError):
    kind = "forbidden"
    status_code = 403


class ProbeFailure(IngestError):
    kind = "probe_error"
    status_code = 422


class ProbeProcessError(ProbeFailure):
    """ffprobe could not run or exited non-zero."""


class ProbeDataError(ProbeFailure):
    """ffprobe ran but its output has no usable width/height."""


class RemuxFailure(IngestError):
    kind = "remux_error"
    status_code = 500


class StorageFailure(IngestError):
    kind = "storage_error"
    status_code = 502


class RecordUpdateFailure(IngestError):
    kind = "record_update_error"
    status_code = 500


class RequestCancelledError(IngestError):
    kind = "cancelled"
    status_code = 499
