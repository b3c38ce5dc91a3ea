"""Exception taxonomy shared by the pipeline, the analytics engine and the routers."""


class MediMindsError(Exception):
    """Base class for all domain errors"""


class TranscriptionError(MediMindsError):
    """Transcription capability unavailable, or the audio could not be processed"""


class CapabilityUnavailableError(TranscriptionError):
    """Network or service failure of a language-model capability"""


class UpstreamFormatError(MediMindsError):
    """The summarization capability returned unparsable or incomplete JSON"""


class MediaUploadError(MediMindsError):
    """A media file could not be written to storage"""


class PipelineCancelledError(MediMindsError):
    """The requester went away before the plan was persisted"""


class ValidationError(MediMindsError):
    """Locally recoverable data-quality problem (e.g. goal index out of range)"""


class LinkConflictError(MediMindsError):
    """Child is already linked to a different parent or therapist"""


class NotFoundError(MediMindsError):
    """Requested child, plan or task does not exist"""


# Errors after which nothing was saved and the whole pipeline may be retried
RETRYABLE_PIPELINE_ERRORS = (TranscriptionError, UpstreamFormatError, MediaUploadError)
