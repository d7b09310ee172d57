# File: hearing_scribe/core/jobs/types.py

from enum import Enum


class JobStatus(str, Enum):
    UPLOADING = "uploading"
    TRANSCRIBING = "transcribing"
    FORMATTING = "formatting"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.ERROR)


# Forward order of the happy path. ERROR sits outside it (reachable from any non-terminal state).
STATUS_ORDER = {
    JobStatus.UPLOADING: 0,
    JobStatus.TRANSCRIBING: 1,
    JobStatus.FORMATTING: 2,
    JobStatus.COMPLETED: 3,
}


class PipelineStage(str, Enum):
    LOAD = "load"
    DOWNLOAD = "download"
    NORMALIZE = "normalize"
    TRANSCRIBE = "transcribe"
    PERSIST = "persist"
    FORMAT = "format"


# User-facing label + fallback progress shown by the polling surface.
STATUS_LABELS = {
    JobStatus.UPLOADING: ("Enviando arquivo...", 10),
    JobStatus.TRANSCRIBING: ("Transcrevendo áudio...", 40),
    JobStatus.FORMATTING: ("Formatando com IA...", 75),
    JobStatus.COMPLETED: ("Concluído!", 100),
    JobStatus.ERROR: ("Erro no processamento", 0),
}
