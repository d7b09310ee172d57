# File: hearing_scribe/core/common/enums.py

from enum import Enum, unique


@unique
class FileType(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"
    UNKNOWN = "unknown"


@unique
class TranscriptionEngine(str, Enum):
    # Segment-only backend (Azure OpenAI Whisper)
    WHISPER = "whisper"
    # Diarizing backend (Deepgram)
    DEEPGRAM = "deepgram"
