"""Video ingestion: ownership gate, staging, inspection, repacking and publishing."""

__all__ = [
    "FFmpegRemuxer",
    "FFProbeProber",
    "Prober",
    "Remuxer",
    "ThumbnailPipeline",
    "UploadPipeline",
    "authorize_video_owner",
    "classify_aspect_ratio",
    "derive_object_key",
]

from .gate import authorize_video_owner
from .key import derive_object_key
from .pipeline import UploadPipeline
from .probe import classify_aspect_ratio, FFProbeProber, Prober
from .remux import FFmpegRemuxer, Remuxer
from .thumbnail import ThumbnailPipeline
