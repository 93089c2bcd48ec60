"""
Processing: media pipeline and document image obfuscation
"""

from .media_pipeline import IncomingFile, MediaPipeline, get_media_pipeline

__all__ = ["IncomingFile", "MediaPipeline", "get_media_pipeline"]
