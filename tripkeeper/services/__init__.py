"""
Services built on top of the repositories
"""

from .media_upload import MediaUploadService
from .relations import RelationManager, split_by_day

__all__ = ["MediaUploadService", "RelationManager", "split_by_day"]
