from memory_companion.storage.base import ArtifactStorage
from memory_companion.storage.disk import DiskArtifactStorage

__all__ = ["ArtifactStorage", "DiskArtifactStorage"]
