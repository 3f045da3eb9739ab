"""
核心层：数据模型、存储和持久化适配
"""

from .models import Note
from .persistence import (
    BlobStore,
    CorruptBlobError,
    FileBlobStore,
    MemoryBlobStore,
    NoteRepository,
    RepositoryState,
    create_repository,
)
from .store import NoteStore

__all__ = [
    'Note',
    'NoteStore',
    'BlobStore',
    'CorruptBlobError',
    'FileBlobStore',
    'MemoryBlobStore',
    'NoteRepository',
    'RepositoryState',
    'create_repository',
]
