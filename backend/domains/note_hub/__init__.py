"""
笔记领域模块

Note Hub 管理单一资源"笔记"的 CRUD：
- 内存中的权威笔记集合（NoteStore）
- 整体覆盖写入的持久化适配器（NoteRepository）
- 供 API 层调用的服务层（NoteService）
"""

from .core.models import Note
from .core.store import NoteStore
from .core.persistence import NoteRepository, create_repository
from .services.note_service import NoteService

__all__ = [
    'Note',
    'NoteStore',
    'NoteRepository',
    'create_repository',
    'NoteService',
]
