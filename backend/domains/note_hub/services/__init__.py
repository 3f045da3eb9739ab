"""笔记服务层"""

from .note_service import NoteService

__all__ = ['NoteService']
