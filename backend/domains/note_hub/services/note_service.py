"""
笔记服务层

提供笔记的业务逻辑封装，代理存储层操作。

存储层以返回值表达"不存在"（None / False），
服务层将其转换为 ApplicationError，由 API 层统一映射为 HTTP 响应：
- NoteNotFoundError -> 404
- ValidationError   -> 400
"""

import logging
from typing import Any

from domains.core.exceptions import NoteNotFoundError

from ..core.models import Note
from ..core.store import NoteStore

logger = logging.getLogger(__name__)


class NoteService:
    """
    笔记服务层

    封装笔记相关的业务逻辑，代理存储层操作。
    """

    def __init__(self, store: NoteStore):
        """
        初始化服务

        Args:
            store: 笔记存储层实例（进程内唯一）
        """
        self._store = store

    @property
    def store(self) -> NoteStore:
        return self._store

    # ==================== 查询 ====================

    def list_notes(self) -> list[Note]:
        """获取所有笔记"""
        return self.store.list_all()

    def get_note(self, note_id: str) -> Note | None:
        """获取笔记详情，不存在时返回 None"""
        return self.store.get_by_id(note_id)

    def require_note(self, note_id: str) -> Note:
        """获取笔记详情，不存在时抛出 NoteNotFoundError"""
        note = self.get_note(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        return note

    # ==================== CRUD ====================

    def create_note(self, title: str, content: str) -> Note:
        """
        创建笔记

        Raises:
            ValidationError: 标题或内容为空
        """
        note = self.store.create(title, content)
        logger.info(f"note_created: {note.id}")
        return note

    def update_note(self, note_id: str, title: str, content: str) -> Note:
        """
        更新笔记

        Raises:
            ValidationError: 标题或内容为空
            NoteNotFoundError: 笔记不存在（已删除的笔记不会被复活）
        """
        note = self.store.update(note_id, title, content)
        if note is None:
            raise NoteNotFoundError(note_id)
        logger.info(f"note_updated: {note_id}")
        return note

    def delete_note(self, note_id: str) -> None:
        """
        删除笔记

        Raises:
            NoteNotFoundError: 笔记不存在（包括重复删除）
        """
        if not self.store.delete(note_id):
            raise NoteNotFoundError(note_id)
        logger.info(f"note_deleted: {note_id}")

    # ==================== 统计 ====================

    def get_stats(self) -> dict[str, Any]:
        """获取统计信息"""
        return {
            "total": self.store.count(),
            "medium": self.store.medium,
            "persistence_healthy": self.store.persistence_healthy,
        }
