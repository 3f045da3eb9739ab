"""
笔记存储层 - 内存集合 + 持久化适配器

NoteStore 持有进程内唯一权威的笔记集合：
- 所有读写都经过 NoteStore
- 每次修改后整体写回持久化适配器
- 读取返回独立副本，调用方无法直接修改内部集合

写入失败不回滚内存修改：内存状态是当前进程生命周期内的唯一真相，
持久化只负责跨重启的尽力而为持久性。
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from domains.core.exceptions import ValidationError

from .models import Note
from .persistence import NoteRepository

logger = logging.getLogger(__name__)

SAMPLE_NOTE_ID = "1"
SAMPLE_NOTE_TITLE = "Welcome to Notes App"
SAMPLE_NOTE_CONTENT = "This is a sample note. You can create, edit, and delete notes."

REQUIRED_FIELDS_MESSAGE = "Title and content are required"

# 时钟停滞或回拨时 updated_at 的最小前进量
MIN_UPDATE_STEP = timedelta(microseconds=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NoteStore:
    """
    笔记存储层

    构造时从持久化适配器加载一次；首次运行（无历史数据）时写入一条示例笔记。

    所有操作在同一把锁内执行到底（包括持久化写入），
    不会出现两个修改交错的情况。
    """

    def __init__(
        self,
        repository: NoteRepository,
        seed_sample: bool = True,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        初始化存储层

        Args:
            repository: 持久化适配器
            seed_sample: 首次运行时是否写入示例笔记
            clock: 时间源，默认 UTC 当前时间（测试时可注入）
        """
        self._repository = repository
        self._clock = clock or utcnow
        self._lock = threading.RLock()
        self._notes: dict[str, Note] = {}
        self._last_issued_id = 0
        self._persistence_healthy = True

        self._load(seed_sample)

    # ==================== 初始化 ====================

    def _load(self, seed_sample: bool) -> None:
        """从适配器加载集合，首次运行时写入示例笔记"""
        notes = self._repository.load()

        if notes is None:
            logger.info(f"note_store_first_run: medium={self._repository.medium}")
            if seed_sample:
                now = self._clock()
                self._insert(Note(
                    id=SAMPLE_NOTE_ID,
                    title=SAMPLE_NOTE_TITLE,
                    content=SAMPLE_NOTE_CONTENT,
                    created_at=now,
                    updated_at=now,
                ))
                self._persist()
            return

        for note in notes:
            if note.id in self._notes:
                logger.warning(f"note_duplicate_id_skipped: {note.id}")
                continue
            self._insert(note)

        logger.info(f"note_store_loaded: count={len(self._notes)}, medium={self._repository.medium}")

    def _insert(self, note: Note) -> None:
        self._notes[note.id] = note
        if note.id.isdigit():
            self._last_issued_id = max(self._last_issued_id, int(note.id))

    # ==================== 内部工具 ====================

    def _next_id(self) -> str:
        """
        分配新 ID

        基于毫秒时间戳，保证严格大于上一次分配的 ID，
        并跳过集合中已存在的 ID。
        """
        candidate = max(int(self._clock().timestamp() * 1000), self._last_issued_id + 1)
        while str(candidate) in self._notes:
            candidate += 1
        self._last_issued_id = candidate
        return str(candidate)

    def _next_updated_at(self, previous: datetime) -> datetime:
        """每次成功更新都严格晚于上一次的 updated_at（时钟停滞或回拨时也前进）"""
        now = self._clock()
        if now > previous:
            return now
        return previous + MIN_UPDATE_STEP

    @staticmethod
    def _validate(title: str, content: str) -> None:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError(REQUIRED_FIELDS_MESSAGE, field="title")
        if not isinstance(content, str) or not content.strip():
            raise ValidationError(REQUIRED_FIELDS_MESSAGE, field="content")

    def _persist(self) -> bool:
        """整体写回集合，记录持久化健康状态"""
        saved = self._repository.save(list(self._notes.values()))
        if not saved:
            logger.warning(f"note_store_unsaved: count={len(self._notes)}, in-memory state kept")
        self._persistence_healthy = saved
        return saved

    # ==================== 基本 CRUD ====================

    def list_all(self) -> List[Note]:
        """获取所有笔记（副本）"""
        with self._lock:
            return [note.copy() for note in self._notes.values()]

    def get_by_id(self, note_id: str) -> Optional[Note]:
        """获取单个笔记（副本），不存在时返回 None"""
        with self._lock:
            note = self._notes.get(note_id)
            return note.copy() if note is not None else None

    def create(self, title: str, content: str) -> Note:
        """
        创建笔记

        Raises:
            ValidationError: 标题或内容为空
        """
        self._validate(title, content)

        with self._lock:
            now = self._clock()
            note = Note(
                id=self._next_id(),
                title=title,
                content=content,
                created_at=now,
                updated_at=now,
            )
            self._notes[note.id] = note
            self._persist()

            logger.debug(f"note_created: {note.id}")
            return note.copy()

    def update(self, note_id: str, title: str, content: str) -> Optional[Note]:
        """
        更新笔记标题和内容

        Returns:
            更新后的笔记副本；不存在时返回 None（不触发写入）

        Raises:
            ValidationError: 标题或内容为空
        """
        self._validate(title, content)

        with self._lock:
            current = self._notes.get(note_id)
            if current is None:
                return None

            updated = Note(
                id=current.id,
                title=title,
                content=content,
                created_at=current.created_at,
                updated_at=self._next_updated_at(current.updated_at),
            )
            self._notes[note_id] = updated
            self._persist()

            logger.debug(f"note_updated: {note_id}")
            return updated.copy()

    def delete(self, note_id: str) -> bool:
        """删除笔记，返回是否确实删除了记录（未删除时不触发写入）"""
        with self._lock:
            if self._notes.pop(note_id, None) is None:
                return False
            self._persist()

            logger.debug(f"note_deleted: {note_id}")
            return True

    # ==================== 统计 ====================

    def count(self) -> int:
        """统计笔记总数"""
        with self._lock:
            return len(self._notes)

    @property
    def persistence_healthy(self) -> bool:
        """最近一次写入是否成功"""
        return self._persistence_healthy

    @property
    def medium(self) -> str:
        return self._repository.medium

    # ==================== 生命周期 ====================

    def close(self) -> None:
        """
        关闭存储（由 ServiceRegistry 在 shutdown 时调用）

        每次修改都已同步写回，这里不再写入，只记录最终状态。
        上次写入失败时会以 warning 记录，提示有未持久化的修改。
        """
        with self._lock:
            if self._persistence_healthy:
                logger.info(f"note_store_closed: count={len(self._notes)}, medium={self.medium}")
            else:
                logger.warning(
                    f"note_store_closed_unsaved: count={len(self._notes)}, medium={self.medium}"
                )
