"""
笔记持久化适配层

将整个笔记集合序列化为单个 JSON blob，整体覆盖写入键值存储介质：
- BlobStore: 抽象的键值 blob 存储（文件 / 内存）
- NoteRepository: 笔记集合的 load/save 适配器

持久化是"尽力而为"的跨重启持久性，不是事务日志：
写入失败只记录日志并返回 False，不回滚内存中的修改。

无法解析的 blob 不会被覆盖：load 时先把它移到 `<key>.corrupt-<时间戳>`，
再以空集合启动。
"""

import json
import logging
import os
import shutil
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Optional

from domains.core.exceptions import ConfigurationError, PersistenceError

from .models import Note

logger = logging.getLogger(__name__)

UTC = timezone.utc

DEFAULT_STORAGE_KEY = "notes"


class CorruptBlobError(PersistenceError):
    """blob 存在但无法解码（编码错误）"""


# ==================== Blob 存储介质 ====================

class BlobStore(ABC):
    """键值 blob 存储介质"""

    name: str = "blob"

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        读取 blob，不存在时返回 None

        Raises:
            CorruptBlobError: blob 存在但无法解码
            PersistenceError: 介质不可读
        """
        pass

    @abstractmethod
    def move(self, key: str, new_key: str) -> None:
        """
        原样移动 blob 到新键（不经过解码）

        Raises:
            PersistenceError: 介质不可用
        """
        pass

    @abstractmethod
    def write(self, key: str, blob: str) -> None:
        """
        覆盖写入 blob

        Raises:
            PersistenceError: 介质不可用
        """
        pass


class FileBlobStore(BlobStore):
    """
    文件系统 blob 存储

    每个 key 对应 `<data_dir>/<key>.json`，写入使用临时文件 + 原子重命名，
    写入过程中断不会损坏已有文件。
    """

    name = "file"

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        filepath = self.path_for(key)
        if not filepath.exists():
            return None
        try:
            return filepath.read_text(encoding='utf-8')
        except UnicodeDecodeError as e:
            raise CorruptBlobError(self.name, f"不是有效的 UTF-8 {filepath}", cause=e) from e
        except OSError as e:
            raise PersistenceError(self.name, f"读取失败 {filepath}", cause=e) from e

    def move(self, key: str, new_key: str) -> None:
        src, dst = self.path_for(key), self.path_for(new_key)
        try:
            shutil.move(src, dst)
        except OSError as e:
            raise PersistenceError(self.name, f"移动失败 {src} -> {dst}", cause=e) from e

    def write(self, key: str, blob: str) -> None:
        filepath = self.path_for(key)
        tmp_path = None
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                suffix='.json',
                prefix='.tmp_',
                dir=filepath.parent
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(blob)
            shutil.move(tmp_path, filepath)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(self.name, f"写入失败 {filepath}", cause=e) from e


class MemoryBlobStore(BlobStore):
    """内存 blob 存储（测试及临时运行使用，进程退出即丢失）"""

    name = "memory"

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._blobs: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, blob: str) -> None:
        self._blobs[key] = blob

    def move(self, key: str, new_key: str) -> None:
        if key not in self._blobs:
            raise PersistenceError(self.name, f"blob 不存在: {key}")
        self._blobs[new_key] = self._blobs.pop(key)


# ==================== 笔记仓库 ====================

class RepositoryState(str, Enum):
    """适配器状态：首次 load 之前为 uninitialized，之后为 ready"""
    UNINITIALIZED = "uninitialized"
    READY = "ready"


def datetime_to_iso(dt: datetime) -> str:
    """datetime 转 ISO 格式字符串（无时区信息时视为 UTC）"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.isoformat()


def iso_to_datetime(iso_str: str) -> datetime:
    """ISO 格式字符串转 datetime"""
    dt = datetime.fromisoformat(iso_str.replace('Z', '+00:00'))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


def encode_notes(notes: Iterable[Note]) -> str:
    """将笔记集合编码为 JSON blob"""
    records = [
        {
            'id': note.id,
            'title': note.title,
            'content': note.content,
            'created_at': datetime_to_iso(note.created_at),
            'updated_at': datetime_to_iso(note.updated_at),
        }
        for note in notes
    ]
    return json.dumps(records, ensure_ascii=False, indent=2)


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def decode_note(record: Any) -> Optional[Note]:
    """
    解码单条记录

    字段缺失、类型不对、标题/内容为空或 created_at 晚于 updated_at 时返回 None。
    id 兼容数字形式（毫秒时间戳）。
    """
    if not isinstance(record, dict):
        return None
    if any(field not in record for field in Note.REQUIRED_FIELDS):
        return None

    note_id = record['id']
    if isinstance(note_id, int) and not isinstance(note_id, bool):
        note_id = str(note_id)
    if not _is_text(note_id) or not _is_text(record['title']) or not _is_text(record['content']):
        return None

    try:
        created_at = iso_to_datetime(record['created_at'])
        updated_at = iso_to_datetime(record['updated_at'])
    except (TypeError, ValueError, AttributeError):
        return None
    if created_at > updated_at:
        return None

    return Note.from_dict({
        **record,
        'id': note_id,
        'created_at': created_at,
        'updated_at': updated_at,
    })


class NoteRepository:
    """
    笔记持久化适配器

    以单个 blob 整体覆盖的方式保存整个笔记集合（不做增量写入）。

    使用示例:
        repo = NoteRepository(FileBlobStore("data"))
        notes = repo.load()       # 首次运行返回 None
        repo.save(notes or [])    # 返回是否写入成功
    """

    def __init__(self, blob_store: BlobStore, key: str = DEFAULT_STORAGE_KEY):
        self.blob_store = blob_store
        self.key = key
        self._state = RepositoryState.UNINITIALIZED
        # load 时移走损坏 blob 的备份键，没有则为 None
        self.quarantined_key: Optional[str] = None

    @property
    def state(self) -> RepositoryState:
        return self._state

    @property
    def medium(self) -> str:
        return self.blob_store.name

    def load(self) -> Optional[List[Note]]:
        """
        加载最近一次持久化的笔记集合

        Returns:
            笔记列表；从未持久化时返回 None。
            blob 无法解析时先移到备份键，再返回空列表（不视为首次运行）。

        Raises:
            PersistenceError: 介质不可读，或损坏的 blob 无法移走
        """
        try:
            blob = self.blob_store.read(self.key)
        except CorruptBlobError as e:
            return self._quarantine(str(e))

        if blob is None:
            self._state = RepositoryState.READY
            return None

        try:
            records = json.loads(blob)
        except json.JSONDecodeError as e:
            return self._quarantine(str(e))

        if not isinstance(records, list):
            return self._quarantine(f"unexpected type {type(records).__name__}")

        self._state = RepositoryState.READY
        notes = []
        for record in records:
            note = decode_note(record)
            if note is None:
                logger.warning(f"note_record_skipped: key={self.key}, record={record!r}")
                continue
            notes.append(note)
        return notes

    def _quarantine(self, reason: str) -> List[Note]:
        """把无法解析的 blob 原样移到备份键，保证后续写入不会覆盖它"""
        backup_key = f"{self.key}.corrupt-{datetime.now(UTC).strftime('%Y%m%dT%H%M%S%f')}"
        self.blob_store.move(self.key, backup_key)
        self.quarantined_key = backup_key
        self._state = RepositoryState.READY
        logger.warning(f"note_blob_corrupted: key={self.key}, moved_to={backup_key}, {reason}")
        return []

    def save(self, notes: Iterable[Note]) -> bool:
        """
        覆盖写入整个笔记集合

        Returns:
            是否写入成功（介质失败时返回 False，不抛出）
        """
        if self._state is not RepositoryState.READY:
            raise RuntimeError("NoteRepository.save() called before load()")

        blob = encode_notes(notes)
        try:
            self.blob_store.write(self.key, blob)
        except PersistenceError as e:
            logger.warning(f"note_persist_failed: key={self.key}, {e}")
            return False
        return True


def create_repository(
    backend: str = "file",
    data_dir: Optional[Path | str] = None,
    key: str = DEFAULT_STORAGE_KEY,
) -> NoteRepository:
    """
    按配置创建持久化适配器

    Args:
        backend: 存储介质（file / memory）
        data_dir: 文件介质的数据目录
        key: blob 键名
    """
    backend = backend.lower()
    if backend == "file":
        if data_dir is None:
            raise ConfigurationError("NOTES_DATA_DIR", "file 存储需要指定数据目录")
        return NoteRepository(FileBlobStore(data_dir), key=key)
    if backend == "memory":
        return NoteRepository(MemoryBlobStore(), key=key)
    raise ConfigurationError("NOTES_STORAGE_BACKEND", f"未知的存储介质: {backend}")
