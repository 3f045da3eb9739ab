"""
笔记数据模型定义

Note 是 Note Hub 唯一的实体类型：
- id 由存储层在创建时分配，之后不可变
- created_at 创建时设置，之后不可变
- updated_at 创建时设置，每次成功更新时刷新
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any


@dataclass
class Note:
    """
    笔记数据类

    Attributes:
        id: 笔记 ID（不透明字符串，由 NoteStore 分配）
        title: 笔记标题（非空）
        content: 笔记内容（非空）
        created_at: 创建时间
        updated_at: 更新时间（>= created_at）
    """
    id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

    REQUIRED_FIELDS = ('id', 'title', 'content', 'created_at', 'updated_at')

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Note':
        """从字典创建笔记实例"""
        valid_fields = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**valid_fields)

    def copy(self) -> 'Note':
        """返回独立副本，调用方修改副本不会影响存储层"""
        return replace(self)

    @property
    def summary(self) -> str:
        """获取内容摘要（前 200 字符）"""
        content = self.content.strip()
        if len(content) <= 200:
            return content
        return content[:200] + "..."
