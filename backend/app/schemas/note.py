"""Note-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class NoteWrite(BaseModel):
    """Note create/update request.

    缺省的 title/content 按空字符串处理，由存储层统一校验非空，
    返回 "Title and content are required"。
    """

    title: str = Field("", description="笔记标题（非空）")
    content: str = Field("", description="笔记内容（非空）")


class Note(BaseModel):
    """Complete note model for API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="笔记 ID")
    title: str = Field(..., description="笔记标题")
    content: str = Field(..., description="笔记内容")
    created_at: datetime = Field(..., description="创建时间")
    updated_at: datetime = Field(..., description="更新时间")


class NoteStats(BaseModel):
    """Note statistics."""

    total: int = Field(..., description="笔记总数")
    medium: str = Field(..., description="持久化介质")
    persistence_healthy: bool = Field(..., description="最近一次写入是否成功")
