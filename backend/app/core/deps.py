"""Dependency injection for FastAPI routes.

使用 ServiceRegistry 统一管理服务生命周期：
进程启动时创建唯一的 NoteStore，通过 Depends 显式传给路由，
测试时可用 registry.set() 替换。
"""

from typing import Annotated

from fastapi import Depends, Path

from app.core.async_utils import run_sync
from app.core.config import get_settings
from domains.core import get_service_registry, register_core_services


# ============================================================================
# 初始化服务注册表
# ============================================================================

def ensure_services_registered():
    """确保服务已注册（延迟初始化）"""
    registry = get_service_registry()
    if "note_service" not in registry:
        settings = get_settings()
        register_core_services(
            storage_backend=settings.NOTES_STORAGE_BACKEND,
            data_dir=settings.NOTES_DATA_DIR,
            storage_key=settings.NOTES_STORAGE_KEY,
            seed_sample=settings.NOTES_SEED_SAMPLE,
        )
    return registry


# ============================================================================
# Service getters - 使用 ServiceRegistry
# ============================================================================

def get_note_service():
    """Get NoteService singleton instance."""
    registry = ensure_services_registered()
    return registry.get("note_service")


# ============================================================================
# Resource existence validators
# ============================================================================

async def get_note_or_404(
    note_id: Annotated[str, Path(description="笔记ID")],
    service=Depends(get_note_service),
):
    """
    验证笔记存在并返回笔记对象。

    用作路由依赖注入，不存在时抛出 NoteNotFoundError（由异常处理器转为 404）。
    """
    return await run_sync(service.require_note, note_id)
