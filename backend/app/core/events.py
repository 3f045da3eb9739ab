"""Application lifecycle event handlers.

使用 ServiceRegistry 统一管理生命周期：启动时创建并加载唯一的 NoteStore，
关闭时逆序清理。NoteStore 每次修改都会同步写回，关闭时无需额外导出。
"""

from typing import Callable

from app.core.async_utils import run_sync
from app.core.deps import ensure_services_registered
from domains.core import get_service_registry
from domains.core.logging import get_logger

logger = get_logger(__name__)


def create_start_handler() -> Callable:
    """Create startup event handler."""

    async def start_app() -> None:
        logger.info("api_starting", component="api")

        registry = ensure_services_registered()

        # 预热存储层：在启动阶段完成唯一一次 load
        store = await run_sync(registry.get, "note_store")
        logger.info(
            "note_store_initialized",
            component="note_store",
            medium=store.medium,
            total_notes=store.count(),
            persistence_healthy=store.persistence_healthy,
        )

        logger.info(
            "services_initialized",
            component="registry",
            services=registry.initialized_services,
        )
        logger.info("api_started", component="api", status="success")

    return start_app


def create_stop_handler() -> Callable:
    """Create shutdown event handler."""

    async def stop_app() -> None:
        logger.info("api_stopping", component="api")

        try:
            registry = get_service_registry()
            await registry.shutdown()
        except Exception as e:
            logger.warning("service_registry_stop_error", component="registry", error=str(e))

        logger.info("api_stopped", component="api", status="success")

    return stop_app
