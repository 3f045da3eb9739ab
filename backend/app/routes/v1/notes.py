"""Note API routes.

提供笔记的 CRUD 接口。

- GET    /notes/            列出全部笔记
- GET    /notes/stats       统计信息
- GET    /notes/{note_id}   笔记详情（404）
- POST   /notes/            创建笔记（201 / 400）
- PUT    /notes/{note_id}   更新笔记（400 / 404）
- DELETE /notes/{note_id}   删除笔记（204 / 404）

NOTE: 所有同步服务调用都使用 run_sync 包装，避免阻塞 event loop。
"""

from typing import List

from fastapi import APIRouter, Depends, Path, Response, status

from app.core.async_utils import run_sync
from app.core.deps import get_note_or_404, get_note_service
from app.schemas.common import ApiResponse, ErrorResponse, model_to_dict
from app.schemas.note import Note, NoteStats, NoteWrite

router = APIRouter()

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Note not found"}}
BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Title and content are required"}}


@router.get("/", response_model=ApiResponse[List[Note]])
async def list_notes(service=Depends(get_note_service)):
    """获取全部笔记"""
    notes = await run_sync(service.list_notes)
    items = [Note(**model_to_dict(n)) for n in notes]
    return ApiResponse(data=items)


@router.get("/stats", response_model=ApiResponse[NoteStats])
async def get_stats(service=Depends(get_note_service)):
    """获取笔记统计信息"""
    stats = await run_sync(service.get_stats)
    return ApiResponse(data=NoteStats(**stats))


@router.get("/{note_id}", response_model=ApiResponse[Note], responses=NOT_FOUND)
async def get_note(note=Depends(get_note_or_404)):
    """获取笔记详情"""
    return ApiResponse(data=Note(**model_to_dict(note)))


@router.post(
    "/",
    response_model=ApiResponse[Note],
    status_code=status.HTTP_201_CREATED,
    responses=BAD_REQUEST,
)
async def create_note(
    request: NoteWrite,
    service=Depends(get_note_service),
):
    """创建新笔记"""
    note = await run_sync(
        service.create_note,
        title=request.title,
        content=request.content,
    )
    return ApiResponse(data=Note(**model_to_dict(note)), message="Note created")


@router.put(
    "/{note_id}",
    response_model=ApiResponse[Note],
    responses={**BAD_REQUEST, **NOT_FOUND},
)
async def update_note(
    request: NoteWrite,
    note_id: str = Path(..., description="笔记ID"),
    service=Depends(get_note_service),
):
    """更新笔记标题和内容"""
    note = await run_sync(
        service.update_note,
        note_id,
        title=request.title,
        content=request.content,
    )
    return ApiResponse(data=Note(**model_to_dict(note)), message="Note updated")


@router.delete(
    "/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
)
async def delete_note(
    note_id: str = Path(..., description="笔记ID"),
    service=Depends(get_note_service),
):
    """删除笔记"""
    await run_sync(service.delete_note, note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
