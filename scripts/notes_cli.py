#!/usr/bin/env python3
"""
笔记服务 CLI

用法：
    python scripts/notes_cli.py serve                  # 启动 API 服务
    python scripts/notes_cli.py serve --port 9000      # 指定端口
    python scripts/notes_cli.py list                   # 查看已持久化的笔记
    python scripts/notes_cli.py show 1700000000000     # 查看单条笔记

list/show 不会写入示例笔记；与服务启动一样，无法解析的 blob 会被移到备份键。
"""

import argparse
import sys
from pathlib import Path

# 添加 backend 到 Python 路径
backend_dir = Path(__file__).parent.parent / "backend"
sys.path.insert(0, str(backend_dir))


def _load_notes():
    from app.core.config import get_settings
    from domains.note_hub.core.persistence import create_repository

    settings = get_settings()
    repo = create_repository(
        settings.NOTES_STORAGE_BACKEND,
        data_dir=settings.NOTES_DATA_DIR,
        key=settings.NOTES_STORAGE_KEY,
    )
    return repo.load()


def cmd_serve(args):
    """启动 API 服务"""
    import uvicorn
    from app.core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=args.host or settings.HOST,
        port=args.port or settings.PORT,
        reload=args.reload,
        app_dir=str(backend_dir),
    )
    return 0


def cmd_list(args):
    """列出已持久化的笔记"""
    notes = _load_notes()
    if notes is None:
        print("尚未持久化任何笔记（首次启动服务时会写入示例笔记）")
        return 0

    print(f"共 {len(notes)} 条笔记")
    print("-" * 50)
    for note in notes:
        print(f"  [{note.id}] {note.title}  (updated {note.updated_at.isoformat()})")
    return 0


def cmd_show(args):
    """查看单条笔记"""
    notes = _load_notes() or []
    for note in notes:
        if note.id == args.note_id:
            print(f"ID:      {note.id}")
            print(f"Title:   {note.title}")
            print(f"Created: {note.created_at.isoformat()}")
            print(f"Updated: {note.updated_at.isoformat()}")
            print()
            print(note.summary if args.summary else note.content)
            return 0

    print(f"错误: 笔记不存在: {args.note_id}", file=sys.stderr)
    return 1


def main():
    parser = argparse.ArgumentParser(description="笔记服务 CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="启动 API 服务")
    serve_parser.add_argument("--host", default=None, help="监听地址")
    serve_parser.add_argument("--port", type=int, default=None, help="监听端口")
    serve_parser.add_argument("--reload", action="store_true", help="启用热重载")
    serve_parser.set_defaults(func=cmd_serve)

    list_parser = subparsers.add_parser("list", help="列出已持久化的笔记")
    list_parser.set_defaults(func=cmd_list)

    show_parser = subparsers.add_parser("show", help="查看单条笔记")
    show_parser.add_argument("note_id", help="笔记 ID")
    show_parser.add_argument("--summary", action="store_true", help="只显示内容摘要")
    show_parser.set_defaults(func=cmd_show)

    args = parser.parse_args()
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
