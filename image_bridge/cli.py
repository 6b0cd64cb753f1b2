"""Command-line entry point: send one image to the host, or run the asset server."""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from image_bridge.config import Settings, get_settings
from image_bridge.models import TransferReport
from image_bridge.services.host import HttpHostChannel
from image_bridge.services.picker import ImagePicker
from image_bridge.services.sources import LocalFileSource


def _alert(message: str) -> None:
    print(message, file=sys.stderr)


async def _send(args: argparse.Namespace, settings: Settings) -> TransferReport:
    if args.chunk_size is not None:
        settings = settings.model_copy(update={"chunk_size": args.chunk_size})
    channel = HttpHostChannel(
        args.host_url or settings.host_url,
        timeout=settings.host_timeout,
        object_name=settings.receiver_object,
        chunk_method=settings.chunk_method,
        complete_method=settings.complete_method,
        permission_denied_method=settings.permission_denied_method,
    )
    picker = ImagePicker(channel, settings, alert=_alert)
    source = LocalFileSource(args.path)
    try:
        if args.camera:
            return await picker.open_camera(source)
        return await picker.open_gallery(source)
    finally:
        await channel.close()


def _serve(args: argparse.Namespace, settings: Settings) -> None:
    import uvicorn

    from image_bridge.main import create_app

    if args.root is not None:
        settings = settings.model_copy(update={"static_root": args.root})
    app = create_app(settings)
    uvicorn.run(
        app,
        host=args.host or settings.server_host,
        port=args.port or settings.server_port,
        log_level=settings.log_level.lower(),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="image-bridge", description="Image picker bridge for a host runtime")
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="Resize an image and stream it to the host")
    send.add_argument("path", type=Path)
    send.add_argument("--camera", action="store_true", help="Go through the camera capture path")
    send.add_argument("--host-url", default=None)
    send.add_argument("--chunk-size", type=int, default=None)

    serve = sub.add_parser("serve", help="Serve the host application's build assets")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--root", type=Path, default=None)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "serve":
        _serve(args, settings)
        return 0

    report = asyncio.run(_send(args, settings))
    print(report.model_dump_json(indent=2))
    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
