#!/usr/bin/env python3

import argparse
import logging
import signal
import sys
import threading
from typing import Optional

import uvicorn

from clipbridge.api import create_app
from clipbridge.clipboard import get_clipboard
from clipbridge.config import Settings
from clipbridge.services.notification_service import (
    LogNotifier,
    NotificationService,
    TrayNotifier,
)
from clipbridge.services.sync_service import SyncHandler
from clipbridge.utils.staging import StagingArea

logger = logging.getLogger(__name__)


def _create_icon_image(size: int = 64):
    from PIL import Image, ImageDraw

    image = Image.new("RGBA", (size, size), (0, 0, 0, 0))
    draw = ImageDraw.Draw(image)
    pad = size // 8
    draw.rounded_rectangle((pad, pad * 2, size - pad, size - pad), radius=pad,
                           fill=(52, 120, 198, 255))
    draw.rectangle((size // 3, pad, size - size // 3, pad * 3), fill=(255, 212, 59, 255))
    return image


class ClipBridgeApp:

    def __init__(self, settings: Settings):
        self.settings = settings
        self.staging = StagingArea(settings.staging_dir)
        self.notifications = NotificationService(LogNotifier())
        self.handler = SyncHandler(get_clipboard(), self.staging, self.notifications)
        self.app = create_app(self.handler, settings)
        self.server: Optional[uvicorn.Server] = None
        self.icon = None
        self.running = False

    def _build_server(self) -> uvicorn.Server:
        config = uvicorn.Config(
            self.app,
            host=self.settings.host,
            port=self.settings.port,
            log_level=self.settings.log_level.lower(),
            access_log=False,
        )
        return uvicorn.Server(config)

    def _build_tray(self):
        import pystray

        menu = pystray.Menu(
            pystray.MenuItem(f"clipbridge {self.settings.host}:{self.settings.port}",
                             lambda: None, enabled=False),
            pystray.MenuItem("退出", lambda icon, item: self.stop()),
        )
        return pystray.Icon("clipbridge", _create_icon_image(), title="clipbridge", menu=menu)

    def start(self):
        if self.running:
            return

        self.running = True
        self.staging.ensure_directory()
        logger.info(f"Staging files in {self.staging.directory}")

        if self.settings.tray:
            try:
                self.icon = self._build_tray()
                self.notifications.notifier = TrayNotifier(self.icon)
            except Exception as e:
                logger.warning(f"Tray icon unavailable, notifications go to the log: {e}")
                self.icon = None

        self.notifications.start()
        self.server = self._build_server()

    def stop(self):
        if not self.running:
            return

        self.running = False
        if self.server:
            self.server.should_exit = True
        if self.icon:
            self.icon.stop()
        self.notifications.stop()
        print("clipbridge stopped")

    def run_forever(self):
        self.start()
        print(f"clipbridge listening on http://{self.settings.host}:{self.settings.port}")

        if self.icon is None:
            try:
                self.server.run()
            finally:
                self.stop()
            return

        # the tray owns the main thread on every platform pystray supports
        server_thread = threading.Thread(target=self.server.run, daemon=True)
        server_thread.start()
        try:
            self.icon.run()
        finally:
            self.stop()
            server_thread.join(timeout=5.0)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="clipbridge - share the desktop clipboard over HTTP"
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Address to listen on (default: CLIPBRIDGE_HOST or 0.0.0.0)"
    )

    parser.add_argument(
        "-p", "--port",
        type=int,
        default=None,
        help="Port to listen on (default: CLIPBRIDGE_PORT or 8086)"
    )

    parser.add_argument(
        "-t", "--temp-dir",
        type=str,
        default=None,
        help="Staging directory for pushed files; relative paths are resolved "
             "against the program directory (default: temp)"
    )

    parser.add_argument(
        "--no-tray",
        action="store_true",
        help="Do not show a tray icon; notifications are only logged"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose debug logging"
    )

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    settings = Settings.from_env().with_overrides(
        host=args.host,
        port=args.port,
        temp_dir=args.temp_dir,
        tray=False if args.no_tray else None,
        log_level="DEBUG" if args.verbose else None,
    )

    logging.basicConfig(level=settings.log_level, format='%(levelname)s: %(message)s')

    app = ClipBridgeApp(settings)

    def signal_handler(signum, frame):
        app.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        app.run_forever()
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
