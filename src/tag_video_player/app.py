from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import QApplication

from .ui.main_window import MainWindow
from .utils.debug import debug_print, enable_debug

APP_NAME = "Tag Video Player"
APP_VERSION = "1.0.0"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tag-video-player",
        description="Video player that keeps time-coded tags next to each video.",
    )
    parser.add_argument("video", nargs="?", help="video file to open on start")
    parser.add_argument("-t", "--tag", help="jump to the tag with this title after opening")
    parser.add_argument("--debug", action="store_true", help="print debug logging to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    if args.debug:
        enable_debug()

    app = QApplication(sys.argv[:1])
    app.setApplicationName(APP_NAME)
    app.setApplicationDisplayName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)
    window = MainWindow()
    window.show()

    if args.video:
        video_path = str(Path(args.video).resolve())
        debug_print(f"Opening initial file {video_path}")

        def open_initial() -> None:
            window.load_video(video_path)
            if args.tag:
                window.jump_to_title(args.tag)

        QTimer.singleShot(0, open_initial)

    raise SystemExit(app.exec())
