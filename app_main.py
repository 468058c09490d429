"""Application entry point for the Exam Portal."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

from PySide6 import QtAsyncio
from PySide6.QtWidgets import QApplication

from exam_portal.constants.about import APP_NAME, APP_VERSION
from exam_portal.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from exam_portal.core.backend import LocalExamBackend
from exam_portal.core.portal_manager import PortalManager
from exam_portal.core.test_importer import TestImportError, install_tests, load_tests_from_file
from exam_portal.server.api_server import start_api_server
from exam_portal.ui.test_window import TestWindow
from exam_portal.utils.logging_config import configure_logging


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=f"{APP_NAME} {APP_VERSION}")
    parser.add_argument("--host", default=DEFAULT_HOST, help="API bind address")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="API port")
    parser.add_argument("--principal", default=None, help="Identity of the student using the console")
    parser.add_argument(
        "--admin",
        action="append",
        default=[],
        help="Principal granted the admin role (repeatable)",
    )
    parser.add_argument("--test-id", type=int, default=None, help="Test to open; defaults to the first published one")
    parser.add_argument("--import-file", type=Path, default=None, help="Load tests from a text file at startup")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Initialize logging, start the API server, and launch the test window."""
    args = _parse_args(argv)
    logger = configure_logging()
    logger.info("Starting %s %s…", APP_NAME, APP_VERSION)

    portal_manager = PortalManager(admin_principals=set(args.admin))

    if args.import_file is not None:
        if not args.admin:
            logger.error("--import-file requires at least one --admin principal")
            sys.exit(2)
        try:
            imported = load_tests_from_file(args.import_file)
        except (OSError, TestImportError) as exc:
            logger.error("Could not import %s: %s", args.import_file, exc)
            sys.exit(1)
        install_tests(portal_manager, args.admin[0], imported)

    start_api_server(portal_manager=portal_manager, host=args.host, port=args.port)
    logger.info("API listening on http://%s:%d/", args.host, args.port)

    app = QApplication(sys.argv)
    window = TestWindow(LocalExamBackend(portal_manager, args.principal), args.test_id)
    window.show()
    QtAsyncio.run(window.load(), keep_running=True, quit_qapp=True, handle_sigint=True)


if __name__ == "__main__":
    main()
