#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Lakach CLI Frontend - Main Entry Point

Parses the command line, sets up logging and configuration, lists the
remote base path, then hands over to the curses TUI or the headless fetch.
"""

import sys
import argparse
import logging
from functools import partial
from typing import List, Optional

from lakach import __version__ as lakach_version
from lakach.backend.exceptions import LakachError, RemoteListingError
from lakach.backend.handlers.config_handler import ConfigHandler
from lakach.backend.handlers.logging_handler import LoggingHandler
from lakach.backend.handlers.remote_listing_handler import list_children, split_remote_source
from lakach.backend.services.download_service import DownloadService
from lakach.backend.services.folder_browser_service import FolderBrowser
from lakach.shared.colors import COLOR_ERROR, COLOR_RESET

from .fetch_command import FetchCommand

logger = logging.getLogger(__name__)

LOGGER_NAME = "lakach"


class LakachCLI:
    """Main application class for the Lakach command line"""

    def __init__(self, argv: Optional[List[str]] = None):
        """
        Args:
            argv: Arguments to parse instead of sys.argv[1:]
        """
        self.argv = argv
        self.args = None
        self.logging_handler = None
        self.app_logger = None
        self.config_handler = ConfigHandler()

    def _configure_logging_final(self):
        """Configure the package logger once the verbosity flags are known"""
        self.logging_handler = LoggingHandler()
        self.logging_handler.rotate_log_for_logger()
        self.app_logger = self.logging_handler.setup_logger(LOGGER_NAME)

        if self.args.debug:
            self.app_logger.setLevel(logging.DEBUG)
        elif self.args.verbose:
            self.app_logger.setLevel(logging.INFO)
        else:
            self.app_logger.setLevel(logging.WARNING)

    def _parse_args(self):
        parser = argparse.ArgumentParser(
            prog="lakach",
            description="Lakach: browse remote folders over ssh and mirror them with rsync",
        )
        parser.add_argument("-V", "--version", action="store_true", help="Show Lakach version and exit")
        parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging (implies verbose)")
        parser.add_argument("-v", "--verbose", action="store_true", help="Enable informational logging")
        parser.add_argument("--fetch", action="append", metavar="FOLDER", default=[],
                            help="Download FOLDER (relative to the remote path) without the UI; repeatable")
        parser.add_argument("remote_source", nargs="?", help="Remote source, e.g. user@host:path")
        parser.add_argument("local_dest", nargs="?", help="Local download directory")

        args = parser.parse_args(self.argv)
        if args.version:
            print(f"Lakach version {lakach_version}")
            sys.exit(0)
        if not args.remote_source:
            parser.error("the following arguments are required: remote_source")
        return parser, args

    def _resolve_local_dest(self, parser) -> str:
        local_dest = self.args.local_dest or self.config_handler.get_local_dest()
        if not local_dest:
            parser.error("no local_dest given and none saved in the configuration")
        return local_dest

    def run(self) -> int:
        parser, self.args = self._parse_args()
        self._configure_logging_final()
        logger.debug(f"Parsed args: {self.args}")

        local_dest = self._resolve_local_dest(parser)
        host, base_path = split_remote_source(self.args.remote_source)
        if not host:
            parser.error(f"invalid remote source: {self.args.remote_source}")

        lister = partial(
            list_children,
            ssh_path=self.config_handler.get("ssh_path", "ssh"),
            timeout=self.config_handler.get("listing_timeout", 30),
        )
        browser = FolderBrowser(host, base_path, lister=lister)
        downloads = DownloadService(local_dest, config_handler=self.config_handler)
        logger.info(f"Remote {browser.location}, downloading into {local_dest}")

        if self.args.fetch:
            return FetchCommand(downloads).execute(browser, self.args.fetch)

        try:
            browser.refresh()
        except RemoteListingError as e:
            print(f"{COLOR_ERROR}Could not list {browser.location}: {e.stderr or e}{COLOR_RESET}")
            return 1

        from lakach.frontends.tui.app import run_tui

        # curses owns the terminal from here on
        self.logging_handler.remove_console_output(self.app_logger)
        try:
            page_size = int(self.config_handler.get("page_size", 10))
        except (TypeError, ValueError):
            page_size = 10
        return run_tui(
            browser,
            downloads,
            page_size=max(page_size, 1),
            refresh_interval=self.config_handler.get_refresh_interval(),
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point"""
    try:
        exit_code = LakachCLI(argv).run()
    except LakachError as e:
        print(f"{COLOR_ERROR}Error: {e}{COLOR_RESET}")
        exit_code = 1
    except KeyboardInterrupt:
        exit_code = 130
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
