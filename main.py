#!/usr/bin/env python3
"""
Arena Layout Editor - Main Entry Point

A visual editor for arranging seat sections on a canvas and
exporting the result as a layout document.

Usage:
    python main.py
    python main.py --debug                # Enable debug logging
    python main.py --store layouts.json   # Use a specific layout store
"""

import sys
import logging
import argparse
from pathlib import Path
from PyQt6.QtWidgets import QApplication
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont, QPalette, QColor

from services import JsonFileStore, get_settings
from views import MainWindow


def setup_logging(debug: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO

    # Create formatter
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Log startup message
    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized at {'DEBUG' if debug else 'INFO'} level")


def setup_application() -> QApplication:
    """Configure the Qt application."""
    # High DPI support
    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Arena Editor")
    app.setApplicationVersion("0.1.0")
    app.setOrganizationName("arena-editor")

    # Set default font
    font = QFont("Segoe UI", 10)
    if not font.exactMatch():
        font = QFont("Helvetica Neue", 10)
    app.setFont(font)

    # Set up palette for consistent look
    palette = QPalette()
    palette.setColor(QPalette.ColorRole.Window, QColor("#F3F4F6"))
    palette.setColor(QPalette.ColorRole.WindowText, QColor("#111827"))
    palette.setColor(QPalette.ColorRole.Base, QColor("#FFFFFF"))
    palette.setColor(QPalette.ColorRole.Text, QColor("#374151"))
    palette.setColor(QPalette.ColorRole.Button, QColor("#FFFFFF"))
    palette.setColor(QPalette.ColorRole.ButtonText, QColor("#374151"))
    palette.setColor(QPalette.ColorRole.Highlight, QColor("#3B82F6"))
    palette.setColor(QPalette.ColorRole.HighlightedText, QColor("#FFFFFF"))
    app.setPalette(palette)

    return app


def main():
    """Main entry point."""
    # Parse command line arguments
    parser = argparse.ArgumentParser(description='Arena Layout Editor')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--store', type=Path, help='Layout store file (overrides settings)')
    parser.add_argument('--settings', help='Settings file (overrides the platform default)')
    args = parser.parse_args()

    # Setup logging
    setup_logging(debug=args.debug)

    settings = get_settings(args.settings)
    store_path = args.store or settings.get_store_path()
    logging.getLogger(__name__).info(f"Using layout store {store_path}")

    app = setup_application()

    # Create and show main window
    window = MainWindow(settings, JsonFileStore(store_path))
    window.show()

    # Run event loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
