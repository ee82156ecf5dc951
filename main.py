#!/usr/bin/env python3
"""
API Endpoint Capture - Main Entry Point

A tool for driving a browser through a catalog of frontend pages and
recording the backend API endpoints each page calls.
"""

from endpoint_capture.cli import main


if __name__ == "__main__":
    main()
