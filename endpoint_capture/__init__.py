"""
API Endpoint Capture Package

A Python tool for discovering the backend API endpoints a web frontend
invokes, organized by the frontend's navigation hierarchy.
"""

__version__ = "1.0.0"
__description__ = "Frontend-driven API endpoint discovery and categorization tool"
