# backend/app/__init__.py
"""
Notion query viewer backend application package.

This package contains:
- main: FastAPI application entrypoint
- notion: Notion relay, schemas and property rendering
- views: HTML pages (query form, table view, raw JSON view)
"""
