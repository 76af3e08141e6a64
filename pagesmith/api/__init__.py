"""
Pagesmith API - FastAPI application for landing page generation,
editing, preview, export and publishing.
"""

__version__ = "1.0.0"
