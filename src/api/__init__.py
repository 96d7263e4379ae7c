"""
API module for FastAPI routes.

Each route module defines a FastAPI APIRouter that is mounted on the
main application in api.app.
"""
