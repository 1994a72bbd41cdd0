"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from linkparser.api import app

    uvicorn linkparser.api:app --reload
"""

from linkparser.api.app import app

__all__ = ["app"]
