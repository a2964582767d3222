"""API routes for KDP Cover Studio"""

from web.backend.api import export_api

__all__ = ["export_api"]
