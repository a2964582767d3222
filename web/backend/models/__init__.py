"""Request/response models for the cover export API"""

from web.backend.models.export import (
    ExportRequest,
    BlurbSolveRequest,
    BlurbSolveResponse,
)

__all__ = [
    "ExportRequest",
    "BlurbSolveRequest",
    "BlurbSolveResponse",
]
