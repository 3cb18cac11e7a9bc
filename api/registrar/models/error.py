"""Problem response schema (RFC 7807 style). 422 uses FastAPI default; do not override."""

from pydantic import BaseModel


class Problem(BaseModel):
    """Error payload: category in ``type``, human readable ``title`` and ``detail``."""

    type: str
    title: str
    status: int
    detail: str
