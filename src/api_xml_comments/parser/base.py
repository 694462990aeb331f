"""Data models for the documentation surface of API operations.

The OpenAPI parser converts each operation into these models; the
XML comments filter mutates their descriptions in place.
"""

from pydantic import BaseModel


class ApiParameter(BaseModel):
    """A single operation parameter (query, path, header, cookie, ...)."""

    name: str
    location: str  # query / path / header / cookie / body / formData
    description: str | None = None


class ApiResponse(BaseModel):
    """A response entry, keyed by status code on the operation."""

    description: str | None = None


class ApiOperation(BaseModel):
    """A single API operation with its documentation fields."""

    method: str  # GET / POST / PUT / DELETE / PATCH
    path: str  # /api/pets/{petId}
    operation_id: str | None = None
    summary: str | None = None
    description: str | None = None
    parameters: list[ApiParameter] = []
    responses: dict[str, ApiResponse] = {}  # {status_code: ApiResponse}

    @property
    def key(self) -> str:
        """``"GET /pets"`` style key used when there is no operationId."""
        return f"{self.method.upper()} {self.path}"
