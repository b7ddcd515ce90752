"""Response envelope shared by every endpoint."""
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(CamelModel, Generic[DataT]):
    status_code: int = 200
    data: DataT | None = None
    message: str = "Success"
    success: bool = True

    @model_validator(mode="after")
    def _derive_success(self):
        self.success = self.status_code < 400
        return self


class ErrorResponse(CamelModel):
    status_code: int
    data: None = None
    message: str
    success: bool = False
    errors: list = []
