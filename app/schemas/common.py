"""Response envelope and shared result schemas."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field, computed_field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Uniform response envelope for admin endpoints."""

    succeeded: bool = True
    message: str = "Success"
    data: T | None = None
    errors: list[str] = Field(default_factory=list)
    status_code: int = 200

    @classmethod
    def success(cls, data: T | None = None, message: str = "Success", status_code: int = 200):
        return cls(succeeded=True, message=message, data=data, status_code=status_code)

    @classmethod
    def failure(
        cls,
        message: str,
        errors: list[str] | None = None,
        status_code: int = 400,
    ):
        return cls(
            succeeded=False,
            message=message,
            errors=errors or [],
            status_code=status_code,
        )


class Page(BaseModel, Generic[T]):
    """One page of a filtered, sorted listing."""

    items: list[T]
    total_count: int
    page: int
    page_size: int

    @computed_field
    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total_count + self.page_size - 1) // self.page_size


class BulkOperationResult(BaseModel):
    """Outcome of an operation applied to several ids."""

    total_items: int = 0
    successful_items: int = 0
    failed_items: int = 0
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def is_successful(self) -> bool:
        return self.failed_items == 0

    @computed_field
    @property
    def success_rate(self) -> float:
        if self.total_items <= 0:
            return 0.0
        return round(self.successful_items / self.total_items * 100, 2)

    def record_success(self) -> None:
        self.successful_items += 1

    def record_failure(self, message: str) -> None:
        self.failed_items += 1
        self.errors.append(message)
