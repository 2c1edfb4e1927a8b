from typing import Generic, TypeVar

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    model_config = ConfigDict(extra="ignore")
    results: list[T] = Field(default_factory=list)
    page: int = 1
    page_size: int = 0
    total: int = 0
