from typing import Any, Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class Loading(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["loading"] = "loading"
    is_loading: bool = True


class Success(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    data: T


class Error(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["error"] = "error"
    message: str
    cause: Optional[str] = None  # exception class name, kept for logs and debugging


Resource = Union[Loading, Success[Any], Error]
