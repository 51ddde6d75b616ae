"""Response bodies returned by the beelay server."""

from __future__ import annotations

from typing import List, Type, TypeVar

from pydantic import BaseModel, ValidationError


class ParseError(ValueError):
    """Raised when a response body does not match the expected shape."""


_Body = TypeVar("_Body", bound="ResponseBody")


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error["loc"])
        parts.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(parts)


class ResponseBody(BaseModel):
    """Base for JSON bodies sent back by the server; unknown fields are ignored."""

    @classmethod
    def from_json(cls: Type[_Body], text: str) -> _Body:
        try:
            return cls.model_validate_json(text)
        except ValidationError as exc:
            raise ParseError(_describe(exc)) from exc


class SwitchState(ResponseBody):
    """State of a single switch, as returned by get and set."""

    state: str
    transitioning: str


class SwitchList(ResponseBody):
    """Switch names in the order the server reported them."""

    switches: List[str]


class ErrorResponse(ResponseBody):
    """Error body returned with any non-2xx status."""

    error_message: str
