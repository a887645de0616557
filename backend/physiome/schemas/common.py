from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models: camelCase keys out, either spelling accepted in."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


def _dump(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, (list, tuple)):
        return [_dump(v) for v in value]
    if isinstance(value, dict):
        return {k: _dump(v) for k, v in value.items()}
    return value


def envelope(data: Any = None, message: str = None, success: bool = True) -> dict:
    """Build the {success, message?, data?} body every route returns."""
    body = {"success": success}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = _dump(data)
    return body
