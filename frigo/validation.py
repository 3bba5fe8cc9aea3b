"""Runtime checks at the boundaries: store responses, api payloads, model output."""
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from frigo.errors import ValidationError


M = TypeVar("M", bound=BaseModel)


def _field(loc: tuple[int | str, ...]) -> str:
    return ".".join(str(part) for part in loc) or "value"


def convert(err: PydanticValidationError) -> ValidationError:
    """The first failure names the error, the rest are kept on `errors`."""
    errors = [
        {
            "field": _field(e["loc"]),
            "constraint": e["type"],
            "message": e["msg"],
        }
        for e in err.errors()
    ]
    first = errors[0]
    message = f"{first['field']}: {first['message']} ({first['constraint']})"
    if len(errors) > 1:
        message += f" and {len(errors) - 1} more"
    return ValidationError(
        message,
        field=first["field"],
        constraint=first["constraint"],
        errors=errors,
    )


def validate(model: type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise convert(e) from e


def validate_many(model: type[M], items: list[Any]) -> list[M]:
    return [validate(model, item) for item in items]


def validate_json(model: type[M], raw: str | bytes) -> M:
    try:
        return model.model_validate_json(raw)
    except PydanticValidationError as e:
        raise convert(e) from e
