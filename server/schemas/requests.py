"""Pydantic request models for MCP tool arguments."""

from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, StrictStr, ValidationError


class SearchArguments(BaseModel):
    query: StrictStr
    search_depth: Literal["basic", "advanced"] = "basic"


@dataclass(frozen=True)
class ArgumentValidation:
    """Tagged outcome of checking raw tool arguments: either `arguments` or `errors` is set."""

    arguments: SearchArguments | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.arguments is not None


def validate_search_arguments(raw: Any) -> ArgumentValidation:
    """Check raw `search` tool arguments once, at the dispatch boundary."""
    if not isinstance(raw, dict):
        return ArgumentValidation(errors=["arguments: must be an object"])

    try:
        return ArgumentValidation(arguments=SearchArguments.model_validate(raw))
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        ]
        return ArgumentValidation(errors=errors)
