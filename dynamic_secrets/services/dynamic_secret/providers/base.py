from __future__ import annotations

from abc import ABC
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from dynamic_secrets.core.exceptions import ValidationError


class ProviderInput(BaseModel):
    """Base for provider input schemas.

    Accepts snake_case or camelCase keys and drops unknown ones; the
    validated form is always dumped as snake_case JSON values.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _format_error(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(part) for part in err.get("loc", ()))
    msg = err.get("msg", "invalid value")
    # pydantic prefixes custom ValueError messages
    msg = msg.removeprefix("Value error, ")
    return f"{loc}: {msg}" if loc else msg


class DynamicSecretProvider(ABC):
    """A provider type and the schema its configuration must satisfy.

    Validation only shapes and sanity-checks input; it never talks to the
    target system.
    """

    type: str
    input_model: ClassVar[type[ProviderInput]]

    async def validate_provider_inputs(self, inputs: Mapping[str, Any]) -> dict[str, Any]:
        if not isinstance(inputs, Mapping):
            raise ValidationError("Provider inputs must be an object")
        try:
            validated = self.input_model.model_validate(dict(inputs))
        except PydanticValidationError as exc:
            raise ValidationError(_format_error(exc)) from exc
        return self.finalize(validated.model_dump(mode="json"))

    def finalize(self, data: dict[str, Any]) -> dict[str, Any]:
        """Hook for provider-specific defaults on the validated dict."""
        return data

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} type={self.type!r}>"
