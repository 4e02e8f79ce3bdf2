"""
Common Pydantic DTOs for Event Gateway services.

These models are shared by the gateway service, the SDK and the CLI so that
every component agrees on the wire format of the Configuration API.
"""
from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Spaces and function IDs share the same character set.
IDENTIFIER_PATTERN = r"^[a-zA-Z0-9._\-]+$"
SPACE_PATTERN = r"^[a-zA-Z0-9._\-]{3,}$"

DEFAULT_SPACE = "default"


class BaseDTO(BaseModel):
    """
    Base configuration for all DTOs.
    
    - Aliases are generated in camelCase for JSON serialization.
    - Allows population by field name (snake_case) in Python code.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ErrorDetail(BaseDTO):
    """A single error reported by the Configuration API."""
    message: str = Field(..., description="Human-readable error message")


class ErrorResponse(BaseDTO):
    """Error body returned by the Configuration API."""
    errors: List[ErrorDetail] = Field(default_factory=list)

    @classmethod
    def from_message(cls, message: str) -> "ErrorResponse":
        return cls(errors=[ErrorDetail(message=message)])
