"""
Function DTOs.

A function is an invocation target registered in a space. The gateway calls
it when an event it is subscribed to arrives.
"""
import random
from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from .models import BaseDTO, DEFAULT_SPACE, IDENTIFIER_PATTERN, SPACE_PATTERN


class ProviderType(str, Enum):
    """Supported function providers."""
    HTTP = "http"          # Plain HTTP endpoint, receives the event as JSON
    WEIGHTED = "weighted"  # Traffic split between other functions


class WeightedFunction(BaseDTO):
    """One target of a weighted provider."""
    function_id: str = Field(..., pattern=IDENTIFIER_PATTERN)
    weight: int = Field(..., gt=0)


def choose_function(
    targets: List[WeightedFunction],
    rng: Optional[random.Random] = None,
) -> str:
    """
    Pick a function ID with probability proportional to its weight.

    Raises:
        ValueError: If the weights sum to 0 (no target to choose)
    """
    if len(targets) == 1:
        return targets[0].function_id

    total = sum(target.weight for target in targets)
    if total < 1:
        raise ValueError("target function weights sum to 0, there is not one function to target")

    rng = rng or random
    chosen_weight = rng.randint(1, total)
    weights_so_far = 0
    chosen = targets[0].function_id
    for target in targets:
        chosen = target.function_id
        weights_so_far += target.weight
        if weights_so_far >= chosen_weight:
            break
    return chosen


class Provider(BaseDTO):
    """How the gateway reaches a function."""
    type: ProviderType
    url: Optional[str] = Field(default=None, description="Endpoint for http functions")
    weighted: Optional[List[WeightedFunction]] = Field(
        default=None,
        description="Targets for weighted functions",
    )

    @model_validator(mode="after")
    def check_provider_fields(self) -> "Provider":
        if self.type == ProviderType.HTTP:
            if not self.url:
                raise ValueError("missing required field url for http provider")
            if not self.url.startswith(("http://", "https://")):
                raise ValueError(f"invalid url for http provider: {self.url}")
        elif self.type == ProviderType.WEIGHTED:
            if not self.weighted:
                raise ValueError("missing required field weighted for weighted provider")
        return self


class Function(BaseDTO):
    """A registered function."""
    space: str = Field(default=DEFAULT_SPACE, pattern=SPACE_PATTERN)
    function_id: str = Field(..., pattern=IDENTIFIER_PATTERN)
    provider: Provider


class FunctionList(BaseDTO):
    """Response body for listing functions."""
    functions: List[Function] = Field(default_factory=list)
