"""
Model metadata and cost calculations.

Resolves model identifiers to their static metadata and computes costs
from reported token usage.
"""

from decimal import Decimal, ROUND_UP
from typing import Optional, Sequence, Tuple

from pydantic import Field
from pydantic.dataclasses import dataclass

from .serialization import RECORD_CONFIG
from .token_counter import TokenUsage


@dataclass(frozen=True, config=RECORD_CONFIG)
class TextModelInfo:
    """Static metadata for a text model.

    Looked up from a registry list and never mutated after load.
    """
    name: str
    aliases: Tuple[str, ...] = ()
    currency: Optional[str] = None
    character_is_token: bool = False  # provider bills characters, not tokens
    prompt_token_cost_per_1m: Optional[float] = Field(default=None, alias="promptTokenCostPer1M")
    completion_token_cost_per_1m: Optional[float] = Field(default=None, alias="completionTokenCostPer1M")
    provider: Optional[str] = None


def find_item_by_name_or_alias(
    items: Sequence[TextModelInfo],
    name: str
) -> Optional[TextModelInfo]:
    """Find the first model whose name or one of its aliases matches.

    Args:
        items: Ordered registry of model metadata
        name: Model identifier or alias to look up

    Returns:
        The matching TextModelInfo, or None if nothing matches
    """
    for item in items:
        if item.name == name or name in item.aliases:
            return item
    return None


def calculate_cost(info: TextModelInfo, usage: TokenUsage) -> Optional[Decimal]:
    """Calculate the cost of a model call with conservative rounding.

    Args:
        info: Model metadata carrying per-1M token prices
        usage: Token usage reported for the call

    Returns:
        Total cost rounded UP to 6 decimal places, or None if the model
        has no pricing information
    """
    if info.prompt_token_cost_per_1m is None and info.completion_token_cost_per_1m is None:
        return None

    million = Decimal("1000000")
    prompt_price = Decimal(str(info.prompt_token_cost_per_1m or 0))
    completion_price = Decimal(str(info.completion_token_cost_per_1m or 0))

    # (tokens / 1M) * cost_per_1M
    prompt_cost = (Decimal(usage.prompt_tokens) / million) * prompt_price
    completion_cost = (Decimal(usage.completion_tokens) / million) * completion_price

    total_cost = prompt_cost + completion_cost
    return total_cost.quantize(Decimal("0.000001"), rounding=ROUND_UP)
