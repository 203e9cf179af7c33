"""
Static metadata for OpenAI models.
"""

from ...core.pricing import TextModelInfo

# Prices in USD per 1M tokens
MODEL_INFO_OPENAI = [
    TextModelInfo(
        name="gpt-4o",
        aliases=("gpt-4o-2024-05-13", "gpt-4o-2024-08-06"),
        currency="usd",
        prompt_token_cost_per_1m=5.00,
        completion_token_cost_per_1m=15.00,
    ),
    TextModelInfo(
        name="gpt-4o-mini",
        aliases=("gpt-4o-mini-2024-07-18",),
        currency="usd",
        prompt_token_cost_per_1m=0.15,
        completion_token_cost_per_1m=0.60,
    ),
    TextModelInfo(
        name="gpt-4",
        aliases=("gpt-4-0613",),
        currency="usd",
        prompt_token_cost_per_1m=30.00,
        completion_token_cost_per_1m=60.00,
    ),
    TextModelInfo(
        name="gpt-4-32k",
        aliases=("gpt-4-32k-0613",),
        currency="usd",
        prompt_token_cost_per_1m=60.00,
        completion_token_cost_per_1m=120.00,
    ),
    TextModelInfo(
        name="gpt-3.5-turbo",
        aliases=("gpt-3.5-turbo-0125", "gpt-3.5-turbo-1106"),
        currency="usd",
        prompt_token_cost_per_1m=0.50,
        completion_token_cost_per_1m=1.50,
    ),
    TextModelInfo(
        name="gpt-3.5-turbo-instruct",
        currency="usd",
        prompt_token_cost_per_1m=1.50,
        completion_token_cost_per_1m=2.00,
    ),
    TextModelInfo(
        name="text-embedding-ada-002",
        currency="usd",
        prompt_token_cost_per_1m=0.10,
        completion_token_cost_per_1m=0.00,
    ),
]
