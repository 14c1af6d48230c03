"""Token cost estimation."""

from .providers import COST_PER_1K_TOKENS, DEFAULT_COST_PER_1K_TOKENS, ProviderTag


def estimate_cost(provider: "str | ProviderTag", tokens: int) -> float:
    """Estimated USD cost of ``tokens`` on ``provider``.

    Unknown providers are charged at the default rate.
    """
    if tokens < 0:
        raise ValueError("Token count cannot be negative")
    try:
        rate = COST_PER_1K_TOKENS[ProviderTag(provider)]
    except ValueError:
        rate = DEFAULT_COST_PER_1K_TOKENS
    return tokens / 1000 * rate
