"""
Context window selection.

Trims a conversation to the newest messages that fit a token budget.
"""

from __future__ import annotations

from typing import Protocol, Sequence, TypeVar

from chatclone.core.config import Settings
from chatclone.services.token_estimator import CHARS_PER_TOKEN, estimate_tokens


class HasContent(Protocol):
    content: str


M = TypeVar("M", bound=HasContent)


def context_budget(settings: Settings) -> int:
    """Tokens available for history after reserving room for the reply."""
    return max(settings.MAX_CONTEXT_TOKENS - settings.RESERVE_TOKENS, 0)


def select_context(
    messages: Sequence[M],
    max_context_tokens: int,
    chars_per_token: int = CHARS_PER_TOKEN,
) -> list[M]:
    """
    Return the longest suffix of messages whose estimated tokens fit the budget.

    If the newest message alone is over budget it is still returned, so the
    model never receives an empty context.

    Args:
        messages: Conversation in order, oldest first
        max_context_tokens: Token budget
        chars_per_token: Estimator divisor

    Returns:
        A new list holding a suffix of messages
    """
    if not messages:
        return []

    costs = [estimate_tokens(m.content, chars_per_token) for m in messages]
    if sum(costs) <= max_context_tokens:
        return list(messages)

    start = len(messages)
    total = 0
    for index in range(len(messages) - 1, -1, -1):
        if total + costs[index] > max_context_tokens:
            break
        total += costs[index]
        start = index

    if start == len(messages):
        return [messages[-1]]
    return list(messages[start:])
