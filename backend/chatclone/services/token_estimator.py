"""
Character-length token estimate used for context budgeting.
"""

import math
from typing import Optional

CHARS_PER_TOKEN = 4


def estimate_tokens(text: Optional[str], chars_per_token: int = CHARS_PER_TOKEN) -> int:
    """
    Approximate the token count of text.

    This is a budget heuristic, not a tokenizer: ceil(len / chars_per_token).
    """
    if not text:
        return 0
    return math.ceil(len(text) / chars_per_token)
