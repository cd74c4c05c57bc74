"""Built-in confidence boosts for the trigger matching engine.

- KeywordBoost: multiply the score of an id-prefixed family of
  constraints when indicator keywords are present
"""

from tether.triggers.builtin.keyword_boost import KeywordBoost

__all__ = [
    "KeywordBoost",
]
