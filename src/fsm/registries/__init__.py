"""Dispatch tables mapping block kinds to compile rules.

Built once at import time. Each value rule returns a CompiledExpression;
each statement rule returns a code fragment (possibly empty).
"""

from .statements import STATEMENT_RULES, StatementRule
from .values import VALUE_RULES, ValueRule

__all__ = [
    "STATEMENT_RULES",
    "StatementRule",
    "VALUE_RULES",
    "ValueRule",
]
