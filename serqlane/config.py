"""
Front end configuration.

A single CompilerOptions object is threaded through the lexer, the parser
and the command line host.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

KEYWORD_STRATEGIES = ("perfect_hash", "ladder")

ENV_PREFIX = "SERQLANE_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name}: expected a boolean, got {raw!r}")


@dataclass
class CompilerOptions:
    """
    Options for the Serqlane front end.

    Attributes:
        keep_comments: Emit COMMENT tokens instead of skipping comments
        keyword_strategy: "perfect_hash" or "ladder" keyword recognizer
        integer_bits: Width of the unsigned integer type literals must fit
        allow_trailing_comma: Accept `f(a, b,)` and `fn f(a: T,)`
        max_nesting_depth: Deepest nesting of expressions and blocks the
            parser accepts before reporting an error
    """
    keep_comments: bool = False
    keyword_strategy: str = "perfect_hash"
    integer_bits: int = 64
    allow_trailing_comma: bool = False
    max_nesting_depth: int = 128

    def __post_init__(self):
        if self.keyword_strategy not in KEYWORD_STRATEGIES:
            raise ValueError(
                f"unknown keyword strategy {self.keyword_strategy!r}, "
                f"expected one of {', '.join(KEYWORD_STRATEGIES)}"
            )
        if not 1 <= self.integer_bits <= 64:
            raise ValueError(f"integer_bits must be between 1 and 64, got {self.integer_bits}")
        if self.max_nesting_depth < 1:
            raise ValueError(f"max_nesting_depth must be positive, got {self.max_nesting_depth}")

    @property
    def max_integer(self) -> int:
        return (1 << self.integer_bits) - 1

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CompilerOptions":
        """
        Build options from SERQLANE_* environment variables.

        Recognized: SERQLANE_KEEP_COMMENTS, SERQLANE_KEYWORD_STRATEGY,
        SERQLANE_INTEGER_BITS, SERQLANE_ALLOW_TRAILING_COMMA and
        SERQLANE_MAX_NESTING_DEPTH. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        kwargs = {}

        for field in ("keep_comments", "allow_trailing_comma"):
            name = ENV_PREFIX + field.upper()
            if name in env:
                kwargs[field] = _parse_bool(name, env[name])

        name = ENV_PREFIX + "KEYWORD_STRATEGY"
        if name in env:
            kwargs["keyword_strategy"] = env[name].strip()

        for field in ("integer_bits", "max_nesting_depth"):
            name = ENV_PREFIX + field.upper()
            if name in env:
                try:
                    kwargs[field] = int(env[name])
                except ValueError:
                    raise ValueError(f"{name}: expected an integer, got {env[name]!r}") from None

        return cls(**kwargs)
