"""
Reserved word recognition for the Serqlane lexer.

Keywords are at most eight bytes long, so a candidate lexeme is mirrored into
a zero padded 8-byte buffer and compared against fixed width table entries.
Two recognizers are provided and always agree:

- `perfect_hash_keyword` narrows the buffer to a single table slot with a
  minimal perfect hash and then verifies that slot byte for byte.
- `ladder_keyword` dispatches on the first byte and compares against the
  (at most three) keywords sharing it.

The hash tables below are generated offline by `generate_tables`, see
scripts/perfect_hash.py. Regenerate them whenever the keyword list changes;
tables from one run must never be mixed with a keyword order from another.
"""

import random
import string
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .tokens import KEYWORDS, MAX_KEYWORD_LEN, TokenKind

Buffer = Union[bytes, bytearray]


def _pad(word: str) -> bytes:
    data = word.encode("ascii")
    if len(data) > MAX_KEYWORD_LEN:
        raise ValueError(f"keyword too long: {word!r}")
    return data + b"\0" * (MAX_KEYWORD_LEN - len(data))


# Keyword order the tables below were generated for. The perfect hash maps
# each keyword to its index in this order, so it must not be re-sorted.
KEYWORD_ORDER: Tuple[str, ...] = (
    "break", "const", "continue", "else", "enum", "false", "for", "fn",
    "if", "let", "mut", "pub", "return", "true", "while",
)

KEYWORD_TABLE: Tuple[Tuple[bytes, TokenKind], ...] = tuple(
    (_pad(word), KEYWORDS[word]) for word in KEYWORD_ORDER
)

# Generated tables for the keyword list above.
G = (
    0, 2, 0, 31, 0, 0, 19, 0, 0, 0, 26, 0, 0, 19, 0, 9,
    0, 0, 3, 10, 0, 0, 25, 0, 14, 0, 7, 0, 0, 17, 9, 6,
)
S1 = b"kpOWHt9r"
S2 = b"Two9MDXf"
NG = 32


def keyword_hash(key: Buffer, length: int, salt: bytes, size: int = NG) -> int:
    """Salted byte sum of the first `length` bytes of `key`, modulo `size`."""
    total = 0
    for i in range(length):
        total += salt[i % len(salt)] * key[i]
    return total % size


def keyword_slot(key: Buffer, length: int, g: Sequence[int] = G,
                 s1: bytes = S1, s2: bytes = S2, size: int = NG) -> int:
    return (g[keyword_hash(key, length, s1, size)] + g[keyword_hash(key, length, s2, size)]) % size


def perfect_hash_keyword(buf: Buffer, length: int) -> Optional[TokenKind]:
    """
    Classify a keyword candidate with the perfect hash.

    Args:
        buf: 8-byte buffer holding the candidate, zero padded after `length`
        length: Number of bytes of `buf` in use

    Returns:
        The keyword kind, or None if the buffer holds no keyword
    """
    if length <= 0 or length > MAX_KEYWORD_LEN:
        return None

    slot = keyword_slot(buf, length)
    if slot < len(KEYWORD_TABLE):
        entry, kind = KEYWORD_TABLE[slot]
        # The hash is only collision free over the keyword set itself.
        if buf == entry:
            return kind
    return None


def _build_ladder() -> Dict[int, Tuple[Tuple[bytes, TokenKind], ...]]:
    rungs: Dict[int, List[Tuple[bytes, TokenKind]]] = defaultdict(list)
    for entry, kind in KEYWORD_TABLE:
        rungs[entry[0]].append((entry, kind))
    return {first: tuple(entries) for first, entries in rungs.items()}


_LADDER = _build_ladder()


def ladder_keyword(buf: Buffer, length: int) -> Optional[TokenKind]:
    """Classify a keyword candidate by dispatching on its first byte."""
    if length <= 0 or length > MAX_KEYWORD_LEN:
        return None

    for entry, kind in _LADDER.get(buf[0], ()):
        if buf == entry:
            return kind
    return None


STRATEGIES = {
    "perfect_hash": perfect_hash_keyword,
    "ladder": ladder_keyword,
}


def lookup_keyword(word: str, strategy: str = "perfect_hash") -> Optional[TokenKind]:
    """
    Convenience wrapper that classifies a whole word.

    Words that are not short lowercase ASCII can never be keywords.
    """
    if not word or len(word) > MAX_KEYWORD_LEN:
        return None
    if not all("a" <= ch <= "z" for ch in word):
        return None
    return STRATEGIES[strategy](_pad(word), len(word))


# ============================================================================
# Offline table generation
# ============================================================================

@dataclass(frozen=True)
class HashTables:
    """Output of one successful generator run."""
    g: Tuple[int, ...]
    s1: bytes
    s2: bytes
    size: int

    def slot(self, word: str) -> int:
        key = word.encode("ascii")
        return keyword_slot(key, len(key), self.g, self.s1, self.s2, self.size)


class _Graph:
    """
    Undirected graph over hash values, one edge per keyword.

    A perfect hash exists for a set of salts when the graph is acyclic: every
    vertex can then be given a value so that the two values at the ends of
    each edge add up to the keyword's index.
    """

    def __init__(self, size: int):
        self.size = size
        self.adjacent: Dict[int, List[Tuple[int, int]]] = defaultdict(list)

    def connect(self, v1: int, v2: int, value: int):
        self.adjacent[v1].append((v2, value))
        self.adjacent[v2].append((v1, value))

    def assign_values(self) -> Optional[List[int]]:
        values = [-1] * self.size
        visited = [False] * self.size

        for root in range(self.size):
            if visited[root]:
                continue

            values[root] = 0
            pending = [(None, root)]
            while pending:
                parent, vertex = pending.pop()
                visited[vertex] = True

                skip_parent = True
                for neighbor, value in self.adjacent[vertex]:
                    if skip_parent and neighbor == parent:
                        skip_parent = False
                        continue
                    if visited[neighbor]:
                        return None  # cycle
                    pending.append((vertex, neighbor))
                    values[neighbor] = (value - values[vertex]) % self.size

        return [max(v, 0) for v in values]


SALT_ALPHABET = (string.ascii_letters + string.digits).encode("ascii")


def generate_tables(keywords: Sequence[str], size: int = NG, seed: Optional[int] = None,
                    max_attempts: int = 10000) -> HashTables:
    """
    Search for salts and a G table that hash `keywords` onto their indices.

    Args:
        keywords: Keyword list, in table order
        size: Number of hash buckets; must exceed the number of keywords
        seed: Seed for reproducible runs
        max_attempts: Give up after this many salt pairs

    Raises:
        ValueError: If the keyword list is unusable or no tables were found
    """
    if len(set(keywords)) != len(keywords):
        raise ValueError("keyword list contains duplicates")
    if size <= len(keywords):
        raise ValueError(f"table size {size} too small for {len(keywords)} keywords")
    for word in keywords:
        _pad(word)

    rng = random.Random(seed)
    keys = [word.encode("ascii") for word in keywords]

    for _ in range(max_attempts):
        s1 = bytes(rng.choice(SALT_ALPHABET) for _ in range(MAX_KEYWORD_LEN))
        s2 = bytes(rng.choice(SALT_ALPHABET) for _ in range(MAX_KEYWORD_LEN))

        graph = _Graph(size)
        for index, key in enumerate(keys):
            h1 = keyword_hash(key, len(key), s1, size)
            h2 = keyword_hash(key, len(key), s2, size)
            if h1 == h2:
                break
            graph.connect(h1, h2, index)
        else:
            values = graph.assign_values()
            if values is None:
                continue

            tables = HashTables(tuple(values), s1, s2, size)
            if all(tables.slot(word) == index for index, word in enumerate(keywords)):
                return tables

    raise ValueError(f"no perfect hash found in {max_attempts} attempts")


def render_tables(tables: HashTables) -> str:
    """Format `tables` as the constant block used at the top of this module."""
    lines = ["G = ("]
    for start in range(0, len(tables.g), 16):
        row = ", ".join(str(v) for v in tables.g[start:start + 16])
        lines.append(f"    {row},")
    lines.append(")")
    lines.append(f"S1 = {tables.s1!r}")
    lines.append(f"S2 = {tables.s2!r}")
    lines.append(f"NG = {tables.size}")
    return "\n".join(lines)
