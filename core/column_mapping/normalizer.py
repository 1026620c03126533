"""Header normalization.

Turns a human-authored header ("Memory MB", "agent_name", "cpuCores") into a
comparable token form: camelCase boundaries split, lower-cased, punctuation and
underscores collapsed, known abbreviations expanded token by token.
"""

import re
from dataclasses import dataclass
from typing import Tuple

# Expanded before any comparison so "Mem Limit" and "Memory Limit" agree.
ABBREVIATIONS = {
    "qty": "quantity",
    "dir": "directory",
    "mem": "memory",
    "ram": "memory",
    "cpu": "cpu",
    "cpus": "cpu",
    "vcpu": "cpu",
    "env": "environment",
    "envs": "environment",
    "num": "number",
    "no": "number",
    "cnt": "count",
    "desc": "description",
    "col": "column",
    "ws": "workspace",
    "wd": "workspace",
    "lbl": "label",
    "lbls": "labels",
    "cfg": "config",
    "conf": "config",
    "max": "maximum",
}

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
# Headers that carry no meaning of their own: "", "12", "Column 3", "Unnamed: 0".
_PLACEHOLDER = re.compile(
    r"^(?:(?:column|field|unnamed|untitled|header)(?: \d+)*|\d+(?: \d+)*)?$"
)


@dataclass(frozen=True)
class NormalizedToken:
    """Normalized header: ordered word tokens."""

    tokens: Tuple[str, ...]

    @property
    def text(self) -> str:
        return " ".join(self.tokens)

    @property
    def compact(self) -> str:
        """Tokens joined without separator; used for equality and edit distance."""
        return "".join(self.tokens)

    @property
    def is_empty(self) -> bool:
        return not self.tokens

    @property
    def is_placeholder(self) -> bool:
        """True for blank, purely numeric, or generic "Column N" headers."""
        return bool(_PLACEHOLDER.match(self.text))

    def contains(self, other: "NormalizedToken") -> bool:
        """Whether other's tokens appear as a contiguous run inside ours."""
        size = len(other.tokens)
        if size == 0 or size > len(self.tokens):
            return False
        return any(
            self.tokens[i:i + size] == other.tokens
            for i in range(len(self.tokens) - size + 1)
        )


def normalize(raw: str) -> NormalizedToken:
    """
    Normalize a raw header string.

    Args:
        raw: Header text as found in the file

    Returns:
        NormalizedToken (empty for blank headers)
    """
    text = _CAMEL_BOUNDARY.sub(" ", raw.strip()).lower()
    words = [w for w in _NON_ALNUM.split(text) if w]
    return NormalizedToken(tokens=tuple(ABBREVIATIONS.get(w, w) for w in words))
