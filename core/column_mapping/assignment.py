"""Column-to-field assignment strategies.

Both strategies take scored (column, field) pairs and return a one-to-one
assignment: each column gets at most one field and each field is claimed by
at most one column.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Type

import numpy as np
from scipy.optimize import linear_sum_assignment

from core.column_mapping.model import MatchCandidate


@dataclass(frozen=True)
class ScoredPair:
    """One column's candidate for one field."""

    column_index: int
    candidate: MatchCandidate

    def sort_key(self):
        """Confidence desc, strategy rank, then original column order."""
        return self.candidate.sort_key() + (self.column_index,)


class AssignmentStrategy(ABC):
    """Interface for resolving scored pairs into a collision-free assignment."""

    name = "base"

    @abstractmethod
    def assign(self, pairs: List[ScoredPair]) -> Dict[int, MatchCandidate]:
        """Return column index -> chosen candidate."""


class GreedyAssignment(AssignmentStrategy):
    """Claim pairs in global confidence order, skipping already-claimed sides."""

    name = "greedy"

    def assign(self, pairs: List[ScoredPair]) -> Dict[int, MatchCandidate]:
        assigned: Dict[int, MatchCandidate] = {}
        claimed_fields = set()
        for pair in sorted(pairs, key=ScoredPair.sort_key):
            field_key = pair.candidate.field_key
            if pair.column_index in assigned or field_key in claimed_fields:
                continue
            assigned[pair.column_index] = pair.candidate
            claimed_fields.add(field_key)
        return assigned


class OptimalAssignment(AssignmentStrategy):
    """Maximum-weight bipartite matching (Hungarian algorithm via scipy)."""

    name = "optimal"

    def assign(self, pairs: List[ScoredPair]) -> Dict[int, MatchCandidate]:
        if not pairs:
            return {}

        ordered = sorted(pairs, key=ScoredPair.sort_key)
        columns = sorted({p.column_index for p in ordered})
        fields = []
        for pair in ordered:
            if pair.candidate.field_key not in fields:
                fields.append(pair.candidate.field_key)
        row_of = {c: i for i, c in enumerate(columns)}
        col_of = {f: j for j, f in enumerate(fields)}

        weights = np.zeros((len(columns), len(fields)))
        lookup = {}
        for pair in ordered:
            i, j = row_of[pair.column_index], col_of[pair.candidate.field_key]
            if (i, j) not in lookup:
                # Strategy rank breaks exact ties in favour of stronger matches
                weights[i, j] = pair.candidate.confidence - pair.candidate.strategy.rank * 1e-6
                lookup[(i, j)] = pair.candidate

        rows, cols = linear_sum_assignment(weights, maximize=True)
        assigned: Dict[int, MatchCandidate] = {}
        for i, j in zip(rows, cols):
            candidate = lookup.get((int(i), int(j)))
            if candidate is not None:
                assigned[columns[int(i)]] = candidate
        return assigned


STRATEGIES: Dict[str, Type[AssignmentStrategy]] = {
    GreedyAssignment.name: GreedyAssignment,
    OptimalAssignment.name: OptimalAssignment,
}


def get_strategy(name: str) -> AssignmentStrategy:
    """Build an assignment strategy by name ("greedy" or "optimal")."""
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unknown assignment strategy '{name}'. Must be one of: {sorted(STRATEGIES)}") from None
