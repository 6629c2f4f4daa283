from __future__ import annotations

from dataclasses import dataclass, replace

from dibind._internal.binding import ArgumentsHolder
from dibind._internal.executables import ExecutableDescriptor
from dibind._internal.weights import MAX_WEIGHT


@dataclass(frozen=True, slots=True)
class CandidateSelection:
    """Best candidate seen so far while folding over sorted candidates.

    A strictly lower weight replaces the incumbent and forgets recorded ties.
    An equal weight records both candidates as tied when the caller considers
    the tie meaningful.
    """

    weight: int = MAX_WEIGHT
    executable: ExecutableDescriptor | None = None
    holder: ArgumentsHolder | None = None
    tied: tuple[ExecutableDescriptor, ...] = ()

    def offer(
        self,
        executable: ExecutableDescriptor,
        holder: ArgumentsHolder,
        weight: int,
        *,
        record_tie: bool = True,
    ) -> CandidateSelection:
        """Return the selection after considering one more bound candidate.

        Args:
            executable: Candidate executable.
            holder: Arguments bound to the candidate.
            weight: Candidate weight; lower is better.
            record_tie: Whether an equal weight counts as an ambiguity.

        """
        if weight < self.weight:
            return CandidateSelection(weight=weight, executable=executable, holder=holder)
        if self.executable is not None and weight == self.weight and record_tie:
            tied = self.tied or (self.executable,)
            return replace(self, tied=(*tied, executable))
        return self

    @property
    def ambiguous(self) -> bool:
        return bool(self.tied)
