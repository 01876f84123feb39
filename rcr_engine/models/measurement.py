from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Tuple

from .direction import DirectionType, direction_of

RNA_ABUNDANCE = "rnaAbundance"


@dataclass(frozen=True)
class Term:
    """A single-parameter term such as ``r(HGNC:TP53)``."""

    namespace: str
    value: str
    function: str = RNA_ABUNDANCE

    def short_form(self) -> str:
        prefix = "r" if self.function == RNA_ABUNDANCE else self.function
        return f"{prefix}({self.namespace}:{self.value})"

    def __str__(self) -> str:
        return self.short_form()


@dataclass(frozen=True)
class Measurement:
    """An observed fold change for one RNA-abundance term.

    The direction is derived from the sign of ``fold_change`` and is not part
    of equality.
    """

    term: Term
    fold_change: float
    p_value: float | None = None
    abundance: float | None = None
    analyst_selection: bool = False
    direction: DirectionType = field(init=False, compare=False, repr=False)

    def __post_init__(self):
        if self.term is None:
            raise ValueError("term must not be blank")
        if self.term.function != RNA_ABUNDANCE:
            raise ValueError("term must be an RNA abundance of a single parameter")
        if self.fold_change is None:
            raise ValueError("fold_change must not be None")
        # None is treated as "not selected"
        object.__setattr__(self, "analyst_selection", bool(self.analyst_selection))
        object.__setattr__(self, "direction", direction_of(self.fold_change))


@dataclass(frozen=True)
class Comparison:
    """One statistical contrast: a name and its ordered measurements."""

    name: str
    measurements: Tuple[Measurement, ...]

    def __init__(self, name: str, measurements: Iterable[Measurement]):
        object.__setattr__(self, "name", name)
        object.__setattr__(self, "measurements", tuple(measurements))

    def __len__(self) -> int:
        return len(self.measurements)
