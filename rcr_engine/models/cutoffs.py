from __future__ import annotations

import logging
from typing import Any, Dict

from .measurement import Measurement


class Cutoffs:
    """Significance filter turning mapped measurements into state changes.

    In analyst-selection mode only ``Measurement.analyst_selection`` is
    consulted. In numeric mode a measurement is rejected when

    * ``abs(fold_change)`` is below ``fold_change``,
    * ``p_value`` is above ``p_value``,
    * ``abundance`` is below ``abundance``.

    A cutoff left as ``None`` places no constraint on its axis.
    """

    __slots__ = ("_use_analyst_selection", "_fold_change", "_p_value", "_abundance")

    def __init__(
        self,
        use_analyst_selection: bool = False,
        fold_change: float | None = None,
        p_value: float | None = None,
        abundance: float | None = None,
    ):
        if use_analyst_selection and any(
            v is not None for v in (fold_change, p_value, abundance)
        ):
            raise ValueError("numeric cutoffs cannot be combined with analyst selection")
        self._use_analyst_selection = bool(use_analyst_selection)
        self._fold_change = None if fold_change is None else float(fold_change)
        self._p_value = None if p_value is None else float(p_value)
        self._abundance = None if abundance is None else float(abundance)

    @classmethod
    def analyst_selection(cls) -> "Cutoffs":
        return cls(use_analyst_selection=True)

    @classmethod
    def numeric(
        cls,
        fold_change: float | None = None,
        p_value: float | None = None,
        abundance: float | None = None,
    ) -> "Cutoffs":
        return cls(False, fold_change, p_value, abundance)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any] | None) -> "Cutoffs":
        """Build from the ``cutoffs`` block of a run configuration."""
        cfg = dict(cfg or {})
        unknown = set(cfg) - {"use_analyst_selection", "fold_change", "p_value", "abundance"}
        if unknown:
            raise ValueError(f"Unknown cutoff options: {sorted(unknown)}")
        if cfg.get("use_analyst_selection", False):
            ignored = [k for k in ("fold_change", "p_value", "abundance") if cfg.get(k) is not None]
            if ignored:
                logging.getLogger("rcr").warning(
                    "Cutoffs %s ignored when using analyst selection", ", ".join(ignored)
                )
            return cls.analyst_selection()
        return cls.numeric(cfg.get("fold_change"), cfg.get("p_value"), cfg.get("abundance"))

    @property
    def use_analyst_selection(self) -> bool:
        return self._use_analyst_selection

    @property
    def fold_change(self) -> float | None:
        return self._fold_change

    @property
    def p_value(self) -> float | None:
        return self._p_value

    @property
    def abundance(self) -> float | None:
        return self._abundance

    def evaluate(self, m: Measurement) -> bool:
        if self._use_analyst_selection:
            return m.analyst_selection
        logger = logging.getLogger("rcr")
        if self._fold_change is not None and abs(m.fold_change) < self._fold_change:
            logger.debug("%s fold change rejection", m.term)
            return False
        if self._p_value is not None and (m.p_value is None or m.p_value > self._p_value):
            logger.debug("%s p-value rejection", m.term)
            return False
        if self._abundance is not None and (m.abundance is None or m.abundance < self._abundance):
            logger.debug("%s abundance rejection", m.term)
            return False
        return True

    def __repr__(self) -> str:
        if self._use_analyst_selection:
            return "Cutoffs(use_analyst_selection=True)"
        return (
            f"Cutoffs(fold_change={self._fold_change}, p_value={self._p_value}, "
            f"abundance={self._abundance})"
        )
