"""Adjustment parameters: domain, constraint and solver settings.

A flat dataclass. Factories copy what they need when they are constructed,
so changing a Parameters instance during a solve has no effect on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from cosaf.core.types import SolverType, Vision


def _default_checks() -> dict[Vision, bool]:
    return {
        Vision.TRICHROMACY: False,
        Vision.PROTANOPIA: True,
        Vision.DEUTERANOPIA: True,
        Vision.MONOCHROMACY: False,
    }


def _default_targets() -> dict[Vision, float]:
    return {vision: 20.0 for vision in Vision}


@dataclass
class Parameters:
    # Domain settings
    max_difference: float = 50.0
    max_hue_difference: float = 3.5
    max_tone_difference: float = 4.0
    resolution: float = 5.0

    # Constraint settings
    vision_checks: dict[Vision, bool] = field(default_factory=_default_checks)
    target_differences: dict[Vision, float] = field(default_factory=_default_targets)  # used without ratio mode
    ratio_mode: bool = True
    ratio_per_vision: bool = False  # ratio mode only: one ratio per vision instead of a shared one

    hue_preserved: bool = True
    hue_tolerance: float = 1.75  # 0: same, 1: adjacent, 2-3: similar (max: 3.5)
    tone_preserved: bool = True
    tone_tolerance: float = 2.0  # 0.5: same, 2: similar (max: 4)

    conspicuity_checked: bool = False
    conspicuity_rate: float = 0.5  # [0.01, 0.99]

    # Solver settings
    time_limit: int | None = 8000  # milliseconds
    target_desirability: float | None = 0.8
    solver: SolverType = SolverType.FC
    bottleneck_resolved: bool = False

    def set_vision_checked(
        self, trichromacy: bool, protanopia: bool, deuteranopia: bool, monochromacy: bool
    ) -> Parameters:
        self.vision_checks = {
            Vision.TRICHROMACY: trichromacy,
            Vision.PROTANOPIA: protanopia,
            Vision.DEUTERANOPIA: deuteranopia,
            Vision.MONOCHROMACY: monochromacy,
        }
        return self

    def checks_vision(self, vision: Vision) -> bool:
        return self.vision_checks.get(vision, False)

    def checked_visions(self) -> list[Vision]:
        """Enabled visions in enumeration order."""
        return [v for v in Vision if self.checks_vision(v)]

    def set_target_differences(
        self, trichromacy: float, protanopia: float, deuteranopia: float, monochromacy: float
    ) -> Parameters:
        self.target_differences = {
            Vision.TRICHROMACY: trichromacy,
            Vision.PROTANOPIA: protanopia,
            Vision.DEUTERANOPIA: deuteranopia,
            Vision.MONOCHROMACY: monochromacy,
        }
        return self

    def target_difference(self, vision: Vision) -> float:
        return self.target_differences[vision]

    def strategy_names(self) -> tuple[str, str]:
        """(domain strategy, relation strategy) selected by the ratio settings."""
        if not self.ratio_mode:
            return 'global_radius', 'target_difference'
        return 'adjacent_radius', 'ratio_per_vision' if self.ratio_per_vision else 'ratio_average'
