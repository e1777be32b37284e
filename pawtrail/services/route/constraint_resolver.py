"""Merge per-pet constraints into the single constraint a shared walk must satisfy."""
from typing import Sequence

from pawtrail.errors import ValidationError
from pawtrail.models.request import PetConstraint, Reactivity

# Most conservative first
_ENERGY_ORDER = ("low", "medium", "high")
_MOBILITY_ORDER = ("limited", "good", "excellent")


class ConstraintResolver:
    """A combined walk follows the most restrictive pet present."""

    def merge(self, pets: Sequence[PetConstraint]) -> PetConstraint:
        if not pets:
            raise ValidationError("At least one pet must be selected")

        if len(pets) == 1:
            return pets[0].model_copy(deep=True)

        return PetConstraint(
            id="combined",
            weight_kg=max(p.weight_kg for p in pets),
            energy=self._most_conservative(_ENERGY_ORDER, [p.energy for p in pets]),
            age_years=max(p.age_years for p in pets),
            heat_sensitive=any(p.heat_sensitive for p in pets),
            reactive=Reactivity(
                dogs=any(p.reactive.dogs for p in pets),
                bikes=any(p.reactive.bikes for p in pets),
                kids=any(p.reactive.kids for p in pets),
            ),
            mobility=self._most_conservative(
                _MOBILITY_ORDER, [p.mobility for p in pets]
            ),
        )

    @staticmethod
    def _most_conservative(order, values):
        for level in order:
            if level in values:
                return level
        return order[-1]
