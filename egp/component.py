"""
Component Model

A Component is a blueprint instantiated with concrete geometry: one randomly
sampled binding vector per strong and weak site, each of length
``total_activities``. Matching compares component *profiles*, which blend the
one-hot activity identity with the average of the component's own binding
vectors.

Author: EGP Team
License: MIT
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from . import vectors
from .rng import RandomSource

if TYPE_CHECKING:
    from .blueprints import Blueprint

# Weight of the expected-children average against the identity one-hot
PROFILE_BIAS = 0.5


def random_binding_sites(groups: list[int], total_activities: int, rng: RandomSource) -> list[list[float]]:
    """Sample one uniform [0, 1) vector per site."""
    return [[rng.random() for _ in range(total_activities)] for _ in groups]


class Component(BaseModel):
    """Instantiated, geometry-bearing unit."""

    model_config = ConfigDict(validate_assignment=True)

    activity: int = Field(ge=0)
    label: str

    # Strong sites express new children; weak sites link to already expressed nodes
    strong_sites: list[list[float]] = Field(default_factory=list)
    strong_groups: list[int] = Field(default_factory=list)
    weak_sites: list[list[float]] = Field(default_factory=list)
    weak_groups: list[int] = Field(default_factory=list)

    @classmethod
    def from_blueprint(cls, blueprint: Blueprint, total_activities: int, rng: RandomSource) -> Component:
        """Instantiate ``blueprint`` with freshly sampled binding vectors.

        Strong-site vectors are drawn before weak-site vectors.
        """
        strong_groups = list(blueprint.strong_groups)
        weak_groups = list(blueprint.weak_groups)
        return cls(
            activity=blueprint.activity,
            label=blueprint.label,
            strong_sites=random_binding_sites(strong_groups, total_activities, rng),
            strong_groups=strong_groups,
            weak_sites=random_binding_sites(weak_groups, total_activities, rng),
            weak_groups=weak_groups,
        )

    @property
    def has_binding_sites(self) -> bool:
        return bool(self.strong_sites or self.weak_sites)

    def activity_vector(self, total_activities: int) -> vectors.Vector:
        return vectors.one_hot(self.activity, total_activities)

    def profile(self, total_activities: int, bias: float = PROFILE_BIAS) -> vectors.Vector:
        """Matching signature.

        one_hot(activity) when the component has no binding sites, otherwise
        (1 - bias) * one_hot(activity) + bias * average(strong + weak sites).
        """
        activity_vector = self.activity_vector(total_activities)
        both = self.strong_sites + self.weak_sites

        if not both:
            return activity_vector

        activity_scaled = vectors.scale(activity_vector, 1.0 - bias)
        bindings_scaled = vectors.scale(vectors.average(both), bias)
        return vectors.sum(activity_scaled, bindings_scaled)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()


__all__ = ["Component", "PROFILE_BIAS", "random_binding_sites"]
