"""Pairwise separation checks between building positions."""

import math
from dataclasses import dataclass

from .geodesy import LonLat, ground_distance


@dataclass
class SeparationViolation:
    """A minimum-separation violation between two building positions."""

    index1: int
    index2: int
    actual_distance: float
    required_distance: float
    violation_amount: float  # How much under required separation

    def __str__(self) -> str:
        return (
            f"Separation violation: building {self.index1} <-> {self.index2}: "
            f"{self.actual_distance:.2f}m (required {self.required_distance:.2f}m, "
            f"violation {self.violation_amount:.2f}m)"
        )


def are_too_close(p1: LonLat, p2: LonLat, min_separation: float) -> bool:
    """Check if two lon/lat positions are closer than the minimum separation."""
    return ground_distance(p1, p2) < min_separation


def compute_pairwise_distances(positions: list[LonLat]) -> dict[tuple[int, int], float]:
    """Compute ground distance between all pairs of positions.

    Args:
        positions: List of (lon, lat) positions

    Returns:
        Dict mapping (i, j) index pairs (i < j) to distances in meters
    """
    distances = {}
    for i in range(len(positions)):
        for j in range(i + 1, len(positions)):
            distances[(i, j)] = ground_distance(positions[i], positions[j])
    return distances


def check_separation_violations(
    positions: list[LonLat],
    min_separation: float,
) -> list[SeparationViolation]:
    """Check all pairwise separations against the minimum.

    Args:
        positions: List of (lon, lat) positions
        min_separation: Required separation in meters

    Returns:
        List of SeparationViolation objects for any violations
    """
    violations = []
    for (i, j), actual in compute_pairwise_distances(positions).items():
        if actual < min_separation:
            violations.append(SeparationViolation(
                index1=i,
                index2=j,
                actual_distance=actual,
                required_distance=min_separation,
                violation_amount=min_separation - actual,
            ))
    return violations


def get_minimum_separation(positions: list[LonLat]) -> float:
    """Smallest pairwise distance between positions (inf for fewer than two)."""
    distances = compute_pairwise_distances(positions)
    if not distances:
        return math.inf
    return min(distances.values())
