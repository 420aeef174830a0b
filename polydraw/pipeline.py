"""Creation pipeline turning a raw stroke into candidate rings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Sequence, Tuple

import numpy as np

from .concave import concave_hull
from .core.config import CreateOptions
from .core.errors import HullConstructionError
from .core.geometry_utils import as_points, fill_nonzero
from .simplify import simplify

logger = logging.getLogger(__name__)

PipelineStep = Callable[[List[np.ndarray], "PipelineContext"], "StepResult"]


@dataclass
class PipelineContext:
    """Runtime context shared across pipeline steps."""

    options: CreateOptions
    metadata: Dict[str, object] = field(default_factory=dict)


@dataclass
class StepResult:
    """Outcome of running a single pipeline step."""

    name: str
    rings: List[np.ndarray]
    changed: bool
    message: str = ""


def simplify_step(rings: List[np.ndarray], context: PipelineContext) -> StepResult:
    factor = context.options.simplify_factor
    simplified = [simplify(ring, factor) for ring in rings]
    changed = any(not np.array_equal(a, b) for a, b in zip(rings, simplified))
    return StepResult("simplify", simplified, changed, f"factor={factor}")


def concave_step(rings: List[np.ndarray], context: PipelineContext) -> StepResult:
    """Apply the concave hull, keeping the simplified ring when the hull fails."""
    options = context.options
    if not options.concave_polygon:
        return StepResult("concave", rings, False, "disabled")

    hulled = []
    fallbacks = 0
    for ring in rings:
        try:
            hulled.append(
                concave_hull(ring, k=options.hull_neighbours, max_iterations=options.hull_max_iterations)
            )
        except HullConstructionError as exc:
            logger.warning("Concave hull failed (%s); keeping the simplified ring", exc)
            hulled.append(ring)
            fallbacks += 1

    context.metadata["hull_fallbacks"] = fallbacks
    return StepResult("concave", hulled, fallbacks < len(rings), f"{fallbacks} fallback(s)")


def fill_step(rings: List[np.ndarray], context: PipelineContext) -> StepResult:
    """Split self-crossing rings into simple rings using the non-zero rule."""
    filled: List[np.ndarray] = []
    for ring in rings:
        filled.extend(fill_nonzero(ring))
    return StepResult("fill", filled, len(filled) != len(rings))


DEFAULT_STEPS: Tuple[PipelineStep, ...] = (simplify_step, concave_step, fill_step)


def run_steps(
    initial_rings: List[np.ndarray],
    steps: Sequence[PipelineStep],
    context: PipelineContext,
) -> Tuple[List[np.ndarray], List[StepResult]]:
    """Execute the supplied steps in order, feeding each the previous output."""
    rings = initial_rings
    history: List[StepResult] = []

    for step in steps:
        result = step(rings, context)
        rings = result.rings
        history.append(result)
        logger.debug("Step %s: %d ring(s), changed=%s %s", result.name, len(rings), result.changed, result.message)

    return rings, history


def build_candidates(
    points: Iterable[Sequence[float]],
    options: CreateOptions,
    steps: Sequence[PipelineStep] = DEFAULT_STEPS,
) -> List[np.ndarray]:
    """Run a raw stroke through simplify, concave hull and non-zero fill.

    Raises:
        InsufficientPointsError: If the stroke has fewer than 3 distinct points
        DegeneratePolygonError: If the stroke encloses no area
    """
    context = PipelineContext(options=options)
    rings, history = run_steps([as_points(points)], steps, context)

    logger.debug(
        "Built %d candidate ring(s); changed by: %s; hull fallbacks: %s",
        len(rings),
        ", ".join(h.name for h in history if h.changed) or "none",
        context.metadata.get("hull_fallbacks", 0),
    )
    return rings


__all__ = [
    "PipelineContext",
    "PipelineStep",
    "StepResult",
    "DEFAULT_STEPS",
    "simplify_step",
    "concave_step",
    "fill_step",
    "run_steps",
    "build_candidates",
]
