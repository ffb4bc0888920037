"""
Impact Classifier Module

Predicts how strongly a mutation changes a genome's visual output by
rendering the original and mutated genomes off-screen and comparing pixels.

Impact levels:
- SILENT: Output essentially identical (<5% of inked pixels differ)
- LOCAL: A single shape, position or color changed (5-25%)
- MAJOR: Several elements changed or truncated (25-60%)
- CATASTROPHIC: Global scramble, typically a frameshift (>=60%)

Public API:
    predict_mutation_impact(genome, mutation) -> ImpactPrediction
    classify_impact(pixel_diff, mutation_type) -> ImpactLevel
"""

import numpy as np
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union
from dataclasses import dataclass, field

from lexer import GenomeSyntaxError, clean_genome, tokenize
from mutation_engine import Mutation, MutationType
from vm import DEFAULT_MAX_INSTRUCTIONS, VMError, execute_genome
from visualization.canvas_renderer import MatplotlibRenderer


class ImpactLevel(Enum):
    """
    Enumeration of predicted visual impact.

    SILENT: Nearly identical output
    LOCAL: Localized change (one shape, color or position)
    MAJOR: Multiple shapes affected or early termination
    CATASTROPHIC: Output globally transformed or no longer renders
    """
    SILENT = "SILENT"
    LOCAL = "LOCAL"
    MAJOR = "MAJOR"
    CATASTROPHIC = "CATASTROPHIC"


class ConfidenceLevel(Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ImpactPredictionError(ValueError):
    """Raised when neither genome can be rendered."""


@dataclass
class ImpactPrediction:
    """
    Result of impact prediction.

    Attributes:
        impact: Predicted impact level
        confidence: Confidence score (0-1)
        confidence_level: Bucketed confidence
        pixel_diff_percent: Percent of inked pixels that differ (0-100)
        description: Human-readable explanation
        analysis: Dict with detected change details
    """
    impact: ImpactLevel
    confidence: float
    confidence_level: ConfidenceLevel
    pixel_diff_percent: float
    description: str
    analysis: Dict[str, Any] = field(default_factory=dict)


# Impact thresholds on pixel difference percent
IMPACT_THRESHOLDS = {
    'silent_max': 5.0,         # Below = SILENT
    'local_max': 25.0,         # Below = LOCAL
    'major_max': 60.0,         # Below = MAJOR, otherwise CATASTROPHIC
    'silent_type_max': 2.0,    # Silent mutations below this are always SILENT
    'channel_tolerance': 5,    # Per-channel difference counted as a change
    'color_change_max': 40.0,  # Diff range suggesting a recolor only
    'position_change_min': 10.0,
}

DEFAULT_CANVAS_SIZE = 200

# Background value above which a pixel counts as blank (white canvas)
INK_THRESHOLD = 250


def compute_pixel_diff(
    image_a: np.ndarray,
    image_b: np.ndarray,
    tolerance: int = IMPACT_THRESHOLDS['channel_tolerance']
) -> float:
    """
    Percent of inked pixels that differ between two RGB images.

    A pixel differs if any channel differs by more than `tolerance`. The
    denominator is the union of pixels inked (non-background) in either
    image, so a small shape on a large canvas still registers. Two blank
    canvases have 0% difference.

    Args:
        image_a, image_b: (H, W, 3) uint8 arrays of equal shape

    Returns:
        Percentage in [0, 100]
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes differ: {image_a.shape} vs {image_b.shape}"
        )

    a = image_a.astype(np.int16)
    b = image_b.astype(np.int16)
    changed = (np.abs(a - b) > tolerance).any(axis=-1)
    inked = (a < INK_THRESHOLD).any(axis=-1) | (b < INK_THRESHOLD).any(axis=-1)

    n_inked = int(inked.sum())
    if n_inked == 0:
        return 0.0
    return float((changed & inked).sum()) / n_inked * 100


def _render(
    genome: str,
    width: int,
    height: int,
    max_instructions: int = DEFAULT_MAX_INSTRUCTIONS
) -> Tuple[np.ndarray, bool]:
    """Render a genome. Returns the pixels and whether execution succeeded."""
    renderer = MatplotlibRenderer(width, height)
    try:
        execute_genome(genome, renderer, max_instructions=max_instructions)
        ok = True
    except (GenomeSyntaxError, VMError):
        ok = False
    return renderer.to_array(), ok


def classify_impact(
    pixel_diff: float,
    mutation_type: Union[MutationType, str],
    thresholds: Optional[Dict[str, float]] = None
) -> ImpactLevel:
    """Map a pixel difference percentage onto an impact level."""
    thresh = IMPACT_THRESHOLDS.copy()
    if thresholds:
        thresh.update(thresholds)

    if MutationType(mutation_type) == MutationType.SILENT and pixel_diff < thresh['silent_type_max']:
        return ImpactLevel.SILENT

    if pixel_diff < thresh['silent_max']:
        return ImpactLevel.SILENT
    elif pixel_diff < thresh['local_max']:
        return ImpactLevel.LOCAL
    elif pixel_diff < thresh['major_max']:
        return ImpactLevel.MAJOR
    return ImpactLevel.CATASTROPHIC


def calculate_confidence(
    mutation_type: Union[MutationType, str],
    impact: ImpactLevel
) -> Tuple[float, ConfidenceLevel]:
    """
    Confidence in a prediction given the mutation type.

    Direct substitutions (silent, nonsense, local missense) are the most
    predictable; frameshifts and indels cascade and are less so.
    """
    mutation_type = MutationType(mutation_type)

    if mutation_type == MutationType.SILENT:
        return 0.95, ConfidenceLevel.HIGH
    if mutation_type == MutationType.NONSENSE:
        return 0.9, ConfidenceLevel.HIGH
    if mutation_type == MutationType.MISSENSE and impact == ImpactLevel.LOCAL:
        return 0.85, ConfidenceLevel.HIGH
    if mutation_type == MutationType.POINT:
        return 0.7, ConfidenceLevel.MEDIUM
    if mutation_type == MutationType.FRAMESHIFT:
        return 0.6, ConfidenceLevel.MEDIUM
    if mutation_type in (MutationType.INSERTION, MutationType.DELETION):
        if impact == ImpactLevel.CATASTROPHIC:
            return 0.5, ConfidenceLevel.LOW
        return 0.7, ConfidenceLevel.MEDIUM
    return 0.65, ConfidenceLevel.MEDIUM


def _analyze_changes(
    original: str,
    mutated: str,
    pixel_diff: float,
    thresh: Dict[str, float]
) -> Dict[str, Any]:
    """Detect frameshift, truncation and the likely kind of visual change."""
    length_diff = abs(len(clean_genome(original)) - len(clean_genome(mutated)))
    frameshifted = length_diff > 0 and length_diff % 3 != 0

    truncated = False
    shape_changes = 0
    if not frameshifted:
        try:
            original_tokens = tokenize(original)
            mutated_tokens = tokenize(mutated)
        except GenomeSyntaxError:
            original_tokens = mutated_tokens = []
        truncated = len(mutated_tokens) < len(original_tokens)
        shape_changes = len(original_tokens) - len(mutated_tokens) if truncated else 0

    return {
        'shape_changes': shape_changes,
        'color_changes': thresh['silent_max'] < pixel_diff < thresh['color_change_max'],
        'position_changes': pixel_diff > thresh['position_change_min'],
        'truncated': truncated,
        'frameshifted': frameshifted,
    }


def _describe(impact: ImpactLevel, analysis: Dict[str, Any]) -> str:
    if impact == ImpactLevel.SILENT:
        return "Minimal visual change - outputs nearly identical"

    if impact == ImpactLevel.LOCAL:
        if analysis['color_changes'] and not analysis['position_changes']:
            return "Local change - color or minor shape adjustment"
        return "Local change - single shape or position modified"

    if impact == ImpactLevel.MAJOR:
        if analysis['truncated']:
            n = analysis['shape_changes']
            return f"Major change - early termination removes {n} codon{'s' if n > 1 else ''}"
        if analysis['nonsense']:
            return "Major change - premature STOP truncates the program"
        return "Major change - multiple shapes affected"

    if analysis['frameshifted']:
        return "Catastrophic change - frameshift scrambles all downstream codons"
    return "Catastrophic change - global transformation of output"


def predict_mutation_impact(
    genome: str,
    mutation: Mutation,
    width: int = DEFAULT_CANVAS_SIZE,
    height: int = DEFAULT_CANVAS_SIZE,
    thresholds: Optional[Dict[str, float]] = None,
    max_instructions: int = DEFAULT_MAX_INSTRUCTIONS
) -> ImpactPrediction:
    """
    Predict the visual impact of a mutation.

    Both genomes are rendered with MatplotlibRenderer and compared
    pixel by pixel. A mutated genome that no longer tokenizes or runs
    (e.g. after a frameshift) counts as a 100% difference.

    Args:
        genome: Original genome text
        mutation: Result of a mutation function applied to `genome`
        width, height: Off-screen canvas size
        thresholds: Optional overrides for IMPACT_THRESHOLDS
        max_instructions: Instruction ceiling for each render; a genome that
                          exceeds it counts as failing to render

    Raises:
        ImpactPredictionError: If neither genome renders

    Example:
        >>> from mutation_engine import apply_silent_mutation
        >>> g = "ATG GAA AGG GGA TAA"
        >>> predict_mutation_impact(g, apply_silent_mutation(g, 3, seed=1)).impact
        <ImpactLevel.SILENT: 'SILENT'>
    """
    thresh = IMPACT_THRESHOLDS.copy()
    if thresholds:
        thresh.update(thresholds)

    original_pixels, original_ok = _render(genome, width, height, max_instructions)
    mutated_pixels, mutated_ok = _render(mutation.mutated, width, height, max_instructions)

    if not original_ok and not mutated_ok:
        raise ImpactPredictionError(
            "Both genomes failed to render - cannot predict impact"
        )

    if original_ok and not mutated_ok:
        pixel_diff = 100.0
    else:
        pixel_diff = compute_pixel_diff(
            original_pixels, mutated_pixels, int(thresh['channel_tolerance'])
        )

    impact = classify_impact(pixel_diff, mutation.mutation_type, thresh)
    confidence, confidence_level = calculate_confidence(mutation.mutation_type, impact)
    analysis = _analyze_changes(genome, mutation.mutated, pixel_diff, thresh)
    analysis['nonsense'] = mutation.mutation_type == MutationType.NONSENSE
    analysis['original_rendered'] = original_ok
    analysis['mutated_rendered'] = mutated_ok

    return ImpactPrediction(
        impact=impact,
        confidence=confidence,
        confidence_level=confidence_level,
        pixel_diff_percent=pixel_diff,
        description=_describe(impact, analysis),
        analysis=analysis,
    )


def predict_mutation_impact_batch(
    genome: str,
    mutations: List[Mutation],
    **kwargs
) -> List[ImpactPrediction]:
    """Predict impact for several mutations of the same genome."""
    return [predict_mutation_impact(genome, m, **kwargs) for m in mutations]
