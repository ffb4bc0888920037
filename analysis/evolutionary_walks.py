"""
Evolutionary Walks Module

Simulates multi-mutation trajectories to understand how a genome's
function decays as mutations accumulate. This provides:
- Evolutionary resilience assessment
- Robustness decay curves
- Mutation-type tolerance

A genome is functional when it tokenizes, runs without a fatal VM error
and still draws at least one shape.

Public API:
    simulate_mutation_walk(genome, max_mutations) -> MutationTrajectory
    compute_decay_curve(trajectories) -> DecayCurve
"""

import random
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List, Tuple
import warnings

from lexer import GenomeSyntaxError
from mutation_engine import MutationError, MutationRates, apply_random_mutation
from vm import DEFAULT_MAX_INSTRUCTIONS, RecordingRenderer, VMError, execute_genome


class Phenotype:
    """Phenotype labels for a genome at one step of a walk."""
    FUNCTIONAL = "functional"
    NO_OUTPUT = "no_output"
    RUNTIME_ERROR = "runtime_error"
    SYNTAX_ERROR = "syntax_error"


@dataclass
class MutationStep:
    """
    Single step in a mutation walk.

    Attributes:
        step_number: Number of accumulated mutations
        mutation_info: Info about the mutation added at this step
        mutation_type: Tag of the mutation applied ('wild_type' at step 0)
        phenotype: Resulting phenotype after this mutation
        is_functional: Whether the genome still runs and draws
        robustness_score: Fraction of the wild-type drawing calls preserved
        genome: Genome text after this step
    """
    step_number: int
    mutation_info: Dict[str, Any]
    mutation_type: str
    phenotype: str
    is_functional: bool
    robustness_score: float
    genome: str


@dataclass
class MutationTrajectory:
    """
    Complete mutation walk from wild-type to failure.

    Attributes:
        steps: List of MutationStep objects
        mutations_to_failure: Number of mutations until function was lost
        final_phenotype: Final phenotype at trajectory end
        total_mutations: Total mutations in trajectory
        type_breakdown: Dict of mutations per mutation type
    """
    steps: List[MutationStep] = field(default_factory=list)
    mutations_to_failure: int = 0
    final_phenotype: str = ""
    total_mutations: int = 0
    type_breakdown: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'mutations_to_failure': self.mutations_to_failure,
            'final_phenotype': self.final_phenotype,
            'total_mutations': self.total_mutations,
            'type_breakdown': self.type_breakdown,
            'steps': [
                {
                    'step': s.step_number,
                    'mutation_type': s.mutation_type,
                    'phenotype': s.phenotype,
                    'is_functional': s.is_functional,
                    'robustness': s.robustness_score
                }
                for s in self.steps
            ],
            'robustness_curve': [s.robustness_score for s in self.steps]
        }


@dataclass
class DecayCurve:
    """
    Aggregated robustness decay statistics across multiple trajectories.

    Attributes:
        mutation_counts: List of mutation counts (x-axis)
        mean_robustness: Mean robustness at each mutation count
        std_robustness: Standard deviation at each mutation count
        pct_functional: Percentage still functional at each count
        n_trajectories: Number of trajectories averaged
    """
    mutation_counts: List[int] = field(default_factory=list)
    mean_robustness: List[float] = field(default_factory=list)
    std_robustness: List[float] = field(default_factory=list)
    pct_functional: List[float] = field(default_factory=list)
    n_trajectories: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mutation_counts': self.mutation_counts,
            'mean_robustness': self.mean_robustness,
            'std_robustness': self.std_robustness,
            'pct_functional': self.pct_functional,
            'n_trajectories': self.n_trajectories
        }


def assess_genome(
    genome: str,
    max_instructions: int = DEFAULT_MAX_INSTRUCTIONS
) -> Tuple[str, List[Tuple[str, tuple]]]:
    """
    Run a genome headlessly and classify its phenotype.

    Returns:
        (phenotype, drawing calls issued before halting or failing)
    """
    renderer = RecordingRenderer()
    try:
        execute_genome(genome, renderer, max_instructions=max_instructions)
    except GenomeSyntaxError:
        return Phenotype.SYNTAX_ERROR, []
    except VMError:
        return Phenotype.RUNTIME_ERROR, renderer.drawing_calls

    calls = renderer.drawing_calls
    if not calls:
        return Phenotype.NO_OUTPUT, calls
    return Phenotype.FUNCTIONAL, calls


def _drawing_similarity(reference: List, calls: List) -> float:
    """Fraction of reference drawing calls reproduced in order from the start."""
    if not reference and not calls:
        return 1.0
    shared = 0
    for a, b in zip(reference, calls):
        if a != b:
            break
        shared += 1
    return shared / max(len(reference), len(calls))


def simulate_mutation_walk(
    genome: str,
    max_mutations: int = 10,
    rates: Optional[MutationRates] = None,
    stop_on_failure: bool = True,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    max_instructions: int = DEFAULT_MAX_INSTRUCTIONS
) -> MutationTrajectory:
    """
    Simulate sequential mutation accumulation.

    Starts with wild-type and adds random mutations one at a time,
    tracking robustness decay until the genome stops functioning.

    Args:
        genome: Wild-type genome text
        max_mutations: Maximum mutations to accumulate
        rates: Relative weights of the seven mutation types
        stop_on_failure: If True, stop when function is lost
        rng: Random source (default: new Random seeded with `seed`)
        seed: Random seed
        max_instructions: Instruction ceiling for each execution

    Returns:
        MutationTrajectory with all steps recorded
    """
    if rng is None:
        rng = random.Random(seed)

    trajectory = MutationTrajectory()
    type_counts = {}

    wt_phenotype, wt_calls = assess_genome(genome, max_instructions)
    if wt_phenotype != Phenotype.FUNCTIONAL:
        warnings.warn(f"Wild-type genome is not functional ({wt_phenotype})")
        return trajectory

    trajectory.steps.append(MutationStep(
        step_number=0,
        mutation_info={'type': 'wild_type'},
        mutation_type='wild_type',
        phenotype=wt_phenotype,
        is_functional=True,
        robustness_score=1.0,
        genome=genome
    ))

    current = genome
    for step in range(1, max_mutations + 1):
        try:
            mutation = apply_random_mutation(current, rates=rates, rng=rng)
        except MutationError as e:
            warnings.warn(f"Mutation step {step} failed: {e}")
            continue

        type_counts[mutation.type] = type_counts.get(mutation.type, 0) + 1

        phenotype, calls = assess_genome(mutation.mutated, max_instructions)
        is_functional = phenotype == Phenotype.FUNCTIONAL
        robustness = _drawing_similarity(wt_calls, calls) if is_functional else 0.0

        trajectory.steps.append(MutationStep(
            step_number=step,
            mutation_info={
                'position': mutation.position,
                'type': mutation.type,
                'notation': str(mutation),
                'description': mutation.description
            },
            mutation_type=mutation.type,
            phenotype=phenotype,
            is_functional=is_functional,
            robustness_score=robustness,
            genome=mutation.mutated
        ))
        current = mutation.mutated

        # Track first failure
        if not is_functional and trajectory.mutations_to_failure == 0:
            trajectory.mutations_to_failure = step
            if stop_on_failure:
                break

    trajectory.final_phenotype = trajectory.steps[-1].phenotype
    trajectory.total_mutations = len(trajectory.steps) - 1  # Exclude wild-type
    trajectory.type_breakdown = type_counts

    if trajectory.mutations_to_failure == 0:
        # Never lost function
        trajectory.mutations_to_failure = trajectory.total_mutations

    return trajectory


def simulate_multiple_walks(
    genome: str,
    n_walks: int = 10,
    max_mutations: int = 10,
    rates: Optional[MutationRates] = None,
    seed: Optional[int] = None,
    max_instructions: int = DEFAULT_MAX_INSTRUCTIONS
) -> List[MutationTrajectory]:
    """
    Run multiple mutation walk simulations.

    Returns list of trajectories for statistical analysis.
    """
    rng = random.Random(seed)
    return [
        simulate_mutation_walk(
            genome,
            max_mutations=max_mutations,
            rates=rates,
            stop_on_failure=False,  # Continue for full curve
            rng=rng,
            max_instructions=max_instructions
        )
        for _ in range(n_walks)
    ]


def compute_decay_curve(
    trajectories: List[MutationTrajectory]
) -> DecayCurve:
    """
    Compute mean robustness decay curve from multiple trajectories.

    Args:
        trajectories: List of MutationTrajectory objects

    Returns:
        DecayCurve with aggregated statistics
    """
    if not trajectories:
        return DecayCurve()

    max_steps = max((s.step_number for t in trajectories for s in t.steps), default=-1) + 1

    robustness_by_step = [[] for _ in range(max_steps)]
    functional_by_step = [[] for _ in range(max_steps)]

    for trajectory in trajectories:
        for step in trajectory.steps:
            robustness_by_step[step.step_number].append(step.robustness_score)
            functional_by_step[step.step_number].append(1.0 if step.is_functional else 0.0)

    mutation_counts = []
    mean_robustness = []
    std_robustness = []
    pct_functional = []

    for i in range(max_steps):
        if robustness_by_step[i]:
            mutation_counts.append(i)
            mean_robustness.append(float(np.mean(robustness_by_step[i])))
            std_robustness.append(float(np.std(robustness_by_step[i])))
            pct_functional.append(float(np.mean(functional_by_step[i]) * 100))

    return DecayCurve(
        mutation_counts=mutation_counts,
        mean_robustness=mean_robustness,
        std_robustness=std_robustness,
        pct_functional=pct_functional,
        n_trajectories=len(trajectories)
    )


def analyze_type_vulnerability(
    trajectories: List[MutationTrajectory]
) -> Dict[str, Any]:
    """
    Analyze which mutation types most often break a functional genome.

    A failure is attributed to the type applied at the step where the
    genome went from functional to non-functional.
    """
    type_mutations = {}
    type_failures = {}

    for trajectory in trajectories:
        for prev_step, step in zip(trajectory.steps, trajectory.steps[1:]):
            mut_type = step.mutation_type
            type_mutations[mut_type] = type_mutations.get(mut_type, 0) + 1
            type_failures.setdefault(mut_type, 0)
            if prev_step.is_functional and not step.is_functional:
                type_failures[mut_type] += 1

    vulnerability = {
        mut_type: {
            'total_mutations': n,
            'failures_caused': type_failures[mut_type],
            'failure_rate': type_failures[mut_type] / n
        }
        for mut_type, n in type_mutations.items()
    }

    ranked = sorted(
        vulnerability.items(),
        key=lambda x: x[1]['failure_rate'],
        reverse=True
    )

    return {
        'type_vulnerability': vulnerability,
        'ranking': [r[0] for r in ranked],
        'most_vulnerable': ranked[0][0] if ranked else None,
        'least_vulnerable': ranked[-1][0] if ranked else None
    }
