"""
Sequence Mutator Module

Core mutation engine for introducing controlled mutations into codon genomes.

Every function is pure: it takes genome text, returns a Mutation describing
the change and the new genome, and never touches its input. Randomness comes
from an injectable random.Random (or a seed) so results are reproducible.

Public API:
    apply_silent_mutation(genome, position, rng) -> Mutation
    apply_missense_mutation(genome, position, rng) -> Mutation
    apply_nonsense_mutation(genome, position, rng) -> Mutation
    apply_point_mutation(genome, position, rng) -> Mutation
    apply_insertion(genome, position, length, rng) -> Mutation
    apply_deletion(genome, position, length, rng) -> Mutation
    apply_frameshift_mutation(genome, position, rng) -> Mutation
    get_mutation_by_type(mutation_type, genome, rng) -> Mutation
    apply_random_mutation(genome, rates, rng) -> Mutation
"""

import random
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

from codec import (
    ALL_CODONS,
    CODON_TABLE,
    Opcode,
    OpcodeFamily,
    STOP_CODONS,
    family_of,
    synonymous_codons,
)
from lexer import clean_genome

from .mutation_types import Mutation, MutationType, MutationRates


# Standard DNA nucleotides
NUCLEOTIDES = ['A', 'C', 'G', 'T']

# Transition mutations (purine<->purine, pyrimidine<->pyrimidine) are more common
TRANSITIONS = {'A': 'G', 'G': 'A', 'T': 'C', 'C': 'T'}

# Transversion mutations (purine<->pyrimidine)
TRANSVERSIONS = {
    'A': ['T', 'C'],
    'G': ['T', 'C'],
    'T': ['A', 'G'],
    'C': ['A', 'G']
}

# Indel length distribution (1, 2, 3 bases), weighted toward smaller indels
INDEL_LENGTHS = [1, 2, 3]
INDEL_LENGTH_WEIGHTS = [0.6, 0.3, 0.1]

# Retry budget for finding a frameshift that changes every downstream codon
MAX_FRAMESHIFT_ATTEMPTS = 200


class MutationError(ValueError):
    """Raised when a mutation cannot be applied to a genome."""


class UnknownMutationTypeError(MutationError):
    """Raised by get_mutation_by_type for an unrecognized type tag."""


# ----------------------------------------------------------------------
# Genome text helpers
# ----------------------------------------------------------------------

def parse_genome(genome: str) -> List[str]:
    """
    Split genome text into codons.

    Comments and whitespace are ignored. A trailing partial codon (after a
    frameshift) is kept as the last element.

    Example:
        >>> parse_genome("ATG\\nGGA ; circle\\nTAA")
        ['ATG', 'GGA', 'TAA']
    """
    bases = clean_genome(genome)
    return [bases[i:i + 3] for i in range(0, len(bases), 3)]


def format_as_codons(bases: str) -> str:
    """Group a base string into space-separated triplets."""
    return ' '.join(bases[i:i + 3] for i in range(0, len(bases), 3))


def _resolve_rng(rng: Optional[random.Random], seed: Optional[int]) -> random.Random:
    if rng is not None:
        return rng
    return random.Random(seed)


def _changed_codon_indices(before: List[str], after: List[str]) -> List[int]:
    """Indices where the codon lists differ, including length mismatch."""
    n = max(len(before), len(after))
    return [
        i for i in range(n)
        if (before[i] if i < len(before) else '') != (after[i] if i < len(after) else '')
    ]


def _scan_program(codons: List[str]) -> Tuple[Optional[int], Set[int]]:
    """
    Walk codons the way the VM reads them.

    Returns the index of the first reachable STOP (None if absent) and the
    indices of codons consumed as PUSH literals before it.
    """
    literals = set()
    i = 0
    while i < len(codons):
        opcode = CODON_TABLE.get(codons[i])
        if opcode == Opcode.PUSH:
            literals.add(i + 1)
            i += 2
            continue
        if opcode == Opcode.STOP:
            return i, literals
        i += 1
    return None, literals


def _require_codons(genome: str) -> List[str]:
    codons = parse_genome(genome)
    if not codons:
        raise MutationError("Genome cannot be empty")
    return codons


def _require_bases(genome: str) -> str:
    bases = clean_genome(genome)
    if not bases:
        raise MutationError("Genome cannot be empty")
    return bases


def _check_codon_position(position: int, codons: List[str]):
    if position < 0 or position >= len(codons):
        raise MutationError(
            f"Codon position {position} out of range (genome has {len(codons)} codons)"
        )
    if len(codons[position]) != 3:
        raise MutationError(f"Codon position {position} is an incomplete codon")


def missense_codons(codon: str) -> List[str]:
    """
    Codons that change the instruction to another non-control family.

    The replacement encodes a different opcode from a different family,
    and is never START or STOP.
    """
    source_family = family_of(CODON_TABLE[codon])
    return [
        c for c in ALL_CODONS
        if family_of(CODON_TABLE[c]) not in (source_family, OpcodeFamily.CONTROL)
    ]


# ----------------------------------------------------------------------
# Codon-level mutations
# ----------------------------------------------------------------------

def apply_silent_mutation(
    genome: str,
    position: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None
) -> Mutation:
    """
    Replace a codon with a synonym encoding the same opcode.

    Demonstrates genetic redundancy: the decoded program is unchanged.

    Args:
        genome: Genome text
        position: Codon index; random among degenerate codons if None
        rng: Random source (default: new Random seeded with `seed`)
        seed: Seed used when rng is not given

    Raises:
        MutationError: If the genome is empty or no synonym exists

    Example:
        >>> m = apply_silent_mutation("ATG GGA TAA", position=1, seed=0)
        >>> m.mutated.split()[1] in ('GGC', 'GGG', 'GGT')
        True
    """
    rng = _resolve_rng(rng, seed)
    codons = _require_codons(genome)

    if position is None:
        candidates = [
            i for i, c in enumerate(codons)
            if len(c) == 3 and synonymous_codons(c)
        ]
        if not candidates:
            raise MutationError("No synonymous mutations available in this genome")
        position = rng.choice(candidates)

    _check_codon_position(position, codons)
    original_codon = codons[position]
    synonyms = synonymous_codons(original_codon)
    if not synonyms:
        raise MutationError(
            f"No synonymous codons for {original_codon} at position {position}"
        )

    new_codon = rng.choice(synonyms)
    mutated = list(codons)
    mutated[position] = new_codon

    return Mutation(
        original=genome,
        mutated=' '.join(mutated),
        mutation_type=MutationType.SILENT,
        position=position,
        description=(
            f"Silent mutation at codon {position}: {original_codon} -> {new_codon} "
            f"(same opcode: {CODON_TABLE[original_codon].value})"
        ),
        affected_codons=[position],
        original_bases=original_codon,
        replacement_bases=new_codon,
    )


def apply_missense_mutation(
    genome: str,
    position: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None
) -> Mutation:
    """
    Replace a codon with one from a different, non-control opcode family.

    Random positions never target START or STOP so program structure is
    kept; an explicit position may target any complete codon.

    Raises:
        MutationError: If the genome is empty or has no eligible codon
    """
    rng = _resolve_rng(rng, seed)
    codons = _require_codons(genome)

    if position is None:
        candidates = [
            i for i, c in enumerate(codons)
            if len(c) == 3 and family_of(CODON_TABLE[c]) != OpcodeFamily.CONTROL
        ]
        if not candidates:
            raise MutationError("No missense mutations available in this genome")
        position = rng.choice(candidates)

    _check_codon_position(position, codons)
    original_codon = codons[position]
    new_codon = rng.choice(missense_codons(original_codon))

    mutated = list(codons)
    mutated[position] = new_codon

    return Mutation(
        original=genome,
        mutated=' '.join(mutated),
        mutation_type=MutationType.MISSENSE,
        position=position,
        description=(
            f"Missense mutation at codon {position}: {original_codon} -> {new_codon} "
            f"({CODON_TABLE[original_codon].value} -> {CODON_TABLE[new_codon].value})"
        ),
        affected_codons=[position],
        original_bases=original_codon,
        replacement_bases=new_codon,
    )


def apply_nonsense_mutation(
    genome: str,
    position: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None
) -> Mutation:
    """
    Overwrite an interior codon with a STOP codon.

    Interior means after the first codon and before the first reachable
    STOP, not itself START or STOP, and not a PUSH literal (a literal is
    data, so a STOP there would not terminate). Every later codon becomes
    unreachable and is reported in `affected_codons`; genome length is
    unchanged.

    Raises:
        MutationError: If there is no interior codon (e.g. just START+STOP)
    """
    rng = _resolve_rng(rng, seed)
    codons = _require_codons(genome)

    stop_index, literals = _scan_program(codons)
    limit = stop_index if stop_index is not None else len(codons)
    candidates = [
        i for i in range(1, limit)
        if len(codons[i]) == 3
        and i not in literals
        and CODON_TABLE[codons[i]] not in (Opcode.START, Opcode.STOP)
    ]

    if position is None:
        if not candidates:
            raise MutationError("No nonsense mutation positions available")
        position = rng.choice(candidates)
    else:
        _check_codon_position(position, codons)
        if position not in candidates:
            raise MutationError(
                f"Codon {position} is not an interior codon before STOP"
            )

    original_codon = codons[position]
    stop_codon = rng.choice(sorted(STOP_CODONS))
    mutated = list(codons)
    mutated[position] = stop_codon

    return Mutation(
        original=genome,
        mutated=' '.join(mutated),
        mutation_type=MutationType.NONSENSE,
        position=position,
        description=(
            f"Nonsense mutation at codon {position}: {original_codon} -> {stop_codon} "
            f"(early termination, {len(codons) - position - 1} codons unreachable)"
        ),
        affected_codons=list(range(position + 1, len(codons))),
        original_bases=original_codon,
        replacement_bases=stop_codon,
    )


# ----------------------------------------------------------------------
# Base-level mutations
# ----------------------------------------------------------------------

def apply_point_mutation(
    genome: str,
    position: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    transition_bias: float = 2.0
) -> Mutation:
    """
    Substitute a single base.

    Biological rationale: Transitions (purine<->purine, pyrimidine<->pyrimidine)
    are more common than transversions due to chemical similarity, so the
    new base is a transition with probability bias/(bias+1).

    Args:
        genome: Genome text
        position: Base offset in the whitespace-free genome; random if None
        transition_bias: Ratio of transitions to transversions (default: 2.0)
    """
    rng = _resolve_rng(rng, seed)
    bases = _require_bases(genome)

    if position is None:
        position = rng.randrange(len(bases))
    if position < 0 or position >= len(bases):
        raise MutationError(f"Position {position} out of range")

    original_base = bases[position]
    if rng.random() < transition_bias / (transition_bias + 1):
        new_base = TRANSITIONS[original_base]
    else:
        new_base = rng.choice(TRANSVERSIONS[original_base])

    mutated = bases[:position] + new_base + bases[position + 1:]
    codon_index = position // 3

    description = f"Point mutation at base {position}: {original_base} -> {new_base}"
    old_codon = bases[codon_index * 3:codon_index * 3 + 3]
    new_codon = mutated[codon_index * 3:codon_index * 3 + 3]
    if len(old_codon) == 3:
        description += (
            f" ({old_codon} -> {new_codon}: "
            f"{CODON_TABLE[old_codon].value} -> {CODON_TABLE[new_codon].value})"
        )

    return Mutation(
        original=genome,
        mutated=format_as_codons(mutated),
        mutation_type=MutationType.POINT,
        position=position,
        description=description,
        affected_codons=[codon_index],
        original_bases=original_base,
        replacement_bases=new_base,
    )


def _indel_length(rng: random.Random, max_length: int = 3) -> int:
    """Draw 1-3 with the indel weights, renormalized below max_length."""
    lengths = INDEL_LENGTHS[:max_length]
    weights = INDEL_LENGTH_WEIGHTS[:max_length]
    return rng.choices(lengths, weights=weights)[0]


def _plural(n: int) -> str:
    return '' if n == 1 else 's'


def apply_insertion(
    genome: str,
    position: Optional[int] = None,
    length: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None
) -> Mutation:
    """
    Insert random bases before a base offset.

    Biological rationale: Small insertions (1-3 bp) are common due to
    DNA polymerase slippage during replication. A length not divisible by 3
    shifts the reading frame for everything downstream.

    Args:
        genome: Genome text
        position: Base offset to insert at (0..len); random if None
        length: Bases to insert; drawn from 1-3 (weights 0.6/0.3/0.1) if None
    """
    rng = _resolve_rng(rng, seed)
    bases = _require_bases(genome)

    if length is None:
        length = _indel_length(rng)
    if length < 1:
        raise MutationError(f"Insertion length must be >= 1, got {length}")
    if position is None:
        position = rng.randrange(len(bases) + 1)
    if position < 0 or position > len(bases):
        raise MutationError(f"Position {position} out of range")

    inserted = ''.join(rng.choice(NUCLEOTIDES) for _ in range(length))
    mutated = bases[:position] + inserted + bases[position:]

    return Mutation(
        original=genome,
        mutated=format_as_codons(mutated),
        mutation_type=MutationType.INSERTION,
        position=position,
        description=(
            f"Insertion at base {position}: +{inserted} ({length} base{_plural(length)}"
            f"{', frameshift' if length % 3 else ''})"
        ),
        affected_codons=_changed_codon_indices(parse_genome(bases), parse_genome(mutated)),
        original_bases='',
        replacement_bases=inserted,
    )


def apply_deletion(
    genome: str,
    position: Optional[int] = None,
    length: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None
) -> Mutation:
    """
    Remove bases starting at a base offset.

    Biological rationale: Small deletions (1-3 bp) are common due to
    DNA polymerase slippage, similar to insertions.

    Raises:
        MutationError: If the deletion would run past the end of the genome
                       or remove every base
    """
    rng = _resolve_rng(rng, seed)
    bases = _require_bases(genome)

    if len(bases) < 2:
        raise MutationError(
            f"Cannot delete from a {len(bases)}-base genome without emptying it"
        )
    if length is None:
        length = _indel_length(rng, max_length=min(3, len(bases) - 1))
    if length < 1:
        raise MutationError(f"Deletion length must be >= 1, got {length}")
    if length >= len(bases):
        raise MutationError(
            f"Cannot delete {length} bases from a {len(bases)}-base genome"
        )
    if position is None:
        position = rng.randrange(len(bases) - length + 1)
    if position < 0 or position + length > len(bases):
        raise MutationError(
            f"Deletion at position {position} with length {length} exceeds genome length"
        )

    deleted = bases[position:position + length]
    mutated = bases[:position] + bases[position + length:]

    return Mutation(
        original=genome,
        mutated=format_as_codons(mutated),
        mutation_type=MutationType.DELETION,
        position=position,
        description=(
            f"Deletion at base {position}: -{deleted} ({length} base{_plural(length)}"
            f"{', frameshift' if length % 3 else ''})"
        ),
        affected_codons=_changed_codon_indices(parse_genome(bases), parse_genome(mutated)),
        original_bases=deleted,
        replacement_bases='',
    )


def _shifts_every_downstream_codon(bases: str, mutated: str, position: int) -> bool:
    """True if every codon from the shift point onward differs from the original."""
    before = parse_genome(bases)
    after = parse_genome(mutated)
    changed = set(_changed_codon_indices(before, after))
    return all(i in changed for i in range(position // 3, max(len(before), len(after))))


def apply_frameshift_mutation(
    genome: str,
    position: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None
) -> Mutation:
    """
    Insert or delete 1-2 bases so every downstream codon changes.

    The indel direction, length and inserted bases are redrawn until every
    codon from the shift point onward differs from the codon previously at
    that index (a repetitive stretch can otherwise re-create the same codons).

    Raises:
        MutationError: If no such frameshift is found
    """
    rng = _resolve_rng(rng, seed)
    bases = _require_bases(genome)

    for _ in range(MAX_FRAMESHIFT_ATTEMPTS):
        length = rng.choice([1, 2])
        is_insertion = rng.random() < 0.5 or length >= len(bases)
        try:
            if is_insertion:
                result = apply_insertion(bases, position=position, length=length, rng=rng)
            else:
                result = apply_deletion(bases, position=position, length=length, rng=rng)
        except MutationError:
            # Deletion does not fit at the requested position; redraw
            if position is not None and (position < 0 or position > len(bases)):
                raise
            continue

        if _shifts_every_downstream_codon(bases, clean_genome(result.mutated), result.position):
            kind = 'insertion' if is_insertion else 'deletion'
            result.original = genome
            result.mutation_type = MutationType.FRAMESHIFT
            result.description = f"Frameshift ({kind}): {result.description}"
            return result

    raise MutationError(
        "Could not find a frameshift that changes every downstream codon"
    )


# ----------------------------------------------------------------------
# Dispatch
# ----------------------------------------------------------------------

MUTATION_FUNCTIONS: Dict[MutationType, Callable[..., Mutation]] = {
    MutationType.SILENT: apply_silent_mutation,
    MutationType.MISSENSE: apply_missense_mutation,
    MutationType.NONSENSE: apply_nonsense_mutation,
    MutationType.POINT: apply_point_mutation,
    MutationType.INSERTION: apply_insertion,
    MutationType.DELETION: apply_deletion,
    MutationType.FRAMESHIFT: apply_frameshift_mutation,
}


def get_mutation_by_type(
    mutation_type: Union[MutationType, str],
    genome: str,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None
) -> Mutation:
    """
    Apply a mutation by type, at a random position.

    Args:
        mutation_type: MutationType or its tag (e.g. "silent")

    Raises:
        UnknownMutationTypeError: If the tag is not one of the seven types
    """
    try:
        mutation_type = MutationType(mutation_type)
    except ValueError:
        raise UnknownMutationTypeError(f"Unknown mutation type: {mutation_type}") from None
    return MUTATION_FUNCTIONS[mutation_type](genome, rng=_resolve_rng(rng, seed))


def _select_mutation_type(rates: MutationRates, rng: random.Random) -> MutationType:
    """Select mutation type based on normalized rates."""
    norm_rates = rates.normalized
    types = list(norm_rates.keys())
    return rng.choices(types, weights=[norm_rates[t] for t in types])[0]


def apply_random_mutation(
    genome: str,
    rates: Optional[MutationRates] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None
) -> Mutation:
    """
    Apply one mutation whose type is drawn from `rates`.

    If the drawn type is impossible for this genome (e.g. nonsense on
    START+STOP), a point mutation is applied instead.

    Raises:
        MutationError: If the genome is empty
    """
    rng = _resolve_rng(rng, seed)
    if rates is None:
        rates = MutationRates()

    mutation_type = _select_mutation_type(rates, rng)
    try:
        return MUTATION_FUNCTIONS[mutation_type](genome, rng=rng)
    except MutationError:
        if mutation_type == MutationType.POINT:
            raise
        return apply_point_mutation(genome, rng=rng)
