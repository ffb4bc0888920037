"""
Codon Genome Mutation Analyzer Package

A Python package for executing codon-encoded drawing programs on a stack
virtual machine and measuring how robust their visual output is to
mutations.

Main modules:
    - codec: Codon <-> integer conversion and the 64-codon opcode table
    - lexer: Tokenization and structural validation of genome text
    - vm: Stack machine that drives a Renderer
    - mutation_engine: Generate controlled genome mutations
    - analysis: Impact prediction, robustness metrics, evolutionary walks
    - visualization: Off-screen canvas and plotting functions
"""

__version__ = '1.0.0'
__author__ = 'Codon Genome Mutation Analyzer'

# Convenience imports
from codec import decode, encode, lookup_opcode, Opcode
from lexer import tokenize, validate_structure
from vm import CodonVM, RecordingRenderer, execute_genome
from mutation_engine import apply_random_mutation, MutationType
from analysis import predict_mutation_impact, compute_robustness
