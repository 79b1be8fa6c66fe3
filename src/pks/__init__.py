"""
Projectile kinematics resolution engine.

Given a sparse set of projectile quantities (speeds, velocity components,
acceleration, time, range, max height, angle), validate them and derive the
rest from closed-form level-ground kinematics.
"""

from .engine import Engine, InputMode, SolveOutcome, State
from .errors import (
    RegistryError, SolveError, OutOfRange, MissingDependency, InconsistentDualEntry,
    InsufficientInputs, NoBranchMatched, ImpossibleResult, InputModeError,
)
from .registry import QuantityRegistry, QuantitySet, CONTROLLING
from .selector import BRANCHES, Selector, angle_source, effective_angle
from .solver import KinematicsSolver, Solution
from .types import Branch, Category, Quantity, QuantitySpec, Source
from .validator import Validator, ValidationReport

__version__ = "1.0.0"
__all__ = [
    'Engine', 'InputMode', 'SolveOutcome', 'State',
    'QuantityRegistry', 'QuantitySet', 'CONTROLLING',
    'Validator', 'ValidationReport', 'Selector', 'BRANCHES', 'angle_source', 'effective_angle',
    'KinematicsSolver', 'Solution',
    'Branch', 'Category', 'Quantity', 'QuantitySpec', 'Source',
    'RegistryError', 'SolveError', 'OutOfRange', 'MissingDependency',
    'InconsistentDualEntry', 'InsufficientInputs', 'NoBranchMatched', 'ImpossibleResult',
    'InputModeError',
]
