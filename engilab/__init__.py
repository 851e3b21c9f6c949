"""Simulation and algorithm-visualisation core for the engineering learning games."""

from .challenge import Challenge, ChallengeSession, Outcome, evaluate, evaluate_ceiling, new_target
from .circuits import RlcParams, RlcResponse, SeriesCircuit, series_circuit, simulate_rlc
from .errors import (
    ConfigurationError,
    EmptyError,
    EngilabError,
    InvalidInput,
    InvalidWeight,
    MalformedImport,
)
from .graph import Edge, Graph, Neighbor, Node
from .ids import IdAllocator
from .integrators import (
    IntegrationResult,
    euler_step,
    fixed_step_euler,
    forward_euler,
    rk4_step,
    runge_kutta4,
)
from .mechanics import BeamBalance, Weight, beam_deflection, snap_to_slot
from .oscillator import (
    OscillatorParams,
    OscillatorState,
    ShmSimulator,
    mechanical_energy,
    oscillator_derivative,
    shm_step,
)
from .progress import JsonProgressStore, MemoryProgressStore, Progress, ProgressStore
from .sorting import (
    ALGORITHMS,
    Compare,
    Set,
    SortPlayer,
    StepSequence,
    Swap,
    apply_step,
    generate_steps,
    random_array,
    replay,
)
from .structures import Queue, Stack

__all__ = [
    "Challenge",
    "ChallengeSession",
    "Outcome",
    "evaluate",
    "evaluate_ceiling",
    "new_target",
    "RlcParams",
    "RlcResponse",
    "SeriesCircuit",
    "series_circuit",
    "simulate_rlc",
    "ConfigurationError",
    "EmptyError",
    "EngilabError",
    "InvalidInput",
    "InvalidWeight",
    "MalformedImport",
    "Edge",
    "Graph",
    "Neighbor",
    "Node",
    "IdAllocator",
    "IntegrationResult",
    "euler_step",
    "fixed_step_euler",
    "forward_euler",
    "rk4_step",
    "runge_kutta4",
    "BeamBalance",
    "Weight",
    "beam_deflection",
    "snap_to_slot",
    "OscillatorParams",
    "OscillatorState",
    "ShmSimulator",
    "mechanical_energy",
    "oscillator_derivative",
    "shm_step",
    "JsonProgressStore",
    "MemoryProgressStore",
    "Progress",
    "ProgressStore",
    "ALGORITHMS",
    "Compare",
    "Set",
    "SortPlayer",
    "StepSequence",
    "Swap",
    "apply_step",
    "generate_steps",
    "random_array",
    "replay",
    "Queue",
    "Stack",
]
