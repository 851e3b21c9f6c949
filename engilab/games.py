"""Level sessions combining a model, its challenge and the progress store.

Each game owns its state exclusively and exposes a user-facing :attr:`message` plus a
:meth:`snapshot` for rendering.  Recoverable core errors (:class:`EmptyError`,
:class:`InvalidInput`, :class:`ConfigurationError`, :class:`MalformedImport`) are
turned into messages here and the previous state is kept.
"""

from __future__ import annotations

import math
import random
from typing import Any, Dict, List, Optional, Sequence

from .challenge import ChallengeSession, evaluate, evaluate_ceiling, new_target
from .circuits import RlcParams, RlcResponse, SeriesCircuit, series_circuit, simulate_rlc
from .errors import ConfigurationError, EmptyError, InvalidInput, MalformedImport
from .graph import Graph
from .logging_config import get_logger
from .mechanics import BeamBalance, beam_deflection
from .oscillator import ShmSimulator
from .progress import ProgressStore
from .sorting import ALGORITHMS, SortPlayer, generate_steps, random_array
from .structures import Queue, Stack

logger = get_logger(__name__)

# Successful operations needed before the stack/queue levels complete.
OPERATIONS_TO_COMPLETE = 5
# Deflection checks needed before the beam bending level completes.
CHECKS_TO_COMPLETE = 3


def _format_number(value: float) -> str:
    if not math.isfinite(value):
        return "-"
    if abs(value) >= 1000:
        return f"{value:.0f}"
    if abs(value) >= 1:
        return f"{value:.2f}"
    return f"{value:.4f}"


def _parse_number(raw: Any, name: str) -> float:
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            raise InvalidInput(f"Enter a numeric value for {name}.")
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"Enter a numeric value for {name}.") from exc
    if not math.isfinite(value):
        raise InvalidInput(f"Enter a finite value for {name}.")
    return value


class _ScoredGame:
    """Counts successful operations and completes the level after enough of them."""

    level_key = ""

    def __init__(self, store: ProgressStore) -> None:
        self.session = ChallengeSession(self.level_key, store)
        self.score = 0
        self.message = ""

    def _scored(self) -> None:
        self.score += 1
        if self.score >= OPERATIONS_TO_COMPLETE:
            self.session.complete_once()

    def _reject(self, exc: Exception) -> str:
        logger.warning("%s: %s", self.level_key, exc)
        self.message = str(exc)
        return self.message


class StackGame(_ScoredGame):
    level_key = "cse_stacks"

    def __init__(self, store: ProgressStore) -> None:
        super().__init__(store)
        self.stack: Stack[str] = Stack()

    def push(self, raw: str) -> str:
        value = (raw or "").strip()
        if not value:
            return self._reject(InvalidInput("Enter a value to push."))
        self.stack.push(value)
        self.message = "Pushed!"
        self._scored()
        return self.message

    def pop(self) -> str:
        try:
            top = self.stack.pop()
        except EmptyError:
            self.message = "Stack is empty. Cannot pop."
            return self.message
        self.message = f"Popped: {top}"
        self._scored()
        return self.message

    def peek(self) -> str:
        try:
            top = self.stack.peek()
        except EmptyError:
            self.message = "Stack is empty."
            return self.message
        self.message = f"Top: {top}"
        self._scored()
        return self.message

    def reset(self) -> str:
        self.stack.reset()
        self.score = 0
        self.message = "Reset the stack."
        return self.message

    def snapshot(self) -> Dict[str, Any]:
        return {**self.stack.snapshot(), "score": self.score, "message": self.message}


class QueueGame(_ScoredGame):
    level_key = "cse_queues"

    def __init__(self, store: ProgressStore) -> None:
        super().__init__(store)
        self.queue: Queue[float] = Queue()

    def enqueue(self, raw: Any) -> str:
        try:
            value = _parse_number(raw, "the queue")
        except InvalidInput:
            return self._reject(InvalidInput("Enter a numeric value to enqueue."))
        if value.is_integer():
            value = int(value)
        self.queue.enqueue(value)
        self.message = f"Enqueued {value}"
        self._scored()
        return self.message

    def dequeue(self) -> str:
        try:
            front = self.queue.dequeue()
        except EmptyError:
            self.message = "Queue is empty. Cannot dequeue."
            return self.message
        self.message = f"Dequeued {front}"
        self._scored()
        return self.message

    def peek(self) -> str:
        try:
            front = self.queue.peek()
        except EmptyError:
            self.message = "Queue is empty."
            return self.message
        self.message = f"Front: {front}"
        self._scored()
        return self.message

    def reset(self) -> str:
        self.queue.reset()
        self.score = 0
        self.message = "Reset the queue."
        return self.message

    def snapshot(self) -> Dict[str, Any]:
        return {**self.queue.snapshot(), "score": self.score, "message": self.message}


class DcCircuitGame:
    """Three series resistors; match a random target current within 5%."""

    level_key = "ece_dc"
    tolerance = 0.05
    voltages = (3.0, 5.0, 9.0, 12.0)

    def __init__(self, store: ProgressStore, *, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self.session = ChallengeSession(self.level_key, store)
        self.voltage = 5.0
        self.resistances: List[float] = [100.0, 100.0, 100.0]
        self.target = new_target(0.05, 0.25, digits=3, rng=self.rng)
        self.message: Optional[str] = None

    @property
    def solution(self) -> SeriesCircuit:
        return series_circuit(self.voltage, self.resistances)

    def set_values(self, voltage: Any = None, resistances: Optional[Sequence[Any]] = None) -> Optional[str]:
        """Update the source and/or resistors; invalid entries leave everything as it was."""

        try:
            new_voltage = self.voltage if voltage is None else _parse_number(voltage, "V")
            new_resistances = list(self.resistances)
            if resistances is not None:
                if len(resistances) != len(self.resistances):
                    raise InvalidInput(f"Expected {len(self.resistances)} resistances.")
                new_resistances = [_parse_number(r, f"R{k + 1}") for k, r in enumerate(resistances)]
            series_circuit(new_voltage, new_resistances)
        except InvalidInput as exc:
            self.message = str(exc)
            return self.message
        self.voltage, self.resistances = new_voltage, new_resistances
        self.message = None
        return None

    def new_target(self) -> float:
        """Draw a fresh target current, keeping the source and resistors as they are."""

        self.target = round(max(0.001, new_target(0.02, 0.32, rng=self.rng)), 4)
        self.message = None
        return self.target

    def reset_values(self) -> None:
        """Restore V = 5 and three 100 ohm resistors; the target is kept."""

        self.voltage = 5.0
        self.resistances = [100.0, 100.0, 100.0]
        self.message = None

    def randomize_challenge(self) -> float:
        """Pick a new source, resistors and a reachable target current."""

        self.voltage = self.rng.choice(self.voltages)
        self.resistances = [float(round(20 + self.rng.random() * 300)) for _ in self.resistances]
        guess = self.voltage / (sum(self.resistances) or 200.0)
        factor = 0.6 + self.rng.random() * 1.2
        self.target = round(max(0.001, guess * factor), 4)
        self.message = None
        return self.target

    def check(self) -> str:
        current = self.solution.current
        try:
            outcome = evaluate(current, self.target, self.tolerance)
        except InvalidInput:
            self.message = "Invalid values. Check resistances and voltage."
            return self.message
        if self.session.record(outcome):
            self.message = f"Success! Current = {_format_number(current)} A (target {self.target} A)"
        else:
            self.message = (
                f"Not yet. Current = {_format_number(current)} A; target = {self.target} A. "
                "Try lowering resistances or increasing voltage."
            )
        return self.message

    def snapshot(self) -> Dict[str, Any]:
        solution = self.solution
        return {
            "voltage": self.voltage,
            "resistances": list(self.resistances),
            "total_resistance": solution.total_resistance,
            "current": solution.current,
            "drops": list(solution.drops),
            "target": self.target,
            "message": self.message,
        }


class RlcGame:
    """Series RLC step response; completes when ``v_C`` settles on the step voltage."""

    level_key = "ece_rlc"
    # 0.1 V around the 5 V step
    tolerance = 0.02

    def __init__(self, store: ProgressStore) -> None:
        self.session = ChallengeSession(self.level_key, store)
        self.resistance = 100.0  # ohm
        self.inductance_mh = 10.0
        self.capacitance_uf = 100.0
        self.duration = 0.05  # s
        self.message: Optional[str] = None
        self.response: RlcResponse = self._recompute()

    @property
    def params(self) -> RlcParams:
        return RlcParams.from_ui(self.resistance, self.inductance_mh, self.capacitance_uf)

    def _recompute(self) -> RlcResponse:
        response = simulate_rlc(self.params, self.duration)
        if self.session.record(evaluate(response.final_voltage, response.params.voltage, self.tolerance)):
            self.message = f"Capacitor settled at {response.final_voltage:.2f} V."
        return response

    def set_params(
        self,
        resistance: Any = None,
        inductance_mh: Any = None,
        capacitance_uf: Any = None,
        duration: Any = None,
    ) -> Optional[str]:
        """Change any slider and recompute; rejected values keep the previous response."""

        previous = (self.resistance, self.inductance_mh, self.capacitance_uf, self.duration)
        try:
            if resistance is not None:
                self.resistance = _parse_number(resistance, "R")
            if inductance_mh is not None:
                self.inductance_mh = _parse_number(inductance_mh, "L")
            if capacitance_uf is not None:
                self.capacitance_uf = _parse_number(capacitance_uf, "C")
            if duration is not None:
                self.duration = _parse_number(duration, "duration")
            self.response = self._recompute()
        except (InvalidInput, ConfigurationError) as exc:
            self.resistance, self.inductance_mh, self.capacitance_uf, self.duration = previous
            logger.warning("%s: %s", self.level_key, exc)
            self.message = str(exc)
            return self.message
        return None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "resistance": self.resistance,
            "inductance_mh": self.inductance_mh,
            "capacitance_uf": self.capacitance_uf,
            "duration": self.duration,
            "response": self.response.snapshot(),
            "completed": self.session.completed,
            "message": self.message,
        }


class ShmGame:
    """Tune the oscillator so its recent amplitude stays under a target in mm."""

    level_key = "mech_shm"
    # slack on the amplitude ceiling
    tolerance = 0.02
    window = 2.0  # s

    def __init__(self, store: ProgressStore, *, rng: random.Random | None = None, **simulator_options: Any) -> None:
        self.rng = rng or random.Random()
        self.session = ChallengeSession(self.level_key, store)
        self.simulator = ShmSimulator(**simulator_options)
        self.target_mm = new_target(20.0, 80.0, digits=1, rng=self.rng)
        self.message: Optional[str] = None

    def new_target(self) -> float:
        self.target_mm = new_target(5.0, 85.0, digits=1, rng=self.rng)
        self.message = None
        return self.target_mm

    def set_params(self, **changes: Any) -> Optional[str]:
        try:
            parsed = {name: _parse_number(value, name) for name, value in changes.items()}
            self.simulator.set_params(**parsed)
        except (InvalidInput, ConfigurationError) as exc:
            self.message = str(exc)
            return self.message
        return None

    def reset(self) -> None:
        self.simulator.reset()
        self.message = None

    def check(self) -> str:
        amplitude = self.simulator.recent_max_amplitude(self.window)
        if amplitude is None or len(self.simulator.history) < 2:
            self.message = "Run the simulation first."
            return self.message
        amplitude_mm = amplitude * 1000.0
        if self.session.record(evaluate_ceiling(amplitude_mm, self.target_mm, self.tolerance)):
            self.message = f"Success! max {amplitude_mm:.2f} mm <= target {self.target_mm:.1f} mm"
        else:
            self.message = (
                f"Not yet. Recent max = {amplitude_mm:.2f} mm; target = {self.target_mm:.1f} mm. "
                "Try increasing damping or reducing initial displacement."
            )
        return self.message

    def snapshot(self) -> Dict[str, Any]:
        return {**self.simulator.snapshot(), "target_mm": self.target_mm, "message": self.message}


class BeamBendingGame:
    """Explore centre deflection; every check scores and three checks complete the level."""

    level_key = "mech_beams"
    defaults = {"force": 100.0, "length": 2.0, "modulus_gpa": 200.0, "inertia_cm4": 5000.0}

    def __init__(self, store: ProgressStore) -> None:
        self.session = ChallengeSession(self.level_key, store)
        self.values: Dict[str, float] = dict(self.defaults)
        self.score = 0
        self.message = ""

    @property
    def deflection(self) -> float:
        return beam_deflection(**self.values)

    def set_values(self, **changes: Any) -> Optional[str]:
        unknown = set(changes) - set(self.defaults)
        if unknown:
            self.message = f"Unknown inputs: {', '.join(sorted(unknown))}"
            return self.message
        try:
            updated = {**self.values, **{k: _parse_number(v, k) for k, v in changes.items()}}
            beam_deflection(**updated)
        except (InvalidInput, ConfigurationError) as exc:
            self.message = str(exc)
            return self.message
        self.values = updated
        return None

    def check(self) -> str:
        self.message = f"Deflection at center: {self.deflection:.3e} m"
        self.score += 1
        if self.score >= CHECKS_TO_COMPLETE:
            self.session.complete_once()
        return self.message

    def reset(self) -> None:
        self.values = dict(self.defaults)
        self.message = ""
        self.score = 0

    def snapshot(self) -> Dict[str, Any]:
        return {**self.values, "deflection": self.deflection, "score": self.score, "message": self.message}


class BeamBalanceGame:
    """Drag weights onto the lever; balancing both sides completes the level."""

    level_key = "mech_torque"

    def __init__(self, store: ProgressStore) -> None:
        self.session = ChallengeSession(self.level_key, store)
        self.beam = BeamBalance()
        self.message: Optional[str] = None

    def _after_change(self) -> None:
        beam = self.beam
        if beam.balanced and beam.left_torque > 0 and beam.right_torque > 0:
            self.session.complete_once()
            self.message = "Balanced!"
        else:
            self.message = None

    def place(self, mass: Any, position: Any) -> Optional[str]:
        try:
            mass = _parse_number(mass, "mass")
            slot = _parse_number(position, "position")
            if not slot.is_integer():
                raise InvalidInput("position must be a whole slot number")
            self.beam.place(mass, int(slot))
        except InvalidInput as exc:
            self.message = str(exc)
            return self.message
        self._after_change()
        return self.message

    def drop(self, mass: Any, ratio: float) -> Optional[str]:
        try:
            self.beam.drop(_parse_number(mass, "mass"), ratio)
        except InvalidInput as exc:
            self.message = str(exc)
            return self.message
        self._after_change()
        return self.message

    def remove(self, weight_id: str) -> None:
        self.beam.remove(weight_id)
        self._after_change()

    def reset(self) -> None:
        self.beam.reset()
        self.message = None

    def snapshot(self) -> Dict[str, Any]:
        return {**self.beam.snapshot(), "message": self.message}


class SortingGame:
    """At most one playback card per algorithm, each over its own random array."""

    def __init__(self, *, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()
        self.cards: Dict[str, SortPlayer] = {}

    def add(self, algorithm: str, values: Optional[Sequence[float]] = None) -> SortPlayer:
        name = algorithm.lower()
        if name in self.cards:
            return self.cards[name]
        if values is None:
            values = random_array(rng=self.rng)
        player = SortPlayer(generate_steps(name, values))
        self.cards[name] = player
        return player

    def add_all(self) -> List[SortPlayer]:
        return [self.add(name) for name in ALGORITHMS]

    def clear(self) -> None:
        for player in self.cards.values():
            player.pause()
        self.cards = {}

    def tick(self, now: float) -> int:
        """Advance every playing card that is due; return how many stepped."""

        return sum(1 for player in list(self.cards.values()) if player.tick(now))

    def snapshot(self) -> Dict[str, Any]:
        return {"cards": [player.snapshot() for player in self.cards.values()]}


class GraphGame:
    """Click-driven graph editing with an explicit weight-editing mode.

    With a store the graph document is saved after every edit and restored at mount;
    a saved snapshot is only used when it has both ``nodes`` and ``edges``.
    """

    snapshot_key = "graph_editor"

    def __init__(self, store: ProgressStore | None = None, *, initial_nodes: int = 8) -> None:
        self.store = store
        self.graph = Graph()
        self.graph.seed(initial_nodes)
        self.selected: Optional[str] = None
        self.editing_edge: Optional[str] = None
        self.message: Optional[str] = None
        self._restore()
        self._persist()

    def _restore(self) -> None:
        if self.store is None:
            return
        saved = self.store.read_snapshot(self.snapshot_key)
        if not isinstance(saved, dict) or "nodes" not in saved or "edges" not in saved:
            return
        try:
            self.graph.load_document(saved)
        except MalformedImport as exc:
            logger.warning("Ignoring saved graph: %s", exc)

    def _persist(self) -> None:
        if self.store is not None:
            self.store.write_snapshot(self.snapshot_key, self.graph.to_document())

    def click(self, x: float, y: float) -> None:
        """Empty canvas adds a node; two node clicks toggle an edge between them."""

        hit = self.graph.node_at(x, y)
        if hit is None:
            self.graph.add_node(x, y)
            self.selected = None
            self._persist()
            return
        if self.selected is None:
            self.selected = hit.id
            return
        if self.selected == hit.id:
            self.selected = None
            return
        self.graph.toggle_edge(self.selected, hit.id)
        self.selected = None
        self._persist()

    def remove_node(self, node_id: str) -> None:
        self.graph.remove_node(node_id)
        if self.selected == node_id:
            self.selected = None
        if self.editing_edge is not None and all(e.id != self.editing_edge for e in self.graph.edges):
            self.editing_edge = None
        self._persist()

    def begin_weight_edit(self, edge_id: str) -> bool:
        """Enter weight-editing mode for an edge; only available on weighted graphs."""

        if not self.graph.weighted:
            return False
        try:
            self.graph.edge(edge_id)
        except InvalidInput as exc:
            self.message = str(exc)
            return False
        self.editing_edge = edge_id
        return True

    def submit_weight(self, raw: Any) -> Optional[str]:
        """Apply the entered weight and leave editing mode; invalid input stays in it."""

        if self.editing_edge is None:
            return None
        try:
            self.graph.set_edge_weight(self.editing_edge, raw)
        except InvalidInput as exc:
            self.message = str(exc)
            return self.message
        self.editing_edge = None
        self.message = None
        self._persist()
        return None

    def cancel_weight_edit(self) -> None:
        self.editing_edge = None

    def import_json(self, text: str) -> Optional[str]:
        try:
            self.graph.load_json(text)
        except MalformedImport as exc:
            logger.warning("Graph import rejected: %s", exc)
            self.message = "Invalid graph JSON."
            return self.message
        self.selected = None
        self.editing_edge = None
        self.message = None
        self._persist()
        return None

    def export_json(self) -> str:
        return self.graph.to_json()

    def snapshot(self) -> Dict[str, Any]:
        return {
            **self.graph.snapshot(),
            "selected": self.selected,
            "editing_edge": self.editing_edge,
            "message": self.message,
        }


__all__ = [
    "StackGame",
    "QueueGame",
    "DcCircuitGame",
    "RlcGame",
    "ShmGame",
    "BeamBendingGame",
    "BeamBalanceGame",
    "SortingGame",
    "GraphGame",
]
