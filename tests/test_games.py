"""Tests for the level sessions and their user-facing messages."""

import random

import pytest

from engilab.games import (
    BeamBalanceGame,
    BeamBendingGame,
    DcCircuitGame,
    GraphGame,
    QueueGame,
    RlcGame,
    ShmGame,
    SortingGame,
    StackGame,
)
from engilab.progress import Progress
from engilab.sorting import ALGORITHMS


class TestStackGame:
    def test_messages(self, store):
        game = StackGame(store)
        assert game.pop() == "Stack is empty. Cannot pop."
        assert game.peek() == "Stack is empty."
        assert game.push(" A ") == "Pushed!"
        assert game.peek() == "Top: A"
        assert game.pop() == "Popped: A"
        assert game.snapshot()["items"] == []

    def test_blank_push_rejected(self, store):
        game = StackGame(store)
        assert game.push("   ") == "Enter a value to push."
        assert game.score == 0
        assert len(game.stack) == 0

    def test_completes_after_five_operations(self, store):
        game = StackGame(store)
        for value in "ABCD":
            game.push(value)
        assert store.read("cse_stacks") == Progress()
        game.pop()
        assert store.read("cse_stacks") == Progress(3, 50)
        assert game.reset() == "Reset the stack."
        assert game.score == 0


class TestQueueGame:
    def test_numeric_values_only(self, store):
        game = QueueGame(store)
        assert game.enqueue("abc") == "Enter a numeric value to enqueue."
        assert game.enqueue("3") == "Enqueued 3"
        assert game.enqueue("2.5") == "Enqueued 2.5"
        assert game.peek() == "Front: 3"
        assert game.dequeue() == "Dequeued 3"
        assert game.snapshot()["items"] == [2.5]

    def test_empty_queue(self, store):
        game = QueueGame(store)
        assert game.dequeue() == "Queue is empty. Cannot dequeue."
        assert game.peek() == "Queue is empty."
        assert game.score == 0

    def test_completes_after_five_operations(self, store):
        game = QueueGame(store)
        for value in range(3):
            game.enqueue(value)
        game.dequeue()
        game.peek()
        assert store.read("cse_queues") == Progress(3, 50)


class TestDcCircuitGame:
    def test_success_records_progress(self, store, rng):
        game = DcCircuitGame(store, rng=rng)
        game.target = 0.0167
        assert game.check().startswith("Success!")
        assert store.read("ece_dc") == Progress(3, 50)

    def test_miss(self, store, rng):
        game = DcCircuitGame(store, rng=rng)
        game.target = 0.1
        assert game.check().startswith("Not yet.")
        assert store.read("ece_dc") == Progress()

    def test_invalid_values_keep_state(self, store, rng):
        game = DcCircuitGame(store, rng=rng)
        assert game.set_values(resistances=["100", "x", "100"]) is not None
        assert game.resistances == [100.0, 100.0, 100.0]
        assert game.set_values(voltage=9) is None
        assert game.solution.current == pytest.approx(0.03)

    def test_new_target_keeps_circuit(self, store):
        game = DcCircuitGame(store, rng=random.Random(11))
        game.set_values(voltage=9, resistances=[50, 60, 70])
        for _ in range(20):
            target = game.new_target()
            assert 0.02 <= target <= 0.32
            assert target == round(target, 4)
        assert game.voltage == 9.0
        assert game.resistances == [50.0, 60.0, 70.0]

    def test_reset_values(self, store, rng):
        game = DcCircuitGame(store, rng=rng)
        game.set_values(voltage=12, resistances=[1, 2, 3])
        target = game.target
        game.reset_values()
        assert (game.voltage, game.resistances) == (5.0, [100.0, 100.0, 100.0])
        assert game.target == target

    def test_randomized_target_matches_new_values(self, store):
        game = DcCircuitGame(store, rng=random.Random(5))
        target = game.randomize_challenge()
        assert game.voltage in DcCircuitGame.voltages
        assert all(20 <= r <= 320 for r in game.resistances)
        ratio = target / game.solution.current
        assert 0.5 < ratio < 1.9


class TestRlcGame:
    def test_default_parameters_complete_on_mount(self, store):
        game = RlcGame(store)
        assert game.session.completed
        assert store.read("ece_rlc") == Progress(3, 50)
        assert game.response.final_voltage == pytest.approx(5.0, abs=0.1)

    def test_rejected_parameters_keep_previous_response(self, store):
        game = RlcGame(store)
        response = game.response
        assert game.set_params(inductance_mh=0) is not None
        assert game.inductance_mh == 10.0
        assert game.response is response
        assert game.set_params(resistance="abc") is not None
        assert game.resistance == 100.0

    def test_recompute_on_change(self, store):
        game = RlcGame(store)
        assert game.set_params(resistance=10) is None
        assert game.snapshot()["resistance"] == 10.0


class TestShmGame:
    def test_check_needs_a_run(self, store, rng):
        game = ShmGame(store, rng=rng, dt=0.01)
        assert game.check() == "Run the simulation first."

    def test_success_under_target(self, store, rng):
        game = ShmGame(store, rng=rng, dt=0.01)
        for _ in range(10):
            game.simulator.step()
        game.target_mm = 1000.0
        assert game.check().startswith("Success!")
        assert store.read("mech_shm") == Progress(3, 50)

    def test_miss_over_target(self, store, rng):
        game = ShmGame(store, rng=rng, dt=0.01)
        game.simulator.step()
        game.target_mm = 1.0
        assert game.check().startswith("Not yet.")
        assert not game.session.completed

    def test_rejected_params(self, store, rng):
        game = ShmGame(store, rng=rng)
        assert game.set_params(mass=0) is not None
        assert game.simulator.params.mass == 0.5
        assert game.set_params(damping="2") is None
        assert game.simulator.params.damping == 2.0

    def test_new_target_range(self, store, rng):
        game = ShmGame(store, rng=rng)
        assert 20.0 <= game.target_mm <= 80.0
        assert 5.0 <= game.new_target() <= 85.0


class TestBeamGames:
    def test_bending_completes_after_three_checks(self, store):
        game = BeamBendingGame(store)
        for _ in range(3):
            message = game.check()
        assert message.startswith("Deflection at center:")
        assert store.read("mech_beams") == Progress(3, 50)

    def test_bending_rejects_bad_input(self, store):
        game = BeamBendingGame(store)
        assert game.set_values(bogus=1) == "Unknown inputs: bogus"
        assert game.set_values(force="heavy") is not None
        assert game.set_values(modulus_gpa=0) is not None
        assert game.values == BeamBendingGame.defaults
        assert game.set_values(length="4") is None
        assert game.deflection == pytest.approx(8 * 1.6667e-6, rel=1e-4)

    def test_balance_completes(self, store):
        game = BeamBalanceGame(store)
        assert game.place(5, -2) is None
        assert game.place(2, 5) == "Balanced!"
        assert store.read("mech_torque") == Progress(3, 50)

    def test_empty_beam_does_not_complete(self, store):
        game = BeamBalanceGame(store)
        weight = game.beam.place(1, 1)
        game.remove(weight.id)
        assert not game.session.completed

    def test_balance_rejects_fractional_slot(self, store):
        game = BeamBalanceGame(store)
        assert game.place(1, 2.5) == "position must be a whole slot number"
        assert len(game.beam) == 0


class TestSortingGame:
    def test_one_card_per_algorithm(self, rng):
        game = SortingGame(rng=rng)
        players = game.add_all()
        assert [player.sequence.algorithm for player in players] == list(ALGORITHMS)
        assert game.add("Bubble") is players[0]

    def test_tick_advances_playing_cards(self, rng):
        game = SortingGame(rng=rng)
        game.add("merge", [3, 2, 1])
        game.add("quick", [3, 2, 1])
        game.cards["merge"].play(now=0.0)
        assert game.tick(10.0) == 1
        game.clear()
        assert game.snapshot() == {"cards": []}


class TestGraphGame:
    def test_click_toggles_edges(self):
        game = GraphGame(initial_nodes=3)
        game.click(60, 40)
        game.click(150, 40)
        assert len(game.graph.edges) == 1
        game.click(150, 40)
        game.click(60, 40)
        assert game.graph.edges == ()

    def test_click_on_canvas_adds_node(self):
        game = GraphGame(initial_nodes=3)
        game.click(500, 200)
        assert len(game.graph.nodes) == 4
        assert game.selected is None

    def test_weight_editing(self):
        game = GraphGame(initial_nodes=2)
        game.click(60, 40)
        game.click(150, 40)
        edge = game.graph.edges[0]
        assert not game.begin_weight_edit(edge.id)

        game.graph.weighted = True
        assert not game.begin_weight_edit("missing")
        assert game.begin_weight_edit(edge.id)
        assert game.submit_weight("abc") is not None
        assert game.editing_edge == edge.id
        assert game.submit_weight("3") is None
        assert game.editing_edge is None
        assert game.graph.edge(edge.id).weight == 3.0

    def test_invalid_import_keeps_graph(self):
        game = GraphGame(initial_nodes=3)
        exported = game.export_json()
        assert game.import_json("oops") == "Invalid graph JSON."
        assert game.export_json() == exported
        assert game.import_json(exported) is None

    def test_import_rejects_non_object_entries(self):
        game = GraphGame(initial_nodes=3)
        exported = game.export_json()
        assert game.import_json('{"nodes": [], "edges": ["x"]}') == "Invalid graph JSON."
        assert game.import_json('{"nodes": [1], "edges": []}') == "Invalid graph JSON."
        assert game.export_json() == exported

    def test_edits_are_saved_and_restored(self, store):
        game = GraphGame(store, initial_nodes=2)
        game.click(60, 40)
        game.click(150, 40)
        game.click(500, 200)
        restored = GraphGame(store, initial_nodes=8)
        assert len(restored.graph.nodes) == 3
        assert restored.export_json() == game.export_json()

    def test_saved_snapshot_needs_nodes_and_edges(self, store):
        store.write_snapshot(GraphGame.snapshot_key, {"nodes": [{"id": "n1", "x": 0, "y": 0}]})
        game = GraphGame(store, initial_nodes=3)
        assert len(game.graph.nodes) == 3

    def test_malformed_saved_snapshot_falls_back_to_seed(self, store):
        store.write_snapshot(GraphGame.snapshot_key, {"nodes": ["x"], "edges": []})
        game = GraphGame(store, initial_nodes=3)
        assert len(game.graph.nodes) == 3

    def test_remove_selected_node(self):
        game = GraphGame(initial_nodes=2)
        game.click(60, 40)
        game.remove_node(game.selected)
        assert game.selected is None
        assert len(game.snapshot()["nodes"]) == 1
