"""
Dependency graph (registry/graph.py).
"""

from modkit.registry.graph import DependencyGraph


def _graph(edges):
    graph = DependencyGraph()
    for name, deps in edges.items():
        graph.add_node(name, deps)
    return graph


# ============================================================================
# Ordering
# ============================================================================

class TestTopologicalSort:

    def test_dependencies_first(self):
        graph = _graph({"app": ["lib"], "lib": ["core"], "core": []})
        ordered, remaining = graph.topological_sort()
        assert ordered == ["core", "lib", "app"]
        assert remaining == []

    def test_name_tie_break(self):
        graph = _graph({"c": [], "a": [], "b": []})
        assert graph.topological_sort()[0] == ["a", "b", "c"]

    def test_tie_break_applies_at_every_step(self):
        # z unlocks before b is considered; the heap still yields b first.
        graph = _graph({"base": [], "z": ["base"], "b": ["base"], "y": []})
        assert graph.topological_sort()[0] == ["base", "b", "y", "z"]

    def test_cycle_left_in_remaining(self):
        graph = _graph({"a": ["b"], "b": ["a"], "c": ["a"], "d": []})
        ordered, remaining = graph.topological_sort()
        assert ordered == ["d"]
        assert remaining == ["a", "b", "c"]

    def test_duplicate_dependencies_collapsed(self):
        graph = _graph({"app": ["core", "core"], "core": []})
        assert graph.to_dict()["app"] == ["core"]
        assert graph.topological_sort()[0] == ["core", "app"]

    def test_unknown_dependency_added_as_leaf(self):
        graph = _graph({"app": ["ghost"]})
        assert "ghost" in graph
        assert len(graph) == 2


# ============================================================================
# Cycles
# ============================================================================

class TestCycles:

    def test_no_cycles(self):
        graph = _graph({"a": ["b"], "b": []})
        assert graph.find_cycles() == []

    def test_two_cycle(self):
        graph = _graph({"b": ["a"], "a": ["b"]})
        assert graph.find_cycles() == [["a", "b"]]

    def test_self_loop(self):
        graph = _graph({"solo": ["solo"], "other": []})
        assert graph.find_cycles() == [["solo"]]

    def test_multiple_cycles_sorted(self):
        graph = _graph({
            "x": ["y"], "y": ["x"],
            "a": ["c"], "c": ["b"], "b": ["a"],
        })
        cycles = graph.find_cycles()
        assert [c[0] for c in cycles] == ["a", "x"]
        assert sorted(cycles[0]) == ["a", "b", "c"]

    def test_dependent_of_cycle_is_not_a_member(self):
        graph = _graph({"a": ["b"], "b": ["a"], "c": ["a"]})
        assert graph.find_cycles() == [["a", "b"]]

    def test_three_cycle_keeps_dependency_order(self):
        graph = _graph({"x": ["y"], "y": ["z"], "z": ["x"]})
        assert graph.find_cycles() == [["x", "y", "z"]]

    def test_long_chain_into_cycle(self):
        names = [f"p{i:05d}" for i in range(5000)]
        edges = {name: [nxt] for name, nxt in zip(names, names[1:] + ["loop_a"])}
        edges.update({"loop_a": ["loop_b"], "loop_b": ["loop_a"]})
        graph = _graph(edges)

        assert graph.find_cycles() == [["loop_a", "loop_b"]]
        ordered, remaining = graph.topological_sort()
        assert ordered == []
        assert len(remaining) == 5002


# ============================================================================
# Export
# ============================================================================

class TestExport:

    def test_to_dot(self):
        dot = _graph({"app": ["core"], "core": []}).to_dot()
        assert dot.startswith("digraph dependencies {")
        assert '"app" -> "core";' in dot
        assert dot.endswith("}")

    def test_to_dict(self):
        assert _graph({"b": ["a"], "a": []}).to_dict() == {"a": [], "b": ["a"]}
