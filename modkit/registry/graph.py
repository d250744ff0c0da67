"""
Dependency graph: Kahn ordering with a name tie-break, and Tarjan's
algorithm for cycle detection.
"""

import heapq
from typing import Dict, Iterator, List, Set, Tuple


class DependencyGraph:
    """
    Directed graph from dependent to dependency.

    Ordering is deterministic: among nodes whose dependencies are all
    processed, the smallest name goes first.
    """

    def __init__(self):
        self._adjacency: Dict[str, List[str]] = {}

    def add_node(self, name: str, dependencies: List[str]) -> None:
        """
        Add node to graph.

        Duplicate dependency names are collapsed, declaration order is kept.
        Dependencies not yet in the graph are added as leaf nodes.
        """
        seen: Set[str] = set()
        unique: List[str] = []
        for dep in dependencies:
            if dep not in seen:
                seen.add(dep)
                unique.append(dep)
        self._adjacency[name] = unique

        for dep in unique:
            if dep not in self._adjacency:
                self._adjacency[dep] = []

    def topological_sort(self) -> Tuple[List[str], List[str]]:
        """
        Kahn's algorithm, dependencies first.

        Returns:
            (ordered, remaining): `remaining` holds the nodes that could not
            be ordered because they sit on or behind a cycle, sorted by name.
        """
        in_degree: Dict[str, int] = {
            name: len(deps) for name, deps in self._adjacency.items()
        }
        dependents: Dict[str, List[str]] = {name: [] for name in self._adjacency}
        for name, deps in self._adjacency.items():
            for dep in deps:
                dependents[dep].append(name)

        heap = [name for name, degree in in_degree.items() if degree == 0]
        heapq.heapify(heap)
        ordered: List[str] = []

        while heap:
            name = heapq.heappop(heap)
            ordered.append(name)
            for dependent in dependents[name]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    heapq.heappush(heap, dependent)

        done = set(ordered)
        remaining = sorted(name for name in self._adjacency if name not in done)
        return ordered, remaining

    def find_cycles(self) -> List[List[str]]:
        """
        Find every cycle using Tarjan's strongly connected components.

        A component is a cycle when it has more than one node or its single
        node depends on itself. Each cycle is rotated to start at its
        smallest name, and cycles are sorted.

        The depth-first walk keeps its own stack, so dependency chains of any
        length are handled.
        """
        counter = 0
        stack: List[str] = []
        lowlinks: Dict[str, int] = {}
        index: Dict[str, int] = {}
        on_stack: Set[str] = set()
        cycles: List[List[str]] = []

        def visit(node_name: str) -> None:
            nonlocal counter
            index[node_name] = counter
            lowlinks[node_name] = counter
            counter += 1
            stack.append(node_name)
            on_stack.add(node_name)

        for root in sorted(self._adjacency):
            if root in index:
                continue
            visit(root)
            work: List[Tuple[str, Iterator[str]]] = [(root, iter(self._adjacency[root]))]

            while work:
                node_name, deps = work[-1]
                descended = False
                for dep_name in deps:
                    if dep_name not in index:
                        visit(dep_name)
                        work.append((dep_name, iter(self._adjacency.get(dep_name, []))))
                        descended = True
                        break
                    if dep_name in on_stack:
                        lowlinks[node_name] = min(lowlinks[node_name], index[dep_name])
                if descended:
                    continue

                work.pop()
                if work:
                    parent = work[-1][0]
                    lowlinks[parent] = min(lowlinks[parent], lowlinks[node_name])

                if lowlinks[node_name] != index[node_name]:
                    continue

                component: List[str] = []
                while True:
                    w = stack.pop()
                    on_stack.remove(w)
                    component.append(w)
                    if w == node_name:
                        break

                if len(component) > 1 or node_name in self._adjacency.get(node_name, []):
                    component.reverse()
                    start = component.index(min(component))
                    cycles.append(component[start:] + component[:start])

        return sorted(cycles)

    def to_dict(self) -> Dict[str, List[str]]:
        return {name: list(deps) for name, deps in sorted(self._adjacency.items())}

    def to_dot(self) -> str:
        """Export graph as DOT format for visualization."""
        lines = ["digraph dependencies {"]
        lines.append("  rankdir=LR;")
        lines.append("  node [shape=box, style=rounded];")

        for name in sorted(self._adjacency):
            lines.append(f'  "{name}";')

        for name, deps in sorted(self._adjacency.items()):
            for dep in deps:
                lines.append(f'  "{name}" -> "{dep}";')

        lines.append("}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._adjacency)

    def __contains__(self, name: object) -> bool:
        return name in self._adjacency

    def __repr__(self) -> str:
        return f"DependencyGraph({len(self._adjacency)} nodes)"
