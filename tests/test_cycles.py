"""Tests for cycle detection and topological ordering."""
import pytest

from critpath.cycles import (check_new_dependency, find_cycles,
                             topological_order, would_create_cycle)
from critpath.errors import (CyclicDependency, SelfDependency,
                             UnknownTaskReference)
from critpath.graph import build_graph


class TestTopologicalOrder:

    def test_predecessors_first(self, chain_with_branch):
        graph = build_graph(*chain_with_branch)
        order = topological_order(graph)

        assert sorted(order) == ['A', 'B', 'C', 'D']
        for dep in graph.dependencies:
            assert order.index(dep.predecessor.id) < order.index(dep.successor.id)

    def test_deterministic(self, chain_with_branch):
        tasks, deps = chain_with_branch
        order = topological_order(build_graph(tasks, deps))
        assert topological_order(build_graph(tasks[::-1], deps[::-1])) == order

    def test_deep_chain(self, make_task, make_dep):
        n = 5000
        tasks = [make_task('t%05d' % i, 1) for i in range(n)]
        deps = [make_dep('t%05d' % (i + 1), 't%05d' % i) for i in range(n - 1)]
        assert topological_order(build_graph(tasks, deps)) == [t['id'] for t in tasks]

    def test_cycle(self, triangle_cycle):
        with pytest.raises(CyclicDependency) as e:
            topological_order(build_graph(*triangle_cycle))

        assert e.value.cycle == ['A', 'B', 'C']
        assert e.value.message == "Circular dependency detected: A -> B -> C -> A"
        assert e.value.to_dict()['cycle'] == ['A', 'B', 'C']

    def test_cycle_behind_tail(self, make_task, make_dep):
        tasks = [make_task(tid, 1) for tid in 'XAB']
        deps = [make_dep('A', 'X'), make_dep('B', 'A'), make_dep('A', 'B')]
        with pytest.raises(CyclicDependency) as e:
            topological_order(build_graph(tasks, deps))
        assert e.value.cycle == ['A', 'B']


class TestFindCycles:

    def test_acyclic(self, chain):
        assert find_cycles(build_graph(*chain)) == []

    def test_disjoint_cycles(self, make_task, make_dep):
        tasks = [make_task(tid, 1) for tid in 'ABCD']
        deps = [make_dep('B', 'A'), make_dep('A', 'B'), make_dep('D', 'C'), make_dep('C', 'D')]
        assert find_cycles(build_graph(tasks, deps)) == [['A', 'B'], ['C', 'D']]


class TestProposedDependency:
    """Checks of a dependency before it is added."""

    def test_would_create_cycle(self, chain):
        graph = build_graph(*chain)

        # C -> A closes A -> B -> C
        assert would_create_cycle(graph, 'A', 'C')
        assert not would_create_cycle(graph, 'C', 'A')
        assert would_create_cycle(graph, 'B', 'B')

    def test_unknown_task(self, chain):
        with pytest.raises(UnknownTaskReference):
            would_create_cycle(build_graph(*chain), 'A', 'Z')

    def test_check_new_dependency(self, chain):
        graph = build_graph(*chain)
        assert check_new_dependency(graph, 'C', 'A') is None

        with pytest.raises(CyclicDependency) as e:
            check_new_dependency(graph, 'A', 'C')
        assert e.value.cycle == ['C', 'A', 'B']

        with pytest.raises(SelfDependency):
            check_new_dependency(graph, 'B', 'B')
