"""Tests for Graph registration, set() propagation and introspection."""

import operator

import pytest

from reactgraph import (
    CycleError,
    Derivation,
    DuplicateNodeError,
    Graph,
    GraphError,
    Signal,
    Sink,
    UnknownNodeError,
)


def _identity(x):
    return x


class TestRegister:
    def test_acyclic_registration(self):
        g = Graph()
        g.signal("a", 1)
        g.derivation("b", _identity, ["a"])
        g.derivation("c", operator.add, ["a", "b"])
        g.sink("out", _identity, ["c"])
        assert len(g) == 4
        assert g.kind("c") == "derivation"
        assert g.dependencies("c") == ("a", "b")
        assert g.dependents("a") == ["b", "c"]

    def test_register_returns_bound_node(self):
        g = Graph()
        s = g.register(Signal("a", 1))
        assert s.graph is g
        assert g["a"] is s

    def test_self_dependency_is_cycle(self):
        g = Graph()
        with pytest.raises(CycleError) as info:
            g.derivation("x", _identity, ["x"])
        assert info.value.cycle == ["x", "x"]
        assert "x" not in g

    def test_forward_reference_cycle(self):
        g = Graph()
        g.derivation("x", _identity, ["y"])
        with pytest.raises(CycleError) as info:
            g.derivation("y", _identity, ["x"])
        assert info.value.cycle == ["y", "x", "y"]

    def test_longer_cycle_path(self):
        g = Graph()
        g.derivation("p", _identity, ["r"])
        g.derivation("q", _identity, ["p"])
        with pytest.raises(CycleError) as info:
            g.derivation("r", _identity, ["q"])
        assert info.value.cycle == ["r", "q", "p", "r"]
        assert "r -> q -> p -> r" in str(info.value)

    def test_cycle_leaves_graph_unchanged(self):
        g = Graph()
        g.signal("s", 0)
        g.derivation("x", _identity, ["y"])
        before = (len(g), g.dependents("s"), g.unresolved())
        with pytest.raises(CycleError):
            g.derivation("y", operator.add, ["s", "x"])
        assert (len(g), g.dependents("s"), g.unresolved()) == before
        assert "y" not in g

    def test_cycle_leaves_edges_unchanged(self):
        g = Graph()
        g.signal("s", 0)
        g.derivation("p", _identity, ["r"])
        g.derivation("q", operator.add, ["p", "s"])
        edges = g._table.edges
        before = (sorted(edges.nodes), sorted(edges.edges))
        with pytest.raises(CycleError):
            g.derivation("r", operator.add, ["s", "q"])
        assert (sorted(edges.nodes), sorted(edges.edges)) == before

    def test_cycle_found_through_second_dependency(self):
        g = Graph()
        g.signal("s", 0)
        g.derivation("a", _identity, ["b"])
        with pytest.raises(CycleError) as info:
            g.derivation("b", operator.add, ["s", "a"])
        assert info.value.cycle == ["b", "a", "b"]

    def test_string_dependencies_rejected(self):
        g = Graph()
        g.signal("price", 3)
        with pytest.raises(GraphError, match="must be a list of ids"):
            g.derivation("d", lambda p: p * 2, "price")
        assert "d" not in g
        assert g.unresolved() == set()

    def test_string_dependencies_rejected_for_sinks(self):
        g = Graph()
        g.signal("price", 3)
        with pytest.raises(GraphError):
            g.register(Sink("show", _identity), "price")
        assert g.sinks() == []

    def test_single_dependency_list(self):
        g = Graph()
        g.signal("price", 3)
        g.derivation("d", lambda p: p * 2, ["price"])
        assert g.dependencies("d") == ("price",)
        assert g.get("d") == 6

    def test_duplicate_id(self):
        g = Graph()
        g.signal("a", 1)
        with pytest.raises(DuplicateNodeError):
            g.derivation("a", _identity, [])

    def test_signal_cannot_have_dependencies(self):
        g = Graph()
        with pytest.raises(GraphError):
            g.register(Signal("a", 1), ["b"])

    def test_cannot_depend_on_sink(self):
        g = Graph()
        g.signal("a", 1)
        g.sink("out", _identity, ["a"])
        with pytest.raises(GraphError, match="cannot depend on sink"):
            g.derivation("d", _identity, ["out"])

    def test_forward_referenced_id_cannot_become_sink(self):
        g = Graph()
        g.derivation("d", _identity, ["later"])
        with pytest.raises(GraphError):
            g.sink("later", _identity, [])

    def test_node_cannot_join_two_graphs(self):
        first, second = Graph("first"), Graph("second")
        s = first.signal("a", 1)
        with pytest.raises(GraphError, match="already registered"):
            second.register(s)

    def test_rejects_non_nodes(self):
        with pytest.raises(GraphError):
            Graph().register("a")

    def test_empty_id_rejected(self):
        with pytest.raises(GraphError):
            Signal("", 1)

    def test_unresolved_forward_references(self):
        g = Graph()
        g.derivation("d", _identity, ["later"])
        assert g.unresolved() == {"later"}
        g.signal("later", 3)
        assert g.unresolved() == set()
        assert g.get("d") == 3


class TestSet:
    def test_returns_reached_sinks_in_registration_order(self):
        g = Graph()
        g.signal("a", 1)
        g.signal("b", 1)
        g.derivation("d", _identity, ["a"])
        g.sink("second_reg", _identity, ["d"])
        g.sink("unrelated", _identity, ["b"])
        g.sink("third_reg", _identity, ["a"])
        assert g.set("a", 2) == ["second_reg", "third_reg"]

    def test_marks_transitive_dependents_dirty(self):
        g = Graph()
        g.signal("a", 1)
        g.derivation("b", _identity, ["a"])
        g.derivation("c", _identity, ["b"])
        g.get("c")
        assert not g.is_dirty("b") and not g.is_dirty("c")
        g.set("a", 5)
        assert g.is_dirty("b") and g.is_dirty("c")

    def test_unrelated_derivation_stays_clean(self):
        g = Graph()
        g.signal("a", 1)
        g.signal("b", 1)
        g.derivation("from_b", _identity, ["b"])
        g.get("from_b")
        g.set("a", 2)
        assert not g.is_dirty("from_b")

    def test_diamond_reaches_sink_once(self):
        g = Graph()
        g.signal("s", 1)
        g.derivation("d1", _identity, ["s"])
        g.derivation("d2", _identity, ["s"])
        g.derivation("d3", operator.add, ["d1", "d2"])
        g.sink("out", _identity, ["d3"])
        assert g.set("s", 2) == ["out"]

    def test_set_unknown(self):
        with pytest.raises(UnknownNodeError):
            Graph().set("nope", 1)

    def test_set_derivation_rejected(self):
        g = Graph()
        g.derivation("d", lambda: 1)
        with pytest.raises(GraphError, match="only signals"):
            g.set("d", 2)

    def test_equals_comparator_skips_unchanged(self):
        g = Graph()
        g.signal("a", 1, equals=operator.eq)
        g.derivation("d", _identity, ["a"])
        g.sink("out", _identity, ["d"])
        g.get("d")
        assert g.set("a", 1) == []
        assert not g.is_dirty("d")
        assert g.set("a", 2) == ["out"]

    def test_without_comparator_every_set_propagates(self):
        g = Graph()
        g.signal("a", 1)
        g.derivation("d", _identity, ["a"])
        g.get("d")
        g.set("a", 1)
        assert g.is_dirty("d")

    def test_set_many_is_one_event(self):
        g = Graph()
        g.signal("a", 1)
        g.signal("b", 2)
        g.sink("from_b", _identity, ["b"])
        g.sink("from_a", _identity, ["a"])
        g.sink("both", operator.add, ["a", "b"])
        assert g.set_many({"a": 10, "b": 20}) == ["from_b", "from_a", "both"]
        assert g.get("a") == 10 and g.get("b") == 20

    def test_set_many_validates_before_writing(self):
        g = Graph()
        g.signal("a", 1)
        with pytest.raises(UnknownNodeError):
            g.set_many({"a": 5, "nope": 1})
        assert g.get("a") == 1

    def test_graphs_are_independent(self):
        one, two = Graph("one"), Graph("two")
        one.signal("a", 1)
        two.signal("a", 100)
        one.set("a", 2)
        assert two.get("a") == 100


class TestIntrospection:
    def test_contains_and_getitem(self):
        g = Graph()
        d = g.derivation("d", lambda: 1)
        assert "d" in g
        assert "nope" not in g
        assert isinstance(g["d"], Derivation)
        assert g["d"] is d
        with pytest.raises(UnknownNodeError):
            g["nope"]

    def test_unknown_node_error_is_key_error(self):
        g = Graph()
        with pytest.raises(KeyError):
            g.kind("missing")

    def test_sinks_listing(self):
        g = Graph()
        g.signal("a", 1)
        g.sink("s1", _identity, ["a"])
        g.sink("s2", _identity, ["a"])
        assert g.sinks() == ["s1", "s2"]
        assert isinstance(g["s2"], Sink)

    def test_is_dirty_only_for_derivations(self):
        g = Graph()
        g.signal("a", 1)
        with pytest.raises(GraphError):
            g.is_dirty("a")

    def test_repr(self):
        g = Graph("demo")
        g.signal("a", 1)
        assert repr(g) == "Graph('demo', nodes=1)"
