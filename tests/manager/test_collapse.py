"""Tests for collapsed views and the read-only mapping wrapper."""

import pytest as _pytest

import contexts.manager as manager


class TestCollapse:
    """collapse() folds layers with the most local values winning."""

    def test_most_local_value_wins(self) -> None:
        """Shared keys take the most local value."""
        mgr = manager.ContextManager.with_capacity(3)
        mgr.push({"y": 3})
        mgr.push({"w": 1, "x": 2})
        mgr.push({"y": 4, "z": 3})

        view = mgr.collapse()

        assert view == {"w": 1, "x": 2, "y": 4, "z": 3}

    def test_matches_get_for_every_key(self, colors: manager.ContextManager[str, int]) -> None:
        """Exactly the keys get() resolves, each with get()'s value."""
        view = colors.collapse()

        assert set(view) == {"red", "green", "blue"}
        for key, value in view.items():
            assert colors.get(key) == value

    def test_empty_manager(self, empty: manager.ContextManager[str, int]) -> None:
        """No layers collapse to an empty view."""
        assert empty.collapse() == {}

    def test_view_is_read_only(self, colors: manager.ContextManager[str, int]) -> None:
        """The collapsed view cannot be written to."""
        view = colors.collapse()

        with _pytest.raises(TypeError):
            view["red"] = 0  # type: ignore[index]

    def test_view_is_detached(self) -> None:
        """Later changes to the manager do not show up in the view."""
        mgr = manager.ContextManager.from_pairs({"plugins": ["a"], "x": 1})
        view = mgr.collapse()

        mgr.insert("x", 2)
        mgr["plugins"].append("b")

        assert view["x"] == 1
        assert view["plugins"] == ["a"]

    def test_manager_untouched(self, colors: manager.ContextManager[str, int]) -> None:
        """Collapsing does not consume the manager."""
        before = colors.copy()

        colors.collapse()

        assert colors == before


class TestCollapseOrdered:
    """collapse_ordered() yields keys in sorted order."""

    def test_keys_sorted(self) -> None:
        """Iteration follows key order, not insertion order."""
        mgr = manager.ContextManager.from_layers({"y": 4, "z": 3}, {"w": 1, "x": 2}, {"y": 3})

        view = mgr.collapse_ordered()

        assert list(view) == ["w", "x", "y", "z"]
        assert view["y"] == 4

    def test_unorderable_keys(self) -> None:
        """Keys that cannot be compared raise TypeError."""
        mgr = manager.ContextManager.from_layers({1: "int"}, {"a": "str"})

        with _pytest.raises(TypeError):
            mgr.collapse_ordered()


class TestCollapseInto:
    """collapse_into() folds layers into an existing mapping."""

    def test_layers_override_target(self) -> None:
        """Target keys survive only when no layer defines them."""
        mgr = manager.ContextManager.with_capacity(2)
        mgr.push({"y": 4})
        mgr.push({"w": 2, "x": 3})
        target = {"v": 1, "x": 2, "z": 5}

        mgr.collapse_into(target)

        assert target == {"v": 1, "w": 2, "x": 3, "y": 4, "z": 5}


class TestFrozenMapping:
    """FrozenMapping is a read-only Mapping view."""

    def test_mapping_protocol(self) -> None:
        """Lookup, iteration, length and membership work."""
        frozen = manager.FrozenMapping({"a": 1, "b": 2})

        assert frozen["a"] == 1
        assert list(frozen) == ["a", "b"]
        assert len(frozen) == 2
        assert "b" in frozen
        assert frozen.get("c") is None

    def test_wraps_without_copying(self) -> None:
        """The view tracks changes to the wrapped dict."""
        data = {"a": 1}
        frozen = manager.FrozenMapping(data)

        data["b"] = 2

        assert frozen["b"] == 2

    def test_accepts_pairs(self) -> None:
        """Non-mapping input is converted to a dict."""
        frozen = manager.FrozenMapping([("a", 1)])

        assert frozen == {"a": 1}

    def test_no_mutation(self) -> None:
        """Item assignment and deletion are not supported."""
        frozen = manager.FrozenMapping({"a": 1})

        with _pytest.raises(TypeError):
            frozen["a"] = 2  # type: ignore[index]
        with _pytest.raises(TypeError):
            del frozen["a"]  # type: ignore[attr-defined]

    def test_unhashable(self) -> None:
        """Values may be mutable, so views are not hashable."""
        with _pytest.raises(TypeError):
            hash(manager.FrozenMapping({}))

    def test_repr(self) -> None:
        """repr shows the wrapped content."""
        assert repr(manager.FrozenMapping({"a": 1})) == "FrozenMapping({'a': 1})"

    def test_not_equal_to_non_mapping(self) -> None:
        """Comparison with a non-mapping is not equal."""
        assert manager.FrozenMapping({"a": 1}) != [("a", 1)]
