"""End-to-end walkthrough of a colour table across pushes, pops and removals."""

import contexts.manager as manager


class TestColourWalkthrough:
    """One manager taken through every kind of operation in sequence."""

    def test_walkthrough(self) -> None:
        """Each step sees the values the layer stack implies."""
        mgr: manager.ContextManager[str, int] = manager.ContextManager.with_empty()

        mgr.insert("red", 255)  # [{"red": 255}]
        assert mgr.get("red") == 255
        assert mgr.get("green") is None

        mgr.push({"red": 63})  # [{"red": 63}, {"red": 255}]
        assert mgr.get_local("red") == 63
        assert mgr.get_from(1, "red") == 255

        mgr.push_empty()  # [{}, {"red": 63}, {"red": 255}]
        assert mgr.get("red") == 63
        assert mgr.get_local("red") is None

        mgr.pop()  # [{"red": 63}, {"red": 255}]
        assert len(mgr) == 2
        assert mgr.get_local("red") == 63
        assert mgr.get_from(1, "red") == 255

        mgr.push_local()  # [{"red": 63}, {"red": 63}, {"red": 255}]
        slot = mgr.get_mut("red")
        assert slot is not None
        slot.value = 192  # [{"red": 192}, {"red": 63}, {"red": 255}]
        assert mgr.get("red") == 192
        assert mgr.get_from(1, "red") == 63

        mgr.remove("red")  # [{}, {"red": 63}, {"red": 255}]
        assert mgr.get("red") == 63
        assert mgr.get_local("red") is None

        fork = mgr.fork()
        second_fork = mgr.fork_from(1)
        assert fork is not None and second_fork is not None
        assert len(mgr) == 3
        assert len(fork) == 3
        assert len(second_fork) == 2

        assert mgr.remove_all("red") == 63  # [{}, {}, {}]
        assert mgr.get("red") is None
        assert not mgr.contains_key("red")

        # Forks are untouched by the removal
        assert fork.get("red") == 63
        assert second_fork.get_local("red") == 63
