"""Tests for the Guards registry."""
import pytest
from turnstile import Guards, all_of


class TestGuardsRegistry:
    """Test cases for Guards registry."""

    def test_register_and_check(self):
        """Register a guard, check returns correct bool."""
        # Arrange
        guards = Guards()
        guards.register("always_true", lambda h, c: True)
        guards.register("always_false", lambda h, c: False)

        # Act & Assert
        assert guards.check("always_true", (), None) is True
        assert guards.check("always_false", (), None) is False

    def test_guard_receives_history_and_context(self):
        """Check forwards history and context to the predicate."""
        # Arrange
        guards = Guards()
        seen = []
        guards.register("spy", lambda h, c: seen.append((h, c)) or True)

        # Act
        guards.check("spy", ("a", "b"), {"k": 1})

        # Assert
        assert seen == [(("a", "b"), {"k": 1})]

    def test_unregistered_guard_raises_keyerror(self):
        """Check and get with unknown name raise KeyError."""
        guards = Guards()

        with pytest.raises(KeyError):
            guards.check("nonexistent", (), None)
        with pytest.raises(KeyError):
            guards.get("nonexistent")

    def test_has_method(self):
        """Has returns True for registered, False for unregistered."""
        guards = Guards()
        guards.register("exists", lambda h, c: True)

        assert guards.has("exists") is True
        assert guards.has("does_not_exist") is False

    def test_names_method(self):
        """Returns all registered guard names in registration order."""
        guards = Guards()
        guards.register("guard1", lambda h, c: True)
        guards.register("guard2", lambda h, c: False)

        assert guards.names() == ["guard1", "guard2"]

    def test_register_overwrites(self):
        """Re-registering a name replaces the predicate."""
        guards = Guards()
        guards.register("g", lambda h, c: False)
        guards.register("g", lambda h, c: True)

        assert guards.check("g", (), None) is True
        assert guards.names() == ["g"]


class TestAllOf:
    """Test cases for the all_of combinator."""

    def test_all_pass(self):
        guard = all_of(lambda h, c: True, lambda h, c: c > 0)
        assert guard((), 1) is True

    def test_one_fails(self):
        guard = all_of(lambda h, c: True, lambda h, c: c > 0)
        assert guard((), 0) is False

    def test_short_circuits(self):
        """Later guards are not evaluated once one fails."""
        calls = []
        guard = all_of(lambda h, c: False, lambda h, c: calls.append(1) or True)

        assert guard((), None) is False
        assert calls == []
