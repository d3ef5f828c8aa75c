"""Tests for the state cell."""

from unittest.mock import MagicMock

from pydantic import BaseModel, Field

from textual_redux import State, StateChanged


class User(BaseModel):
    """Test model."""
    name: str
    age: int


class Session(BaseModel):
    """Model with a field left out of serialization."""
    user: str
    token: str = Field("", exclude=True)


class TestState:
    """Tests for State class."""

    def test_initial_value(self):
        state = State(42)
        assert state.value == 42
        assert state.read() == 42

    def test_write_value(self):
        state = State(0)
        state.write(10)
        assert state.read() == 10

    def test_value_setter(self):
        state = State(0)
        state.value = 100
        assert state.value == 100

    def test_no_notification_if_same_value(self):
        changes = []
        state = State(5)
        state.watch(lambda old, new: changes.append((old, new)))

        state.write(5)  # Same value
        assert len(changes) == 0

        state.write(10)  # Different value
        assert changes == [(5, 10)]

    def test_watch_callback(self):
        changes = []
        state = State(0)

        unwatch = state.watch(lambda old, new: changes.append((old, new)))

        state.write(1)
        state.write(2)

        assert changes == [(0, 1), (1, 2)]

        unwatch()
        state.write(3)

        assert len(changes) == 2  # No new changes after unwatch

    def test_watcher_may_unwatch_itself(self):
        calls = []
        state = State(0)

        def once(old, new):
            calls.append(new)
            unwatch()

        unwatch = state.watch(once)
        state.write(1)
        state.write(2)

        assert calls == [1]

    def test_subscribed_widget_receives_message(self):
        widget = MagicMock()
        state = State(0)
        state.subscribe(widget)

        state.write(7)

        widget.post_message.assert_called_once()
        message = widget.post_message.call_args.args[0]
        assert isinstance(message, StateChanged)
        assert message.old_value == 0
        assert message.new_value == 7
        assert message.state is state

    def test_unsubscribed_widget_is_not_notified(self):
        widget = MagicMock()
        state = State(0)
        state.subscribe(widget)
        state.unsubscribe(widget)

        state.write(1)

        widget.post_message.assert_not_called()

    def test_repr(self):
        state = State(42, name="counter")
        assert "42" in repr(state)
        assert "counter" in repr(state)
        assert state.name == "counter"


class TestModelValues:
    """Tests for Pydantic model values."""

    def test_equal_model_does_not_notify(self):
        changes = []
        state = State(User(name="Alice", age=30))
        state.watch(lambda old, new: changes.append((old, new)))

        state.write(User(name="Alice", age=30))
        assert changes == []

        state.write(User(name="Alice", age=31))
        assert len(changes) == 1
        assert changes[0][1].age == 31

    def test_model_copy_replaces_value(self):
        original = User(name="Alice", age=30)
        state = State(original)

        state.write(original.model_copy(update={"name": "Bob"}))

        assert state.read().name == "Bob"
        assert original.name == "Alice"

    def test_change_to_excluded_field_replaces_value(self):
        changes = []
        widget = MagicMock()
        original = Session(user="alice")
        state = State(original)
        state.watch(lambda old, new: changes.append((old, new)))
        state.subscribe(widget)

        updated = original.model_copy(update={"token": "abc"})
        state.write(updated)

        assert state.read() is updated
        assert state.read().token == "abc"
        assert changes == [(original, updated)]
        widget.post_message.assert_called_once()
