"""Tests for Store and create_store."""

import asyncio
import logging
from dataclasses import dataclass
from unittest.mock import MagicMock, patch

import pytest
from pydantic import BaseModel, Field, ValidationError

from textual_redux import (
    ActionLogger,
    DispatchHandler,
    EffectHandler,
    NOT_HANDLED,
    ReducerConfigurationError,
    ReducerHandler,
    Store,
    StoreOptions,
    create_store,
    effect,
    reduces,
)
from textual_redux.contracts import find_contract


class CounterState(BaseModel):
    count: int = 0
    name: str = ""


@dataclass
class Increment:
    amount: int = 1


@dataclass
class Decrement:
    amount: int = 1


@dataclass
class Rename:
    name: str


@dataclass
class Unregistered:
    pass


class CounterReducer:
    @reduces(Increment)
    def increment(self, state: CounterState, action: Increment) -> CounterState:
        return state.model_copy(update={"count": state.count + action.amount})

    @reduces(Decrement)
    def decrement(self, state: CounterState, action: Decrement) -> CounterState:
        return state.model_copy(update={"count": state.count - action.amount})


class NameReducer:
    def __init__(self) -> None:
        self.calls = []

    @reduces(Rename)
    def rename(self, state: CounterState, action: Rename) -> CounterState:
        self.calls.append(action)
        return state.model_copy(update={"name": action.name})


class AppEffects:
    def increment_later(self, amount: int):
        @effect
        async def run(dispatcher, get_state):
            await asyncio.sleep(0.01)
            dispatcher.dispatch(Increment(amount))

        return run


class TestCreateStore:
    """Tests for create_store."""

    def test_creates_store(self):
        store = create_store(CounterState(), CounterReducer())

        assert isinstance(store, Store)
        assert store.value == CounterState()
        assert store() == CounterState()

    def test_store_with_name(self):
        store = create_store(CounterState(), name="counter")

        assert store.name == "counter"
        assert store.state.name == "counter"
        assert "counter" in repr(store)

    def test_name_overrides_options(self):
        store = create_store(
            CounterState(), name="counter", options=StoreOptions(log_actions=True)
        )

        assert store.name == "counter"
        assert store.options.log_actions

    def test_rejects_ambiguous_reducer(self):
        class Ambiguous:
            @reduces(Increment)
            def first(self, state, action):
                return state

            @reduces(Increment)
            def second(self, state, action):
                return state

        with pytest.raises(ReducerConfigurationError):
            create_store(CounterState(), Ambiguous())


class TestStoreOptions:
    """Tests for StoreOptions."""

    def test_defaults(self):
        options = StoreOptions()
        assert options.name is None
        assert options.effects_first
        assert not options.log_actions
        assert options.log_level == logging.DEBUG

    def test_frozen(self):
        with pytest.raises(ValidationError):
            StoreOptions().effects_first = False


class TestHandlerChain:
    """Tests for chain assembly order."""

    def test_effect_handler_first_by_default(self):
        counter, names = CounterReducer(), NameReducer()
        store = create_store(CounterState(), counter, names)

        chain = store.handlers
        assert isinstance(chain[0], EffectHandler)
        assert [h.reducer for h in chain[1:]] == [counter, names]

    def test_effect_handler_last(self):
        class Observer(DispatchHandler[CounterState]):
            def handles(self, value_type):
                return False

            def invoke(self, state, value):
                return NOT_HANDLED

        observer = Observer()
        store = create_store(
            CounterState(),
            CounterReducer(),
            handlers=[observer],
            options=StoreOptions(effects_first=False, log_actions=True),
        )

        chain = store.handlers
        assert isinstance(chain[0], ReducerHandler)
        assert chain[1] is observer
        assert isinstance(chain[2], EffectHandler)
        assert isinstance(chain[3], ActionLogger)

    def test_one_effect_handler(self):
        store = create_store(CounterState(), CounterReducer(), NameReducer())

        effect_handlers = [h for h in store.handlers if isinstance(h, EffectHandler)]
        assert len(effect_handlers) == 1


class TestDispatching:
    """End-to-end dispatch through a store."""

    @pytest.mark.asyncio
    async def test_increment_increment_decrement(self):
        store = create_store(CounterState(), CounterReducer())

        await store.dispatch_async(Increment())
        await store.dispatch_async(Increment())
        await store.dispatch_async(Decrement())

        assert store.value.count == 1

    @pytest.mark.asyncio
    async def test_effect_increments_later(self):
        store = create_store(CounterState(), CounterReducer())

        await store.dispatch_async(AppEffects().increment_later(5))

        assert store.value.count == 5

    @pytest.mark.asyncio
    async def test_unregistered_type_is_ignored(self):
        store = create_store(CounterState(count=3), CounterReducer())
        before = store.value

        await store.dispatch_async(Unregistered())

        assert store.value is before

    @pytest.mark.asyncio
    async def test_unrelated_reducer_not_invoked(self):
        names = NameReducer()
        store = create_store(CounterState(), CounterReducer(), names)

        await store.dispatch_async(Increment(2))
        assert names.calls == []

        await store.dispatch_async(Rename("clicks"))
        assert names.calls == [Rename("clicks")]
        assert store.value == CounterState(count=2, name="clicks")

    @pytest.mark.asyncio
    async def test_resolution_happens_once_per_type(self):
        store = create_store(CounterState(), CounterReducer())

        with patch(
            "textual_redux.handlers.find_contract", wraps=find_contract
        ) as probe:
            await store.dispatch_async(Increment(1))
            await store.dispatch_async(Increment(4))

        assert probe.call_count == 1
        assert store.value.count == 5

    @pytest.mark.asyncio
    async def test_watchers_see_each_change(self):
        changes = []
        store = create_store(CounterState(), CounterReducer())
        store.state.watch(lambda old, new: changes.append((old.count, new.count)))

        await store.dispatch_async(Increment())
        await store.dispatch_async(Increment(2))

        assert changes == [(0, 1), (1, 3)]

    @pytest.mark.asyncio
    async def test_fire_and_forget_effect_with_join(self):
        store = create_store(CounterState(), CounterReducer())

        store.dispatch(AppEffects().increment_later(2))
        await store.join()

        assert store.value.count == 2

    @pytest.mark.asyncio
    async def test_on_error_receives_failures(self):
        sink = MagicMock()

        @effect
        async def failing(dispatcher):
            raise RuntimeError("boom")

        store = create_store(CounterState(), on_error=sink)
        store.dispatch(failing)
        await store.join()

        sink.assert_called_once()

    @pytest.mark.asyncio
    async def test_log_actions(self, caplog):
        store = create_store(
            CounterState(),
            CounterReducer(),
            options=StoreOptions(log_actions=True, log_level=logging.INFO),
        )

        with caplog.at_level(logging.INFO, logger="textual_redux.actions"):
            await store.dispatch_async(Increment(3))

        assert "Increment" in caplog.text
        assert "count=3" in caplog.text

    @pytest.mark.asyncio
    async def test_function_reducer(self):
        @reduces(Increment)
        def add(state: int, action: Increment) -> int:
            return state + action.amount

        store = create_store(0, add)

        await store.dispatch_async(Increment(4))

        assert store.value == 4

    def test_sync_dispatch_without_loop(self):
        store = create_store(CounterState(), CounterReducer())

        store.dispatch(Increment())
        store.dispatch(Increment())
        store.dispatch(Decrement())
        store.dispatch(AppEffects().increment_later(5))

        assert store.value.count == 6


class Session(BaseModel):
    user: str = ""
    token: str = Field("", exclude=True)


@dataclass
class Login:
    token: str


class SessionReducer:
    @reduces(Login)
    def login(self, state: Session, action: Login) -> Session:
        return state.model_copy(update={"token": action.token})


class TestExcludedFields:
    """State updates that only touch fields excluded from serialization."""

    @pytest.mark.asyncio
    async def test_reducer_update_to_excluded_field_is_stored(self):
        changes = []
        store = create_store(Session(user="alice"), SessionReducer())
        store.state.watch(lambda old, new: changes.append(new.token))

        await store.dispatch_async(Login("abc"))

        assert store.value.token == "abc"
        assert changes == ["abc"]
