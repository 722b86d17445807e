"""Unit tests for the model router and the in-memory stores."""

import asyncio

import pytest

from tests.fakes import FakeChatModel, FakeModelFactory, model_config
from toolrelay.errors import ModelNotConfiguredError, RouterError
from toolrelay.routing.router import ModelRouter
from toolrelay.routing.stores import InMemoryModelConfigStore, InMemoryServerConfigStore


@pytest.fixture
def model_store():
    return InMemoryModelConfigStore(
        [
            model_config("general", is_default=True),
            model_config("coder"),
            model_config("disabled", enabled=False),
        ]
    )


@pytest.fixture
def server_store():
    return InMemoryServerConfigStore(preferred_models={"git-server": "coder", "broken-server": "missing"})


@pytest.fixture
def factory():
    return FakeModelFactory()


@pytest.fixture
def router(model_store, server_store, factory):
    return ModelRouter(model_store, server_store, model_factory=factory)


def test_store_default_and_lookup(model_store):
    """Test default selection and lookup by id."""
    assert model_store.get_default().id == "general"
    assert model_store.get_by_id("coder").id == "coder"
    assert model_store.get_by_id("nope") is None
    assert [c.id for c in model_store.list()] == ["general", "coder", "disabled"]


def test_store_single_default(model_store):
    """Test that saving a new default clears the old default flag."""
    model_store.save(model_config("coder", is_default=True))

    assert model_store.get_default().id == "coder"
    assert model_store.get_by_id("general").is_default is False


def test_store_falls_back_to_first_enabled():
    """Test the fallback when no configuration is marked default."""
    store = InMemoryModelConfigStore([model_config("off", enabled=False), model_config("on")])

    assert store.get_default().id == "on"


def test_server_store_context_params_are_copies():
    """Test that callers cannot mutate stored context parameters."""
    store = InMemoryServerConfigStore(context_params={"fs": {"root": "/srv"}})

    params = store.get_context_params("fs")
    params["root"] = "/etc"

    assert store.get_context_params("fs") == {"root": "/srv"}
    assert store.get_context_params("other") == {}


def test_current_config_before_activation_is_store_default(router):
    """Test that the default configuration is reported before first use."""
    assert router.get_current_model_config().id == "general"


@pytest.mark.asyncio
async def test_ensure_active_activates_default(router, factory):
    """Test that the default model is activated once and then reused."""
    first = await router.ensure_active()
    second = await router.ensure_active()

    assert first.config.id == "general"
    assert first is second
    assert factory.created == ["general"]


@pytest.mark.asyncio
async def test_ensure_active_without_configs_raises(server_store, factory):
    """Test that an empty store raises ModelNotConfiguredError."""
    router = ModelRouter(InMemoryModelConfigStore(), server_store, model_factory=factory)

    assert router.get_current_model_config() is None
    with pytest.raises(ModelNotConfiguredError):
        await router.ensure_active()


@pytest.mark.asyncio
async def test_ensure_active_propagates_factory_failure(model_store, factory):
    """Test that a default that cannot be instantiated raises RouterError."""
    factory.fail_for.add("general")
    router = ModelRouter(model_store, model_factory=factory)

    with pytest.raises(RouterError):
        await router.ensure_active()


@pytest.mark.asyncio
async def test_select_model_switches(router):
    """Test a persistent model switch."""
    await router.ensure_active()

    assert await router.select_model("coder") is True
    assert router.get_current_model_config().id == "coder"


@pytest.mark.asyncio
async def test_select_unknown_or_disabled_model_keeps_current(router):
    """Test that failed switches leave the current model active."""
    await router.ensure_active()

    assert await router.select_model("missing") is False
    assert await router.select_model("disabled") is False
    assert router.get_current_model_config().id == "general"


@pytest.mark.asyncio
async def test_run_for_tool_switches_and_restores(router):
    """Test that a preferred model is active only during the tool call."""
    await router.ensure_active()
    seen = []

    async def call():
        seen.append(router._active.config.id)
        return "ok"

    result, used = await router.run_for_tool("git-server", call)

    assert result == "ok"
    assert used.id == "coder"
    assert seen == ["coder"]
    assert router.get_current_model_config().id == "general"


@pytest.mark.asyncio
async def test_run_for_tool_restores_when_call_raises(router):
    """Test that the original model is restored even when the call fails."""
    await router.ensure_active()

    async def call():
        raise RuntimeError("tool exploded")

    with pytest.raises(RuntimeError):
        await router.run_for_tool("git-server", call)

    assert router.get_current_model_config().id == "general"


@pytest.mark.asyncio
async def test_run_for_tool_continues_when_switch_fails(router):
    """Test that an unavailable preferred model leaves the call on the active one."""
    await router.ensure_active()

    async def call():
        return "ok"

    result, used = await router.run_for_tool("broken-server", call)

    assert result == "ok"
    assert used.id == "general"
    assert router.get_current_model_config().id == "general"


@pytest.mark.asyncio
async def test_run_for_tool_without_preference(router, factory):
    """Test that servers without a preference never trigger a switch."""
    await router.ensure_active()

    async def call():
        return 1

    _, used = await router.run_for_tool("weather-server", call)

    assert used.id == "general"
    assert factory.created == ["general"]


@pytest.mark.asyncio
async def test_concurrent_tool_calls_never_interleave_switches(router):
    """Test that switch-execute-restore sequences are serialized."""
    await router.ensure_active()
    observed = []

    async def call(label):
        observed.append((label, router._active.config.id))
        await asyncio.sleep(0)
        observed.append((label, router._active.config.id))
        return label

    await asyncio.gather(
        router.run_for_tool("git-server", lambda: call("git")),
        router.run_for_tool("weather-server", lambda: call("weather")),
    )

    assert ("git", "coder") in observed
    assert ("weather", "general") in observed
    assert ("weather", "coder") not in observed
    assert router.get_current_model_config().id == "general"


@pytest.mark.asyncio
async def test_factory_models_are_reused(model_store):
    """Test that the fake factory hands out the registered model."""
    shared = FakeChatModel(name="general")
    router = ModelRouter(model_store, model_factory=FakeModelFactory({"general": shared}))

    active = await router.ensure_active()

    assert active.model is shared
