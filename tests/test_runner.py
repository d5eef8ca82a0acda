import asyncio
import json
import logging

import pytest

from conftest import FakeCompiler
from kcmaker.compilers.base import Compiler
from kcmaker.core.errors import InternalError
from kcmaker.core.runner import BuildRunner, prepare_config
from kcmaker.plugins import (
    APPS_CONFIG_GLOBAL,
    AppsConfigPlugin,
    CleanOutputPlugin,
    DefinePlugin,
)

APPS = {"sales": {"appId": 42}}


def _config(tmp_path, plugins=None, mode="development"):
    return {
        "mode": mode,
        "entry": {},
        "output": {"path": str(tmp_path / "dist")},
        "plugins": list(plugins or []),
    }


def _injected(config):
    return [p for p in config["plugins"] if isinstance(p, AppsConfigPlugin)]


def test_mode_always_overrides(tmp_path):
    prepared = prepare_config(_config(tmp_path, mode="development"), "production", APPS)
    assert prepared["mode"] == "production"


@pytest.mark.parametrize("existing", [0, 1, 5])
def test_exactly_one_injection_regardless_of_existing_plugins(tmp_path, existing):
    plugins = [DefinePlugin(definitions={f"X{i}": str(i)}) for i in range(existing)]
    config = _config(tmp_path, plugins=plugins)

    prepared = prepare_config(config, "production", APPS)

    assert len(_injected(prepared)) == 1
    assert prepared["plugins"][:existing] == plugins
    assert prepared["plugins"][-1] is _injected(prepared)[0]


def test_repeated_runs_do_not_accumulate_injections(tmp_path):
    compiler = FakeCompiler()
    runner = BuildRunner(compiler)
    config = _config(tmp_path, plugins=[CleanOutputPlugin()])

    asyncio.run(runner.run(config, "production", APPS))
    asyncio.run(runner.run(config, "production", APPS))

    assert config["plugins"] == [CleanOutputPlugin()]
    assert config["mode"] == "development"
    for seen in compiler.calls:
        assert len(_injected(seen)) == 1


def test_previously_prepared_config_is_reinjected_once(tmp_path):
    once = prepare_config(_config(tmp_path), "production", APPS)
    twice = prepare_config(once, "production", {"orders": {"appId": 7}})

    injected = _injected(twice)
    assert len(injected) == 1
    assert json.loads(injected[0].definitions[APPS_CONFIG_GLOBAL]) == {"orders": {"appId": 7}}


def test_serialized_apps_config_round_trips(tmp_path):
    prepared = prepare_config(_config(tmp_path), "production", APPS)
    value = _injected(prepared)[0].definitions[APPS_CONFIG_GLOBAL]

    assert value == '{"sales":{"appId":42}}'
    assert json.loads(value) == APPS


def test_user_define_plugins_are_kept(tmp_path):
    user = DefinePlugin(definitions={"APPS_CONFIG": "{}", "FEATURE": "true"})
    prepared = prepare_config(_config(tmp_path, plugins=[user]), "production", APPS)

    assert prepared["plugins"][0] is user
    assert len(_injected(prepared)) == 1


def test_no_result_is_an_internal_error(tmp_path):
    runner = BuildRunner(FakeCompiler(result=None))
    with pytest.raises(InternalError, match="compiler returned no result"):
        asyncio.run(runner.run(_config(tmp_path), "production", APPS))


class _Exploding(Compiler):
    def __init__(self, exc):
        self.exc = exc

    async def run(self, config):
        raise self.exc


def test_compiler_exceptions_are_logged_and_reraised(tmp_path, caplog):
    boom = OSError("esbuild: not found")
    runner = BuildRunner(_Exploding(boom))

    with caplog.at_level(logging.ERROR, logger="kcmaker.core.runner"):
        with pytest.raises(OSError) as ei:
            asyncio.run(runner.run(_config(tmp_path), "production", APPS))

    assert ei.value is boom
    assert "mode=production" in caplog.text
