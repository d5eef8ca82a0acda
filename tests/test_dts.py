import asyncio
import stat
import sys
from pathlib import Path

import pytest

from conftest import make_entry, write
from kcmaker.core.discovery import apps_dir
from kcmaker.core.errors import ConfigValidationError, SettingsError, TypeGenError
from kcmaker.dts import Profile, build_dts_args, generate_type_definitions, load_profile

APPS = {"sales": {"appId": 42}}
PROFILE = Profile(base_url="https://example.cybozu.com", username="admin", password="secret")


def test_arguments(project: Path):
    make_entry(project, "sales", "desktop")

    args, output = build_dts_args(apps_dir(project), "sales", PROFILE, APPS)

    assert output == apps_dir(project) / "sales" / "types" / "kintone.d.ts"
    assert args == [
        "--base-url", "https://example.cybozu.com",
        "-u", "admin",
        "-p", "secret",
        "--app-id", "42",
        "-o", str(output),
    ]


def test_proxy_is_appended_when_enabled(project: Path):
    make_entry(project, "sales", "desktop")
    profile = PROFILE.model_copy(update={"proxy": "http://proxy.local:3128"})

    without, _ = build_dts_args(apps_dir(project), "sales", profile, APPS)
    with_proxy, _ = build_dts_args(apps_dir(project), "sales", profile, APPS, use_proxy=True)

    assert "--proxy" not in without
    assert with_proxy[-2:] == ["--proxy", "http://proxy.local:3128"]


def test_proxy_enabled_without_configuration(project: Path):
    make_entry(project, "sales", "desktop")
    with pytest.raises(TypeGenError, match="no proxy configuration"):
        build_dts_args(apps_dir(project), "sales", PROFILE, APPS, use_proxy=True)


def test_missing_app_folder(project: Path):
    with pytest.raises(TypeGenError, match='App folder "sales" does not exist'):
        build_dts_args(apps_dir(project), "sales", PROFILE, APPS)


def test_app_not_in_apps_config(project: Path):
    make_entry(project, "orders", "desktop")
    with pytest.raises(ConfigValidationError, match='"orders" not found'):
        build_dts_args(apps_dir(project), "orders", PROFILE, APPS)


def test_load_single_profile(tmp_path: Path):
    path = write(tmp_path / "profile.yml", "baseUrl: https://a.cybozu.com\nusername: u\npassword: p\n")
    profile = load_profile(path)
    assert profile.base_url == "https://a.cybozu.com"
    assert profile.proxy is None


def test_load_named_profile(tmp_path: Path):
    path = write(
        tmp_path / "profiles.yml",
        "default:\n  baseUrl: https://a.cybozu.com\n  username: u\n  password: p\n"
        "staging:\n  baseUrl: https://b.cybozu.com\n  username: s\n  password: q\n  proxy: http://px:8080\n",
    )
    assert load_profile(path).base_url == "https://a.cybozu.com"
    staging = load_profile(path, "staging")
    assert staging.username == "s"
    assert staging.proxy == "http://px:8080"
    with pytest.raises(SettingsError, match='"prod" not found'):
        load_profile(path, "prod")


def test_incomplete_profile(tmp_path: Path):
    path = write(tmp_path / "profile.yml", "baseUrl: https://a.cybozu.com\n")
    with pytest.raises(SettingsError, match="Invalid profile"):
        load_profile(path)


def test_missing_profile_file(tmp_path: Path):
    with pytest.raises(SettingsError, match="not found"):
        load_profile(tmp_path / "nope.yml")


def test_missing_generator_binary(project: Path, tmp_path: Path):
    make_entry(project, "sales", "desktop")
    with pytest.raises(TypeGenError, match="not installed"):
        asyncio.run(
            generate_type_definitions(
                apps_dir(project), "sales", PROFILE, APPS, binary=str(tmp_path / "no-such-gen")
            )
        )


@pytest.mark.skipif(sys.platform == "win32", reason="shell script stands in for the generator")
def test_generator_exit_status(project: Path, tmp_path: Path):
    make_entry(project, "sales", "desktop")
    ok = write(tmp_path / "ok-gen", '#!/bin/sh\nwhile [ "$1" != "-o" ]; do shift; done\n'
                                    'mkdir -p "$(dirname "$2")"\necho "// types" > "$2"\n')
    bad = write(tmp_path / "bad-gen", "#!/bin/sh\nexit 3\n")
    for script in (ok, bad):
        script.chmod(script.stat().st_mode | stat.S_IXUSR)

    output = asyncio.run(generate_type_definitions(apps_dir(project), "sales", PROFILE, APPS, binary=str(ok)))
    assert output.read_text().strip() == "// types"

    with pytest.raises(TypeGenError, match="status 3"):
        asyncio.run(generate_type_definitions(apps_dir(project), "sales", PROFILE, APPS, binary=str(bad)))
