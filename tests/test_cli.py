"""Tests for the libreg command line."""

import tempfile

from click.testing import CliRunner

from libregistry.cli import main

_ENV = {
    "LIBREG_AUDIT_ENABLED": "false",
    "LIBREG_CONFIG": None,
    "LIBREG_OPERATOR": None,
    "LIBREG_LOG_LEVEL": None,
}


def _invoke(state_dir: str, *args: str, caller: str = "alice"):
    runner = CliRunner()
    return runner.invoke(
        main, ["--state-dir", state_dir, "--as", caller, *args], env=_ENV
    )


def test_register_publish_and_info():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _invoke(tmpdir, "register", "fastjson", "-d", "JSON codec", "-t", "json", "-l", "c")
        assert result.exit_code == 0, result.output
        assert "Registered" in result.output

        result = _invoke(tmpdir, "publish", "fastjson", "1.0.0", "QmHash", "--dep", "libc@2")
        assert result.exit_code == 0, result.output

        result = _invoke(tmpdir, "info", "fastjson")
        assert result.exit_code == 0, result.output
        assert "JSON codec" in result.output
        assert "1.0.0" in result.output

        result = _invoke(tmpdir, "version-info", "fastjson", "1.0.0")
        assert "QmHash" in result.output
        assert "libc@2" in result.output


def test_list_empty_and_populated():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = _invoke(tmpdir, "list")
        assert "Registry is empty" in result.output

        _invoke(tmpdir, "register", "one")
        _invoke(tmpdir, "register", "two", "--private")
        result = _invoke(tmpdir, "list")
        assert result.exit_code == 0
        assert "one" in result.output
        assert "two" in result.output


def test_registry_error_exits_nonzero():
    with tempfile.TemporaryDirectory() as tmpdir:
        _invoke(tmpdir, "register", "lib")
        result = _invoke(tmpdir, "register", "lib", caller="bob")
        assert result.exit_code == 1
        assert "NAME_CONFLICT" in result.output

        result = _invoke(tmpdir, "delete", "lib", caller="bob")
        assert result.exit_code == 1
        assert "NOT_OWNER" in result.output


def test_delete_blocked_by_versions():
    with tempfile.TemporaryDirectory() as tmpdir:
        _invoke(tmpdir, "register", "lib")
        _invoke(tmpdir, "publish", "lib", "1.0.0", "QmHash")
        result = _invoke(tmpdir, "delete", "lib")
        assert result.exit_code == 1
        assert "HAS_VERSIONS" in result.output

        _invoke(tmpdir, "register", "empty")
        result = _invoke(tmpdir, "delete", "empty")
        assert result.exit_code == 0
        assert "empty" not in _invoke(tmpdir, "list").output


def test_license_purchase_flow():
    with tempfile.TemporaryDirectory() as tmpdir:
        _invoke(tmpdir, "register", "paid")
        _invoke(tmpdir, "license", "set", "paid", "100")
        _invoke(tmpdir, "treasury", "fund", "bob", "500")

        result = _invoke(tmpdir, "access", "paid", "bob")
        assert "DENIED" in result.output

        result = _invoke(tmpdir, "license", "buy", "paid", "150", caller="bob")
        assert result.exit_code == 0, result.output
        assert "refunded 50" in result.output

        assert "GRANTED" in _invoke(tmpdir, "access", "paid", "bob").output
        assert "LICENSED" in _invoke(tmpdir, "license", "check", "paid", "bob").output
        assert "bob: 400" in _invoke(tmpdir, "treasury", "balance", "bob").output
        assert "alice: 100" in _invoke(tmpdir, "treasury", "balance", "alice").output

        result = _invoke(tmpdir, "license", "buy", "paid", "100", caller="bob")
        assert result.exit_code == 1
        assert "ALREADY_OWNED" in result.output


def test_private_authorization_flow():
    with tempfile.TemporaryDirectory() as tmpdir:
        _invoke(tmpdir, "register", "secret", "--private")
        assert "DENIED" in _invoke(tmpdir, "access", "secret", "bob").output

        result = _invoke(tmpdir, "authorize", "secret", "bob")
        assert result.exit_code == 0, result.output
        assert "GRANTED" in _invoke(tmpdir, "access", "secret", "bob").output

        _invoke(tmpdir, "revoke", "secret", "bob")
        assert "DENIED" in _invoke(tmpdir, "access", "secret", "bob").output

        result = _invoke(tmpdir, "license", "set", "secret", "10", "--required")
        assert result.exit_code == 1
        assert "PRIVATE_CANNOT_REQUIRE_LICENSE" in result.output


def test_deprecate_shows_in_versions():
    with tempfile.TemporaryDirectory() as tmpdir:
        _invoke(tmpdir, "register", "lib")
        _invoke(tmpdir, "publish", "lib", "1.0.0", "QmHash")
        result = _invoke(tmpdir, "deprecate", "lib", "1.0.0")
        assert result.exit_code == 0, result.output

        result = _invoke(tmpdir, "version-info", "lib", "1.0.0")
        assert "Deprecated:   yes" in result.output


def test_unknown_log_level_reported_as_config_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        runner = CliRunner()
        result = runner.invoke(
            main,
            ["--state-dir", tmpdir, "list"],
            env={**_ENV, "LIBREG_LOG_LEVEL": "verbose"},
        )
        assert result.exit_code == 1
        assert "unknown log_level 'VERBOSE'" in result.output
        assert not isinstance(result.exception, ValueError)
