"""Tests for the command line entry point."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from tests.utils.fake_tracker import FakeTrackerClient, make_work_item
from wiclone import config
from wiclone.main import EXIT_FAILURE, EXIT_OK, EXIT_USAGE, build_parser, main, run_clone


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """Give every test fresh configuration sections."""
    monkeypatch.setattr(config, "azure_config", {"backend": "cli"})
    monkeypatch.setattr(
        config,
        "clone_config",
        {"extra_fields": ["System.Tags"], "variables": {"Team": "Config"}},
    )


@pytest.fixture
def fake_client():
    client = FakeTrackerClient(
        [
            make_work_item(1, "{{Team}} epic", children=[2], System__Tags="{{Sprint}}"),
            make_work_item(2, 'Story "{{Team}}"'),
        ],
    )
    with patch("wiclone.main.create_client", return_value=client) as factory:
        factory.client = client
        yield factory


def _run(*argv: str) -> int:
    return run_clone(build_parser().parse_args([*argv, "--no-progress"]))


@pytest.mark.unit
def test_clones_tree_with_variables(fake_client) -> None:
    status = _run("1", "--children", "--var", "Sprint=7")

    client = fake_client.client
    assert status == EXIT_OK
    assert [call[1]["System.Title"] for call in client.calls_of("create")] == [
        "Config epic",
        'Story \\"Config\\"',
    ]
    assert client.calls_of("update") == [("update", 1000, "System.Tags", "7")]
    assert client.calls_of("relation") == [("relation", 1001, "Parent", 1000)]


@pytest.mark.unit
def test_cli_variables_override_file_and_config(fake_client, tmp_path: Path) -> None:
    vars_file = tmp_path / "vars.yaml"
    vars_file.write_text("Team: File\nSprint: 1\n", encoding="utf-8")

    status = _run("1", "--vars-file", str(vars_file), "--var", "Team=Cli")

    assert status == EXIT_OK
    create = fake_client.client.calls_of("create")[0][1]
    assert create["System.Title"] == "Cli epic"
    assert fake_client.client.calls_of("update") == [("update", 1000, "System.Tags", "1")]


@pytest.mark.unit
def test_without_children_flag_only_root_is_cloned(fake_client) -> None:
    assert _run("1") == EXIT_OK
    assert fake_client.client.calls_of("get") == [("get", 1)]


@pytest.mark.unit
def test_no_escape_flag(fake_client) -> None:
    assert _run("2", "--no-escape") == EXIT_OK
    assert fake_client.client.calls_of("create")[0][1]["System.Title"] == 'Story "Config"'


@pytest.mark.unit
def test_rest_backend_sends_quotes_unescaped(fake_client, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setitem(config.azure_config, "pat", "token")

    status = _run("2", "--backend", "rest", "--organization", "https://dev.azure.com/contoso")

    assert status == EXIT_OK
    assert fake_client.client.calls_of("create")[0][1]["System.Title"] == 'Story "Config"'


@pytest.mark.unit
def test_configured_escaping_wins_over_backend_default(
    fake_client, monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setitem(config.azure_config, "pat", "token")
    monkeypatch.setitem(config.clone_config, "escape_quotes", True)

    status = _run("2", "--backend", "rest", "--organization", "https://dev.azure.com/contoso")

    assert status == EXIT_OK
    assert fake_client.client.calls_of("create")[0][1]["System.Title"] == 'Story \\"Config\\"'


@pytest.mark.unit
def test_dry_run_flag_is_passed_to_factory(fake_client) -> None:
    assert _run("2", "--dry-run") == EXIT_OK
    assert fake_client.call_args.kwargs["dry_run"] is True
    assert config.clone_config["dry_run"] is True


@pytest.mark.unit
def test_tracker_failure_exits_with_failure(fake_client, caplog: pytest.LogCaptureFixture) -> None:
    fake_client.client.fail_on = {"relation": 1}

    with caplog.at_level(logging.ERROR, logger="wiclone"):
        status = _run("1", "--children")

    assert status == EXIT_FAILURE
    assert "relation call 1 failed" in caplog.text


@pytest.mark.unit
def test_bad_variable_is_a_usage_error(fake_client) -> None:
    assert _run("1", "--var", "not-valid=1") == EXIT_USAGE
    assert fake_client.client.calls == []


@pytest.mark.unit
def test_missing_vars_file_is_a_usage_error(fake_client, tmp_path: Path) -> None:
    assert _run("1", "--vars-file", str(tmp_path / "missing.yaml")) == EXIT_USAGE


@pytest.mark.unit
def test_rest_backend_requires_credentials(fake_client) -> None:
    assert _run("1", "--backend", "rest") == EXIT_USAGE
    fake_client.assert_not_called()


@pytest.mark.unit
def test_cli_options_update_azure_config(fake_client) -> None:
    _run("1", "--organization", "https://dev.azure.com/contoso", "--project", "Web")

    assert config.azure_config["organization"] == "https://dev.azure.com/contoso"
    assert config.azure_config["project"] == "Web"


@pytest.mark.unit
@pytest.mark.parametrize("bad_id", ["0", "-3", "abc"])
def test_rejects_invalid_ids(bad_id: str) -> None:
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args([bad_id])
    assert excinfo.value.code == 2


@pytest.mark.unit
def test_main_exits_with_status(fake_client) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["2", "--no-progress"])
    assert excinfo.value.code == EXIT_OK
