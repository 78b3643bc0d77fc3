import pathlib

import pytest

from sitepush.commands import ExternalCommand, RecordingRunner, SubprocessRunner, execute
from sitepush.errors import BuildError, TransferError
from sitepush.rules import GlobFilterSet
from sitepush.s3cmd import S3Cmd, filter_args, header_args


def test_execute_raises_command_error_class_with_exit_code():
    command = ExternalCommand(argv=("s3cmd", "modify"), description="encoding headers")
    with pytest.raises(TransferError) as excinfo:
        execute(lambda _command: 2, command)
    assert excinfo.value.returncode == 2
    assert excinfo.value.command == ("s3cmd", "modify")
    assert "encoding headers failed with exit code 2" in str(excinfo.value)


def test_execute_accepts_configured_exit_codes():
    command = ExternalCommand(argv=("s3cmd", "modify"), ok_codes=(0, 1))
    execute(lambda _command: 1, command)


def test_missing_executable_maps_to_command_error(tmp_path):
    command = ExternalCommand(argv=("definitely-not-a-real-binary-xyz",), error=BuildError)
    with pytest.raises(BuildError):
        SubprocessRunner(cwd=tmp_path, echo=False)(command)


def test_non_executable_file_maps_to_command_error(tmp_path):
    script = tmp_path / "s3cmd"
    script.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
    script.chmod(0o644)
    command = ExternalCommand(argv=(str(script), "sync"))
    with pytest.raises(TransferError, match="cannot execute"):
        SubprocessRunner(cwd=tmp_path, echo=False)(command)


def test_display_quotes_arguments_and_env():
    command = ExternalCommand(
        argv=("s3cmd", "--add-header=Cache-Control:public, max-age=300", "s3://b"),
        env={"JEKYLL_ENV": "production"},
    )
    assert command.display() == "JEKYLL_ENV=production s3cmd '--add-header=Cache-Control:public, max-age=300' s3://b"


def test_recording_runner_collects_commands():
    runner = RecordingRunner(echo=False)
    command = ExternalCommand(argv=("true",))
    execute(runner, command)
    assert runner.commands == [command]


def test_filter_args_include_only_excludes_everything_first():
    filters = GlobFilterSet(includes=("*.html", "*.css"))
    assert filter_args(filters) == ["--exclude", "*", "--include", "*.html", "--include", "*.css"]


def test_filter_args_exclude_only():
    filters = GlobFilterSet(excludes=("css/*", "404.html"))
    assert filter_args(filters) == ["--exclude", "css/*", "--exclude", "404.html"]
    assert filter_args(GlobFilterSet()) == []


def test_header_args():
    assert header_args({"Content-Encoding": "gzip"}) == ["--add-header=Content-Encoding:gzip"]


def test_sync_command_layout():
    client = S3Cmd("s3://example.test/")
    command = client.sync(
        pathlib.Path("/site/_deploy"),
        headers={"Cache-Control": "public, max-age=3600"},
        delete_removed=True,
        cf_invalidate=True,
    )
    assert command.argv == (
        "s3cmd",
        "sync",
        "--no-mime-magic",
        "--no-preserve",
        "--cf-invalidate",
        "--delete-removed",
        "--verbose",
        "--add-header=Cache-Control:public, max-age=3600",
        "/site/_deploy/",
        "s3://example.test",
    )
    assert command.error is TransferError


def test_modify_single_object_is_not_recursive():
    client = S3Cmd("s3://example.test", executable="/opt/s3cmd")
    command = client.modify({"x-amz-website-redirect-location": "/a.html"}, key="swap")
    assert command.argv == (
        "/opt/s3cmd",
        "modify",
        "--add-header=x-amz-website-redirect-location:/a.html",
        "s3://example.test/swap",
    )


def test_modify_recursive_with_filters():
    client = S3Cmd("s3://example.test")
    command = client.modify(
        {"Cache-Control": "public, max-age=86400"},
        filters=GlobFilterSet(includes=("css/*",)),
    )
    assert command.argv == (
        "s3cmd",
        "modify",
        "--recursive",
        "--exclude",
        "*",
        "--include",
        "css/*",
        "--add-header=Cache-Control:public, max-age=86400",
        "s3://example.test",
    )
