from pathlib import Path

import pytest

from smartcopy.cli import (
    EXIT_INVALID_ARGUMENTS,
    EXIT_INVALID_CONFIG,
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    main,
)


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _tree(tmp_path: Path) -> Path:
    source = tmp_path / "src"
    _write(source / "a.txt", "aaa")
    _write(source / "sub" / "b.txt", "bb")
    return source


def test_copy_then_rerun_skips_everything(tmp_path: Path, capsys) -> None:
    source = _tree(tmp_path)
    destination = tmp_path / "dst"

    assert main([str(source), str(destination)]) == EXIT_SUCCESS
    first = capsys.readouterr().out
    assert "Summary: 2 files copied, 0 files skipped, 5B copied in" in first

    assert main([str(source), str(destination)]) == EXIT_SUCCESS
    second = capsys.readouterr().out
    assert "(skipped - up to date)" in second
    assert "Summary: 0 files copied, 2 files skipped, 0B copied in" in second


def test_detect_flag_lists_extra_entries(tmp_path: Path, capsys) -> None:
    source = _tree(tmp_path)
    destination = tmp_path / "dst"
    main([str(source), str(destination)])
    _write(destination / "c.txt", "extra")
    capsys.readouterr()

    exit_code = main(["-d", str(source), str(destination)])

    output = capsys.readouterr().out
    assert exit_code == EXIT_SUCCESS
    assert f"FILE: {destination / 'c.txt'}" in output
    assert ", 1 extra items found (5B)" in output
    assert (destination / "c.txt").exists()


def test_delete_flag_removes_extra_entries(tmp_path: Path, capsys) -> None:
    source = _tree(tmp_path)
    destination = tmp_path / "dst"
    main([str(source), str(destination)])
    _write(destination / "c.txt", "extra")
    capsys.readouterr()

    exit_code = main([str(source), str(destination), "-D"])

    output = capsys.readouterr().out
    assert exit_code == EXIT_SUCCESS
    assert f"DELETED: {destination / 'c.txt'}" in output
    assert ", 1 extra items deleted (5B)" in output
    assert not (destination / "c.txt").exists()


def test_insufficient_arguments(tmp_path: Path, capsys) -> None:
    exit_code = main([str(tmp_path)])

    assert exit_code == EXIT_INVALID_ARGUMENTS
    assert "insufficient arguments" in capsys.readouterr().err


def test_missing_source_reports_path_on_stderr(tmp_path: Path, capsys) -> None:
    missing = tmp_path / "nonexistent"

    exit_code = main([str(missing), str(tmp_path / "dst")])

    err = capsys.readouterr().err
    assert exit_code == EXIT_RUNTIME_ERROR
    assert f"Error: source '{missing}' does not exist" in err


def test_multiple_sources_to_file_destination(tmp_path: Path, capsys) -> None:
    _write(tmp_path / "src1" / "a.txt", "1")
    _write(tmp_path / "src2" / "b.txt", "2")
    _write(tmp_path / "dest", "plain file")

    exit_code = main([str(tmp_path / "src1"), str(tmp_path / "src2"), str(tmp_path / "dest")])

    assert exit_code == EXIT_INVALID_ARGUMENTS
    assert "destination must be a directory" in capsys.readouterr().err


def test_config_file_enables_detection_and_excludes(tmp_path: Path, capsys) -> None:
    source = _tree(tmp_path)
    _write(source / "scratch.tmp", "ignored")
    destination = tmp_path / "dst"
    main([str(source), str(destination)])
    _write(destination / "c.txt", "extra")
    capsys.readouterr()

    config_file = tmp_path / "smartcopy.yaml"
    config_file.write_text("detectExtra: true\nexcludes:\n  - '*.tmp'\n", encoding="utf-8")

    exit_code = main(["--config", str(config_file), str(source), str(destination)])

    output = capsys.readouterr().out
    assert exit_code == EXIT_SUCCESS
    assert "FILE:" in output
    assert "scratch.tmp" not in output
    assert "1 extra items found" in output


def test_invalid_config_returns_config_exit_code(tmp_path: Path, capsys) -> None:
    source = _tree(tmp_path)
    config_file = tmp_path / "bad.yaml"
    config_file.write_text("deleteExtra: sometimes\n", encoding="utf-8")

    exit_code = main(["--config", str(config_file), str(source), str(tmp_path / "dst")])

    assert exit_code == EXIT_INVALID_CONFIG
    assert "Invalid config: deleteExtra must be a boolean" in capsys.readouterr().err
    assert not (tmp_path / "dst").exists()


def test_quiet_hides_progress_but_keeps_summary(tmp_path: Path, capsys) -> None:
    source = _tree(tmp_path)

    exit_code = main(["-q", str(source), str(tmp_path / "dst")])

    output = capsys.readouterr().out
    assert exit_code == EXIT_SUCCESS
    assert "a.txt" not in output
    assert "Summary: 2 files copied" in output


def test_log_file_receives_progress(tmp_path: Path, capsys) -> None:
    source = _tree(tmp_path)
    log_file = tmp_path / "logs" / "smartcopy.log"

    exit_code = main(["--log-file", str(log_file), str(source), str(tmp_path / "dst")])

    assert exit_code == EXIT_SUCCESS
    text = log_file.read_text(encoding="utf-8")
    assert "INFO" in text
    assert str(source / "a.txt") in text


def test_dry_run_writes_nothing(tmp_path: Path, capsys) -> None:
    source = _tree(tmp_path)
    destination = tmp_path / "dst"

    exit_code = main(["-n", str(source), str(destination)])

    assert exit_code == EXIT_SUCCESS
    assert not destination.exists()
    assert "Summary: 2 files copied" in capsys.readouterr().out


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])

    assert excinfo.value.code == 0
    assert "smartcopy 1.2.1" in capsys.readouterr().out



def test_symlink_loop_destination_reports_error(tmp_path: Path, capsys) -> None:
    source = tmp_path / "a.txt"
    _write(source, "1")
    loop = tmp_path / "loop"
    loop.symlink_to(loop)

    exit_code = main([str(source), str(loop)])

    assert exit_code == EXIT_RUNTIME_ERROR
    assert f"Error: failed to get destination info for '{loop}'" in capsys.readouterr().err


def test_duplicate_base_names_return_invalid_arguments(tmp_path: Path, capsys) -> None:
    _write(tmp_path / "a" / "x" / "f1.txt", "1")
    _write(tmp_path / "b" / "x" / "f2.txt", "2")

    exit_code = main(["-D", str(tmp_path / "a" / "x"), str(tmp_path / "b" / "x"), str(tmp_path / "dest")])

    assert exit_code == EXIT_INVALID_ARGUMENTS
    assert "would both be copied to" in capsys.readouterr().err
    assert not (tmp_path / "dest").exists()
