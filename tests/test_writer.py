import os

import pytest

from oak.generator import GenerationResult
from oak.writer import Writer, WriteError, is_generated_file, output_file_name


def test_write_result(tmp_path, capsys):
    result = GenerationResult(
        package_name="test",
        file_path=str(tmp_path / "test_logvalue.go"),
        content="// Code generated by oak. DO NOT EDIT.\npackage test\n",
    )
    Writer().write_result(result)

    assert (tmp_path / "test_logvalue.go").read_text() == result.content
    assert f"Generated: {result.file_path}" in capsys.readouterr().out


def test_write_result_overwrites(tmp_path, capsys):
    target = tmp_path / "x_logvalue.go"
    target.write_text("old")
    result = GenerationResult(package_name="x", file_path=str(target), content="new\n")
    Writer().write_result(result)

    assert target.read_text() == "new\n"
    assert f"Overwriting existing file: {target}" in capsys.readouterr().out


def test_write_result_creates_directory(tmp_path):
    target = tmp_path / "a" / "b" / "p_logvalue.go"
    Writer().write_result(GenerationResult("p", str(target), "package p\n"))
    assert target.read_text() == "package p\n"


def test_write_result_nil():
    with pytest.raises(WriteError, match="generation result is nil"):
        Writer().write_result(None)


def test_write_results(tmp_path, capsys):
    results = [
        GenerationResult(
            "pkg1",
            str(tmp_path / "pkg1_logvalue.go"),
            "// Code generated by oak. DO NOT EDIT.\npackage pkg1\n",
        ),
        GenerationResult(
            "pkg2",
            str(tmp_path / "pkg2_logvalue.go"),
            "// Code generated by oak. DO NOT EDIT.\npackage pkg2\n",
        ),
    ]
    Writer().write_results(results)

    for result in results:
        assert os.path.exists(result.file_path)
    assert "Successfully generated 2 file(s)" in capsys.readouterr().out


def test_write_results_empty():
    with pytest.raises(WriteError, match="no results to write"):
        Writer().write_results([])


def test_write_results_reports_failures(tmp_path, capsys):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    good = GenerationResult("ok", str(tmp_path / "ok_logvalue.go"), "package ok\n")
    bad = GenerationResult("bad", str(blocker / "bad_logvalue.go"), "package bad\n")

    with pytest.raises(WriteError, match="failed to write 1 out of 2 files"):
        Writer().write_results([good, bad])

    assert (tmp_path / "ok_logvalue.go").read_text() == "package ok\n"
    assert "Error: " in capsys.readouterr().out


def test_validate_output_path(tmp_path):
    valid_path = tmp_path / "subdir" / "test.go"
    Writer().validate_output_path(str(valid_path))

    assert valid_path.parent.is_dir()
    assert not (valid_path.parent / ".oak_write_test").exists()


def test_validate_output_path_blocked(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(WriteError, match="cannot create directory"):
        Writer().validate_output_path(str(blocker / "sub" / "test.go"))


def test_backup_existing_file(tmp_path, capsys):
    existing = tmp_path / "existing.go"
    existing.write_text("original content")

    Writer().backup_existing_file(str(existing))

    backup = tmp_path / "existing.go.bak"
    assert backup.read_text() == "original content"
    assert f"Created backup: {backup}" in capsys.readouterr().out


def test_backup_non_existent_file(tmp_path, capsys):
    missing = tmp_path / "nonexistent.go"
    Writer().backup_existing_file(str(missing))

    assert not (tmp_path / "nonexistent.go.bak").exists()
    assert "Created backup" not in capsys.readouterr().out


def test_cleanup_backups(tmp_path, capsys):
    files = [str(tmp_path / "file1.go"), str(tmp_path / "file2.go")]
    for name in files:
        with open(name + ".bak", "w") as handle:
            handle.write("backup content")

    Writer().cleanup_backups(files)

    for name in files:
        assert not os.path.exists(name + ".bak")
    assert "Warning" not in capsys.readouterr().out


@pytest.mark.parametrize(
    "package_name, expected",
    [
        ("main", "main_logvalue.go"),
        ("booking", "booking_logvalue.go"),
        ("user_service", "user_service_logvalue.go"),
    ],
)
def test_output_file_name(package_name, expected):
    assert output_file_name(package_name) == expected


def test_is_generated_file(tmp_path):
    generated = tmp_path / "generated.go"
    generated.write_text("// Code generated by oak. DO NOT EDIT.\npackage test\n")
    normal = tmp_path / "normal.go"
    normal.write_text("package test\n\ntype User struct {}\n")

    assert is_generated_file(str(generated)) is True
    assert is_generated_file(str(normal)) is False
    assert is_generated_file(str(tmp_path / "nonexistent.go")) is False


def test_is_generated_file_short_content(tmp_path):
    short = tmp_path / "short.go"
    short.write_text("// Code")
    assert is_generated_file(str(short)) is False