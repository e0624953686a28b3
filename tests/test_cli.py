import os

import pytest

from oak.cli import (
    Options,
    ProcessingMode,
    ProcessingTarget,
    UsageError,
    expand_paths,
    find_go_packages,
    has_go_files_in_dir,
    parse_args,
)


@pytest.mark.parametrize(
    "args, expected",
    [
        ([], Options()),
        (["--source", "main.go"], Options(source_file="main.go")),
        (["--package", "./internal/booking"], Options(package_path="./internal/booking")),
        (["./..."], Options(positional_args=["./..."])),
        (["./pkg1", "./pkg2"], Options(positional_args=["./pkg1", "./pkg2"])),
        (["--help"], Options(help=True)),
        (["--version"], Options(version=True)),
        (["-h"], Options(help=True)),
        (["-v"], Options(version=True)),
        (["-source=a.go"], Options(source_file="a.go")),
        (["--help=false"], Options(help=False)),
        (["./pkg", "--help"], Options(positional_args=["./pkg", "--help"])),
        (["--", "-x"], Options(positional_args=["-x"])),
        (["-"], Options(positional_args=["-"])),
    ],
)
def test_parse_args(args, expected):
    assert parse_args(args) == expected


@pytest.mark.parametrize(
    "args, message",
    [
        (["--unknown"], "flag provided but not defined: -unknown"),
        (["--source"], "flag needs an argument: -source"),
        (["---x"], "bad flag syntax: ---x"),
        (["--help=maybe"], 'invalid boolean value "maybe" for -help'),
    ],
)
def test_parse_args_errors(args, message):
    with pytest.raises(UsageError, match=message):
        parse_args(args)


@pytest.fixture
def paths(tmp_path):
    go_file = tmp_path / "test.go"
    go_file.write_text("package main")
    package_dir = tmp_path / "testpkg"
    package_dir.mkdir()
    return str(go_file), str(package_dir)


def test_validate_valid_source_file(paths):
    go_file, _ = paths
    opts = Options(source_file=go_file)
    opts.validate()
    assert opts.processing_target().mode is ProcessingMode.SOURCE_FILE


def test_validate_valid_package_path(paths):
    _, package_dir = paths
    opts = Options(package_path=package_dir)
    opts.validate()
    assert opts.processing_target().paths == [package_dir]


@pytest.mark.parametrize(
    "make_opts, message",
    [
        (
            lambda f, d: Options(source_file=f, package_path=d),
            "--source and --package flags cannot be used together",
        ),
        (lambda f, d: Options(source_file="/nonexistent/file.go"), "source file does not exist"),
        (lambda f, d: Options(source_file="test.txt"), "source file must have .go extension"),
        (
            lambda f, d: Options(package_path="/nonexistent/package"),
            "package path does not exist",
        ),
        (
            lambda f, d: Options(positional_args=["/nonexistent/dir"]),
            "path does not exist: /nonexistent/dir",
        ),
    ],
)
def test_validate_errors(paths, make_opts, message):
    with pytest.raises(UsageError, match=message):
        make_opts(*paths).validate()


def test_validate_warns_about_ignored_positional(paths, capsys):
    go_file, _ = paths
    Options(source_file=go_file, positional_args=["."]).validate()
    assert "Positional arguments ignored" in capsys.readouterr().err


def test_validate_accepts_patterns(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    opts = Options(positional_args=["./...", "."])
    opts.validate()
    assert opts.processing_target().mode is ProcessingMode.POSITIONAL


@pytest.mark.parametrize(
    "opts, expected",
    [
        (
            Options(source_file="main.go"),
            ProcessingTarget(ProcessingMode.SOURCE_FILE, ["main.go"], True),
        ),
        (
            Options(package_path="./internal/booking"),
            ProcessingTarget(ProcessingMode.PACKAGE, ["./internal/booking"], True),
        ),
        (
            Options(positional_args=["./..."]),
            ProcessingTarget(ProcessingMode.POSITIONAL, ["./..."], False),
        ),
        (Options(), ProcessingTarget(ProcessingMode.CONFIG, [], False)),
    ],
)
def test_processing_target(opts, expected):
    assert opts.processing_target() == expected


def test_has_go_files_in_dir(tmp_path):
    go_dir = tmp_path / "withgo"
    go_dir.mkdir()
    (go_dir / "main.go").write_text("package main")
    no_go_dir = tmp_path / "nogo"
    no_go_dir.mkdir()
    (no_go_dir / "readme.txt").write_text("readme")

    assert has_go_files_in_dir(str(go_dir)) is True
    assert has_go_files_in_dir(str(no_go_dir)) is False


def test_has_go_files_ignores_directories_named_go(tmp_path):
    (tmp_path / "weird.go").mkdir()
    assert has_go_files_in_dir(str(tmp_path)) is False


def test_find_go_packages(tmp_path):
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "x.go").write_text("package a")
    (tmp_path / ".hidden").mkdir()
    (tmp_path / ".hidden" / "y.go").write_text("package hidden")
    (tmp_path / "vendor").mkdir()
    (tmp_path / "vendor" / "z.go").write_text("package vendor")
    (tmp_path / "b" / "c").mkdir(parents=True)
    (tmp_path / "b" / "c" / "w.go").write_text("package c")

    found = find_go_packages(str(tmp_path))

    assert found == [os.path.join(str(tmp_path), "a"), os.path.join(str(tmp_path), "b", "c")]


def test_find_go_packages_includes_root(tmp_path):
    (tmp_path / "main.go").write_text("package main")
    assert find_go_packages(str(tmp_path)) == [str(tmp_path)]


def test_find_go_packages_missing_root(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_go_packages(str(tmp_path / "missing"))


def test_expand_paths_passthrough():
    assert expand_paths(["./pkg1", "./pkg2"]) == ["./pkg1", "./pkg2"]


def test_expand_paths_empty():
    assert expand_paths([]) == []