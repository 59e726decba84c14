import os
import stat
from datetime import datetime, timezone

import pytest

from elaine_crud.tasks import build_css

HELP = "tailwindcss v3.4.1\n\nUsage:\n   tailwindcss [--input input.css] [--output output.css]\n"


def make_binary(path, help_text=HELP, build_exit=0, css="body{margin:0}", stderr=""):
    """Fake tailwindcss: prints help for --help, otherwise writes the -o file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        "#!/bin/sh\n"
        'if [ "$1" = "--help" ]; then\n'
        f"  cat <<'HELP'\n{help_text}HELP\n"
        "  exit 0\n"
        "fi\n"
        'while [ "$#" -gt 0 ]; do\n'
        '  if [ "$1" = "-o" ]; then out="$2"; fi\n'
        "  shift\n"
        "done\n"
        f'if [ {build_exit} -ne 0 ]; then echo "{stderr}" >&2; exit {build_exit}; fi\n'
        f"printf '%s' '{css}' > \"$out\"\n"
    )
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture()
def project(tmp_path):
    (tmp_path / "elaine_crud" / "assets").mkdir(parents=True)
    (tmp_path / build_css.INPUT_CSS).write_text("@tailwind base;")
    (tmp_path / build_css.CONFIG_JS).write_text("module.exports = {}")
    return tmp_path


class Echo:
    def __init__(self):
        self.out, self.err = [], []

    def __call__(self, message="", err=False):
        (self.err if err else self.out).append(str(message))


def test_candidate_paths_order_and_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", "/home/reader")
    paths = build_css.candidate_paths(tmp_path)
    assert paths == [
        tmp_path / "bin" / "tailwindcss",
        build_css.Path("/usr/local/bin/tailwindcss"),
        build_css.Path("/opt/homebrew/bin/tailwindcss"),
        build_css.Path("/home/reader/.local/bin/tailwindcss"),
    ]
    monkeypatch.delenv("HOME")
    assert len(build_css.candidate_paths(tmp_path)) == 3


def test_probe_rejects_non_executables_and_error_output(tmp_path):
    plain = tmp_path / "plain"
    plain.write_text("tailwindcss")
    assert build_css.probe(plain) is None
    assert build_css.probe(tmp_path / "missing") is None
    broken = make_binary(tmp_path / "broken", help_text="Error: tailwindcss cannot start\n")
    assert build_css.probe(broken) is None
    other = make_binary(tmp_path / "other", help_text="some other tool\n")
    assert build_css.probe(other) is None


def test_first_working_candidate_wins(tmp_path):
    bad = make_binary(tmp_path / "a" / "tailwindcss", help_text="nope\n")
    good = make_binary(tmp_path / "b" / "tailwindcss")
    also_good = make_binary(tmp_path / "c" / "tailwindcss")
    found = build_css.find_tailwind([bad, good, also_good])
    assert found[0] == good
    assert "v3.4.1" in found[1]


@pytest.mark.parametrize(
    "system,machine,expected",
    [
        ("Darwin", "arm64", "macos-arm64"),
        ("Darwin", "x86_64", "macos-x64"),
        ("Linux", "x86_64", "linux-x64"),
        ("Linux", "aarch64", "linux-arm64"),
        ("Windows", "AMD64", None),
    ],
)
def test_detect_platform(system, machine, expected):
    assert build_css.detect_platform(system, machine) == expected


@pytest.mark.parametrize("platform_id", ["macos-arm64", "macos-x64", "linux-x64", "linux-arm64"])
def test_install_instructions(tmp_path, platform_id):
    text = build_css.install_instructions(platform_id, tmp_path)
    url = f"https://github.com/tailwindlabs/tailwindcss/releases/latest/download/tailwindcss-{platform_id}"
    assert f"curl -sLo {tmp_path / 'bin' / 'tailwindcss'} {url}\n" in text
    assert f"Install it for {platform_id}:" in text
    generic = build_css.install_instructions(None, tmp_path)
    assert build_css.RELEASES_URL in generic
    assert "latest/download" not in generic


def test_extract_version():
    assert build_css.extract_version(HELP) == "3.4.1"
    assert build_css.extract_version("tailwindcss (no version)") == "Latest"


def test_build_header_format():
    header = build_css.build_header("3.4.1", datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
    assert header.startswith("/**\n * ElaineCrud precompiled stylesheet\n")
    assert " * Generated: 2025-01-02 03:04:05 UTC\n" in header
    assert " * Tailwind CSS version: 3.4.1\n" in header
    assert header.endswith(" */\n")


def test_missing_binary_prints_instructions_and_fails(project, monkeypatch):
    monkeypatch.setattr(build_css, "detect_platform", lambda: "macos-arm64")
    echo = Echo()
    status = build_css.run(root=project, candidates=[project / "bin" / "tailwindcss"], echo=echo)
    assert status == 1
    assert "tailwindcss-macos-arm64" in "\n".join(echo.err)
    assert not (project / build_css.OUTPUT_CSS).exists()


def test_successful_build_prepends_header(project):
    binary = make_binary(project / "bin" / "tailwindcss")
    echo = Echo()
    status = build_css.run(root=project, candidates=[binary], echo=echo)
    assert status == 0
    css = (project / build_css.OUTPUT_CSS).read_text()
    assert css.startswith("/**\n * ElaineCrud precompiled stylesheet")
    assert "Tailwind CSS version: 3.4.1" in css
    assert css.endswith("body{margin:0}")
    assert not echo.err


def test_failed_build_reports_output_without_header(project):
    binary = make_binary(project / "bin" / "tailwindcss", build_exit=2, stderr="bad input")
    echo = Echo()
    status = build_css.run(root=project, candidates=[binary], echo=echo)
    assert status == 1
    assert any("exit status 2" in line for line in echo.err)
    assert any("bad input" in line for line in echo.err)
    assert not (project / build_css.OUTPUT_CSS).exists()


def test_cli_command_exit_status(runner, monkeypatch):
    monkeypatch.setattr(build_css, "run", lambda: 1)
    result = runner.invoke(args=["elaine-crud", "build-css"])
    assert result.exit_code == 1
    monkeypatch.setattr(build_css, "run", lambda: 0)
    assert runner.invoke(args=["elaine-crud", "build-css"]).exit_code == 0


@pytest.mark.skipif(os.name == "nt", reason="shell script binary")
def test_home_candidate_is_used(project, monkeypatch, tmp_path):
    home = tmp_path / "home"
    make_binary(home / ".local" / "bin" / "tailwindcss")
    monkeypatch.setenv("HOME", str(home))
    candidates = [p for p in build_css.candidate_paths(project) if str(p).startswith(str(home))]
    assert build_css.run(root=project, candidates=candidates, echo=Echo()) == 0


def make_script(path, body):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def test_undecodable_help_output_is_skipped(tmp_path):
    garbled = make_script(tmp_path / "a" / "tailwindcss", "printf 'tailwindcss \\377\\376\\n'\n")
    good = make_binary(tmp_path / "b" / "tailwindcss")
    assert build_css.probe(garbled) is None
    assert build_css.find_tailwind([garbled, good])[0] == good


def test_undecodable_build_output_is_reported(project):
    binary = make_script(
        project / "bin" / "tailwindcss",
        'if [ "$1" = "--help" ]; then echo "tailwindcss v3.4.1"; exit 0; fi\n'
        "printf 'bad \\377 input\\n' >&2\n"
        "exit 3\n",
    )
    echo = Echo()
    assert build_css.run(root=project, candidates=[binary], echo=echo) == 1
    assert any("exit status 3" in line for line in echo.err)
    assert any("bad" in line and "input" in line for line in echo.err)


def test_build_without_output_file_fails(project):
    binary = make_script(
        project / "bin" / "tailwindcss",
        'if [ "$1" = "--help" ]; then echo "tailwindcss v3.4.1"; exit 0; fi\n'
        "exit 0\n",
    )
    echo = Echo()
    assert build_css.run(root=project, candidates=[binary], echo=echo) == 1
    assert any("no readable output" in line for line in echo.err)
    assert not (project / build_css.OUTPUT_CSS).exists()
