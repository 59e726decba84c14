"""Compile the precompiled ElaineCrud stylesheet with the standalone Tailwind CSS binary.

Run: flask --app demo elaine-crud build-css
  or python -m elaine_crud.tasks.build_css

The binary is looked up in a fixed list of locations; nothing is downloaded.
When none is usable, installation instructions for the current platform are
printed and the task exits with status 1.
"""

from __future__ import annotations

import os
import platform
import re
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import click

ROOT = Path(__file__).resolve().parents[2]
INPUT_CSS = Path("elaine_crud") / "assets" / "elaine_crud.tailwind.css"
CONFIG_JS = Path("tailwind.config.js")
OUTPUT_CSS = Path("elaine_crud") / "static" / "elaine_crud" / "elaine_crud.css"

EXPECTED_MARKER = "tailwindcss"
ERROR_MARKER = "Error:"
VERSION_RE = re.compile(r"\d+(?:\.\d+)+")
DEFAULT_VERSION = "Latest"

RELEASES_URL = "https://github.com/tailwindlabs/tailwindcss/releases"
DOWNLOAD_URL = RELEASES_URL + "/latest/download/tailwindcss-{platform}"

PLATFORMS = {
    ("darwin", "arm64"): "macos-arm64",
    ("darwin", "x86_64"): "macos-x64",
    ("linux", "x86_64"): "linux-x64",
    ("linux", "amd64"): "linux-x64",
    ("linux", "aarch64"): "linux-arm64",
    ("linux", "arm64"): "linux-arm64",
}

HEADER = """/**
 * ElaineCrud precompiled stylesheet
 * Generated: {generated}
 * Tailwind CSS version: {version}
 * Rebuild with: flask elaine-crud build-css
 */
"""

Echo = Callable[..., None]


def candidate_paths(root: Path = ROOT) -> List[Path]:
    """Locations searched for the binary, in order."""
    paths = [
        root / "bin" / "tailwindcss",
        Path("/usr/local/bin/tailwindcss"),
        Path("/opt/homebrew/bin/tailwindcss"),
    ]
    home = os.environ.get("HOME")
    if home:
        paths.append(Path(home) / ".local" / "bin" / "tailwindcss")
    return paths


def probe(path: Path) -> Optional[str]:
    """Help text of ``path`` when it is a working tailwindcss binary, else None."""
    if not path.is_file() or not os.access(path, os.X_OK):
        return None
    try:
        result = subprocess.run([str(path), "--help"], capture_output=True, text=True)
    except (OSError, UnicodeDecodeError):
        return None
    output = (result.stdout or "") + (result.stderr or "")
    if EXPECTED_MARKER in output and ERROR_MARKER not in output:
        return output
    return None


def find_tailwind(candidates: Sequence[Path]) -> Optional[Tuple[Path, str]]:
    for path in candidates:
        help_text = probe(path)
        if help_text is not None:
            return path, help_text
    return None


def detect_platform(system: Optional[str] = None, machine: Optional[str] = None) -> Optional[str]:
    system = (system if system is not None else platform.system()).lower()
    machine = (machine if machine is not None else platform.machine()).lower()
    return PLATFORMS.get((system, machine))


def install_instructions(platform_id: Optional[str], root: Path = ROOT) -> str:
    target = root / "bin" / "tailwindcss"
    if platform_id is None:
        return "\n".join(
            [
                "Tailwind CSS standalone binary not found.",
                "",
                "Download the binary for your platform from:",
                f"  {RELEASES_URL}",
                f"and save it as {target} (make it executable),",
                "or install it in one of the standard locations.",
            ]
        )
    url = DOWNLOAD_URL.format(platform=platform_id)
    return "\n".join(
        [
            "Tailwind CSS standalone binary not found.",
            "",
            f"Install it for {platform_id}:",
            f"  mkdir -p {target.parent}",
            f"  curl -sLo {target} {url}",
            f"  chmod +x {target}",
            "",
            "Then run the build again.",
        ]
    )


def extract_version(help_text: str) -> str:
    match = VERSION_RE.search(help_text or "")
    return match.group(0) if match else DEFAULT_VERSION


def build_header(version: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return HEADER.format(generated=now.strftime("%Y-%m-%d %H:%M:%S UTC"), version=version)


def run(
    root: Path = ROOT,
    candidates: Optional[Sequence[Path]] = None,
    echo: Echo = click.echo,
) -> int:
    """Build the stylesheet; returns the process exit status."""
    root = Path(root)
    found = find_tailwind(candidates if candidates is not None else candidate_paths(root))
    if found is None:
        echo(install_instructions(detect_platform(), root), err=True)
        return 1

    binary, help_text = found
    input_css = root / INPUT_CSS
    output_css = root / OUTPUT_CSS
    config_js = root / CONFIG_JS
    output_css.parent.mkdir(parents=True, exist_ok=True)

    echo(f"Building {OUTPUT_CSS} with {binary}")
    command = [str(binary), "-i", str(input_css), "-o", str(output_css), "-c", str(config_js), "--minify"]
    result = subprocess.run(command, capture_output=True, text=True, errors="replace")
    if result.returncode != 0:
        echo(f"Tailwind CSS build failed (exit status {result.returncode})", err=True)
        if result.stdout:
            echo(result.stdout, err=True)
        if result.stderr:
            echo(result.stderr, err=True)
        return 1

    version = extract_version(help_text)
    try:
        css = output_css.read_text(encoding="utf-8")
        output_css.write_text(build_header(version) + css, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        echo(f"Tailwind CSS build produced no readable output at {output_css}: {exc}", err=True)
        return 1
    echo(f"Wrote {output_css} (Tailwind CSS {version})")
    return 0


def main() -> int:
    return run()


if __name__ == "__main__":
    raise SystemExit(main())
