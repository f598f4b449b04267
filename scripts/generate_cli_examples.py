from __future__ import annotations

import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

EXAMPLES_ROOT = Path("examples/cli-options")
BASE_ARGS = ["--quiet", "--size", "160x120", "--max-iterations", "200"]


@dataclass
class Expected:
    path: Path


@dataclass
class Example:
    name: str
    args: list[str]
    expected: list[Expected]
    clean: list[Path] | None = None

    def full_args(self) -> list[str]:
        return [sys.executable, "render.py", *self.args]


def _example(name: str, filename: str, *args: str) -> Example:
    target = EXAMPLES_ROOT / name / filename
    return Example(
        name=name,
        args=[*BASE_ARGS, *args, "--out", str(target)],
        expected=[Expected(target)],
        clean=[EXAMPLES_ROOT / name],
    )


EXAMPLES: list[Example] = [
    _example("mode-seq", "sequential.png", "--mode", "seq"),
    _example("mode-px", "per-pixel.png", "--mode", "px", "--tasks", "4"),
    _example("mode-row", "per-row.png", "--mode", "row", "--tasks", "4"),
    _example("mode-workers", "blocks.png", "--mode", "workers", "--tasks", "4"),
    _example("block-size", "small-blocks.png", "--mode", "workers", "--block-size", "16x16"),
    _example("threshold", "coarse.png", "--mode", "workers", "--threshold", "8"),
    _example("rect", "zoomed.png", "-r", "-1.0:0.5:-0.5:0.5"),
    _example("max-iterations", "few-iterations.png", "--max-iterations", "20"),
    _example("format", "lossless.bmp", "--format", "bmp"),
    _example("size", "tiny.png", "--size", "64x48"),
]


def _ensure_clean(paths: Iterable[Path]) -> None:
    for path in paths:
        if path.exists():
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()


def _prepare(example: Example) -> None:
    clean = example.clean or []
    _ensure_clean(clean)
    for expected in example.expected:
        expected.path.parent.mkdir(parents=True, exist_ok=True)


def _verify(example: Example) -> None:
    for expected in example.expected:
        if not expected.path.is_file():
            raise RuntimeError(f"Expected file {expected.path} was not created")
        if expected.path.stat().st_size == 0:
            raise RuntimeError(f"File {expected.path} is empty")


def main() -> None:
    EXAMPLES_ROOT.mkdir(parents=True, exist_ok=True)
    for example in EXAMPLES:
        print(f"\n[cli-example] {example.name}")
        _prepare(example)
        completed = subprocess.run(example.full_args(), check=True)
        if completed.returncode != 0:
            raise RuntimeError(f"Example {example.name} failed with {completed.returncode}")
        _verify(example)
    print("\nAll CLI examples generated successfully.")


if __name__ == "__main__":
    main()
