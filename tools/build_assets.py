#!/usr/bin/env python3
"""
build_assets.py - Build every sprite-sheet manifest and stage in one pass.

Usage:
  python tools/build_assets.py
  python tools/build_assets.py --sprites sprites --stages stages
  python tools/build_assets.py --sheets sprites/background.json --page left --prefix SPR_
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path

from gen_paths import GEN_ROOT, INCLUDE_DIR

MANIFEST_SUFFIXES = (".json", ".yaml", ".yml")


def run(cmd: list[str]) -> None:
    proc = subprocess.run(cmd)
    if proc.returncode != 0:
        sys.exit(proc.returncode)


def find_manifests(directory: Path) -> list[Path]:
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in MANIFEST_SUFFIXES)


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--sprites", default="sprites", help="Directory containing sprite-sheet manifests")
    ap.add_argument("--stages", default="stages", help="Directory containing stage manifests")
    ap.add_argument("--sheets", default="", help="Sprite-sheet manifest used to resolve stage tile names")
    ap.add_argument("--page", default="left", choices=("left", "right"), help="Page for stage tile names")
    ap.add_argument("--prefix", default="", help="Prefix for generated header symbols")
    args = ap.parse_args()

    tools = Path(__file__).resolve().parent
    spritesheetc = tools / "spritesheetc.py"
    stagec = tools / "stagec.py"
    sprites_dir = Path(args.sprites).resolve()
    stages_dir = Path(args.stages).resolve()
    include_dir = Path(GEN_ROOT) / INCLUDE_DIR

    sheet_files = find_manifests(sprites_dir) if sprites_dir.is_dir() else []
    stage_files = find_manifests(stages_dir) if stages_dir.is_dir() else []
    if not sheet_files and not stage_files:
        print(f"No manifests found in {sprites_dir} or {stages_dir}", file=sys.stderr)
        sys.exit(1)

    # Pattern tables first: stages may resolve tile names against them.
    for manifest in sheet_files:
        base = manifest.stem
        run([
            sys.executable, str(spritesheetc), str(manifest),
            "-c", os.path.join(include_dir, f"{base}.h"),
            "-a", os.path.join(include_dir, f"{base}.inc"),
            "-p", args.prefix,
        ])

    for manifest in stage_files:
        cmd = [sys.executable, str(stagec), str(manifest)]
        if args.sheets:
            cmd += ["--sheets", args.sheets, "--page", args.page]
        run(cmd)


if __name__ == "__main__":
    main()
