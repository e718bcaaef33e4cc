#!/usr/bin/env python3
"""
asset_io.py - Output helpers for the asset compilers.

Artifacts are built in memory and replaced in one step through a temp file in
the destination directory.
"""

from __future__ import annotations

import json
import os
import tempfile


def _write_atomic(path: str, data: bytes) -> None:
    out_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(out_dir, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=out_dir)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise


def write_bytes(path: str, data: bytes) -> None:
    _write_atomic(path, bytes(data))
    print(f"Wrote {path} ({len(data)} bytes)")


def write_text(path: str, text: str) -> None:
    _write_atomic(path, text.encode("utf-8"))
    print(f"Wrote {path}")


def write_json(path: str, obj) -> None:
    write_text(path, json.dumps(obj, indent=2) + "\n")
