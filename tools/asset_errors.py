#!/usr/bin/env python3
"""
asset_errors.py - Error types shared by spritesheetc.py and stagec.py.

Errors tied to a file carry it in `.path`; the CLIs report them as
`{path}: error: {message}`.
"""

from __future__ import annotations


class AssetError(Exception):
    pass


class DimensionsError(AssetError):
    """Size or capacity mismatch (block length, image size, page overflow...)."""


class FormatError(AssetError):
    """Input that decodes but is not usable (bad image mode, unknown symbol...)."""


class PaletteError(FormatError):
    """A 2-bit palette index outside 0..3."""


class ImageDecodeError(AssetError):
    def __init__(self, path: str, cause: BaseException):
        super().__init__(f"cannot decode image: {cause}")
        self.path = path
        self.cause = cause


class ManifestParseError(AssetError):
    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path
        self.message = message


def error_path(e: AssetError, default: str) -> str:
    return getattr(e, "path", None) or default
