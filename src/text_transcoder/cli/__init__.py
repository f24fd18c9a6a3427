"""Command-line interface module for text-transcoder.

This module provides the ``text-transcoder`` command: listing of supported
encodings and streaming conversion of a file or standard input.
"""

from .main import main

__all__ = ["main"]
