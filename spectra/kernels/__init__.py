"""Compute kernels for the vertical DFT pass.

Each stage of the invocation (coordinate mapping, summation, shift remap,
magnitude write) is a separate pure function so it can be checked on CPU; the
Triton module fuses them back into a single launch.
"""
from __future__ import annotations

__all__: list[str] = []
