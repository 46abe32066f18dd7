"""Spectra: a direct-summation vertical DFT pass with centered magnitude output.

The pass is written as a compute kernel (one invocation per output pixel) and
ships with a pure-torch reference backend plus a fused Triton backend.
"""
from __future__ import annotations

from spectra.config import AxisCoefficients, DFTPassConfig, ResultRect, SceneToTexel
from spectra.kernels.dispatch import VerticalDFTPass, buffer_to_image, run_work_item
from spectra.kernels.sampling import TextureSampler

__all__ = [
    "AxisCoefficients",
    "DFTPassConfig",
    "ResultRect",
    "SceneToTexel",
    "TextureSampler",
    "VerticalDFTPass",
    "buffer_to_image",
    "run_work_item",
]
