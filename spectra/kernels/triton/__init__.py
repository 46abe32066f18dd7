"""CUDA/Triton backend for the vertical DFT pass

One program per work item over the padded dispatch grid, with the bounds
guard, filtered fetch, float32 summation and shift remap fused together. The
pure-torch path in `spectra.kernels.dispatch` is the numerical reference.
"""

from __future__ import annotations

__all__: list[str] = []
