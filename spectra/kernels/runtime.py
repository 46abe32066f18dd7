"""Backend availability detection (Triton + CUDA)

The vertical pass has a pure-torch reference path that runs anywhere and a
fused Triton kernel for CUDA devices. Both implement the same invocation
semantics; the reference path is the one the tests pin numerics against.
"""

from __future__ import annotations

import importlib.util

import torch

__all__ = [
    "triton_supported",
    "cuda_supported",
    "get_device",
    "select_backend",
]


def has_module(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError, AttributeError):
        return False


def triton_supported() -> bool:
    return bool(has_module("triton") and has_module("triton.language"))


def cuda_supported() -> bool:
    try:
        return bool(torch.cuda.is_available())
    except Exception:
        return False


def get_device() -> str:
    """Default device for dispatches: cuda, then mps, then cpu."""
    if cuda_supported():
        return "cuda"
    try:
        if torch.backends.mps.is_available():
            return "mps"
    except Exception:
        pass
    return "cpu"


def select_backend(requested: str, device: str | torch.device) -> str:
    """Resolve "auto" to a concrete backend for `device`.

    "triton" is only picked automatically for CUDA devices with Triton
    installed; explicit requests are passed through and fail at launch time
    if the toolchain is missing.
    """
    if requested != "auto":
        return requested
    if torch.device(device).type == "cuda" and triton_supported():
        return "triton"
    return "torch"
