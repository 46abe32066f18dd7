"""Frequency-shift remap: move the zero-frequency term to the region center.

The width×height plane is cut at (midX, midY) = (width/2, height/2) and the
quadrants are swapped diagonally. midX/midY are real-valued; the row term is
floored and the summed index is truncated to an integer, which for
non-negative values equals floor(y±midY)*width + floor(x±midX). For even sizes
this is the usual fftshift involution. For odd sizes it still partitions
[0, width*height) and matches numpy's fftshift (not ifftshift), so applying it
twice does not return to the identity.
"""

from __future__ import annotations

import math

import torch


def shift_index(x: int, y: int, width: int, height: int) -> int:
    """Linear output index for work item (x, y)."""
    mid_x = width / 2.0
    mid_y = height / 2.0
    index = y * width + x
    if x < mid_x and y < mid_y:
        index = math.floor(y + mid_y) * width + (x + mid_x)
    elif x >= mid_x and y < mid_y:
        index = math.floor(y + mid_y) * width + (x - mid_x)
    elif x < mid_x and y >= mid_y:
        index = math.floor(y - mid_y) * width + (x + mid_x)
    elif x >= mid_x and y >= mid_y:
        index = math.floor(y - mid_y) * width + (x - mid_x)
    return int(index)


def shift_indices(x: torch.Tensor, y: torch.Tensor, width: int, height: int) -> torch.Tensor:
    """Vectorised shift_index over integer coordinate tensors (broadcast).

    Uses the integer form: for integer x, floor(x + w/2) = x + w//2 and
    floor(x - w/2) = x - ceil(w/2), and x < w/2 iff 2x < w.
    """
    w = int(width)
    h = int(height)
    x = x.to(torch.int64)
    y = y.to(torch.int64)
    col = torch.where(2 * x < w, x + w // 2, x - (w + 1) // 2)
    row = torch.where(2 * y < h, y + h // 2, y - (h + 1) // 2)
    return row * w + col


def frequency_shift_indices(width: int, height: int, *, device: torch.device | str = "cpu") -> torch.Tensor:
    """Full remap table: (height, width) int64, entry [y, x] is the output index."""
    ys, xs = torch.meshgrid(
        torch.arange(height, device=device),
        torch.arange(width, device=device),
        indexing="ij",
    )
    return shift_indices(xs, ys, width, height)


def is_bijection(indices: torch.Tensor, size: int) -> bool:
    """True when `indices` is a permutation of [0, size)."""
    flat = indices.reshape(-1).to(torch.int64)
    if int(flat.numel()) != int(size):
        return False
    if flat.numel() == 0:
        return True
    if int(flat.min().item()) < 0 or int(flat.max().item()) >= size:
        return False
    counts = torch.bincount(flat, minlength=size)
    return bool((counts == 1).all().item())
