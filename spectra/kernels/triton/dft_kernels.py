"""CUDA/Triton vertical DFT kernel.

Launch layout mirrors a compute-shader dispatch: the host computes
ceil(width / NUMTHREADS_X) × ceil(height / NUMTHREADS_Y) groups and every
thread of every group is one Triton program. Programs past the region edge
return before touching memory.
"""

from __future__ import annotations

import torch
import triton
import triton.language as tl

from spectra.config import ResultRect, SceneToTexel, group_counts
from spectra.kernels.sampling import TextureSampler, check_texture


@triton.jit
def _address(i, size, WRAP: tl.constexpr):
    if WRAP:
        r = i % size
        r = tl.where(r < 0, r + size, r)
    else:
        r = tl.minimum(tl.maximum(i, 0), size - 1)
    return r


@triton.jit
def _fetch(
    tex_ptr,
    u,
    v,
    tex_w,
    tex_h,
    tex_c,
    POINT: tl.constexpr,
    WRAP: tl.constexpr,
):
    # Returns (real, imag) from channels 0/1 of an (H, W, C) fp32 texture.
    if POINT:
        ix = _address(tl.floor(u * tex_w).to(tl.int32), tex_w, WRAP)
        iy = _address(tl.floor(v * tex_h).to(tl.int32), tex_h, WRAP)
        base = (iy * tex_w + ix) * tex_c
        re = tl.load(tex_ptr + base)
        im = tl.load(tex_ptr + base + 1)
    else:
        px = u * tex_w - 0.5
        py = v * tex_h - 0.5
        x0f = tl.floor(px)
        y0f = tl.floor(py)
        fx = px - x0f
        fy = py - y0f
        x0i = x0f.to(tl.int32)
        y0i = y0f.to(tl.int32)
        x0 = _address(x0i, tex_w, WRAP)
        x1 = _address(x0i + 1, tex_w, WRAP)
        y0 = _address(y0i, tex_h, WRAP)
        y1 = _address(y0i + 1, tex_h, WRAP)

        b00 = (y0 * tex_w + x0) * tex_c
        b01 = (y0 * tex_w + x1) * tex_c
        b10 = (y1 * tex_w + x0) * tex_c
        b11 = (y1 * tex_w + x1) * tex_c

        top_re = tl.load(tex_ptr + b00) * (1.0 - fx) + tl.load(tex_ptr + b01) * fx
        top_im = tl.load(tex_ptr + b00 + 1) * (1.0 - fx) + tl.load(tex_ptr + b01 + 1) * fx
        bot_re = tl.load(tex_ptr + b10) * (1.0 - fx) + tl.load(tex_ptr + b11) * fx
        bot_im = tl.load(tex_ptr + b10 + 1) * (1.0 - fx) + tl.load(tex_ptr + b11 + 1) * fx
        re = top_re * (1.0 - fy) + bot_re * fy
        im = top_im * (1.0 - fy) + bot_im * fy
    return re, im


@triton.jit
def vertical_dft_kernel(
    tex_ptr,  # fp32 [TH*TW*C]
    out_ptr,  # fp32 [W*H*4]
    tex_w,
    tex_h,
    tex_c,
    width,
    height,
    height_f,
    left,
    top,
    scale_x,
    offset_x,
    scale_y,
    offset_y,
    magnitude_scale,
    POINT: tl.constexpr,
    WRAP: tl.constexpr,
):
    x = tl.program_id(0)
    y = tl.program_id(1)
    if (x >= width) | (y >= height):
        return

    u = (x.to(tl.float32) + 0.5 + left) * scale_x + offset_x
    yf = y.to(tl.float32)

    acc_re = 0.0
    acc_im = 0.0
    # n as float, kept alongside the loop index so height == 1 still compiles.
    nf = 0.0
    for _n in range(0, height):
        angle = ((-6.283185307179586 * yf) * nf) / height_f
        v = (nf + 0.5 + top) * scale_y + offset_y
        re, im = _fetch(tex_ptr, u, v, tex_w, tex_h, tex_c, POINT, WRAP)
        c = tl.cos(angle)
        s = tl.sin(angle)
        acc_re += re * c - im * s
        acc_im += im * c + re * s
        nf += 1.0

    col = tl.where(2 * x < width, x + width // 2, x - (width + 1) // 2)
    row = tl.where(2 * y < height, y + height // 2, y - (height + 1) // 2)
    index = row * width + col

    mag = tl.sqrt(acc_re * acc_re + acc_im * acc_im) / magnitude_scale
    tl.store(out_ptr + index * 4 + 0, mag)
    tl.store(out_ptr + index * 4 + 1, mag)
    tl.store(out_ptr + index * 4 + 2, mag)
    tl.store(out_ptr + index * 4 + 3, 1.0)


def vertical_dft(
    *,
    image: torch.Tensor,
    out: torch.Tensor,
    rect: ResultRect,
    coefficients: SceneToTexel,
    magnitude_scale: float,
    group_size: tuple[int, int, int] = (24, 24, 1),
    sampler: TextureSampler | None = None,
) -> None:
    """Launch the fused kernel; `out` is the (width*height, 4) fp32 buffer."""
    check_texture(image)
    if image.device.type != "cuda" or out.device.type != "cuda":
        raise RuntimeError(f"Triton vertical DFT needs CUDA tensors, got {image.device} / {out.device}")
    sampler = (sampler or TextureSampler()).validate()
    width, height = rect.width, rect.height
    if width <= 0 or height <= 0:
        return

    tex = image.to(torch.float32).contiguous()
    groups_x, groups_y, _ = group_counts(width, height, group_size)
    grid = (groups_x * int(group_size[0]), groups_y * int(group_size[1]))
    vertical_dft_kernel[grid](
        tex.view(-1),
        out.view(-1),
        int(tex.shape[1]),
        int(tex.shape[0]),
        int(tex.shape[2]),
        int(width),
        int(height),
        float(height),
        float(rect.left),
        float(rect.top),
        float(coefficients.x.scale),
        float(coefficients.x.offset),
        float(coefficients.y.scale),
        float(coefficients.y.offset),
        float(magnitude_scale),
        POINT=sampler.filter == "point",
        WRAP=sampler.address == "wrap",
        num_warps=1,
    )
