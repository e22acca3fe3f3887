"""Device selection for the per-point tensor work.

Every grid point is updated independently, so a step is one batched tensor
program. It runs on whatever torch backend is present: CUDA, Apple Silicon
(MPS) or plain CPU.
"""

from __future__ import annotations

import platform
from typing import TYPE_CHECKING

import torch

__all__ = [
    "cuda_supported",
    "mps_supported",
    "get_device",
]


def cuda_supported() -> bool:
    try:
        return bool(torch.cuda.is_available())
    except RuntimeError:
        return False


def mps_supported() -> bool:
    """Whether the current runtime can execute on Metal (MPS).

    This indicates platform + PyTorch MPS support only.
    """
    if TYPE_CHECKING:
        return False

    if platform.system() != "Darwin":
        return False

    try:
        return bool(torch.backends.mps.is_available())
    except (AttributeError, RuntimeError):
        return False


def get_device() -> str:
    """Get the device to use for the simulation."""
    if cuda_supported():
        return "cuda"
    if mps_supported():
        return "mps"

    return "cpu"
