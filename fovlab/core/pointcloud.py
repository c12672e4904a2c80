from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
from typing import Dict

@dataclass
class PointBatch:
    """Points sampled for one sensor, with optional per-point attributes."""
    xyz: np.ndarray                       # (N, 3)
    attrs: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.xyz = np.asarray(self.xyz, dtype=np.float32).reshape(-1, 3)
        n = len(self.xyz)
        for k, v in self.attrs.items():
            if v.shape[0] != n:
                raise ValueError(f"Attribute '{k}' length {v.shape[0]} != {n}")

    @classmethod
    def from_flat(cls, buffer: np.ndarray, **attrs: np.ndarray) -> "PointBatch":
        return cls(xyz=np.asarray(buffer).reshape(-1, 3), attrs=dict(attrs))

    def __len__(self) -> int:
        return len(self.xyz)
