from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass
class AngularJitter:
    """Gaussian azimuth/elevation jitter for the point-cloud sampler.

    This is the only noise the sampler models. Draws come from the same
    generator as the samples, so a given sensor id still reproduces exactly.
    """

    sigma_angle_deg: float = 0.0

    def __post_init__(self) -> None:
        if self.sigma_angle_deg < 0.0:
            raise ValueError("sigma_angle_deg must be non-negative.")
        self.sigma_angle_deg = float(self.sigma_angle_deg)

    def jitter_angles(
        self,
        azimuth: np.ndarray,
        elevation: np.ndarray,
        rng: np.random.Generator,
        sigma_deg: Optional[float] = None,
    ) -> Tuple[np.ndarray, np.ndarray]:
        sigma = self.sigma_angle_deg if sigma_deg is None else float(max(0.0, sigma_deg))
        if sigma == 0.0:
            return azimuth, elevation
        sigma_rad = np.deg2rad(sigma)
        d_az = rng.normal(scale=sigma_rad, size=azimuth.shape)
        d_el = rng.normal(scale=sigma_rad, size=elevation.shape)
        el = np.clip(elevation + d_el, -0.5 * np.pi, 0.5 * np.pi)
        return azimuth + d_az, el
