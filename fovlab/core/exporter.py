from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Dict, List
import numpy as np
import pathlib

import laspy  # type: ignore
from .pointcloud import PointBatch
from .utils import get_logger

_log = get_logger()

# attribute name -> (extra dimension name, dtype)
_LAS_EXTRAS = {
    "range_m": ("Range", "float32"),
    "sensor_index": ("sensor_index", "uint16"),
}

@dataclass
class LasWriter:
    """Streaming LAS/LAZ writer using laspy (v2+).

    The header is created on the first batch so the offset can follow the
    data and only the extra dimensions actually present get declared.
    """
    path: str
    point_format: int = 6
    compress: bool = False
    scale: tuple[float, float, float] = (1e-3, 1e-3, 1e-3)
    offset: Optional[tuple[float, float, float]] = None

    def __post_init__(self) -> None:
        self._fh: Optional[laspy.LasWriter] = None  # type: ignore
        self._header: Optional[laspy.LasHeader] = None  # type: ignore
        self._extras: Dict[str, str] = {}

    def write_batch(self, batch: PointBatch) -> None:
        if len(batch) == 0:
            return
        if self._fh is None:
            self._open(batch)
        assert self._fh is not None and self._header is not None
        pts = laspy.ScaleAwarePointRecord.zeros(len(batch), header=self._header)
        pts.x = batch.xyz[:, 0]
        pts.y = batch.xyz[:, 1]
        pts.z = batch.xyz[:, 2]
        for attr, dim in self._extras.items():
            if attr in batch.attrs:
                pts[dim] = batch.attrs[attr]
        self._fh.write_points(pts)

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def _open(self, batch: PointBatch) -> None:
        hdr = laspy.LasHeader(point_format=laspy.PointFormat(self.point_format), version="1.4")
        hdr.scales = self.scale
        if self.offset is None:
            mn = np.min(batch.xyz, axis=0)
            hdr.offsets = (float(mn[0]), float(mn[1]), float(mn[2]))
        else:
            hdr.offsets = self.offset
        for attr, (dim, dtype) in _LAS_EXTRAS.items():
            if attr in batch.attrs:
                hdr.add_extra_dim(laspy.ExtraBytesParams(name=dim, type=dtype))
                self._extras[attr] = dim

        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = laspy.open(path, mode="w", header=hdr, do_compress=self.compress)
        self._header = hdr
        _log.info("Opened %s (PF=%d, compress=%s)", path.name, self.point_format, self.compress)


# attribute name -> (PLY property name, PLY type, printf format)
_PLY_PROPS = {
    "sensor_index": ("sensor_index", "ushort", "%d"),
    "range_m": ("range", "float", "%.6g"),
}


class PlyWriter:
    """ASCII PLY, buffered and written once on close.

    xyz always comes first; ``sensor_index`` and ``range_m`` become vertex
    properties when every batch carries them.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._batches: List[PointBatch] = []

    def write_batch(self, batch: PointBatch) -> None:
        self._batches.append(batch)

    def close(self) -> None:
        if not self._batches:
            return
        attrs = [a for a in _PLY_PROPS if all(a in b.attrs for b in self._batches)]
        columns = [np.vstack([b.xyz for b in self._batches]).astype(np.float64)]
        columns += [np.concatenate([b.attrs[a] for b in self._batches]).astype(np.float64)[:, None] for a in attrs]
        table = np.hstack(columns)

        header = ["ply", "format ascii 1.0", f"element vertex {len(table)}"]
        header += [f"property float {axis}" for axis in "xyz"]
        header += [f"property {_PLY_PROPS[a][1]} {_PLY_PROPS[a][0]}" for a in attrs]
        header.append("end_header")

        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write("\n".join(header) + "\n")
            np.savetxt(f, table, fmt=["%.6g"] * 3 + [_PLY_PROPS[a][2] for a in attrs])
        _log.info("Wrote %d points to %s", len(table), path.name)
        self._batches.clear()


class NpzWriter:
    def __init__(self, path: str) -> None:
        self.path = path
        self._batches: List[PointBatch] = []

    def write_batch(self, batch: PointBatch) -> None:
        self._batches.append(batch)

    def close(self) -> None:
        if not self._batches:
            return
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        out: Dict[str, np.ndarray] = {"xyz": np.vstack([b.xyz for b in self._batches])}
        keys = sorted({k for b in self._batches for k in b.attrs})
        for k in keys:
            dtype = next(b.attrs[k].dtype for b in self._batches if k in b.attrs)
            out[k] = np.concatenate([
                b.attrs[k].astype(dtype, copy=False) if k in b.attrs else np.zeros(len(b), dtype=dtype)
                for b in self._batches
            ])
        np.savez_compressed(path, **out)
        _log.info("Wrote %d points to %s", len(out["xyz"]), path.name)
        self._batches.clear()
