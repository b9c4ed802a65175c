from __future__ import annotations

import struct
from pathlib import Path

import numpy as np

from snapfit.mesh import Mesh


def _face_normals(mesh: Mesh) -> np.ndarray:
    if mesh.n_faces == 0:
        return np.zeros((0, 3), dtype=float)
    v0 = mesh.vertices[mesh.faces[:, 0]]
    v1 = mesh.vertices[mesh.faces[:, 1]]
    v2 = mesh.vertices[mesh.faces[:, 2]]
    normals = np.cross(v1 - v0, v2 - v0)
    lengths = np.linalg.norm(normals, axis=1)
    with np.errstate(invalid="ignore", divide="ignore"):
        normals = np.divide(normals, lengths[:, np.newaxis], where=lengths[:, np.newaxis] > 0)
    normals[~np.isfinite(normals)] = 0.0
    return normals


def write_stl(mesh: Mesh, path: Path, ascii: bool = False, name: str = "snapfit") -> Path:
    """Write ``mesh`` as binary (default) or ASCII STL and return the path written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    normals = _face_normals(mesh)
    faces = mesh.faces
    vertices = mesh.vertices

    if ascii:
        lines = [f"solid {name}"]
        for idx, tri in enumerate(faces):
            nx, ny, nz = normals[idx]
            lines.append(f"  facet normal {nx:.6e} {ny:.6e} {nz:.6e}")
            lines.append("    outer loop")
            for vidx in tri:
                vx, vy, vz = vertices[vidx]
                lines.append(f"      vertex {vx:.6e} {vy:.6e} {vz:.6e}")
            lines.append("    endloop")
            lines.append("  endfacet")
        lines.append(f"endsolid {name}")
        path.write_text("\n".join(lines) + "\n")
        return path

    header = f"{name} STL".encode("ascii", errors="replace")[:80].ljust(80, b"\0")
    with path.open("wb") as handle:
        handle.write(header)
        handle.write(struct.pack("<I", faces.shape[0]))
        for idx, tri in enumerate(faces):
            record = np.concatenate([normals[idx], vertices[tri[0]], vertices[tri[1]], vertices[tri[2]]])
            handle.write(struct.pack("<12fH", *(float(v) for v in record), 0))
    return path
