"""
Export of scene geometry.
"""

import manifold3d as m3d
import numpy as np
from stl import mesh, Mode


def manifold_to_stl(
    manifold: m3d.Manifold, filename: str, file_obj=None, mode=Mode.AUTOMATIC, update_normals=True
) -> int:
    """Convert a manifold to STL format and either save to a file or write to a file-like object.

    Args:
        manifold: The manifold to convert
        filename: Path to save the STL file (ignored if file_obj is provided)
        file_obj: Optional file-like object to write to instead of a file
        mode: Mode to use for the STL file
        update_normals: Whether to update the normals of the mesh
    Returns:
        The number of triangles written.
    """
    m_mesh = manifold.to_mesh()
    tri_verts = np.asarray(m_mesh.tri_verts)

    num_triangles = len(tri_verts)
    data = np.zeros(num_triangles, dtype=mesh.Mesh.dtype)
    if num_triangles:
        points = np.asarray(m_mesh.vert_properties)[:, :3]
        data["vectors"] = points[tri_verts]

    stl_mesh = mesh.Mesh(data)
    stl_mesh.save(filename, fh=file_obj, mode=mode, update_normals=update_normals)
    return num_triangles
