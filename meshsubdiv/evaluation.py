"""
Mesh Evaluation Module
======================

Quantitative comparison of a source mesh and its processed version
(decimated or subdivided):
- Hausdorff distance
- Chamfer distance
- Vertex/Face count statistics
- Surface area change
"""

import numpy as np
from typing import Dict, Tuple
from scipy.spatial import cKDTree

from .mesh import Mesh


class MeshEvaluator:
    """
    Evaluation tools for level-of-detail and subdivision results.

    Provides both geometric distance metrics and count statistics.
    """

    def __init__(self, sample_points: int = 5000):
        """
        Initialize evaluator.

        Args:
            sample_points: Number of points to sample for distance metrics
        """
        self.sample_points = sample_points

    def compute_all_metrics(self, original: Mesh, processed: Mesh) -> Dict[str, float]:
        """
        Compute all available metrics.

        Args:
            original: Reference mesh
            processed: Decimated or subdivided mesh

        Returns:
            Dictionary of metric names to values
        """
        metrics = {}

        # Count statistics
        metrics['original_faces'] = original.triangle_count
        metrics['processed_faces'] = processed.triangle_count
        metrics['original_vertices'] = original.vertex_count
        metrics['processed_vertices'] = processed.vertex_count
        metrics['face_ratio'] = processed.triangle_count / max(original.triangle_count, 1)
        metrics['vertex_ratio'] = processed.vertex_count / max(original.vertex_count, 1)

        if original.vertex_count == 0 or processed.vertex_count == 0:
            metrics['hausdorff_distance'] = np.nan
            metrics['hausdorff_forward'] = np.nan
            metrics['hausdorff_backward'] = np.nan
            metrics['chamfer_distance'] = np.nan
        else:
            hausdorff, forward, backward = self.hausdorff_distance(original, processed)
            metrics['hausdorff_distance'] = hausdorff
            metrics['hausdorff_forward'] = forward
            metrics['hausdorff_backward'] = backward
            metrics['chamfer_distance'] = self.chamfer_distance(original, processed)

        metrics['original_area'] = surface_area(original)
        metrics['processed_area'] = surface_area(processed)
        metrics['area_error'] = abs(metrics['processed_area'] - metrics['original_area']) / \
                                max(metrics['original_area'], 1e-10)

        return metrics

    def _sample_pair(self, mesh1: Mesh, mesh2: Mesh) -> Tuple[np.ndarray, np.ndarray]:
        return (sample_mesh_surface(mesh1, self.sample_points),
                sample_mesh_surface(mesh2, self.sample_points))

    def hausdorff_distance(self, mesh1: Mesh, mesh2: Mesh) -> Tuple[float, float, float]:
        """
        Compute symmetric Hausdorff distance between two meshes.

        Uses point sampling on the mesh surfaces.

        Returns:
            Tuple of (symmetric_hausdorff, forward, backward) distances
        """
        points1, points2 = self._sample_pair(mesh1, mesh2)

        tree1 = cKDTree(points1)
        tree2 = cKDTree(points2)

        distances_forward, _ = tree2.query(points1)
        hausdorff_forward = float(np.max(distances_forward))

        distances_backward, _ = tree1.query(points2)
        hausdorff_backward = float(np.max(distances_backward))

        return max(hausdorff_forward, hausdorff_backward), hausdorff_forward, hausdorff_backward

    def chamfer_distance(self, mesh1: Mesh, mesh2: Mesh) -> float:
        """
        Compute symmetric Chamfer distance between two meshes.

        Chamfer distance is the sum of both directions' mean squared
        nearest-neighbor distances.
        """
        points1, points2 = self._sample_pair(mesh1, mesh2)

        tree1 = cKDTree(points1)
        tree2 = cKDTree(points2)

        distances_forward, _ = tree2.query(points1)
        distances_backward, _ = tree1.query(points2)

        return float(np.mean(distances_forward ** 2)) + float(np.mean(distances_backward ** 2))

    def generate_report(self, metrics: Dict[str, float],
                        method_name: str = "LOD") -> str:
        """
        Generate a human-readable evaluation report.

        Args:
            metrics: Dictionary of metric values
            method_name: Name of the processing step

        Returns:
            Formatted report string
        """
        lines = [
            "=" * 60,
            f"Mesh Processing Report - {method_name}",
            "=" * 60,
            "",
            "MESH STATISTICS",
            "-" * 40,
            f"  Original:    {metrics.get('original_faces', 'N/A'):>8} faces, "
            f"{metrics.get('original_vertices', 'N/A'):>8} vertices",
            f"  Processed:   {metrics.get('processed_faces', 'N/A'):>8} faces, "
            f"{metrics.get('processed_vertices', 'N/A'):>8} vertices",
            f"  Face Ratio:  {metrics.get('face_ratio', 0)*100:>7.2f}% of original faces",
            "",
            "GEOMETRIC ACCURACY",
            "-" * 40,
            f"  Hausdorff Distance:    {metrics.get('hausdorff_distance', np.nan):>12.6f}",
            f"    Forward:             {metrics.get('hausdorff_forward', np.nan):>12.6f}",
            f"    Backward:            {metrics.get('hausdorff_backward', np.nan):>12.6f}",
            f"  Chamfer Distance:      {metrics.get('chamfer_distance', np.nan):>12.6f}",
            f"  Area Error:            {metrics.get('area_error', 0)*100:>11.4f}%",
            "",
            "=" * 60,
        ]

        if 'runtime' in metrics:
            lines.insert(-1, f"  Runtime:               {metrics['runtime']:>11.4f} seconds")

        return "\n".join(lines)


def surface_area(mesh: Mesh) -> float:
    """Total area of the valid triangles of a mesh."""
    if len(mesh.valid_triangles()) == 0:
        return 0.0
    return float(mesh.to_trimesh().area)


def sample_mesh_surface(mesh: Mesh, n_samples: int) -> np.ndarray:
    """
    Sample points uniformly on a mesh surface.

    Meshes without usable triangles fall back to their vertices.

    Returns:
        (N, 3) array of sample points
    """
    if surface_area(mesh) == 0.0:
        return mesh.vertices.copy()
    return np.asarray(mesh.to_trimesh().sample(n_samples))
