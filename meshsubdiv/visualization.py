"""
Mesh Visualization Module
=========================

Matplotlib figures for subdivision and level-of-detail results:
shaded meshes with optional wireframe, refined polylines, multi-level
comparisons and LOD statistics.
"""

import numpy as np
import matplotlib.pyplot as plt
from mpl_toolkits.mplot3d import Axes3D
from mpl_toolkits.mplot3d.art3d import Line3DCollection, Poly3DCollection
from typing import List, Optional, Tuple

from .chaikin import polyline_segments
from .lod import VoxelGrid
from .mesh import Mesh


class MeshVisualizer:
    """
    Visualization tools for the toolkit's engines.

    Wireframe overlays are requested per call through ``show_wireframe``.
    """

    def __init__(self, figsize: Tuple[int, int] = (14, 7)):
        """
        Initialize visualizer.

        Args:
            figsize: Default figure size for plots
        """
        self.figsize = figsize

    def plot_mesh(self, mesh: Mesh, title: str = "Mesh",
                  show_wireframe: bool = True,
                  grid: Optional[VoxelGrid] = None,
                  save_path: Optional[str] = None) -> plt.Figure:
        """
        Plot a single mesh, optionally with the voxel grid bounding box.

        Args:
            mesh: Mesh to draw
            title: Plot title
            show_wireframe: Whether to overlay triangle edges
            grid: Optional voxel grid whose bounding box is drawn
            save_path: Optional path to save the figure

        Returns:
            Matplotlib figure object
        """
        fig = plt.figure(figsize=(self.figsize[1], self.figsize[1]))
        ax = fig.add_subplot(111, projection='3d')
        self._plot_single_mesh(ax, mesh, title, show_wireframe, normalize=grid is None)

        if grid is not None:
            self._plot_box(ax, grid.bounds_min, grid.bounds_max)

        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Saved mesh plot to {save_path}")

        return fig

    def plot_mesh_comparison(self, original: Mesh, processed: Mesh,
                             title: str = "Mesh Comparison",
                             show_wireframe: bool = True,
                             save_path: Optional[str] = None) -> plt.Figure:
        """
        Create side-by-side comparison of an input and a processed mesh.

        Returns:
            Matplotlib figure object
        """
        fig, axes = plt.subplots(1, 2, figsize=self.figsize,
                                 subplot_kw={'projection': '3d'})

        self._plot_single_mesh(axes[0], original,
                               f"Original\n({original.triangle_count} faces, {original.vertex_count} vertices)",
                               show_wireframe)
        self._plot_single_mesh(axes[1], processed,
                               f"Processed\n({processed.triangle_count} faces, {processed.vertex_count} vertices)",
                               show_wireframe)

        fig.suptitle(title, fontsize=14, fontweight='bold')
        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Saved comparison to {save_path}")

        return fig

    def plot_multi_resolution(self, meshes: List[Mesh],
                              labels: Optional[List[str]] = None,
                              title: str = "Multi-Resolution Comparison",
                              show_wireframe: bool = True,
                              save_path: Optional[str] = None) -> plt.Figure:
        """
        Plot several meshes (e.g. successive subdivision or LOD levels).

        Returns:
            Matplotlib figure object
        """
        n = len(meshes)
        cols = min(4, max(n, 1))
        rows = (n + cols - 1) // cols

        fig = plt.figure(figsize=(5 * cols, 5 * max(rows, 1)))

        for i, mesh in enumerate(meshes):
            ax = fig.add_subplot(rows, cols, i + 1, projection='3d')

            if labels and i < len(labels):
                label = labels[i]
            else:
                label = f"{mesh.triangle_count} faces, {mesh.vertex_count} vertices"

            self._plot_single_mesh(ax, mesh, label, show_wireframe)

        fig.suptitle(title, fontsize=14, fontweight='bold')
        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Saved multi-resolution plot to {save_path}")

        return fig

    def plot_polyline(self, points: np.ndarray,
                      control_points: Optional[np.ndarray] = None,
                      title: str = "Chaikin Curve",
                      save_path: Optional[str] = None) -> plt.Figure:
        """
        Draw a refined polyline as connected segments with its points marked.

        Args:
            points: Refined point sequence
            control_points: Optional original control polygon (dashed)
            title: Plot title
            save_path: Optional path to save the figure

        Returns:
            Matplotlib figure object
        """
        fig = plt.figure(figsize=(self.figsize[1], self.figsize[1]))
        ax = fig.add_subplot(111, projection='3d')

        segments = polyline_segments(points)
        if len(segments) > 0:
            ax.add_collection3d(Line3DCollection(segments, colors='black', linewidths=1.0))

        points = np.asarray(points, dtype=np.float64)
        if len(points) > 0:
            ax.scatter(points[:, 0], points[:, 1], points[:, 2], color='red', s=8)

        if control_points is not None and len(control_points) > 1:
            cp = np.asarray(control_points, dtype=np.float64)
            ax.plot(cp[:, 0], cp[:, 1], cp[:, 2], linestyle='--', color='gray', linewidth=0.8)

        ax.set_xlim(-1, 1)
        ax.set_ylim(-1, 1)
        ax.set_zlim(-1, 1)
        ax.set_title(f"{title}\n({len(points)} points)", fontsize=10)

        plt.tight_layout()
        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Saved polyline to {save_path}")

        return fig

    def plot_statistics(self, subdivisions: List[int],
                        lod_meshes: List[Mesh],
                        original: Mesh,
                        hausdorff_distances: Optional[List[float]] = None,
                        save_path: Optional[str] = None) -> plt.Figure:
        """
        Plot LOD statistics against the grid resolution.

        Args:
            subdivisions: Grid resolutions used
            lod_meshes: Decimated mesh for each resolution
            original: Input mesh
            hausdorff_distances: Optional Hausdorff distance per level
            save_path: Optional path to save the figure

        Returns:
            Matplotlib figure object
        """
        n_plots = 2 + (1 if hausdorff_distances else 0)
        fig, axes = plt.subplots(1, n_plots, figsize=(5 * n_plots, 4))

        face_counts = [m.triangle_count for m in lod_meshes]
        axes[0].plot(subdivisions, face_counts, 'o-', color='steelblue')
        axes[0].axhline(y=original.triangle_count, color='red', linestyle='--',
                        label=f'Original ({original.triangle_count})')
        axes[0].set_xlabel('Subdivisions per axis')
        axes[0].set_ylabel('Face Count')
        axes[0].set_title('Face Count vs Grid Resolution')
        axes[0].legend()

        vertex_counts = [m.vertex_count for m in lod_meshes]
        axes[1].plot(subdivisions, vertex_counts, 's-', color='forestgreen')
        axes[1].axhline(y=original.vertex_count, color='red', linestyle='--',
                        label=f'Original ({original.vertex_count})')
        axes[1].set_xlabel('Subdivisions per axis')
        axes[1].set_ylabel('Vertex Count')
        axes[1].set_title('Vertex Count vs Grid Resolution')
        axes[1].legend()

        if hausdorff_distances:
            axes[2].plot(subdivisions, hausdorff_distances, 'o-', color='crimson')
            axes[2].set_xlabel('Subdivisions per axis')
            axes[2].set_ylabel('Hausdorff Distance')
            axes[2].set_title('Geometric Error vs Grid Resolution')

        plt.suptitle('Level of Detail Statistics', fontsize=14, fontweight='bold')
        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Saved statistics to {save_path}")

        return fig

    def _plot_single_mesh(self, ax: Axes3D, mesh: Mesh, title: str,
                          show_wireframe: bool, normalize: bool = True):
        """Plot a single mesh on a 3D axis."""
        vertices = mesh.vertices
        faces = mesh.valid_triangles()

        if normalize and len(vertices) > 0:
            # Fit into the unit cube centered at origin
            center = vertices.mean(axis=0)
            scale = np.max(np.abs(vertices - center))
            vertices = (vertices - center) / scale if scale > 0 else vertices - center

        if len(faces) > 0:
            triangles = vertices[faces]
            face_colors = self._compute_face_colors(triangles)
            poly = Poly3DCollection(triangles, facecolors=face_colors,
                                    edgecolors='black' if show_wireframe else 'none',
                                    linewidths=0.3 if show_wireframe else 0,
                                    alpha=0.9)
            ax.add_collection3d(poly)
        elif len(vertices) > 0:
            ax.scatter(vertices[:, 0], vertices[:, 1], vertices[:, 2], color='black', s=10)

        ax.set_xlim(-1, 1)
        ax.set_ylim(-1, 1)
        ax.set_zlim(-1, 1)
        ax.set_box_aspect([1, 1, 1])

        ax.set_title(title, fontsize=10)
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_zlabel('Z')

    def _compute_face_colors(self, triangles: np.ndarray) -> np.ndarray:
        """Compute face colors from a fixed light for flat shading."""
        light_dir = np.array([1, 1, 2])
        light_dir = light_dir / np.linalg.norm(light_dir)

        normals = np.cross(triangles[:, 1] - triangles[:, 0],
                           triangles[:, 2] - triangles[:, 0])
        lengths = np.linalg.norm(normals, axis=1)
        normals[lengths > 1e-10] /= lengths[lengths > 1e-10, None]

        # Double sided lighting
        intensity = np.clip(np.abs(normals @ light_dir), 0.2, 1.0)

        colors = np.zeros((len(triangles), 4))
        colors[:, 0] = 0.3 + 0.4 * intensity  # R
        colors[:, 1] = 0.4 + 0.4 * intensity  # G
        colors[:, 2] = 0.6 + 0.3 * intensity  # B
        colors[:, 3] = 1.0                     # A

        return colors

    def _plot_box(self, ax: Axes3D, lo: np.ndarray, hi: np.ndarray):
        """Draw the 12 edges of an axis-aligned box."""
        corners = np.array([
            [lo[0], lo[1], lo[2]], [hi[0], lo[1], lo[2]],
            [hi[0], hi[1], lo[2]], [lo[0], hi[1], lo[2]],
            [lo[0], lo[1], hi[2]], [hi[0], lo[1], hi[2]],
            [hi[0], hi[1], hi[2]], [lo[0], hi[1], hi[2]],
        ])
        edges = [(0, 1), (1, 2), (2, 3), (3, 0),
                 (4, 5), (5, 6), (6, 7), (7, 4),
                 (0, 4), (1, 5), (2, 6), (3, 7)]
        segments = [[corners[a], corners[b]] for a, b in edges]
        ax.add_collection3d(Line3DCollection(segments, colors='magenta', linewidths=1.0))
