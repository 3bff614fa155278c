"""
Subdivision and Level of Detail - Main Demo
===========================================

This script:
1. Refines a polyline with Chaikin corner cutting
2. Refines a tetrahedron or cube with Loop subdivision
3. Builds voxel-clustered LOD levels of a mesh
4. Saves figures, OFF files and quality metrics to the output directory
"""

import argparse
import time
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from meshsubdiv.chaikin import DEFAULT_CONTROL_POINTS, chaikin_curve
from meshsubdiv.errors import MeshError
from meshsubdiv.evaluation import MeshEvaluator
from meshsubdiv.lod import LODDecimator, normalize_meshes
from meshsubdiv.loop import LoopSubdivider, initial_mesh
from meshsubdiv.mesh import concatenate
from meshsubdiv.off_format import load_off, save_off
from meshsubdiv.primitives import MeshType, create_sample_mesh, print_mesh_info
from meshsubdiv.visualization import MeshVisualizer


def demo_chaikin(iterations: int, output_dir: Path):
    """
    Refine the default control polygon and plot every level.
    """
    print("\n" + "=" * 60)
    print("CHAIKIN CURVE")
    print("=" * 60)

    visualizer = MeshVisualizer()

    for k in range(iterations + 1):
        points = chaikin_curve(DEFAULT_CONTROL_POINTS, iterations=k)
        print(f"  Iterations {k}: {len(points)} points")

    fig = visualizer.plot_polyline(
        points, control_points=DEFAULT_CONTROL_POINTS,
        title=f"Chaikin - {iterations} iterations",
        save_path=str(output_dir / f"chaikin_{iterations}.png")
    )
    plt.close(fig)

    return points


def demo_loop(iterations: int, mesh_type: str, output_dir: Path,
              show_wireframe: bool = True):
    """
    Subdivide a built-in mesh level by level and compare against the input.
    """
    print("\n" + "=" * 60)
    print(f"LOOP SUBDIVISION ({mesh_type})")
    print("=" * 60)

    visualizer = MeshVisualizer()
    evaluator = MeshEvaluator()
    subdivider = LoopSubdivider(compute_normals=True, verbose=True)

    mesh = initial_mesh(mesh_type)
    levels = [mesh]
    for _ in range(iterations):
        levels.append(subdivider.subdivide(levels[-1], iterations=1))

    result = levels[-1]
    metrics = evaluator.compute_all_metrics(mesh, result)
    print("\n" + evaluator.generate_report(metrics, f"Loop x{iterations}"))

    labels = [f"Level {i} ({m.triangle_count} faces)" for i, m in enumerate(levels)]
    fig = visualizer.plot_multi_resolution(
        levels, labels,
        title=f"{mesh_type} - Loop Subdivision",
        show_wireframe=show_wireframe,
        save_path=str(output_dir / f"{mesh_type}_loop_levels.png")
    )
    plt.close(fig)

    output_path = output_dir / f"{mesh_type}_loop_{iterations}.off"
    save_off(result, output_path)
    print(f"Saved: {output_path}")

    return result


def demo_lod(meshes, mesh_name: str, subdivisions: int, output_dir: Path,
             show_wireframe: bool = True, quick: bool = False):
    """
    Decimate meshes at one resolution (or a sweep of resolutions) and report.
    """
    print("\n" + "=" * 60)
    print("LEVEL OF DETAIL")
    print("=" * 60)

    visualizer = MeshVisualizer()
    evaluator = MeshEvaluator()

    # Decimated meshes live in normalized space; compare in that space
    if subdivisions == -1:
        reference = concatenate(meshes)
    else:
        normalized, _, _ = normalize_meshes(meshes)
        reference = concatenate(normalized)

    resolutions = [subdivisions] if quick or subdivisions == -1 else [1, 2, 4, 8, 16]
    if subdivisions not in resolutions:
        resolutions.append(subdivisions)

    lod_meshes = []
    hausdorff = []
    for s in resolutions:
        decimator = LODDecimator(subdivisions=s, verbose=True)

        start_time = time.time()
        lod = decimator.decimate(meshes)
        runtime = time.time() - start_time

        metrics = evaluator.compute_all_metrics(reference, lod)
        metrics['runtime'] = runtime
        lod_meshes.append(lod)
        hausdorff.append(metrics['hausdorff_distance'])
        print(f"  S={s}: Hausdorff {metrics['hausdorff_distance']:.6f}, "
              f"runtime {runtime:.3f}s")

        if s == subdivisions:
            print("\n" + evaluator.generate_report(metrics, f"LOD S={s}"))
            fig = visualizer.plot_mesh(
                lod, title=f"{mesh_name} - LOD S={s}",
                show_wireframe=show_wireframe, grid=decimator.grid,
                save_path=str(output_dir / f"{mesh_name}_lod_{s}.png")
            )
            plt.close(fig)

            output_path = output_dir / f"{mesh_name}_lod_{s}.off"
            save_off(lod, output_path)
            print(f"Saved: {output_path}")

    if len(resolutions) > 1:
        fig = visualizer.plot_statistics(
            resolutions, lod_meshes, reference,
            hausdorff_distances=hausdorff,
            save_path=str(output_dir / f"{mesh_name}_lod_statistics.png")
        )
        plt.close(fig)

    return lod_meshes


def main():
    """Main demo entry point."""
    parser = argparse.ArgumentParser(
        description="Subdivision (Chaikin, Loop) and voxel LOD demo"
    )
    parser.add_argument(
        "--demo", "-d", choices=["chaikin", "loop", "lod", "all"], default="all",
        help="Which demo to run (default: all)"
    )
    parser.add_argument(
        "--mesh", "-m", type=str, nargs="+", default=None,
        help="OFF file(s) for the LOD demo. If not provided, uses a sample mesh."
    )
    parser.add_argument(
        "--mesh-type", "-t", choices=[t.value for t in MeshType],
        default=MeshType.TETRAHEDRON.value,
        help="Starting mesh for Loop subdivision (default: tetrahedron)"
    )
    parser.add_argument(
        "--iterations", "-n", type=int, default=3,
        help="Chaikin / Loop iterations (default: 3)"
    )
    parser.add_argument(
        "--subdivisions", "-s", type=int, default=8,
        help="Voxels per axis for LOD, -1 to merge only (default: 8)"
    )
    parser.add_argument(
        "--output", "-o", type=str, default="output",
        help="Output directory for results"
    )
    parser.add_argument(
        "--no-wireframe", action="store_true",
        help="Draw meshes without the wireframe overlay"
    )
    parser.add_argument(
        "--quick", "-q", action="store_true",
        help="Quick mode - single LOD resolution, no sweep"
    )

    args = parser.parse_args()

    if args.iterations < 0:
        parser.error("--iterations must be >= 0")
    if args.subdivisions == 0 or args.subdivisions < -1:
        parser.error("--subdivisions must be >= 1 or -1")

    output_dir = Path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    show_wireframe = not args.no_wireframe

    print("=" * 60)
    print("SUBDIVISION AND LEVEL OF DETAIL")
    print("=" * 60)

    if args.demo in ("chaikin", "all"):
        demo_chaikin(args.iterations, output_dir)

    if args.demo in ("loop", "all"):
        demo_loop(args.iterations, args.mesh_type, output_dir, show_wireframe)

    if args.demo in ("lod", "all"):
        if args.mesh:
            meshes = []
            for path in args.mesh:
                print(f"\nLoading mesh from: {path}")
                try:
                    meshes.append(load_off(path))
                except MeshError as e:
                    parser.error(str(e))
            mesh_name = Path(args.mesh[0]).stem
        else:
            print("\nNo mesh specified, creating sample mesh...")
            meshes = [create_sample_mesh("torus")]
            mesh_name = "sample_torus"

        for i, mesh in enumerate(meshes):
            print_mesh_info(mesh, f"{mesh_name} [{i}]")

        demo_lod(meshes, mesh_name, args.subdivisions, output_dir,
                 show_wireframe=show_wireframe, quick=args.quick)

    print("\n" + "=" * 60)
    print("DEMO COMPLETE")
    print(f"Results saved to: {output_dir.absolute()}")
    print("=" * 60)


if __name__ == "__main__":
    main()
