"""
Demo script to show the smallest H3 enclosure of a circle.

This script computes an enclosure locally (no API server needed) and
demonstrates:
1. How many cells cover the circle at the chosen resolution
2. How far the ring expansion went before finding an empty ring
3. That every sampled point inside the circle lands in a returned cell

Usage:
    python scripts/demo_enclosure.py
    python scripts/demo_enclosure.py --radius 2000 --resolution 8
    python scripts/demo_enclosure.py --lat 51.5074 --lon -0.1278 --cells
"""
import argparse
import os
import random
import sys

# Add project root to path so we can import our modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.enclosure.config import configure_logging
from src.enclosure.distance import Point, destination_point
from src.enclosure.enclosure import build
from src.enclosure.errors import EnclosureError
from src.enclosure.grid import DEFAULT_RESOLUTION, H3GridIndex

# Downtown Phoenix
DEMO_LOCATION = {
    "lat": 33.4484,
    "lon": -112.0740
}


def coverage_misses(enclosure, cells, samples: int) -> int:
    """Count sampled points inside the circle whose cell is missing from the result."""
    grid = H3GridIndex()
    misses = 0
    for _ in range(samples):
        distance = enclosure.radius_meters * random.random() ** 0.5
        bearing = random.uniform(0, 360)
        point = destination_point(enclosure.center, distance, bearing)
        if grid.latlng_to_cell(point, enclosure.resolution) not in cells:
            misses += 1
    return misses


def main():
    parser = argparse.ArgumentParser(description="Demo smallest H3 enclosure of a circle")
    parser.add_argument("--lat", type=float, default=DEMO_LOCATION["lat"], help="Center latitude")
    parser.add_argument("--lon", type=float, default=DEMO_LOCATION["lon"], help="Center longitude")
    parser.add_argument("--radius", type=float, default=500.0, help="Radius in meters (default: 500)")
    parser.add_argument("--resolution", type=int, default=DEFAULT_RESOLUTION, help="H3 resolution (default: 9)")
    parser.add_argument("--samples", type=int, default=2000, help="Points sampled for the coverage check")
    parser.add_argument("--cells", action="store_true", help="Print every cell ID")
    parser.add_argument("--verbose", action="store_true", help="Log every ring")
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else "WARNING")

    print("=" * 60)
    print("SMALLEST ENCLOSING H3 DEMO")
    print("=" * 60)
    print()
    print(f"Center:     ({args.lat}, {args.lon})")
    print(f"Radius:     {args.radius} m")
    print(f"Resolution: {args.resolution}")
    print()
    print("-" * 60)

    try:
        enclosure = build(Point(args.lat, args.lon), args.radius, args.resolution)
        result = enclosure.expand()
    except EnclosureError as e:
        print(f"ERROR ({type(e).__name__}): {e}")
        return 1

    stats = result.stats
    print()
    print("ENCLOSURE:")
    print(f"  Center cell:   {result.origin}")
    print(f"  Cells:         {len(result.cells)}")
    print(f"  Rings:         {stats.rings_expanded} (limit {stats.ring_limit})")
    print(f"  Cells tested:  {stats.cells_tested}")
    print(f"  Time:          {stats.elapsed_seconds * 1000:.1f} ms")

    if args.cells:
        print()
        for cell in sorted(result.cells):
            marker = " (center)" if cell == result.origin else ""
            print(f"  {cell}{marker}")

    print()
    print("-" * 60)
    misses = coverage_misses(enclosure, result.cells, args.samples)
    print(f"COVERAGE CHECK: {args.samples - misses}/{args.samples} sampled points covered")
    print("=" * 60)
    return 0 if misses == 0 else 2


if __name__ == "__main__":
    sys.exit(main())
