"""Zhang-Suen skeletonization and skeleton path extraction.

Thinning repeatedly peels boundary pixels off every foreground region in two
alternating sub-iterations until no pixel can be removed. A pixel P1 with
neighbours::

    P9 P2 P3
    P8 P1 P4
    P7 P6 P5

is removed when 2 <= B(P1) <= 6, A(P1) == 1 and

- sub-iteration 1: P2*P4*P6 == 0 and P4*P6*P8 == 0
- sub-iteration 2: P2*P4*P8 == 0 and P2*P6*P8 == 0

where B counts foreground neighbours and A counts 0->1 transitions in the
circular sequence P2..P9. Removals are decided on a snapshot and applied
together, so each sub-iteration behaves like a parallel pass. The result is
a one-pixel-wide skeleton with the same connected components as the input.

Reference: Zhang, T.Y. and Suen, C.Y. (1984), "A fast parallel algorithm for
thinning digital patterns", Communications of the ACM 27(3).
"""

from collections import deque

from signcraft.domain import BinaryRaster, Path, Point2D, Skeleton

DEFAULT_MAX_ITERATIONS = 1000

# Clockwise from north: P2, P3, P4, P5, P6, P7, P8, P9
_RING: tuple[tuple[int, int], ...] = (
    (0, -1), (1, -1), (1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1),
)

# Cardinal directions are tried before diagonals when walking a skeleton
_WALK_ORDER: tuple[tuple[int, int], ...] = (
    (0, -1), (1, 0), (0, 1), (-1, 0),
    (1, -1), (1, 1), (-1, 1), (-1, -1),
)


def thin(raster: BinaryRaster, max_iterations: int = DEFAULT_MAX_ITERATIONS) -> Skeleton:
    """Thin a binary raster to its Zhang-Suen skeleton.

    Border pixels are never removed. The input raster is not modified.

    Args:
        raster: Binary input image
        max_iterations: Safety cap on full (two sub-iteration) passes

    Returns:
        Skeleton raster of identical dimensions
    """
    skeleton = raster.copy()
    if skeleton.width < 3 or skeleton.height < 3:
        return skeleton

    for _ in range(max(0, max_iterations)):
        removed = _remove_pixels(skeleton, _removable_pixels(skeleton, phase=1))
        removed += _remove_pixels(skeleton, _removable_pixels(skeleton, phase=2))
        if removed == 0:
            break

    return skeleton


def _removable_pixels(raster: BinaryRaster, phase: int) -> list[int]:
    width = raster.width
    data = raster.data
    to_remove: list[int] = []

    for y in range(1, raster.height - 1):
        row = y * width
        for x in range(1, width - 1):
            idx = row + x
            if not data[idx]:
                continue

            p2 = data[idx - width]
            p3 = data[idx - width + 1]
            p4 = data[idx + 1]
            p5 = data[idx + width + 1]
            p6 = data[idx + width]
            p7 = data[idx + width - 1]
            p8 = data[idx - 1]
            p9 = data[idx - width - 1]

            b = p2 + p3 + p4 + p5 + p6 + p7 + p8 + p9
            if b < 2 or b > 6:
                continue

            if transitions((p2, p3, p4, p5, p6, p7, p8, p9)) != 1:
                continue

            if phase == 1:
                if p2 * p4 * p6 or p4 * p6 * p8:
                    continue
            elif p2 * p4 * p8 or p2 * p6 * p8:
                continue

            to_remove.append(idx)

    return to_remove


def _remove_pixels(raster: BinaryRaster, indices: list[int]) -> int:
    for idx in indices:
        raster.data[idx] = 0
    return len(indices)


def transitions(neighbors: tuple[int, ...]) -> int:
    """Count 0 -> 1 transitions in a circular neighbour sequence."""
    n = len(neighbors)
    return sum(
        1 for i in range(n) if neighbors[i] == 0 and neighbors[(i + 1) % n] == 1
    )


def neighbor_count(raster: BinaryRaster, x: int, y: int) -> int:
    """Number of 8-connected foreground neighbours of (x, y)."""
    return sum(raster.get(x + dx, y + dy) for dx, dy in _RING)


def count_components(raster: BinaryRaster) -> int:
    """Number of 8-connected foreground components.

    Args:
        raster: Binary image

    Returns:
        Component count (0 for an empty raster)
    """
    width = raster.width
    seen = bytearray(len(raster.data))
    components = 0

    for start, value in enumerate(raster.data):
        if not value or seen[start]:
            continue
        components += 1
        seen[start] = 1
        queue = deque([start])
        while queue:
            idx = queue.popleft()
            x, y = idx % width, idx // width
            for dx, dy in _RING:
                nx, ny = x + dx, y + dy
                if raster.get(nx, ny):
                    nidx = ny * width + nx
                    if not seen[nidx]:
                        seen[nidx] = 1
                        queue.append(nidx)

    return components


def extract_skeleton_paths(skeleton: Skeleton, min_length: int = 2) -> list[Path]:
    """Walk skeleton pixels into ordered point chains.

    Chains are seeded from endpoints (one neighbour) first, then outward from
    every branch point (three or more neighbours), and finally from any pixel
    still unvisited, which only happens on pure loops. A chain stops when it
    reaches a branch point, so each branch of a junction becomes its own
    chain that starts or ends on the shared junction pixel.

    Args:
        skeleton: One-pixel-wide skeleton raster
        min_length: Chains with fewer points are dropped

    Returns:
        Paths in pixel coordinates
    """
    width = skeleton.width
    visited = bytearray(len(skeleton.data))
    counts = {
        (x, y): neighbor_count(skeleton, x, y) for x, y in skeleton.foreground()
    }
    endpoints = [p for p, c in counts.items() if c == 1]
    branches = [p for p, c in counts.items() if c >= 3]
    paths: list[Path] = []

    def is_branch(p: tuple[int, int]) -> bool:
        return counts.get(p, 0) >= 3

    def keep(chain: list[tuple[int, int]], closed: bool = False) -> None:
        if len(chain) >= min_length:
            points = [Point2D(float(x), float(y)) for x, y in chain]
            if closed:
                points.append(points[0])
            paths.append(Path(points=points, closed=closed))

    for start in endpoints:
        if not visited[start[1] * width + start[0]]:
            keep(_walk(skeleton, visited, [start], is_branch))

    for branch in branches:
        visited[branch[1] * width + branch[0]] = 1
        bx, by = branch
        for dx, dy in _WALK_ORDER:
            neighbor = (bx + dx, by + dy)
            if skeleton.get(*neighbor) and not visited[neighbor[1] * width + neighbor[0]]:
                keep(_walk(skeleton, visited, [branch, neighbor], is_branch))

    for x, y in skeleton.foreground():
        if not visited[y * width + x]:
            chain = _walk(skeleton, visited, [(x, y)], is_branch)
            tail = chain[-1]
            closed = len(chain) > 2 and max(abs(tail[0] - x), abs(tail[1] - y)) == 1
            keep(chain, closed=closed)

    return paths


def _walk(skeleton: Skeleton, visited: bytearray, chain: list[tuple[int, int]],
          is_branch) -> list[tuple[int, int]]:
    width = skeleton.width
    for x, y in chain:
        visited[y * width + x] = 1

    while True:
        cx, cy = chain[-1]
        if len(chain) > 1 and is_branch((cx, cy)):
            break

        best: tuple[int, int] | None = None
        best_score = float("inf")
        for dx, dy in _WALK_ORDER:
            nx, ny = cx + dx, cy + dy
            if not skeleton.get(nx, ny) or visited[ny * width + nx]:
                continue
            if len(chain) < 2:
                best = (nx, ny)
                break
            # Prefer continuing in the current direction
            px, py = chain[-2]
            dot = dx * (cx - px) + dy * (cy - py)
            score = (dx * dx + dy * dy) ** 0.5 - dot * 0.5
            if score < best_score:
                best_score = score
                best = (nx, ny)

        if best is None:
            # Finish on an adjacent junction that another chain already owns
            for dx, dy in _WALK_ORDER:
                junction = (cx + dx, cy + dy)
                if is_branch(junction) and junction not in chain[-3:]:
                    chain.append(junction)
                    break
            break

        visited[best[1] * width + best[0]] = 1
        chain.append(best)

    return chain
