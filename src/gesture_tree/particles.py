"""
Particles Module - Point-Set Generation
=======================================
Procedural point clouds for the three particle groups of the scene:

- canopy: the conical tree, a 70% spiral of lights plus a 30% volume fill
- ground: concentric rings under the tree
- ornaments: a star field that folds into small floating hearts

Every particle carries its tree position, a scatter ("galaxy") position,
an optional heart position and a fixed color. Groups are stored column-wise
in numpy arrays so the interpolator can advance tens of thousands of
particles per frame.
"""

import numpy as np
from typing import Dict, Iterator, Optional, Tuple
from dataclasses import dataclass, field

from .themes import ColorTheme


Vec3 = Tuple[float, float, float]

TAU = 2.0 * np.pi

# Canopy shape
TREE_HEIGHT = 12.0
TREE_BASE_Y = 0.2
SPIRAL_TURNS = 9
SPIRAL_RADIUS = 3.2
FILL_RADIUS = 4.3
BRANCH_BANDS = 5.8
BRANCH_PHASE = 0.15
BRANCH_STRENGTH = 0.65

# Galaxy (scatter) shape
GALAXY_ARMS = 2
GALAXY_PLANE_Y = -2.0

# Heart shape
HEART_SCALE = 3.0
HEART_LIFT = 12.0
HEART_DEPTH = 2.0

# Ground rings
GROUND_RINGS = (4.6, 6.0, 7.4, 8.8, 10.2, 11.4)
GROUND_Y = -0.25
GROUND_CORE_SHARE = 0.85

# Ornament field
ORNAMENT_CLUSTERS = 15
ORNAMENT_SPREAD = 36.0
ORNAMENT_CLUSTER_SPREAD = 30.0

# Color jitter in 0-255 levels
COLOR_JITTER = 20


@dataclass(frozen=True)
class Particle:
    """
    Snapshot of one particle.

    Attributes:
        base_position: Resting tree position
        scatter_position: Galaxy position
        heart_position: Heart outline position, None when not part of the heart
        color: RGB floats in [0, 1]
        current_position: Position at the time of the snapshot
    """
    base_position: Vec3
    scatter_position: Vec3
    heart_position: Optional[Vec3]
    color: Tuple[float, float, float]
    current_position: Vec3


@dataclass
class ParticleGroup:
    """
    Fixed-length sequence of particles sharing generation parameters.

    Target arrays are read-only once the group is built; `current` is the
    only mutable array and starts as a copy of `base`.

    Attributes:
        name: Group name ('canopy', 'ground', 'ornaments')
        base: (N, 3) tree positions
        scatter: (N, 3) galaxy positions
        heart: (N, 3) heart positions, rows without a heart target are zero
        has_heart: (N,) mask of particles with a heart target
        colors: (N, 3) RGB floats in [0, 1]
        current: (N, 3) render-time positions
    """
    name: str
    base: np.ndarray
    scatter: np.ndarray
    heart: np.ndarray
    has_heart: np.ndarray
    colors: np.ndarray
    current: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        for arr in (self.base, self.scatter, self.heart, self.has_heart, self.colors):
            arr.setflags(write=False)
        self.current = self.base.copy()

    def __len__(self) -> int:
        return len(self.base)

    def __getitem__(self, idx: int) -> Particle:
        heart = tuple(self.heart[idx].tolist()) if self.has_heart[idx] else None
        return Particle(
            base_position=tuple(self.base[idx].tolist()),
            scatter_position=tuple(self.scatter[idx].tolist()),
            heart_position=heart,
            color=tuple(self.colors[idx].tolist()),
            current_position=tuple(self.current[idx].tolist()),
        )

    def __iter__(self) -> Iterator[Particle]:
        for idx in range(len(self)):
            yield self[idx]

    @property
    def heart_count(self) -> int:
        return int(np.count_nonzero(self.has_heart))


# ---------------------------------------------------------------------------
# Shape helpers
# ---------------------------------------------------------------------------

def heart_curve(t: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Classic parametric heart, roughly 32 units wide."""
    x = 16.0 * np.sin(t) ** 3
    y = 13.0 * np.cos(t) - 5.0 * np.cos(2 * t) - 2.0 * np.cos(3 * t) - np.cos(4 * t)
    return x, y


def branch_factor(h: np.ndarray) -> np.ndarray:
    """Radius multiplier producing the banded "branch" silhouette."""
    wave = np.maximum(0.0, np.sin((h * BRANCH_BANDS + BRANCH_PHASE) * TAU))
    return 1.0 + BRANCH_STRENGTH * wave


def _jitter(rng: np.random.Generator, n: int, width: float) -> np.ndarray:
    """Uniform noise in [-width/2, width/2)."""
    return (rng.random(n) - 0.5) * width


def _galaxy_arms(
    rng: np.random.Generator,
    distance: np.ndarray,
    tightness: float,
    angle_jitter: float,
    xz_jitter: float,
    y_jitter: float
) -> np.ndarray:
    """Place points on spiral arms lying in the galaxy plane."""
    n = len(distance)
    offset = rng.integers(0, GALAXY_ARMS, n) * (TAU / GALAXY_ARMS)
    arm_angle = offset + tightness * distance + _jitter(rng, n, angle_jitter)
    return np.column_stack([
        np.cos(arm_angle) * distance + _jitter(rng, n, xz_jitter),
        GALAXY_PLANE_Y + _jitter(rng, n, y_jitter),
        np.sin(arm_angle) * distance + _jitter(rng, n, xz_jitter),
    ])


def _heart_targets(rng: np.random.Generator, n: int) -> np.ndarray:
    """Random points on the big heart floating above the tree."""
    t = rng.random(n) * TAU
    hx, hy = heart_curve(t)
    return np.column_stack([
        HEART_SCALE * hx / 16.0,
        HEART_SCALE * hy / 16.0 + HEART_LIFT,
        _jitter(rng, n, HEART_DEPTH),
    ])


def _empty(n: int = 0) -> np.ndarray:
    return np.zeros((n, 3), dtype=np.float64)


# ---------------------------------------------------------------------------
# Color policy
# ---------------------------------------------------------------------------

def _jittered(rng: np.random.Generator, n: int, base) -> np.ndarray:
    """Palette entry with green/blue shimmer."""
    return np.column_stack([
        np.full(n, float(base[0])),
        base[1] + rng.random(n) * COLOR_JITTER,
        base[2] + rng.random(n) * COLOR_JITTER,
    ])


def _canopy_colors(
    rng: np.random.Generator,
    n: int,
    theme: ColorTheme,
    thresholds: Tuple[float, float, float],
    tint: Optional[Tuple[float, float, float]],
    tinted_range: Tuple[int, int],
    lift: int,
    use_accent: bool
) -> np.ndarray:
    """
    Pick canopy colors piecewise from one uniform draw per particle.

    Args:
        thresholds: Upper bounds of the deep / medium / light bands
        tint: Per-channel highlight multipliers, None for white highlights
        tinted_range: Brightness range for tinted highlights
        lift: Levels added to the light color when the theme has no white
        use_accent: Whether the theme accent may replace part of the draws
    """
    u = rng.random(n)

    if theme.white:
        if tint is not None:
            lo, hi = tinted_range
            scale = np.asarray(tint, dtype=np.float64)
        else:
            lo, hi = 205, 255
            scale = np.ones(3)
        brightness = np.floor(rng.random(n) * (hi - lo) + lo)
        highlight = brightness[:, None] * scale[None, :]
    else:
        highlight = np.tile(np.asarray(theme.light, dtype=np.float64) + lift, (n, 1))

    conditions = [u < thresholds[0], u < thresholds[1], u < thresholds[2]]
    choices = [
        _jittered(rng, n, theme.deep),
        _jittered(rng, n, theme.medium),
        _jittered(rng, n, theme.light),
    ]
    if use_accent and theme.accent is not None:
        conditions.insert(0, u < theme.accent_probability)
        choices.insert(0, np.tile(np.asarray(theme.accent, dtype=np.float64), (n, 1)))

    colors = np.select([c[:, None] for c in conditions], choices, default=highlight)
    return np.clip(colors / 255.0, 0.0, 1.0)


def _ground_colors(rng: np.random.Generator, n: int, theme: ColorTheme) -> np.ndarray:
    r_lo, r_hi = theme.ground_r
    g_lo, g_hi = theme.ground_g
    b_lo, b_hi = theme.ground_b_range
    u = rng.random(n)

    # Full channel ranges
    full_b = np.full(n, float(b_lo)) if theme.ground_b_fixed else \
        np.floor(rng.random(n) * (b_hi - b_lo) + b_lo)
    full = np.column_stack([
        np.floor(rng.random(n) * (r_hi - r_lo) + r_lo),
        np.floor(rng.random(n) * (g_hi - g_lo) + g_lo),
        full_b,
    ])
    # Dark end of the range
    low = np.column_stack([
        np.floor(rng.random(n) * 30 + r_lo),
        np.floor(rng.random(n) * 40 + g_lo),
        np.full(n, float(b_hi)),
    ])
    # Bright end, capped so the rings never blow out
    high = np.column_stack([
        np.floor(rng.random(n) * 30 + min(150, r_hi)),
        np.floor(rng.random(n) * 30 + min(200, g_hi)),
        np.full(n, float(b_hi)),
    ])

    colors = np.select([(u < 0.3)[:, None], (u < 0.6)[:, None]], [full, low], default=high)
    return np.clip(colors / 255.0, 0.0, 1.0)


# ---------------------------------------------------------------------------
# Group generators
# ---------------------------------------------------------------------------

def generate_canopy(
    theme: ColorTheme,
    count: int,
    rng: Optional[np.random.Generator] = None,
    height: float = TREE_HEIGHT
) -> ParticleGroup:
    """
    Generate the tree canopy.

    The first 70% of the particles trace a nine-turn spiral of lights and have
    no heart target. The remaining 30% fill the cone volume and form the big
    heart in HEART mode.

    Args:
        theme: Active color theme
        count: Total number of particles
        rng: Random source, a fresh unseeded generator if omitted
        height: Tree height in scene units

    Returns:
        ParticleGroup named 'canopy'
    """
    rng = rng if rng is not None else np.random.default_rng()
    n_spiral = count * 7 // 10
    n_fill = count - n_spiral

    # --- Spiral lights ---
    u = rng.random(n_spiral)
    h = u ** 1.6
    y = height * h + TREE_BASE_Y
    base_r = (1.0 - h) ** 1.1 * SPIRAL_RADIUS * branch_factor(h)
    angle = u * SPIRAL_TURNS * TAU + _jitter(rng, n_spiral, 0.44)
    r = base_r * (0.85 + rng.random(n_spiral) * 0.23)
    spiral_base = np.column_stack([np.cos(angle) * r, y, np.sin(angle) * r])

    distance = 2.0 + rng.random(n_spiral) * 12.0
    spiral_scatter = _galaxy_arms(rng, distance, 0.5, 0.4, 1.0, 0.4)
    spiral_colors = _canopy_colors(
        rng, n_spiral, theme, (0.15, 0.30, 0.45), theme.highlight_tint, (60, 85), 30,
        use_accent=True,
    )

    # --- Volume fill ---
    h = rng.random(n_fill) ** 1.9
    y = height * h + TREE_BASE_Y + _jitter(rng, n_fill, 0.16)
    base_r = (1.0 - h) ** 1.1 * FILL_RADIUS * branch_factor(h)
    # sqrt keeps the disk area uniformly covered
    r = base_r * np.sqrt(rng.random(n_fill))
    angle = rng.random(n_fill) * TAU
    fill_base = np.column_stack([
        np.cos(angle) * r + _jitter(rng, n_fill, 0.16),
        y,
        np.sin(angle) * r + _jitter(rng, n_fill, 0.16),
    ])

    inner = rng.random(n_fill) < 0.5
    distance = np.where(
        inner,
        0.3 + rng.random(n_fill) * 3.0,
        3.0 + rng.random(n_fill) * 8.0,
    )
    fill_scatter = _galaxy_arms(rng, distance, 2.5, 0.1, 0.15, 0.12)
    fill_heart = _heart_targets(rng, n_fill)
    fill_colors = _canopy_colors(
        rng, n_fill, theme, (0.25, 0.50, 0.75), theme.fill_highlight_tint, (100, 130), 40,
        use_accent=False,
    )

    return ParticleGroup(
        name='canopy',
        base=np.concatenate([spiral_base, fill_base]),
        scatter=np.concatenate([spiral_scatter, fill_scatter]),
        heart=np.concatenate([_empty(n_spiral), fill_heart]),
        has_heart=np.concatenate([np.zeros(n_spiral, bool), np.ones(n_fill, bool)]),
        colors=np.concatenate([spiral_colors, fill_colors]),
    )


def generate_ground(
    theme: ColorTheme,
    count: int,
    rng: Optional[np.random.Generator] = None
) -> ParticleGroup:
    """Generate the ground rings; they collapse into a bright galaxy core."""
    rng = rng if rng is not None else np.random.default_rng()
    n = count

    rings = np.asarray(GROUND_RINGS)[rng.integers(0, len(GROUND_RINGS), n)]
    r = rings + _jitter(rng, n, 0.6)
    theta = rng.random(n) * TAU
    base = np.column_stack([np.cos(theta) * r, np.full(n, GROUND_Y), np.sin(theta) * r])

    # Dense core
    r_core = rng.random(n) * rng.random(n) * 2.0
    theta_core = rng.random(n) * TAU
    core = np.column_stack([
        np.cos(theta_core) * r_core,
        GALAXY_PLANE_Y + _jitter(rng, n, 0.2),
        np.sin(theta_core) * r_core,
    ])
    # Sparse arms
    distance = 1.5 + rng.random(n) * 9.0
    arms = _galaxy_arms(rng, distance, 2.3, 0.1, 0.2, 0.15)

    in_core = rng.random(n) < GROUND_CORE_SHARE
    scatter = np.where(in_core[:, None], core, arms)

    return ParticleGroup(
        name='ground',
        base=base,
        scatter=scatter,
        heart=_heart_targets(rng, n),
        has_heart=np.ones(n, bool),
        colors=_ground_colors(rng, n, theme),
    )


def generate_ornaments(
    theme: ColorTheme,
    count: int,
    rng: Optional[np.random.Generator] = None,
    clusters: int = ORNAMENT_CLUSTERS
) -> ParticleGroup:
    """
    Generate the ornament star field.

    Ornaments keep their position in SCATTER mode so the scene never empties.
    In HEART mode they fold into `clusters` small hearts, each with its own
    random center and size. Any remainder of count / clusters goes to the
    first clusters so the group size is exactly `count`.
    """
    rng = rng if rng is not None else np.random.default_rng()
    n = count

    base = np.column_stack([
        _jitter(rng, n, ORNAMENT_SPREAD),
        3.0 + rng.random(n) * 15.0,
        _jitter(rng, n, ORNAMENT_SPREAD),
    ])

    sizes = np.full(clusters, n // clusters)
    sizes[:n % clusters] += 1
    starts = np.cumsum(sizes) - sizes

    centers = np.column_stack([
        _jitter(rng, clusters, ORNAMENT_CLUSTER_SPREAD),
        5.0 + rng.random(clusters) * 10.0,
        _jitter(rng, clusters, ORNAMENT_CLUSTER_SPREAD),
    ])
    scales = 0.5 + rng.random(clusters) * 0.5

    # Evenly spaced along each cluster's outline
    cluster_of = np.repeat(np.arange(clusters), sizes)
    slot = np.arange(n) - starts[cluster_of]
    t = slot / np.maximum(sizes[cluster_of], 1) * TAU
    hx, hy = heart_curve(t)
    scale = scales[cluster_of]
    heart = np.column_stack([scale * hx / 16.0, scale * hy / 16.0, np.zeros(n)])
    heart += centers[cluster_of]

    lo, hi = theme.ornament_brightness
    level = np.floor(rng.random(n) * (hi - lo) + lo)
    colors = np.column_stack([level, level, np.full(n, 255.0)]) / 255.0

    return ParticleGroup(
        name='ornaments',
        base=base,
        scatter=base.copy(),
        heart=heart,
        has_heart=np.ones(n, bool),
        colors=np.clip(colors, 0.0, 1.0),
    )


def generate_groups(
    theme: ColorTheme,
    tree_points: int,
    ground_points: int,
    star_points: int,
    rng: Optional[np.random.Generator] = None,
    height: float = TREE_HEIGHT
) -> Dict[str, ParticleGroup]:
    """
    Generate all three particle groups from one random source.

    Returns:
        Dict with 'canopy', 'ground' and 'ornaments' groups, in draw order
    """
    rng = rng if rng is not None else np.random.default_rng()
    return {
        'canopy': generate_canopy(theme, tree_points, rng, height=height),
        'ground': generate_ground(theme, ground_points, rng),
        'ornaments': generate_ornaments(theme, star_points, rng),
    }
