import numpy as np
import pytest

from gesture_tree.particles import (
    GALAXY_PLANE_Y,
    GROUND_RINGS,
    GROUND_Y,
    ORNAMENT_CLUSTERS,
    TREE_BASE_Y,
    TREE_HEIGHT,
    generate_canopy,
    generate_groups,
    generate_ground,
    generate_ornaments,
)
from gesture_tree.themes import ThemePresets


def test_canopy_split_between_spiral_and_fill(classic, rng):
    canopy = generate_canopy(classic, 50000, rng)
    assert len(canopy) == 50000
    assert canopy.heart_count == 15000
    assert not canopy.has_heart[:35000].any()
    assert canopy.has_heart[35000:].all()
    assert canopy[0].heart_position is None
    assert canopy[49999].heart_position is not None


def test_group_starts_at_base_with_read_only_targets(classic, rng):
    canopy = generate_canopy(classic, 1000, rng)
    np.testing.assert_array_equal(canopy.current, canopy.base)
    assert not np.shares_memory(canopy.current, canopy.base)
    assert canopy.current.flags.writeable
    for arr in (canopy.base, canopy.scatter, canopy.heart, canopy.has_heart, canopy.colors):
        assert not arr.flags.writeable
    with pytest.raises(ValueError):
        canopy.base[0, 0] = 1.0


@pytest.mark.parametrize("generator", [generate_canopy, generate_ground, generate_ornaments])
def test_zero_count_gives_empty_group(generator, classic, rng):
    group = generator(classic, 0, rng)
    assert len(group) == 0
    assert group.base.shape == (0, 3)
    assert group.current.shape == (0, 3)
    assert list(group) == []


@pytest.mark.parametrize("theme_name", ThemePresets.get_all_names())
def test_colors_in_unit_range(theme_name, rng):
    groups = generate_groups(ThemePresets.get(theme_name), 3000, 500, 200, rng)
    for group in groups.values():
        assert group.colors.shape == (len(group), 3)
        assert group.colors.min() >= 0.0
        assert group.colors.max() <= 1.0


def test_same_seed_same_layout(classic):
    a = generate_groups(classic, 2000, 300, 100, np.random.default_rng(99))
    b = generate_groups(classic, 2000, 300, 100, np.random.default_rng(99))
    c = generate_groups(classic, 2000, 300, 100, np.random.default_rng(100))
    for name in a:
        np.testing.assert_array_equal(a[name].base, b[name].base)
        np.testing.assert_array_equal(a[name].colors, b[name].colors)
    assert not np.array_equal(a['canopy'].base, c['canopy'].base)


def test_canopy_shape(classic, rng):
    canopy = generate_canopy(classic, 20000, rng)
    spiral = canopy.base[:14000]
    fill = canopy.base[14000:]
    top = TREE_BASE_Y + TREE_HEIGHT

    assert spiral[:, 1].min() >= TREE_BASE_Y
    assert spiral[:, 1].max() <= top
    assert fill[:, 1].min() >= TREE_BASE_Y - 0.08
    assert fill[:, 1].max() <= top + 0.08

    # Radius shrinks toward the apex
    radius = np.hypot(spiral[:, 0], spiral[:, 2])
    low = radius[spiral[:, 1] < TREE_BASE_Y + 2.0].mean()
    high = radius[spiral[:, 1] > top - 2.0].mean()
    assert high < low

    # Galaxy lies flat
    assert np.all(np.abs(canopy.scatter[:, 1] - GALAXY_PLANE_Y) <= 0.2 + 1e-9)

    # Big heart floats above the tree
    heart_y = canopy.heart[canopy.has_heart, 1]
    assert heart_y.min() > 8.5
    assert heart_y.max() < 14.5


def test_canopy_height_parameter(classic, rng):
    canopy = generate_canopy(classic, 2000, rng, height=6.0)
    assert canopy.base[:1400, 1].max() <= TREE_BASE_Y + 6.0


def test_ground_rings(classic, rng):
    ground = generate_ground(classic, 3000, rng)
    assert np.all(ground.base[:, 1] == GROUND_Y)
    radius = np.hypot(ground.base[:, 0], ground.base[:, 2])
    nearest = np.min(np.abs(radius[:, None] - np.asarray(GROUND_RINGS)[None, :]), axis=1)
    assert nearest.max() <= 0.3 + 1e-9
    assert ground.has_heart.all()
    assert np.all(np.abs(ground.scatter[:, 1] - GALAXY_PLANE_Y) <= 0.2 + 1e-9)


@pytest.mark.parametrize("count", [1207, 15, 7])
def test_ornament_count_is_exact(count, classic, rng):
    ornaments = generate_ornaments(classic, count, rng)
    assert len(ornaments) == count
    assert ornaments.heart.shape == (count, 3)
    assert ornaments.has_heart.all()


def test_ornaments_hold_position_when_scattered(classic, rng):
    ornaments = generate_ornaments(classic, 600, rng)
    np.testing.assert_array_equal(ornaments.scatter, ornaments.base)


def test_ornaments_fold_into_cluster_hearts(classic, rng):
    ornaments = generate_ornaments(classic, 600, rng)
    # Each small heart lies in its own z plane
    assert len(np.unique(ornaments.heart[:, 2])) == ORNAMENT_CLUSTERS


def test_ornament_colors_are_blue_white(classic, rng):
    ornaments = generate_ornaments(classic, 500, rng)
    np.testing.assert_allclose(ornaments.colors[:, 2], 1.0)
    np.testing.assert_array_equal(ornaments.colors[:, 0], ornaments.colors[:, 1])
    assert ornaments.colors[:, 0].min() >= 215 / 255.0


def test_traditional_theme_sprinkles_accent(rng):
    theme = ThemePresets.get('traditional')
    canopy = generate_canopy(theme, 20000, rng)
    accent = np.asarray(theme.accent) / 255.0
    spiral_hits = np.all(np.isclose(canopy.colors[:14000], accent), axis=1)
    fill_hits = np.all(np.isclose(canopy.colors[14000:], accent), axis=1)
    assert 0.08 < spiral_hits.mean() < 0.12
    assert not fill_hits.any()


def test_particle_snapshot(classic, rng):
    ornaments = generate_ornaments(classic, 30, rng)
    p = ornaments[3]
    assert p.base_position == tuple(ornaments.base[3])
    assert p.current_position == p.base_position
    assert p.heart_position == tuple(ornaments.heart[3])
    assert len(list(ornaments)) == 30


def test_traditional_fill_highlights_use_own_tint(rng):
    theme = ThemePresets.get('traditional')
    canopy = generate_canopy(theme, 20000, rng)
    spiral, fill = canopy.colors[:14000], canopy.colors[14000:]

    def tinted(colors, factor):
        green = colors[:, 1]
        return np.isclose(colors[:, 0], factor * green) & np.isclose(colors[:, 2], factor * green)

    assert 0.2 < tinted(fill, 0.2).mean() < 0.3
    assert not tinted(fill, 0.15).any()
    assert tinted(spiral, 0.15).mean() > 0.4
    assert not tinted(spiral, 0.2).any()
