import pytest

from gesture_tree.config import SceneConfig
from gesture_tree.themes import ThemePresets


def test_defaults():
    config = SceneConfig()
    assert (config.tree_points, config.ground_points, config.star_points) == (50000, 4000, 1200)
    assert config.morph_rate == 2.0
    assert config.theme == ThemePresets.DEFAULT
    assert config.seed is None


def test_from_env_reads_overrides():
    config = SceneConfig.from_env({
        'GESTURE_TREE_POINTS': '1000',
        'GESTURE_GROUND_POINTS': '200',
        'GESTURE_STAR_POINTS': '50',
        'GESTURE_TREE_THEME': 'purple',
        'GESTURE_TREE_SEED': '42',
    })
    assert config.tree_points == 1000
    assert config.ground_points == 200
    assert config.star_points == 50
    assert config.theme == 'purple'
    assert config.seed == 42


def test_from_env_empty_values_use_defaults():
    config = SceneConfig.from_env({'GESTURE_TREE_POINTS': '  ', 'GESTURE_TREE_SEED': ''})
    assert config.tree_points == 50000
    assert config.seed is None


def test_from_env_rejects_malformed_numbers():
    with pytest.raises(ValueError, match="GESTURE_TREE_POINTS"):
        SceneConfig.from_env({'GESTURE_TREE_POINTS': 'lots'})


def test_from_env_unknown_theme_falls_back(capsys):
    config = SceneConfig.from_env({'GESTURE_TREE_THEME': 'neon'})
    assert config.theme == ThemePresets.DEFAULT
    assert "[WARNING] Unknown theme 'neon'" in capsys.readouterr().out


def test_from_env_reads_process_environment(monkeypatch):
    monkeypatch.setenv('GESTURE_STAR_POINTS', '77')
    assert SceneConfig.from_env().star_points == 77


@pytest.mark.parametrize("field", ['tree_points', 'ground_points', 'star_points'])
def test_negative_counts_rejected(field):
    with pytest.raises(ValueError, match=field):
        SceneConfig(**{field: -1})


def test_zero_counts_allowed():
    config = SceneConfig(tree_points=0, ground_points=0, star_points=0)
    assert config.tree_points == 0


def test_negative_rate_rejected():
    with pytest.raises(ValueError):
        SceneConfig(morph_rate=-1.0)


def test_unknown_theme_rejected():
    with pytest.raises(ValueError, match="Unknown theme"):
        SceneConfig(theme='neon')
