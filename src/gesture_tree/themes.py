"""
Themes Module - Named Color Palettes
====================================
Color themes for the particle scene. A theme drives every color drawn by
the point-set generator plus the topper star tint used by the renderer.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union


RGB = Tuple[int, int, int]
ChannelRange = Tuple[int, int]


@dataclass(frozen=True)
class ColorTheme:
    """
    A named palette for the canopy, ground and ornament groups.

    Attributes:
        key: Lookup name ('classic', 'traditional', ...)
        label: Display name shown in the HUD
        deep: Darkest canopy color (0-255)
        medium: Middle canopy color (0-255)
        light: Brightest canopy color (0-255)
        white: Whether highlight draws go to white/near-white
        ground_r: Red channel range for the ground rings
        ground_g: Green channel range for the ground rings
        ground_b: Blue channel, either a fixed level or a range
        star: Topper star color (0-255)
        ornament_brightness: Range for the ornament red/green channels
        accent: Optional accent color sprinkled through the canopy spiral
        accent_probability: Share of canopy spiral draws routed to the accent
        highlight_tint: Per-channel multipliers applied to spiral highlight
            brightness instead of plain gray
        fill_highlight_tint: Same for the canopy volume fill
    """
    key: str
    label: str
    deep: RGB
    medium: RGB
    light: RGB
    white: bool
    ground_r: ChannelRange
    ground_g: ChannelRange
    ground_b: Union[int, ChannelRange]
    star: RGB
    ornament_brightness: ChannelRange
    accent: Optional[RGB] = None
    accent_probability: float = 0.0
    highlight_tint: Optional[Tuple[float, float, float]] = None
    fill_highlight_tint: Optional[Tuple[float, float, float]] = None

    @property
    def ground_b_range(self) -> ChannelRange:
        """Blue channel as a (low, high) pair; a fixed level becomes (b, b)."""
        if isinstance(self.ground_b, tuple):
            return self.ground_b
        return (self.ground_b, self.ground_b)

    @property
    def ground_b_fixed(self) -> bool:
        return not isinstance(self.ground_b, tuple)

    def star_rgb(self) -> Tuple[float, float, float]:
        """Topper star color as floats in [0, 1]."""
        return tuple(c / 255.0 for c in self.star)

    def star_emissive_rgb(self) -> Tuple[float, float, float]:
        """Dimmed star color used for the glow pass."""
        return tuple(max(0, c - 50) / 255.0 for c in self.star)


class ThemePresets:
    """Predefined themes, in cycling order."""

    PRESETS: Dict[str, ColorTheme] = {
        'classic': ColorTheme(
            key='classic',
            label='Pink & White',
            deep=(255, 60, 180),
            medium=(255, 100, 190),
            light=(255, 160, 200),
            white=True,
            ground_r=(100, 150),
            ground_g=(150, 200),
            ground_b=255,
            star=(255, 220, 50),
            ornament_brightness=(215, 255),
        ),
        'traditional': ColorTheme(
            key='traditional',
            label='Christmas Green',
            deep=(0, 80, 0),
            medium=(34, 139, 34),
            light=(50, 150, 50),
            white=True,
            ground_r=(34, 80),
            ground_g=(80, 120),
            ground_b=(34, 60),
            star=(255, 215, 0),
            ornament_brightness=(200, 255),
            # Red berries instead of pure white highlights
            accent=(200, 20, 20),
            accent_probability=0.10,
            highlight_tint=(0.15, 1.0, 0.15),
            fill_highlight_tint=(0.2, 1.0, 0.2),
        ),
        'red': ColorTheme(
            key='red',
            label='Vermillion Red',
            deep=(220, 20, 60),
            medium=(255, 47, 0),
            light=(255, 99, 71),
            white=False,
            ground_r=(139, 200),
            ground_g=(0, 50),
            ground_b=(0, 30),
            star=(255, 215, 0),
            ornament_brightness=(255, 200),
        ),
        'blue': ColorTheme(
            key='blue',
            label='Ice Blue',
            deep=(0, 100, 255),
            medium=(50, 150, 255),
            light=(100, 200, 255),
            white=True,
            ground_r=(0, 50),
            ground_g=(50, 150),
            ground_b=255,
            star=(255, 255, 200),
            ornament_brightness=(150, 255),
        ),
        'purple': ColorTheme(
            key='purple',
            label='Purple Dream',
            deep=(138, 43, 226),
            medium=(147, 112, 219),
            light=(186, 85, 211),
            white=False,
            ground_r=(75, 150),
            ground_g=(0, 80),
            ground_b=(130, 255),
            star=(255, 215, 0),
            ornament_brightness=(180, 255),
        ),
    }

    DEFAULT = 'classic'

    @classmethod
    def get(cls, name: str) -> ColorTheme:
        """
        Get a theme by name.

        Raises:
            ValueError: If no theme has that name
        """
        try:
            return cls.PRESETS[name]
        except KeyError:
            raise ValueError(
                f"Unknown theme '{name}', expected one of {cls.get_all_names()}"
            ) from None

    @classmethod
    def get_all_names(cls) -> List[str]:
        """Get all theme names in cycling order."""
        return list(cls.PRESETS.keys())

    @classmethod
    def next_name(cls, name: str) -> str:
        """Name of the theme after `name`, wrapping around."""
        names = cls.get_all_names()
        idx = names.index(name) if name in names else -1
        return names[(idx + 1) % len(names)]
