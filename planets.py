"""Planets that can rule a Vimshottari period."""

from __future__ import annotations

from enum import Enum


class Planet(Enum):
    """Closed set of dasha lords with their display metadata."""

    SUN = ("su", "Sun", "\u2609", "#E25822")
    MOON = ("mo", "Moon", "\u263D", "#D3D3D3")
    MERCURY = ("me", "Mercury", "\u263F", "#00A36C")
    VENUS = ("ve", "Venus", "\u2640", "#BF40BF")
    MARS = ("ma", "Mars", "\u2642", "#FF0000")
    JUPITER = ("ju", "Jupiter", "\u2643", "#FFD700")
    SATURN = ("sa", "Saturn", "\u2644", "#696969")
    RAHU = ("ra", "Rahu", "\u260A", "#ADD8E6")
    KETU = ("ke", "Ketu", "\u260B", "#CD7F32")

    def __init__(self, ident: str, display_name: str, symbol: str, color: str) -> None:
        self.ident = ident
        self.display_name = display_name
        self.symbol = symbol
        self.color = color

    @property
    def abbreviation(self) -> str:
        return self.ident.capitalize()

    def __str__(self) -> str:
        return self.display_name

    @classmethod
    def parse(cls, name: "str | Planet") -> "Planet":
        """Resolve a planet from its name (any case) or two-letter id."""

        if isinstance(name, Planet):
            return name
        key = str(name).strip()
        if key.upper() in cls.__members__:
            return cls[key.upper()]
        for planet in cls:
            if planet.ident == key.lower():
                return planet
        raise ValueError(f"Unknown planet: {name!r}")
