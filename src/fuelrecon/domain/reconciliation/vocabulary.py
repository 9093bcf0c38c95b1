"""Canonical names and their aliases, passed into the normalizer as immutable data.

Tests and deployments for other markets substitute their own :class:`Vocabulary`;
nothing in this module is mutated at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(frozen=True, slots=True)
class AliasTable:
    """Canonical name → aliases. Canonical names implicitly alias themselves."""

    entries: Mapping[str, tuple[str, ...]]

    @classmethod
    def of(cls, entries: Mapping[str, Iterable[str]]) -> AliasTable:
        frozen = {canonical: tuple(aliases) for canonical, aliases in entries.items()}
        return cls(entries=MappingProxyType(frozen))

    @property
    def canonical_names(self) -> frozenset[str]:
        return frozenset(self.entries)

    def pairs(self) -> Iterable[tuple[str, str]]:
        """Yield ``(alias, canonical)`` including each canonical name itself."""

        for canonical, aliases in self.entries.items():
            yield canonical, canonical
            for alias in aliases:
                yield alias, canonical


@dataclass(frozen=True, slots=True)
class Region:
    """A named area that groups member cities (e.g. the capital region)."""

    name: str
    aliases: tuple[str, ...] = ()
    cities: tuple[str, ...] = ()

    @property
    def names(self) -> tuple[str, ...]:
        return (self.name, *self.aliases)


@dataclass(frozen=True, slots=True)
class Vocabulary:
    brands: AliasTable
    cities: AliasTable
    regions: tuple[Region, ...] = ()
    # words that carry no locality signal when comparing area and city names
    locality_stopwords: frozenset[str] = field(
        default_factory=lambda: frozenset({"city", "of", "the", "municipality"})
    )


_METRO_MANILA_CITIES = (
    "Quezon City",
    "Manila City",
    "Makati City",
    "Pasig City",
    "Taguig City",
    "Pasay City",
    "Caloocan City",
    "Parañaque City",
    "Mandaluyong City",
    "Las Piñas City",
    "Marikina City",
    "Muntinlupa City",
    "San Juan City",
    "Valenzuela City",
    "Navotas City",
    "Malabon City",
    "Pateros",
)

DEFAULT_VOCABULARY = Vocabulary(
    brands=AliasTable.of(
        {
            "Petron": ("Petron Corp", "Petron Corporation", "Petron Gas"),
            "Shell": ("Shell Pilipinas", "Shell Philippines", "Pilipinas Shell"),
            "Caltex": ("Chevron", "Caltex Philippines", "Chevron Philippines"),
            "Phoenix": ("Phoenix Petroleum", "Phoenix Fuels"),
            "Seaoil": ("Seaoil Philippines", "Sea Oil"),
            "Total": ("TotalEnergies", "Total Philippines"),
            "PTT": ("PTT Philippines", "PTT Oil"),
            "Unioil": ("Unioil Petroleum", "UNI Oil"),
            "Jetti": ("Jetti Petroleum", "Jetti Gas"),
            "Flying V": ("FlyingV",),
            "Petrotrade": ("Petro Trade",),
            "CleanFuel": ("Clean Fuel",),
            "Insular Oil": ("Insular",),
        }
    ),
    cities=AliasTable.of(
        {
            "Manila City": ("Manila", "City of Manila"),
            "Quezon City": ("QC",),
            "Makati City": ("Makati", "City of Makati"),
            "Taguig City": ("Taguig", "BGC", "Bonifacio Global City"),
            "Pasig City": ("Pasig",),
            "Pasay City": ("Pasay",),
            "Caloocan City": ("Caloocan", "North Caloocan", "South Caloocan"),
            "Parañaque City": ("Parañaque", "Paranaque City", "Paranaque"),
            "Mandaluyong City": ("Mandaluyong",),
            "Las Piñas City": ("Las Piñas", "Las Pinas City", "Las Pinas"),
            "Marikina City": ("Marikina",),
            "Muntinlupa City": ("Muntinlupa",),
            "San Juan City": ("San Juan",),
            "Valenzuela City": ("Valenzuela",),
            "Navotas City": ("Navotas",),
            "Malabon City": ("Malabon",),
        }
    ),
    regions=(
        Region(
            name="NCR",
            aliases=("Metro Manila", "National Capital Region"),
            cities=_METRO_MANILA_CITIES,
        ),
    ),
)


__all__ = ["DEFAULT_VOCABULARY", "AliasTable", "Region", "Vocabulary"]
