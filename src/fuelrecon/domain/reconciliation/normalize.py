"""Name normalization for brands, cities and fuel types.

Responsibilities of this stage:
- map free-text brand and city spellings onto canonical names
- score how likely an official price area covers a station's city
- map fuel type spellings onto the canonical fuel type set

Nothing here raises on dirty input: empty or malformed strings normalize to
``""`` and score at the low end instead.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

if TYPE_CHECKING:
    from .vocabulary import AliasTable

log = logging.getLogger(__name__)

DIESEL: Final = "Diesel"
DIESEL_PLUS: Final = "Diesel Plus"
GASOLINE: Final = "Gasoline"
KEROSENE: Final = "Kerosene"
AUTO_LPG: Final = "Auto LPG"
KNOWN_RON_GRADES: Final = (100, 97, 95, 91)
CANONICAL_FUEL_TYPES: Final = (
    DIESEL,
    DIESEL_PLUS,
    *(f"{GASOLINE} (RON {grade})" for grade in sorted(KNOWN_RON_GRADES)),
    GASOLINE,
    KEROSENE,
    AUTO_LPG,
)

NO_AREA_MATCH: Final = 0.1

_RON_PATTERN = re.compile(r"ron\s*-?\s*(\d+)")
_NON_WORD = re.compile(r"[^\w]+")
# "QuezonCity": a lower-case letter run straight into a capitalised "City"
_CAMEL_CITY = re.compile(r"(?P<base>.*[a-z])City")
_JOINED_CITY = re.compile(r"(?P<base>.*\S)city", re.IGNORECASE)


def _clean(value: str | None) -> str:
    if not value:
        return ""
    return " ".join(value.split())


def _fold(value: str | None) -> str:
    """Comparison key: NFKC, case-folded, punctuation dropped, whitespace collapsed."""

    if not value:
        return ""
    normalized = unicodedata.normalize("NFKC", value).casefold()
    return " ".join(_NON_WORD.sub(" ", normalized).replace("_", " ").split())


def _title_preserving(value: str) -> str:
    """Upper-case each word's first letter, leaving the rest (e.g. acronyms) alone."""

    return " ".join(word[:1].upper() + word[1:] for word in value.split())


def normalize_fuel_type(raw: str | None) -> str:
    """Map a free-text fuel type onto the canonical fuel type set.

    Idempotent on canonical names. Unknown fuel types are returned title-cased.
    """

    text = _clean(raw)
    if not text:
        return ""
    key = text.casefold()

    ron = _RON_PATTERN.search(key)
    if ron is not None:
        digits = ron.group(1)
        grade = next(
            (known for known in KNOWN_RON_GRADES if digits.startswith(str(known))),
            int(digits),
        )
        return f"{GASOLINE} (RON {grade})"
    if "lpg" in key or "autogas" in key:
        return AUTO_LPG
    if "kerosene" in key:
        return KEROSENE
    if "diesel" in key:
        return DIESEL_PLUS if ("plus" in key or "premium" in key) else DIESEL
    if "gasoline" in key or "unleaded" in key:
        return GASOLINE
    return _title_preserving(text)


def fuel_type_group(canonical: str) -> str:
    """Leading token used to group fuel type variants (``"Gasoline (RON 95)"`` → ``gasoline``)."""

    words = canonical.split()
    return words[0].casefold() if words else ""


@dataclass(slots=True, frozen=True)
class _AliasIndex:
    exact: dict[str, str]
    # (folded alias, canonical), longest alias first
    by_length: tuple[tuple[str, str], ...]

    @classmethod
    def build(cls, *tables: AliasTable, extra: dict[str, str] | None = None) -> _AliasIndex:
        exact: dict[str, str] = {}
        for table in tables:
            for alias, canonical in table.pairs():
                exact.setdefault(_fold(alias), canonical)
        for alias, canonical in (extra or {}).items():
            exact.setdefault(_fold(alias), canonical)
        exact.pop("", None)
        ordered = sorted(exact.items(), key=lambda item: len(item[0]), reverse=True)
        return cls(exact=exact, by_length=tuple(ordered))

    def lookup(self, text: str) -> str | None:
        key = _fold(text)
        if not key:
            return None
        canonical = self.exact.get(key)
        if canonical is not None:
            return canonical
        padded = f" {key} "
        for alias, candidate in self.by_length:
            if f" {alias} " in padded:
                return candidate
        return None


@dataclass(slots=True, frozen=True)
class AreaCityPair:
    """Folded inputs shared by every area/city scoring strategy."""

    raw_area: str
    area: str
    city: str


type AreaCityStrategy = Callable[[Normalizer, AreaCityPair], float | None]


def exact_match(_normalizer: Normalizer, pair: AreaCityPair) -> float | None:
    return 1.0 if pair.area == pair.city else None


def city_in_area(normalizer: Normalizer, pair: AreaCityPair) -> float | None:
    members = normalizer.region_members(pair.area)
    return 0.9 if pair.city in members else None


def containment(_normalizer: Normalizer, pair: AreaCityPair) -> float | None:
    if f" {pair.area} " in f" {pair.city} " or f" {pair.city} " in f" {pair.area} ":
        return 0.8
    return None


def regional_alias(normalizer: Normalizer, pair: AreaCityPair) -> float | None:
    members = normalizer.region_members_mentioned(pair.raw_area)
    return 0.7 if pair.city in members else None


def shared_words(normalizer: Normalizer, pair: AreaCityPair) -> float | None:
    stopwords = normalizer.vocabulary.locality_stopwords
    area_words = {word for word in pair.area.split() if word not in stopwords}
    city_words = {word for word in pair.city.split() if word not in stopwords}
    shared = len(area_words & city_words)
    if shared == 0:
        return None
    return 0.5 + 0.2 * shared / max(len(area_words), len(city_words))


AREA_CITY_STRATEGIES: Final[tuple[AreaCityStrategy, ...]] = (
    exact_match,
    city_in_area,
    containment,
    regional_alias,
    shared_words,
)


@dataclass(slots=True, frozen=True)
class Normalizer:
    """Canonicalize names against an injected :class:`Vocabulary`."""

    vocabulary: Vocabulary = DEFAULT_VOCABULARY
    area_city_strategies: tuple[AreaCityStrategy, ...] = AREA_CITY_STRATEGIES
    _brands: _AliasIndex = field(init=False, repr=False)
    _cities: _AliasIndex = field(init=False, repr=False)
    _regions: dict[str, frozenset[str]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        region_names = {
            name: region.name for region in self.vocabulary.regions for name in region.names
        }
        object.__setattr__(self, "_brands", _AliasIndex.build(self.vocabulary.brands))
        object.__setattr__(
            self, "_cities", _AliasIndex.build(self.vocabulary.cities, extra=region_names)
        )
        regions: dict[str, frozenset[str]] = {}
        for region in self.vocabulary.regions:
            members = frozenset(_fold(self.normalize_city(city)) for city in region.cities)
            for name in region.names:
                regions[_fold(name)] = members
        object.__setattr__(self, "_regions", regions)

    # Brands ---------------------------------------------------------------

    def normalize_brand(self, raw: str | None) -> str:
        text = _clean(raw)
        if not text:
            return ""
        return self._brands.lookup(text) or _title_preserving(text)

    def is_known_brand(self, name: str) -> bool:
        return name in self.vocabulary.brands.canonical_names

    def brand_similarity(self, a: str | None, b: str | None) -> float:
        left = self.normalize_brand(a)
        right = self.normalize_brand(b)
        if not left or not right:
            return 0.0
        if _fold(left) == _fold(right):
            return 1.0
        if self.is_known_brand(left) and self.is_known_brand(right):
            return 0.0
        left_words = set(_fold(left).split())
        right_words = set(_fold(right).split())
        union = left_words | right_words
        if not union:
            return 0.0
        return len(left_words & right_words) / len(union)

    # Cities and areas -----------------------------------------------------

    def normalize_city(self, raw: str | None) -> str:
        text = self._repair_city_suffix(_clean(raw))
        if not text:
            return ""
        return self._cities.lookup(text) or _title_preserving(text)

    def _repair_city_suffix(self, value: str) -> str:
        """Split a "city" suffix glued to a CamelCase name or to a known city name."""

        camel = _CAMEL_CITY.fullmatch(value)
        if camel is not None:
            return f"{camel.group('base').strip()} City"
        joined = _JOINED_CITY.fullmatch(value)
        if joined is not None and self._cities.lookup(joined.group("base")) is not None:
            return f"{joined.group('base').strip()} City"
        return value

    def region_members(self, area: str) -> frozenset[str]:
        """Folded member cities when ``area`` (folded) names a region exactly."""

        return self._regions.get(area, frozenset())

    def region_members_mentioned(self, raw_area: str) -> frozenset[str]:
        """Folded member cities of every region named anywhere in ``raw_area`` (folded)."""

        padded = f" {raw_area} "
        members: set[str] = set()
        for name, cities in self._regions.items():
            if f" {name} " in padded:
                members |= cities
        return frozenset(members)

    def same_city(self, area: str | None, city: str | None) -> bool:
        """True when ``city`` is the area itself or one of the area's member cities."""

        area_key = _fold(self.normalize_city(area))
        city_key = _fold(self.normalize_city(city))
        if not area_key or not city_key:
            return False
        return area_key == city_key or city_key in self.region_members(area_key)

    def area_city_match_confidence(self, area: str | None, city: str | None) -> float:
        pair = AreaCityPair(
            raw_area=_fold(area),
            area=_fold(self.normalize_city(area)),
            city=_fold(self.normalize_city(city)),
        )
        if not pair.area or not pair.city:
            return NO_AREA_MATCH
        scores = [strategy(self, pair) for strategy in self.area_city_strategies]
        return max((score for score in scores if score is not None), default=NO_AREA_MATCH)

    # Fuel types -----------------------------------------------------------

    def normalize_fuel_type(self, raw: str | None) -> str:
        return normalize_fuel_type(raw)


__all__ = [
    "AREA_CITY_STRATEGIES",
    "AUTO_LPG",
    "CANONICAL_FUEL_TYPES",
    "DIESEL",
    "DIESEL_PLUS",
    "GASOLINE",
    "KEROSENE",
    "NO_AREA_MATCH",
    "AreaCityPair",
    "AreaCityStrategy",
    "Normalizer",
    "city_in_area",
    "containment",
    "exact_match",
    "fuel_type_group",
    "normalize_fuel_type",
    "regional_alias",
    "shared_words",
]
