"""Table of supported calendar systems.

The registry is filled once at startup and frozen by the first lookup (or an
explicit `freeze()`); registering afterwards raises `RegistryFrozen`. Tests
build their own registry instead of touching the process-wide one.
"""

from __future__ import annotations

from .errors import RegistryFrozen
from .gregorian import GregorianConverter
from .lunar import LunarConverter
from .types import CalendarType, Converter


class CalendarRegistry:
    """Mapping `CalendarType -> Converter` with one-shot registration."""

    def __init__(self) -> None:
        self._converters: dict[CalendarType, Converter] = {}
        self._frozen = False

    def register(self, converter: Converter) -> None:
        """Install `converter` under its calendar type. Duplicates are rejected."""
        if self._frozen:
            raise RegistryFrozen(
                f"cannot register {converter.calendar_type!r}: registry already in use"
            )
        if converter.calendar_type in self._converters:
            raise RegistryFrozen(f"calendar type {converter.calendar_type!r} already registered")
        self._converters[converter.calendar_type] = converter

    def freeze(self) -> CalendarRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, calendar_type: CalendarType) -> Converter | None:
        self._frozen = True
        return self._converters.get(calendar_type)

    def is_supported(self, calendar_type: CalendarType) -> bool:
        return self.get(calendar_type) is not None

    def supported_types(self) -> frozenset[CalendarType]:
        self._frozen = True
        return frozenset(self._converters)


def build_default_registry() -> CalendarRegistry:
    """Registry with the Gregorian and lunar converters, already frozen."""
    registry = CalendarRegistry()
    registry.register(GregorianConverter())
    registry.register(LunarConverter())
    return registry.freeze()
