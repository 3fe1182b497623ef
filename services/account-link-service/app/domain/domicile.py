"""Supported account domiciles and the process-wide account defaults."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from zoneinfo import ZoneInfo

from ..config import get_settings

DEFAULT_ZONE = "Europe/Paris"


class Domicile(str, Enum):
    """ISO 3166 alpha-2 codes of the domiciles the platform operates in."""

    SK = "SK"
    CZ = "CZ"

    @property
    def locale(self) -> str:
        """Return the default ISO 639 language of the domicile."""
        return _DOMICILE_LANGUAGES[self]

    @classmethod
    def parse(cls, code: str) -> "Domicile":
        """Return the domicile for ``code`` (case-insensitive).

        Raises
        ------
        ValueError
            When ``code`` is none of the supported domiciles.
        """
        try:
            return cls(code.strip().upper())
        except ValueError as exc:
            raise ValueError(f"unsupported domicile: {code!r}") from exc


_DOMICILE_LANGUAGES: dict[Domicile, str] = {
    Domicile.SK: "sk",
    Domicile.CZ: "cs",
}


@dataclass(frozen=True, slots=True)
class AccountDefaults:
    """Fallback values applied when a local account has no value of its own."""

    domicile: Domicile
    locale: str
    zone: str = DEFAULT_ZONE


@lru_cache(maxsize=1)
def get_account_defaults() -> AccountDefaults:
    """Resolve the account defaults once from settings."""
    settings = get_settings()
    domicile = Domicile.parse(settings.default_domicile)
    zone = settings.default_zone or DEFAULT_ZONE
    # fail at startup rather than on the first request
    ZoneInfo(zone)
    return AccountDefaults(
        domicile=domicile,
        locale=settings.default_locale or domicile.locale,
        zone=zone,
    )
