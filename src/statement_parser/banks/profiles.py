"""
Bank profile registry.

A BankProfile bundles the layout rules of one institution: how its
transaction table header looks, where its statement balances are printed,
which date formats its rows use and which keywords identify it.

The registry is built once and never mutated. Extra profiles from a YAML
file produce a NEW registry (see ``with_profiles`` / ``load_registry``).

YAML format::

    banks:
      - code: TANGERINE
        transaction_headers:
          - 'Date\\s+Description\\s+Amount\\s+Balance'
        balance_patterns:
          - 'Opening Balance.*?(-?\\$?\\d[\\d,]*\\.\\d{2})'
          - 'Closing Balance.*?(-?\\$?\\d[\\d,]*\\.\\d{2})'
        date_formats: ['YYYY-MM-DD']
        institution_keywords: ['Tangerine']
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Optional

import yaml

from ..extractors.dates import BANK_DATE_FORMATS

logger = logging.getLogger(__name__)

OPENING_KEYWORDS = ("beginning", "opening", "previous", "starting")
CLOSING_KEYWORDS = ("ending", "closing", "current")

_BALANCE_AMOUNT = r".*?(-?\$?\d[\d,]*\.\d{2})"


class ProfileLoadError(Exception):
    """Bank profile file is missing or malformed."""

    pass


@dataclass(frozen=True)
class BankProfile:
    """Layout rules for one financial institution."""

    code: str
    transaction_headers: tuple[re.Pattern, ...]
    balance_patterns: tuple[re.Pattern, ...]
    date_formats: tuple[str, ...]
    institution_keywords: tuple[str, ...]

    @property
    def display_name(self) -> str:
        """Name reported as the institution (first keyword)."""
        return self.institution_keywords[0] if self.institution_keywords else self.code


def _balance(label: str) -> re.Pattern:
    return re.compile(label + _BALANCE_AMOUNT, re.IGNORECASE)


def _header(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


BUILTIN_PROFILES = (
    BankProfile(
        code="RBC",
        transaction_headers=(_header(r"Date\s+Description\s+Withdrawals\s+Deposits\s+Balance"),),
        balance_patterns=(_balance("Beginning Balance"), _balance("Ending Balance")),
        date_formats=("MM/DD/YYYY",),
        institution_keywords=("Royal Bank", "RBC"),
    ),
    BankProfile(
        code="TD",
        transaction_headers=(_header(r"Date\s+Transaction\s+Details\s+CAD\s+Balance"),),
        balance_patterns=(_balance("Opening Balance"), _balance("Closing Balance")),
        date_formats=("MMM DD, YYYY",),
        institution_keywords=("TD Bank", "Toronto-Dominion"),
    ),
    BankProfile(
        code="SCOTIA",
        transaction_headers=(_header(r"Date\s+Description\s+Debit\s+Credit\s+Balance"),),
        balance_patterns=(_balance("Previous Balance"), _balance("Current Balance")),
        date_formats=("DD/MM/YYYY",),
        institution_keywords=("Scotiabank", "Scotia"),
    ),
    BankProfile(
        code="BMO",
        transaction_headers=(_header(r"Date\s+Description\s+Amount\s+Balance"),),
        balance_patterns=(_balance("Starting Balance"), _balance("Ending Balance")),
        date_formats=("YYYY-MM-DD",),
        institution_keywords=("Bank of Montreal", "BMO"),
    ),
    BankProfile(
        code="CIBC",
        transaction_headers=(_header(r"Date\s+Description\s+Debits\s+Credits\s+Balance"),),
        balance_patterns=(
            _balance("Previous Statement Balance"),
            _balance("Current Balance"),
        ),
        date_formats=("DD-MMM-YYYY",),
        institution_keywords=("CIBC", "Canadian Imperial Bank"),
    ),
)


def classify_balance_pattern(pattern: re.Pattern) -> Optional[str]:
    """Return "opening", "closing" or None from the wording of a balance pattern."""
    source = pattern.pattern.lower()
    if any(keyword in source for keyword in OPENING_KEYWORDS):
        return "opening"
    if any(keyword in source for keyword in CLOSING_KEYWORDS):
        return "closing"
    return None


class BankProfileRegistry:
    """
    Read-only mapping of bank code to BankProfile, in detection order.

    Safe to share between threads: nothing mutates it after construction.
    """

    def __init__(self, profiles: Iterable[BankProfile]):
        by_code: dict[str, BankProfile] = {}
        for profile in profiles:
            by_code[profile.code.upper()] = profile
        self._profiles = MappingProxyType(by_code)

    def __iter__(self) -> Iterator[BankProfile]:
        return iter(self._profiles.values())

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and code.upper() in self._profiles

    @property
    def codes(self) -> list[str]:
        return [profile.code for profile in self._profiles.values()]

    def get(self, code: str) -> Optional[BankProfile]:
        """Look up a profile by code (case-insensitive)."""
        return self._profiles.get(code.upper())

    def resolve(self, hint: str) -> Optional[BankProfile]:
        """
        Resolve a caller-supplied bank name.

        Matches a bank code first, then any institution keyword contained in
        the hint ("Royal Bank of Canada" resolves to RBC).
        """
        hint = hint.strip()
        if not hint:
            return None

        profile = self.get(hint)
        if profile:
            return profile

        lower_hint = hint.lower()
        for profile in self:
            if any(keyword.lower() in lower_hint for keyword in profile.institution_keywords):
                return profile
        return None

    def detect(self, text: str) -> Optional[BankProfile]:
        """First profile (in registry order) whose institution keyword occurs in text."""
        lower_text = text.lower()
        for profile in self:
            for keyword in profile.institution_keywords:
                if keyword.lower() in lower_text:
                    return profile
        return None

    def with_profiles(self, profiles: Iterable[BankProfile]) -> "BankProfileRegistry":
        """New registry with extra profiles appended (same code replaces in place)."""
        return BankProfileRegistry([*self, *profiles])

    @classmethod
    def from_yaml(
        cls,
        path: Path,
        base: Optional["BankProfileRegistry"] = None,
    ) -> "BankProfileRegistry":
        """Registry of ``base`` (default: built-ins) extended by a YAML file."""
        base = base if base is not None else DEFAULT_REGISTRY
        return base.with_profiles(load_profiles(path))


def _compile_all(code: str, field_name: str, patterns: list[str]) -> tuple[re.Pattern, ...]:
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern, re.IGNORECASE))
        except re.error as e:
            raise ProfileLoadError(
                f"Bank {code}: invalid {field_name} pattern {pattern!r}: {e}"
            ) from e
    return tuple(compiled)


def profile_from_dict(data: dict[str, Any]) -> BankProfile:
    """
    Build a BankProfile from its YAML form.

    Raises:
        ProfileLoadError: On missing keys, bad regexes or unknown date formats
    """
    required = (
        "code",
        "transaction_headers",
        "balance_patterns",
        "date_formats",
        "institution_keywords",
    )
    missing = [key for key in required if not data.get(key)]
    if missing:
        raise ProfileLoadError(
            f"Bank profile {data.get('code', '?')} is missing: {', '.join(missing)}"
        )

    code = str(data["code"])

    unknown_formats = [fmt for fmt in data["date_formats"] if fmt not in BANK_DATE_FORMATS]
    if unknown_formats:
        raise ProfileLoadError(
            f"Bank {code}: unknown date formats {unknown_formats}; "
            f"supported: {', '.join(BANK_DATE_FORMATS)}"
        )

    balance_patterns = _compile_all(code, "balance", data["balance_patterns"])
    for pattern in balance_patterns:
        if pattern.groups < 1:
            raise ProfileLoadError(
                f"Bank {code}: balance pattern {pattern.pattern!r} needs a capture group"
            )

    return BankProfile(
        code=code,
        transaction_headers=_compile_all(code, "header", data["transaction_headers"]),
        balance_patterns=balance_patterns,
        date_formats=tuple(data["date_formats"]),
        institution_keywords=tuple(str(k) for k in data["institution_keywords"]),
    )


def load_profiles(path: Path) -> list[BankProfile]:
    """
    Load bank profiles from a YAML file.

    Raises:
        ProfileLoadError: If the file cannot be read or is malformed
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ProfileLoadError(f"Cannot read bank profiles from {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ProfileLoadError(f"Invalid YAML in {path}: {e}") from e

    entries = data.get("banks") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise ProfileLoadError(f"{path}: expected a top-level 'banks' list")

    profiles = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ProfileLoadError(f"{path}: each bank entry must be a mapping")
        profiles.append(profile_from_dict(entry))

    logger.info(f"Loaded {len(profiles)} bank profiles from {path}")
    return profiles


DEFAULT_REGISTRY = BankProfileRegistry(BUILTIN_PROFILES)


def load_registry(path: Optional[Path] = None) -> BankProfileRegistry:
    """Built-in registry, extended by the profiles in ``path`` if given."""
    if path is None:
        return DEFAULT_REGISTRY
    return BankProfileRegistry.from_yaml(path)
