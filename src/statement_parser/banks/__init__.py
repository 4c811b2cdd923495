"""
Bank-specific statement handling.

Provides:
- BankProfile / BankProfileRegistry: immutable per-institution layout rules
- BankLayoutExtractor: column-based transaction table parser
- Keyword refinement for statements from unrecognized banks
"""

from .layout import BankLayoutExtractor, extract_profile_balances, split_columns
from .profiles import (
    BUILTIN_PROFILES,
    DEFAULT_REGISTRY,
    BankProfile,
    BankProfileRegistry,
    ProfileLoadError,
    classify_balance_pattern,
    load_profiles,
    load_registry,
)
from .refinement import refine_transaction_type, refine_transactions, suggest_category

__all__ = [
    "BankProfile",
    "BankProfileRegistry",
    "BUILTIN_PROFILES",
    "DEFAULT_REGISTRY",
    "ProfileLoadError",
    "classify_balance_pattern",
    "load_profiles",
    "load_registry",
    "BankLayoutExtractor",
    "extract_profile_balances",
    "split_columns",
    "refine_transaction_type",
    "refine_transactions",
    "suggest_category",
]
