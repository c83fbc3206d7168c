# =============================================================================
# deep-filter -- Configuration
# =============================================================================

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from .constants import (
    DEFAULT_CASE_SENSITIVE,
    DEFAULT_ENABLE_CACHE,
    DEFAULT_MAX_DEPTH,
    OPTION_ALIASES,
)
from .errors import ConfigurationError, type_name
from .sorting import normalize_order_by
from .types import OrderByField
from .validation import validate_options

_SNAKE_TO_CAMEL = {snake: camel for camel, snake in OPTION_ALIASES.items()}


@dataclass(frozen=True, slots=True)
class FilterConfig:
    """Options for one filter call.

    Attributes:
        case_sensitive: Exact-case string matching. Defaults to folding case.
        max_depth: How many levels of plain nested objects are matched (1..10).
            Deeper branches never match. Logical operators do not count.
        custom_comparator: ``(actual, expected) -> bool`` replacing the
            default leaf rule (substring/wildcard/equality).
        enable_cache: Reuse compiled predicates and whole results.
        debug: Print the debug tree for each ``filter`` call.
        verbose: Include literal values in the debug tree.
        show_timings: Include per-node timings in the debug tree.
        colorize: ANSI colours in the debug tree.
        order_by: Sort keys applied after filtering, primary key first.
        limit: Keep only the first N results after ordering.
            ``None``, zero or negative means no limit.
        enable_performance_monitoring: Record phase timings on the
            engine's PerformanceMonitor.
    """

    case_sensitive: bool = DEFAULT_CASE_SENSITIVE
    max_depth: int = DEFAULT_MAX_DEPTH
    custom_comparator: Callable[[Any, Any], bool] | None = None
    enable_cache: bool = DEFAULT_ENABLE_CACHE
    debug: bool = False
    verbose: bool = False
    show_timings: bool = False
    colorize: bool = False
    order_by: tuple[OrderByField, ...] = ()
    limit: int | None = None
    enable_performance_monitoring: bool = False

    @property
    def effective_limit(self) -> int | None:
        if self.limit is None or self.limit <= 0:
            return None
        return self.limit

    def to_options(self) -> dict[str, Any]:
        """camelCase option mapping equivalent to this config."""
        return {camel: getattr(self, snake) for camel, snake in OPTION_ALIASES.items()}


DEFAULT_CONFIG = FilterConfig()


def _camel_options(raw: Mapping[str, Any]) -> dict[str, Any]:
    options: dict[str, Any] = {}
    for key, value in raw.items():
        if key in OPTION_ALIASES:
            options[key] = value
        elif key in _SNAKE_TO_CAMEL:
            options[_SNAKE_TO_CAMEL[key]] = value
        else:
            raise ConfigurationError(f"unknown option {key!r}", option=str(key))
    return options


def merge_config(options: FilterConfig | Mapping[str, Any] | None = None, **overrides: Any) -> FilterConfig:
    """Combine caller options with the defaults into a FilterConfig.

    *options* may be ``None``, a FilterConfig (returned as-is when there
    are no overrides) or a mapping using camelCase or snake_case option
    names. Keyword overrides win over *options*.

    Raises:
        ConfigurationError: unknown option name or invalid value.
    """
    if isinstance(options, FilterConfig):
        if not overrides:
            return options
        base, raw = options, {}
    elif options is None:
        if not overrides:
            return DEFAULT_CONFIG
        base, raw = DEFAULT_CONFIG, {}
    elif isinstance(options, Mapping):
        base, raw = DEFAULT_CONFIG, dict(options)
    else:
        raise ConfigurationError(f"options must be a mapping or FilterConfig, got '{type_name(options)}'")

    raw.update(overrides)
    camel = _camel_options(raw)

    order_by = camel.get("orderBy")
    if isinstance(order_by, OrderByField) or (
        isinstance(order_by, (list, tuple)) and any(isinstance(o, OrderByField) for o in order_by)
    ):
        # already normalized, skip the schema check for this key
        checked = {k: v for k, v in camel.items() if k != "orderBy"}
    else:
        checked = camel
    validate_options(checked)

    values = {OPTION_ALIASES[k]: v for k, v in camel.items()}
    if "order_by" in values:
        values["order_by"] = normalize_order_by(values["order_by"])
    return dataclasses.replace(base, **values)
