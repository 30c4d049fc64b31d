# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for CacheProbe."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, replace
from typing import Literal

from .errors import ConfigError
from .version import __version__

DEFAULT_USER_AGENT = f"CacheProbe/{__version__}"

Method = Literal["get", "head"]
VariantSelection = Literal["desktop", "mobile", "both"]
ExpectNoCacheMode = Literal["none", "woocommerce"]

METHODS: tuple[str, ...] = ("get", "head")
VARIANT_SELECTIONS: tuple[str, ...] = ("desktop", "mobile", "both")
EXPECT_NOCACHE_MODES: tuple[str, ...] = ("none", "woocommerce")

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    timeout: float = 20.0
    connect_timeout: float = 10.0
    sitemap_check_timeout: float = 10.0
    sitemap_fetch_timeout: float = 30.0
    max_redirects: int = 5
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True
    max_body_bytes: int = 16 * 1024 * 1024

    @classmethod
    def from_env(cls) -> HttpSettings:
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("CACHEPROBE_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            timeout=_float_env("CACHEPROBE_HTTP_TIMEOUT", cls.timeout),
            connect_timeout=_float_env("CACHEPROBE_HTTP_CONNECT_TIMEOUT", cls.connect_timeout),
            sitemap_check_timeout=_float_env("CACHEPROBE_SITEMAP_CHECK_TIMEOUT", cls.sitemap_check_timeout),
            sitemap_fetch_timeout=_float_env("CACHEPROBE_SITEMAP_FETCH_TIMEOUT", cls.sitemap_fetch_timeout),
            max_redirects=max(0, _int_env("CACHEPROBE_HTTP_MAX_REDIRECTS", cls.max_redirects)),
            user_agent=os.getenv("CACHEPROBE_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("CACHEPROBE_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


def normalize_site_url(site: str) -> str:
    """
    Normalize a user-supplied site into a scheme-prefixed URL without a trailing slash.

      example.com/   -> https://example.com
      http://a.test/ -> http://a.test
    """
    value = str(site or "").strip().rstrip("/")
    if not value:
        raise ConfigError("Missing site URL")
    if not _SCHEME_RE.match(value):
        value = "https://" + value.lstrip("/")
    return value


@dataclass(frozen=True)
class RunConfig:
    """
    Immutable settings for one probing run.

    Use `RunConfig.create()` for user input: it normalizes the site, clamps numeric
    knobs and rejects unknown choices. The dataclass constructor trusts its arguments.
    """

    site: str
    method: Method = "get"
    limit: int = 10
    variant: VariantSelection = "both"
    passes: int = 2
    concurrency: int = 1
    delay_ms: int = 500
    seed: str | None = None
    expect_nocache: ExpectNoCacheMode = "none"

    @classmethod
    def create(
        cls,
        site: str,
        *,
        method: str = "get",
        limit: int = 10,
        variant: str = "both",
        passes: int = 2,
        concurrency: int = 1,
        delay_ms: int = 500,
        seed: str | None = None,
        expect_nocache: str = "none",
    ) -> RunConfig:
        method_norm = str(method or "").strip().lower()
        if method_norm not in METHODS:
            raise ConfigError(f"Invalid method {method!r}. Use: head|get")
        variant_norm = str(variant or "").strip().lower()
        if variant_norm not in VARIANT_SELECTIONS:
            raise ConfigError(f"Invalid variant {variant!r}. Use: desktop|mobile|both")
        mode_norm = str(expect_nocache or "").strip().lower()
        if mode_norm not in EXPECT_NOCACHE_MODES:
            raise ConfigError(f"Invalid expect-nocache mode {expect_nocache!r}. Use: none|woocommerce")

        return cls(
            site=normalize_site_url(site),
            method=method_norm,  # type: ignore[arg-type]
            limit=max(1, int(limit)),
            variant=variant_norm,  # type: ignore[arg-type]
            passes=max(1, int(passes)),
            concurrency=max(1, int(concurrency)),
            delay_ms=max(0, int(delay_ms)),
            seed=None if seed is None else str(seed),
            expect_nocache=mode_norm,  # type: ignore[arg-type]
        )

    def with_seed(self, seed: str) -> RunConfig:
        """Return a copy with the sampling seed recorded."""
        return replace(self, seed=str(seed))


__all__ = [
    "DEFAULT_USER_AGENT",
    "EXPECT_NOCACHE_MODES",
    "ExpectNoCacheMode",
    "HttpSettings",
    "METHODS",
    "Method",
    "RunConfig",
    "VARIANT_SELECTIONS",
    "VariantSelection",
    "load_http_settings",
    "normalize_site_url",
]
