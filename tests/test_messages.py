"""Tests for message catalogues."""

from __future__ import annotations

from n8n_bootstrap.messages import LOCALES, _CATALOGUES, translate


def test_locales() -> None:
    assert LOCALES == ("en", "zh")


def test_catalogues_share_keys() -> None:
    assert set(_CATALOGUES["en"]) == set(_CATALOGUES["zh"])


def test_placeholder_substitution() -> None:
    assert translate("status.preparing_engine", progress=42) == "Preparing Node engine... 42%"
    assert translate("status.preparing_engine", "zh", progress=42) == "正在准备 Node 引擎... 42%"


def test_missing_param_leaves_placeholder() -> None:
    assert translate("status.error") == "Startup failed: {{error}}"


def test_unknown_locale_falls_back_to_english() -> None:
    assert translate("errors.timeout", "fr") == translate("errors.timeout", "en")


def test_unknown_key_returns_key() -> None:
    assert translate("status.nope") == "status.nope"
