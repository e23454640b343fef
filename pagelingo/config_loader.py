"""
User preference loader.

Preferences are owned by the host (options page, sync storage) and are
read-only to the engine. They can be loaded from a YAML file or any
mapping; keys may use either snake_case or the camelCase names the
browser storage uses.

Example preferences.yaml:
    targetLanguage: de
    dualStyle: highlight
    customDictionary:
      acme corp: ACME Corp
      kubernetes: ""
    neverTranslateSites: [intranet.example.com]
    translateDynamicallyCreatedContent: yes
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pagelingo.core.errors import ConfigurationError

logger = logging.getLogger(__name__)


class SiteRule(BaseModel):
    """Per-host overrides."""
    style: str | None = None


class UserPreferences(BaseModel):
    """User configuration consumed by the engine."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    # Keyword -> replacement; an empty replacement keeps the keyword as is
    dictionary: dict[str, str] = Field(default_factory=dict, alias="customDictionary")
    target_language: str = Field("en", alias="targetLanguage")
    page_translator_service: str = Field("google", alias="pageTranslatorService")

    # Wrapper styling
    dual_style: str = Field("underline", alias="dualStyle")
    custom_dual_style: str = Field("", alias="customDualStyle")
    show_dual_language: bool = Field(True, alias="isShowDualLanguage")
    site_rules: dict[str, SiteRule] = Field(default_factory=dict, alias="siteRules")

    # Auto-translate rules
    never_translate_sites: list[str] = Field(default_factory=list, alias="neverTranslateSites")
    always_translate_sites: list[str] = Field(default_factory=list, alias="alwaysTranslateSites")
    never_translate_langs: list[str] = Field(default_factory=list, alias="neverTranslateLangs")
    always_translate_langs: list[str] = Field(default_factory=list, alias="alwaysTranslateLangs")
    auto_translate_on_link_click: bool = Field(False, alias="autoTranslateWhenClickingALink")

    # Behaviour
    translate_title: bool = Field(True, alias="isTranslateTitle")
    translate_pre: bool = Field(False, alias="translateTag_pre")
    translate_dynamic_content: bool = Field(True, alias="translateDynamicallyCreatedContent")
    dont_sort_results: bool = Field(False, alias="dontSortResults")

    @field_validator("dictionary", mode="before")
    @classmethod
    def _coerce_dictionary(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return {str(k): "" if v is None else str(v) for k, v in value.items()}
        return value

    @field_validator(
        "never_translate_sites",
        "always_translate_sites",
        "never_translate_langs",
        "always_translate_langs",
        mode="before",
    )
    @classmethod
    def _coerce_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    def site_style(self, host: str | None) -> str | None:
        """Style configured for a host, if any."""
        if not host:
            return None
        rule = self.site_rules.get(host)
        return rule.style if rule else None


def load_preferences(source: Path | str | Mapping[str, Any] | None = None) -> UserPreferences:
    """
    Load user preferences from a YAML file or a mapping.

    Args:
        source: Path to a YAML file, an already parsed mapping, or None
            for defaults

    Returns:
        The validated preferences

    Raises:
        ConfigurationError: If the file cannot be read or is invalid
    """
    if source is None:
        return UserPreferences()

    if isinstance(source, Mapping):
        data: Any = source
    else:
        path = Path(source)
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read preferences from {path}: {e}") from e
        logger.debug("Loaded preferences from %s", path)

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigurationError("Preferences must be a mapping")

    try:
        return UserPreferences.model_validate(dict(data))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid preferences: {e}") from e
