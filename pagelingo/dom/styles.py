"""
Inline styles for substitution wrappers.

Translated text is put into a wrapper element whose style marks it as
machine translated. The wrapper is removed on restore, so nothing here has
to be reversible beyond the wrapper itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pagelingo.core.models import DualStyle

BASE_STYLE = "vertical-align: inherit;"
MASK_CLASS = "immersive-translate-mask"

# Keeps wrappers out of later segmentation passes
WRAPPER_CLASS = "notranslate"

STYLE_RULES: dict[DualStyle, str] = {
    DualStyle.UNDERLINE: "border-bottom: 2px solid #72ECE9;",
    DualStyle.NONE: "",
    DualStyle.HIGHLIGHT: "background-color: #EAD0B3;padding: 3px 0;",
    DualStyle.WEAKENING: "opacity: 0.4;",
    DualStyle.MASK: "filter: blur(5px);transition: filter 0.5s ease;",
}


@dataclass(frozen=True)
class WrapperStyle:
    """Style attribute and classes of a substitution wrapper."""

    style: str = BASE_STYLE
    class_names: list[str] = field(default_factory=lambda: [WRAPPER_CLASS])


def build_wrapper_style(
    dual_style: str | None = None,
    custom_style: str | None = None,
    show_dual_language: bool = True,
    site_style: str | None = None,
) -> WrapperStyle:
    """
    Build the wrapper style for the current preferences.

    Precedence: a per-site style, then the custom style, then the chosen
    dual style (underline when nothing is set). Values that are not a known
    `DualStyle` are appended as raw CSS.

    Args:
        dual_style: One of the `DualStyle` values or raw CSS
        custom_style: User supplied CSS, overrides `dual_style`
        show_dual_language: When False only the base style is applied
        site_style: Style configured for the current host

    Returns:
        The wrapper style
    """
    if not show_dual_language or site_style == DualStyle.NONE.value:
        return WrapperStyle()

    chosen = site_style or custom_style or dual_style or DualStyle.UNDERLINE.value

    try:
        known = DualStyle(chosen)
    except ValueError:
        return WrapperStyle(style=BASE_STYLE + chosen)

    classes = [WRAPPER_CLASS, MASK_CLASS] if known == DualStyle.MASK else [WRAPPER_CLASS]
    return WrapperStyle(style=BASE_STYLE + STYLE_RULES[known], class_names=classes)
