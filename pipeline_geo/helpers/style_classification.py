"""
Style classification for product and operational status codes.

Codes arrive in many spellings ("GN", "natural_gas", "Gaz Naturel",
"Pétrole Brut"...). Classification tries, in order:

1. a direct lookup,
2. a case-folded lookup,
3. ordered (predicate, style) rules on the normalized code (accents,
   underscores, hyphens and whitespace removed, lower-cased),

and falls back to a neutral default with a warning. It never raises.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum

import structlog

from pipeline_geo.schemas.geo import Pipeline, StyleAttributes

logger = structlog.get_logger(__name__)

_SEPARATORS = re.compile(r"[_\s-]")


def normalize_code(code: str) -> str:
    """
    Normalize a code for fuzzy matching.

    Examples:
        >>> normalize_code("Pétrole_Brut")
        'petrolebrut'

        >>> normalize_code("natural-gas ")
        'naturalgas'
    """
    decomposed = unicodedata.normalize("NFD", code.lower())
    without_marks = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _SEPARATORS.sub("", without_marks)


def code_matches(*, exact: Sequence[str] = (), contains: Sequence[str] = ()) -> Callable[[str], bool]:
    """Build a predicate over a normalized code."""

    def predicate(normalized: str) -> bool:
        return normalized in exact or any(fragment in normalized for fragment in contains)

    return predicate


@dataclass(frozen=True)
class StyleRule:
    """One fuzzy classification rule; rules are evaluated top to bottom."""

    category: str
    predicate: Callable[[str], bool]
    style: StyleAttributes


class StyleClassifier:
    """Maps codes to presentation styles via lookup, then ordered fuzzy rules."""

    def __init__(
        self,
        name: str,
        lookup: Mapping[str, StyleAttributes],
        rules: Sequence[StyleRule],
        default: StyleAttributes,
    ) -> None:
        """
        Initialize the classifier.

        Args:
            name: Classifier name used in diagnostics (e.g., "product")
            lookup: Known codes and their styles
            rules: Fuzzy rules, first match wins
            default: Style for unrecognized or missing codes
        """
        self.name = name
        self.default = default
        self._lookup = dict(lookup)
        self._folded_lookup = {code.casefold(): style for code, style in lookup.items()}
        self._rules = tuple(rules)

    def classify(self, code: str | None) -> StyleAttributes:
        """
        Resolve the style for a code.

        Args:
            code: Product or status code as sent by the API

        Returns:
            Matching style, or the default style for missing/unknown codes
        """
        if not code:
            return self.default

        if code in self._lookup:
            return self._lookup[code]

        folded = code.casefold()
        if folded in self._folded_lookup:
            return self._folded_lookup[folded]

        normalized = normalize_code(code)
        for rule in self._rules:
            if rule.predicate(normalized):
                logger.debug("style_fuzzy_match", classifier=self.name, code=code, category=rule.category)
                return rule.style

        logger.warning("style_classification_miss", classifier=self.name, code=code)
        return self.default


# ==================== Products ====================

NATURAL_GAS_STYLE = StyleAttributes(color="#FFD700")
CRUDE_OIL_STYLE = StyleAttributes(color="#000000")
LPG_STYLE = StyleAttributes(color="#00C853")
CONDENSATE_STYLE = StyleAttributes(color="#9C27B0")
OTHER_PRODUCT_STYLE = StyleAttributes(color="#9E9E9E")

_PRODUCT_LOOKUP: dict[str, StyleAttributes] = {
    **dict.fromkeys(["GN", "NATURAL_GAS", "NATURAL GAS", "GAS", "GAZ"], NATURAL_GAS_STYLE),
    **dict.fromkeys(
        ["PB", "PETROLE_BRUT", "PETROLE BRUT", "Pétrole Brut", "CRUDE", "CRUDE_OIL", "CRUDE OIL", "OIL", "BRUT"],
        CRUDE_OIL_STYLE,
    ),
    **dict.fromkeys(["GPL", "LPG"], LPG_STYLE),
    **dict.fromkeys(["COND", "CONDENSATE", "CONDENSAT"], CONDENSATE_STYLE),
    **dict.fromkeys(["OTHER", "AUTRE", "UNKNOWN"], OTHER_PRODUCT_STYLE),
}

_PRODUCT_RULES = [
    StyleRule("natural_gas", code_matches(exact=["gn"], contains=["naturalgas", "gaz", "gas"]), NATURAL_GAS_STYLE),
    StyleRule(
        "crude_oil",
        code_matches(exact=["pb"], contains=["petrolebrut", "crud", "oil", "brut"]),
        CRUDE_OIL_STYLE,
    ),
    StyleRule("lpg", code_matches(exact=["gpl"], contains=["lpg"]), LPG_STYLE),
    StyleRule("condensate", code_matches(exact=["cond"], contains=["condensat"]), CONDENSATE_STYLE),
]

PRODUCT_STYLES = StyleClassifier("product", _PRODUCT_LOOKUP, _PRODUCT_RULES, OTHER_PRODUCT_STYLE)


# ==================== Operational Statuses ====================

OPERATIONAL_STYLE = StyleAttributes(color="#4CAF50", opacity=0.8)
MAINTENANCE_STYLE = StyleAttributes(color="#FF9800", opacity=0.6, dash_pattern="10, 6")
INACTIVE_STYLE = StyleAttributes(color="#9E9E9E", opacity=0.4, dash_pattern="4, 8")
CONSTRUCTION_STYLE = StyleAttributes(color="#2196F3", opacity=0.7, dash_pattern="2, 6")
UNKNOWN_STATUS_STYLE = StyleAttributes(color="#999999", opacity=0.8)

_STATUS_LOOKUP: dict[str, StyleAttributes] = {
    "OPERATIONAL": OPERATIONAL_STYLE,
    "MAINTENANCE": MAINTENANCE_STYLE,
    "INACTIVE": INACTIVE_STYLE,
    "CONSTRUCTION": CONSTRUCTION_STYLE,
    "PLANNED": CONSTRUCTION_STYLE,
}

# "inactive" contains "activ" and "hors service" contains "service": inactive must come first
_STATUS_RULES = [
    StyleRule(
        "inactive",
        code_matches(contains=["inactiv", "inactif", "horsservice", "decommission", "abandon", "arret"]),
        INACTIVE_STYLE,
    ),
    StyleRule("maintenance", code_matches(contains=["maint", "repair", "repar"]), MAINTENANCE_STYLE),
    StyleRule(
        "construction",
        code_matches(contains=["construct", "planned", "planifie", "projet"]),
        CONSTRUCTION_STYLE,
    ),
    StyleRule(
        "operational",
        code_matches(contains=["operation", "exploit", "service", "activ", "actif"]),
        OPERATIONAL_STYLE,
    ),
]

STATUS_STYLES = StyleClassifier("status", _STATUS_LOOKUP, _STATUS_RULES, UNKNOWN_STATUS_STYLE)


class StyleCategory(StrEnum):
    """Kind of code being classified."""

    PRODUCT = "product"
    STATUS = "status"


_CLASSIFIERS: dict[StyleCategory, StyleClassifier] = {
    StyleCategory.PRODUCT: PRODUCT_STYLES,
    StyleCategory.STATUS: STATUS_STYLES,
}


def classify(code: str | None, category: StyleCategory = StyleCategory.PRODUCT) -> StyleAttributes:
    """
    Classify a product (default) or status code into a style.

    Examples:
        >>> classify("Gaz Naturel").color
        '#FFD700'

        >>> classify("UNKNOWN_CODE_XYZ") == OTHER_PRODUCT_STYLE
        True
    """
    return _CLASSIFIERS[category].classify(code)


# ==================== Combined Pipeline Style ====================

DEFAULT_PIPELINE_COLOR = "#2196F3"
DEFAULT_PIPELINE_WEIGHT = 3.0
MIN_PIPELINE_WEIGHT = 2.0
MAX_PIPELINE_WEIGHT = 8.0


def pipeline_weight(nominal_diameter: float | None) -> float:
    """
    Line weight from nominal diameter (inches): larger pipes draw thicker.

    Examples:
        >>> pipeline_weight(48)
        4.8

        >>> pipeline_weight(None)
        3.0
    """
    if not nominal_diameter:
        return DEFAULT_PIPELINE_WEIGHT
    return min(max(nominal_diameter / 10, MIN_PIPELINE_WEIGHT), MAX_PIPELINE_WEIGHT)


def pipeline_style(pipeline: Pipeline) -> StyleAttributes:
    """
    Combine product color, diameter weight and status opacity/dash for a pipeline.

    Pipelines without a product keep the default blue; pipelines without a
    status are drawn solid at the default opacity.
    """
    product_code = pipeline.product_code
    color = PRODUCT_STYLES.classify(product_code).color if product_code else DEFAULT_PIPELINE_COLOR

    status_code = pipeline.status_code
    if status_code:
        status_style = STATUS_STYLES.classify(status_code)
        opacity, dash_pattern = status_style.opacity, status_style.dash_pattern
    else:
        opacity, dash_pattern = OPERATIONAL_STYLE.opacity, None

    return StyleAttributes(
        color=color,
        weight=pipeline_weight(pipeline.nominal_diameter),
        opacity=opacity,
        dash_pattern=dash_pattern,
    )
