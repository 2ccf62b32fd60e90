"""Region names from drawing element ids.

Illustrator exports element ids with special characters escaped as `_xHH_`
sequences, spaces as underscores and a `_N_` suffix to keep ids unique.
"""

import re
from collections.abc import Sequence

from atlasify.config import DocumentConfig

UNIQUE_SUFFIX_RE = re.compile(r"_\d+_$")

ESCAPES: dict[str, str] = {
    "_x27_": "'",
    "_x28_": "(",
    "_x29_": ")",
    "_x2A_": "*",
    "_x2B_": "+",
}


def decode_id(element_id: str) -> str:
    """Turn an exported element id back into a readable name.

    Example:
        decode_id("Cote_d_x27_Ivoire_2_") == "Cote d'Ivoire"
    """
    name = UNIQUE_SUFFIX_RE.sub("", element_id)
    for escaped, char in ESCAPES.items():
        name = name.replace(escaped, char)
    name = name.replace("_", " ")

    # Drop parenthesized qualifiers such as "Georgia (country)"
    cut = name.find(" (")
    if cut > 0:
        name = name[:cut]
    return name.strip()


def naming_id(ids: Sequence[str], config: DocumentConfig) -> str | None:
    """Pick the id that names a shape.

    Args:
        ids: Ids of the shape and its ancestors, innermost first
        config: Document configuration with the ignored prefixes

    Returns:
        The innermost non-empty id without an ignored prefix, or None
    """
    for element_id in ids:
        if not element_id:
            continue
        if any(element_id.startswith(prefix) for prefix in config.ignored_id_prefixes):
            continue
        return element_id
    return None


def resolve_region_name(ids: Sequence[str], config: DocumentConfig) -> str | None:
    """Region name of a shape, or None if the shape must be skipped."""
    element_id = naming_id(ids, config)
    if element_id is None:
        return None
    if config.excluded_id_suffix and element_id.endswith(config.excluded_id_suffix):
        return None
    name = decode_id(element_id)
    return name or None
