"""Language dependency rules and group planning.

EasyOCR-class engines are more accurate when scripts that need their own
character-set decoding are not mixed in one call. English is cheap to add to
any call and helps with numerals, punctuation and embedded Latin text, so it
acts as the shared "hub" language across groups.

Rules:
- Arabic only runs alongside its fixed companions (fa, ur, ug) plus English.
- Some CJK and Thai scripts cannot run without English.
- Indic scripts run best paired with English alone.
- Everything else is treated as Latin-family and shares one group.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Final

logger = logging.getLogger(__name__)

HUB_LANGUAGE: Final[str] = "en"

# Arabic is exclusive with everything except this set.
ISOLATION_LEADER: Final[str] = "ar"
ISOLATION_GROUP: Final[tuple[str, ...]] = ("ar", "fa", "ur", "ug", HUB_LANGUAGE)

# Scripts the engine cannot load without English.
HUB_REQUIRED_LANGUAGES: Final[tuple[str, ...]] = (
    "ch_sim", "ch_tra", "zh_sim", "zh_tra", "ja", "ko", "th",
)

# Each of these gets its own {language, en} group.
HUB_SOLO_LANGUAGES: Final[tuple[str, ...]] = ("th", "ch_tra")

# These share a single group together with English.
HUB_SHARED_LANGUAGES: Final[tuple[str, ...]] = ("ch_sim", "zh_sim", "zh_tra", "ja", "ko")

# Non-Latin auxiliary scripts, one {language, en} group each.
INDIC_LANGUAGES: Final[tuple[str, ...]] = (
    "hi", "bn", "te", "ta", "mr", "gu", "kn", "ml", "ne", "pa", "si",
)


def normalize_languages(languages: Iterable[str]) -> list[str]:
    """Trim, lowercase and de-duplicate language codes, keeping first-seen order.

    Blank entries are skipped, so the result may be empty.
    """
    normalized: list[str] = []
    for lang in languages:
        if lang is None or not str(lang).strip():
            continue
        code = str(lang).strip().lower()
        if code not in normalized:
            normalized.append(code)
    return normalized


def fix_dependencies(languages: Iterable[str]) -> frozenset[str]:
    """Expand or restrict a language set to something the engine can load.

    Args:
        languages: Requested language codes (any case)

    Returns:
        The adjusted language set. Idempotent: applying it to its own
        output changes nothing.
    """
    requested = frozenset(normalize_languages(languages))

    if ISOLATION_LEADER in requested:
        removed = sorted(requested - set(ISOLATION_GROUP))
        if removed:
            logger.warning(
                f"'{ISOLATION_LEADER}' can only be combined with {list(ISOLATION_GROUP)}. "
                f"Dropping incompatible languages: {', '.join(removed)}"
            )
        return frozenset(ISOLATION_GROUP)

    fixed = set(requested)

    dependents = sorted(requested.intersection(HUB_REQUIRED_LANGUAGES))
    if dependents and HUB_LANGUAGE not in fixed:
        fixed.add(HUB_LANGUAGE)
        logger.info(
            f"Added '{HUB_LANGUAGE}' to language list, required by: {', '.join(dependents)}"
        )

    scripts = sorted(requested.intersection(INDIC_LANGUAGES))
    if scripts and HUB_LANGUAGE not in fixed:
        fixed.add(HUB_LANGUAGE)
        logger.info(
            f"Added '{HUB_LANGUAGE}' to language list for mixed-script images: {', '.join(scripts)}"
        )

    return frozenset(fixed)


def plan_groups(languages: Sequence[str]) -> list[tuple[str, ...]]:
    """Partition languages into groups, one engine call per group.

    Groups are disjoint except for the hub language, which may appear in
    several of them.

    Planning order (first match wins for each language):
    1. Arabic present: one group with the whole Arabic-compatible set
    2. Each hub-solo language: {language, en}
    3. All hub-shared languages together: {en, ...}
    4. Each Indic language: {language, en}
    5. Remaining Latin-family languages in one group, plus en
    6. Nothing planned: the input as a single group

    Args:
        languages: Normalized language codes, in request order

    Returns:
        Ordered list of language groups

    Example:
        >>> plan_groups(["en", "hi", "ar"])
        [('ar', 'fa', 'ur', 'ug', 'en'), ('hi', 'en')]
    """
    groups: list[tuple[str, ...]] = []
    consumed: set[str] = set()
    requested = list(languages)

    if ISOLATION_LEADER in requested:
        groups.append(ISOLATION_GROUP)
        consumed.update(code for code in ISOLATION_GROUP if code != HUB_LANGUAGE)

    for lang in HUB_SOLO_LANGUAGES:
        if lang in requested and lang not in consumed:
            groups.append((lang, HUB_LANGUAGE))
            consumed.add(lang)

    shared = [HUB_LANGUAGE]
    for lang in HUB_SHARED_LANGUAGES:
        if lang in requested and lang not in consumed:
            shared.append(lang)
            consumed.add(lang)
    if len(shared) > 1:
        groups.append(tuple(shared))

    for lang in requested:
        if lang in INDIC_LANGUAGES and lang not in consumed:
            groups.append((lang, HUB_LANGUAGE))
            consumed.add(lang)

    # A requested hub is already covered once an earlier group carries it
    hub_covered = any(HUB_LANGUAGE in group for group in groups)
    latin = [
        lang
        for lang in requested
        if lang not in consumed and not (lang == HUB_LANGUAGE and hub_covered)
    ]

    if latin:
        if HUB_LANGUAGE not in latin:
            latin.append(HUB_LANGUAGE)
        groups.append(tuple(latin))

    if not groups:
        groups.append(tuple(requested))

    return groups
