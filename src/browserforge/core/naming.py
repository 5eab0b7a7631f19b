"""Naming-convention transforms used to infer browser defaults.

All functions are pure string transforms. Pluralization follows the usual
English suffix rules, with tables for irregular and uncountable words, and
preserves the casing of the input.
"""

import re

UNCOUNTABLE = frozenset({
    "audio",
    "bison",
    "cattle",
    "chassis",
    "compensation",
    "coreopsis",
    "data",
    "deer",
    "education",
    "emoji",
    "equipment",
    "evidence",
    "feedback",
    "firmware",
    "fish",
    "furniture",
    "gold",
    "hardware",
    "information",
    "jedi",
    "kin",
    "knowledge",
    "love",
    "media",
    "metadata",
    "money",
    "moose",
    "news",
    "nutrition",
    "offspring",
    "plankton",
    "police",
    "rain",
    "related",
    "rice",
    "series",
    "sheep",
    "software",
    "species",
    "swine",
    "traffic",
    "wheat",
})

IRREGULAR = {
    "child": "children",
    "criterion": "criteria",
    "foot": "feet",
    "goose": "geese",
    "man": "men",
    "move": "moves",
    "person": "people",
    "quiz": "quizzes",
    "sex": "sexes",
    "tooth": "teeth",
    "woman": "women",
    "zombie": "zombies",
}

_IRREGULAR_SINGULAR = {plural_: singular_ for singular_, plural_ in IRREGULAR.items()}

# Everything up to the last separator or camelCase hump, then the last word
_TRAILING_WORD = re.compile(r"^(.*(?:[-_\s]|(?<=[a-z0-9])(?=[A-Z])))(.+)$", re.DOTALL)

# (pattern, replacement) pairs, first match wins
_PLURAL_RULES = [
    (r"(quiz)$", r"\1zes"),
    (r"^(ox)$", r"\1en"),
    (r"([ml])ouse$", r"\1ice"),
    (r"(matr|vert|ind)(ix|ex)$", r"\1ices"),
    (r"(alias|status|campus)$", r"\1es"),
    (r"(octop|vir)us$", r"\1i"),
    (r"(bu)s$", r"\1ses"),
    (r"(x|ch|ss|sh)$", r"\1es"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(hive)$", r"\1s"),
    (r"([^f])fe$", r"\1ves"),
    (r"([lr])f$", r"\1ves"),
    (r"(ax|test)is$", r"\1es"),
    (r"sis$", "ses"),
    (r"([ti])um$", r"\1a"),
    (r"(buffal|tomat|potat|ech|her|vet)o$", r"\1oes"),
    (r"s$", "s"),
    (r"$", "s"),
]

_SINGULAR_RULES = [
    (r"(quiz)zes$", r"\1"),
    (r"(matr)ices$", r"\1ix"),
    (r"(vert|ind)ices$", r"\1ex"),
    (r"^(ox)en$", r"\1"),
    (r"(alias|status|campus)(es)?$", r"\1"),
    (r"(octop|vir)(us|i)$", r"\1us"),
    (r"^(a)x[ie]s$", r"\1xis"),
    (r"(cris|test)(is|es)$", r"\1is"),
    (r"(shoe)s$", r"\1"),
    (r"(o)es$", r"\1"),
    (r"(bus)(es)?$", r"\1"),
    (r"([ml])ice$", r"\1ouse"),
    (r"(x|ch|ss|sh)es$", r"\1"),
    (r"(m)ovies$", r"\1ovie"),
    (r"([^aeiouy]|qu)ies$", r"\1y"),
    (r"([lr])ves$", r"\1f"),
    (r"(tive)s$", r"\1"),
    (r"(hive)s$", r"\1"),
    (r"([^f])ves$", r"\1fe"),
    (r"((a)naly|(b)a|(d)iagno|(p)arenthe|(p)rogno|(s)ynop|(t)he)(sis|ses)$", r"\1sis"),
    (r"([ti])a$", r"\1um"),
    (r"(ss)$", r"\1"),
    (r"s$", ""),
]


def studly(value: str) -> str:
    """Convert a name to StudlyCase: ``user_group`` -> ``UserGroup``.

    Only the first letter of each word is changed, so existing camelCase
    humps survive (``relatedItems`` -> ``RelatedItems``).
    """
    words = re.split(r"[-_\s]+", value)
    return "".join(word[:1].upper() + word[1:] for word in words if word)


def camel(value: str) -> str:
    """Convert a name to camelCase: ``contact-office`` -> ``contactOffice``."""
    result = studly(value)
    return result[:1].lower() + result[1:]


def snake(value: str) -> str:
    """Convert camelCase or StudlyCase to snake_case."""
    result = []
    for i, char in enumerate(value):
        if char.isupper() and i > 0 and value[i - 1] != "_":
            result.append("_")
        result.append(char.lower())
    return "".join(result)


def plural(value: str) -> str:
    """Pluralize the trailing English word of ``value``."""
    return _inflect(value, IRREGULAR, _PLURAL_RULES)


def singular(value: str) -> str:
    """Singularize the trailing English word of ``value``."""
    return _inflect(value, _IRREGULAR_SINGULAR, _SINGULAR_RULES)


def _split_trailing_word(value: str) -> tuple[str, str]:
    """Split ``socialMedia`` into ``("social", "Media")``, ``user_group`` into ``("user_", "group")``."""
    match = _TRAILING_WORD.match(value)
    if match is None:
        return "", value
    return match.group(1), match.group(2)


def _inflect(value: str, irregular: dict[str, str], rules: list[tuple[str, str]]) -> str:
    if not value:
        return value

    head, word = _split_trailing_word(value)
    lowered = word.lower()
    if lowered in UNCOUNTABLE:
        return value

    # Already in the target form (e.g. plural("people"))
    if lowered in irregular.values():
        return value

    if lowered in irregular:
        return head + _match_case(irregular[lowered], word)

    for pattern, replacement in rules:
        if re.search(pattern, word, flags=re.IGNORECASE):
            result = re.sub(pattern, replacement, word, count=1, flags=re.IGNORECASE)
            return head + _match_case(result, word)

    return value


def _match_case(result: str, original: str) -> str:
    """Give ``result`` the casing style of ``original``."""
    if len(original) > 1 and original.isupper():
        return result.upper()
    if original[:1].isupper():
        return result[:1].upper() + result[1:]
    return result
