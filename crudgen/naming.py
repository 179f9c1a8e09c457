"""Naming conventions derived from a single entity name.

Every template needs some spelling of the entity: ``Project`` for class names,
``project`` for PHP variables, ``projects`` for route segments and view
folders, ``Projects`` for composed identifiers.  They are computed once per
run by :func:`derive_names` and never mutated afterwards.

Inflection follows the usual English rules: an irregular table, a list of
uncountable nouns and regular suffix rules.  Only the last word of a
multi-word name is inflected (``OrderItem`` -> ``OrderItems``).
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

from crudgen.errors import InvalidEntityName


# ---------------------------------------------------------------------------
# Inflection tables
# ---------------------------------------------------------------------------

_IRREGULAR: dict[str, str] = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "tooth": "teeth",
    "foot": "feet",
    "goose": "geese",
    "mouse": "mice",
    "ox": "oxen",
    "criterion": "criteria",
    "datum": "data",
    "medium": "media",
    "cactus": "cacti",
    "move": "moves",
    "movie": "movies",
    "zombie": "zombies",
    "cookie": "cookies",
}

_IRREGULAR_PLURALS: dict[str, str] = {plural: single for single, plural in _IRREGULAR.items()}

_UNCOUNTABLE: frozenset[str] = frozenset({
    "audio", "deer", "equipment", "feedback", "fish", "information",
    "metadata", "money", "news", "rice", "series", "sheep", "species",
    "staff", "traffic",
})

_F_TO_VES: dict[str, str] = {
    "calf": "calves",
    "half": "halves",
    "knife": "knives",
    "leaf": "leaves",
    "life": "lives",
    "loaf": "loaves",
    "shelf": "shelves",
    "thief": "thieves",
    "wife": "wives",
    "wolf": "wolves",
}

_VES_TO_F: dict[str, str] = {plural: single for single, plural in _F_TO_VES.items()}

_O_TO_OES: frozenset[str] = frozenset({"echo", "hero", "potato", "tomato", "veto"})

# Single-z endings that double before "es" (quiz -> quizzes).
_Z_TO_ZZES: frozenset[str] = frozenset({"fez", "quiz", "whiz"})

# Nouns ending in "che" whose plural "-ches" must not lose the "e".
_CHE_ENDINGS: frozenset[str] = frozenset({
    "ache", "avalanche", "cache", "cliche", "creche", "headache", "moustache",
    "mustache", "niche", "psyche", "quiche",
})

_VOWELS = "aeiou"
_LAST_WORD_RE = re.compile(r"(?:[A-Z]?[a-z0-9]+|[A-Z]+)$")
_WORD_SPLIT_RE = re.compile(r"[-_\s]+")
_ENTITY_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_\- ]*$")


# ---------------------------------------------------------------------------
# Case conversion
# ---------------------------------------------------------------------------

def studly(name: str) -> str:
    """Convert ``order_item`` / ``order-item`` / ``order item`` to ``OrderItem``.

    Existing interior capitals are preserved (``orderItem`` -> ``OrderItem``).
    """
    return "".join(word[0].upper() + word[1:] for word in _WORD_SPLIT_RE.split(name) if word)


def camel(name: str) -> str:
    """Convert ``order_item`` to ``orderItem``."""
    pascal = studly(name)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""


def snake(name: str) -> str:
    """Convert ``OrderItem`` or ``order-item`` to ``order_item``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


# ---------------------------------------------------------------------------
# Inflection
# ---------------------------------------------------------------------------

def _match_case(template: str, word: str) -> str:
    if template.isupper() and len(template) > 1:
        # Acronyms keep their capitals; a new suffix stays lower-case (URL -> URLs).
        if word.startswith(template.lower()):
            return template + word[len(template):]
        return word.upper()
    if template[:1].isupper():
        return word[:1].upper() + word[1:]
    return word


def _split_last_word(word: str) -> tuple[str, str]:
    match = _LAST_WORD_RE.search(word)
    if match is None:
        return "", word
    return word[: match.start()], match.group(0)


def _pluralize_word(word: str) -> str:
    lower = word.lower()
    if lower in _UNCOUNTABLE or lower in _IRREGULAR_PLURALS:
        return lower
    if lower in _IRREGULAR:
        return _IRREGULAR[lower]
    if lower in _F_TO_VES:
        return _F_TO_VES[lower]
    if lower in _O_TO_OES:
        return lower + "es"
    if lower in _Z_TO_ZZES:
        return lower + "zes"
    if lower.endswith("is") and len(lower) > 3:
        return lower[:-2] + "es"
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in _VOWELS:
        return lower[:-1] + "ies"
    if lower.endswith(("s", "x", "z", "ch", "sh")):
        return lower + "es"
    return lower + "s"


def _singularize_word(word: str) -> str:
    lower = word.lower()
    if lower in _UNCOUNTABLE or lower in _IRREGULAR:
        return lower
    if lower in _IRREGULAR_PLURALS:
        return _IRREGULAR_PLURALS[lower]
    if lower in _VES_TO_F:
        return _VES_TO_F[lower]
    if lower.endswith("oes") and lower[:-2] in _O_TO_OES:
        return lower[:-2]
    if lower.endswith("zzes") and lower[:-3] in _Z_TO_ZZES:
        return lower[:-3]
    if lower.endswith("ches") and lower[:-1] in _CHE_ENDINGS:
        return lower[:-1]
    if lower.endswith("ies") and len(lower) > 3:
        return lower[:-3] + "y"
    if lower.endswith("yses"):
        return lower[:-2] + "is"
    if lower.endswith("uses") and len(lower) > 4 and lower[-5] in _VOWELS:
        return lower[:-1]
    if lower.endswith(("sses", "uses", "xes", "zes", "ches", "shes")):
        return lower[:-2]
    if lower.endswith(("ss", "us", "is")):
        return lower
    if lower.endswith("s") and len(lower) > 1:
        return lower[:-1]
    return lower


def pluralize(word: str) -> str:
    """Return the plural of *word*, inflecting only its last word.

    Examples::

        pluralize("project")   -> "projects"
        pluralize("Category")  -> "Categories"
        pluralize("OrderItem") -> "OrderItems"
        pluralize("person")    -> "people"
    """
    if not word:
        return word
    prefix, last = _split_last_word(word)
    return prefix + _match_case(last, _pluralize_word(last))


def singularize(word: str) -> str:
    """Return the singular of *word*, inflecting only its last word.

    Examples::

        singularize("tasks")      -> "task"
        singularize("categories") -> "category"
        singularize("people")     -> "person"
        singularize("statuses")   -> "status"
    """
    if not word:
        return word
    prefix, last = _split_last_word(word)
    return prefix + _match_case(last, _singularize_word(last))


# ---------------------------------------------------------------------------
# Derived entity names
# ---------------------------------------------------------------------------

class EntityNames(BaseModel):
    """All spellings of one entity name used by the templates."""
    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Name as supplied by the caller, e.g. 'project'")
    studly: str = Field(..., description="Class identifier, e.g. 'Project'")
    camel: str = Field(..., description="Variable identifier, e.g. 'project'")
    plural_lower: str = Field(..., description="Route segment / view folder, e.g. 'projects'")
    plural_studly: str = Field(..., description="Composed identifier, e.g. 'Projects'")

    @property
    def controller(self) -> str:
        return f"{self.studly}Controller"

    @property
    def request(self) -> str:
        return f"{self.studly}Request"

    @property
    def factory(self) -> str:
        return f"{self.studly}Factory"

    @property
    def table(self) -> str:
        """Database table name as Laravel derives it (``order_items``)."""
        return snake(self.plural_studly)


def derive_names(entity: str) -> EntityNames:
    """Compute every naming form for *entity*.

    Raises:
        InvalidEntityName: If *entity* is empty, starts with a non-letter or
            contains characters other than letters, digits, ``_``, ``-`` and
            spaces.
    """
    if entity is None or not entity.strip():
        raise InvalidEntityName(entity or "", "name must not be empty")
    entity = entity.strip()
    if not _ENTITY_NAME_RE.match(entity):
        raise InvalidEntityName(
            entity, "use letters, digits, '_', '-' or spaces, starting with a letter"
        )

    studly_name = studly(entity)
    plural_studly = pluralize(studly_name)
    return EntityNames(
        source=entity,
        studly=studly_name,
        camel=camel(entity),
        plural_lower=plural_studly.lower(),
        plural_studly=plural_studly,
    )
