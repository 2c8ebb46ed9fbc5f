"""
Naming convention utilities for the TypeORM CRUD generator.

Pure case conversions between the naming styles used for generated file
names, class names and property names. The converters expect a non-empty
identifier-like string; guarding against missing names is the job of the
template helper layer.
"""

import logging
import re
from enum import Enum
from typing import Callable, Dict, List

import inflect


logger = logging.getLogger(__name__)

# Initialize inflect engine for pluralization
p = inflect.engine()

_LOWER_UPPER_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z])([A-Z][a-z])")
_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]+")


class NamingCase(Enum):
    """Case styles understood by ``convert_case``."""

    PASCAL = "pascal"   # UserProfile
    CAMEL = "camel"     # userProfile
    PARAM = "param"     # user-profile
    KEBAB = "kebab"     # user-profile (alias of param)
    SNAKE = "snake"     # user_profile
    NONE = "none"       # unchanged


def split_words(name: str) -> List[str]:
    """
    Split an identifier into its words.

    Word boundaries are any run of non-alphanumeric characters, a lower-case
    letter or digit followed by an upper-case letter, and the end of an
    upper-case run followed by a capitalised word.

    Example:
        >>> split_words("XMLHttpRequest_id")
        ['XML', 'Http', 'Request', 'id']
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")
    if not name:
        raise ValueError("Cannot split an empty name into words")

    spaced = _LOWER_UPPER_BOUNDARY.sub(r"\1 \2", name)
    spaced = _ACRONYM_BOUNDARY.sub(r"\1 \2", spaced)
    return [word for word in _NON_ALPHANUMERIC.split(spaced) if word]


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def to_pascal_case(name: str) -> str:
    """
    Convert a name to PascalCase.

    Example:
        >>> to_pascal_case("user_profile")
        'UserProfile'
    """
    return "".join(_capitalize(word) for word in split_words(name))


def to_camel_case(name: str) -> str:
    """
    Convert a name to camelCase.

    Example:
        >>> to_camel_case("user_profile")
        'userProfile'
    """
    words = split_words(name)
    if not words:
        return ""
    return words[0].lower() + "".join(_capitalize(word) for word in words[1:])


def to_param_case(name: str) -> str:
    """
    Convert a name to param-case (kebab-case).

    Example:
        >>> to_param_case("UserProfile")
        'user-profile'
    """
    return "-".join(word.lower() for word in split_words(name))


def to_snake_case(name: str) -> str:
    """
    Convert a name to snake_case.

    Example:
        >>> to_snake_case("UserProfile")
        'user_profile'
    """
    return "_".join(word.lower() for word in split_words(name))


def _keep(name: str) -> str:
    return name


CASE_CONVERTERS: Dict[str, Callable[[str], str]] = {
    NamingCase.PASCAL.value: to_pascal_case,
    NamingCase.CAMEL.value: to_camel_case,
    NamingCase.PARAM.value: to_param_case,
    NamingCase.KEBAB.value: to_param_case,
    NamingCase.SNAKE.value: to_snake_case,
    NamingCase.NONE.value: _keep,
}


def convert_case(name: str, style) -> str:
    """
    Convert ``name`` to the given case style.

    ``style`` may be a ``NamingCase``, any ``str`` enum with one of its values,
    or the plain value string.

    Raises:
        KeyError: If the style is not a known case style
    """
    key = getattr(style, "value", style)
    return CASE_CONVERTERS[key](name)


def pluralize(word: str) -> str:
    """
    Pluralize a word using inflect, falling back to appending 's'.

    Words that are already plural (``users``, ``categories``) are returned
    unchanged. Returns an empty string for non-string or empty input.
    """
    if not isinstance(word, str) or not word:
        return ""
    try:
        # singular_noun is False unless the word is a plural noun
        if p.singular_noun(word):
            return word
        plural = p.plural(word)
        if plural:
            return plural
        return word + "s"
    except Exception as e:
        logger.error(f"Inflect pluralization failed for '{word}': {e}. Falling back to adding 's'.")
        return word + "s"
