"""Derive command verbs and nouns from client method names and payload types.

The verb comes from the method-name prefix (``GetDevices`` -> ``Read``); the
noun comes from the method's payload type, not its name: generic envelopes
are unwrapped, ``Response``/``Result`` suffixes and a trailing ``List`` are
stripped, and the remainder is singularized and PascalCased
(``Task<DeviceListResponse>`` -> ``Device``).

The singularization rules are a deliberately small heuristic. Acronyms and
irregular plurals are not handled: ``Statuses`` becomes ``Statuse``.
"""

from __future__ import annotations

from sdkwrap.exceptions import UnrecognizedVerbError
from sdkwrap.models import TypeRef, Verb

VERB_PREFIXES: tuple[tuple[str, Verb], ...] = (
    ("Get", Verb.READ),
    ("Create", Verb.NEW),
    ("Delete", Verb.REMOVE),
    ("Update", Verb.MODIFY),
)
"""Recognised method-name prefixes, checked in order (case-insensitive)."""

_STRIPPED_SUFFIXES = ("Response", "Result")

_ES_SUFFIXES = ("sses", "shes", "ches", "xes")


def has_verb_prefix(method_name: str) -> bool:
    """Return ``True`` when *method_name* starts with a recognised verb prefix."""
    lowered = method_name.lower()
    return any(lowered.startswith(prefix.lower()) for prefix, _ in VERB_PREFIXES)


def select_verb(method_name: str) -> Verb:
    """Map a client method name to its command verb.

    Args:
        method_name: The client method name, e.g. ``"GetDeviceList"`` or
            ``"create_site"``.

    Returns:
        The :class:`~sdkwrap.models.Verb` for the first matching prefix.

    Raises:
        UnrecognizedVerbError: If no prefix matches. Endpoint discovery
            filters such methods out, so this indicates a caller bug.
    """
    lowered = method_name.lower()
    for prefix, verb in VERB_PREFIXES:
        if lowered.startswith(prefix.lower()):
            return verb
    raise UnrecognizedVerbError(f"Unknown method verb for method name: {method_name}")


def unwrap_generic(type_ref: TypeRef) -> TypeRef:
    """Recursively unwrap single-argument generics down to the payload type.

    ``Task<ApiResponse<Device>>`` unwraps to ``Device``; generics with two or
    more arguments (``Dictionary<K, V>``) are left alone.
    """
    while len(type_ref.generic_args) == 1:
        type_ref = type_ref.generic_args[0]
    return type_ref


def singularize(word: str) -> str:
    """Apply the ordered singularization rules to *word*.

    Example::

        >>> singularize("Categories")
        'Category'
        >>> singularize("Boxes")
        'Box'
        >>> singularize("Statuses")
        'Statuse'
    """
    if not word:
        return word
    lowered = word.lower()
    if lowered.endswith("ies"):
        return word[:-3] + "y"
    if lowered.endswith(_ES_SUFFIXES):
        return word[:-2]
    if lowered.endswith("s") and len(word) > 1:
        return word[:-1]
    return word


def select_noun(type_ref: TypeRef) -> str:
    """Derive a singular PascalCase noun from a payload type.

    Args:
        type_ref: The method's return type (or a nested type for
            constructor functions).

    Returns:
        The noun, e.g. ``"Device"`` for ``DeviceListResponse`` and
        ``"Site"`` for ``SiteResult``.
    """
    name = unwrap_generic(type_ref).name
    for suffix in _STRIPPED_SUFFIXES:
        if name.lower().endswith(suffix.lower()):
            name = name[: -len(suffix)]
    name = _strip_list_suffix(name)
    name = singularize(name)
    if not name:
        return name
    return name[0].upper() + name[1:]


def _strip_list_suffix(name: str) -> str:
    """Drop a trailing ``List`` left over from ``<Noun>ListResponse`` envelopes."""
    if len(name) > 4 and name.endswith("List"):
        return name[:-4]
    return name
