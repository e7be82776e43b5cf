"""
Ordered verse sets.

Verse lists used to be stored as ad hoc JSON text and parsed at every call
site. ``VerseSet`` makes the type explicit: set semantics for membership and
comparison, insertion order for display, and a strict JSON codec so that
``VerseSet.from_json(s.to_json())`` gives back exactly ``s``.
"""
import json

from django.db import models


class MalformedVerseList(ValueError):
    pass


def _check_verse(value):
    # bool is an int subclass; True must not sneak in as verse 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedVerseList(f"Verse numbers must be integers, got {value!r}.")
    if value < 1:
        raise MalformedVerseList(f"Verse numbers must be positive, got {value}.")
    return value


class VerseSet:
    """Immutable set of verse numbers that remembers insertion order."""

    __slots__ = ("_items",)

    def __init__(self, verses=()):
        items = {}
        for v in verses:
            items[_check_verse(v)] = None
        self._items = items

    @classmethod
    def from_range(cls, start, end):
        return cls(range(start, end + 1))

    # ---- codec ----

    @classmethod
    def from_json(cls, text):
        try:
            data = json.loads(text)
        except (TypeError, json.JSONDecodeError) as e:
            raise MalformedVerseList(f"Not a JSON verse list: {text!r}") from e
        if not isinstance(data, list):
            raise MalformedVerseList(f"Expected a JSON list, got {type(data).__name__}.")
        result = cls(data)
        if len(result) != len(data):
            raise MalformedVerseList(f"Duplicate verse numbers in {text!r}.")
        return result

    def to_json(self):
        return json.dumps(self.to_list(), separators=(",", ":"))

    def to_list(self):
        return list(self._items)

    # ---- set protocol ----

    def __contains__(self, verse):
        return verse in self._items

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __bool__(self):
        return bool(self._items)

    def __eq__(self, other):
        if isinstance(other, VerseSet):
            return self._items.keys() == other._items.keys()
        if isinstance(other, (set, frozenset)):
            return self._items.keys() == other
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        return f"VerseSet({self.to_list()})"

    def __str__(self):
        return ", ".join(str(v) for v in self._items) or "-"

    def union(self, other):
        return VerseSet([*self._items, *other])

    def difference(self, other):
        other = set(other)
        return VerseSet(v for v in self._items if v not in other)

    def intersection(self, other):
        other = set(other)
        return VerseSet(v for v in self._items if v in other)

    def issubset(self, other):
        return self._items.keys() <= set(other)

    __or__ = union
    __sub__ = difference
    __and__ = intersection
    __le__ = issubset

    def sorted(self):
        return VerseSet(sorted(self._items))


class VerseSetField(models.TextField):
    """Stores a ``VerseSet`` as its JSON text, e.g. ``[1,2,3]``."""

    description = "Ordered set of verse numbers"

    def from_db_value(self, value, expression, connection):
        if value is None:
            return value
        return VerseSet.from_json(value)

    def to_python(self, value):
        if value is None or isinstance(value, VerseSet):
            return value
        if isinstance(value, str):
            return VerseSet.from_json(value)
        return VerseSet(value)

    def get_prep_value(self, value):
        if value is None:
            return None
        return self.to_python(value).to_json()

    def value_to_string(self, obj):
        value = self.value_from_object(obj)
        return None if value is None else self.to_python(value).to_json()
