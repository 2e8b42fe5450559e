"""Color and Size reference data.

Order payloads may name a variant's color and size either by canonical id or
by human-readable name ("Red", "XL"); these aggregates back the name lookup.
"""

from protean.fields import String

from ordering.domain import ordering
from ordering.inventory.events import ColorRegistered, SizeRegistered


@ordering.aggregate
class Color:
    name = String(required=True, max_length=50, unique=True)
    hex_code = String(max_length=7)

    @classmethod
    def register(cls, name, hex_code=None):
        color = cls(name=name.strip(), hex_code=hex_code)
        color.raise_(ColorRegistered(color_id=color.id, name=color.name, hex_code=hex_code))
        return color


@ordering.aggregate
class Size:
    name = String(required=True, max_length=20, unique=True)

    @classmethod
    def register(cls, name):
        size = cls(name=name.strip())
        size.raise_(SizeRegistered(size_id=size.id, name=size.name))
        return size


def _first(results):
    return results[0] if results else None


@ordering.repository(part_of=Color)
class ColorRepository:
    def find_by_name(self, name):
        return _first(self._dao.query.filter(name=name).all().items)


@ordering.repository(part_of=Size)
class SizeRepository:
    def find_by_name(self, name):
        return _first(self._dao.query.filter(name=name).all().items)
