"""
JSON serializers rendered through the render cache.

    class PersonSerializer(Serializer):
        def data(self):
            return {"id": self.object.id, "name": self.object.name}

        def cache_key(self):
            return f"{self.object.id}:{int(self.object.updated_at.timestamp())}"

    PersonSerializer.configure_cache(key="person")

    serializer = PersonSerializer(person)
    serializer.to_json()  # renders and stores under "person/1:1479693600"
    serializer.to_json()  # read back from the store

Changing ``person.updated_at`` changes the key, so the next ``to_json`` renders
again. The entry under the old key is left in the store.
"""

import json
from typing import Any, Dict, Iterable, List, Type

from .cacheable import Cacheable, CacheableList
from .decorator import RenderCacheDecorator


# Shared by all serializers; resolves the process-wide default store on each render
json_cache = RenderCacheDecorator()


@json_cache
def render_json(serializer) -> str:
    """Render a serializer's data as compact JSON"""
    return json.dumps(serializer.data(), separators=(",", ":"), ensure_ascii=False)


class Serializer(Cacheable):
    """Wraps one object and describes its JSON representation"""

    def __init__(self, obj: Any):
        self.object = obj

    def data(self) -> Dict[str, Any]:
        raise NotImplementedError(f"{type(self).__name__} must implement data()")

    def to_json(self) -> str:
        return render_json(self)


class SerializerList(CacheableList):
    """Serializes a list of objects with one serializer type.

    Caching is configured on the item serializer, not on the list.
    """

    def __init__(self, objects: Iterable[Any], item_serializer: Type[Serializer]):
        self.item_serializer = item_serializer
        super().__init__([item_serializer(obj) for obj in objects], item_serializer)

    def data(self) -> List[Any]:
        return [item.data() for item in self.items]

    def to_json(self) -> str:
        return render_json(self)
