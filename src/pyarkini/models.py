from __future__ import annotations

from dataclasses import dataclass

from .aggregate import AggregateIniValue, aggregate_field


@dataclass
class NPCReplacement(AggregateIniValue):
    """Swap one creature class for another when the server spawns it.

    An entry whose source and target are the same class is a no-op and is
    not written.
    """

    from_class_name: str = aggregate_field("FromClassName", default="")
    to_class_name: str = aggregate_field("ToClassName", default="")

    def is_equivalent(self, other: AggregateIniValue) -> bool:
        if not isinstance(other, NPCReplacement):
            return False
        return self.from_class_name.lower() == other.from_class_name.lower()

    def get_sort_key(self) -> str:
        return self.from_class_name

    def should_save(self) -> bool:
        return self.from_class_name.lower() != self.to_class_name.lower()
