from __future__ import annotations

from datetime import datetime, timezone
from threading import Lock
from typing import Iterable

from ecotrack.models.schemas import Item, ItemCreate


SAMPLE_ITEMS: tuple[ItemCreate, ...] = (
    ItemCreate(name="Carbon Footprint", value=125.5, unit="kg CO2"),
    ItemCreate(name="Energy Usage", value=450.2, unit="kWh"),
    ItemCreate(name="Water Consumption", value=1250, unit="liters"),
)


class ItemStore:
    """Thread-safe, process-local item storage (resets on restart).

    Id assignment and insertion happen under one lock, so concurrent creates
    never share an id and ``list`` never sees a half-inserted item.
    """

    def __init__(self, seed: Iterable[ItemCreate] = ()) -> None:
        self._lock = Lock()
        self._items: list[Item] = []
        self._next_id = 1
        for payload in seed:
            self.create(payload)

    def create(self, payload: ItemCreate) -> Item:
        created = datetime.now(timezone.utc)
        with self._lock:
            item = Item(
                id=self._next_id,
                name=payload.name,
                value=payload.value,
                unit=payload.unit,
                created=created,
            )
            self._next_id += 1
            self._items.append(item)
        return item

    def list(self) -> list[Item]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def seeded_store() -> ItemStore:
    return ItemStore(seed=SAMPLE_ITEMS)
