from __future__ import annotations

from collections.abc import Iterator, Mapping

from document_ledger.exceptions import InvalidArgumentError


class AccountMapping(Mapping[str, str]):
    """Immutable, case-insensitive map from account key to account id.

    Generators take one at construction and only read it, so a mapping can be
    shared by concurrent generations. The with_* helpers return new mappings.
    """

    def __init__(self, mappings: Mapping[str, str] | None = None) -> None:
        self._items: dict[str, tuple[str, str]] = {}
        for key, account_id in (mappings or {}).items():
            if not key:
                raise InvalidArgumentError("account_key", "must not be empty")
            self._items[key.lower()] = (key, account_id)

    def __getitem__(self, key: str) -> str:
        return self._items[key.lower()][1]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"AccountMapping({dict(self.items())!r})"

    def resolve(self, key: str | None) -> str | None:
        if not key:
            return None
        entry = self._items.get(key.lower())
        return entry[1] if entry else None

    def with_mapping(self, key: str, account_id: str) -> AccountMapping:
        return self.merged({key: account_id})

    def merged(self, mappings: Mapping[str, str]) -> AccountMapping:
        combined = dict(self.items())
        for key, account_id in mappings.items():
            for existing in [k for k in combined if k.lower() == key.lower()]:
                del combined[existing]
            combined[key] = account_id
        return AccountMapping(combined)
