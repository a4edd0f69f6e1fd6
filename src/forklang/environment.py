"""Variable storage: a chain of frames passed explicitly through evaluation."""

from __future__ import annotations

from collections.abc import MutableMapping


class Environment(MutableMapping[str, object]):
    """One frame of bindings plus a link to the enclosing frame.

    Block frames link to the frame they were opened in. Function frames link
    straight to the root frame: functions see globals and their own locals,
    never the locals of their caller or of an enclosing block.
    """

    def __init__(self, data: MutableMapping[str, object] | None = None, parent: "Environment | None" = None) -> None:
        self.data: dict[str, object] = {} if data is None else dict(data)
        self.parent = parent

    @property
    def root(self) -> "Environment":
        current = self
        while current.parent is not None:
            current = current.parent
        return current

    def child(self) -> "Environment":
        return Environment(parent=self)

    def call_frame(self) -> "Environment":
        return Environment(parent=self.root)

    def find_scope(self, key: str) -> "Environment | None":
        current: Environment | None = self
        while current is not None:
            if key in current.data:
                return current
            current = current.parent
        return None

    def __getitem__(self, key: str) -> object:
        scope = self.find_scope(key)
        if scope is None:
            raise KeyError(key)
        return scope.data[key]

    def __setitem__(self, key: str, value: object) -> None:
        self.data[key] = value

    def __delitem__(self, key: str) -> None:
        del self.data[key]

    def __iter__(self):
        seen: set[str] = set()
        current: Environment | None = self
        while current is not None:
            for key in current.data:
                if key not in seen:
                    seen.add(key)
                    yield key
            current = current.parent

    def __len__(self) -> int:
        return sum(1 for _ in self.__iter__())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.find_scope(key) is not None

    def define(self, key: str, value: object) -> None:
        self.data[key] = value

    def lookup(self, key: str) -> object:
        try:
            return self[key]
        except KeyError:
            raise NameError(f"undefined name {key!r}") from None

    def set_existing(self, key: str, value: object) -> None:
        scope = self.find_scope(key)
        if scope is None:
            raise NameError(f"cannot assign undefined name {key!r}")
        scope.data[key] = value
