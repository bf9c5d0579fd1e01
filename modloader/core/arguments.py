from __future__ import annotations

from typing import Iterable, List, Optional, Tuple


def _match(token: str, name: str) -> Tuple[bool, Optional[str]]:
    """
    Accepted spellings: name=value, -name=value, --name=value, -name, --name.
    Returns (matched, inline_value).
    """
    key, sep, value = token.partition("=")
    if key.lstrip("-") != name:
        return False, None
    if not key.startswith("-") and not sep:
        return False, None
    return True, (value if sep else None)


class ArgumentHelper:
    """Holds the loader's own command line; everything is forwarded verbatim except what is removed."""

    def __init__(self, arguments: Iterable[str]):
        self._arguments: List[str] = [str(a) for a in arguments]

    @property
    def arguments(self) -> List[str]:
        return list(self._arguments)

    def _locate(self, name: str) -> Tuple[int, int, Optional[str]]:
        """(index, token_count, value) or (-1, 0, None)."""
        for i, token in enumerate(self._arguments):
            matched, value = _match(token, name)
            if not matched:
                continue
            if value is not None:
                return i, 1, value
            nxt = self._arguments[i + 1] if i + 1 < len(self._arguments) else None
            # a separate value token is only ever a port number
            if nxt is not None and nxt.strip().isdigit():
                return i, 2, nxt
            return i, 1, None
        return -1, 0, None

    def has_argument(self, name: str) -> bool:
        return self._locate(name)[0] >= 0

    def get_argument(self, name: str) -> Optional[str]:
        return self._locate(name)[2]

    def get_int_argument(self, name: str) -> Optional[int]:
        value = self.get_argument(name)
        try:
            return int(str(value).strip()) if value is not None else None
        except ValueError:
            return None

    def remove_argument(self, name: str) -> None:
        while True:
            idx, count, _ = self._locate(name)
            if idx < 0:
                return
            del self._arguments[idx : idx + count]


def strip_argument(arguments: Iterable[str], name: str) -> List[str]:
    helper = ArgumentHelper(arguments)
    helper.remove_argument(name)
    return helper.arguments
