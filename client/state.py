"""
Client-side state: auth session, cart and search results.

Auth and cart survive restarts through ``LocalStorage``, a small JSON file
keyed like a browser's localStorage. Search results live in memory only.
"""

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Optional

from core.logging import get_logger


logger = get_logger(__name__)

AUTH_KEY = "auth"
CART_KEY = "cart"


class LocalStorage:
    """Key/value store persisted as one JSON document."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._data: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable local storage", path=str(self.path))
            return {}
        return data if isinstance(data, dict) else {}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data), encoding="utf-8")

    def get_item(self, key: str) -> Any:
        return self._data.get(key)

    def set_item(self, key: str, value: Any) -> None:
        self._data[key] = value
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        self._data = {}
        self._flush()


class AuthState:
    """
    Signed-in user and token.

    ``on_change`` receives the token (or None) whenever the session changes;
    the API client uses it to keep its Authorization header in sync.
    """

    def __init__(
        self,
        storage: LocalStorage,
        on_change: Optional[Callable[[Optional[str]], None]] = None,
    ):
        self.storage = storage
        self.on_change = on_change
        saved = storage.get_item(AUTH_KEY) or {}
        self.user: Optional[dict[str, Any]] = saved.get("user")
        self.token: str = saved.get("token") or ""
        self._notify()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def is_admin(self) -> bool:
        return bool(self.user) and self.user.get("role") == 1

    def set_auth(self, user: dict[str, Any], token: str) -> None:
        self.user = user
        self.token = token
        self.storage.set_item(AUTH_KEY, {"user": user, "token": token})
        self._notify()

    def update_user(self, user: dict[str, Any]) -> None:
        """Replace the cached profile, keeping the token."""
        self.set_auth(user, self.token)

    def logout(self) -> None:
        self.user = None
        self.token = ""
        self.storage.remove_item(AUTH_KEY)
        self._notify()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.token or None)


class CartState:
    """Products picked for checkout, in the order they were added."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.items: list[dict[str, Any]] = list(storage.get_item(CART_KEY) or [])

    def __len__(self) -> int:
        return len(self.items)

    def add(self, product: dict[str, Any]) -> None:
        self.items.append(product)
        self._save()

    def remove(self, product_id: str) -> bool:
        # Only the first match; the same product may sit in the cart twice
        for index, item in enumerate(self.items):
            if item.get("_id") == product_id:
                del self.items[index]
                self._save()
                return True
        return False

    def clear(self) -> None:
        self.items = []
        self.storage.remove_item(CART_KEY)

    def total(self) -> Decimal:
        return sum(
            (Decimal(str(item.get("price") or 0)) for item in self.items),
            Decimal("0"),
        )

    def _save(self) -> None:
        self.storage.set_item(CART_KEY, self.items)


class SearchState:
    """Last search keyword and its results."""

    def __init__(self):
        self.keyword: str = ""
        self.results: list[dict[str, Any]] = []

    def set(self, keyword: str, results: list[dict[str, Any]]) -> None:
        self.keyword = keyword
        self.results = results

    def reset(self) -> None:
        self.keyword = ""
        self.results = []
