"""
HTTP client for the storefront API.

Keeps ``AuthState``, ``CartState`` and ``SearchState`` in step with what
the server returns: logging in stores the session, searching fills the
search state and a successful checkout empties the cart.
"""

from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

import httpx

from client.state import AuthState, CartState, LocalStorage, SearchState
from core.logging import get_logger


logger = get_logger(__name__)

API_PREFIX = "/api/v1"


class StorefrontAPIError(Exception):
    """Non-2xx answer from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _segment(value: str) -> str:
    """Encode one path segment; slashes and question marks included."""
    return quote(str(value), safe="")


def _handle_response(response: httpx.Response) -> Any:
    if response.is_success:
        if response.headers.get("content-type", "").startswith("application/json"):
            return response.json()
        return response.content

    try:
        message = response.json().get("message") or response.reason_phrase
    except ValueError:
        message = response.text or response.reason_phrase
    raise StorefrontAPIError(response.status_code, message)


class StorefrontClient:
    """
    Synchronous client; pass ``http`` to reuse an existing httpx.Client
    (FastAPI's TestClient works too).
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        storage: LocalStorage | Path | str = ".storefront.json",
        *,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.storage = storage if isinstance(storage, LocalStorage) else LocalStorage(storage)
        self.auth = AuthState(self.storage, on_change=self._set_token)
        self.cart = CartState(self.storage)
        self.search_state = SearchState()

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "StorefrontClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _set_token(self, token: Optional[str]) -> None:
        if token:
            self.http.headers["Authorization"] = token
        else:
            self.http.headers.pop("Authorization", None)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.http.request(method, f"{API_PREFIX}{path}", **kwargs)
        return _handle_response(response)

    # =========================================
    # Auth
    # =========================================

    def register(self, **fields: Any) -> dict:
        return self._request("POST", "/auth/register", json=fields)

    def login(self, email: str, password: str) -> dict:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.auth.set_auth(data["user"], data["token"])
        logger.info("Signed in", user_id=data["user"]["_id"])
        return data

    def logout(self) -> None:
        self.auth.logout()

    def forgot_password(self, email: str, answer: str, new_password: str) -> dict:
        return self._request(
            "POST",
            "/auth/forgot-password",
            json={"email": email, "answer": answer, "new_password": new_password},
        )

    def update_profile(self, **fields: Any) -> dict:
        data = self._request("PUT", "/auth/profile", json=fields)
        self.auth.update_user(data["updated_user"])
        return data

    def check_session(self, admin: bool = False) -> bool:
        """True while the stored token is accepted (as admin, if asked)."""
        if not self.auth.is_authenticated:
            return False
        try:
            data = self._request("GET", "/auth/admin-auth" if admin else "/auth/user-auth")
        except StorefrontAPIError:
            return False
        return bool(data.get("ok"))

    # =========================================
    # Catalog
    # =========================================

    def categories(self) -> list[dict]:
        return self._request("GET", "/category/get-category")["category"]

    def create_category(self, name: str) -> dict:
        return self._request("POST", "/category/create-category", json={"name": name})["category"]

    def update_category(self, category_id: str, name: str) -> dict:
        return self._request(
            "PUT", f"/category/update-category/{_segment(category_id)}", json={"name": name}
        )["category"]

    def delete_category(self, category_id: str) -> dict:
        return self._request("DELETE", f"/category/delete-category/{_segment(category_id)}")

    def create_product(
        self,
        photo: Optional[tuple[str, bytes, str]] = None,
        **fields: Any,
    ) -> dict:
        """``photo`` is an httpx file tuple: (filename, content, content_type)."""
        data = {key: str(value) for key, value in fields.items() if value is not None}
        files = {"photo": photo} if photo else None
        return self._request("POST", "/product/create-product", data=data, files=files)["product"]

    def update_product(
        self,
        product_id: str,
        photo: Optional[tuple[str, bytes, str]] = None,
        **fields: Any,
    ) -> dict:
        """Send the full form again; the stored photo is kept unless ``photo`` is given."""
        data = {key: str(value) for key, value in fields.items() if value is not None}
        files = {"photo": photo} if photo else None
        return self._request(
            "PUT", f"/product/update-product/{_segment(product_id)}", data=data, files=files
        )["product"]

    def delete_product(self, product_id: str) -> dict:
        return self._request("DELETE", f"/product/delete-product/{_segment(product_id)}")

    def latest_products(self) -> list[dict]:
        return self._request("GET", "/product/get-product")["products"]

    def product(self, slug: str) -> dict:
        return self._request("GET", f"/product/get-product/{_segment(slug)}")["product"]

    def product_photo(self, product_id: str) -> bytes:
        return self._request("GET", f"/product/product-photo/{_segment(product_id)}")

    def product_count(self) -> int:
        return self._request("GET", "/product/product-count")["total"]

    def product_page(self, page: int = 1) -> list[dict]:
        return self._request("GET", f"/product/product-list/{page}")["products"]

    def filter_products(
        self,
        category_ids: Optional[list[str]] = None,
        price_range: Optional[list[float]] = None,
    ) -> list[dict]:
        body = {"checked": category_ids or [], "radio": price_range or []}
        return self._request("POST", "/product/product-filters", json=body)["products"]

    def search(self, keyword: str) -> list[dict]:
        results = self._request("GET", f"/product/search/{_segment(keyword)}")
        self.search_state.set(keyword, results)
        return results

    def related_products(self, product_id: str, category_id: str) -> list[dict]:
        return self._request("GET", f"/product/related-product/{_segment(product_id)}/{_segment(category_id)}")["products"]

    def category_products(self, slug: str) -> dict:
        return self._request("GET", f"/product/product-category/{_segment(slug)}")

    # =========================================
    # Checkout and orders
    # =========================================

    def client_token(self) -> str:
        return self._request("GET", "/product/braintree/token")["client_token"]

    def checkout(self, nonce: str) -> dict:
        """Pay for the cart; the cart is emptied only when the order is placed."""
        cart = [{"_id": item["_id"]} for item in self.cart.items]
        data = self._request("POST", "/product/braintree/payment", json={"nonce": nonce, "cart": cart})
        self.cart.clear()
        logger.info("Order placed", order_id=data.get("order_id"))
        return data

    def orders(self) -> list[dict]:
        return self._request("GET", "/auth/orders")

    def all_orders(self) -> list[dict]:
        return self._request("GET", "/auth/all-orders")

    def update_order_status(self, order_id: str, status: str) -> dict:
        return self._request("PUT", f"/auth/order-status/{_segment(order_id)}", json={"status": status})
