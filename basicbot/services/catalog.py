"""Product catalog clients: remote service and bundled JSON file."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from basicbot.core.errors import CollaboratorError
from basicbot.services.base import Product, ProductCatalog
from basicbot.state.models import ShoppingRecord

CATEGORY_ENDPOINT = "api/Products/ProductByCategorie"


class HttpProductCatalog(ProductCatalog):
    """POST the shopping record to the catalog service and parse the product list."""

    name = "catalog"

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = f"{str(base_url).rstrip('/')}/{CATEGORY_ENDPOINT}"
        self._timeout = timeout
        self._transport = transport
        self._logger = logging.getLogger("basicbot.services.catalog")

    async def find_products(self, record: ShoppingRecord) -> list[Product]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._url,
                    json=record.to_catalog_payload(),
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CollaboratorError(self.name, str(exc)) from exc

        if data is None:
            return []
        if not isinstance(data, list):
            raise CollaboratorError(self.name, "expected a JSON array of products")

        try:
            products = [Product.from_payload(item) for item in data if isinstance(item, dict)]
        except (TypeError, ValueError) as exc:
            raise CollaboratorError(self.name, f"malformed product: {exc}") from exc
        self._logger.debug("Catalog returned %d product(s) for %s", len(products), record.category)
        return products


class JsonProductCatalog(ProductCatalog):
    """Filter the bundled product list by category and price bounds."""

    name = "catalog-file"

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._products: list[Product] | None = None
        self._logger = logging.getLogger("basicbot.services.catalog")

    def _load(self) -> list[Product]:
        if self._products is not None:
            return self._products

        if not self.path.exists():
            self._logger.warning("Product catalog missing at %s", self.path)
            self._products = []
            return self._products

        with self.path.open("r", encoding="utf-8") as handle:
            data: Any = json.load(handle)

        if not isinstance(data, list):
            raise CollaboratorError(self.name, f"{self.path} must hold a JSON array of products")

        try:
            self._products = [Product.from_payload(item) for item in data if isinstance(item, dict)]
        except (TypeError, ValueError) as exc:
            raise CollaboratorError(self.name, f"malformed product in {self.path}: {exc}") from exc
        return self._products

    async def find_products(self, record: ShoppingRecord) -> list[Product]:
        matches = []
        for product in self._load():
            if record.category and product.category.lower() != record.category.lower():
                continue
            if record.price_min and product.price < record.price_min:
                continue
            if record.price_max and product.price > record.price_max:
                continue
            matches.append(product)
        return matches
