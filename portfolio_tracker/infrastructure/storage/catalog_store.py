"""Storage helpers for the asset catalogue override."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from portfolio_tracker.config import DEFAULT_ASSETS
from portfolio_tracker.domain.models import AssetCatalog, AssetCategory, AssetDefinition
from portfolio_tracker.errors import ConfigurationError

logger = logging.getLogger(__name__)


def _normalize_catalog(raw: Any) -> list[AssetDefinition]:
    if not isinstance(raw, list):
        raise ConfigurationError("Asset catalogue must be a JSON list")
    definitions: list[AssetDefinition] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ConfigurationError(f"Asset entry must be an object, got {item!r}")
        name = str(item.get("name") or "").strip()
        if not name:
            raise ConfigurationError(f"Asset entry has no name: {item!r}")
        try:
            category = AssetCategory(str(item.get("category", "")).strip().lower())
        except ValueError as exc:
            raise ConfigurationError(f"Unknown category for asset {name!r}: {item.get('category')!r}") from exc
        definitions.append(AssetDefinition(name=name, category=category))
    return definitions


def load_catalog(path: Path | None = None) -> AssetCatalog:
    if path is None or not path.exists():
        return AssetCatalog(DEFAULT_ASSETS)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return AssetCatalog(_normalize_catalog(data))
    except (OSError, json.JSONDecodeError, ConfigurationError) as exc:
        logger.error("Ignoring invalid asset catalogue %s: %s", path, exc)
        return AssetCatalog(DEFAULT_ASSETS)


def save_catalog(definitions: Iterable[AssetDefinition], path: Path) -> AssetCatalog:
    catalog = AssetCatalog(definitions)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            [{"name": d.name, "category": d.category.value} for d in catalog],
            ensure_ascii=False,
            indent=2,
        ),
        encoding="utf-8",
    )
    return catalog
