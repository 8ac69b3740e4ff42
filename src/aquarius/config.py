from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
import os
import sys

from aquarius.domain.errors import ValidationError

CONTAINER_ITEM_MAPPINGS = ("first-item", "by-index")


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    db_path: Path
    logs_dir: Path
    exports_dir: Path


@dataclass(frozen=True)
class DocumentSettings:
    stl_folio_start: int = 7573
    tre_invoice_folio_seed: int = 177
    tre_issued_at_place: str = "Tallinn, Estonia"
    # Packing list placeholders until real weights are entered by an operator.
    net_weight_factor: float = 0.90
    gross_weight_factor: float = 0.95
    volume_per_unit_m3: float = 0.05
    default_container_number: str = "TBN"
    container_item_mapping: str = "first-item"


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "AquariusTradeDocs") -> AppPaths:
    override = os.environ.get("AQUARIUS_HOME", "").strip()
    if override:
        base = Path(override)
    elif sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    logs = base / "logs"
    exports = base / "exports"
    db = base / "documents.db"

    base.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)
    exports.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, db_path=db, logs_dir=logs, exports_dir=exports)


def _env_number(env: Mapping[str, str], key: str, default, cast):
    raw = env.get(key, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ValidationError(f"{key} must be a number. Received: {raw!r}") from e
    if value < 0:
        raise ValidationError(f"{key} must be >= 0. Received: {raw!r}")
    return value


def load_document_settings(env: Optional[Mapping[str, str]] = None) -> DocumentSettings:
    env = os.environ if env is None else env
    defaults = DocumentSettings()

    mapping = env.get("AQUARIUS_CONTAINER_ITEM_MAPPING", "").strip().lower() or defaults.container_item_mapping
    if mapping not in CONTAINER_ITEM_MAPPINGS:
        raise ValidationError(
            f"AQUARIUS_CONTAINER_ITEM_MAPPING must be one of {', '.join(CONTAINER_ITEM_MAPPINGS)}. Received: {mapping!r}"
        )

    return DocumentSettings(
        stl_folio_start=_env_number(env, "AQUARIUS_STL_FOLIO_START", defaults.stl_folio_start, int),
        tre_invoice_folio_seed=_env_number(env, "AQUARIUS_TRE_INVOICE_SEED", defaults.tre_invoice_folio_seed, int),
        tre_issued_at_place=env.get("AQUARIUS_TRE_ISSUED_AT_PLACE", "").strip() or defaults.tre_issued_at_place,
        net_weight_factor=_env_number(env, "AQUARIUS_NET_WEIGHT_FACTOR", defaults.net_weight_factor, float),
        gross_weight_factor=_env_number(env, "AQUARIUS_GROSS_WEIGHT_FACTOR", defaults.gross_weight_factor, float),
        volume_per_unit_m3=_env_number(env, "AQUARIUS_VOLUME_PER_UNIT_M3", defaults.volume_per_unit_m3, float),
        default_container_number=env.get("AQUARIUS_DEFAULT_CONTAINER", "").strip() or defaults.default_container_number,
        container_item_mapping=mapping,
    )
