# backend/posadmin/config.py
from __future__ import annotations
import os


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # What build_tree does with categories whose parent is missing: surface | promote | reject
    CATEGORY_ORPHAN_POLICY = os.environ.get("CATEGORY_ORPHAN_POLICY", "surface")

    # Breadcrumb separator for display paths
    CATEGORY_PATH_SEPARATOR = os.environ.get("CATEGORY_PATH_SEPARATOR", " > ")

    # False keeps children in collection order (legacy admin panel display)
    CATEGORY_SORT_CHILDREN = _env_flag("CATEGORY_SORT_CHILDREN", True)
