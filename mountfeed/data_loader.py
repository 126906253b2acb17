"""
MountFeed — mountfeed/data_loader.py
JIT Data Loaders for TOML item blueprints powered by Pydantic.
==============================================================
Version:     0.2
Stack:       Python 3.11+ | Pydantic v2 | tomllib
Status:      Core data validation and loading layer.
"""

import tomllib
from pathlib import Path
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

# ================================================================================
# SCHEMAS
# ================================================================================

class ItemDef(BaseModel):
    model_config = ConfigDict(frozen=True)
    id: str
    name: str
    description: str
    value: int = 10
    food_type: int = 0          # 0 = not edible
    item_level: int = Field(default=1, ge=0)
    stackable: Optional[Dict[str, int]] = None

# ================================================================================
# LOADERS & CACHE (JIT)
# ================================================================================

_ITEM_CACHE: Dict[str, ItemDef] = {}

DATA_DIR = Path(__file__).parent.parent / "data"

def get_item_def(item_path: str) -> ItemDef:
    """JIT loads an item definition from TOML (e.g. 'consumables/mutton_chop')."""
    if item_path in _ITEM_CACHE:
        return _ITEM_CACHE[item_path]

    path = DATA_DIR / "items" / f"{item_path}.toml"
    if not path.exists():
        raise FileNotFoundError(f"Item definition not found: {path}")

    with open(path, "rb") as f:
        data = tomllib.load(f)

    item = ItemDef(**data)
    _ITEM_CACHE[item_path] = item
    return item

def get_item_defs(category: str) -> List[ItemDef]:
    """Pre-loads every blueprint in one item category directory."""
    path = DATA_DIR / "items" / category
    if not path.exists():
        return []

    return [get_item_def(f"{category}/{file.stem}") for file in sorted(path.glob("*.toml"))]
