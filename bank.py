# bank.py

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from questions import DEMO_SECTION
from schemas.exam import Item, Section

logger = logging.getLogger(__name__)

_BASE = Path(__file__).resolve().parent
_DATA_DIR = _BASE / "data" / "sections"  # one section per record, .json or .jsonl


def _iter_jsonl(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        for line in f:
            s = line.strip()
            if not s or s.startswith("#") or s.startswith("//"):
                continue
            try:
                yield json.loads(s)
            except json.JSONDecodeError:
                # Skip malformed rows instead of failing the whole bank
                logger.warning("skipping malformed line in %s", p.name)
                continue


def _iter_json(p: Path) -> Iterable[Dict[str, Any]]:
    with p.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("skipping unreadable bank file %s", p.name)
            return
    if isinstance(data, list):
        yield from data
    elif isinstance(data, dict):
        yield data


class SectionBank:
    _sections: List[Section] = []

    @classmethod
    def load(cls) -> List[Section]:
        if not cls._sections:
            cls.reload()
        return cls._sections

    @classmethod
    def reload(cls, data_dir: Path = _DATA_DIR) -> int:
        sections: List[Section] = []

        if data_dir.exists():
            for p in sorted(data_dir.rglob("*")):
                if not p.is_file():
                    continue
                suf = p.suffix.lower()
                if suf == ".jsonl":
                    source = _iter_jsonl(p)
                elif suf == ".json":
                    source = _iter_json(p)
                else:
                    continue

                for raw in source:
                    try:
                        sections.append(Section.model_validate(raw))
                    except ValidationError:
                        logger.warning("skipping invalid section record in %s", p.name)
                        continue

        # Demo content when nothing valid was found
        if not sections:
            sections = [Section.model_validate(DEMO_SECTION)]

        cls._sections = sections
        return sum(len(s.items) for s in sections)


# Public API
def get_sections() -> List[Section]:
    return SectionBank.load()


def find_item(item_id: str) -> Optional[tuple[Section, Item]]:
    for section in get_sections():
        for item in section.items:
            if item.id == item_id:
                return section, item
    return None


def reload_bank() -> int:
    return SectionBank.reload()
