"""
Read-only lookups of per-algorithm side files.

Layout under the resources root:

    wdl-scripts/<algorithm>.wdl
    <algorithm>/species/<algorithm>.json
    <algorithm>/mapping/<algorithm>_<species>.tsv
    phylotrees/<species>.nwk

A missing file is an expected case, so every lookup returns an empty value
(None, {} or "") instead of raising.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Resource names come from URLs and request bodies; keep them to a single path segment.
_SAFE_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.\-]*$")


def _is_safe(name: str) -> bool:
    return bool(name) and bool(_SAFE_NAME.match(name)) and ".." not in name


class AlgorithmResources:
    def __init__(self, root: Path | str):
        self.root = Path(root)

    def list_algorithms(self) -> list[str]:
        scripts = self.root / "wdl-scripts"
        if not scripts.is_dir():
            return []
        return sorted(path.name.split(".", 1)[0] for path in scripts.iterdir() if path.is_file())

    def workflow_source(self, algorithm: str) -> bytes | None:
        if not _is_safe(algorithm):
            return None
        path = self.root / "wdl-scripts" / f"{algorithm}.wdl"
        return path.read_bytes() if path.is_file() else None

    def species_for(self, algorithm: str) -> list[Any] | None:
        if not _is_safe(algorithm):
            return None
        path = self.root / algorithm / "species" / f"{algorithm}.json"
        if not path.is_file():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def name_mapping(self, algorithm: str, species: str) -> dict[str, str]:
        """Load the `lookupKey<TAB>displayName` table for an (algorithm, species) pair."""
        if not (_is_safe(algorithm) and _is_safe(species)):
            return {}
        path = self.root / algorithm / "mapping" / f"{algorithm}_{species}.tsv"
        if not path.is_file():
            logger.info("No mapping file found for %s/%s", algorithm, species)
            return {}

        mapping: dict[str, str] = {}
        for line in path.read_text(encoding="utf-8").split("\n"):
            columns = line.split("\t")
            if len(columns) == 2:
                mapping[columns[0]] = columns[1].split("\r")[0]
        return mapping

    def phylo_tree(self, species: str | None) -> str:
        """Return the stored .nwk tree for a species, or an empty string."""
        if not species or not _is_safe(species):
            return ""
        path = self.root / "phylotrees" / f"{species}.nwk"
        return path.read_text(encoding="utf-8") if path.is_file() else ""
