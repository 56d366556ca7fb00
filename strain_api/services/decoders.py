"""
Result decoders for algorithm outputs.
Maps an algorithm identifier to the parser for its abundance file.
"""
from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from typing import Dict, Type

from strain_api.services.resources import AlgorithmResources

logger = logging.getLogger(__name__)

# Length of the "_genomic.fna" suffix on StrainEst reference names.
GENOME_SUFFIX_LENGTH = 12


class ResultDecoder(ABC):
    """Base class for per-algorithm result parsers."""

    algorithm: str = ""

    def __init__(self, resources: AlgorithmResources):
        self.resources = resources

    @abstractmethod
    def decode(self, raw: str, species: str) -> Dict[str, float]:
        """Turn a raw result file into a display name -> abundance mapping."""


class NullDecoder(ResultDecoder):
    """Stand-in for algorithms without a parser; always decodes to nothing."""

    def __init__(self, resources: AlgorithmResources | None = None, algorithm: str = ""):
        self.resources = resources
        self.algorithm = algorithm

    def decode(self, raw: str, species: str) -> Dict[str, float]:
        logger.warning("Reading abundances for algorithm %r is not defined", self.algorithm)
        return {}


class StrainEstDecoder(ResultDecoder):
    algorithm = "StrainEst"

    def decode(self, raw: str, species: str) -> Dict[str, float]:
        lines = raw.split("\n")
        # header first, trailing artifact last
        rows = lines[1:-1]
        mapping = self.resources.name_mapping(self.algorithm, species)

        abundances: Dict[str, float] = {}
        for row in rows:
            columns = row.split("\t")
            if len(columns) < 2:
                logger.debug("Skipping malformed StrainEst row %r", row)
                continue
            name = columns[0]
            try:
                abundance = float(columns[1])
            except ValueError:
                logger.debug("Skipping StrainEst row with non-numeric abundance %r", row)
                continue
            if not math.isfinite(abundance):
                logger.debug("Skipping StrainEst row with non-finite abundance %r", row)
                continue
            if abundance == 0:
                continue

            parts = name.split("_")
            lookup_key = "_".join(parts[:2])
            display_name = name[len(lookup_key) + 1:len(name) - GENOME_SUFFIX_LENGTH]
            abundances[mapping.get(lookup_key, display_name)] = abundance
        return abundances


DECODER_CLASS_MAP: Dict[str, Type[ResultDecoder]] = {
    "StrainEst": StrainEstDecoder,
}


class DecoderRegistry:
    """Holds one decoder instance per algorithm identifier."""

    def __init__(self, resources: AlgorithmResources):
        self.resources = resources
        self._decoders: Dict[str, ResultDecoder] = {}

    def register(self, algorithm: str, decoder: ResultDecoder) -> None:
        self._decoders[algorithm] = decoder

    def get(self, algorithm: str) -> ResultDecoder:
        """Return the decoder for an algorithm, or a NullDecoder if none is registered."""
        decoder = self._decoders.get(algorithm)
        if decoder is None:
            return NullDecoder(self.resources, algorithm=algorithm)
        return decoder

    def algorithms(self) -> list[str]:
        return sorted(self._decoders)

    def read_abundances(self, raw: str, algorithm: str, species: str) -> Dict[str, float]:
        return self.get(algorithm).decode(raw, species)


def build_registry(resources: AlgorithmResources) -> DecoderRegistry:
    registry = DecoderRegistry(resources)
    for algorithm, decoder_class in DECODER_CLASS_MAP.items():
        registry.register(algorithm, decoder_class(resources))
    return registry
