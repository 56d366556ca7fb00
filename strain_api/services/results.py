from __future__ import annotations

import logging
from typing import Dict

from strain_api.core.security import CredentialBinder
from strain_api.integrations.storage import GoogleStorage, ResultLocation
from strain_api.services.decoders import DecoderRegistry

logger = logging.getLogger(__name__)


class ResultRetriever:
    """Fetches a workflow's abundance file with the user's credential and decodes it."""

    def __init__(self, binder: CredentialBinder, storage: GoogleStorage, decoders: DecoderRegistry):
        self.binder = binder
        self.storage = storage
        self.decoders = decoders

    async def get_result(
        self,
        email: str,
        location: ResultLocation,
        algorithm: str,
        species: str,
    ) -> Dict[str, float]:
        client = self.binder.bound_client(email)
        raw = await self.storage.fetch(location, client.credentials())
        abundances = self.decoders.read_abundances(raw, algorithm, species)
        logger.debug("Decoded %d abundances from %s/%s", len(abundances), location.bucket, location.object_path)
        return abundances
