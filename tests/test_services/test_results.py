from __future__ import annotations

import pytest
from google.auth.exceptions import RefreshError

from strain_api.core.exceptions import AuthError, NotFoundError
from strain_api.integrations.storage import GoogleStorage, ResultLocation
from strain_api.services.decoders import build_registry
from strain_api.services.results import ResultRetriever

LOCATION = ResultLocation.for_output("cromwell-test-project", "StrainEst", "wf-1", "call-StrainEstSingle")


@pytest.fixture
def retriever(store, binder, service_factory, resources) -> ResultRetriever:
    store.create_user("ok@example.com")
    store.set_credential("ok@example.com", "refresh-1")
    return ResultRetriever(binder, GoogleStorage(service_factory=service_factory), build_registry(resources))


def test_result_location_path():
    assert LOCATION.bucket == "cromwell-test-project"
    assert LOCATION.object_path == "StrainEst/wf-1/call-StrainEstSingle/outputdir/abund.txt"


@pytest.mark.asyncio
async def test_get_result_decodes_abundances(retriever, storage_service, strainest_output):
    storage_service.objects_store[(LOCATION.bucket, LOCATION.object_path)] = strainest_output.encode()

    abundances = await retriever.get_result("ok@example.com", LOCATION, "StrainEst", "ecoli")

    assert abundances == {"Esch_coli_ECC-1470": 0.1, "Esch_coli_TA124_V1": 0.2}
    assert storage_service.media_calls == [(LOCATION.bucket, LOCATION.object_path)]


@pytest.mark.asyncio
async def test_unknown_algorithm_yields_empty_result(retriever, storage_service, strainest_output):
    storage_service.objects_store[(LOCATION.bucket, LOCATION.object_path)] = strainest_output.encode()
    assert await retriever.get_result("ok@example.com", LOCATION, "BIB", "ecoli") == {}


@pytest.mark.asyncio
async def test_missing_object_is_not_found(retriever, storage_service, http_error):
    storage_service.object_error = http_error(404, "Not Found")
    with pytest.raises(NotFoundError):
        await retriever.get_result("ok@example.com", LOCATION, "StrainEst", "ecoli")


@pytest.mark.asyncio
async def test_revoked_credential_is_auth_error(retriever, storage_service):
    storage_service.object_error = RefreshError("invalid_grant: Token has been expired or revoked.")
    with pytest.raises(AuthError):
        await retriever.get_result("ok@example.com", LOCATION, "StrainEst", "ecoli")


@pytest.mark.asyncio
async def test_user_without_credential_never_reaches_storage(retriever, store, storage_service):
    store.create_user("new@example.com")
    with pytest.raises(AuthError):
        await retriever.get_result("new@example.com", LOCATION, "StrainEst", "ecoli")
    assert storage_service.media_calls == []
