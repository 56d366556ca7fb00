import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault('APP_ENV', 'test')
os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
os.environ.setdefault('GOOGLE_CLIENT_ID', 'test-client.apps.googleusercontent.com')
os.environ.setdefault('GOOGLE_CLIENT_SECRET', 'test-client-secret')
os.environ.setdefault('PROJECT_ID', 'test-project')

from typing import Any, Callable

import httplib2
import httpx
import pytest
from googleapiclient.errors import HttpError
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from strain_api.core.security import CredentialBinder
from strain_api.integrations.cromwell import CromwellClient
from strain_api.models import Base
from strain_api.services.resources import AlgorithmResources
from strain_api.services.workflow_store import WorkflowStore

STRAINEST_OUTPUT = (
    'strain\tabundance'
    '\nGCF_000831565.1_ASM83156v1_genomic.fna\t0.100000'
    '\nGCF_000242055.1_Esch_coli_TA124_V1_genomic.fna\t0.200000'
    '\nGCF_000194415.1_ASM19441v2_genomic.fna\t0.000000\n'
)

ID_TOKENS = {
    'valid-token': {'email': 'ok@example.com'},
    'new-user-token': {'email': 'new@example.com'},
    'no-email-token': {'sub': '1234'},
}


def fake_verifier(token: str, audience: str) -> dict:
    """Stands in for Google's id token verification."""
    if token not in ID_TOKENS:
        raise ValueError('Wrong number of segments in token')
    return ID_TOKENS[token]


class RecordingHandler:
    """Replays queued responses for httpx.MockTransport and records the requests it saw."""

    def __init__(self, responses: list[Any] | None = None):
        self.responses = list(responses or [])
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            return httpx.Response(500, json={'error': 'No more mock responses'})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class FakeRequest:
    def __init__(self, result: Any = None, error: Exception | None = None):
        self.result = result
        self.error = error

    def execute(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.result


class FakeStorageService:
    """The subset of the googleapiclient storage v1 resource the app uses."""

    def __init__(self):
        self.objects_store: dict[tuple[str, str], bytes] = {}
        self.object_error: Exception | None = None
        self.bucket_error: Exception | None = None
        self.media_calls: list[tuple[str, str]] = []
        self.bucket_calls: list[tuple[str, dict]] = []

    def objects(self) -> 'FakeStorageService':
        return self

    def buckets(self) -> 'FakeStorageService':
        return self

    def get_media(self, bucket: str, object: str) -> FakeRequest:
        self.media_calls.append((bucket, object))
        if self.object_error is not None:
            return FakeRequest(error=self.object_error)
        if (bucket, object) not in self.objects_store:
            return FakeRequest(error=HttpError(httplib2.Response({'status': 404, 'reason': 'Not Found'}), b'{}'))
        return FakeRequest(result=self.objects_store[(bucket, object)])

    def insert(self, project: str, body: dict) -> FakeRequest:
        self.bucket_calls.append((project, body))
        return FakeRequest(result={'name': body['name']}, error=self.bucket_error)


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def store(db_session) -> WorkflowStore:
    return WorkflowStore(db_session)


@pytest.fixture
def resources(tmp_path) -> AlgorithmResources:
    (tmp_path / 'wdl-scripts').mkdir()
    (tmp_path / 'wdl-scripts' / 'StrainEst.wdl').write_text('workflow StrainEst {}\n')
    (tmp_path / 'StrainEst' / 'mapping').mkdir(parents=True)
    (tmp_path / 'StrainEst' / 'mapping' / 'StrainEst_ecoli.tsv').write_bytes(
        b'GCF_000831565.1\tEsch_coli_ECC-1470\r\nmalformed line\n'
    )
    (tmp_path / 'StrainEst' / 'species').mkdir()
    (tmp_path / 'StrainEst' / 'species' / 'StrainEst.json').write_text('["ecoli"]')
    (tmp_path / 'phylotrees').mkdir()
    (tmp_path / 'phylotrees' / 'ecoli.nwk').write_text('(A:0.1,B:0.2);')
    return AlgorithmResources(tmp_path)


@pytest.fixture
def storage_service() -> FakeStorageService:
    return FakeStorageService()


@pytest.fixture
def service_factory(storage_service) -> Callable[[Any], FakeStorageService]:
    return lambda credentials: storage_service


@pytest.fixture
def binder(store) -> CredentialBinder:
    return CredentialBinder(
        store,
        client_id='test-client.apps.googleusercontent.com',
        client_secret='test-client-secret',
        verifier=fake_verifier,
    )


@pytest.fixture
def strainest_output() -> str:
    return STRAINEST_OUTPUT


@pytest.fixture
def cromwell_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def cromwell(cromwell_handler) -> CromwellClient:
    return CromwellClient('http://localhost:8000/', transport=httpx.MockTransport(cromwell_handler))


@pytest.fixture
def http_error() -> Callable[..., HttpError]:
    def _make(status: int, reason: str = '') -> HttpError:
        return HttpError(httplib2.Response({'status': status, 'reason': reason}), b'{}')

    return _make


@pytest.fixture
def token_handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def signing_binder(store, token_handler) -> CredentialBinder:
    return CredentialBinder(
        store,
        client_id='test-client.apps.googleusercontent.com',
        client_secret='test-client-secret',
        verifier=fake_verifier,
        transport=httpx.MockTransport(token_handler),
    )
