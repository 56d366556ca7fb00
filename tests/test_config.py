from __future__ import annotations

import pytest
from pydantic import ValidationError

from strain_api.config import Settings


def test_environment_values_are_normalised():
    settings = Settings(
        API_V1_PREFIX="/api/v1/",
        CORS_ORIGINS="http://localhost:8080, https://strains.example.org,",
        CROMWELL_URL="http://cromwell:8000",
        PROJECT_ID="metagenomics-1",
    )
    assert settings.api_v1_prefix == "/api/v1"
    assert settings.cors_origins == ["http://localhost:8080", "https://strains.example.org"]
    assert str(settings.cromwell_url) == "http://cromwell:8000/"
    assert settings.bucket_name == "cromwell-metagenomics-1"


@pytest.mark.parametrize(
    "overrides",
    [
        {"API_V1_PREFIX": "api/v1"},
        {"DATABASE_URL": "mysql://root@localhost/strains"},
    ],
)
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_resources_default_to_packaged_directory():
    assert (Settings().resources_dir / "wdl-scripts" / "StrainEst.wdl").is_file()
