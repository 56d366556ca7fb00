from __future__ import annotations

from strain_api.config import settings
from strain_api.services.resources import AlgorithmResources


def test_list_algorithms(resources):
    assert resources.list_algorithms() == ["StrainEst"]


def test_list_algorithms_without_scripts_dir(tmp_path):
    assert AlgorithmResources(tmp_path / "missing").list_algorithms() == []


def test_workflow_source(resources):
    assert resources.workflow_source("StrainEst") == b"workflow StrainEst {}\n"
    assert resources.workflow_source("BIB") is None


def test_species_for(resources):
    assert resources.species_for("StrainEst") == ["ecoli"]
    assert resources.species_for("BIB") is None


def test_name_mapping_keeps_two_column_lines(resources):
    assert resources.name_mapping("StrainEst", "ecoli") == {"GCF_000831565.1": "Esch_coli_ECC-1470"}


def test_name_mapping_missing_file(resources):
    assert resources.name_mapping("StrainEst", "salmonella") == {}


def test_phylo_tree(resources):
    assert resources.phylo_tree("ecoli") == "(A:0.1,B:0.2);"
    assert resources.phylo_tree("salmonella") == ""
    assert resources.phylo_tree(None) == ""


def test_path_traversal_names_are_rejected(resources):
    assert resources.workflow_source("../StrainEst") is None
    assert resources.species_for("..") is None
    assert resources.name_mapping("StrainEst", "../../etc/passwd") == {}
    assert resources.phylo_tree("../phylotrees/ecoli") == ""


def test_packaged_resources():
    packaged = AlgorithmResources(settings.resources_dir)
    assert "StrainEst" in packaged.list_algorithms()
    assert packaged.species_for("StrainEst") == ["ecoli"]
    assert packaged.phylo_tree("ecoli").startswith("(")
