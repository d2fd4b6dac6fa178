# tests/conftest.py
"""Shared fixtures; keeps session log files out of the user's home directory."""

import os
import tempfile

import pytest

os.environ.setdefault("PHENOATTR_LOG_DIR", tempfile.mkdtemp(prefix="phenoattr-logs-"))


@pytest.fixture
def full_tree():
    """A map exercising every kind, including empty containers and null."""
    from phenoattr.attributes import AttributeValue as V
    from phenoattr.attributes import Attributes
    from phenoattr.schemas import Analysis, Experiment, ExternalReference, OntologyClass

    inner = Attributes()
    inner.set("empty", [])
    inner.set("nested", [V.of_list([V.of_int32(-7), V.of_list([])])])

    attrs = Attributes()
    attrs.set("color", [V.of_string("red"), V.of_string("blue")])
    attrs.set("count", [V.of_int64(2**40), V.of_int32(12)])
    attrs.set("flags", [V.of_bool(True), V.of_bool(False)])
    attrs.set("score", [V.of_double(0.25)])
    attrs.set("note", [V.null()])
    attrs.set("tissue", [V.of_ontology_class(OntologyClass(id="UBERON:0002107", label="liver"))])
    attrs.set("source", [V.of_external_reference(ExternalReference(id="PMID:30962759", description="cohort"))])
    attrs.set("assay", [V.of_experiment(Experiment(id="exp-1", instrument="NovaSeq 6000"))])
    attrs.set("pipeline", [V.of_analysis(Analysis(id="ana-1", created_by="pipeline"))])
    attrs.set("inner", [V.of_map(inner), V.of_map(None)])
    attrs.set("unicode", [V.of_string("Müller ✓ 日本")])
    return V.of_map(attrs)


@pytest.fixture
def nested_lists():
    """Factory: ``depth`` lists wrapped around a single int32 leaf."""
    from phenoattr.attributes import AttributeValue

    def build(depth):
        value = AttributeValue.of_int32(0)
        for _ in range(depth):
            value = AttributeValue.of_list([value])
        return value

    return build
