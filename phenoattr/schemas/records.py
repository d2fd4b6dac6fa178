# phenoattr/schemas/records.py
"""Pydantic models for the phenopackets core records.

These models mirror the phenopackets v1 core schema: ontology classes,
phenotypes, individuals, pedigrees, diseases, genes, variants and provenance
metadata.  Four of them (``ExternalReference``, ``OntologyClass``,
``Experiment``, ``Analysis``) double as structured leaves of the
attribute-value system; the codec treats them as opaque payloads and
serialises them through :mod:`phenoattr.attributes.payloads`.

All models are frozen so that a record stored inside an attribute tree
cannot change after it is attached.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum, IntEnum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


__all__ = [
    "Record",
    "Ontology",
    "OntologyClass",
    "ExternalReference",
    "Publication",
    "Evidence",
    "Phenotype",
    "Disease",
    "Gene",
    "AcmgClassification",
    "VariantAnnotation",
    "Variant",
    "GenomicFeature",
    "File",
    "KaryotypicSex",
    "Individual",
    "Sex",
    "AffectedStatus",
    "Person",
    "Pedigree",
    "MetaData",
    "Experiment",
    "Analysis",
]


class Record(BaseModel):
    """Base for every record: immutable, unknown keys rejected."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


# ---------------------------------------------------------------------------
# Ontologies
# ---------------------------------------------------------------------------

class Ontology(Record):
    """An ontology referenced by a phenopacket (e.g. HPO, MONDO)."""

    id: str = Field(..., description="OBO ID in lower case, e.g. 'hp', 'mondo'")
    name: str = Field("", description="Human-readable title, e.g. 'Human Phenotype Ontology'")
    namespace_prefix: str = Field("", description="CURIE prefix, e.g. 'HP'")
    url: str = Field("", description="PURL of the ontology file")
    version: str = Field("", description="versionIRI of the release in use")


class OntologyClass(Record):
    """A class (term, concept) in an ontology."""

    id: str = Field(..., min_length=1, description="CURIE, e.g. 'HP:0100024'")
    label: str = Field("", description="Class label, e.g. 'Abnormality of cardiovascular system'")


class ExternalReference(Record):
    """A pointer to a resource outside the record (publication, database entry)."""

    id: str = Field(..., min_length=1, description="CURIE or accession, e.g. 'PMID:30962759'")
    reference: str = Field("", description="Resolvable URL for the resource")
    description: str = Field("", description="Free-text description")


class Publication(Record):
    id: str = Field(..., description="e.g. ISBN, PMID:123456, DOI:...")
    title: str = ""


class Evidence(Record):
    """Evidence for a phenotype assertion."""

    eco: Optional[OntologyClass] = Field(None, description="Evidence & Conclusion Ontology code")
    publication: Optional[Publication] = None


# ---------------------------------------------------------------------------
# Phenotypes and diseases
# ---------------------------------------------------------------------------

class Phenotype(Record):
    """An individual phenotypic feature, observed as present or negated."""

    description: str = ""
    type: Optional[OntologyClass] = Field(None, description="Primary class, e.g. HP:0001363")
    negated: bool = Field(False, alias="isNegated")
    onset: Optional[OntologyClass] = Field(None, description="Subclass of HP:0003674")
    modifiers: List[OntologyClass] = Field(default_factory=list)
    assay: Optional[OntologyClass] = None
    frequency: Optional[OntologyClass] = Field(None, description="Subclass of HP:0040279")
    evidence: Optional[Evidence] = None


class Disease(Record):
    id: str = Field(..., description="e.g. MONDO:0007043, OMIM:101600")
    label: str = ""
    description: str = ""
    mode_of_inheritance: Optional[OntologyClass] = Field(None, alias="modeOfInheritance")
    phenotypes: List[Phenotype] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Genes and variants
# ---------------------------------------------------------------------------

class Gene(Record):
    id: str = Field(..., description="NCBIGene, HGNC, ENSEMBL or UCSC CURIE")
    symbol: str = Field("", description="Official gene symbol, e.g. ETF1")
    ncbi_taxon_id: int = Field(0, description="NCBI taxonomy id, e.g. 9606")


class AcmgClassification(IntEnum):
    """ACMG variant interpretation tiers (value 1 is unassigned upstream)."""

    UNCERTAIN_SIGNIFICANCE = 0
    LIKELY_BENIGN = 2
    BENIGN = 3
    LIKELY_PATHOGENIC = 4
    PATHOGENIC = 5


class VariantAnnotation(Record):
    variant_effect: Optional[OntologyClass] = Field(None, alias="variantEffect")
    acmg_classification: AcmgClassification = AcmgClassification.UNCERTAIN_SIGNIFICANCE
    acmg_code: List[str] = Field(default_factory=list, description="e.g. PVS1, BP7")


class Variant(Record):
    """A variant in SPDI form (sequence, position, deletion, insertion)."""

    sequence: str = Field(..., description="Sequence accession, e.g. NC_000010.10")
    position: int = Field(0, ge=0, description="Zero-based position")
    deletion: str = Field("", description="Deleted bases on the forward strand (VCF REF)")
    insertion: str = Field("", description="Inserted bases on the forward strand (VCF ALT)")
    genotype_class: Optional[OntologyClass] = Field(None, alias="genotypeClass")
    variant_annotation: Optional[VariantAnnotation] = Field(None, alias="variantAnnotation")


class GenomicFeature(Record):
    gene: Optional[Gene] = None
    variant: List[Variant] = Field(default_factory=list)
    variant_annotation: Optional[VariantAnnotation] = Field(None, alias="variantAnnotation")


class File(Record):
    path: str = Field("", description="Full system path, e.g. /data/genomes/file1.vcf.gz")
    uri: str = Field("", description="URI for the file")


# ---------------------------------------------------------------------------
# Individuals and pedigrees
# ---------------------------------------------------------------------------

class KaryotypicSex(IntEnum):
    UNKNOWN = 0
    XX = 1
    XY = 2
    XO = 3
    XXY = 4
    XXX = 5
    XXYY = 6
    XXXY = 7
    XXXX = 8
    XYY = 9
    OTHER = 10


class Individual(Record):
    id: str = Field(..., description="Identifier, unique within the record")
    date_of_birth: Optional[datetime] = Field(
        None, description="Rounded down to the closest known year/month/day"
    )
    sex: Optional[OntologyClass] = Field(None, description="PATO term for biological sex")
    karyotypic_sex: KaryotypicSex = KaryotypicSex.UNKNOWN
    phenotypes: List[Phenotype] = Field(default_factory=list)
    diagnoses: List[Disease] = Field(default_factory=list)


class Sex(str, Enum):
    UNKNOWN = "UNKNOWN"
    MALE = "MALE"
    FEMALE = "FEMALE"


class AffectedStatus(str, Enum):
    MISSING = "MISSING"
    UNAFFECTED = "UNAFFECTED"
    AFFECTED = "AFFECTED"


class Person(Record):
    """One row of a PED-style pedigree."""

    family_id: str
    individual_id: str
    paternal_id: str = ""
    maternal_id: str = ""
    sex: Sex = Sex.UNKNOWN
    affected_status: AffectedStatus = AffectedStatus.MISSING


class Pedigree(Record):
    persons: List[Person] = Field(default_factory=list)

    def family_ids(self) -> list[str]:
        """Return the distinct family ids in first-seen order."""
        return list(dict.fromkeys(p.family_id for p in self.persons))


# ---------------------------------------------------------------------------
# Provenance, experiments and analyses
# ---------------------------------------------------------------------------

class MetaData(Record):
    created: Optional[datetime] = None
    created_by: str = ""
    ontologies: List[Ontology] = Field(default_factory=list)
    external_references: List[ExternalReference] = Field(default_factory=list)


class Experiment(Record):
    """An assay run on a sample, referenced from attribute trees."""

    id: str = Field(..., min_length=1)
    description: str = ""
    experiment_type: Optional[OntologyClass] = None
    instrument: str = ""
    external_references: List[ExternalReference] = Field(default_factory=list)


class Analysis(Record):
    """A computational analysis over experiment output."""

    id: str = Field(..., min_length=1)
    description: str = ""
    analysis_type: Optional[OntologyClass] = None
    created: Optional[datetime] = None
    created_by: str = ""
    files: List[File] = Field(default_factory=list)
