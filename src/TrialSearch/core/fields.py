"""Field registry shared by every search and filter surface.

Each searchable attribute of a trial record is described once here: its
semantic type drives operator resolution and value handling, and dropdown
fields carry a static option list used when the taxonomy service is
unreachable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Sequence

from TrialSearch.core.errors import ValidationError


class SemanticType(str, Enum):
    """Value semantics of a searchable field."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    DROPDOWN = "dropdown"
    BINARY = "binary"
    IDENTIFIER = "identifier"


@dataclass(frozen=True, slots=True)
class FieldOption:
    """One selectable value of a dropdown field."""

    value: str
    label: str


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Static description of a searchable field.

    Attributes:
        id: Stable field identifier used in criteria and records.
        label: Display label.
        semantic_type: Value semantics.
        options: Static fallback options for dropdown/binary fields.
        category: Taxonomy category name for remote option lookup.
        multi_select: Whether criteria on this field accept a list of values.
        contains_only: Long free-text field restricted to substring operators.
    """

    id: str
    label: str
    semantic_type: SemanticType
    options: Sequence[FieldOption] = ()
    category: str | None = None
    multi_select: bool = False
    contains_only: bool = False


def _opts(*values: str) -> tuple[FieldOption, ...]:
    return tuple(FieldOption(value=v, label=v) for v in values)


_YES_NO = _opts("Yes", "No")

_THERAPEUTIC_AREAS = _opts(
    "Autoimmune", "Cardiovascular", "Endocrinology", "Gastrointestinal", "Infectious",
    "Oncology", "Gastroenterology", "Dermatology", "Vaccines", "CNS/Neurology",
    "Ophthalmology", "Immunology", "Rheumatology", "Haematology", "Nephrology", "Urology",
)

_TRIAL_PHASES = (
    FieldOption("phase_i", "Phase I"),
    FieldOption("phase_i_ii", "Phase I/II"),
    FieldOption("phase_ii", "Phase II"),
    FieldOption("phase_ii_iii", "Phase II/III"),
    FieldOption("phase_iii", "Phase III"),
    FieldOption("phase_iii_iv", "Phase III/IV"),
    FieldOption("phase_iv", "Phase IV"),
)

_STATUSES = _opts("Planned", "Open", "Closed", "Completed", "Terminated")

_RECORD_STATUSES = _opts(
    "Development In Progress (DIP)", "In Production (IP)", "Update In Progress (UIP)",
)

_DISEASE_TYPES = _opts(
    "Acute Lymphocytic Leukemia", "Acute Myelogenous Leukemia", "Bladder", "Breast",
    "Cervical", "Colorectal", "Endometrial", "Esophageal", "Gastric", "Glioblastoma",
    "Head/Neck", "Liver", "Lung Non-small cell", "Lung Small Cell", "Melanoma",
    "Multiple Myeloma", "Ovarian", "Pancreas", "Prostate", "Renal", "Thyroid",
    "Solid Tumor, Unspecified", "Unspecified Cancer",
)

_PATIENT_SEGMENTS = (
    FieldOption("her2_positive_breast_cancer", "HER2+ Breast Cancer"),
    FieldOption("her2_negative_breast_cancer", "HER2- Breast Cancer"),
    FieldOption("hr_positive_breast_cancer", "HR+ Breast Cancer (ER+ and/or PR+)"),
    FieldOption("triple_negative_breast_cancer", "Triple-Negative Breast Cancer (TNBC)"),
    FieldOption("early_stage_breast_cancer", "Early-Stage Breast Cancer"),
    FieldOption("metastatic_breast_cancer", "Metastatic Breast Cancer"),
    FieldOption("breast_cancer_nos", "Breast Cancer (NOS)"),
)

_LINES_OF_THERAPY = _opts(
    "1 – First Line", "2 – Second Line", "Unknown", "Neo-Adjuvant", "Adjuvant",
)

_COUNTRIES = _opts(
    "United States", "Canada", "United Kingdom", "Germany", "France", "Japan", "China", "India",
)

_SPONSORS = _opts("Pfizer", "Novartis", "AstraZeneca", "Roche", "Bristol-Myers Squibb")

_REGIONS = _opts("North America", "Europe", "Asia Pacific", "Latin America", "Africa", "Middle East")

_SEXES = _opts("Male", "Female", "Both")


def _text(field_id: str, label: str, *, contains_only: bool = False) -> FieldDescriptor:
    return FieldDescriptor(field_id, label, SemanticType.TEXT, contains_only=contains_only)


def _number(field_id: str, label: str) -> FieldDescriptor:
    return FieldDescriptor(field_id, label, SemanticType.NUMBER)


def _date(field_id: str, label: str) -> FieldDescriptor:
    return FieldDescriptor(field_id, label, SemanticType.DATE)


def _dropdown(
    field_id: str,
    label: str,
    options: Sequence[FieldOption] = (),
    *,
    category: str | None = None,
    multi_select: bool = True,
) -> FieldDescriptor:
    return FieldDescriptor(
        field_id,
        label,
        SemanticType.DROPDOWN,
        options=tuple(options),
        category=category,
        multi_select=multi_select,
    )


def _binary(field_id: str, label: str) -> FieldDescriptor:
    return FieldDescriptor(field_id, label, SemanticType.BINARY, options=_YES_NO)


_CATALOG: tuple[FieldDescriptor, ...] = (
    FieldDescriptor("trial_id", "Trial ID", SemanticType.IDENTIFIER),
    _text("title", "Title"),
    _dropdown("disease_type", "Disease Type", _DISEASE_TYPES, category="disease_type"),
    _dropdown("therapeutic_area", "Therapeutic Area", _THERAPEUTIC_AREAS, category="therapeutic_area"),
    _dropdown("trial_phase", "Trial Phase", _TRIAL_PHASES, category="trial_phase"),
    _dropdown("primary_drugs", "Primary Drug", category="primary_drugs"),
    _dropdown("other_drugs", "Other Drugs", category="other_drugs"),
    _dropdown("status", "Status", _STATUSES, category="trial_status"),
    _dropdown("trial_record_status", "Trial Record Status", _RECORD_STATUSES, multi_select=False),
    _dropdown("sponsor_collaborators", "Sponsor", _SPONSORS, category="sponsor_collaborators"),
    _dropdown("country", "Country", _COUNTRIES, category="country"),
    _dropdown("region", "Region", _REGIONS, category="region"),
    _dropdown("patient_segment", "Patient Segment", _PATIENT_SEGMENTS, category="patient_segment"),
    _dropdown("line_of_therapy", "Line of Therapy", _LINES_OF_THERAPY, category="line_of_therapy"),
    _text("subject_type", "Subject Type"),
    _dropdown("sex", "Sex", _SEXES, multi_select=False),
    _number("enrollment", "Enrollment"),
    _number("actual_enrolled_volunteers", "Actual Enrolled Volunteers"),
    _number("target_enrolled_volunteers", "Target Enrolled Volunteers"),
    _number("total_number_of_sites", "Total Number of Sites"),
    _text("trial_identifier", "Trial Identifier"),
    _text("reference_links", "Reference Links"),
    _text("purpose_of_trial", "Purpose", contains_only=True),
    _text("summary", "Summary", contains_only=True),
    _text("primary_outcome_measure", "Primary Outcome", contains_only=True),
    _text("other_outcome_measure", "Other Outcome", contains_only=True),
    _text("treatment_regimen", "Treatment Regimen", contains_only=True),
    _text("study_design", "Study Design", contains_only=True),
    _number("number_of_arms", "Number of Arms"),
    _text("inclusion_criteria", "Inclusion Criteria", contains_only=True),
    _text("exclusion_criteria", "Exclusion Criteria", contains_only=True),
    _number("age_from", "Age From"),
    _number("age_to", "Age To"),
    _binary("results_available", "Results Available"),
    _binary("endpoints_met", "Endpoints Met"),
    _date("actual_start_date", "Actual Start Date"),
    _date("estimated_start_date", "Estimated Start Date"),
    _date("actual_enrollment_closed_date", "Actual Enrollment Closed Date"),
    _date("estimated_enrollment_closed_date", "Estimated Enrollment Closed Date"),
    _date("actual_trial_end_date", "Actual Trial End Date"),
    _date("estimated_trial_end_date", "Estimated Trial End Date"),
    _date("actual_result_published_date", "Actual Result Published Date"),
    _date("estimated_result_published_date", "Estimated Result Published Date"),
    _text("internal_note", "Internal Note", contains_only=True),
)

FIELD_REGISTRY: Mapping[str, FieldDescriptor] = MappingProxyType({f.id: f for f in _CATALOG})


def list_fields() -> tuple[FieldDescriptor, ...]:
    """Return all registered fields in catalog order."""
    return _CATALOG


def get_field(field_id: str) -> FieldDescriptor | None:
    """Look up a field descriptor by id."""
    return FIELD_REGISTRY.get(field_id)


def require_field(field_id: str) -> FieldDescriptor:
    """Look up a field descriptor, raising for unknown ids.

    Raises:
        ValidationError: If ``field_id`` is not registered.
    """
    descriptor = FIELD_REGISTRY.get(field_id)
    if descriptor is None:
        raise ValidationError(f"Unknown search field: {field_id!r}")
    return descriptor
