"""
Status types for compliance.openshift.io/v1alpha1 resources.

Only the status fields that controllers hand to the metrics subsystem are
modelled here. Values are the exact strings stored on the resources and are
used verbatim as metric label values.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ComplianceScanStatusPhase(str, Enum):
    """Lifecycle phase of a ComplianceScan."""
    PENDING = "PENDING"
    LAUNCHING = "LAUNCHING"
    RUNNING = "RUNNING"
    AGGREGATING = "AGGREGATING"
    DONE = "DONE"


class ComplianceScanStatusResult(str, Enum):
    """Result of a ComplianceScan, also used as the aggregate suite result."""
    NOT_AVAILABLE = "NOT-AVAILABLE"
    COMPLIANT = "COMPLIANT"
    NON_COMPLIANT = "NON-COMPLIANT"
    ERROR = "ERROR"
    INCONSISTENT = "INCONSISTENT"
    NOT_APPLICABLE = "NOT-APPLICABLE"


class RemediationApplicationState(str, Enum):
    """Application state of a ComplianceRemediation."""
    NOT_APPLIED = "NotApplied"
    APPLIED = "Applied"
    OUTDATED = "Outdated"
    ERROR = "Error"
    MISSING_DEPENDENCIES = "MissingDependencies"
    NEEDS_REVIEW = "NeedsReview"


class ComplianceScanStatus(BaseModel):
    """Observed status of a ComplianceScan."""

    model_config = ConfigDict(populate_by_name=True)

    phase: ComplianceScanStatusPhase = ComplianceScanStatusPhase.PENDING
    result: ComplianceScanStatusResult = ComplianceScanStatusResult.NOT_AVAILABLE
    error_message: str = Field(default="", alias="errormsg")


class ComplianceRemediationStatus(BaseModel):
    """Observed status of a ComplianceRemediation."""

    model_config = ConfigDict(populate_by_name=True)

    application_state: RemediationApplicationState = Field(
        default=RemediationApplicationState.NOT_APPLIED,
        alias="applicationState"
    )
    error_message: str = Field(default="", alias="errorMessage")
