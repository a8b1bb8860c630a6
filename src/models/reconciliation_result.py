"""Reconciliation result data models."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any, Optional

from ..utils.dates import utcnow

# Float counters (debt) are compared with this tolerance
DRIFT_TOLERANCE = 1e-6


@dataclass
class CounterDrift:
    """A running counter whose stored value disagrees with the ledger."""

    record_type: str  # "product" or "supplier"
    record_id: str
    name: str
    counter: str  # "currentStock" or "totalDebt"
    stored: float
    expected: float
    fixed: bool = False

    @property
    def difference(self) -> float:
        return self.stored - self.expected

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "recordType": self.record_type,
            "recordId": self.record_id,
            "name": self.name,
            "counter": self.counter,
            "stored": self.stored,
            "expected": self.expected,
            "difference": self.difference,
            "fixed": self.fixed
        }


@dataclass
class ReconciliationError:
    """Represents a failure while reconciling one record."""

    record_id: str
    error_type: str
    message: str
    timestamp: datetime = field(default_factory=utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recordId": self.record_id,
            "errorType": self.error_type,
            "message": self.message,
            "timestamp": self.timestamp.isoformat()
        }


@dataclass
class ReconciliationResult:
    """Represents the result of a reconciliation run."""

    success: bool
    checked_count: int = 0
    fixed_count: int = 0
    pending_applied_count: int = 0
    drifts: List[CounterDrift] = field(default_factory=list)
    errors: List[ReconciliationError] = field(default_factory=list)
    duration: float = 0.0  # seconds
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None

    def __post_init__(self):
        if self.start_time is None:
            self.start_time = utcnow()

    def add_drift(self, drift: CounterDrift):
        self.drifts.append(drift)

    def add_error(self, record_id: str, error_type: str, message: str):
        """Add an error to the result."""
        self.errors.append(ReconciliationError(
            record_id=record_id,
            error_type=error_type,
            message=message
        ))
        self.success = False

    def finalize(self):
        """Finalize the result with end time and duration."""
        self.end_time = utcnow()
        if self.start_time:
            self.duration = (self.end_time - self.start_time).total_seconds()

    @property
    def drift_count(self) -> int:
        return len(self.drifts)

    @property
    def is_consistent(self) -> bool:
        """True when every counter matched (or was repaired) and nothing failed."""
        return not self.errors and all(d.fixed for d in self.drifts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "success": self.success,
            "checkedCount": self.checked_count,
            "driftCount": self.drift_count,
            "fixedCount": self.fixed_count,
            "pendingAppliedCount": self.pending_applied_count,
            "duration": round(self.duration, 2),
            "startTime": self.start_time.isoformat() if self.start_time else None,
            "endTime": self.end_time.isoformat() if self.end_time else None,
            "drifts": [drift.to_dict() for drift in self.drifts],
            "errors": [error.to_dict() for error in self.errors]
        }

    def get_summary(self) -> str:
        """Get a human-readable summary."""
        summary_lines = [
            f"Reconciliation completed in {self.duration:.2f}s",
            f"Records checked: {self.checked_count}",
            f"Pending applied: {self.pending_applied_count}",
            f"Drifted: {self.drift_count}",
            f"Fixed: {self.fixed_count}"
        ]

        if self.drifts:
            summary_lines.append(f"\nDrifts ({len(self.drifts)}):")
            for drift in self.drifts[:5]:
                summary_lines.append(
                    f"  - {drift.record_type} {drift.name}: {drift.counter} "
                    f"stored={drift.stored} expected={drift.expected}"
                )
            if len(self.drifts) > 5:
                summary_lines.append(f"  ... and {len(self.drifts) - 5} more")

        if self.errors:
            summary_lines.append(f"\nErrors ({len(self.errors)}):")
            for error in self.errors[:5]:
                summary_lines.append(f"  - {error.record_id}: {error.message}")

        return "\n".join(summary_lines)
