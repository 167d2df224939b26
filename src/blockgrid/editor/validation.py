"""
Validation system for page layouts.

Provides:
- Duplicate id detection
- Row overlap detection (two blocks sharing a cell on the same row)
- Grid bound checks for blocks built around the constructors

Blocks validate their own bounds at construction, so bound errors only show
up for data assembled by other means. Overlaps are reported as warnings:
a drop on an empty cell does not push aside other blocks in that row.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..config import GRID_COLUMNS
from .data_model import Block, GridPosition, PageLayout

logger = logging.getLogger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class ValidationIssue:
    """A single validation issue."""
    severity: ValidationSeverity
    message: str
    block_id: Optional[str] = None
    other_block_id: Optional[str] = None
    cell: Optional[GridPosition] = None

    @property
    def is_error(self) -> bool:
        return self.severity == ValidationSeverity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity == ValidationSeverity.WARNING


@dataclass
class ValidationResult:
    """Result of layout validation."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Check if layout passes validation (no errors)."""
        return not any(i.is_error for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.is_warning for i in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for i in self.issues if i.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for i in self.issues if i.is_warning)

    @property
    def overlapping_ids(self) -> List[str]:
        ids: List[str] = []
        for issue in self.issues:
            if issue.other_block_id is None:
                continue
            for block_id in (issue.block_id, issue.other_block_id):
                if block_id not in ids:
                    ids.append(block_id)
        return ids


class LayoutValidator:
    """Validator for page layouts."""

    def validate(self, layout: PageLayout) -> ValidationResult:
        """Run all validation checks on the layout."""
        if layout.is_empty:
            return ValidationResult(issues=[ValidationIssue(
                severity=ValidationSeverity.INFO,
                message="Layout is empty",
            )])

        issues: List[ValidationIssue] = []
        issues.extend(self._check_duplicate_ids(layout))
        issues.extend(self._check_bounds(layout))
        issues.extend(self._check_overlaps(layout))

        result = ValidationResult(issues=issues)
        if issues:
            logger.debug("Layout validation: %d errors, %d warnings",
                         result.error_count, result.warning_count)
        return result

    def _check_duplicate_ids(self, layout: PageLayout) -> List[ValidationIssue]:
        seen: Dict[str, int] = {}
        for block in layout:
            seen[block.id] = seen.get(block.id, 0) + 1
        return [
            ValidationIssue(
                severity=ValidationSeverity.ERROR,
                message=f"Block id {block_id} is used {count} times",
                block_id=block_id,
            )
            for block_id, count in seen.items() if count > 1
        ]

    def _check_bounds(self, layout: PageLayout) -> List[ValidationIssue]:
        issues = []
        for block in layout:
            if not 1 <= block.width <= GRID_COLUMNS or block.right_edge > GRID_COLUMNS:
                issues.append(ValidationIssue(
                    severity=ValidationSeverity.ERROR,
                    message=(f"Block spans columns {block.position.x}..{block.right_edge - 1}, "
                             f"outside the {GRID_COLUMNS}-column grid"),
                    block_id=block.id,
                    cell=block.position,
                ))
        return issues

    def _check_overlaps(self, layout: PageLayout) -> List[ValidationIssue]:
        issues = []
        for y in range(layout.row_count):
            row = layout.blocks_in_row(y)
            for i, a in enumerate(row):
                for b in row[i + 1:]:
                    if a.overlaps(b):
                        issues.append(self._overlap_issue(a, b))
        return issues

    @staticmethod
    def _overlap_issue(a: Block, b: Block) -> ValidationIssue:
        start = max(a.position.x, b.position.x)
        return ValidationIssue(
            severity=ValidationSeverity.WARNING,
            message=f"Blocks overlap in row {a.position.y} from column {start}",
            block_id=a.id,
            other_block_id=b.id,
            cell=GridPosition(start, a.position.y),
        )


def validate_layout(layout: PageLayout) -> ValidationResult:
    """Convenience function to validate a layout."""
    return LayoutValidator().validate(layout)
