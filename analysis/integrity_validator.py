"""Integritätsprüfung des Allokations-Speichers.

Prüft eine Menge gespeicherter Allokationen gegen Stammdaten und
Prüfregeln, unabhängig davon, wie die Allokationen entstanden sind
(Web-Oberfläche, Generator, Handbearbeitung).
"""

import logging
from collections import Counter
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from analysis.conflict_detector import ConflictDetector
from config.schema import ValidationRulesConfig
from data.room_lookup import validate_required_rooms
from models.allocation import Allocation
from models.reference_data import ReferenceData

logger = logging.getLogger(__name__)

# teacherId darf fehlen (noch nicht zugewiesen), alles andere nicht
INTEGRITY_REQUIRED_FIELDS: tuple[str, ...] = (
    "id", "subjectId", "timeSlotId", "day", "semesterId",
)


class ValidationViolation(BaseModel):
    """Eine einzelne Regelverletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "room_double_booking"
    description: str
    entity: str          # allocation_id / teacher_id / room


class ValidationReport(BaseModel):
    """Ergebnis der Integritätsprüfung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)
    checked: int = 0

    @property
    def errors(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [
            status,
            f"Geprüfte Allokationen: {self.checked}",
            f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}",
        ]
        console.print(Panel("\n".join(lines), title="Integritätsprüfung", border_style="cyan"))

        if not self.violations:
            console.print("[dim]Keine Verletzungen gefunden.[/dim]")
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Regel", width=26)
        table.add_column("Entität", width=20)
        table.add_column("Beschreibung")

        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class IntegrityValidator:
    """Prüft gespeicherte Allokationen auf Regel- und Referenzverletzungen."""

    def __init__(self, reference_data: ReferenceData, rules: ValidationRulesConfig):
        self.ref = reference_data
        self.rules = rules

    def validate(self, allocations: Sequence[Allocation]) -> ValidationReport:
        """Führt alle Prüfungen durch und gibt einen ValidationReport zurück."""
        violations: list[ValidationViolation] = []

        violations.extend(self._check_required_fields(allocations))
        violations.extend(self._check_duplicate_ids(allocations))
        violations.extend(self._check_double_booking(allocations))
        violations.extend(self._check_days(allocations))
        violations.extend(self._check_periods(allocations))
        violations.extend(self._check_period_restrictions(allocations))
        violations.extend(self._check_references(allocations))
        violations.extend(self._check_room_mapping(allocations))
        violations.extend(self._check_required_rooms())

        has_errors = any(v.severity == "error" for v in violations)
        logger.info(
            f"Integritätsprüfung: {len(allocations)} Allokation(en), "
            f"{len(violations)} Verletzung(en)"
        )
        return ValidationReport(
            violations=violations, is_valid=not has_errors, checked=len(allocations),
        )

    # ── Hilfsfunktionen ───────────────────────────────────────────────────────

    def _period(self, allocation: Allocation) -> Optional[int]:
        """Periode über den Zeitslot, sonst aus dem Generator-Feld 'period'."""
        time_slot = self.ref.time_slot(allocation.time_slot_id)
        if time_slot and time_slot.period is not None:
            return time_slot.period
        extra = (allocation.model_extra or {}).get("period")
        return extra if isinstance(extra, int) else None

    def _department_id(self, allocation: Allocation) -> Optional[str]:
        subject = self.ref.subject(allocation.subject_id)
        if subject and subject.department_id:
            return subject.department_id
        return (allocation.model_extra or {}).get("departmentId")

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_required_fields(
        self, allocations: Sequence[Allocation]
    ) -> list[ValidationViolation]:
        violations: list[ValidationViolation] = []
        for a in allocations:
            missing = a.missing_fields(INTEGRITY_REQUIRED_FIELDS)
            if missing:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="missing_required_field",
                    entity=a.id,
                    description=f"Pflichtfelder fehlen: {', '.join(missing)}.",
                ))
        return violations

    def _check_duplicate_ids(
        self, allocations: Sequence[Allocation]
    ) -> list[ValidationViolation]:
        counts = Counter(a.id for a in allocations)
        return [
            ValidationViolation(
                severity="error",
                constraint="duplicate_id",
                entity=allocation_id,
                description=f"ID kommt {n}x vor.",
            )
            for allocation_id, n in counts.items() if n > 1
        ]

    def _check_double_booking(
        self, allocations: Sequence[Allocation]
    ) -> list[ValidationViolation]:
        """Lehrkraft bzw. Raum zur selben Zeit mehrfach belegt."""
        report = ConflictDetector(self.ref).detect(allocations)
        violations: list[ValidationViolation] = []
        for c in report.conflicts:
            what = "Lehrkraft" if c.kind == "teacher" else "Raum"
            violations.append(ValidationViolation(
                severity="error",
                constraint=f"{c.kind}_double_booking",
                entity=c.resource,
                description=(
                    f"{what} {c.resource}: {c.day}, {c.time_slot_id} mehrfach belegt "
                    f"({', '.join(c.entry_ids)})."
                ),
            ))
        return violations

    def _check_days(self, allocations: Sequence[Allocation]) -> list[ValidationViolation]:
        allowed = set(self.rules.allowed_days)
        violations: list[ValidationViolation] = []
        for a in allocations:
            day = self.ref.canonical_day(a.day)
            if day and day not in allowed:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="invalid_day",
                    entity=a.id,
                    description=(
                        f"Tag '{day}' nicht erlaubt "
                        f"(erlaubt: {', '.join(self.rules.allowed_days)})."
                    ),
                ))
        return violations

    def _check_periods(self, allocations: Sequence[Allocation]) -> list[ValidationViolation]:
        allowed = set(self.rules.allowed_periods)
        violations: list[ValidationViolation] = []
        for a in allocations:
            period = self._period(a)
            if period is not None and period not in allowed:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="invalid_period",
                    entity=a.id,
                    description=(
                        f"Periode {period} nicht erlaubt "
                        f"(erlaubt: {', '.join(map(str, self.rules.allowed_periods))})."
                    ),
                ))
        return violations

    def _check_period_restrictions(
        self, allocations: Sequence[Allocation]
    ) -> list[ValidationViolation]:
        """Fachbereiche mit eingeschränkten Perioden (z.B. Labor-Fächer)."""
        violations: list[ValidationViolation] = []
        if not self.rules.period_restrictions:
            return violations
        for a in allocations:
            dept_id = self._department_id(a)
            allowed = self.rules.period_restrictions.get(dept_id) if dept_id else None
            period = self._period(a)
            if allowed is None or period is None or period in allowed:
                continue
            subject = self.ref.subject(a.subject_id)
            code = subject.code if subject and subject.code else a.subject_id
            violations.append(ValidationViolation(
                severity="error",
                constraint="department_period_restriction",
                entity=a.id,
                description=(
                    f"Fach {code} (Fachbereich {dept_id}) in Periode {period}; "
                    f"erlaubt nur {', '.join(map(str, allowed))}."
                ),
            ))
        return violations

    def _check_references(
        self, allocations: Sequence[Allocation]
    ) -> list[ValidationViolation]:
        """Fremdschlüssel auf Fach, Lehrkraft und Zeitslot müssen existieren."""
        violations: list[ValidationViolation] = []
        for a in allocations:
            checks = (
                ("subject", a.subject_id, self.ref.subject(a.subject_id), "Fach"),
                ("teacher", a.teacher_id, self.ref.teacher(a.teacher_id), "Lehrkraft"),
                ("time_slot", a.time_slot_id, self.ref.time_slot(a.time_slot_id), "Zeitslot"),
            )
            for name, value, found, label in checks:
                if value and found is None:
                    violations.append(ValidationViolation(
                        severity="error",
                        constraint=f"unknown_{name}",
                        entity=a.id,
                        description=f"{label} '{value}' existiert nicht.",
                    ))
        return violations

    def _check_room_mapping(
        self, allocations: Sequence[Allocation]
    ) -> list[ValidationViolation]:
        """Raumnamen ohne passenden Raum in den Stammdaten (je Name einmal)."""
        unmapped: dict[str, list[str]] = {}
        for a in allocations:
            if not a.has_room:
                continue
            if self.ref.allocation_room(a) is None:
                unmapped.setdefault(a.room or a.room_id, []).append(a.id)
        return [
            ValidationViolation(
                severity="warning",
                constraint="unmapped_room",
                entity=room,
                description=f"Kein Raum in den Stammdaten ({len(ids)} Allokation(en)).",
            )
            for room, ids in unmapped.items()
        ]

    def _check_required_rooms(self) -> list[ValidationViolation]:
        if not self.rules.required_rooms:
            return []
        result = validate_required_rooms(self.rules.required_rooms, self.ref.rooms)
        return [
            ValidationViolation(
                severity="error",
                constraint="missing_required_room",
                entity=m.original_name,
                description=m.error or "Raum nicht gefunden.",
            )
            for m in result.missing
        ]
