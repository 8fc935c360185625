"""Tests für die Konflikterkennung (Lehrkraft- und Raum-Doppelbelegungen)."""

import logging

from analysis.conflict_detector import (
    ConflictDetector,
    ConflictReport,
    detect_conflicts,
)
from models.allocation import Allocation
from models.reference_data import ReferenceData


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _ref() -> ReferenceData:
    return ReferenceData.from_records(
        subjects=[
            {"id": "sA", "name": "Subject A", "departmentId": "d1"},
            {"id": "sB", "name": "Subject B", "departmentId": "d1"},
        ],
        departments=[{"id": "d1", "name": "Computer Science"}],
        teachers=[
            {"id": "t1", "name": "Teacher One"},
            {"id": "t2", "name": "Teacher Two"},
            {"id": "t70", "name": "Dr. Ayesha Khan"},
        ],
        rooms=[{"id": "r44", "name": "R-44"}, {"id": "b12", "name": "B12"}],
        time_slots=[{"id": "ts1", "period": 1}, {"id": "ts3", "period": 3}],
        days=[{"id": "day-1", "name": "Monday"}],
        semesters=[
            {"id": "sem1", "name": "Semester 1"},
            {"id": "sem3", "name": "BS 3"},
        ],
    )


def _entry(id: str, **kwargs) -> Allocation:
    defaults = dict(subject_id="sA", time_slot_id="ts1", day="Monday", semester_id="sem1")
    defaults.update(kwargs)
    return Allocation(id=id, **defaults)


# ─── GESAMT-PRÜFUNG ───────────────────────────────────────────────────────────

class TestDetect:
    def test_room_double_booking(self):
        """Gleicher Raum, Slot und Tag, verschiedene Lehrkräfte → ein Raumkonflikt."""
        e1 = _entry("e1", room="R-44", teacher_id="t1")
        e2 = _entry("e2", room="R-44", teacher_id="t2")
        report = detect_conflicts([e1, e2], [e1, e2], _ref())
        assert len(report.room_conflicts) == 1
        assert report.room_conflicts[0].entry_ids == ["e1", "e2"]
        assert report.room_conflicts[0].resource == "r44"
        assert report.teacher_conflicts == []
        assert not report.is_valid

    def test_room_double_booking_without_room_data(self):
        """Ohne Raum-Stammdaten wird über den normierten Namen verglichen."""
        e1 = _entry("e1", room="R-44", teacher_id="t1")
        e2 = _entry("e2", room="r44", teacher_id="t2")
        report = detect_conflicts([e1, e2], None, ReferenceData())
        assert len(report.room_conflicts) == 1

    def test_cross_semester_teacher_conflict(self):
        """Lehrkraft in zwei Semestern zur selben Zeit → genau ein Konflikt."""
        a = _entry("a", subject_id="sA", teacher_id="t70", time_slot_id="ts3", semester_id="sem1")
        b = _entry("b", subject_id="sB", teacher_id="t70", time_slot_id="ts3", semester_id="sem3")
        report = ConflictDetector(_ref()).detect([a, b])
        assert len(report.teacher_conflicts) == 1
        assert report.teacher_conflicts[0].entry_ids == ["a", "b"]
        assert report.teacher_conflicts[0].day == "Monday"

    def test_unassigned_resources_never_conflict(self):
        """Einträge ohne Lehrkraft und ohne Raum kollidieren nie."""
        a = _entry("a")
        b = _entry("b")
        assert ConflictDetector(_ref()).detect([a, b]).is_valid

    def test_different_day_or_slot_no_conflict(self):
        a = _entry("a", teacher_id="t1", room="R-44")
        b = _entry("b", teacher_id="t1", room="R-44", day="Tuesday")
        c = _entry("c", teacher_id="t1", room="R-44", time_slot_id="ts3")
        assert ConflictDetector(_ref()).detect([a, b, c]).is_valid

    def test_day_id_and_day_name_compare_equal(self):
        """Day-ID und Wochentag-Name desselben Tages kollidieren."""
        a = _entry("a", teacher_id="t1", day="day-1")
        b = _entry("b", teacher_id="t1", day="Monday")
        report = ConflictDetector(_ref()).detect([a, b])
        assert len(report.teacher_conflicts) == 1
        assert report.teacher_conflicts[0].day == "Monday"

    def test_no_self_conflict(self):
        """Ein Eintrag kollidiert nie mit sich selbst."""
        a = _entry("a", teacher_id="t1", room="R-44")
        report = ConflictDetector(_ref()).detect([a], [a])
        assert report.is_valid

    def test_only_conflicts_involving_entries(self):
        """Konflikte nur innerhalb des Universums werden nicht gemeldet."""
        a = _entry("a", teacher_id="t1", day="Friday")
        c = _entry("c", teacher_id="t2")
        d = _entry("d", teacher_id="t2")
        report = ConflictDetector(_ref()).detect([a], [a, c, d])
        assert report.is_valid

    def test_entries_checked_against_universe(self):
        a = _entry("a", teacher_id="t2", semester_id="sem3")
        c = _entry("c", teacher_id="t2")
        report = ConflictDetector(_ref()).detect([a], [c])
        assert report.teacher_conflicts[0].entry_ids == ["a", "c"]

    def test_input_not_mutated(self):
        a = _entry("a", teacher_id="t1")
        b = _entry("b", teacher_id="t1")
        before = [a.model_dump(), b.model_dump()]
        ConflictDetector(_ref()).detect([a, b])
        assert [a.model_dump(), b.model_dump()] == before

    def test_empty_report(self):
        report = ConflictReport()
        assert report.is_valid
        assert report.teacher_conflicts == []
        assert report.room_conflicts == []


# ─── GRUPPEN-PRÜFUNG ──────────────────────────────────────────────────────────

class TestGroupConflicts:
    def test_symmetry(self):
        """Konflikt von a mit b ⇔ Konflikt von b mit a."""
        a = _entry("a", teacher_id="t70", time_slot_id="ts3")
        b = _entry("b", teacher_id="t70", time_slot_id="ts3", semester_id="sem3")
        detector = ConflictDetector(_ref())
        universe = [a, b]
        assert detector.has_conflicts([a], universe) is True
        assert detector.has_conflicts([b], universe) is True

    def test_group_members_excluded(self):
        """Einträge derselben Gruppe kollidieren nicht miteinander."""
        g1 = _entry("g1", teacher_id="t1", room="R-44")
        g2 = _entry("g2", teacher_id="t1", room="R-44")
        assert ConflictDetector(_ref()).has_conflicts([g1, g2], [g1, g2]) is False

    def test_entries_without_time_slot_never_conflict(self):
        """Zwei Einträge ohne timeSlotId: weder Gruppen-API noch detect meldet etwas."""
        a = _entry("a", teacher_id="t1", room="R-44", time_slot_id=None)
        b = _entry("b", teacher_id="t1", room="R-44", time_slot_id=None)
        detector = ConflictDetector(_ref())
        assert detector.has_conflicts([a], [a, b]) is False
        assert not detector.describe_conflicts([b], [a, b]).has_conflicts
        assert detector.detect([a, b]).conflicts == []

    def test_candidate_without_day_ignored(self):
        a = _entry("a", teacher_id="t1")
        b = _entry("b", teacher_id="t1", day=None)
        assert ConflictDetector(_ref()).has_conflicts([a], [a, b]) is False

    def test_empty_group(self):
        detector = ConflictDetector(_ref())
        assert detector.has_conflicts([], [_entry("a", teacher_id="t1")]) is False
        assert not detector.describe_conflicts([], []).has_conflicts

    def test_group_days_union(self):
        """Alle Tage der Gruppe werden geprüft, Slot und Lehrkraft vom ersten Eintrag."""
        g1 = _entry("g1", teacher_id="t1", room="R-44", day="Monday")
        g2 = _entry("g2", teacher_id="t1", room="R-44", day="Wednesday")
        x = _entry("x", subject_id="sB", teacher_id="t1", room="B12", day="Wednesday")
        y = _entry("y", subject_id="sB", teacher_id="t1", room="B12", day="Tuesday")
        details = ConflictDetector(_ref()).describe_conflicts([g1, g2], [g1, g2, x, y])
        assert details.has_conflicts
        assert [c.entry_id for c in details.teacher_conflicts] == ["x"]
        assert details.room_conflicts == []

    def test_describe_resolves_names(self):
        g = _entry("g", teacher_id="t1", room="R-44")
        x = _entry("x", subject_id="sB", teacher_id="t2", room="R-44", semester_id="sem3")
        details = ConflictDetector(_ref()).describe_conflicts([g], [g, x])
        assert details.teacher_conflicts == []
        entry = details.room_conflicts[0]
        assert entry.entry_id == "x"
        assert entry.subject_name == "Subject B"
        assert entry.teacher_name == "Teacher Two"
        assert entry.room_name == "R-44"
        assert entry.day_name == "Monday"
        assert entry.department_name == "Computer Science"
        assert entry.semester_label == "Semester 3"

    def test_resolve_entry_fallbacks(self, caplog):
        """Nicht auflösbare Referenzen → Rohwert bzw. Unknown/Unassigned + Warnung."""
        entry = Allocation(id="z", subject_id="sX", semester_id="semX")
        with caplog.at_level(logging.WARNING):
            resolved = ConflictDetector(_ref()).resolve_entry(entry)
        assert resolved.subject_name == "sX"
        assert resolved.teacher_name == "Unassigned"
        assert resolved.room_name == "Unassigned"
        assert resolved.day_name == "Unknown"
        assert resolved.department_name == "Unknown"
        assert resolved.semester_label == "Unknown Semester"
        assert "Fach nicht gefunden" in caplog.text

    def test_resolve_entry_unknown_teacher_and_room(self):
        entry = _entry("z", teacher_id="t99", room="Lab-9")
        resolved = ConflictDetector(_ref()).resolve_entry(entry)
        assert resolved.teacher_name == "t99"
        assert resolved.room_name == "Lab-9"
