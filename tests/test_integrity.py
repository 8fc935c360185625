"""Tests für die Integritätsprüfung des Allokations-Speichers."""

from analysis.integrity_validator import IntegrityValidator, ValidationReport
from config.defaults import default_validation_rules
from models.allocation import Allocation
from models.reference_data import ReferenceData


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _ref() -> ReferenceData:
    return ReferenceData.from_records(
        subjects=[
            {"id": "s1", "name": "Programming", "code": "CS-101", "departmentId": "d1"},
            {"id": "s2", "name": "Organic Chemistry", "code": "CHEM-1", "departmentId": "d2"},
        ],
        departments=[
            {"id": "d1", "name": "Computer Science"},
            {"id": "d2", "name": "Chemistry"},
        ],
        teachers=[{"id": "t1", "name": "Teacher One"}, {"id": "t2", "name": "Teacher Two"}],
        rooms=[{"id": "r44", "name": "R-44"}, {"id": "lab1", "name": "LAB-1"}],
        time_slots=[
            {"id": "ts1", "period": 1},
            {"id": "ts3", "period": 3},
            {"id": "ts8", "period": 8},
        ],
    )


def _alloc(id: str, **kwargs) -> Allocation:
    values = dict(
        subject_id="s1", teacher_id="t1", time_slot_id="ts1",
        day="Monday", room="R-44", semester_id="sem1",
    )
    values.update(kwargs)
    return Allocation(id=id, **values)


def _valid_set() -> list[Allocation]:
    return [
        _alloc("a"),
        _alloc("b", subject_id="s2", teacher_id="t2", time_slot_id="ts3",
               day="Tuesday", room="LAB-1"),
    ]


def _validate(allocations, **rule_updates) -> ValidationReport:
    rules = default_validation_rules().model_copy(update=rule_updates)
    return IntegrityValidator(_ref(), rules).validate(allocations)


def _constraints(report: ValidationReport) -> list[str]:
    return [v.constraint for v in report.violations]


# ─── PRÜFUNGEN ────────────────────────────────────────────────────────────────

class TestIntegrityValidator:
    def test_valid_set(self):
        report = _validate(_valid_set())
        assert report.is_valid
        assert report.violations == []
        assert report.checked == 2

    def test_empty_set_is_valid(self):
        assert _validate([]).is_valid

    def test_invalid_day(self):
        report = _validate([_alloc("a", day="Sunday")])
        assert _constraints(report) == ["invalid_day"]
        assert not report.is_valid

    def test_invalid_period(self):
        report = _validate([_alloc("a", time_slot_id="ts8")])
        assert _constraints(report) == ["invalid_period"]

    def test_period_from_generator_field(self):
        """Ohne Zeitslot-Stammdaten zählt das Feld 'period' des Generators."""
        a = Allocation.model_validate({
            "id": "a", "subjectId": "s1", "teacherId": "t1", "timeSlotId": "ts1",
            "day": "Monday", "room": "R-44", "semesterId": "sem1", "period": 9,
        })
        validator = IntegrityValidator(ReferenceData(), default_validation_rules())
        assert "invalid_period" in _constraints(validator.validate([a]))

    def test_department_period_restriction(self):
        """Chemie (d2) nur in den Perioden 3-6."""
        report = _validate([_alloc("a", subject_id="s2", room="LAB-1")])
        assert _constraints(report) == ["department_period_restriction"]
        assert "CHEM-1" in report.violations[0].description

    def test_dangling_references(self):
        report = _validate([_alloc("a", subject_id="sX", teacher_id="t99", time_slot_id="tsX")])
        assert set(_constraints(report)) == {"unknown_subject", "unknown_teacher", "unknown_time_slot"}

    def test_missing_teacher_allowed(self):
        assert _validate([_alloc("a", teacher_id=None)]).is_valid

    def test_missing_required_field(self):
        report = _validate([_alloc("a", semester_id=None)])
        assert _constraints(report) == ["missing_required_field"]
        assert "semesterId" in report.violations[0].description

    def test_duplicate_ids(self):
        report = _validate([_alloc("a"), _alloc("a")])
        assert _constraints(report) == ["duplicate_id"]

    def test_double_booking(self):
        report = _validate([_alloc("a"), _alloc("b")])
        assert sorted(_constraints(report)) == ["room_double_booking", "teacher_double_booking"]

    def test_unmapped_room_is_warning(self):
        """Unbekannter Raumname → Warnung, keine Fehler."""
        report = _validate([_alloc("a", room="Z-1"), _alloc("b", room="Z-1", day="Friday")])
        assert report.is_valid
        assert len(report.warnings) == 1
        assert report.warnings[0].entity == "Z-1"

    def test_required_rooms(self):
        report = _validate(_valid_set(), required_rooms=["R-44", "LAB-9"])
        assert _constraints(report) == ["missing_required_room"]
        assert report.violations[0].entity == "LAB-9"
