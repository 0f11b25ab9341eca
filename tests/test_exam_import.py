import pytest
from sqlalchemy.exc import OperationalError

from config.settings import settings
from conftest import IMPORT_HEADER, make_workbook
from models.exam_records import ExamRecord
from services import exam_import
from services.errors import StructuralError
from services.exam_import import detect_columns, import_class_marks, normalize_student_code, parse_number


def test_out_of_range_row_is_reported_and_valid_row_is_saved(db, ids):
    content = make_workbook([
        IMPORT_HEADER,
        ["S1001", "Amina", "Yusuf", 25, 30, 8, 8, 8, 8],
        ["S1002", "Bashir", "Ali", 18, 35, 9, 9, 9, 9],
    ])

    batch = import_class_marks(db, ids["classes"]["A"], content)

    assert batch.created == 1
    assert batch.updated == 0
    assert batch.errors == ["Row 2: Mid Exam must be 0-20"]

    record = db.query(ExamRecord).one()
    assert record.student_id == ids["students"]["S1002"]
    assert record.total_marks == 89
    assert record.grade == "A-"


def test_unknown_student_does_not_abort_batch(db, ids):
    content = make_workbook([
        IMPORT_HEADER,
        ["S1001", "", "", 10, 30, 5, 5, 5, 5],
        ["S1002", "", "", 10, 30, 5, 5, 5, 5],
        ["S-404", "", "", 10, 30, 5, 5, 5, 5],
        ["S1003", "", "", 10, 30, 5, 5, 5, 5],
        ["S1004", "", "", 10, 30, 5, 5, 5, 5],
    ])

    batch = import_class_marks(db, ids["classes"]["A"], content)

    assert batch.created == 4
    assert batch.errors == ['Row 4: Student "S-404" not found']
    assert db.query(ExamRecord).count() == 4


def test_reimport_updates_instead_of_duplicating(db, ids):
    class_id = ids["classes"]["A"]
    first = make_workbook([IMPORT_HEADER, ["S1001", "", "", 10, 20, 5, 5, 5, 5]])
    second = make_workbook([IMPORT_HEADER, ["S1001", "", "", 20, 40, 10, 10, 10, 10]])

    assert import_class_marks(db, class_id, first).created == 1
    batch = import_class_marks(db, class_id, second)

    assert batch.created == 0
    assert batch.updated == 1
    record = db.query(ExamRecord).one()
    assert record.total_marks == 100
    assert record.semester == "Fall"
    assert record.year == 2024


def test_every_offending_component_is_listed_for_a_row(db, ids):
    content = make_workbook([IMPORT_HEADER, ["S1001", "", "", 21, 41, 5, 5, 5, 5]])

    batch = import_class_marks(db, ids["classes"]["A"], content)

    assert batch.errors == ["Row 2: Mid Exam must be 0-20", "Row 2: Final Exam must be 0-40"]
    assert batch.created == 0


def test_blank_rows_and_blank_ids_are_skipped_silently(db, ids):
    content = make_workbook([
        IMPORT_HEADER,
        [None] * 9,
        ["", "No", "Id", 10, 10, 1, 1, 1, 1],
        ["S1001", "", "", 10, 10, 1, 1, 1, 1],
    ])

    batch = import_class_marks(db, ids["classes"]["A"], content)

    assert batch.created == 1
    assert batch.errors == []
    assert batch.skipped == 1


def test_missing_mark_columns_default_to_zero(db, ids):
    content = make_workbook([
        ["student id", "FINAL"],
        ["S1001", 35],
    ])

    batch = import_class_marks(db, ids["classes"]["A"], content)

    assert batch.created == 1
    record = db.query(ExamRecord).one()
    assert record.final_exam == 35
    assert record.mid_exam == 0
    assert record.total_marks == 35


def test_unparsable_numbers_are_treated_as_zero(db, ids):
    content = make_workbook([IMPORT_HEADER, ["S1001", "", "", "abc", "30", "", None, 5, "n/a"]])

    batch = import_class_marks(db, ids["classes"]["A"], content)

    assert batch.errors == []
    record = db.query(ExamRecord).one()
    assert record.mid_exam == 0
    assert record.final_exam == 30
    assert record.total_marks == 35


def test_numeric_student_id_cells_are_matched(db, ids):
    content = make_workbook([IMPORT_HEADER, [1001, "Jama", "Elmi", 10, 30, 5, 5, 5, 5]])

    batch = import_class_marks(db, ids["classes"]["A"], content)

    assert batch.created == 1
    assert db.query(ExamRecord).one().student_id == ids["students"]["1001"]


def test_fractional_marks_on_a_band_boundary_are_stored_with_that_grade(db, ids):
    content = make_workbook([IMPORT_HEADER, ["S1001", "", "", 13.6, 17.7, 9.5, 5.9, 0.3, 3.0]])

    batch = import_class_marks(db, ids["classes"]["A"], content)

    assert batch.errors == []
    record = db.query(ExamRecord).one()
    assert record.total_marks == 50
    assert record.grade == "D"
    assert record.grade_points == 1.0


def test_storage_failure_becomes_row_error_and_other_rows_commit(db, ids, monkeypatch):
    failing_id = ids["students"]["S1002"]
    real_upsert = exam_import.upsert_record

    def flaky_upsert(session, student_id, *args, **kwargs):
        if student_id == failing_id:
            raise OperationalError("INSERT INTO exam_records", {}, Exception("database is locked"))
        return real_upsert(session, student_id, *args, **kwargs)

    monkeypatch.setattr(exam_import, "upsert_record", flaky_upsert)
    content = make_workbook([
        IMPORT_HEADER,
        ["S1001", "", "", 10, 30, 5, 5, 5, 5],
        ["S1002", "", "", 10, 30, 5, 5, 5, 5],
        ["S1003", "", "", 10, 30, 5, 5, 5, 5],
    ])

    batch = import_class_marks(db, ids["classes"]["A"], content)

    assert batch.created == 2
    assert batch.errors == ["Row 3: Could not save record (OperationalError)"]
    saved = {r.student_id for r in db.query(ExamRecord).all()}
    assert saved == {ids["students"]["S1001"], ids["students"]["S1003"]}


def test_oversized_upload_aborts_batch(db, ids, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_MB", 0)
    content = make_workbook([IMPORT_HEADER, ["S1001", "", "", 10, 30, 5, 5, 5, 5]])

    with pytest.raises(StructuralError, match="upload limit"):
        import_class_marks(db, ids["classes"]["A"], content)
    assert db.query(ExamRecord).count() == 0


def test_missing_student_id_column_aborts_batch(db, ids):
    content = make_workbook([["Name", "Mid Exam"], ["Amina", 10]])

    with pytest.raises(StructuralError, match="Student ID"):
        import_class_marks(db, ids["classes"]["A"], content)
    assert db.query(ExamRecord).count() == 0


def test_unknown_class_aborts_batch(db, ids):
    content = make_workbook([IMPORT_HEADER, ["S1001", "", "", 10, 30, 5, 5, 5, 5]])

    with pytest.raises(StructuralError, match="Class not found"):
        import_class_marks(db, 9999, content)


def test_unreadable_file_aborts_batch(db, ids):
    with pytest.raises(StructuralError, match="Invalid Excel file"):
        import_class_marks(db, ids["classes"]["A"], b"not a spreadsheet")


def test_header_only_file_aborts_batch(db, ids):
    with pytest.raises(StructuralError, match="header row"):
        import_class_marks(db, ids["classes"]["A"], make_workbook([IMPORT_HEADER]))


def test_detect_columns_matches_substrings_case_insensitively():
    columns = detect_columns(["STUDENT ID", "Name", "mid-term", "Final Exam (/40)", None, "Presentation"])
    assert columns == {"student_id": 0, "mid_exam": 2, "final_exam": 3, "presentation": 5}


@pytest.mark.parametrize("value, expected", [
    (None, 0.0), ("", 0.0), ("  ", 0.0), ("abc", 0.0), ("12.5", 12.5), (7, 7.0), (True, 0.0), ("nan", 0.0),
])
def test_parse_number_is_lenient(value, expected):
    assert parse_number(value) == expected


def test_normalize_student_code():
    assert normalize_student_code(1001.0) == "1001"
    assert normalize_student_code(" S1001 ") == "S1001"
    assert normalize_student_code(None) == ""
