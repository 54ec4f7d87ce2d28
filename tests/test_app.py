from unittest.mock import patch

from sarasva.app import (
    cmd_exams, cmd_log, cmd_mark, cmd_settings, cmd_subjects, cmd_timetables, confirm_sensitive,
    run_command,
)
from sarasva.settings import is_safe_mode, set_safe_mode


def test_run_command_quit(stores):
    assert run_command(stores, "quit") is False
    assert run_command(stores, "q") is False


def test_run_command_unknown_keeps_running(stores):
    assert run_command(stores, "dance") is True


def test_run_command_reports_engine_errors(stores):
    math = stores.subjects.create("Math")
    stores.attendance.insert_if_absent(math.id, "2024-03-01", "present")
    # date, subject, status
    with patch("sarasva.app.Prompt.ask", side_effect=["2024-03-01", "absent"]), \
            patch("sarasva.app.IntPrompt.ask", return_value=math.id), \
            patch("sarasva.app.console.print") as printed:
        assert run_command(stores, "mark") is True
    messages = " ".join(str(call.args[0]) for call in printed.call_args_list if call.args)
    assert "already marked" in messages
    assert stores.attendance.get(math.id, "2024-03-01").status == "present"


def test_cmd_mark_past_date(stores):
    math = stores.subjects.create("Math")
    with patch("sarasva.app.Prompt.ask", side_effect=["2024-03-04", "present"]), \
            patch("sarasva.app.IntPrompt.ask", return_value=math.id):
        cmd_mark(stores)
    assert stores.attendance.get(math.id, "2024-03-04").status == "present"


def test_cmd_subjects_add(stores):
    with patch("sarasva.app.Prompt.ask", side_effect=["add", "Chemistry"]):
        cmd_subjects(stores)
    assert [s.name for s in stores.subjects.list()] == ["Chemistry"]


def test_cmd_subjects_archive_needs_confirmation(stores):
    math = stores.subjects.create("Math")
    with patch("sarasva.app.Prompt.ask", return_value="archive"), \
            patch("sarasva.app.IntPrompt.ask", return_value=math.id), \
            patch("sarasva.app.Confirm.ask", return_value=False):
        cmd_subjects(stores)
    assert stores.subjects.get(math.id).archived is False


def test_confirm_sensitive_skipped_without_safe_mode(stores):
    set_safe_mode(stores.db_path, stores.user_id, False)
    with patch("sarasva.app.Confirm.ask") as asked:
        assert confirm_sensitive(stores, "sure?") is True
    asked.assert_not_called()


def test_cmd_timetables_activate(stores):
    a = stores.timetables.create("A")
    b = stores.timetables.create("B")
    stores.timetables.activate(a.id)
    with patch("sarasva.app.Prompt.ask", return_value="activate"), \
            patch("sarasva.app.IntPrompt.ask", return_value=b.id):
        cmd_timetables(stores)
    assert stores.timetables.active().id == b.id


def test_cmd_settings_toggles_safe_mode(stores):
    with patch("sarasva.app.Confirm.ask", return_value=True):
        cmd_settings(stores)
    assert is_safe_mode(stores.db_path, stores.user_id) is False


def test_cmd_log_filters_by_subject(stores):
    math = stores.subjects.create("Math")
    physics = stores.subjects.create("Physics")
    stores.attendance.insert_if_absent(math.id, "2024-03-01", "present")
    stores.attendance.insert_if_absent(physics.id, "2024-03-01", "absent")
    stores.attendance.insert_if_absent(math.id, "2024-03-04", "absent")
    # subject, from, to
    with patch("sarasva.app.Prompt.ask", side_effect=[str(physics.id), "", ""]), \
            patch("sarasva.app.console.print") as printed:
        cmd_log(stores)
    table = printed.call_args.args[0]
    assert table.title == "Attendance Log (1)"


def test_cmd_log_blank_subject_lists_all(stores):
    math = stores.subjects.create("Math")
    stores.attendance.insert_if_absent(math.id, "2024-03-01", "present")
    stores.attendance.insert_if_absent(math.id, "2024-03-04", "absent")
    with patch("sarasva.app.Prompt.ask", side_effect=["", "2024-03-02", ""]), \
            patch("sarasva.app.console.print") as printed:
        cmd_log(stores)
    assert printed.call_args.args[0].title == "Attendance Log (1)"


def test_cmd_exams_drop_subject(stores):
    set_safe_mode(stores.db_path, stores.user_id, False)
    math = stores.subjects.create("Math")
    exam = stores.exams.create("Finals")
    stores.exams.add_subject(exam.id, math.id)
    stores.exams.add_chapter(exam.id, math.id, "Limits")
    with patch("sarasva.app.Prompt.ask", return_value="drop"), \
            patch("sarasva.app.IntPrompt.ask", side_effect=[exam.id, math.id]):
        cmd_exams(stores)
    assert stores.exams.get(exam.id).subjects == []


def test_cmd_exams_edit(stores):
    exam = stores.exams.create("Finals")
    with patch("sarasva.app.Prompt.ask", side_effect=["edit", "", "2024-05-20"]), \
            patch("sarasva.app.IntPrompt.ask", return_value=exam.id):
        cmd_exams(stores)
    loaded = stores.exams.get(exam.id)
    assert (loaded.name, loaded.exam_date) == ("Finals", "2024-05-20")
