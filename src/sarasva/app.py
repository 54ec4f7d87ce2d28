"""Interactive CLI application."""
import logging

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from sarasva.analytics import get_zone_color, get_zone_label
from sarasva.config import load_config
from sarasva.dates import DAYS, today
from sarasva.errors import SarasvaError
from sarasva.log import setup_logging
from sarasva.models import STATUSES
from sarasva.settings import is_safe_mode, set_safe_mode
from sarasva.stores import Stores, open_stores
from sarasva.tracker import (
    attendance_report, attention_report, exam_overview, mark_attendance, today_view,
)

console = Console()
logger = logging.getLogger(__name__)


def show_welcome():
    console.print(Panel(
        "[bold]Sarasva[/bold]\n[dim]Attendance, timetable and exam tracker[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("today", "Classes due today"),
        ("mark", "Mark attendance"),
        ("summary", "Attendance summary"),
        ("log", "Attendance history"),
        ("subjects", "Manage subjects"),
        ("timetables", "Manage timetables"),
        ("exams", "Exam preparation"),
        ("attention", "Chapters needing attention"),
        ("settings", "Preferences"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def confirm_sensitive(stores: Stores, message: str) -> bool:
    """Ask before archiving when safe mode is on."""
    if not is_safe_mode(stores.db_path, stores.user_id):
        return True
    return Confirm.ask(f"[yellow]{message}[/yellow] Continue?", default=False)


def zone_text(percent: int) -> str:
    color = get_zone_color(percent)
    return f"[{color}]{get_zone_label(percent)}[/{color}]"


def pick_subject(stores: Stores, prompt: str = "Subject id") -> int | None:
    subjects = stores.subjects.list(archived=False)
    if not subjects:
        console.print("[yellow]No subjects yet. Add one under 'subjects'.[/yellow]")
        return None
    for s in subjects:
        console.print(f"  [cyan]{s.id}[/cyan]) {s.name}")
    return IntPrompt.ask(prompt, choices=[str(s.id) for s in subjects])


def cmd_today(stores: Stores):
    view = today_view(stores)
    if not view["subjects"]:
        console.print(f"[dim]No classes scheduled for {view['day']} {view['date']}.[/dim]")
        return
    table = Table(title=f"{view['day']} {view['date']}")
    table.add_column("Id", justify="right")
    table.add_column("Subject", style="cyan")
    table.add_column("Status")
    for item in view["subjects"]:
        status = item["marked_status"].upper() if item["already_marked"] else "[dim]not marked[/dim]"
        table.add_row(str(item["subject_id"]), item["name"], status)
    console.print(table)


def cmd_mark(stores: Stores):
    view = today_view(stores)
    pending = [s for s in view["subjects"] if not s["already_marked"]]
    date = Prompt.ask("Date (YYYY-MM-DD)", default=today())
    if date == view["date"] and pending:
        for item in pending:
            console.print(f"  [cyan]{item['subject_id']}[/cyan]) {item['name']}")
        subject_id = IntPrompt.ask("Subject id", choices=[str(s["subject_id"]) for s in pending])
    else:
        subject_id = pick_subject(stores)
        if subject_id is None:
            return
    status = Prompt.ask("Status", choices=list(STATUSES), default="present")
    record = mark_attendance(stores, subject_id, status, date)
    console.print(f"[green]Marked {record.status} for {record.date}.[/green] [dim]Records are locked once saved.[/dim]")


def cmd_summary(stores: Stores):
    report = attendance_report(stores)
    overall = report["overall"]
    bar_filled = overall["percent"] // 5
    color = get_zone_color(overall["percent"])
    bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
    console.print(Panel(
        f"Overall: [bold]{overall['percent']}%[/bold] {bar} {zone_text(overall['percent'])}\n"
        f"{overall['present']} present / {overall['total']} total",
        title="Attendance Summary", border_style="blue",
    ))

    table = Table(title="By Subject")
    table.add_column("Subject", style="cyan")
    table.add_column("Present", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Percent", justify="right")
    table.add_column("Zone")
    table.add_column("To reach 75%", justify="right")
    for s in report["subjects"]:
        table.add_row(
            s["name"], str(s["present"]), str(s["total"]), f"{s['percent']}%",
            zone_text(s["percent"]),
            str(s["classes_needed_for_75"]) if s["classes_needed_for_75"] else "-",
        )
    console.print(table)


def cmd_log(stores: Stores):
    names = {s.id: s.name for s in stores.subjects.list()}
    subject = Prompt.ask("Subject id (blank for all)", default="").strip()
    subject_id = stores.subjects.get(int(subject)).id if subject.isdigit() else None
    if subject and subject_id is None:
        console.print(f"[red]Not a subject id: {subject}[/red]")
        return
    date_from = Prompt.ask("From (YYYY-MM-DD, blank for all)", default="") or None
    date_to = Prompt.ask("To (YYYY-MM-DD, blank for all)", default="") or None
    records = stores.attendance.query(subject_id=subject_id, date_from=date_from, date_to=date_to)
    if not records:
        console.print("[dim]No attendance recorded.[/dim]")
        return
    table = Table(title=f"Attendance Log ({len(records)})")
    table.add_column("Date")
    table.add_column("Subject", style="cyan")
    table.add_column("Status")
    for r in records:
        table.add_row(r.date, names.get(r.subject_id, str(r.subject_id)), r.status.upper())
    console.print(table)


def cmd_subjects(stores: Stores):
    subjects = stores.subjects.list()
    for s in subjects:
        marker = " [dim](archived)[/dim]" if s.archived else ""
        console.print(f"  [cyan]{s.id}[/cyan]) {s.name}{marker}")
    action = Prompt.ask("Action", choices=["add", "rename", "archive", "back"], default="back")
    if action == "add":
        subject = stores.subjects.create(Prompt.ask("Subject name"))
        console.print(f"[green]Added {subject.name}.[/green]")
    elif action == "rename":
        subject_id = pick_subject(stores)
        if subject_id is not None:
            stores.subjects.rename(subject_id, Prompt.ask("New name"))
    elif action == "archive":
        subject_id = pick_subject(stores)
        if subject_id is not None and confirm_sensitive(stores, "Archiving hides the subject; history is kept."):
            stores.subjects.archive(subject_id)
            console.print("[green]Subject archived.[/green]")


def show_timetable(stores: Stores, timetable_id: int):
    tt = stores.timetables.get(timetable_id)
    names = {s.id: s.name for s in stores.subjects.list()}
    table = Table(title=f"{tt.name} ({tt.state})")
    table.add_column("Slot", justify="right")
    table.add_column("Day")
    table.add_column("Time")
    table.add_column("Subject", style="cyan")
    for slot in sorted(tt.slots, key=lambda s: (DAYS.index(s.day), s.start_time)):
        table.add_row(str(slot.id), slot.day, f"{slot.start_time}-{slot.end_time}",
                      names.get(slot.subject_id, str(slot.subject_id)))
    console.print(table)


def cmd_timetables(stores: Stores):
    timetables = stores.timetables.list()
    for tt in timetables:
        console.print(f"  [cyan]{tt.id}[/cyan]) {tt.name} [dim]{tt.state}, {len(tt.slots)} slots[/dim]")
    action = Prompt.ask(
        "Action", choices=["add", "view", "activate", "archive", "slot", "unslot", "back"], default="back",
    )
    if action == "back":
        return
    if action == "add":
        tt = stores.timetables.create(Prompt.ask("Timetable name"))
        console.print(f"[green]Created {tt.name}.[/green]")
        return
    if not timetables:
        console.print("[yellow]No timetables yet.[/yellow]")
        return
    timetable_id = IntPrompt.ask("Timetable id", choices=[str(t.id) for t in timetables])
    if action == "view":
        show_timetable(stores, timetable_id)
    elif action == "activate":
        tt = stores.timetables.activate(timetable_id)
        console.print(f"[green]{tt.name} is now the active timetable.[/green]")
    elif action == "archive":
        if confirm_sensitive(stores, "Archived timetables cannot be reactivated."):
            stores.timetables.archive(timetable_id)
            console.print("[green]Timetable archived.[/green]")
    elif action == "slot":
        subject_id = pick_subject(stores)
        if subject_id is None:
            return
        day = Prompt.ask("Day", choices=DAYS)
        start = Prompt.ask("Start (HH:mm)")
        end = Prompt.ask("End (HH:mm)")
        stores.timetables.add_slot(timetable_id, day, subject_id, start, end)
        console.print("[green]Slot added.[/green]")
    elif action == "unslot":
        show_timetable(stores, timetable_id)
        stores.timetables.remove_slot(timetable_id, IntPrompt.ask("Slot id"))
        console.print("[green]Slot removed.[/green]")


def cmd_exams(stores: Stores):
    overview = exam_overview(stores)
    for exam in overview:
        date = f" on {exam['exam_date']}" if exam["exam_date"] else ""
        console.print(f"\n[bold]{exam['exam_id']}) {exam['name']}{date}[/bold] [dim]{exam['progress']}% overall[/dim]")
        for s in exam["subjects"]:
            done = " [green]done[/green]" if s["all_done"] else ""
            console.print(
                f"    [cyan]{s['name']}[/cyan] theory {s['theory']}% | practice {s['practice']}% "
                f"| overall {s['overall']}% ({s['chapters']} chapters){done}"
            )
    action = Prompt.ask(
        "Action", choices=["add", "edit", "subject", "drop", "chapter", "progress", "archive", "back"],
        default="back",
    )
    if action == "back":
        return
    if action == "add":
        exam_date = Prompt.ask("Exam date (YYYY-MM-DD, blank if unknown)", default="") or None
        exam = stores.exams.create(Prompt.ask("Exam name"), exam_date)
        console.print(f"[green]Created {exam.name}.[/green]")
        return
    if action == "progress":
        exam = stores.exams.get(IntPrompt.ask("Exam id"))
        for es in exam.subjects:
            for ch in es.chapters:
                console.print(f"  [cyan]{ch.id}[/cyan]) {ch.name} theory {ch.theory_progress:g}% practice {ch.practice_progress:g}%")
        chapter_id = IntPrompt.ask("Chapter id")
        stores.exams.update_chapter(
            chapter_id,
            theory=IntPrompt.ask("Theory %"),
            practice=IntPrompt.ask("Practice %"),
        )
        console.print("[green]Progress updated.[/green]")
        return
    exam_id = IntPrompt.ask("Exam id", choices=[str(e["exam_id"]) for e in overview])
    if action == "subject":
        subject_id = pick_subject(stores)
        if subject_id is not None:
            stores.exams.add_subject(exam_id, subject_id)
    elif action == "edit":
        name = Prompt.ask("New name (blank to keep)", default="") or None
        exam_date = Prompt.ask("New date (YYYY-MM-DD, blank to keep)", default="") or None
        exam = stores.exams.update(exam_id, name=name, exam_date=exam_date)
        console.print(f"[green]Updated {exam.name}.[/green]")
    elif action == "drop":
        subject_id = pick_subject(stores)
        if subject_id is not None and confirm_sensitive(stores, "The subject's chapters are deleted too."):
            stores.exams.remove_subject(exam_id, subject_id)
            console.print("[green]Subject removed.[/green]")
    elif action == "chapter":
        subject_id = pick_subject(stores)
        if subject_id is None:
            return
        stores.exams.add_chapter(
            exam_id, subject_id, Prompt.ask("Chapter name"),
            theory=IntPrompt.ask("Theory %", default=0),
            practice=IntPrompt.ask("Practice %", default=0),
            weightage=IntPrompt.ask("Weightage", default=1),
        )
        console.print("[green]Chapter added.[/green]")
    elif action == "archive":
        if confirm_sensitive(stores, "Archived exams drop out of the attention list."):
            stores.exams.archive(exam_id)
            console.print("[green]Exam archived.[/green]")


def cmd_attention(stores: Stores):
    entries = attention_report(stores)
    if not entries:
        console.print("[green]Nothing needs attention right now.[/green]")
        return
    table = Table(title="Needs Attention")
    table.add_column("Exam")
    table.add_column("Subject", style="cyan")
    table.add_column("Chapter")
    table.add_column("Progress", justify="right")
    table.add_column("Priority", justify="right")
    for e in entries:
        table.add_row(e["exam_name"], e["subject_name"], e["chapter_name"],
                      f"{e['overall_progress']}%", f"[red]{e['score']}[/red]")
    console.print(table)


def cmd_settings(stores: Stores):
    enabled = is_safe_mode(stores.db_path, stores.user_id)
    console.print(f"Safe mode is [bold]{'on' if enabled else 'off'}[/bold]")
    if Confirm.ask("Toggle safe mode?", default=False):
        set_safe_mode(stores.db_path, stores.user_id, not enabled)
        console.print(f"[green]Safe mode {'off' if enabled else 'on'}.[/green]")


COMMANDS = {
    "today": cmd_today,
    "mark": cmd_mark,
    "summary": cmd_summary,
    "log": cmd_log,
    "subjects": cmd_subjects,
    "timetables": cmd_timetables,
    "exams": cmd_exams,
    "attention": cmd_attention,
    "settings": cmd_settings,
}


def run_command(stores: Stores, choice: str) -> bool:
    """Run one menu command. Returns False when the user asked to quit."""
    if choice in ("quit", "exit", "q"):
        console.print("[dim]See you tomorrow![/dim]")
        return False
    command = COMMANDS.get(choice)
    if command is None:
        console.print("[red]Unknown command. Try again.[/red]")
        return True
    try:
        command(stores)
    except SarasvaError as e:
        console.print(f"[red]{e.message}[/red]")
    except KeyboardInterrupt:
        console.print("\n[dim]Use 'quit' to exit.[/dim]")
    except Exception as e:
        logger.exception("Command %s failed", choice)
        console.print(f"[red]Error: {e}[/red]")
    return True


def main():
    config = load_config()
    setup_logging(config.log_level, console)
    stores = open_stores(config.db_path, config.user_id)
    show_welcome()
    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        if not run_command(stores, choice):
            break


if __name__ == "__main__":
    main()
