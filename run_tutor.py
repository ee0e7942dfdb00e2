#!/usr/bin/env python3
"""
Tutoring client command line.

Manage students and AI class feedback on the tutoring backend.

Usage:
    python run_tutor.py login --email EMAIL [--password PASSWORD]
    python run_tutor.py students list
    python run_tutor.py students add NAME --grade GRADE_ID
    python run_tutor.py feedback add STUDENT_ID --subject SUBJECT ...

Examples:
    # Create an account, then log in (the token is remembered)
    python run_tutor.py signup --email me@example.com --name "Lee"
    python run_tutor.py login --email me@example.com

    # Student management
    python run_tutor.py students add "Kim" --grade 3
    python run_tutor.py students edit 7 --name "Kim Minji" --grade 4
    python run_tutor.py students delete 7

    # Feedback for one class session
    python run_tutor.py feedback add 7 --subject Math --date 2025-10-15 \\
        --progress "Fractions" --attitude 4 --understanding 3 --homework 5 --qa 3
    python run_tutor.py feedback list 7

    # Export to CSV, or work interactively
    python run_tutor.py export feedback 7
    python run_tutor.py shell

    # Password from environment variable
    export TUTOR_PASSWORD="your_password"
    python run_tutor.py login --email me@example.com
"""

import sys
import argparse
import getpass
import logging
import shlex
from pathlib import Path
from typing import Optional

import pandas as pd

from tutor_client.app import create_controller, Notice, Page, TutorController
from tutor_client.app.views import AuthView, FeedbackView, StudentListView
from tutor_client.utils.config import Config, SecureString
from tutor_client.utils.file_utils import save_csv, generate_filename
from tutor_client.utils.logger import setup_logger


def parse_arguments(argv=None):
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Manage students and AI class feedback",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL, else INFO)"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    signup = commands.add_parser("signup", help="Create a teacher account")
    signup.add_argument("--email", help="Account email (default: TUTOR_EMAIL)")
    signup.add_argument("--name", required=True, help="Teacher name")
    signup.add_argument("--password", help="Password (default: TUTOR_PASSWORD or prompt)")

    login = commands.add_parser("login", help="Log in and remember the token")
    login.add_argument("--email", help="Account email (default: TUTOR_EMAIL)")
    login.add_argument("--password", help="Password (default: TUTOR_PASSWORD or prompt)")

    commands.add_parser("logout", help="Forget the stored token")
    commands.add_parser("status", help="Show session state")

    students = commands.add_parser("students", help="Student management")
    student_commands = students.add_subparsers(dest="action", required=True)

    student_commands.add_parser("list", help="List students")

    add = student_commands.add_parser("add", help="Add a student")
    add.add_argument("name")
    add.add_argument("--grade", type=int, required=True, help="Grade id")

    edit = student_commands.add_parser("edit", help="Edit a student")
    edit.add_argument("student_id", type=int)
    edit.add_argument("--name", help="New name (default: unchanged)")
    edit.add_argument("--grade", type=int, help="New grade id (default: unchanged)")

    delete = student_commands.add_parser("delete", help="Delete a student")
    delete.add_argument("student_id", type=int)
    delete.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    feedback = commands.add_parser("feedback", help="Class feedback")
    feedback_commands = feedback.add_subparsers(dest="action", required=True)

    feedback_list = feedback_commands.add_parser("list", help="List a student's feedback")
    feedback_list.add_argument("student_id", type=int)

    feedback_add = feedback_commands.add_parser("add", help="Generate feedback for a class")
    feedback_add.add_argument("student_id", type=int)
    feedback_add.add_argument("--subject", required=True)
    feedback_add.add_argument("--date", dest="class_date", help="Class date YYYY-MM-DD (default: today)")
    feedback_add.add_argument("--progress", default="", help="What was covered")
    feedback_add.add_argument("--memo", default="", help="Notes about the class")
    for score in ("attitude", "understanding", "homework", "qa"):
        feedback_add.add_argument(f"--{score}", type=int, default=3, help=f"{score} score 1-5 (default: 3)")

    export = commands.add_parser("export", help="Export to CSV")
    export.add_argument("what", choices=["students", "feedback"])
    export.add_argument("student_id", type=int, nargs="?", help="Student id (feedback only)")
    export.add_argument("--output", type=Path, help="CSV path (default: OUTPUT_DIR/exports/...)")

    commands.add_parser("shell", help="Interactive session")

    return parser.parse_args(argv)


def print_notice(notice: Notice):
    """Print a notice as soon as it is published."""
    marker = "✗" if notice.is_error else "✓"
    print(f"{marker} {notice.message}")


def ask_confirmation(question: str) -> bool:
    """Ask a yes/no question on the terminal."""
    response = input(f"{question} (y/n): ").strip().lower()
    return response in ['y', 'yes']


def resolve_password(explicit: Optional[str], config: Config) -> SecureString:
    """Command-line password, then TUTOR_PASSWORD, then an interactive prompt."""
    if explicit:
        return SecureString(explicit)
    if config.password:
        return config.password
    return SecureString(getpass.getpass("Password: "))


def display_students(view: StudentListView):
    """
    Display the student list.

    Args:
        view: Student list view model
    """
    print("\n" + "=" * 60)
    print("STUDENTS")
    print("=" * 60)

    if view.load_failed:
        print("(Could not load data from the server)")

    if view.empty_message:
        print(view.empty_message)
    else:
        for card in view.students:
            print(
                f"{card.student_id:4d} | {card.name:20s} | "
                f"{card.grade_name:12s} | {card.class_count} classes"
            )

    if view.grade_options:
        grades = ", ".join(f"{g.grade_id}={g.grade_name}" for g in view.grade_options)
        print("-" * 60)
        print(f"Grades: {grades}")
    print("=" * 60)


def display_feedback(view: FeedbackView):
    """
    Display the feedback page of a student.

    Args:
        view: Feedback view model
    """
    print("\n" + "=" * 60)
    print(view.title)
    print("=" * 60)

    if view.load_failed:
        print("(Could not load data from the server)")

    if view.empty_message:
        print(view.empty_message)

    for card in view.feedbacks:
        scores = " ".join(
            f"{name.replace('_score', '')}={value if value is not None else '-'}"
            for name, value in card.scores.items()
        )
        print(f"\n▶ {card.title}  [{scores}]")
        print(f"  Improvement: {card.improvement}")
        print(f"  To work on:  {card.attitude}")
        print(f"  Overall:     {card.overall}")
    print("=" * 60)


def display_view(view):
    if isinstance(view, StudentListView):
        display_students(view)
    elif isinstance(view, FeedbackView):
        display_feedback(view)
    elif isinstance(view, AuthView):
        print("Not logged in. Use 'login' or 'signup'.")


def require_login(controller: TutorController) -> bool:
    if controller.session.is_logged_in:
        return True
    print("ERROR: Not logged in. Run 'login' first.")
    return False


def show_students(controller: TutorController) -> StudentListView:
    """Render the student list, leaving a feedback page if one is open."""
    return controller.back().value


def open_student(controller: TutorController, student_id: int) -> Optional[FeedbackView]:
    """Render the student list, then open one student's feedback page."""
    show_students(controller)
    result = controller.select_student(student_id)
    return result.value if result.is_success else None


def cmd_signup(args, controller: TutorController, config: Config) -> int:
    email = args.email or config.email
    if not email:
        print("ERROR: Email is required. Use --email or set TUTOR_EMAIL")
        return 1

    password = resolve_password(args.password, config)
    result = controller.signup(email, password.get_value(), args.name)
    return 0 if result.is_ok else 1


def cmd_login(args, controller: TutorController, config: Config) -> int:
    email = args.email or config.email
    if not email:
        print("ERROR: Email is required. Use --email or set TUTOR_EMAIL")
        return 1

    password = resolve_password(args.password, config)
    result = controller.login(email, password.get_value())
    if result.is_failure:
        return 1

    display_view(result.value)
    return 0


def cmd_logout(args, controller: TutorController, config: Config) -> int:
    result = controller.logout()
    return 0 if result.is_ok else 1


def cmd_status(args, controller: TutorController, config: Config) -> int:
    info = controller.sessions.get_session_info()
    print(f"Backend:   {config.api_url}")
    print(f"Logged in: {'yes' if info['logged_in'] else 'no'}")
    print(f"Page:      {info['page']}")
    print(f"Token:     {info['token']}")
    return 0


def cmd_students(args, controller: TutorController, config: Config) -> int:
    if not require_login(controller):
        return 1

    view = show_students(controller)

    if args.action == "list":
        display_students(view)
        return 0 if not view.load_failed else 1

    if args.action == "add":
        result = controller.create_student(args.name, args.grade)

    elif args.action == "edit":
        card = view.find(args.student_id)
        if card is None:
            print(f"ERROR: Student {args.student_id} not found")
            return 1
        result = controller.update_student(
            args.student_id,
            args.name if args.name is not None else card.name,
            args.grade if args.grade is not None else card.grade_id
        )

    else:
        if args.yes:
            controller.confirm = lambda question: True
        result = controller.delete_student(args.student_id)

    if result.is_failure:
        return 1

    display_students(result.value)
    return 0


def cmd_feedback(args, controller: TutorController, config: Config) -> int:
    if not require_login(controller):
        return 1

    view = open_student(controller, args.student_id)
    if view is None:
        return 1

    if args.action == "list":
        display_feedback(view)
        return 0 if not view.load_failed else 1

    class_info = {
        "subject": args.subject,
        "class_date": args.class_date,
        "progress_text": args.progress,
        "class_memo": args.memo,
    }
    feedback_info = {
        "attitude_score": args.attitude,
        "understanding_score": args.understanding,
        "homework_score": args.homework,
        "qa_score": args.qa,
    }

    print("Generating AI feedback, this can take a while...")
    result = controller.create_feedback(class_info, feedback_info)
    if result.is_failure:
        return 1

    display_feedback(result.value)
    return 0


def cmd_export(args, controller: TutorController, config: Config) -> int:
    if not require_login(controller):
        return 1

    if args.what == "students":
        view = show_students(controller)
        rows = [card.to_dict() for card in view.students]
        prefix = "students"
    else:
        if args.student_id is None:
            print("ERROR: export feedback requires a STUDENT_ID")
            return 1
        view = open_student(controller, args.student_id)
        if view is None:
            return 1
        rows = [card.to_dict() for card in view.feedbacks]
        prefix = f"feedback_{args.student_id}"

    if view.load_failed:
        print("ERROR: Could not load data from the server; nothing exported")
        return 1

    output = args.output or config.output_dir / "exports" / generate_filename(prefix, "csv")
    if not save_csv(pd.DataFrame(rows), output):
        print(f"ERROR: Could not write {output}")
        return 1

    print(f"Exported {len(rows)} rows to: {output}")
    return 0


SHELL_HELP = """Commands:
  students                      show the student list
  add NAME GRADE_ID             add a student
  edit ID GRADE_ID NAME         edit a student
  delete ID                     delete a student
  open ID                       open a student's feedback page
  feedback SUBJECT [DATE]       generate feedback for the open student
  back                          return to the student list
  refresh                       reload the current page
  logout                        log out
  quit                          leave the shell"""


def shell_feedback(controller: TutorController, params):
    """Prompt for the rest of the feedback form."""
    class_info = {
        "subject": params[0],
        "class_date": params[1] if len(params) > 1 else None,
        "progress_text": input("Progress: ").strip(),
        "class_memo": input("Memo: ").strip(),
    }
    feedback_info = {}
    for name in ("attitude", "understanding", "homework", "qa"):
        raw = input(f"{name} score 1-5 [3]: ").strip() or "3"
        feedback_info[f"{name}_score"] = int(raw)

    print("Generating AI feedback, this can take a while...")
    return controller.create_feedback(class_info, feedback_info)


def run_shell_command(controller: TutorController, command: str, params):
    """
    Execute one shell command.

    Returns:
        The Result of the action

    Raises:
        ValueError: On malformed arguments
    """
    if command == "students":
        return controller.refresh() if controller.session.current_page == Page.STUDENTS else controller.back()
    if command == "add":
        return controller.create_student(" ".join(params[:-1]), int(params[-1]))
    if command == "edit":
        return controller.update_student(int(params[0]), " ".join(params[2:]), int(params[1]))
    if command == "delete":
        return controller.delete_student(int(params[0]))
    if command == "open":
        return controller.select_student(int(params[0]))
    if command == "feedback":
        return shell_feedback(controller, params)
    if command == "back":
        return controller.back()
    if command == "refresh":
        return controller.refresh()
    if command == "logout":
        return controller.logout()
    raise ValueError(f"Unknown command: {command}")


def cmd_shell(args, controller: TutorController, config: Config) -> int:
    if not require_login(controller):
        return 1

    controller.confirm = ask_confirmation
    display_view(controller.start())
    print("Type 'help' for commands.")

    while controller.session.is_logged_in:
        try:
            line = input(f"tutor:{controller.session.current_page.value}> ").strip()
        except EOFError:
            print()
            break

        if not line:
            continue

        try:
            command, *params = shlex.split(line)
        except ValueError as e:
            print(f"ERROR: {e}")
            continue

        if command in ("quit", "exit"):
            break
        if command == "help":
            print(SHELL_HELP)
            continue

        try:
            result = run_shell_command(controller, command, params)
        except (ValueError, IndexError) as e:
            print(f"ERROR: {e}. Type 'help' for usage.")
            continue

        if result.is_success:
            display_view(result.value)

    return 0


COMMANDS = {
    "signup": cmd_signup,
    "login": cmd_login,
    "logout": cmd_logout,
    "status": cmd_status,
    "students": cmd_students,
    "feedback": cmd_feedback,
    "export": cmd_export,
    "shell": cmd_shell,
}


def main(argv=None):
    """Main execution function."""
    args = parse_arguments(argv)
    config = Config()

    log_level = args.log_level or config.log_level
    logger = setup_logger(
        "tutor_client",
        level=getattr(logging, log_level, logging.WARNING),
        log_file=str(config.output_dir / "logs" / "tutor_client.log")
    )

    try:
        config.validate()

        controller = create_controller(config, confirm=ask_confirmation)
        controller.notifier.subscribe(print_notice)

        try:
            return COMMANDS[args.command](args, controller, config)
        finally:
            controller.close()

    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        logger.info("Interrupted by user")
        return 130

    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        print(f"\nERROR: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
