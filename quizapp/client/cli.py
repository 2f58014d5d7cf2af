#!/usr/bin/env python3
"""
Terminal front end for the quiz platform

Commands:
    quizapp login                 # Sign in as a teacher or student
    quizapp play                  # Pick a topic and difficulty and take a quiz
    quizapp play --practice       # Untimed attempt without fullscreen tracking
    quizapp leaderboard           # Top 10 results on this machine
    quizapp dashboard             # Student progress or teacher overview
    quizapp questions list|add|edit|delete   # Teacher question management
"""

import logging

import click

from quizapp.auth.models import Role
from quizapp.questions.models import Difficulty

from .api import ApiClient, ApiError
from .fullscreen import FullscreenTracker, TerminalDisplay
from .recorder import QuizRecorder, dashboard_stats
from .session import QuizSession, SessionError, SessionState
from .store import ClientStore

logger = logging.getLogger(__name__)

PALETTES = {
    True: {"title": "bright_cyan", "ok": "bright_green", "bad": "bright_red", "warn": "bright_yellow", "muted": "white"},
    False: {"title": "blue", "ok": "green", "bad": "red", "warn": "yellow", "muted": "black"},
}

DIFFICULTIES = [d.value for d in Difficulty]


class ClientContext:
    """Shared client state handed to every command"""

    def __init__(self, store: ClientStore, api_url: str = None):
        self.store = store
        user = store.user or {}
        self.api = ApiClient(api_url, token=user.get("token"))
        self.recorder = QuizRecorder(store, self.api)

    @property
    def user(self):
        return self.store.user

    @property
    def role(self):
        return Role.parse((self.user or {}).get("role"))

    def say(self, message: str, kind: str = None, **kwargs):
        fg = PALETTES[self.store.dark_mode].get(kind) if kind else None
        click.echo(click.style(message, fg=fg, bold=kind == "title"), **kwargs)

    def fail(self, message: str):
        self.say(message, "bad", err=True)
        raise SystemExit(1)

    def require_role(self, role: Role):
        if not self.user:
            self.fail("Please log in first: quizapp login")
        if self.role is not role:
            self.fail(f"Access denied. {role.value.title()} role required")

    def load_questions(self):
        """Grouped questions from the server, falling back to the last snapshot"""
        try:
            grouped = self.api.grouped_questions()
        except ApiError as e:
            if not self.store.questions_data:
                self.fail(f"Could not load questions: {e.message}")
            self.say(f"⚠️ Using saved questions ({e.message})", "warn")
            return self.store.questions_data
        self.store.set("questions_data", grouped)
        return grouped


pass_ctx = click.make_pass_decorator(ClientContext)


@click.group()
@click.option("--api-url", envvar="QUIZAPP_API_URL", default=None, help="Base URL of the quiz API")
@click.option("--store", "store_path", envvar="QUIZAPP_CLIENT_STORE", default=None,
              help="Path of the local client state file")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx, api_url, store_path, verbose):
    """Quiz platform terminal client."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    ctx.obj = ClientContext(ClientStore(store_path), api_url)


# ─── ACCOUNT COMMANDS ──────────────────────────────────────────────────────────
def _store_session(client: ClientContext, data):
    client.store.set_user({**data["user"], "token": data["token"]})
    client.say(f"Welcome, {data['user']['username']}! Signed in as {data['user']['role']}.", "ok")


@cli.command()
@click.option("--role", type=click.Choice([r.value for r in Role]), default="student", prompt=True)
@click.option("--username", prompt=True)
@click.password_option(confirmation_prompt=False)
@pass_ctx
def login(client, role, username, password):
    """Sign in and remember the session."""
    try:
        data = client.api.login(username.strip(), password, role)
    except ApiError as e:
        client.fail(f"Login failed: {e.message}")
    _store_session(client, data)


@cli.command()
@click.option("--role", type=click.Choice([r.value for r in Role]), default="student", prompt=True)
@click.option("--username", prompt=True)
@click.password_option()
@pass_ctx
def register(client, role, username, password):
    """Create an account and sign in."""
    try:
        data = client.api.register(username.strip(), password, role)
    except ApiError as e:
        client.fail(f"Registration failed: {e.message}")
    _store_session(client, data)


@cli.command()
@pass_ctx
def logout(client):
    """Forget the stored session."""
    client.store.set_user(None)
    client.say("You have been logged out.")


@cli.command("whoami")
@pass_ctx
def whoami(client):
    """Check the stored session against the server."""
    if not client.user:
        client.fail("Not logged in")
    try:
        user = client.api.verify()
    except ApiError as e:
        client.store.set_user(None)
        client.fail(f"Session is no longer valid: {e.message}")
    client.say(f"{user['username']} ({user['role']})")


@cli.command("dark-mode")
@pass_ctx
def dark_mode(client):
    """Toggle the dark colour palette."""
    enabled = client.store.toggle_dark_mode()
    client.say(f"Dark mode {'on' if enabled else 'off'}", "title")


# ─── QUIZ ──────────────────────────────────────────────────────────────────────
def _pick(client, label, choices, preset=None):
    if preset:
        if preset not in choices:
            client.fail(f"Unknown {label.lower()} '{preset}'. Available: {', '.join(choices)}")
        return preset
    return click.prompt(label, type=click.Choice(choices))


def _result_message(percentage: float):
    if percentage >= 80:
        return "🏆", "Outstanding! You're a Quiz Master!"
    if percentage >= 60:
        return "🎉", "Great Job! Well Done!"
    if percentage >= 40:
        return "👍", "Good Effort! Keep Practicing!"
    return "💪", "Keep Learning! You'll Get Better!"


def _show_question(client, session: QuizSession):
    q = session.current_question
    mode = "(Practice Mode)" if session.practice_mode else "Mode"
    client.say("")
    client.say(f"{session.topic} - {session.difficulty.value.upper()} {mode}", "title")
    if session.tracker and not session.tracker.is_fullscreen:
        client.say(f"Warning: You are not in fullscreen mode! Time outside: "
                   f"{session.tracker.seconds_outside}s", "bad")
    status = f"Question {session.current_index + 1} of {session.total_questions}"
    if not session.practice_mode and session.state is SessionState.ACTIVE:
        status += f"  ⏱ {session.time_left}s"
    client.say(status, "muted")
    client.say(q["question"])
    for n, option in enumerate(q["options"], 1):
        client.say(f"  {n}. {option}")


def _show_answer(client, session: QuizSession):
    q = session.current_question
    answer = session.answers.get(session.current_index)
    if answer is None:
        client.say("⏰ Time's up! No answer recorded.", "warn")
    elif session.is_correct():
        client.say("✔ Correct!", "ok")
    else:
        client.say(f"✘ Incorrect - you chose {q['options'][answer]}", "bad")
    client.say(f"Answer: {q['options'][q['correct']]}", "ok")


def run_quiz(client, session: QuizSession):
    """Drive the session from terminal input until it completes"""
    session.start()
    try:
        while session.state is not SessionState.COMPLETE:
            _show_question(client, session)

            if session.state is SessionState.ACTIVE:
                choice = click.prompt("Your answer (1-4, p = previous)", default="", show_default=False).strip().lower()
                if session.state is SessionState.ACTIVE:
                    if choice == "p":
                        try:
                            session.previous()
                        except SessionError as e:
                            client.say(str(e), "warn")
                        continue
                    if not choice.isdigit():
                        client.say("Please choose an option number.", "warn")
                        continue
                    try:
                        session.select(int(choice) - 1)
                        session.submit()
                    except SessionError as e:
                        if session.state is SessionState.ACTIVE:
                            client.say(str(e), "warn")
                            continue

            _show_answer(client, session)
            label = "Submit" if session.is_last_question else "Next"
            action = click.prompt(f"[n] {label}  [p] Previous", type=click.Choice(["n", "p"]), default="n")
            try:
                if action == "p":
                    session.previous()
                else:
                    session.next()
            except SessionError as e:
                client.say(str(e), "warn")
    finally:
        session.close()
    return session.result()


def show_result(client, result):
    emoji, message = _result_message(float(result["percentage"]))
    client.say("")
    client.say(f"{emoji}  {message}", "title")
    client.say(f"Score: {result['percentage']}%   Correct: {result['score']}/{result['total_questions']}")
    client.say(f"{result['topic']} · {result['difficulty'].upper()}", "muted")
    if result["time_outside_fullscreen"]:
        client.say(f"Time outside fullscreen: {result['time_outside_fullscreen']}s", "warn")
    for wrong in result["wrong_answers"]:
        client.say(f"  ✘ {wrong['question']}", "bad")
        client.say(f"    Your answer: {wrong['user_answer']}   Correct: {wrong['correct_answer']}")


@cli.command()
@click.option("--topic", default=None, help="Topic to play")
@click.option("--difficulty", type=click.Choice(DIFFICULTIES), default=None)
@click.option("--practice", is_flag=True, help="Untimed, no fullscreen enforcement")
@pass_ctx
def play(client, topic, difficulty, practice):
    """Take a quiz."""
    questions_data = client.load_questions()
    topic = _pick(client, "Topic", sorted(questions_data), topic)
    available = [d for d in DIFFICULTIES if questions_data[topic].get(d)]
    if not available:
        client.fail(f"No questions for {topic} yet")
    difficulty = _pick(client, "Difficulty", available, difficulty)

    role = client.role
    session = QuizSession(
        questions_data[topic][difficulty], topic, difficulty, role=role, practice_mode=practice,
        tracker=FullscreenTracker(TerminalDisplay()), realtime=True,
    )
    result = run_quiz(client, session)
    show_result(client, result)

    try:
        client.recorder.record_history(result, role)
    except ApiError as e:
        client.say(f"⚠️ Could not save your result to the server: {e.message}", "warn")

    default_name = (client.user or {}).get("username", "")
    name = click.prompt("Name for the leaderboard (blank to skip)", default=default_name, show_default=bool(default_name))
    if name.strip():
        client.recorder.record_leaderboard(name.strip(), result["score"], result["total_questions"], topic, difficulty)
        client.say("Added to the leaderboard!", "ok")


@cli.command()
@pass_ctx
def leaderboard(client):
    """Top 10 results recorded on this machine."""
    entries = client.store.leaderboard
    if not entries:
        client.say("No scores yet. Be the first: quizapp play")
        return
    client.say("🏆 Leaderboard", "title")
    for rank, e in enumerate(entries, 1):
        client.say(f"{rank:>2}. {e['name']:<16} {e['percentage']:>5}%  {e['score']}/{e['total_questions']}  "
                   f"{e['topic']} · {e['difficulty']}  {e['date']}")


@cli.command()
@pass_ctx
def history(client):
    """Your completed attempts."""
    client.require_role(Role.STUDENT)
    try:
        records = client.api.quiz_history()
    except ApiError as e:
        client.say(f"⚠️ Showing local history ({e.message})", "warn")
        records = client.store.quiz_history
    if not records:
        client.say("No quizzes taken yet.")
        return
    for r in records:
        when = r.get("created_at") or r.get("date")
        client.say(f"{when}  {r['topic']} · {r['difficulty']}  {r['score']}/{r['total_questions']} "
                   f"({r['percentage']}%)")


@cli.command()
@pass_ctx
def dashboard(client):
    """Student progress or teacher overview."""
    if not client.user:
        client.fail("Please log in first: quizapp login")

    if client.role is Role.TEACHER:
        _teacher_dashboard(client)
        return

    stats = dashboard_stats(client.store.quiz_history)
    client.say(f"Welcome, {client.user['username']}!", "title")
    client.say(f"Quizzes taken: {stats['total_quizzes']}   Questions: {stats['total_questions']}   "
               f"Correct: {stats['total_correct']}   Average: {stats['average_score']}%")
    for topic, perf in stats["topic_performance"].items():
        pct = perf["correct"] / perf["total"] * 100 if perf["total"] else 0
        client.say(f"  {topic}: {pct:.1f}% over {perf['quizzes']} quiz(zes)")
    if stats["recent_wrong_answers"]:
        client.say("Recent mistakes:", "warn")
        for w in stats["recent_wrong_answers"]:
            client.say(f"  {w['question']} - correct: {w['correct_answer']}")


def _teacher_dashboard(client):
    questions_data = client.load_questions()
    client.say("Teacher Dashboard", "title")
    for topic, diffs in questions_data.items():
        counts = ", ".join(f"{d}: {len(qs)}" for d, qs in diffs.items())
        client.say(f"  {topic}: {counts}")
    try:
        violations = client.api.violations()
    except ApiError as e:
        client.fail(f"Could not load violations: {e.message}")
    client.say(f"Fullscreen violations: {len(violations)}", "warn" if violations else None)
    for v in violations:
        client.say(f"  {v['created_at']}  {v['username']}  {v['topic']} · {v['difficulty']}  "
                   f"{v['time_outside_fullscreen']}s")


# ─── TEACHER QUESTION MANAGEMENT ───────────────────────────────────────────────
@cli.group()
def questions():
    """Manage the question bank (teachers)."""


def _prompt_question(existing=None):
    existing = existing or {}
    text = click.prompt("Question", default=existing.get("question"))
    old_options = existing.get("options") or [None] * 4
    options = [click.prompt(f"Option {n}", default=old_options[n - 1]) for n in range(1, 5)]
    correct = click.prompt("Correct option (1-4)", type=click.IntRange(1, 4),
                           default=existing["correct"] + 1 if "correct" in existing else None)
    return text, options, correct - 1


@questions.command("list")
@click.option("--topic", default=None)
@click.option("--difficulty", type=click.Choice(DIFFICULTIES), default=None)
@pass_ctx
def list_questions(client, topic, difficulty):
    """List questions, optionally filtered."""
    try:
        rows = client.api.list_questions(topic, difficulty)
    except ApiError as e:
        client.fail(e.message)
    for q in rows:
        client.say(f"#{q['id']:<4} [{q['topic']} · {q['difficulty']}] {q['question']}")


@questions.command("add")
@click.option("--topic", prompt=True)
@click.option("--difficulty", type=click.Choice(DIFFICULTIES), prompt=True)
@pass_ctx
def add_question(client, topic, difficulty):
    """Add a question."""
    client.require_role(Role.TEACHER)
    text, options, correct = _prompt_question()
    try:
        created = client.api.create_question(topic, difficulty, text, options, correct)
    except ApiError as e:
        client.fail(e.message)
    client.say(f"Question #{created['id']} added", "ok")


@questions.command("edit")
@click.argument("question_id", type=int)
@pass_ctx
def edit_question(client, question_id):
    """Edit a question."""
    client.require_role(Role.TEACHER)
    try:
        existing = client.api.get_question(question_id)
        topic = click.prompt("Topic", default=existing["topic"])
        difficulty = click.prompt("Difficulty", type=click.Choice(DIFFICULTIES), default=existing["difficulty"])
        text, options, correct = _prompt_question(existing)
        client.api.update_question(question_id, topic, difficulty, text, options, correct)
    except ApiError as e:
        client.fail(e.message)
    client.say(f"Question #{question_id} updated", "ok")


@questions.command("delete")
@click.argument("question_id", type=int)
@click.confirmation_option(prompt="Are you sure you want to delete this question?")
@pass_ctx
def delete_question(client, question_id):
    """Delete a question."""
    client.require_role(Role.TEACHER)
    try:
        client.api.delete_question(question_id)
    except ApiError as e:
        client.fail(e.message)
    client.say(f"Question #{question_id} deleted", "ok")


if __name__ == "__main__":
    cli()
