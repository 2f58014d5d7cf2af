#!/usr/bin/env python3
"""
Flask CLI Commands for the quiz API data files

Commands:
    flask init-db                  # Seed default users and questions
    flask init-db --dry-run        # Preview what would be seeded
    flask create-user NAME ROLE    # Add a teacher or student account
    flask list-violations          # Show recorded fullscreen violations
    flask question-stats           # Question counts per topic and difficulty

Usage:
    python -m flask --app wsgi:application init-db
"""

import json
import logging
import os

import click
from flask import current_app
from flask.cli import with_appcontext


# ─── UTILITY FUNCTIONS ─────────────────────────────────────────────────────────
# level name -> (logging level, console colour)
LOG_LEVELS = {
    "INFO": (logging.INFO, None),
    "SUCCESS": (logging.INFO, "green"),
    "WARNING": (logging.WARNING, "yellow"),
    "ERROR": (logging.ERROR, "red"),
}


def log_message(message: str, level: str = "INFO"):
    """Echo a command's progress line and record it on the app logger."""
    log_level, colour = LOG_LEVELS.get(level, LOG_LEVELS["INFO"])
    click.echo(click.style(f"{level}: {message}", fg=colour), err=log_level >= logging.ERROR)
    current_app.logger.log(log_level, message)


def load_default_questions(path: str) -> dict:
    """Read the topic -> difficulty -> questions seed file."""
    if not os.path.exists(path):
        log_message(f"⚠️ Default questions file not found: {path}", "WARNING")
        return {}
    with open(path, encoding="utf-8") as f:
        return json.load(f)


# ─── SEEDING FUNCTIONS ─────────────────────────────────────────────────────────
def seed_users(dry_run: bool = False) -> int:
    """Create the default teacher and student accounts when missing."""
    from quizapp.auth.models import Role, User
    from quizapp.storage import get_storage

    created = 0
    for username, password, role_name in current_app.config['DEFAULT_USERS']:
        if get_storage().users.find_one(username=username, role=role_name):
            log_message(f"Default {role_name} '{username}' already exists")
            continue

        if dry_run:
            log_message(f"[DRY RUN] Would create default {role_name} '{username}'")
            continue

        if User.create_user(username, password, Role(role_name)):
            log_message(f"👤 Default {role_name} user created: {username}", "SUCCESS")
            created += 1
        else:
            log_message(f"⚠️ Username '{username}' is taken by another role, skipped", "WARNING")
    return created


def seed_questions(dry_run: bool = False) -> int:
    """Insert the default question bank when the collection is empty."""
    from quizapp.questions.models import seed_default_questions
    from quizapp.storage import get_storage

    existing = get_storage().questions.count()
    if existing:
        log_message(f"Question bank already has {existing} questions, skipping seed")
        return 0

    questions_data = load_default_questions(current_app.config['DEFAULT_QUESTIONS_FILE'])
    total = sum(len(qs) for diffs in questions_data.values() for qs in diffs.values())

    if dry_run:
        log_message(f"[DRY RUN] Would insert {total} default questions")
        return 0

    inserted = seed_default_questions(questions_data)
    log_message(f"📚 Default questions inserted: {inserted}", "SUCCESS")
    return inserted


# ─── CLI COMMANDS ─────────────────────────────────────────────────────────────
@click.command('init-db')
@click.option('--dry-run', is_flag=True, help='Preview what would be seeded without making changes')
@with_appcontext
def init_db_command(dry_run):
    """Seed default users and questions into the JSON files."""
    if dry_run:
        log_message("🔍 DRY RUN MODE - No changes will be made")

    from quizapp.storage import get_storage
    log_message(f"Data directory: {get_storage().storage_dir}")

    users = seed_users(dry_run)
    questions = seed_questions(dry_run)

    action = "preview completed" if dry_run else "initialized successfully"
    log_message(f"🎯 Database {action} ({users} users, {questions} questions added)", "SUCCESS")


@click.command('create-user')
@click.argument('username')
@click.argument('role', type=click.Choice(['teacher', 'student']))
@click.password_option()
@with_appcontext
def create_user_command(username, role, password):
    """Create a teacher or student account."""
    from quizapp.auth.models import Role, User

    user = User.create_user(username, password, Role(role))
    if user:
        log_message(f"👤 Created {role} '{username}' with id {user.id}", "SUCCESS")
    else:
        log_message(f"❌ Username '{username}' already exists", "ERROR")
        raise SystemExit(1)


@click.command('list-violations')
@click.option('--username', default=None, help='Only show violations for this user')
@with_appcontext
def list_violations_command(username):
    """Show fullscreen violations recorded during timed quizzes."""
    from quizapp.users.models import violations_with_usernames

    violations = violations_with_usernames()
    if username:
        violations = [v for v in violations if v['username'] == username]

    if not violations:
        log_message("No fullscreen violations recorded")
        return

    log_message(f"📊 {len(violations)} fullscreen violation(s):")
    for v in violations:
        log_message(
            f"  {v['created_at']}  {v['username']:<15} {v['topic']}/{v['difficulty']}  "
            f"{v['time_outside_fullscreen']}s outside (attempt #{v['quiz_history_id']})"
        )


@click.command('question-stats')
@with_appcontext
def question_stats_command():
    """Count questions per topic and difficulty."""
    from quizapp.questions.models import list_grouped

    grouped = list_grouped()
    if not grouped:
        log_message("⚠️ Question bank is empty - run `flask init-db`", "WARNING")
        return

    log_message("📚 Question Bank Status")
    for topic, difficulties in grouped.items():
        counts = ", ".join(f"{d}: {len(qs)}" for d, qs in difficulties.items())
        log_message(f"  {topic}: {counts}")


# ─── REGISTRATION FUNCTION ─────────────────────────────────────────────────────
def register_cli_commands(app):
    """Register all CLI commands with the Flask app."""
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_user_command)
    app.cli.add_command(list_violations_command)
    app.cli.add_command(question_stats_command)

    app.logger.info("Quiz data CLI commands registered successfully")
