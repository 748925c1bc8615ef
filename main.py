#!/usr/bin/env python3
"""
MCQ Quiz App - Main Entry Point

Runs a multiple-choice quiz in the terminal against the hosted backend,
or against the built-in demo questions when no backend is configured.

Usage:
    python main.py

Configuration:
    1. Copy config.example.json to config.json and fill in the backend section
    2. Or set SUPABASE_URL and SUPABASE_ANON_KEY environment variables
    3. Set QUIZ_EMAIL and QUIZ_PASSWORD to sign in and save results

Environment variables override config.json.
"""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path

from mcq_quiz.auth_manager import AuthManager
from mcq_quiz.backend_client import BackendClient
from mcq_quiz.config_manager import ConfigManager
from mcq_quiz.data_manager import DataManager
from mcq_quiz.quiz_controller import QuizController
from mcq_quiz.results_manager import ResultsManager
from mcq_quiz.utils import calculate_percentage, format_date, format_time

HELP_TEXT = "Answer with a/b/c/d, [n]ext, [p]revious, [f]inish, [q]uit"


def load_config(config_path: Path = Path("config.json")) -> dict:
    """Load configuration from config.json if it exists."""
    if not config_path.exists():
        return {}

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        print(f"❌ Error: Invalid JSON in {config_path}: {e}")
        sys.exit(1)
    except OSError as e:
        print(f"❌ Error loading {config_path}: {e}")
        sys.exit(1)


def setup_logging_from_config(config: dict) -> None:
    """Set up logging based on configuration."""
    log_config = config.get('logging', {})
    log_level = getattr(logging, log_config.get('level', 'INFO').upper())
    log_directory = Path(log_config.get('log_directory', './logs/'))

    log_directory.mkdir(parents=True, exist_ok=True)

    # Console only shows warnings so it does not interleave with the quiz
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            console_handler,
            logging.FileHandler(log_directory / "quiz.log", encoding='utf-8')
        ]
    )
    logging.getLogger('aiohttp').setLevel(logging.WARNING)


def print_question(controller: QuizController) -> None:
    question = controller.get_current_question()
    progress = controller.get_progress()
    answer = controller.engine.session.user_answers[controller.engine.session.current_index]

    print(f"\nQuestion {progress.current}/{progress.total} ({progress.answered} answered)")
    print(question.question_text)
    for label, text in question.options.items():
        marker = "*" if label == answer else " "
        print(f" {marker} {label}) {text}")


async def run_quiz(controller: QuizController, user_id=None) -> None:
    start = await controller.start_quiz()
    if not start['success']:
        print(f"❌ Could not start quiz: {start['error']}")
        return
    if start['fallback']:
        print("📝 Using demo questions")

    print(HELP_TEXT)
    while True:
        if controller.is_time_up():
            print("⏱️ Time is up!")
            break

        print_question(controller)
        command = (await asyncio.to_thread(input, "> ")).strip().lower()

        if command == 'q':
            controller.reset()
            print("👋 Quiz abandoned")
            return
        if command == 'f':
            break
        if command == 'n':
            if not controller.next_question():
                print("This is the last question, [f]inish to submit")
        elif command == 'p':
            if not controller.previous_question():
                print("This is the first question")
        elif controller.answer(command):
            controller.next_question()
        else:
            print(HELP_TEXT)

    outcome = await controller.finish_quiz(user_id)
    result = outcome['result']
    print(f"\n{result.message}")
    print(f"Score: {result.correct}/{result.total} ({result.percentage}%) - Grade {result.grade}")
    print(f"Time: {result.time_formatted}")
    if user_id and not outcome['saved']:
        print(f"⚠️ Result was not saved: {outcome['error']}")
    controller.reset()

    if user_id and controller.results_manager is not None:
        command = (await asyncio.to_thread(input, "[h]istory or Enter to exit: ")).strip().lower()
        if command == 'h':
            await show_history(controller.results_manager, user_id)


async def show_history(results_manager: ResultsManager, user_id: str) -> None:
    """Print recent attempts, overall statistics and leaderboard rank."""
    history = await results_manager.get_user_results(user_id, limit=5)
    if not history['success']:
        print(f"⚠️ Could not load history: {history['error']}")
        return

    print("\nRecent attempts:")
    for row in history['data']:
        percentage = calculate_percentage(row.get('score') or 0, row.get('total_questions') or 0)
        when = format_date(row['created_at']) if row.get('created_at') else "unknown date"
        print(f"  {when}: {row.get('score')}/{row.get('total_questions')} ({percentage}%)"
              f" in {format_time(row.get('duration_seconds') or 0)}")

    statistics = await results_manager.get_statistics(user_id)
    if statistics['success']:
        stats = statistics['stats']
        print(f"Attempts: {stats.total_attempts}, average score: {stats.average_score}, "
              f"best score: {stats.best_score}, average time: {format_time(stats.average_time)}")

        rank = await results_manager.get_leaderboard_position(stats.best_score)
        if rank['success']:
            print(f"🏆 Leaderboard position: #{rank['position']}")


async def run_quiz_with_config() -> None:
    """Run a quiz with configuration."""
    config = load_config()
    setup_logging_from_config(config)

    config_manager = ConfigManager()
    errors = config_manager.load_from_dict(config) + config_manager.load_from_env()
    for error in errors:
        print(f"⚠️ {error}")

    if not config_manager.is_backend_configured():
        config_manager.demo_mode = True
        controller = QuizController(DataManager(), config_manager)
        await run_quiz(controller)
        return

    async with BackendClient(**config_manager.get_backend_settings()) as client:
        auth = AuthManager(client)
        user_id = None
        email = os.getenv('QUIZ_EMAIL')
        if email:
            login = await auth.login_user(email, os.getenv('QUIZ_PASSWORD', ''))
            if login['success']:
                user_id = login['user'].get('id')
                print(f"✅ Signed in as {email}")
            else:
                print(f"⚠️ Sign-in failed: {login['error']}")

        controller = QuizController(DataManager(client), config_manager, ResultsManager(client))
        await run_quiz(controller, user_id)

        if user_id:
            await auth.logout_user()


def main() -> None:
    try:
        asyncio.run(run_quiz_with_config())
    except (KeyboardInterrupt, EOFError):
        print("\n👋 Quiz stopped by user")


if __name__ == "__main__":
    main()
