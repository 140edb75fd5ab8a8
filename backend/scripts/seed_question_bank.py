#!/usr/bin/env python3
"""
Question Bank Seed Script
Loads literacy modules and their quiz questions from a JSON file.

Usage:
    python -m scripts.seed_question_bank <path/to/question_bank.json>

Example:
    python -m scripts.seed_question_bank scripts/sample_question_bank.json

File format:
    [{"week_number": 1, "module_name": "...",
      "questions": [{"text": "...", "options": ["..", ".."],
                     "correct_index": 0, "explanation": "..."}]}]
"""
import json
import sys
import os

# Add the parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session
from microcredit.database import SessionLocal, init_db
from microcredit.models.assessment import LiteracyModule, Question
from microcredit.services.assessment.quiz_engine import QUESTIONS_PER_QUIZ, TOTAL_WEEKS
from microcredit.services.assessment.records import QuestionBankService


def load_modules(path: str) -> list:
    """Parse the JSON file into LiteracyModule records."""
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)

    modules = []
    for entry in raw:
        week = int(entry["week_number"])
        if not 1 <= week <= TOTAL_WEEKS:
            raise ValueError(f"week_number must be 1-{TOTAL_WEEKS}, got {week}")
        modules.append(
            LiteracyModule(
                week_number=week,
                module_name=entry["module_name"],
                questions=tuple(Question.from_dict(q) for q in entry.get("questions", [])),
            )
        )
    return modules


def seed_question_bank(path: str) -> bool:
    """Insert or replace every module found in the file."""
    # Ensure tables exist
    init_db()

    db: Session = SessionLocal()
    try:
        modules = load_modules(path)
        service = QuestionBankService(db)

        for module in modules:
            service.save_module(module)
            distinct = len({q.text for q in module.questions})
            print(f"Week {module.week_number:02d}: {module.module_name} ({distinct} questions)")
            if distinct < QUESTIONS_PER_QUIZ:
                print(f"  Warning: fewer than {QUESTIONS_PER_QUIZ} distinct questions, quiz cannot start")

        print(f"Seeded {len(modules)} literacy modules.")
        return True

    except (OSError, ValueError, KeyError) as e:
        print(f"Error seeding question bank: {e}")
        db.rollback()
        return False
    finally:
        db.close()


def main():
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)

    success = seed_question_bank(sys.argv[1])
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
