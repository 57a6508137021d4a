"""
Script to seed a fresh database with an admin account and a demo practice set.

The demo set is saved through the tree writer, so running the script again
replaces the set in place instead of duplicating it. The admin account is only
created when its email is not registered yet.

Usage:
    python scripts/seed_demo_data.py --admin-email admin@celprep.com --admin-password <password>
"""
import sys
import logging
from sqlmodel import Session, select
from celpip_api.core.database import engine, init_db
from celpip_api.core.exceptions import CelpipException
from celpip_api.models.models import User, UserRole
from celpip_api.schemas.practice_set import PracticeSetPayload
from celpip_api.schemas.utils import normalize_email
from celpip_api.services import auth_service
from celpip_api.services.tree_writer import save_practice_set

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

DEMO_SET = {
    "id": "set-1",
    "title": "CELPIP Practice Test 1",
    "description": "A complete practice test focusing on Reading and Writing.",
    "isPublished": True,
    "sections": [
        {
            "id": "sec-1",
            "type": "READING",
            "title": "Reading Section",
            "parts": [
                {
                    "id": "part-1",
                    "timerSeconds": 600,
                    "instructions": "Read the following email and answer the questions.",
                    "contentText": (
                        "Dear Mr. Henderson,\n\n"
                        "I am writing to express my dissatisfaction with the service I received at your "
                        "downtown branch yesterday. I had an appointment scheduled for 2:00 PM with one of "
                        "your mortgage advisors. I arrived ten minutes early, as requested.\n\n"
                        "However, I was kept waiting for over 45 minutes, and the advisor did not have my "
                        "file on hand.\n\n"
                        "Sincerely,\nJames Peterson"
                    ),
                    "questions": [
                        {
                            "id": "q-1",
                            "text": "Why did James write the email?",
                            "type": "MCQ",
                            "options": [
                                "To apply for a mortgage",
                                "To complain about poor service",
                                "To reschedule an appointment",
                                "To compliment the advisor",
                            ],
                            "correctAnswer": "To complain about poor service",
                        },
                        {
                            "id": "q-2",
                            "text": "How long did James wait?",
                            "type": "MCQ",
                            "options": ["10 minutes", "15 minutes", "Over 45 minutes", "2 hours"],
                            "correctAnswer": "Over 45 minutes",
                        },
                    ],
                },
                {
                    "id": "part-1b",
                    "timerSeconds": 400,
                    "instructions": "Read the text and choose the best option for each blank.",
                    "contentText": (
                        "The Honey Badger is known for its [[1]] and ferocity. It has been called the "
                        "world's most [[2]] animal."
                    ),
                    "questions": [
                        {
                            "id": "q-3",
                            "text": "1",
                            "type": "CLOZE",
                            "options": ["strength", "fear", "kindness", "color"],
                            "correctAnswer": "strength",
                        },
                        {
                            "id": "q-4",
                            "text": "2",
                            "type": "CLOZE",
                            "options": ["peaceful", "fearless", "lazy", "slow"],
                            "correctAnswer": "fearless",
                        },
                    ],
                },
            ],
        },
        {
            "id": "sec-2",
            "type": "WRITING",
            "title": "Writing Section",
            "parts": [
                {
                    "id": "part-2",
                    "timerSeconds": 1200,
                    "instructions": "Write an email of about 150-200 words.",
                    "contentText": (
                        "You recently bought a piece of furniture which was damaged during delivery. "
                        "Write an email to the manager of the furniture company.\n\n"
                        "In your email:\n- Describe the furniture you bought\n"
                        "- Explain the damage\n- Say what you want the company to do"
                    ),
                    "questions": [],
                }
            ],
        },
    ],
}


def ensure_admin(session: Session, email: str, password: str) -> User:
    """Create the admin account unless the email is already registered."""
    existing = session.exec(select(User).where(User.email == normalize_email(email))).first()
    if existing:
        logger.info(f"Admin account {existing.email} already exists, leaving it unchanged")
        return existing

    user = auth_service.register(session, email, password, name="Admin User")
    user.role = UserRole.ADMIN
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(f"Created admin account {user.email}")
    return user


def seed(admin_email: str, admin_password: str):
    init_db()
    with Session(engine) as session:
        ensure_admin(session, admin_email, admin_password)
        counts = save_practice_set(session, PracticeSetPayload.model_validate(DEMO_SET))
        logger.info(f"Seeded demo set {DEMO_SET['id']}: {counts}")


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Seed an admin account and a demo practice set")
    parser.add_argument("--admin-email", type=str, default="admin@celprep.com", help="Admin login email")
    parser.add_argument("--admin-password", type=str, required=True, help="Admin password (min 6 characters)")
    args = parser.parse_args()

    if len(args.admin_password) < 6:
        logger.error("Admin password must be at least 6 characters")
        sys.exit(1)

    logger.info("Starting seed...")
    try:
        seed(args.admin_email, args.admin_password)
        logger.info("Successfully completed!")
    except CelpipException as e:
        logger.error("Error during seeding: %s", e, exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
