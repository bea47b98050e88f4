import logging
import secrets

from pymongo import ASCENDING as ASC
from pymongo import DESCENDING as DESC
from pymongo import TEXT

from app.core.permissions import PRESET_ADMIN
from app.core.security import get_password_hash
from app.db.mongodb import get_database
from app.models.user import User

logger = logging.getLogger(__name__)


INDEXES = {
    "users": [
        ("username", {"unique": True}),
        ("email", {"unique": True}),
        ("skills", {}),
        ("interests", {}),
        ([("is_active", ASC), ("last_seen", DESC)], {}),
        (
            [("name", TEXT), ("username", TEXT), ("bio", TEXT), ("skills", TEXT)],
            {"name": "user_search"},
        ),
    ],
    "projects": [
        ("owner_id", {}),
        ("team_members.user_id", {}),
        ("team_requests.user_id", {}),
        ("technologies", {}),
        ([("is_public", ASC), ("created_at", DESC)], {}),
        ([("status", ASC), ("is_public", ASC)], {}),
    ],
    "tasks": [
        ([("project_id", ASC), ("status", ASC)], {}),
        ([("project_id", ASC), ("created_at", DESC)], {}),
        ("assignee_id", {}),
        ("due_date", {}),
    ],
    "discussions": [
        ([("project_id", ASC), ("is_pinned", DESC), ("created_at", DESC)], {}),
        ([("project_id", ASC), ("hashtags", ASC)], {}),
        ([("project_id", ASC), ("category", ASC)], {}),
    ],
    "posts": [
        ("created_at", {}),
        ("author_id", {}),
        ("tags", {}),
    ],
}


async def create_indexes(db):
    for collection, indexes in INDEXES.items():
        for keys, options in indexes:
            await db[collection].create_index(keys, **options)
    logger.info(f"Ensured indexes on {', '.join(INDEXES)}")


async def init_db():
    db = await get_database()

    await create_indexes(db)

    user_collection = db["users"]

    if await user_collection.count_documents({}) == 0:
        logger.info("No users found. Creating initial admin user.")

        password = secrets.token_urlsafe(16)
        user = User(
            username="admin",
            email="admin@example.com",
            name="Administrator",
            hashed_password=get_password_hash(password),
            permissions=list(PRESET_ADMIN),
        )
        await user_collection.insert_one(user.model_dump(by_alias=True))

        # Credentials go to stdout only, never to the log
        print("\n" + "=" * 60)
        print("INITIAL ADMIN USER CREATED")
        print("-" * 60)
        print(f"Username: {user.username}")
        print(f"Email:    {user.email}")
        print(f"Password: {password}")
        print("-" * 60)
        print("PLEASE CHANGE THIS PASSWORD IMMEDIATELY AFTER LOGIN!")
        print("=" * 60 + "\n")

        logger.info("Initial admin user created. Credentials displayed on stdout.")
    else:
        logger.info("Users already exist. Skipping initial user creation.")
