"""User profile repository.

The existence of a profile row is what marks a user as known; users
without one are routed through onboarding.
"""

from __future__ import annotations

from qbot.storage.database import Database, storage_errors
from qbot.storage.models import UserProfile

_COLUMNS = ("full_name", "rank", "ship_name", "company", "city", "country", "whatsapp_number")


class ProfileRepository:
    def __init__(self, db: Database):
        self._db = db

    async def get(self, user_key: str) -> UserProfile | None:
        with storage_errors("profile.get"):
            cursor = await self._db.conn.execute(
                "SELECT * FROM user_profiles WHERE user_key = ?",
                (user_key,),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        return UserProfile(user_key=row["user_key"], **{col: row[col] for col in _COLUMNS})

    async def upsert(self, profile: UserProfile) -> None:
        assignments = ", ".join(f"{col} = excluded.{col}" for col in _COLUMNS)
        with storage_errors("profile.upsert"):
            await self._db.conn.execute(
                f"""INSERT INTO user_profiles (user_key, {", ".join(_COLUMNS)})
                    VALUES (?, {", ".join("?" for _ in _COLUMNS)})
                    ON CONFLICT(user_key) DO UPDATE SET {assignments},
                        updated_at = strftime('%Y-%m-%dT%H:%M:%f','now')""",
                (profile.user_key, *(getattr(profile, col) for col in _COLUMNS)),
            )
            await self._db.conn.commit()

    async def completeness_percent(self, user_key: str) -> int:
        """0 for unknown users, otherwise the stored profile's completeness."""
        profile = await self.get(user_key)
        return profile.completeness_percent() if profile else 0
