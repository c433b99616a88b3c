"""
In-memory stand-ins for the repository modules and `db.transaction()`.

Each fake exposes the same async functions (and keyword names) as the
module it replaces. `FakeStore.transaction()` snapshots every table and
restores it when the block raises, like a real rollback.
"""

from __future__ import annotations

import copy
import itertools
from contextlib import asynccontextmanager
from typing import Any

import asyncpg

from registration import repository as registration_repository
from registration.tracks import ExtensionTable, TrackConfig

TABLES = ("users", "teams", "members", "sbc", "dosbim", "fcec", "craft")


class FakeStore:
    def __init__(self) -> None:
        self.tables: dict[str, dict[int, dict[str, Any]]] = {name: {} for name in TABLES}
        self._ids = itertools.count(1)
        self.fail_on: str | None = None
        self.transactions = 0

    def next_id(self) -> int:
        return next(self._ids)

    def check_fail(self, operation: str) -> None:
        if self.fail_on == operation:
            raise RuntimeError(f"simulated failure in {operation}")

    def seed_user(self, user_id: int, **values: Any) -> None:
        self.tables["users"][user_id] = {
            "user_id": user_id,
            "username": f"user{user_id}",
            "email": f"user{user_id}@example.com",
            "password_hash": "",
            "is_admin": False,
            "event_id": None,
            "created_at": None,
            **values,
        }

    def rows(self, table: str) -> list[dict[str, Any]]:
        return [dict(row) for _, row in sorted(self.tables[table].items())]

    @asynccontextmanager
    async def transaction(self):
        snapshot = copy.deepcopy(self.tables)
        self.transactions += 1
        try:
            yield self
        except BaseException:
            self.tables = snapshot
            raise


class FakeRegistrationRepository:
    def __init__(self, store: FakeStore) -> None:
        self.store = store

    @property
    def teams(self) -> dict[int, dict[str, Any]]:
        return self.store.tables["teams"]

    @property
    def members(self) -> dict[int, dict[str, Any]]:
        return self.store.tables["members"]

    async def team_name_exists(self, event_id: int, team_name: str) -> bool:
        return any(t["event_id"] == event_id and t["team_name"] == team_name for t in self.teams.values())

    def _check_unique_name(self, event_id, team_name, *, exclude_id=None) -> None:
        for team_id, team in self.teams.items():
            if team_id != exclude_id and team["event_id"] == event_id and team["team_name"] == team_name:
                raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")

    async def insert_team(self, conn, *, event_id, user_id, values) -> int:
        self.store.check_fail("insert_team")
        self._check_unique_name(event_id, values["team_name"])
        team_id = self.store.next_id()
        self.teams[team_id] = {
            "team_id": team_id,
            "event_id": event_id,
            "user_id": user_id,
            "team_name": values["team_name"],
            "institution_name": values["institution_name"],
            "email": values.get("email"),
            "payment_proof": values.get("payment_proof"),
            "voucher": values.get("voucher"),
            "status": "pending",
            "reject_message": None,
        }
        return team_id

    async def insert_member(self, conn, *, team_id, values, is_leader) -> int:
        self.store.check_fail("insert_member")
        member_id = self.store.next_id()
        row = {"member_id": member_id, "team_id": team_id, "is_leader": is_leader}
        row.update({k: values.get(k) for k in registration_repository.MEMBER_EDITABLE})
        self.members[member_id] = row
        return member_id

    async def insert_extension_row(self, conn, table: ExtensionTable, *, team_id, values) -> None:
        self.store.check_fail("insert_extension_row")
        key = self.store.next_id()
        row = {"team_id": team_id}
        row.update({c: values.get(c) for c in table.columns + table.file_columns})
        if table.key_column != "team_id":
            row[table.key_column] = key
        self.store.tables[table.name][key] = row

    async def list_teams(self, event_id=None) -> list[dict[str, Any]]:
        return [t for t in self.store.rows("teams") if event_id is None or t["event_id"] == event_id]

    async def get_team(self, team_id, *, event_id=None, conn=None) -> dict[str, Any] | None:
        team = self.teams.get(team_id)
        if team is None or (event_id is not None and team["event_id"] != event_id):
            return None
        return dict(team)

    async def list_members(self, team_ids) -> list[dict[str, Any]]:
        rows = [m for m in self.store.rows("members") if m["team_id"] in team_ids]
        return sorted(rows, key=lambda m: (m["team_id"], not m["is_leader"], m["member_id"]))

    async def list_extension_rows(self, table: ExtensionTable, team_ids) -> list[dict[str, Any]]:
        return [r for r in self.store.rows(table.name) if r["team_id"] in team_ids]

    async def update_team(self, conn, *, team_id, values) -> int:
        team = self.teams.get(team_id)
        if team is None:
            return 0
        if "team_name" in values:
            self._check_unique_name(team["event_id"], values["team_name"], exclude_id=team_id)
        team.update({k: v for k, v in values.items() if k in registration_repository.TEAM_EDITABLE})
        return 1

    async def update_member(self, conn, *, team_id, member_id, is_leader, values) -> int:
        member = self.members.get(member_id)
        if member is None or member["team_id"] != team_id or member["is_leader"] != is_leader:
            return 0
        member.update({k: v for k, v in values.items() if k in registration_repository.MEMBER_EDITABLE})
        return 1

    async def mark_verified(self, team_id, *, event_id=None) -> dict[str, Any] | None:
        team = await self.get_team(team_id, event_id=event_id)
        if team is None:
            return None
        self.teams[team_id]["status"] = "verified"
        return self._status_row(team_id)

    async def mark_rejected(self, team_id, *, reject_message, event_id=None) -> dict[str, Any] | None:
        team = await self.get_team(team_id, event_id=event_id)
        if team is None:
            return None
        self.teams[team_id]["status"] = "rejected"
        self.teams[team_id]["reject_message"] = reject_message
        return self._status_row(team_id)

    def _status_row(self, team_id: int) -> dict[str, Any]:
        team = self.teams[team_id]
        return {k: team[k] for k in ("team_id", "event_id", "status", "reject_message")}

    async def delete_extension_rows(self, conn, table: ExtensionTable, *, team_id) -> int:
        return self._delete_where(table.name, team_id)

    async def delete_members(self, conn, *, team_id) -> int:
        self.store.check_fail("delete_members")
        return self._delete_where("members", team_id)

    async def delete_team(self, conn, *, team_id) -> int:
        return self._delete_where("teams", team_id)

    def _delete_where(self, table: str, team_id: int) -> int:
        rows = self.store.tables[table]
        doomed = [key for key, row in rows.items() if row["team_id"] == team_id]
        for key in doomed:
            del rows[key]
        return len(doomed)


class FakeParticipantsRepository:
    def __init__(self, store: FakeStore) -> None:
        self.store = store

    async def list_participants(self, config: TrackConfig) -> list[dict[str, Any]]:
        single = [table for table in config.extensions if not table.many]
        result = []
        for team in self.store.rows("teams"):
            if team["event_id"] != config.event_id:
                continue
            extension_values: dict[str, Any] = {}
            joined = True
            for table in single:
                match = next((r for r in self.store.rows(table.name) if r["team_id"] == team["team_id"]), None)
                if match is None:
                    joined = False
                    break
                extension_values.update({c: match.get(c) for c in table.columns + table.file_columns})
            if not joined:
                continue

            members = [m for m in self.store.rows("members") if m["team_id"] == team["team_id"]]
            members.sort(key=lambda m: (not m["is_leader"], m["member_id"]))
            for member in members:
                row = {k: v for k, v in member.items() if k != "team_id"}
                row.update(
                    {
                        "team_id": team["team_id"],
                        "team_name": team["team_name"],
                        "institution_name": team["institution_name"],
                        "team_email": team["email"],
                        "status": team["status"],
                        "reject_message": team["reject_message"],
                    }
                )
                row.update({column: team[column] for column in config.team_file_fields})
                row.update(extension_values)
                result.append(row)
        return result

    async def list_event_rows(self, table: ExtensionTable, event_id: int) -> list[dict[str, Any]]:
        team_ids = {t["team_id"] for t in self.store.rows("teams") if t["event_id"] == event_id}
        return [r for r in self.store.rows(table.name) if r["team_id"] in team_ids]


class FakeCraftRepository:
    def __init__(self, store: FakeStore) -> None:
        self.store = store

    @property
    def crafts(self) -> dict[int, dict[str, Any]]:
        return self.store.tables["craft"]

    async def list_crafts(self) -> list[dict[str, Any]]:
        return self.store.rows("craft")

    async def get_craft(self, participant_id) -> dict[str, Any] | None:
        row = self.crafts.get(participant_id)
        return dict(row) if row else None

    async def get_craft_by_user(self, user_id) -> dict[str, Any] | None:
        rows = [r for r in self.store.rows("craft") if r.get("user_id") == user_id]
        return rows[-1] if rows else None

    def _check_user(self, values) -> None:
        user_id = values.get("user_id")
        if user_id is not None and user_id not in self.store.tables["users"]:
            raise asyncpg.ForeignKeyViolationError("insert or update on table \"craft\" violates foreign key constraint")

    async def insert_craft(self, values) -> dict[str, Any]:
        self._check_user(values)
        participant_id = self.store.next_id()
        row = {"participant_id": participant_id, "status": "pending", "reject_message": None}
        row.update(values)
        self.crafts[participant_id] = row
        return dict(row)

    async def update_craft(self, participant_id, values) -> dict[str, Any] | None:
        row = self.crafts.get(participant_id)
        if row is None:
            return None
        self._check_user(values)
        row.update(values)
        return dict(row)

    async def mark_verified(self, participant_id) -> dict[str, Any] | None:
        return await self.update_craft(participant_id, {"status": "verified"})

    async def mark_rejected(self, participant_id, *, reject_message) -> dict[str, Any] | None:
        return await self.update_craft(participant_id, {"status": "rejected", "reject_message": reject_message})

    async def delete_craft(self, participant_id) -> bool:
        return self.crafts.pop(participant_id, None) is not None


class FakeUserRepository:
    def __init__(self, store: FakeStore) -> None:
        self.store = store

    @property
    def users(self) -> dict[int, dict[str, Any]]:
        return self.store.tables["users"]

    async def create_user(self, *, username, email, password_hash, is_admin=False, event_id=None) -> dict:
        email = email.strip().lower()
        if any(u["username"] == username or u["email"] == email for u in self.users.values()):
            raise asyncpg.UniqueViolationError("duplicate key value violates unique constraint")
        user_id = self.store.next_id()
        self.users[user_id] = {
            "user_id": user_id,
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "is_admin": is_admin,
            "event_id": event_id,
            "created_at": None,
        }
        return {k: v for k, v in self.users[user_id].items() if k != "password_hash"}

    async def get_user_by_login(self, login) -> dict | None:
        for user in self.users.values():
            if user["username"] == login or user["email"] == login.lower():
                return dict(user)
        return None

    async def get_user_by_id(self, user_id) -> dict | None:
        user = self.users.get(user_id)
        return {k: v for k, v in user.items() if k != "password_hash"} if user else None

    async def list_users(self) -> list[dict]:
        return [{k: v for k, v in u.items() if k != "password_hash"} for u in self.store.rows("users")]

    async def list_user_events(self, user_id) -> list[dict]:
        names = {1: "FCEC", 2: "CRAFT", 3: "SBC", 4: "CIC"}
        return [
            {
                "team_id": t["team_id"],
                "event_id": t["event_id"],
                "team_name": t["team_name"],
                "status": t["status"],
                "event_name": names[t["event_id"]],
            }
            for t in self.store.rows("teams")
            if t["user_id"] == user_id
        ]
