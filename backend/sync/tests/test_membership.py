from unittest.mock import patch

from channels.db import database_sync_to_async
from django.db import DatabaseError
from django.test import TransactionTestCase

from rooms.models import Participant
from rooms.services import create_room
from sync import events
from sync.exceptions import (
    BadRequest,
    Forbidden,
    InvalidTarget,
    RoomNotFound,
    TransientStoreError,
)
from sync.membership import CLOSED_BY_ADMIN, KICKED_MESSAGE, MembershipManager
from sync.session_store import SessionStore

from .utils import RecordingRouter, fetch_room


def failing_write(*args, **kwargs):
    raise DatabaseError("database is locked")


@database_sync_to_async
def admin_names(room):
    return list(
        Participant.objects
        .filter(room=room, is_admin=True)
        .values_list("user_name", flat=True)
    )


class MembershipTests(TransactionTestCase):
    reset_sequences = True

    def setUp(self):
        self.room = create_room(name="Movie Night", created_by="Alice")
        self.code = self.room.code
        self.store = SessionStore()
        self.router = RecordingRouter()
        self.membership = MembershipManager(self.store, self.router)

    def roster(self):
        return [(p.user_name, p.is_admin) for p in self.store.list_participants(self.code)]

    # ---------- join ----------

    async def test_first_joiner_becomes_admin(self):
        alice = await self.membership.join(self.code, "Alice", "chan-alice")
        bob = await self.membership.join(self.code.lower(), "Bob", "chan-bob")

        self.assertTrue(alice.is_admin)
        self.assertFalse(bob.is_admin)
        self.assertEqual(self.roster(), [("Alice", True), ("Bob", False)])
        self.assertEqual(await admin_names(self.room), ["Alice"])

    async def test_join_sends_private_snapshot_and_notifies_others(self):
        await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")

        snapshots = self.router.private_to("chan-bob")
        self.assertEqual(snapshots[0][0], events.ROOM_SNAPSHOT)
        snapshot = snapshots[0][1]
        self.assertFalse(snapshot["isAdmin"])
        self.assertEqual(snapshot["room"]["roomCode"], self.code)
        self.assertEqual(len(snapshot["participants"]), 2)

        code, event, payload, exclude = self.router.last_published(events.PARTICIPANT_JOINED)
        self.assertEqual(code, self.code)
        self.assertEqual(payload["userName"], "Bob")
        self.assertEqual(len(payload["participants"]), 2)
        self.assertEqual(exclude, "chan-bob")
        self.assertIn((self.code, "chan-bob"), self.router.subscriptions)

    async def test_join_twice_is_idempotent(self):
        first = await self.membership.join(self.code, "Alice", "chan-alice")
        second = await self.membership.join(self.code, "Alice", "chan-alice")

        self.assertTrue(first.created)
        self.assertFalse(second.created)
        self.assertEqual(first.participant.id, second.participant.id)
        self.assertEqual(len(self.store.list_participants(self.code)), 1)

    async def test_join_requires_code_and_name(self):
        with self.assertRaises(BadRequest):
            await self.membership.join(self.code, "   ", "chan-alice")
        with self.assertRaises(BadRequest):
            await self.membership.join("", "Alice", "chan-alice")

    async def test_join_rejects_overlong_name(self):
        with self.assertRaises(BadRequest):
            await self.membership.join(self.code, "x" * 51, "chan-alice")

    async def test_join_unknown_room(self):
        with self.assertRaises(RoomNotFound):
            await self.membership.join("ZZZZZZZZ", "Alice", "chan-alice")

    async def test_joining_another_room_leaves_the_first(self):
        other = await database_sync_to_async(create_room)(name="Other", created_by="Bob")
        await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")

        await self.membership.join(other.code, "Alice", "chan-alice")

        self.assertEqual(self.roster(), [("Bob", True)])
        self.assertEqual(self.store.room_code_for("chan-alice"), other.code)
        self.assertTrue(self.store.participant_for("chan-alice").is_admin)

    # ---------- leave ----------

    async def test_admin_leave_promotes_earliest_joiner(self):
        await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")
        await self.membership.join(self.code, "Carol", "chan-carol")

        await self.membership.leave("chan-alice")

        self.assertEqual(self.roster(), [("Bob", True), ("Carol", False)])
        self.assertEqual(await admin_names(self.room), ["Bob"])

        _, _, payload, exclude = self.router.last_published(events.PARTICIPANT_LEFT)
        self.assertEqual(payload["userName"], "Alice")
        self.assertFalse(payload["kicked"])
        self.assertTrue(payload["participants"][0]["isAdmin"])
        self.assertIsNone(exclude)

    async def test_non_admin_leave_keeps_admin(self):
        await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")

        await self.membership.leave("chan-bob", self.code)

        self.assertEqual(self.roster(), [("Alice", True)])

    async def test_last_leave_deactivates_room(self):
        await self.membership.join(self.code, "Alice", "chan-alice")

        await self.membership.leave("chan-alice")

        stored = await fetch_room(self.room.id)
        self.assertFalse(stored.is_active)
        self.assertIsNone(self.store.peek(self.code))
        self.assertNotIn((self.code, "chan-alice"), self.router.subscriptions)

    async def test_leave_is_idempotent(self):
        await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")

        first = await self.membership.leave("chan-bob")
        published = len(self.router.published)
        second = await self.membership.leave("chan-bob")

        self.assertEqual(first.user_name, "Bob")
        self.assertIsNone(second)
        self.assertEqual(len(self.router.published), published)

    async def test_leave_other_room_is_forbidden(self):
        await self.membership.join(self.code, "Alice", "chan-alice")

        with self.assertRaises(Forbidden):
            await self.membership.leave("chan-alice", "ABCDEFGH")

    async def test_rejoin_reactivates_room_with_new_admin(self):
        await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.leave("chan-alice")

        result = await self.membership.join(self.code, "Bob", "chan-bob")

        self.assertTrue(result.is_admin)
        stored = await fetch_room(self.room.id)
        self.assertTrue(stored.is_active)
        self.assertEqual(stored.video_state, "paused")

    # ---------- kick ----------

    async def test_admin_kicks_participant(self):
        await self.membership.join(self.code, "Alice", "chan-alice")
        bob = await self.membership.join(self.code, "Bob", "chan-bob")

        await self.membership.kick("chan-alice", self.code, bob.participant.id)

        self.assertEqual(self.roster(), [("Alice", True)])
        self.assertIsNone(self.store.room_code_for("chan-bob"))
        self.assertNotIn((self.code, "chan-bob"), self.router.subscriptions)

        event, payload = self.router.private_to("chan-bob")[-1]
        self.assertEqual(event, events.USER_KICKED)
        self.assertEqual(payload, {"message": KICKED_MESSAGE, "roomCode": self.code})

        _, _, payload, exclude = self.router.last_published(events.USER_LEFT)
        self.assertTrue(payload["kicked"])
        self.assertEqual(len(payload["participants"]), 1)
        self.assertIsNone(exclude)

    async def test_non_admin_cannot_kick(self):
        alice = await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")

        with self.assertRaises(Forbidden):
            await self.membership.kick("chan-bob", self.code, alice.participant.id)

        self.assertEqual(len(self.store.list_participants(self.code)), 2)

    async def test_admin_can_never_be_kicked(self):
        alice = await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")

        with self.assertRaises(InvalidTarget):
            await self.membership.kick("chan-alice", self.code, alice.participant.id)

        self.assertEqual(self.roster(), [("Alice", True), ("Bob", False)])

    async def test_kick_unknown_participant(self):
        await self.membership.join(self.code, "Alice", "chan-alice")

        with self.assertRaises(InvalidTarget):
            await self.membership.kick(
                "chan-alice", self.code, "3f2b8c1e-0000-4000-8000-000000000000"
            )

    async def test_kick_requires_target(self):
        await self.membership.join(self.code, "Alice", "chan-alice")

        with self.assertRaises(BadRequest):
            await self.membership.kick("chan-alice", self.code, None)

    # ---------- store failures ----------

    async def test_disconnect_removes_participant_when_store_fails(self):
        alice = await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")

        with patch("sync.persistence.write_leave", failing_write):
            removed = await self.membership.disconnect("chan-alice")

        self.assertEqual(removed.user_name, "Alice")
        self.assertEqual(self.roster(), [("Bob", True)])
        self.assertIsNone(self.store.room_code_for("chan-alice"))
        self.assertNotIn((self.code, "chan-alice"), self.router.subscriptions)
        self.assertEqual(
            self.store.pending_leaves(), [(alice.participant.id, self.code)]
        )

        room = await self.membership.active_room(self.code)
        self.membership.require_admin(room, "chan-bob")

        _, _, payload, _ = self.router.last_published(events.PARTICIPANT_LEFT)
        self.assertEqual(payload["userName"], "Alice")

    async def test_last_disconnect_empties_room_when_store_fails(self):
        await self.membership.join(self.code, "Alice", "chan-alice")

        with patch("sync.persistence.write_leave", failing_write):
            await self.membership.disconnect("chan-alice")

        self.assertIsNone(self.store.peek(self.code))
        self.assertIsNone(self.store.room_code_for("chan-alice"))

    async def test_explicit_leave_fails_cleanly_when_store_fails(self):
        await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")
        published = len(self.router.published)

        with patch("sync.persistence.write_leave", failing_write):
            with self.assertRaises(TransientStoreError):
                await self.membership.leave("chan-bob", self.code)

        self.assertEqual(self.roster(), [("Alice", True), ("Bob", False)])
        self.assertEqual(self.store.pending_leaves(), [])
        self.assertEqual(len(self.router.published), published)

    # ---------- close ----------

    async def test_admin_closes_room(self):
        await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")

        removed = await self.membership.close_room("chan-alice", self.code)

        self.assertEqual([p.user_name for p in removed], ["Alice", "Bob"])
        for channel in ("chan-alice", "chan-bob"):
            self.assertIn(
                (events.ROOM_CLOSED, {"roomCode": self.code, "reason": CLOSED_BY_ADMIN}),
                self.router.private_to(channel),
            )
            self.assertIsNone(self.store.room_code_for(channel))
        self.assertEqual(self.router.subscriptions, set())
        self.assertIsNone(self.store.peek(self.code))

        stored = await fetch_room(self.room.id)
        self.assertFalse(stored.is_active)
        self.assertEqual(await admin_names(self.room), [])

    async def test_non_admin_cannot_close_room(self):
        await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.join(self.code, "Bob", "chan-bob")

        with self.assertRaises(Forbidden):
            await self.membership.close_room("chan-bob", self.code)

        self.assertEqual(self.roster(), [("Alice", True), ("Bob", False)])
        self.assertTrue((await fetch_room(self.room.id)).is_active)
        self.assertFalse(
            [entry for entry in self.router.private if entry[1] == events.ROOM_CLOSED]
        )

    async def test_closed_room_cannot_be_closed_again(self):
        await self.membership.join(self.code, "Alice", "chan-alice")
        await self.membership.close_room("chan-alice", self.code)

        with self.assertRaises(RoomNotFound):
            await self.membership.close_room("chan-alice", self.code)

    async def test_join_with_malformed_code_keeps_current_room(self):
        await self.membership.join(self.code, "Alice", "chan-alice")

        with self.assertRaises(RoomNotFound):
            await self.membership.join("no-such-room", "Alice", "chan-alice")

        self.assertEqual(self.store.room_code_for("chan-alice"), self.code)
