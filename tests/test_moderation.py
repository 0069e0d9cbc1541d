import time
import unittest
import uuid
from datetime import datetime

from core.content_store import ContentKind, create_item, get_item, list_items
from core.db import DB
from core.errors import ForbiddenError, NotFoundError, ValidationError
from core.models.project_gig import ProjectGig
from core.models.startup import Startup
from core.models.team_post import TeamPost
from core.models.user import User
from core.moderation import moderation_queue, moderation_summary, set_status


def _team_post_payload(title="Need a designer"):
    return {
        "title": title,
        "description": "Looking for a product designer for our campus app",
        "skills_needed": ["Figma", "UX"],
        "time_commitment": "Part-time",
        "compensation_type": "Equity",
        "category": "Design",
    }


class ModerationTestCase(unittest.TestCase):
    def setUp(self):
        DB.create_tables()
        self.session = DB.get_session()
        now = datetime.now()
        self.owner_id = f"u_{uuid.uuid4().hex[:10]}"
        self.admin_id = f"a_{uuid.uuid4().hex[:10]}"
        self.session.add(User(id=self.owner_id, is_admin=False, created_at=now, updated_at=now))
        self.session.add(User(id=self.admin_id, is_admin=True, created_at=now, updated_at=now))
        self.session.commit()
        self.owner = {"id": self.owner_id, "is_admin": False}
        self.admin = {"id": self.admin_id, "is_admin": True}
        self.post = create_item(self.session, ContentKind.TEAM_POST, self.owner_id, _team_post_payload())

    def tearDown(self):
        try:
            for model in (TeamPost, ProjectGig, Startup):
                self.session.query(model).filter(model.user_id == self.owner_id).delete()
            self.session.query(User).filter(User.id.in_([self.owner_id, self.admin_id])).delete()
            self.session.commit()
        except Exception:
            self.session.rollback()
        self.session.close()

    def _fresh_status(self):
        session = DB.get_session()
        try:
            return get_item(session, ContentKind.TEAM_POST, self.post.id).status
        finally:
            session.close()

    def test_admin_approves_pending_item(self):
        before = self.post.updated_at
        time.sleep(0.01)
        item = set_status(self.session, ContentKind.TEAM_POST, self.post.id, "approved", self.admin)
        self.assertEqual(item.status, "approved")
        self.assertGreater(item.updated_at, before)
        self.assertEqual(self._fresh_status(), "approved")

    def test_non_admin_is_forbidden_and_item_untouched(self):
        with self.assertRaises(ForbiddenError):
            set_status(self.session, ContentKind.TEAM_POST, self.post.id, "approved", self.owner)
        self.assertEqual(self._fresh_status(), "pending")

    def test_forbidden_is_checked_before_status_value(self):
        with self.assertRaises(ForbiddenError):
            set_status(self.session, ContentKind.TEAM_POST, self.post.id, "published", self.owner)

    def test_invalid_status_is_rejected_without_mutation(self):
        for bad in ("published", "APPROVED", "", None, 1):
            with self.assertRaises(ValidationError) as ctx:
                set_status(self.session, ContentKind.TEAM_POST, self.post.id, bad, self.admin)
            self.assertEqual(ctx.exception.message, "Invalid status")
        self.assertEqual(self._fresh_status(), "pending")

    def test_unknown_item_raises_not_found(self):
        with self.assertRaises(NotFoundError) as ctx:
            set_status(self.session, ContentKind.STARTUP, str(uuid.uuid4()), "approved", self.admin)
        self.assertEqual(ctx.exception.message, "Startup not found")

    def test_repeated_approval_is_idempotent(self):
        set_status(self.session, ContentKind.TEAM_POST, self.post.id, "approved", self.admin)
        item = set_status(self.session, ContentKind.TEAM_POST, self.post.id, "approved", self.admin)
        self.assertEqual(item.status, "approved")
        self.assertEqual(self._fresh_status(), "approved")

    def test_last_write_wins(self):
        set_status(self.session, ContentKind.TEAM_POST, self.post.id, "approved", self.admin)
        set_status(self.session, ContentKind.TEAM_POST, self.post.id, "rejected", self.admin)
        self.assertEqual(self._fresh_status(), "rejected")

    def test_approved_item_shows_in_approved_listing(self):
        approved_ids = [x.id for x in list_items(self.session, ContentKind.TEAM_POST, status="approved")]
        self.assertNotIn(self.post.id, approved_ids)
        set_status(self.session, ContentKind.TEAM_POST, self.post.id, "approved", self.admin)
        approved = list_items(self.session, ContentKind.TEAM_POST, status="approved")
        self.assertIn("Need a designer", [x.title for x in approved if x.id == self.post.id])

    def test_queue_and_summary_require_admin(self):
        with self.assertRaises(ForbiddenError):
            moderation_queue(self.session, self.owner)
        with self.assertRaises(ForbiddenError):
            moderation_summary(self.session, self.owner)

    def test_queue_lists_pending_items(self):
        queue = moderation_queue(self.session, self.admin)
        self.assertEqual(set(queue.keys()), {"team_post", "project_gig", "startup"})
        self.assertIn(self.post.id, [x.id for x in queue["team_post"]])
        set_status(self.session, ContentKind.TEAM_POST, self.post.id, "rejected", self.admin)
        queue = moderation_queue(self.session, self.admin)
        self.assertNotIn(self.post.id, [x.id for x in queue["team_post"]])

    def test_summary_counts_by_status(self):
        summary = moderation_summary(self.session, self.admin)
        self.assertGreaterEqual(summary["team_post"]["pending"], 1)
        for kind in ("team_post", "project_gig", "startup"):
            self.assertEqual(set(summary[kind].keys()), {"pending", "approved", "rejected"})


if __name__ == "__main__":
    unittest.main()
