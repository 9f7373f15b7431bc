# tests/test_permissions_defaults.py

from django.contrib.auth import get_user_model
from django.core.exceptions import PermissionDenied
from django.test import TestCase

from accounts.authz import ActorContext, actor_for, require, require_any, require_counterparty, system_actor
from accounts.permission_defaults import all_permission_codes, permissions_for_role


User = get_user_model()


class TestPermissionDefaults(TestCase):
    def setUp(self):
        self.admin = User.objects.create_superuser(email="a@test.com", password="pass12345", name="A")
        self.clerk = User.objects.create_user(email="c@test.com", password="pass12345", role="INVOICING")
        self.portal = User.objects.create_user(email="p@test.com", password="pass12345", role="CUSTOMER")

    def test_invoicing_cannot_manage_master_data(self):
        actor = actor_for(self.clerk)
        for code in ("contacts.manage", "products.manage", "analytics.manage", "budgets.manage"):
            self.assertFalse(actor.has(code), code)

    def test_invoicing_runs_the_order_flow(self):
        actor = actor_for(self.clerk)
        for code in ("orders.create", "orders.send", "orders.confirm", "documents.post", "payments.record"):
            self.assertTrue(actor.has(code), code)

    def test_admin_is_implicitly_allowed(self):
        """ADMIN passes even for codes no role lists."""
        actor = ActorContext(user=self.admin, perms=frozenset())
        self.assertTrue(actor.has("anything.at_all"))

    def test_inactive_user_has_nothing(self):
        self.admin.is_active = False
        self.assertFalse(actor_for(self.admin).has("orders.view"))

    def test_portal_roles_only_see_their_own(self):
        self.assertEqual(permissions_for_role("CUSTOMER"), frozenset({"portal.view_own", "portal.confirm_own"}))
        self.assertEqual(permissions_for_role("VENDOR"), permissions_for_role("CUSTOMER"))
        self.assertEqual(permissions_for_role("UNKNOWN"), frozenset())

    def test_admin_defaults_cover_staff_codes(self):
        staff_codes = all_permission_codes() - permissions_for_role("CUSTOMER")
        self.assertTrue(staff_codes <= permissions_for_role("ADMIN"))

    def test_require_raises(self):
        with self.assertRaises(PermissionDenied):
            require(actor_for(self.clerk), "payments.delete")
        with self.assertRaises(PermissionDenied):
            require_any(actor_for(self.portal), "orders.view", "documents.view")

    def test_system_actor_passes(self):
        require(system_actor(), "sequences.configure")

    def test_counterparty_check(self):
        actor = ActorContext(user=self.portal, perms=permissions_for_role("CUSTOMER"))
        self.portal.contact_id = 5

        require_counterparty(actor, "orders.confirm", 5)
        with self.assertRaises(PermissionDenied):
            require_counterparty(actor, "orders.confirm", 6)
