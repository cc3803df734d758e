# accounting/tests/test_api.py
"""
API-level tests for the accounting endpoints.

Tests verify the API responses rather than direct database queries
to avoid transaction isolation issues between the API client and
test database connections.
"""
from django.contrib.auth import get_user_model
from django.test import TransactionTestCase
from rest_framework.test import APIClient

from accounts.models import Organization


class AccountingApiTestCase(TransactionTestCase):

    def setUp(self):
        self.client = APIClient()
        User = get_user_model()

        self.organization = Organization.objects.create(name="Obra Test", slug="obra-test")
        self.user = User.objects.create_user(
            email="tester@example.com",
            password="pass12345",
            name="Tester",
            organization=self.organization,
        )
        self.client.force_authenticate(user=self.user)

    def enable(self):
        res = self.client.post("/api/accounting/setup/", {}, format="json")
        self.assertEqual(res.status_code, 201, res.data)

    def account_id(self, code):
        res = self.client.get("/api/accounting/accounts/")
        return next(row["id"] for row in res.data if row["code"] == code)

    def manual_entry(self, amount="100.00", date="2024-05-01", **extra):
        payload = {
            "date": date,
            "description": "Aporte",
            "lines": [
                {"account_id": self.account_id("1.1.01"), "debit": amount},
                {"account_id": self.account_id("3.1"), "credit": amount},
            ],
        }
        payload.update(extra)
        return self.client.post("/api/accounting/journal-entries/", payload, format="json")


class TestSetupApi(AccountingApiTestCase):

    def test_setup_lifecycle(self):
        res = self.client.get("/api/accounting/setup/")
        self.assertEqual(res.data, {"is_enabled": False, "stats": None})

        res = self.client.post("/api/accounting/setup/", {}, format="json")
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data["accounts_created"], 50)

        res = self.client.post("/api/accounting/setup/", {}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["accounts_count"], 50)

        res = self.client.get("/api/accounting/setup/")
        self.assertTrue(res.data["is_enabled"])
        self.assertEqual(res.data["stats"]["active_accounts"], 50)

        res = self.client.patch("/api/accounting/setup/", {"enable_accounting": False}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data, {"enable_accounting": False, "provisioned": False})

        res = self.client.get("/api/accounting/accounts/")
        self.assertEqual(res.status_code, 403)

    def test_patch_requires_flag(self):
        res = self.client.patch("/api/accounting/setup/", {}, format="json")
        self.assertEqual(res.status_code, 400)

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        res = self.client.get("/api/accounting/setup/")
        self.assertEqual(res.status_code, 401)


class TestAccountsApi(AccountingApiTestCase):

    def test_disabled_organization_is_forbidden(self):
        res = self.client.get("/api/accounting/accounts/")
        self.assertEqual(res.status_code, 403)

    def test_list_and_filters(self):
        self.enable()

        res = self.client.get("/api/accounting/accounts/")
        self.assertEqual(len(res.data), 50)
        self.assertEqual(res.data[0]["code"], "1")

        res = self.client.get("/api/accounting/accounts/?type=income")
        self.assertEqual(len(res.data), 8)
        self.assertTrue(all(row["normal_balance"] == "CREDIT" for row in res.data))

        res = self.client.get("/api/accounting/accounts/?active=false")
        self.assertEqual(res.data, [])

    def test_create_update_delete(self):
        self.enable()
        parent_id = self.account_id("5.2")

        res = self.client.post(
            "/api/accounting/accounts/",
            {"code": "5.2.09", "name": "Seguros", "account_type": "EXPENSE", "parent_id": parent_id},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["parent_code"], "5.2")
        account_id = res.data["id"]

        res = self.client.patch(f"/api/accounting/accounts/{account_id}/", {"is_active": False}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.data["is_active"])

        res = self.client.get(f"/api/accounting/accounts/{account_id}/")
        self.assertEqual(res.data["code"], "5.2.09")

        res = self.client.delete(f"/api/accounting/accounts/{account_id}/")
        self.assertEqual(res.status_code, 204)

        res = self.client.get(f"/api/accounting/accounts/{account_id}/")
        self.assertEqual(res.status_code, 404)

    def test_guards_return_400(self):
        self.enable()

        res = self.client.post(
            "/api/accounting/accounts/",
            {"code": "1.1.01", "name": "Caja 2", "account_type": "ASSET"},
            format="json",
        )
        self.assertEqual(res.status_code, 400)
        self.assertIn("already exists", res.data["detail"])

        cash_id = self.account_id("1.1.01")
        res = self.client.put(f"/api/accounting/accounts/{cash_id}/", {"parent_id": cash_id}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["detail"], "An account cannot be its own parent.")

        res = self.client.delete(f"/api/accounting/accounts/{self.account_id('1.1')}/")
        self.assertEqual(res.status_code, 400)
        self.assertIn("subaccounts", res.data["detail"])


class TestJournalApi(AccountingApiTestCase):

    def setUp(self):
        super().setUp()
        self.enable()

    def test_create_manual_entry(self):
        res = self.manual_entry()

        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["entry_number"], "000001")
        self.assertFalse(res.data["is_automatic"])
        self.assertEqual(res.data["source_type"], "MANUAL")
        self.assertEqual(len(res.data["lines"]), 2)
        self.assertEqual(res.data["lines"][0]["debit_account"], "1.1.01")
        self.assertIsNone(res.data["lines"][0]["credit_account"])
        self.assertTrue(res.data["is_balanced"])

    def test_side_and_amount_lines(self):
        payload = {
            "date": "2024-05-01",
            "description": "Aporte",
            "lines": [
                {"account_id": self.account_id("1.1.01"), "side": "DEBIT", "amount": "40"},
                {"account_id": self.account_id("3.1"), "side": "CREDIT", "amount": "40"},
            ],
        }
        res = self.client.post("/api/accounting/journal-entries/", payload, format="json")
        self.assertEqual(res.status_code, 201, res.data)

    def test_unbalanced_entry_is_rejected(self):
        payload = {
            "date": "2024-05-01",
            "description": "Descuadrado",
            "lines": [
                {"account_id": self.account_id("1.1.01"), "debit": "100"},
                {"account_id": self.account_id("3.1"), "credit": "60"},
            ],
        }
        res = self.client.post("/api/accounting/journal-entries/", payload, format="json")

        self.assertEqual(res.status_code, 400)
        self.assertIn("not balanced", res.data["detail"])

    def test_line_with_debit_and_credit_is_rejected(self):
        payload = {
            "date": "2024-05-01",
            "description": "x",
            "lines": [
                {"account_id": self.account_id("1.1.01"), "debit": "10", "credit": "10"},
                {"account_id": self.account_id("3.1"), "credit": "10"},
            ],
        }
        res = self.client.post("/api/accounting/journal-entries/", payload, format="json")
        self.assertEqual(res.status_code, 400)

    def test_list_pagination_and_filters(self):
        self.manual_entry(amount="100", date="2024-03-01")
        self.manual_entry(amount="200", date="2024-04-01")
        self.manual_entry(amount="300", date="2024-05-01")

        res = self.client.get("/api/accounting/journal-entries/?limit=2")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["pagination"], {"page": 1, "limit": 2, "total_count": 3, "total_pages": 2})
        self.assertEqual([e["entry_number"] for e in res.data["entries"]], ["000003", "000002"])

        res = self.client.get("/api/accounting/journal-entries/?limit=2&page=2")
        self.assertEqual([e["entry_number"] for e in res.data["entries"]], ["000001"])

        res = self.client.get("/api/accounting/journal-entries/?date_from=2024-04-01&date_to=2024-04-30")
        self.assertEqual([e["entry_number"] for e in res.data["entries"]], ["000002"])

        res = self.client.get("/api/accounting/journal-entries/?amount_from=150&amount_to=250")
        self.assertEqual([e["entry_number"] for e in res.data["entries"]], ["000002"])

        res = self.client.get("/api/accounting/journal-entries/?entry_type=AUTOMATIC")
        self.assertEqual(res.data["pagination"]["total_count"], 0)

        res = self.client.get(f"/api/accounting/journal-entries/?account_id={self.account_id('3.1')}")
        self.assertEqual(res.data["pagination"]["total_count"], 3)

        res = self.client.get("/api/accounting/journal-entries/?entry_number=0003")
        self.assertEqual([e["entry_number"] for e in res.data["entries"]], ["000003"])

    def test_detail_and_delete(self):
        entry_id = self.manual_entry().data["id"]

        res = self.client.get(f"/api/accounting/journal-entries/{entry_id}/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["total_debit"], "100.00")

        res = self.client.delete(f"/api/accounting/journal-entries/{entry_id}/")
        self.assertEqual(res.status_code, 204)

        res = self.client.get(f"/api/accounting/journal-entries/{entry_id}/")
        self.assertEqual(res.status_code, 404)


class TestReportsApi(AccountingApiTestCase):

    def setUp(self):
        super().setUp()
        self.enable()

    def test_type_is_required(self):
        res = self.client.get("/api/accounting/reports/")
        self.assertEqual(res.status_code, 400)

    def test_invalid_type(self):
        res = self.client.get("/api/accounting/reports/?type=cash-flow")
        self.assertEqual(res.status_code, 400)

    def test_trial_balance(self):
        self.manual_entry(amount="250", date="2024-05-01")

        res = self.client.get("/api/accounting/reports/?type=trial-balance&date_from=2024-01-01&date_to=2024-12-31")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["type"], "trial-balance")
        self.assertEqual(len(res.data["accounts"]), 2)

    def test_balance_and_stats(self):
        self.manual_entry(amount="250", date="2024-05-01")

        res = self.client.get("/api/accounting/reports/?type=balance&date_to=2024-12-31")
        self.assertEqual(res.data["type"], "balance-sheet")
        self.assertEqual(len(res.data["assets"]), 1)

        res = self.client.get("/api/accounting/reports/?type=income-statement&date_from=2024-01-01&date_to=2024-12-31")
        self.assertEqual(res.data["revenue"], [])

        res = self.client.get("/api/accounting/reports/?type=stats")
        self.assertEqual(res.data["total_accounts"], 50)
        self.assertTrue(res.data["is_balanced"])


class TestTokenAuth(AccountingApiTestCase):

    def test_obtain_token_and_call_api(self):
        anonymous = APIClient()
        res = anonymous.post(
            "/api/token/",
            {"email": "tester@example.com", "password": "pass12345"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)

        anonymous.credentials(HTTP_AUTHORIZATION=f"Bearer {res.data['access']}")
        res = anonymous.get("/api/accounting/setup/")
        self.assertEqual(res.status_code, 200)
        self.assertFalse(res.data["is_enabled"])
