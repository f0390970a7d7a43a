import json
import re
from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase
from django.urls import reverse
from ..models import DistributorApplication
from ..services import submit_application
from .factories import application_payload, with_field


class ApplicationApiTests(TestCase):

    def setUp(self):
        self.staff = get_user_model().objects.create_user("sales.rep", password="x", is_staff=True)

    def send(self, method, url, payload):
        return getattr(self.client, method)(
            url, data=json.dumps(payload), content_type="application/json"
        )

    def test_public_submission(self):
        response = self.send("post", reverse("applications:submit"), application_payload())

        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertEqual(data["status"], "PENDING")
        self.assertEqual(data["declaration"]["date"], "2025-03-01")
        self.assertEqual(len(data["history"]), 1)

    def test_submission_errors(self):
        payload = application_payload(**with_field("business_details", pan_vat_number="12"))
        response = self.send("post", reverse("applications:submit"), payload)

        self.assertEqual(response.status_code, 400)
        self.assertIn("business_details.pan_vat_number", response.json()["errors"])

    def test_listing_requires_staff(self):
        self.assertEqual(self.client.get(reverse("applications:list")).status_code, 401)

    def test_list_and_filter(self):
        submit_application(application_payload())
        other = application_payload(**with_field("business_details", company_name="Gurung Suppliers"))
        submit_application(other)
        self.client.force_login(self.staff)

        response = self.client.get(reverse("applications:list"), {"search": "gurung"})
        body = response.json()
        self.assertEqual(body["pagination"]["total"], 1)
        self.assertEqual(body["items"][0]["company_name"], "Gurung Suppliers")

    def test_status_update_and_email(self):
        application = submit_application(application_payload())
        self.client.force_login(self.staff)
        url = reverse("applications:status", kwargs={"pk": application.pk})

        with self.captureOnCommitCallbacks(execute=True):
            response = self.send("put", url, {"status": "APPROVED", "review_notes": "Documents verified"})

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["status"], "APPROVED")
        self.assertEqual(data["reviewed_by"], "sales.rep")
        self.assertEqual(data["distributor_username"], f"dist_{application.pk:08d}")
        self.assertEqual(len(mail.outbox), 1)

        again = self.send("put", url, {"status": "REJECTED"})
        self.assertEqual(again.status_code, 400)

    def test_password_link_from_approval_email_works_once(self):
        application = submit_application(application_payload())
        self.client.force_login(self.staff)
        with self.captureOnCommitCallbacks(execute=True):
            self.send("put", reverse("applications:status", kwargs={"pk": application.pk}),
                      {"status": "APPROVED"})
        self.client.logout()

        uidb64, token = re.search(r"/set-password/([^/]+)/([^/]+)/", mail.outbox[0].body).groups()
        url = reverse("applications:set-password", kwargs={"uidb64": uidb64, "token": token})
        passwords = {"new_password1": "Kathmandu#Noodles42", "new_password2": "Kathmandu#Noodles42"}

        response = self.send("post", url, passwords)
        self.assertEqual(response.status_code, 200)
        user = get_user_model().objects.get(username=f"dist_{application.pk:08d}")
        self.assertTrue(user.check_password("Kathmandu#Noodles42"))

        reused = self.send("post", url, passwords)
        self.assertEqual(reused.status_code, 400)
        self.assertIn("token", reused.json()["errors"])

    def test_password_link_rejects_mismatched_passwords(self):
        application = submit_application(application_payload())
        self.client.force_login(self.staff)
        with self.captureOnCommitCallbacks(execute=True):
            self.send("put", reverse("applications:status", kwargs={"pk": application.pk}),
                      {"status": "APPROVED"})

        uidb64, token = re.search(r"/set-password/([^/]+)/([^/]+)/", mail.outbox[0].body).groups()
        url = reverse("applications:set-password", kwargs={"uidb64": uidb64, "token": token})
        response = self.send("post", url, {"new_password1": "Kathmandu#Noodles42",
                                           "new_password2": "Pokhara#Noodles42"})

        self.assertEqual(response.status_code, 400)
        self.assertIn("new_password2", response.json()["errors"])

    def test_delete_is_soft(self):
        application = submit_application(application_payload())
        self.client.force_login(self.staff)
        url = reverse("applications:detail", kwargs={"pk": application.pk})

        self.assertEqual(self.client.delete(url).status_code, 200)
        self.assertEqual(DistributorApplication.objects.get(pk=application.pk).status, "REJECTED")
        self.assertEqual(self.client.delete(url).status_code, 400)

    def test_unknown_application(self):
        self.client.force_login(self.staff)
        response = self.client.get(reverse("applications:detail", kwargs={"pk": 999}))
        self.assertEqual(response.status_code, 404)

    def test_stats(self):
        submit_application(application_payload())
        self.client.force_login(self.staff)

        data = self.client.get(reverse("applications:stats")).json()["data"]
        self.assertEqual(data["total_applications"], 1)
        self.assertEqual(data["by_status"]["PENDING"], 1)
