import unittest
from datetime import datetime
from types import SimpleNamespace

from api_case import ApiTestCase
from homequote.database.models import FormQuestion, PartnerLead, QuoteSubmission
from homequote.schemas.leads import AddressData, AddressPhase, EnquiryPhase, PaymentPhase, SurveyDetails, SurveyPhase
from homequote.services.lead_service import fold_phase, order_total

NOW = datetime(2026, 3, 14, 9, 30)


def stored_lead(**values):
    values.setdefault("form_answers", {"answers": {"q1": "Gas"}})
    values.setdefault("city", None)
    values.setdefault("postcode", None)
    return SimpleNamespace(**values)


class TestFoldPhase(unittest.TestCase):
    def test_address_phase_sets_columns_and_details(self):
        phase = AddressPhase(address=AddressData(
            address_line_1="10 Downing Street", town_or_city="London", postcode="SW1A 2AA",
        ))
        updates = fold_phase(stored_lead(), phase, NOW)

        self.assertEqual(updates["progress_step"], "enquiry")
        self.assertEqual(updates["city"], "London")
        self.assertEqual(updates["country"], "United Kingdom")
        self.assertEqual(updates["address_type"], "residential")
        self.assertEqual(updates["last_seen_at"], NOW)
        details = updates["form_answers"]["address_details"]
        self.assertEqual(details["selected_at"], NOW.isoformat())
        self.assertEqual(updates["form_answers"]["answers"], {"q1": "Gas"})

    def test_address_phase_keeps_known_city_and_postcode(self):
        phase = AddressPhase(address=AddressData(address_line_1="Flat 2"))
        updates = fold_phase(stored_lead(city="Leeds", postcode="LS1 1AA"), phase, NOW)
        self.assertEqual((updates["city"], updates["postcode"]), ("Leeds", "LS1 1AA"))

    def test_completed_enquiry_marks_lead_submitted(self):
        updates = fold_phase(stored_lead(), EnquiryPhase(details={"preferredDate": "2026-04-01"}), NOW)
        self.assertEqual(updates["status"], "enquiry_submitted")
        self.assertEqual(updates["form_answers"]["enquiry_details"], {"preferredDate": "2026-04-01"})
        self.assertEqual(updates["form_answers"]["enquiry_completed_at"], NOW.isoformat())

    def test_partial_enquiry_only_moves_progress(self):
        updates = fold_phase(stored_lead(), EnquiryPhase(details={"x": 1}, progress_step="enquiry"), NOW)
        self.assertNotIn("status", updates)
        self.assertNotIn("enquiry_details", updates["form_answers"])

    def test_survey_phase_overwrites_given_contact_details_only(self):
        phase = SurveyPhase(details=SurveyDetails(firstName="Ada", phone="07700900000"))
        updates = fold_phase(stored_lead(), phase, NOW)
        self.assertEqual(updates["first_name"], "Ada")
        self.assertEqual(updates["phone"], "07700900000")
        self.assertNotIn("email", updates)
        self.assertEqual(updates["form_answers"]["survey_details"]["submitted_at"], NOW.isoformat())

    def test_payment_phase(self):
        updates = fold_phase(stored_lead(), PaymentPhase(method="stripe", status="succeeded"), NOW)
        self.assertEqual(
            (updates["payment_method"], updates["payment_status"], updates["progress_step"]),
            ("stripe", "succeeded", "payment_completed"),
        )


class TestOrderTotal(unittest.TestCase):
    def test_sums_priced_lines(self):
        total = order_total(
            {"name": "Combi 30kW", "price": "2000"},
            [{"title": "Filter", "price": 100, "quantity": 2}, {"title": "Free flush", "price": 0, "quantity": 1}],
            [{"title": "Care plan", "price": "12.5", "quantity": "4"}],
        )
        self.assertEqual(total, 2250.0)

    def test_missing_documents(self):
        self.assertEqual(order_total(None, None, None), 0.0)


class TestPartnerLeadsApi(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.partner = self.make_partner(subdomain="acme", company_color="#123456")
        self.category = self.make_category("boilers", name="Boiler Installation")
        self.fuel = self.add(FormQuestion(
            service_category_id=self.category.service_category_id, question_text="Fuel?", step_number=1,
            is_multiple_choice=True, answer_options=["Gas", "Oil"],
        ))
        self.meter = self.add(FormQuestion(
            service_category_id=self.category.service_category_id, question_text="Meter?", step_number=2,
            is_required=False,
            conditional_display={"dependent_on_question_id": self.fuel.question_id, "show_when_answer_equals": ["Gas"]},
        ))
        self.host = {"x-forwarded-host": "acme.homequote.test"}

    def create_lead(self, answers=None, **body):
        body.setdefault("serviceCategoryId", self.category.service_category_id)
        body.setdefault("firstName", "Grace")
        body.setdefault("email", "grace@example.com")
        body["answers"] = answers if answers is not None else {self.fuel.question_id: "Gas"}
        return self.client.post("/api/partner-leads", json=body, headers=self.host)

    def test_create_for_resolved_partner(self):
        response = self.create_lead()
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["partner_id"], self.partner.user_id)
        self.assertEqual(data["progress_step"], "quote")
        self.assertEqual(data["status"], "new")
        self.assertEqual(data["form_answers"]["questions"][0]["question_text"], "Fuel?")

    def test_unknown_host(self):
        response = self.client.post(
            "/api/partner-leads",
            json={"serviceCategoryId": self.category.service_category_id},
            headers={"x-forwarded-host": "nobody.homequote.test"},
        )
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Partner not found"})

    def test_invalid_answers_rejected(self):
        response = self.create_lead(answers={self.fuel.question_id: "Coal"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid option(s): Coal", response.json()["error"])

    def test_hidden_answers_are_dropped(self):
        response = self.create_lead(answers={self.fuel.question_id: "Oil", self.meter.question_id: "Outside"})
        self.assertEqual(response.json()["form_answers"]["answers"], {self.fuel.question_id: "Oil"})

    def test_lead_lifecycle_and_order_summary(self):
        lead_id = self.create_lead(
            productInfo={"name": "Combi 30kW", "price": 1800},
            addonInfo=[{"title": "Filter", "price": 100, "quantity": 2}],
            bundleInfo=[{"title": "Care plan", "price": 50, "quantity": 1}],
        ).json()["submission_id"]

        response = self.client.put("/api/partner-leads/update-address", json={
            "submissionId": lead_id,
            "addressData": {"address_line_1": "1 High Street", "town_or_city": "Bath", "postcode": "BA1 1AA"},
        })
        self.assertEqual(response.json(), {
            "success": True,
            "data": {"submission_id": lead_id, "address_saved": True, "progress_step": "enquiry"},
        })

        response = self.client.put("/api/partner-leads/update-enquiry", json={
            "submissionId": lead_id, "enquiryDetails": {"preferredDate": "2026-04-01"},
        })
        self.assertEqual(response.json()["data"]["status"], "enquiry_submitted")

        response = self.client.put("/api/partner-leads/update-payment", json={
            "submissionId": lead_id, "paymentMethod": "stripe", "paymentStatus": "succeeded",
        })
        self.assertEqual(response.json()["data"]["payment_status"], "succeeded")

        summary = self.client.get(f"/api/partner-leads/{lead_id}").json()
        self.assertEqual(summary["productName"], "Combi 30kW")
        self.assertEqual(summary["totalAmount"], 2050.0)
        self.assertEqual(summary["bundles"][0]["unitPrice"], 50.0)
        self.assertEqual(summary["customerDetails"]["firstName"], "Grace")
        self.assertEqual(summary["paymentMethod"], "stripe")
        self.assertEqual(summary["partnerInfo"]["companyColor"], "#123456")
        self.assertEqual(summary["serviceCategory"], "Boiler Installation")

        self.db.expire_all()
        stored = self.db.get(PartnerLead, lead_id)
        self.assertEqual(stored.city, "Bath")
        self.assertIn("address_details", stored.form_answers)
        self.assertIn("enquiry_details", stored.form_answers)

    def test_order_summary_defaults(self):
        lead = self.add(PartnerLead(partner_id=self.partner.user_id, addon_info=[{"price": 5}]))
        summary = self.client.get(f"/api/partner-leads/{lead.submission_id}").json()
        self.assertEqual(summary["productName"], "Boiler Installation")
        self.assertEqual(summary["addons"], [{"title": "Unknown Addon", "quantity": 1, "price": 5.0}])
        self.assertEqual(summary["paymentMethod"], "unknown")
        self.assertEqual(summary["paymentStatus"], "pending")
        self.assertEqual(summary["progressStep"], "checkout")

    def test_unknown_lead(self):
        response = self.client.get("/api/partner-leads/does-not-exist")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Lead not found"})

    def test_update_validation(self):
        response = self.client.put("/api/partner-leads/update-enquiry", json={})
        self.assertEqual(response.json(), {"error": "Missing submissionId"})

        response = self.client.put("/api/partner-leads/update-payment", json={"submissionId": "x"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Payment method is required"})

        response = self.client.put("/api/partner-leads/update-payment", json={"submissionId": "x", "paymentMethod": "card"})
        self.assertEqual(response.json(), {"error": "Payment status is required"})

    def test_survey_details_update_contact(self):
        lead = self.add(PartnerLead(partner_id=self.partner.user_id, first_name="Old"))
        response = self.client.put("/api/partner-leads/update-payment", json={
            "submissionId": lead.submission_id, "surveyDetails": {"firstName": "New", "email": "new@example.com"},
        })
        data = response.json()["data"]
        self.assertEqual((data["first_name"], data["email"], data["progress_step"]), ("New", "new@example.com", "survey"))


class TestQuoteSubmissionsApi(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.category = self.make_category("boilers")
        self.question = self.add(FormQuestion(
            service_category_id=self.category.service_category_id, question_text="Property type?", step_number=1,
        ))

    def body(self, **overrides):
        body = {
            "serviceCategory": self.category.service_category_id,
            "firstName": "Alan",
            "lastName": "Turing",
            "email": "alan@example.com",
            "postcode": "MK3 6EB",
            "answers": {self.question.question_id: "Detached", "ghost": "?"},
        }
        body.update(overrides)
        return body

    def test_missing_fields_reported_in_order(self):
        response = self.client.post("/api/quote-submissions", json=self.body(firstName="", email=None))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Missing required field: firstName"})

        response = self.client.post("/api/quote-submissions", json=self.body(answers=None))
        self.assertEqual(response.json(), {"error": "Missing required field: answers"})

    def test_stores_labelled_answers_and_request_context(self):
        response = self.client.post(
            "/api/quote-submissions",
            json=self.body(),
            headers={"user-agent": "pytest", "referer": "https://acme.test/quote", "x-forwarded-for": "203.0.113.7"},
        )
        self.assertEqual(response.status_code, 201)
        data = response.json()["data"]
        self.assertTrue(response.json()["success"])
        labels = {a["question_text"]: a["answer"] for a in data["form_answers"]}
        self.assertEqual(labels, {"Property type?": "Detached", "Unknown Question": "?"})

        stored = self.db.get(QuoteSubmission, data["submission_id"])
        self.assertEqual((stored.ip_address, stored.user_agent), ("203.0.113.7", "pytest"))
        self.assertEqual(stored.referral_source, "https://acme.test/quote")


if __name__ == "__main__":
    unittest.main()
