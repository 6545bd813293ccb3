import asyncio
import unittest
from unittest.mock import patch

import httpx

from api_case import ApiTestCase
from homequote.database.models import PartnerProfile
from homequote.external.domains.client import DomainsClient
from homequote.external.postcode.client import clean_postcode
from homequote.services.domain_service import verification_from_record
from homequote.services.postcode_service import map_search_result, summary_to_address
from homequote.utils.exceptions import ExternalServiceError

ADD = "homequote.services.domain_service.DomainsClient.add_domain"
GET = "homequote.services.domain_service.DomainsClient.get_domain"
SEARCH = "homequote.services.postcode_service.PostcodeClient.search"


class TestVerificationRecord(unittest.TestCase):
    def test_verified_or_configured(self):
        self.assertEqual(verification_from_record({"verified": True})["status"], "verified")
        self.assertEqual(verification_from_record({"configured": True})["status"], "verified")

    def test_first_verification_check_decides(self):
        self.assertEqual(verification_from_record({"verification": [{"status": "PENDING"}]})["status"], "pending")
        result = verification_from_record({"verification": [{"status": "FAILED", "reason": "TXT record missing"}]})
        self.assertEqual(result, {"verified": False, "status": "error", "message": "TXT record missing"})

    def test_redirect_counts_as_verified(self):
        self.assertTrue(verification_from_record({"redirect": "acme.co.uk"})["verified"])

    def test_unconfigured_domain(self):
        self.assertIn("DNS", verification_from_record({})["message"])


class TestDomainApi(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.partner = self.make_partner(custom_domain="acme.co.uk")
        self.headers = self.auth_headers(self.partner.user_id)

    def post(self, path, domain):
        return self.client.post(f"/api/domain/{path}", json={"domain": domain}, headers=self.headers)

    def test_domain_required(self):
        response = self.post("add", None)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Domain is required"})

    @patch(GET)
    def test_domain_must_be_a_hostname(self, mock_get):
        response = self.post("verify", "acme.co.uk/../../v9/teams")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid domain"})
        mock_get.assert_not_called()

    @patch("httpx.AsyncClient.request")
    def test_domain_is_quoted_into_the_provider_path(self, mock_request):
        mock_request.return_value = httpx.Response(200, json={"verified": True})
        asyncio.run(DomainsClient().get_domain("acme.co.uk/x"))
        method, url = mock_request.call_args.args
        self.assertEqual(method, "GET")
        self.assertTrue(url.endswith("/v9/projects/prj_test/domains/acme.co.uk%2Fx"))

    @patch("httpx.AsyncClient.request")
    def test_unreachable_provider(self, mock_request):
        mock_request.side_effect = httpx.ConnectError("connection refused")
        response = self.post("verify", "acme.co.uk")
        self.assertEqual(response.status_code, 500)
        self.assertIn("Hosting provider unreachable", response.json()["error"])

    def test_only_own_domain(self):
        response = self.post("verify", "rival.co.uk")
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"error": "Domain not found or access denied"})

    @patch(ADD)
    def test_add(self, mock_add):
        mock_add.return_value = (200, {"name": "acme.co.uk"})
        response = self.post("add", "ACME.co.uk")
        self.assertTrue(response.json()["success"])
        mock_add.assert_called_once_with("acme.co.uk")

    @patch(ADD)
    def test_add_existing_domain_is_success(self, mock_add):
        mock_add.return_value = (409, {"error": {"code": "DOMAIN_ALREADY_EXISTS", "message": "exists"}})
        self.assertTrue(self.post("add", "acme.co.uk").json()["success"])

    @patch(ADD)
    def test_add_rejected(self, mock_add):
        mock_add.return_value = (400, {"error": {"code": "invalid_domain", "message": "Invalid domain name"}})
        response = self.post("add", "acme.co.uk")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid domain name"})

    def stored_flag(self):
        self.db.expire_all()
        return self.db.get(PartnerProfile, self.partner.user_id).domain_verified

    @patch(GET)
    def test_verify_persists_outcome(self, mock_get):
        mock_get.return_value = (200, {"verified": True})
        self.assertEqual(self.post("verify", "acme.co.uk").json(), {"verified": True, "status": "verified"})
        self.assertIs(self.stored_flag(), True)

        mock_get.return_value = (200, {"verification": [{"status": "PENDING"}]})
        self.assertEqual(self.post("verify", "acme.co.uk").json()["status"], "pending")
        self.assertIsNone(self.stored_flag())

    @patch(GET)
    def test_verify_unknown_to_provider(self, mock_get):
        mock_get.return_value = (404, {})
        data = self.post("verify", "acme.co.uk").json()
        self.assertEqual(data["status"], "error")
        self.assertIs(self.stored_flag(), False)

    @patch(GET)
    def test_verify_provider_failure_is_reported_in_body(self, mock_get):
        mock_get.return_value = (500, {"error": {"message": "Upstream down"}})
        response = self.post("verify", "acme.co.uk")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"verified": False, "status": "error", "message": "Upstream down"})

    @patch(GET)
    def test_verify_without_hosting_config(self, mock_get):
        mock_get.side_effect = ExternalServiceError("Hosting provider configuration is missing")
        response = self.post("verify", "acme.co.uk")
        self.assertEqual(response.status_code, 500)


class TestPostcodeMapping(unittest.TestCase):
    def test_clean_postcode(self):
        self.assertEqual(clean_postcode(" sw1a  2aa "), "SW1A2AA")

    def test_clean_postcode_keeps_only_letters_and_digits(self):
        self.assertEqual(clean_postcode("sw1a/../2aa?key=x"), "SW1A2AAKEYX")
        self.assertEqual(clean_postcode("../"), "")

    def test_residential_flat_goes_to_sub_building(self):
        address = summary_to_address({
            "Type": "residential", "BuildingNumber": "Flat 3", "StreetAddress": "12 High Street",
            "Town": "Bath", "Postcode": "BA1 1AA", "Address": "Flat 3, 12 High Street, Bath, BA1 1AA",
        })
        self.assertEqual(address["sub_building"], "Flat 3")
        self.assertEqual(address["address_line_1"], "12 High Street")
        self.assertEqual((address["street_number"], address["street_name"]), ("12", "High Street"))
        self.assertEqual(address["country"], "United Kingdom")

    def test_residential_number_prefixes_street(self):
        address = summary_to_address({"Type": "residential", "BuildingNumber": "7", "StreetAddress": "Mill Lane", "Town": "Ely"})
        self.assertEqual(address["address_line_1"], "7 Mill Lane")
        self.assertIsNone(address["street_number"])

    def test_business_building_name(self):
        address = summary_to_address({"Type": "business", "BuildingNumber": "Tower House", "StreetAddress": "1 Quay St", "Town": "Hull"})
        self.assertEqual(address["building_name"], "Tower House")
        self.assertEqual(address["address_line_1"], "1 Quay St")

    def test_incomplete_entries_are_dropped(self):
        data = {"SearchEnd": {"Summaries": [
            {"Type": "residential", "BuildingNumber": "1", "StreetAddress": "A Road", "Town": "Ely"},
            {"Type": "residential", "BuildingNumber": "", "StreetAddress": "", "Town": "Ely"},
            {"Type": "residential", "BuildingNumber": "2", "StreetAddress": "B Road", "Town": None},
        ]}}
        self.assertEqual([a["address_line_1"] for a in map_search_result(data)], ["1 A Road"])
        self.assertEqual(map_search_result({}), [])


class TestPostcodeApi(ApiTestCase):
    def test_postcode_required(self):
        response = self.client.get("/api/postcode-lookup")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Postcode is required"})

    def test_postcode_of_only_punctuation_is_missing(self):
        response = self.client.get("/api/postcode-lookup", params={"postcode": "../"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Postcode is required"})

    @patch("httpx.AsyncClient.get")
    def test_unreachable_lookup_service(self, mock_get):
        mock_get.side_effect = httpx.ReadTimeout("timed out")
        response = self.client.get("/api/postcode-lookup", params={"postcode": "CB7 4AA"})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Failed to fetch addresses from external service"})

    @patch(SEARCH)
    def test_lookup(self, mock_search):
        mock_search.return_value = {"SearchEnd": {"Summaries": [
            {"Type": "residential", "BuildingNumber": "1", "StreetAddress": "A Road", "Town": "Ely", "Postcode": "CB7 4AA"},
        ]}}
        data = self.client.get("/api/postcode-lookup", params={"postcode": "cb7 4aa"}).json()
        self.assertTrue(data["success"])
        self.assertEqual(data["addresses"][0]["town_or_city"], "Ely")

    @patch(SEARCH)
    def test_no_results(self, mock_search):
        mock_search.return_value = {"SearchEnd": {"Summaries": []}}
        data = self.client.get("/api/postcode-lookup", params={"postcode": "ZZ1 1ZZ"}).json()
        self.assertEqual(data, {"addresses": [], "success": False, "message": "No addresses found for this postcode."})

    @patch(SEARCH)
    def test_upstream_status_is_passed_through(self, mock_search):
        mock_search.side_effect = ExternalServiceError("Failed to fetch addresses from external service", status_code=404)
        response = self.client.get("/api/postcode-lookup", params={"postcode": "ZZ1 1ZZ"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "Failed to fetch addresses from external service"})


if __name__ == "__main__":
    unittest.main()
