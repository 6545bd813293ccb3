import asyncio
import unittest
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import patch
from urllib.parse import parse_qs, urlparse

import httpx

from api_case import ApiTestCase
from homequote.core.security import create_session_token
from homequote.database.models import CRMIntegration
from homequote.external.auth.client import AuthClient
from homequote.external.crm.models import CRMTokenResponse
from homequote.services.auth_service import is_safe_relative_path, landing_path, post_sign_in_path
from homequote.utils.exceptions import ExternalServiceError
from homequote.utils.helpers import utcnow

EXCHANGE = "homequote.api.v1.endpoints.auth.AuthClient.exchange_code"
CRM_EXCHANGE = "homequote.services.crm_service.LeadConnectorClient.exchange_code"


class TestRedirectRules(unittest.TestCase):
    def test_only_same_origin_paths_are_safe(self):
        self.assertTrue(is_safe_relative_path("/partner/settings?tab=crm"))
        for path in (None, "", "partner", "//evil.test", "/\\evil.test", "https://evil.test/"):
            self.assertFalse(is_safe_relative_path(path))

    def test_landing_path_follows_role_and_status(self):
        class Profile:
            def __init__(self, role, status="active"):
                self.role, self.status = role, status

        self.assertEqual(landing_path(None), "/")
        self.assertEqual(landing_path(Profile("admin")), "/admin")
        self.assertEqual(landing_path(Profile("partner")), "/partner")
        self.assertEqual(landing_path(Profile("partner", "pending")), "/partner/pending")
        self.assertEqual(landing_path(Profile("partner", "suspended")), "/partner/suspended")

    def test_only_relative_redirect_overrides_landing_page(self):
        admin = SimpleNamespace(role="admin", status="active")
        self.assertEqual(post_sign_in_path(admin, "/admin/partners"), "/admin/partners")
        self.assertEqual(post_sign_in_path(admin, "https://evil.test/admin"), "/admin")
        self.assertEqual(post_sign_in_path(admin, None), "/admin")


class TestAuthCallback(ApiTestCase):
    def callback(self, **params):
        return self.client.get("/auth/callback", params=params, follow_redirects=False)

    def test_missing_code_goes_home(self):
        response = self.callback()
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers["location"], "http://testserver/")

    @patch(EXCHANGE)
    def test_failed_exchange_goes_home(self, mock_exchange):
        mock_exchange.side_effect = ExternalServiceError("Auth code exchange failed", status_code=400)
        response = self.callback(code="bad")
        self.assertEqual(response.headers["location"], "http://testserver/")
        self.assertIsNone(response.cookies.get("access_token"))

    @patch(EXCHANGE)
    def test_partner_lands_on_dashboard_with_session_cookie(self, mock_exchange):
        partner = self.make_partner()
        token = create_session_token(partner.user_id)
        mock_exchange.return_value = {"access_token": token, "expires_in": 3600, "user": {"id": partner.user_id}}

        response = self.client.get(
            "/auth/callback", params={"code": "abc"},
            headers={"Cookie": "code_verifier=verifier-1"}, follow_redirects=False,
        )
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers["location"], "http://testserver/partner")
        mock_exchange.assert_called_once_with("abc", "verifier-1")

        cookies = response.headers.get_list("set-cookie")
        session_cookie = next(c for c in cookies if c.startswith("access_token="))
        self.assertIn("HttpOnly", session_cookie)
        self.assertIn("samesite=lax", session_cookie.lower())
        self.assertTrue(any(c.startswith("code_verifier=") for c in cookies))

    @patch(EXCHANGE)
    def test_user_id_from_token_when_session_has_no_user(self, mock_exchange):
        admin = self.make_admin()
        mock_exchange.return_value = {"access_token": create_session_token(admin.user_id)}
        response = self.callback(code="abc")
        self.assertEqual(response.headers["location"], "http://testserver/admin")

    @patch(EXCHANGE)
    def test_relative_redirect_takes_precedence_over_landing_page(self, mock_exchange):
        partner = self.make_partner(status="pending")
        mock_exchange.return_value = {"access_token": create_session_token(partner.user_id)}

        response = self.callback(code="abc", redirect_to="/partner/settings")
        self.assertEqual(response.headers["location"], "http://testserver/partner/settings")

    @patch(EXCHANGE)
    def test_offsite_redirect_is_not_honoured_and_falls_back_to_landing_page(self, mock_exchange):
        partner = self.make_partner(status="pending")
        mock_exchange.return_value = {"access_token": create_session_token(partner.user_id)}

        for target in ("//evil.test/phish", "https://evil.test/", "partner/settings"):
            response = self.callback(code="abc", redirect_to=target)
            self.assertEqual(response.headers["location"], "http://testserver/partner/pending")

    @patch(EXCHANGE)
    def test_unreachable_auth_service_goes_home(self, mock_exchange):
        mock_exchange.side_effect = httpx.ConnectError("connection refused")
        response = self.callback(code="abc")
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers["location"], "http://testserver/")

    @patch("httpx.AsyncClient.post")
    def test_client_wraps_transport_errors(self, mock_post):
        mock_post.side_effect = httpx.ReadTimeout("timed out")
        with self.assertRaises(ExternalServiceError):
            asyncio.run(AuthClient().exchange_code("abc"))


class TestCRMCallback(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.partner = self.make_partner()
        self.session = {"Cookie": f"access_token={create_session_token(self.partner.user_id)}"}

    def callback(self, headers=None, **params):
        return self.client.get("/auth/crm/callback", params=params, headers=headers, follow_redirects=False)

    def test_provider_error(self):
        response = self.callback(error="access denied", headers=self.session)
        self.assertEqual(
            response.headers["location"], "https://app.example.com/partner/settings?ghl_error=access%20denied"
        )

    def test_missing_code(self):
        response = self.callback(headers=self.session)
        self.assertEqual(response.headers["location"], "https://app.example.com/partner/settings?ghl_error=no_code")

    def test_signed_out_user_is_sent_to_sign_in(self):
        response = self.callback(code="abc")
        self.assertEqual(
            response.headers["location"], "https://app.example.com/sign-in?redirect_to=%2Fpartner%2Fsettings"
        )

    @patch(CRM_EXCHANGE)
    def test_successful_connection_is_stored(self, mock_exchange):
        mock_exchange.return_value = CRMTokenResponse(
            access_token="at", refresh_token="rt", expires_in=86399,
            companyId="comp_1", locationId="loc_1", userId="crm_user", userType="Company", scope="contacts.readonly",
        )
        response = self.callback(code="abc", headers=self.session)
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.headers["location"], "https://app.example.com/partner/settings?ghl_success=true")
        mock_exchange.assert_called_once_with("abc", "https://app.example.com/auth/crm/callback")

        integration = self.db.query(CRMIntegration).filter_by(partner_id=self.partner.user_id).one()
        self.assertEqual((integration.company_id, integration.location_id), ("comp_1", "loc_1"))
        self.assertGreater(integration.token_expires_at, utcnow())

    @patch(CRM_EXCHANGE)
    def test_failed_exchange_reports_error(self, mock_exchange):
        mock_exchange.side_effect = ExternalServiceError("Invalid token response: missing required fields")
        response = self.callback(code="abc", headers=self.session)
        location = urlparse(response.headers["location"])
        self.assertEqual(parse_qs(location.query)["ghl_error"], ["Invalid token response: missing required fields"])


class TestCRMApi(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.partner = self.make_partner()
        self.headers = self.auth_headers(self.partner.user_id)

    def connect(self, **values):
        values.setdefault("token_expires_at", utcnow() + timedelta(hours=1))
        values.setdefault("user_type", "Location")
        return self.add(CRMIntegration(
            partner_id=self.partner.user_id, access_token="at", refresh_token="rt",
            company_id="comp_1", location_id="loc_1", user_id="crm_user", **values,
        ))

    def test_auth_url_carries_partner_as_state(self):
        response = self.client.get("/api/ghl/auth-url", headers=self.headers)
        query = parse_qs(urlparse(response.json()["authUrl"]).query)
        self.assertEqual(query["state"], [self.partner.user_id])
        self.assertEqual(query["client_id"], ["crm-client"])
        self.assertEqual(query["redirect_uri"], ["https://app.example.com/auth/crm/callback"])

    def test_integration_status(self):
        self.assertEqual(self.client.get("/api/ghl/integration", headers=self.headers).json(), {"connected": False, "is_expired": False})
        self.connect()
        data = self.client.get("/api/ghl/integration", headers=self.headers).json()
        self.assertTrue(data["connected"])
        self.assertFalse(data["is_expired"])
        self.assertNotIn("access_token", data)

    def test_custom_fields_without_integration(self):
        response = self.client.get("/api/ghl/custom-fields", headers=self.headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "CRM integration not found"})

    @patch("homequote.services.crm_service.LeadConnectorClient.get_custom_fields")
    def test_custom_fields(self, mock_fields):
        self.connect()
        mock_fields.return_value = [{"id": "cf_1", "name": "Boiler age"}]
        response = self.client.get("/api/ghl/custom-fields", headers=self.headers)
        self.assertEqual(response.json(), {"customFields": [{"id": "cf_1", "name": "Boiler age"}]})

    @patch("homequote.services.crm_service.LeadConnectorClient.get_pipelines")
    def test_pipeline_failure_is_bad_gateway(self, mock_pipelines):
        self.connect()
        mock_pipelines.side_effect = ExternalServiceError("CRM API Error: 401", status_code=401)
        response = self.client.get("/api/ghl/pipelines", headers=self.headers)
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json(), {"error": "Failed to fetch pipelines from CRM"})

    @patch("homequote.services.crm_service.LeadConnectorClient.get_pipelines")
    def test_pipeline_timeout_is_bad_gateway(self, mock_pipelines):
        self.connect()
        mock_pipelines.side_effect = httpx.ReadTimeout("timed out")
        response = self.client.get("/api/ghl/pipelines", headers=self.headers)
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json(), {"error": "Failed to fetch pipelines from CRM"})

    @patch("httpx.AsyncClient.request")
    def test_unreachable_crm_is_bad_gateway(self, mock_request):
        self.connect()
        mock_request.side_effect = httpx.ConnectError("connection refused")
        response = self.client.get("/api/ghl/custom-fields", headers=self.headers)
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json(), {"error": "Failed to fetch custom fields from CRM"})

    @patch("homequote.services.crm_service.LeadConnectorClient.get_pipelines")
    @patch("homequote.services.crm_service.LeadConnectorClient.refresh_access_token")
    def test_expired_token_is_refreshed_and_stored(self, mock_refresh, mock_pipelines):
        integration = self.connect(token_expires_at=utcnow() - timedelta(minutes=1))
        mock_refresh.return_value = CRMTokenResponse(access_token="new_at", refresh_token="new_rt", expires_in=3600)
        mock_pipelines.return_value = [{"id": "p1"}]

        response = self.client.get("/api/ghl/pipelines", headers=self.headers)
        self.assertEqual(response.json(), {"pipelines": [{"id": "p1"}]})
        self.db.refresh(integration)
        self.assertEqual((integration.access_token, integration.refresh_token), ("new_at", "new_rt"))

    @patch("homequote.services.crm_service.LeadConnectorClient.get_pipelines")
    @patch("homequote.services.crm_service.LeadConnectorClient.get_location_token")
    def test_company_token_falls_back_when_location_token_fails(self, mock_location, mock_pipelines):
        self.connect(user_type="Company")
        mock_location.side_effect = ExternalServiceError("CRM API Error: 403", status_code=403)
        mock_pipelines.return_value = []
        response = self.client.get("/api/ghl/pipelines", headers=self.headers)
        self.assertEqual(response.json(), {"pipelines": []})
        mock_location.assert_called_once_with("loc_1")


if __name__ == "__main__":
    unittest.main()
