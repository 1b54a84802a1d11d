import unittest
from unittest.mock import patch

import requests

from wabf.core.directory_client import DirectoryClient
from wabf.core.lookup import DirectoryLookupError, EnrichmentError


class DummyResponse:
    def __init__(self, status_code=200, json_obj=None):
        self.status_code = status_code
        self._json = json_obj

    def json(self):
        if self._json is None:
            raise ValueError("No JSON")
        return self._json


class TestDirectoryClient(unittest.TestCase):
    def setUp(self):
        self.client = DirectoryClient("https://bridge.example.com/api/", token="secret", timeout=5)

    def test_session_setup(self):
        self.assertEqual(self.client.base_url, "https://bridge.example.com/api")
        self.assertEqual(self.client.session.headers["Authorization"], "Bearer secret")

    def test_requires_base_url(self):
        with self.assertRaises(ValueError):
            DirectoryClient("")

    @patch("requests.Session.request")
    def test_is_registered(self, mock_request):
        mock_request.return_value = DummyResponse(json_obj={"registered": True, "verified_name": "Acme"})
        reg = self.client.is_registered("15551234567")
        self.assertTrue(reg.registered)
        self.assertEqual(reg.verified_name, "Acme")
        args, kwargs = mock_request.call_args
        self.assertEqual(args, ("GET", "https://bridge.example.com/api/contacts/15551234567/registered"))
        self.assertEqual(kwargs["timeout"], 5.0)

    @patch("requests.Session.request")
    def test_not_registered(self, mock_request):
        mock_request.return_value = DummyResponse(json_obj={"registered": False})
        self.assertFalse(self.client.is_registered("1").registered)

    @patch("requests.Session.request")
    def test_http_error_raises(self, mock_request):
        mock_request.return_value = DummyResponse(status_code=500)
        with self.assertRaises(DirectoryLookupError):
            self.client.is_registered("1")

    @patch("requests.Session.request")
    def test_rate_limit_raises(self, mock_request):
        mock_request.return_value = DummyResponse(status_code=429)
        with self.assertRaisesRegex(DirectoryLookupError, "rate limited"):
            self.client.is_registered("1")

    @patch("requests.Session.request", side_effect=requests.exceptions.Timeout())
    def test_timeout_raises(self, _mock_request):
        with self.assertRaisesRegex(DirectoryLookupError, "timeout"):
            self.client.is_registered("1")

    @patch("requests.Session.request")
    def test_invalid_json_raises(self, mock_request):
        mock_request.return_value = DummyResponse(status_code=200)
        with self.assertRaises(DirectoryLookupError):
            self.client.is_registered("1")

    @patch("requests.Session.request")
    def test_profile(self, mock_request):
        mock_request.return_value = DummyResponse(json_obj={"status": "Busy", "display_name": "Ann"})
        profile = self.client.get_profile("1")
        self.assertEqual(profile.status, "Busy")
        self.assertEqual(profile.display_name, "Ann")
        self.assertIsNone(profile.verified_name)

    @patch("requests.Session.request")
    def test_profile_error_is_enrichment_error(self, mock_request):
        mock_request.return_value = DummyResponse(status_code=503)
        with self.assertRaises(EnrichmentError):
            self.client.get_profile("1")

    @patch("requests.Session.request")
    def test_business_info_drops_empty_fields(self, mock_request):
        mock_request.return_value = DummyResponse(json_obj={"email": "a@b.c", "website": "", "address": None})
        self.assertEqual(self.client.get_business_info("1"), {"email": "a@b.c"})

    @patch("requests.Session.request")
    def test_missing_business_and_avatar(self, mock_request):
        mock_request.return_value = DummyResponse(status_code=404)
        self.assertEqual(self.client.get_business_info("1"), {})
        self.assertIsNone(self.client.get_avatar_reference("1"))

    @patch("requests.Session.request")
    def test_avatar(self, mock_request):
        mock_request.return_value = DummyResponse(json_obj={"url": "https://cdn/x.jpg"})
        self.assertEqual(self.client.get_avatar_reference("1"), "https://cdn/x.jpg")


if __name__ == "__main__":
    unittest.main()
