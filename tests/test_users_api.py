import json
import unittest
from urllib.parse import parse_qs, urlsplit

import httpx

from grid_app.enums import SortDirection
from grid_app.models import FilterSpec, PageRequest, Record, SortSpec
from grid_app.services.update_submitter import (
    GENERIC_FAILURE_MESSAGE,
    SubmitFailure,
    SubmitSuccess,
    UpdateSubmitter,
)
from grid_app.services.users_api import UsersApiClient, UsersApiError, parse_page_payload

USERS_URL = "http://api.test/api/users"
UPDATE_URL = "http://api.test/api/update-user"


def _client(handler):
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return UsersApiClient(USERS_URL, UPDATE_URL, http_client)


class FetchPageTests(unittest.TestCase):
    def test_fetch_sends_encoded_query_and_parses_page(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            return httpx.Response(
                200,
                json={"last_page": 7, "data": [{"id": 1, "name": "Ann", "dob": "1990-01-02"}]},
            )

        request = PageRequest(
            page=2,
            per_page=200,
            sorts=[SortSpec("name", SortDirection.ASC)],
            filters=[FilterSpec("gender", "male")],
        )
        result = _client(handler).fetch_page(request)

        query = parse_qs(urlsplit(seen["url"]).query)
        self.assertEqual(query["page"], ["2"])
        self.assertEqual(query["per_page"], ["200"])
        self.assertEqual(query["sort_by"], ["name:asc"])
        self.assertEqual(query["gender"], ["male"])
        self.assertEqual(result.last_page, 7)
        self.assertEqual([r.name for r in result.records], ["Ann"])

    def test_server_error_raises_api_error(self):
        client = _client(lambda request: httpx.Response(503))
        with self.assertRaises(UsersApiError):
            client.fetch_page(PageRequest())

    def test_transport_error_raises_api_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with self.assertRaises(UsersApiError):
            _client(handler).fetch_page(PageRequest())

    def test_invalid_json_raises_api_error(self):
        client = _client(lambda request: httpx.Response(200, content=b"<html>"))
        with self.assertRaises(UsersApiError):
            client.fetch_page(PageRequest())


class ParsePayloadTests(unittest.TestCase):
    def test_page_count_from_total(self):
        result = parse_page_payload({"data": [], "total": 401}, per_page=200)
        self.assertEqual(result.last_page, 3)
        self.assertEqual(result.total, 401)

    def test_bare_list_is_one_page(self):
        result = parse_page_payload([{"id": 1}, {"id": 2}], per_page=200)
        self.assertEqual(result.last_page, 1)
        self.assertEqual(len(result.records), 2)

    def test_rows_without_id_are_rejected(self):
        with self.assertRaises(UsersApiError):
            parse_page_payload({"data": [{"name": "x"}]}, per_page=10)

    def test_missing_data_is_rejected(self):
        with self.assertRaises(UsersApiError):
            parse_page_payload({"rows": []}, per_page=10)


class UpdateSubmitterTests(unittest.TestCase):
    def setUp(self):
        self.batch = [Record(id=5, name="Bob", email="a@b.com", is_modified=True)]

    def test_success_posts_updates_body(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"updated": 1})

        result = UpdateSubmitter(_client(handler)).submit(self.batch)

        self.assertEqual(result, SubmitSuccess({"updated": 1}))
        self.assertEqual(seen["method"], "POST")
        self.assertEqual(seen["url"], UPDATE_URL)
        self.assertEqual(len(seen["body"]["updates"]), 1)
        sent = seen["body"]["updates"][0]
        self.assertEqual(sent["id"], 5)
        self.assertEqual(sent["email"], "a@b.com")
        self.assertTrue(sent["isModified"])

    def test_success_with_empty_body(self):
        result = UpdateSubmitter(_client(lambda r: httpx.Response(200))).submit(self.batch)
        self.assertEqual(result, SubmitSuccess(None))

    def test_server_error_message_is_surfaced(self):
        client = _client(lambda r: httpx.Response(500, json={"error": "db locked"}))
        with self.assertLogs("grid_app.services.update_submitter", level="WARNING"):
            result = UpdateSubmitter(client).submit(self.batch)
        self.assertEqual(result, SubmitFailure("db locked"))

    def test_non_200_success_status_is_a_failure(self):
        client = _client(lambda r: httpx.Response(201, json={}))
        result = UpdateSubmitter(client).submit(self.batch)
        self.assertEqual(result, SubmitFailure(GENERIC_FAILURE_MESSAGE))

    def test_error_without_message_uses_fallback(self):
        client = _client(lambda r: httpx.Response(400, content=b"bad"))
        result = UpdateSubmitter(client).submit(self.batch)
        self.assertEqual(result, SubmitFailure(GENERIC_FAILURE_MESSAGE))

    def test_transport_exception_becomes_failure(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with self.assertLogs("grid_app.services.update_submitter", level="ERROR") as captured:
            result = UpdateSubmitter(_client(handler)).submit(self.batch)

        self.assertEqual(result, SubmitFailure(GENERIC_FAILURE_MESSAGE))
        self.assertTrue(any("Update request failed" in line for line in captured.output))

    def test_invalid_update_url_becomes_failure(self):
        def handler(request):
            raise httpx.InvalidURL("Invalid port: '99999'")

        with self.assertLogs("grid_app.services.update_submitter", level="ERROR"):
            result = UpdateSubmitter(_client(handler)).submit(self.batch)

        self.assertEqual(result, SubmitFailure(GENERIC_FAILURE_MESSAGE))


if __name__ == "__main__":
    unittest.main()
