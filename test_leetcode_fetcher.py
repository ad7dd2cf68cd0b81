import asyncio
import json
import unittest

import httpx

from leetcord.leetcode.errors import UpstreamSchemaMismatch, UpstreamUnavailable
from leetcord.leetcode.fetcher import CatalogueFetcher, normalize_questions
from leetcord.leetcode.models import Difficulty


def question(qid, difficulty="Easy", paid=False, tags=(), ac_rate=50.0):
    return {
        "id": qid,
        "questionFrontendId": qid,
        "title": f"Problem {qid}",
        "titleSlug": f"problem-{qid}",
        "paidOnly": paid,
        "difficulty": difficulty,
        "acRate": ac_rate,
        "topicTags": [{"name": t, "slug": t.lower().replace(" ", "-")} for t in tags],
    }


def envelope(questions):
    return {
        "data": {
            "problemsetQuestionListV2": {
                "questions": questions,
                "totalLength": len(questions),
            }
        }
    }


class TestNormalizeQuestions(unittest.TestCase):
    def test_paid_problems_are_dropped(self):
        records = normalize_questions([
            question("1", tags=["Array"]),
            question("2", difficulty="Medium", paid=True),
            question("3", difficulty="Hard", tags=["Dynamic Programming", "Math"]),
        ])
        self.assertEqual([r.id for r in records], ["1", "3"])

    def test_difficulty_is_case_normalized(self):
        records = normalize_questions([
            question("1", difficulty="EASY"),
            question("2", difficulty="medium"),
            question("3", difficulty="Hard"),
        ])
        self.assertEqual(
            [r.difficulty for r in records],
            [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD],
        )

    def test_fields_are_mapped(self):
        (record,) = normalize_questions([question("42", tags=["Array", "Two Pointers"], ac_rate=63.456789)])
        self.assertEqual(record.display_id, "42")
        self.assertEqual(record.slug, "problem-42")
        self.assertEqual(record.url, "https://leetcode.com/problems/problem-42/")
        self.assertEqual(record.acceptance_rate, 63.46)
        self.assertEqual(record.tags, frozenset({"Array", "Two Pointers"}))

    def test_unknown_difficulty_is_schema_mismatch(self):
        with self.assertRaises(UpstreamSchemaMismatch):
            normalize_questions([question("1", difficulty="Impossible")])

    def test_missing_field_is_schema_mismatch(self):
        q = question("1")
        del q["titleSlug"]
        with self.assertRaises(UpstreamSchemaMismatch):
            normalize_questions([q])

    def test_wrong_type_is_schema_mismatch(self):
        q = question("1")
        q["acRate"] = "fifty"
        with self.assertRaises(UpstreamSchemaMismatch):
            normalize_questions([q])

    def test_paid_flag_must_be_boolean(self):
        q = question("1")
        q["paidOnly"] = "no"
        with self.assertRaises(UpstreamSchemaMismatch):
            normalize_questions([q])

    def test_questions_must_be_a_list(self):
        with self.assertRaises(UpstreamSchemaMismatch):
            normalize_questions({"1": question("1")})

    def test_duplicate_ids_are_schema_mismatch(self):
        with self.assertRaises(UpstreamSchemaMismatch):
            normalize_questions([question("1"), question("2"), question("1")])

    def test_duplicate_of_paid_question_is_ignored(self):
        records = normalize_questions([question("1", paid=True), question("1")])
        self.assertEqual([r.id for r in records], ["1"])

    def test_acceptance_rate_out_of_range_is_schema_mismatch(self):
        for rate in (-0.5, 100.01, 4500):
            with self.subTest(rate=rate), self.assertRaises(UpstreamSchemaMismatch):
                normalize_questions([question("1", ac_rate=rate)])

    def test_acceptance_rate_bounds_are_accepted(self):
        records = normalize_questions([question("1", ac_rate=0), question("2", ac_rate=100)])
        self.assertEqual([r.acceptance_rate for r in records], [0.0, 100.0])


class TestCatalogueFetcher(unittest.IsolatedAsyncioTestCase):
    def make_fetcher(self, handler, **kwargs):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        self.addAsyncCleanup(client.aclose)
        return CatalogueFetcher(client=client, **kwargs)

    async def test_fetch_posts_single_batched_query(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=envelope([question("1"), question("2", paid=True)]))

        records = await self.make_fetcher(handler).fetch()

        self.assertEqual(len(seen), 1)
        self.assertEqual(seen[0].method, "POST")
        body = json.loads(seen[0].content)
        self.assertIn("problemsetQuestionListV2", body["query"])
        self.assertEqual(body["variables"]["limit"], 10000)
        self.assertEqual(body["variables"]["skip"], 0)
        self.assertEqual([r.id for r in records], ["1"])

    async def test_non_success_status_is_unavailable(self):
        fetcher = self.make_fetcher(lambda request: httpx.Response(503, text="down"))
        with self.assertRaises(UpstreamUnavailable):
            await fetcher.fetch()

    async def test_transport_error_is_unavailable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertRaises(UpstreamUnavailable):
            await self.make_fetcher(handler).fetch()

    async def test_timeout_is_unavailable(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with self.assertRaises(UpstreamUnavailable):
            await self.make_fetcher(handler, timeout=0.1).fetch()

    async def test_slow_response_hits_overall_deadline(self):
        async def handler(request):
            await asyncio.sleep(5)
            return httpx.Response(200, json=envelope([]))

        with self.assertRaises(UpstreamUnavailable):
            await asyncio.wait_for(self.make_fetcher(handler, timeout=0.05).fetch(), 2)

    async def test_non_json_body_is_schema_mismatch(self):
        fetcher = self.make_fetcher(lambda request: httpx.Response(200, text="<html>nope</html>"))
        with self.assertRaises(UpstreamSchemaMismatch):
            await fetcher.fetch()

    async def test_wrong_envelope_is_schema_mismatch(self):
        fetcher = self.make_fetcher(lambda request: httpx.Response(200, json={"data": {"other": {}}}))
        with self.assertRaises(UpstreamSchemaMismatch):
            await fetcher.fetch()

    async def test_graphql_error_payload_is_schema_mismatch(self):
        fetcher = self.make_fetcher(
            lambda request: httpx.Response(200, json={"data": None, "errors": [{"message": "boom"}]})
        )
        with self.assertRaises(UpstreamSchemaMismatch):
            await fetcher.fetch()


if __name__ == "__main__":
    unittest.main()
