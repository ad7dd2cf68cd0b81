import unittest

from leetcord.discord.errors import describe_error
from leetcord.discord.commands import build_motivation_embed, build_problem_embed, format_tags, pick_problem
from leetcord.leetcode.errors import NO_DATA_MESSAGE, UpstreamUnavailable
from leetcord.leetcode.models import Difficulty, ProblemFilter, ProblemRecord


TWO_SUM = ProblemRecord(
    id="1",
    display_id="1",
    title="Two Sum",
    slug="two-sum",
    difficulty=Difficulty.EASY,
    acceptance_rate=49.5,
    tags=frozenset({"Array", "Hash Table"}),
)


class FakeLeetCode:
    def __init__(self, problems=(), ready=True, refresh_error=None, after_refresh=()):
        self.problems = list(problems)
        self.is_ready = ready
        self.refresh_error = refresh_error
        self.after_refresh = list(after_refresh)
        self.refreshes = 0

    async def ensure_ready(self):
        self.refreshes += 1
        if self.refresh_error:
            raise self.refresh_error
        self.problems = self.after_refresh
        self.is_ready = True

    def get_random_problem(self, problem_filter=None):
        matches = [p for p in self.problems if problem_filter is None or problem_filter.matches(p)]
        return matches[0] if matches else None

    def get_cache_size(self):
        return len(self.problems)


class TestFormatting(unittest.TestCase):
    def test_problem_embed(self):
        embed = build_problem_embed(TWO_SUM)
        self.assertEqual(embed.url, "https://leetcode.com/problems/two-sum/")
        self.assertIn("**[1] Two Sum**", embed.description)
        self.assertIn("49.50%", embed.description)
        self.assertEqual(embed.color.value, 0x00B8A3)
        self.assertEqual(embed.fields[0].value, "Array, Hash Table")

    def test_tags_capped_at_five(self):
        tags = frozenset({"A", "B", "C", "D", "E", "F"})
        self.assertEqual(format_tags(tags), "A, B, C, D, E...")
        self.assertEqual(format_tags(frozenset()), "None")

    def test_motivation_embed(self):
        embed = build_motivation_embed("https://i.waifu.pics/abc.png")
        self.assertEqual(embed.image.url, "https://i.waifu.pics/abc.png")


class TestDescribeError(unittest.TestCase):
    def test_catalogue_errors_are_labelled(self):
        self.assertIn("UpstreamUnavailable", describe_error(UpstreamUnavailable("LeetCode API error: 503")))

    def test_long_messages_are_cut(self):
        message = describe_error(RuntimeError("x" * 500 + "\nsecond line"))
        self.assertTrue(message.startswith("❌ RuntimeError: "))
        self.assertNotIn("second line", message)


class TestPickProblem(unittest.IsolatedAsyncioTestCase):
    async def test_serves_from_loaded_cache(self):
        leetcode = FakeLeetCode([TWO_SUM])
        problem, reason = await pick_problem(leetcode, ProblemFilter())
        self.assertEqual(problem, TWO_SUM)
        self.assertIsNone(reason)
        self.assertEqual(leetcode.refreshes, 0)

    async def test_no_match_on_loaded_cache_does_not_refresh(self):
        leetcode = FakeLeetCode([TWO_SUM])
        problem, reason = await pick_problem(leetcode, ProblemFilter(difficulty="Hard"))
        self.assertIsNone(problem)
        self.assertIn("difficulty=Hard", reason)
        self.assertEqual(leetcode.refreshes, 0)

    async def test_unready_cache_forces_refresh(self):
        leetcode = FakeLeetCode(ready=False, after_refresh=[TWO_SUM])
        problem, _ = await pick_problem(leetcode, ProblemFilter(category="array"))
        self.assertEqual(problem, TWO_SUM)
        self.assertEqual(leetcode.refreshes, 1)

    async def test_failed_forced_refresh_reports_failure(self):
        leetcode = FakeLeetCode(ready=False, refresh_error=UpstreamUnavailable("down"))
        problem, reason = await pick_problem(leetcode, ProblemFilter())
        self.assertIsNone(problem)
        self.assertIn("Failed to fetch", reason)

    async def test_empty_catalogue_reports_no_data(self):
        leetcode = FakeLeetCode(ready=True)
        problem, reason = await pick_problem(leetcode, ProblemFilter(difficulty="Easy"))
        self.assertIsNone(problem)
        self.assertEqual(reason, NO_DATA_MESSAGE)


if __name__ == "__main__":
    unittest.main()
