"""
Slash commands and message handlers.

Everything here is a thin adapter: pull options out of the interaction,
call a service, format the reply.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import discord
from discord import app_commands
from discord.app_commands import Choice
from discord.ext import commands

from leetcord.discord.errors import handle_app_command_error
from leetcord.leetcode import (
    CatalogueError,
    Difficulty,
    LeetCodeService,
    ProblemFilter,
    ProblemRecord,
    format_user_friendly_error,
)
from leetcord.leetcode.errors import NO_DATA_MESSAGE, NO_MATCH_MESSAGE
from leetcord.services.auto_response import reply_message
from leetcord.services.ollama_service import ChatError, OllamaService
from leetcord.services.waifu import SAFE_CATEGORIES, WaifuError, WaifuService


DIFFICULTY_COLORS = {
    Difficulty.EASY: 0x00B8A3,
    Difficulty.MEDIUM: 0xFFC01E,
    Difficulty.HARD: 0xFF375F,
}
LEETCODE_ICON = "https://assets.leetcode.com/static_assets/public/icons/favicon-160x160.png"
MAX_TAGS_SHOWN = 5
MAX_MESSAGE_LENGTH = 2000
CHAT_TIMEOUT_SECONDS = 120


@dataclass
class BotContext:
    config: dict[str, Any]
    leetcode: LeetCodeService
    waifu: WaifuService
    ollama: Optional[OllamaService] = None


# ── Formatting ──────────────────────────────────────────────────────────────

def format_tags(tags: frozenset[str]) -> str:
    if not tags:
        return "None"
    ordered = sorted(tags)
    shown = ", ".join(ordered[:MAX_TAGS_SHOWN])
    return shown + ("..." if len(ordered) > MAX_TAGS_SHOWN else "")


def build_problem_embed(problem: ProblemRecord) -> discord.Embed:
    embed = discord.Embed(
        title="🧠 LeetCode Random Problem",
        url=problem.url,
        description=(
            f"**[{problem.display_id}] {problem.title}**\n"
            f"Difficulty: **{problem.difficulty.value}**\n"
            f"Acceptance: **{problem.acceptance_rate:.2f}%**"
        ),
        color=DIFFICULTY_COLORS.get(problem.difficulty, 0x808080),
    )
    embed.add_field(name="Tags", value=format_tags(problem.tags), inline=False)
    embed.set_footer(text="Powered by LeetCode", icon_url=LEETCODE_ICON)
    return embed


def build_motivation_embed(image_url: str) -> discord.Embed:
    embed = discord.Embed(
        title="💪 Hard Problem? Here's some motivation!",
        color=DIFFICULTY_COLORS[Difficulty.HARD],
    )
    embed.set_image(url=image_url)
    embed.set_footer(text="You've got this! Gambatte!")
    return embed


def truncate(text: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    return text if len(text) <= limit else text[: limit - 1] + "…"


# ── LeetCode lookup ─────────────────────────────────────────────────────────

async def pick_problem(
    leetcode: LeetCodeService, problem_filter: ProblemFilter
) -> tuple[Optional[ProblemRecord], Optional[str]]:
    """
    Return (problem, None) or (None, user-facing reason).

    Only an engine that never loaded data triggers a refresh; an
    empty filter result on a loaded catalogue is just "no match".
    """
    if not leetcode.is_ready:
        logging.info("LeetCode cache empty, forcing refresh")
        try:
            await leetcode.ensure_ready()
        except CatalogueError as e:
            return None, format_user_friendly_error(e)

    problem = leetcode.get_random_problem(problem_filter)
    if problem is not None:
        return problem, None
    if leetcode.get_cache_size() == 0:
        return None, NO_DATA_MESSAGE
    if problem_filter.describe():
        return None, NO_MATCH_MESSAGE.format(filters=problem_filter.describe())
    return None, NO_DATA_MESSAGE


# ── Registration ────────────────────────────────────────────────────────────

def register_commands(discord_bot: commands.Bot, ctx: BotContext) -> None:
    tree = discord_bot.tree

    @tree.command(name="ping", description="Check that the bot is alive")
    async def ping_command(interaction: discord.Interaction) -> None:
        await interaction.response.send_message(
            f"🏓 Pong! `{round(discord_bot.latency * 1000)}ms`"
        )

    @tree.command(name="leetcode", description="Get a random free LeetCode problem")
    @app_commands.describe(
        difficulty="Filter by difficulty level",
        category="Filter by topic tag (e.g., Array, Tree)",
    )
    @app_commands.choices(
        difficulty=[Choice(name=d.value, value=d.value) for d in Difficulty]
    )
    async def leetcode_command(
        interaction: discord.Interaction,
        difficulty: Optional[str] = None,
        category: Optional[str] = None,
    ) -> None:
        logging.info(
            "LeetCode command - user: %s, difficulty: %s, category: %s",
            interaction.user,
            difficulty or "any",
            category or "any",
        )
        await interaction.response.defer()

        problem, reason = await pick_problem(
            ctx.leetcode, ProblemFilter(difficulty=difficulty, category=category)
        )
        if problem is None:
            await interaction.followup.send(reason)
            return

        embeds = [build_problem_embed(problem)]
        if problem.difficulty is Difficulty.HARD:
            try:
                image = await ctx.waifu.fetch_image("waifu")
                embeds.append(build_motivation_embed(image.image_url))
            except WaifuError as e:
                logging.warning("Failed to fetch waifu motivation image: %s", e)

        await interaction.followup.send(embeds=embeds)
        logging.info("Served problem: %s - %s", problem.display_id, problem.title)

    @leetcode_command.autocomplete("category")
    async def category_autocomplete(
        interaction: discord.Interaction, curr_str: str
    ) -> list[Choice[str]]:
        return [Choice(name=c, value=c) for c in ctx.leetcode.search_categories(curr_str)]

    @tree.command(name="waifu", description="Get a random SFW anime image")
    @app_commands.choices(category=[Choice(name=c, value=c) for c in SAFE_CATEGORIES])
    async def waifu_command(
        interaction: discord.Interaction, category: Optional[str] = None
    ) -> None:
        await interaction.response.defer()
        try:
            image = await ctx.waifu.fetch_image(category)
        except WaifuError as e:
            logging.warning("Waifu command failed: %s", e)
            await interaction.followup.send("❌ Couldn't fetch an image right now, try again later.")
            return
        embed = discord.Embed(title=f"✨ {image.category}", color=0xFF9EC8)
        embed.set_image(url=image.image_url)
        embed.set_footer(text="Powered by waifu.pics")
        await interaction.followup.send(embed=embed)

    @tree.command(name="chat", description="Ask the local LLM a question")
    @app_commands.describe(prompt="What do you want to ask?")
    async def chat_command(interaction: discord.Interaction, prompt: str) -> None:
        if ctx.ollama is None:
            await interaction.response.send_message("❌ Chat is not configured.", ephemeral=True)
            return
        await interaction.response.defer()
        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(ctx.ollama.chat, prompt),
                timeout=CHAT_TIMEOUT_SECONDS,
            )
        except (ChatError, asyncio.TimeoutError) as e:
            logging.warning("Chat command failed: %s", e)
            await interaction.followup.send("❌ The model is not responding right now, try again later.")
            return
        footer = f"\n\n-# {result.model} · {result.elapsed_ms / 1000:.1f}s"
        await interaction.followup.send(
            truncate(result.content or "(empty response)", MAX_MESSAGE_LENGTH - len(footer)) + footer
        )

    @tree.error
    async def on_app_command_error(interaction: discord.Interaction, error: Exception) -> None:
        await handle_app_command_error(interaction, error, discord_bot, ctx.config)


def register_auto_response(discord_bot: commands.Bot) -> None:
    @discord_bot.event
    async def on_message(new_msg: discord.Message) -> None:
        if new_msg.author.bot:
            return
        if reply := reply_message(new_msg.content):
            await new_msg.reply(reply, mention_author=False)
