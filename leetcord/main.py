"""
Entrypoint: `python -m leetcord.main` (or the `leetcord` console script).
"""

import asyncio
import logging
import os
from typing import Any

import discord
from discord.ext import commands
import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from leetcord.config.loader import get_config
from leetcord.discord.commands import BotContext, register_auto_response, register_commands
from leetcord.leetcode import build_leetcode_service
from leetcord.services.ollama_service import DEFAULT_MODEL, OllamaService
from leetcord.services.waifu import WaifuService


def setup_logging() -> None:
    if os.environ.get("DEBUG"):
        logging.basicConfig(level=logging.DEBUG)
        logging.getLogger("httpx").setLevel(logging.DEBUG)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s: %(message)s")


def create_bot(config: dict[str, Any], httpx_client: httpx.AsyncClient) -> commands.Bot:
    intents = discord.Intents.default()
    intents.message_content = bool(config["auto_response"])
    activity = discord.CustomActivity(name=(config.get("status_message") or "/leetcode for a random problem")[:128])
    discord_bot = commands.Bot(intents=intents, activity=activity, command_prefix=None)

    ollama_cfg = config.get("ollama")
    ctx = BotContext(
        config=config,
        leetcode=build_leetcode_service(config, httpx_client),
        waifu=WaifuService(httpx_client),
        ollama=OllamaService(ollama_cfg["base_url"], ollama_cfg.get("model", DEFAULT_MODEL)) if ollama_cfg else None,
    )
    scheduler = AsyncIOScheduler()
    refresh_cron = config["leetcode"]["refresh_cron"]

    register_commands(discord_bot, ctx)
    if config["auto_response"]:
        register_auto_response(discord_bot)

    @discord_bot.event
    async def on_ready() -> None:
        if client_id := config.get("client_id"):
            logging.info(f"\n\nBOT INVITE URL:\nhttps://discord.com/oauth2/authorize?client_id={client_id}&permissions=412317191168&scope=bot\n")
        await discord_bot.tree.sync()
        logging.info(f"Synced {len(discord_bot.tree.get_commands())} slash commands")
        if not scheduler.running:
            scheduler.start()
            await ctx.leetcode.start(scheduler, refresh_cron)
            logging.info(f"Scheduler started, {ctx.leetcode.get_cache_size()} LeetCode problems ready")

    return discord_bot


async def run_bot(config: dict[str, Any] | None = None) -> None:
    config = config or get_config()
    logging.info("🚀 Bot starting")
    async with httpx.AsyncClient() as httpx_client:
        discord_bot = create_bot(config, httpx_client)
        async with discord_bot:
            await discord_bot.start(config["bot_token"])


def main() -> None:
    setup_logging()
    try:
        asyncio.run(run_bot())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
