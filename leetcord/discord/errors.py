from __future__ import annotations

from datetime import datetime
import logging
from typing import Any

import discord

from leetcord.leetcode.errors import CatalogueError


def describe_error(error: Exception) -> str:
    """
    Map raw exceptions into short, human-readable messages for admins.
    """
    original = getattr(error, "original", None)
    if isinstance(original, Exception):
        error = original
    s, t = str(error), type(error).__name__
    if isinstance(error, CatalogueError):
        return f"📚 LeetCode catalogue ({t}): {s}"
    if isinstance(error, discord.Forbidden):
        return "❌ Forbidden: The bot is missing permissions for this action."
    if isinstance(error, discord.NotFound):
        return "❌ Not Found: The requested Discord resource was not found."
    if "Connection" in t or "Timeout" in t:
        return "❌ Connection Error: Unable to reach an upstream service."
    return f"❌ {t}: {s.split(chr(10))[0][:100]}"


async def notify_admin_error(
    discord_bot: discord.Client,
    config: dict[str, Any],
    error: Exception,
    context: str = "",
) -> None:
    """
    Send a concise error notification to all configured admins.
    """
    admin_ids = (config.get("permissions") or {}).get("users", {}).get("admin_ids", [])
    if not admin_ids:
        return

    msg = (
        "🤖 **Bot Error Notification**\n"
        f"⏰ Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}\n"
        f"📝 Context: {context}\n\nError: {describe_error(error)}"
    )
    for admin_id in admin_ids:
        try:
            user = discord_bot.get_user(admin_id) or await discord_bot.fetch_user(admin_id)
            await user.send(msg)
        except discord.HTTPException as e:
            logging.warning("Could not notify admin %s: %s", admin_id, e)


async def handle_app_command_error(
    interaction: discord.Interaction,
    error: Exception,
    discord_bot: discord.Client,
    config: dict[str, Any],
) -> None:
    """
    Standard handler for slash command errors.
    """
    logging.exception("App command error: %s", error)
    await notify_admin_error(
        discord_bot,
        config,
        error,
        f"App command error: {getattr(interaction.command, 'name', 'unknown')}",
    )
    notice = "Something went wrong running this command, the admins have been notified."
    try:
        if not interaction.response.is_done():
            await interaction.response.send_message(notice, ephemeral=True)
        else:
            await interaction.followup.send(notice, ephemeral=True)
    except discord.HTTPException as e:
        logging.warning("Could not send error notice: %s", e)
