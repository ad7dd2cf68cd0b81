"""
Top-level package for the LeetCode Discord bot.

This package hosts:
- the LeetCode problem catalogue (fetch, persist, query, daily refresh)
- config loading and validation
- Discord slash commands and error reporting
- small HTTP/LLM service wrappers (waifu.pics, Ollama, auto-responses)
"""
