"""
Chat bot front end: command router and Telegram transport.
"""

from pricebot.bot.router import BotReply, CommandRouter, parse_command

__all__ = ["BotReply", "CommandRouter", "parse_command"]
