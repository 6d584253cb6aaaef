"""Telegram bot implementation package.

Contains all Telegram bot specific functionality including handlers, the
link resolution pipeline, keyboards and message templates.
"""
