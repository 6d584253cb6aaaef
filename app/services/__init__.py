"""Services package.

Contains infrastructure services shared by the bot, currently the
conversation state store.
"""
