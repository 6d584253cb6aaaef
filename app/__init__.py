"""Media Relay Bot Application Package.

A Telegram bot that relays user-submitted links to third-party download APIs
(a generic social media downloader and a Terabox link resolver) and returns
the extracted media as download buttons.

The application follows a modular architecture with separate concerns for:
- Bot handlers and the link resolution pipeline
- Upstream API clients for the download services
- Conversation state storage
- Transport adapters (polling, webhook server, HTTP endpoint)
"""
