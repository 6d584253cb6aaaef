"""Telegram bot message templates and constants.

Contains all user-facing message templates, button labels and callback
identifiers. Texts use Telegram's legacy Markdown parse mode.
"""

# Callback data
CB_SOCIAL_DOWNLOADER = "SOCIAL_DOWNLOADER"
CB_TERABOX_PLAYER = "TERABOX_PLAYER"
CB_SOCIAL_PLATFORM_PREFIX = "SOCIAL_"
CB_BACK_TO_MAIN = "BACK_TO_MAIN"
CB_SEND_MEDIA_PREFIX = "SEND"

# Menus
WELCOME_MESSAGE = (
    "*👋 Welcome! I am your all-in-one video downloader and player bot!*\n"
    "Choose the service you want to download or watch a video from."
)
SOCIAL_PLATFORM_PROMPT = "Choose your platform:"
TERABOX_LINK_PROMPT = "Please send the *Terabox link* you want to download or watch."
SOCIAL_LINK_PROMPT = "You selected *{platform}*. Please send the *video link*."

# Button labels
BUTTON_SOCIAL_DOWNLOADER = "🌐 Social Downloader"
BUTTON_TERABOX_PLAYER = "📦 Terabox Player & Downloader"
BUTTON_INSTAGRAM = "📷 Instagram"
BUTTON_FACEBOOK = "📘 Facebook"
BUTTON_YOUTUBE = "▶️ YouTube"
BUTTON_OTHER = "➕ 100+ Sites"
BUTTON_BACK_TO_MAIN = "⬅️ Main Menu"
BUTTON_WATCH_VIDEO = "▶️ WATCH VIDEO"
BUTTON_DOWNLOAD_VIDEO = "⬇️ DOWNLOAD VIDEO"
BUTTON_SOCIAL_VIDEO = "⬇️ Download Video ({label})"
BUTTON_SOCIAL_AUDIO = "🎵 Download Audio ({label})"
BUTTON_SEND_VIDEO = "📤 Send Video Here"
BUTTON_SEND_AUDIO = "📤 Send Audio Here"
BUTTON_SEND_DOCUMENT = "📤 Send File Here"
BUTTON_OPEN_MEDIA = "🔗 Open File"

# Validation
START_OVER_MESSAGE = (
    "Please start with the */start* command first and choose a download option."
)
INVALID_LINK_MESSAGE = "This does not look like a valid link. Please send a correct URL."

# Processing
TERABOX_PROCESSING_MESSAGE = "🔗 Processing the Terabox link..."
SOCIAL_PROCESSING_MESSAGE = "🔗 Processing the video link..."

# Results
TERABOX_RESULT_CAPTION = "*📦 Terabox file found:*\n\n*Title:* {title}"
SOCIAL_RESULT_CAPTION = (
    "*🌐 Video found!*\n\n*Title:* {title}\n\nChoose your preferred format:"
)
UNTITLED = "Untitled"

# Errors
TERABOX_NOT_FOUND_MESSAGE = "❌ Could not retrieve information from the Terabox link."
SOCIAL_NOT_FOUND_MESSAGE = "❌ Could not retrieve video/audio information from this link."
NO_DOWNLOAD_OPTION_MESSAGE = "❌ No download option was found for this link."
UPSTREAM_APOLOGY_MESSAGE = "😞 An error occurred while calling the API. Please try again later."
MEDIA_EXPIRED_MESSAGE = "⌛ This result has expired. Please send the link again."
MEDIA_SEND_FAILED_MESSAGE = (
    "❌ Telegram could not send this file directly. Use the button below to open it."
)
