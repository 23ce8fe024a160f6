"""Alert message templates and constants.

Contains the subject and body templates rendered for alert notifications,
and the lines printed by the command-line interface. Centralizes user-facing
text so notification sinks format alerts consistently.
"""

SIGNATURE = "---\nPriceWatch - Your Price Tracking Assistant"

# Target price alert
TARGET_REACHED_SUBJECT = "🎯 Target Price Reached: {name}"
TARGET_REACHED_BODY = (
    "Great news! 🎉\n\n"
    "The product you're tracking has reached your target price!\n\n"
    "📦 Product: {name}\n"
    "🏪 Store: {site}\n\n"
    "💰 Current Price: {price}\n"
    "🎯 Your Target: {target}\n\n"
    "This might be a good time to buy!\n\n"
    "🔗 Buy Now: {url}\n\n"
    f"{SIGNATURE}\n"
)

# Significant price drop alert
PRICE_DROP_SUBJECT = "📉 Price Drop Alert: {name} ({percent}% off!)"
PRICE_DROP_BODY = (
    "Price Drop Alert! 📉\n\n"
    "A product you're tracking just got cheaper!\n\n"
    "📦 Product: {name}\n"
    "🏪 Store: {site}\n\n"
    "💰 New Price: {price}\n"
    "📊 Previous Price: {previous}\n"
    "💸 You Save: {savings} ({percent}% off!)\n\n"
    "Don't miss out on this deal!\n\n"
    "🔗 Buy Now: {url}\n\n"
    f"{SIGNATURE}\n"
)

# CLI output
READING_LINE = "{site}: {name} - {price} {currency} ({availability})"
SCRAPE_FAILED_LINE = "✗ {url}: {message}"
SUPPORTED_LINE = "✓ {url} is supported ({site})"
UNSUPPORTED_LINE = "✗ {url} is not supported"
