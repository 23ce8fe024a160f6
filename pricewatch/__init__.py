"""PriceWatch Application Package.

Tracks product prices on e-commerce sites. Periodically fetches public
product pages, extracts a normalized price and availability reading despite
site-specific markup, and raises alerts when a target price is reached or the
price drops significantly.

The application follows a modular architecture with separate concerns for:
- Site-specific extraction strategies and URL dispatch
- Single-item scrape coordination and bounded batch scheduling
- Alert rule evaluation and idempotent alert delivery
- Price history analytics
"""
