"""Scraping, scheduling and alerting services package.

Contains the single-item scrape coordinator, the bounded batch scheduler,
the alert evaluator, and the refresh workflow that connects them to
persistence and notification sinks.
"""
