"""
Headless Visitor - keeps an idle cloud app awake.

A cron service calls /run; the service opens the target page in headless
Chromium via Playwright and stays on it for a while, reporting progress on
/status.
"""

__version__ = "0.1.0"
