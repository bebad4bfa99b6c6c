"""Scrape Bridge.

Browser-facing bridge that turns an uploaded spreadsheet of URLs into a job
on the remote scrape task service, proxies the job's status, and converts
the finished result set back into a spreadsheet download.
"""

__version__ = "0.1.0"
