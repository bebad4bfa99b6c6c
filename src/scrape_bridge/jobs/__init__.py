"""Job submission and status access against the remote scrape task service.

Sub-modules:
- ``models``: ``JobRequest`` and the form-field builder
- ``client``: ``TaskService`` protocol and its httpx implementation
- ``status``: ``StatusProxy`` (status pass-through, result readiness check)
"""
