"""Timesheet API package.

Feature modules (timesheets, ...) keep a thin Flask controller layer on top of
service and repository layers. The MySQL connection is built once in the
container and passed down explicitly.
"""
