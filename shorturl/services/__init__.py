"""
Services module for business logic separation.

URL creation and resolution, redirect event recording, and the
read-only click statistics built on the pure aggregation functions.
"""
