"""
Engines are the side-concerns of the client, not related to the API itself.

Currently, it is only the logging: its formatting and the object references
attached to the log records of the per-object requests.
"""
