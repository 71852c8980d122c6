"""
All the routines to talk to the API, and the state of the connections.

The routines are thin: they know the URLs, the query parameters & headers,
and the (de)serialization of the bodies. Everything below is the HTTP
transport (``aiohttp``), which is used as is, and its errors are escalated
to the callers unmodified. Everything above is the caller's business.
"""
