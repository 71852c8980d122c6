"""
All the data structures used across the client: the API bodies, the resource
references and descriptors, the settings, the credentials, the serialization.

All the modules here are purely data-manipulative and computational.
No external calls or any i/o activities are done here.
"""
