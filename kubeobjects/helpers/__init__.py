"""
General-purpose helpers not related to the API client itself
(neither to the clients nor to the engines nor to the structs),
which are used to prepare and control the runtime environment.

Helpers do not depend on anything else in the package. As a rule of thumb,
they should be abstracted from the client to such an extent that they could
be extracted as reusable libraries.
"""
