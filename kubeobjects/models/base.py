"""
The default registry of the shapes, populated at import time of the models.
"""
from kubeobjects.structs.serialization import Serializer

serializer = Serializer()
