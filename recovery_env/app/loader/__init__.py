from .loader import ConfigLoader, translate_validation_error
from .serializer import dumps_tfvars, dumps_tfvars_json, to_tfvars_dict
from .sources import parse_tfvars, parse_tfvars_json, read_environment

__all__ = [
    "ConfigLoader",
    "translate_validation_error",
    "dumps_tfvars",
    "dumps_tfvars_json",
    "to_tfvars_dict",
    "parse_tfvars",
    "parse_tfvars_json",
    "read_environment",
]
