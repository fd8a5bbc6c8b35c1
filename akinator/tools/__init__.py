from akinator.tools.extract import extract_json
from akinator.tools.fireworks import call_inference

__all__ = ["call_inference", "extract_json"]
