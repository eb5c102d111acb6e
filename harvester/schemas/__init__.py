"""
Input schemas for harvest runs.
"""

from harvester.schemas.run_input import RunInput, StartUrl, load_run_input, parse_run_input

__all__ = ["RunInput", "StartUrl", "load_run_input", "parse_run_input"]
