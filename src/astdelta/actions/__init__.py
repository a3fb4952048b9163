"""Edit actions, script generation and replay."""

from astdelta.actions.generator import EditScriptGenerator, generate_script
from astdelta.actions.models import Action, Delete, Insert, Move, Update
from astdelta.actions.replay import replay

__all__ = [
    "Action",
    "Delete",
    "EditScriptGenerator",
    "Insert",
    "Move",
    "Update",
    "generate_script",
    "replay",
]
