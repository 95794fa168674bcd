from db.client import NOTES, PROBLEMS, Storage
from db.dal import ProblemStore
from db.notes import NoteStore

__all__ = [
    "Storage",
    "ProblemStore",
    "NoteStore",
    "PROBLEMS",
    "NOTES",
]
