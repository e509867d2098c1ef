"""PetAdopt - file-backed pet adoption records with a terminal menu"""

__version__ = "1.0.0"
