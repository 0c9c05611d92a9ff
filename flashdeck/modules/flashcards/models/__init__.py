from .flashcards import GeneratedCard

__all__ = [
    "GeneratedCard",
]
