# Import models so Alembic and Base metadata are aware of them
from .auth import User  # noqa: F401
from .decks import Deck, Flashcard  # noqa: F401
