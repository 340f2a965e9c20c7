# Import models so Alembic and Base metadata are aware of them
from .auth import User  # noqa: F401
from .records import RecordStatus, Record, Cover, Flashcard  # noqa: F401
from .bookmarks import Bookmark  # noqa: F401
from .ratings import Rating  # noqa: F401
