from app.repositories.activity_repository import ActivityRepository  # noqa
from app.repositories.user_repository import UserRepository  # noqa
