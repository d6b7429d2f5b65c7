from tubely.models.user import User
from tubely.models.video import Video

__all__ = ["User", "Video"]
