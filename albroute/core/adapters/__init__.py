from .albroute import *  # noqa:F401,F403
