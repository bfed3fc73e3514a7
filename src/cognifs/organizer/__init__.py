from .cluster import TagClusterer
from .naming import FolderNameGenerator
from .planner import ReorganizationPlanner
from .mover import SafeMover

__all__ = ["TagClusterer", "FolderNameGenerator", "ReorganizationPlanner", "SafeMover"]
