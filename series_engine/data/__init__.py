# Data loading module
from .loader import load_videos, frame_to_videos, read_table
