from enum import Enum


class Condition(str, Enum):
    NEW = "New"
    LIKE_NEW = "Like New"
    GOOD = "Good"
    USED = "Used"
    FAIR = "Fair"
