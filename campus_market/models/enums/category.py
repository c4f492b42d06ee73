from enum import Enum


# https://github.com/fastapi/sqlmodel/issues/96#issuecomment-921179607
class Category(str, Enum):
    BOOKS = "Books"
    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"
    FURNITURE = "Furniture"
    STATIONERY = "Stationery"
    SPORTS = "Sports"
    OTHERS = "Others"


# sentinel accepted by the catalog instead of a category
ALL_CATEGORIES = "All"
