"""Built-in defaults used whenever the stored repository lacks a field."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from promptverse.app.domain.models import CatalogItem, Category

CATEGORY_ALL = "all"
CATEGORY_FAVORITES = "favorites"
CATEGORY_THUMBNAIL = "thumbnail"

RESERVED_CATEGORY_IDS = frozenset({CATEGORY_ALL})

# SHA-256 of "admin", "admin123" and "0000"
DEFAULT_USER_HASH = "8c6976e5b5410415bde908bd4dee15dfb167a9c873fc4bb8a81f6f2ab448a918"
DEFAULT_PASS_HASH = "240be518fabd2724ddb6f04eeb1da5967448d7e831c08c8fa822809f74c720a9"
DEFAULT_PIN_HASH = "9af15b336e6a9619928537df30b2e6a2376569fcf9d7e773eccede65606529a0"

SEED_CREATED_AT = 1735689600000

_CATEGORY_ROWS = [
    (CATEGORY_ALL, "All Prompts", "LayoutGrid"),
    (CATEGORY_THUMBNAIL, "Thumbnails", "Monitor"),
    ("photorealistic", "Photorealistic", "Camera"),
    ("anime", "Anime & Manga", "Zap"),
    ("3d-render", "3D Render", "Box"),
    ("painting", "Digital Painting", "Brush"),
    ("concept", "Concept Art", "PenTool"),
]

_PROMPT_ROWS = [
    {
        "id": "1",
        "title": "Neon Cyberpunk City",
        "description": (
            "A futuristic cyberpunk city street at night, raining, neon lights reflecting on "
            "wet pavement, towering skyscrapers with holographic advertisements, cinematic "
            "lighting, highly detailed, photorealistic, 8k."
        ),
        "imageUrl": "https://picsum.photos/id/230/800/800",
        "categoryId": "photorealistic",
        "tags": ["cyberpunk", "city", "neon", "rain", "night"],
    },
    {
        "id": "2",
        "title": "Ethereal Forest Spirit",
        "description": (
            "A glowing spirit deer in a mystical forest, bioluminescent plants, soft mist, "
            "magical atmosphere, fantasy art style, intricate details, soft focus background."
        ),
        "imageUrl": "https://picsum.photos/id/324/800/800",
        "categoryId": "painting",
        "tags": ["forest", "fantasy", "magic", "animal"],
    },
    {
        "id": "3",
        "title": "Abstract Geometric Shapes",
        "description": (
            "Complex 3D geometric shapes floating in a void, colorful gradients, glass texture, "
            "ray tracing, studio lighting, abstract art, minimal composition."
        ),
        "imageUrl": "https://picsum.photos/id/20/800/800",
        "categoryId": "3d-render",
        "tags": ["abstract", "3d", "geometry", "colorful"],
    },
]


def default_categories() -> list[Category]:
    from promptverse.app.domain.models import Category

    return [Category(id=cid, name=name, icon=icon) for cid, name, icon in _CATEGORY_ROWS]


def initial_prompts() -> list[CatalogItem]:
    from promptverse.app.domain.models import CatalogItem, DisplayFormat

    return [
        CatalogItem(**row, createdAt=SEED_CREATED_AT, format=DisplayFormat.SQUARE)
        for row in _PROMPT_ROWS
    ]
