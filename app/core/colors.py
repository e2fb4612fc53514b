import random

# Pastel palette shared by categories, group categories and gift groups
PASTEL_COLORS = [
    "#FFE5E5",  # Soft Pink
    "#E5F3FF",  # Soft Blue
    "#E5FFE5",  # Soft Green
    "#FFF3E5",  # Soft Orange
    "#F3E5FF",  # Soft Purple
    "#E5FFF3",  # Soft Mint
    "#FFE5F3",  # Soft Rose
    "#F3FFE5",  # Soft Lime
    "#E5E5FF",  # Soft Lavender
    "#FFE5E8",  # Soft Coral
]


def random_pastel_color() -> str:
    return random.choice(PASTEL_COLORS)
