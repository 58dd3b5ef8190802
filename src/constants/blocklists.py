# Item names that are too ambiguous to scan for lexically: moderator names,
# generic resources, equipment slots, tiers, colours, skills and common post
# vocabulary. Checked against the full name and the name without a trailing
# parenthetical.
ITEM_NAME_BLOCKLIST = frozenset({
    # Moderator names that collide with items
    "ash", "grace", "acorn", "pumpkin", "mod",
    # Generic resources
    "logs", "log", "gold", "coal", "fish", "seed", "seeds",
    "coin", "coins", "ore", "bar", "rune", "runes",
    # Equipment words
    "cape", "hat", "ring", "staff", "sword", "shield", "helm",
    "boots", "gloves", "body", "legs", "plate", "chain",
    # Material tiers
    "bronze", "iron", "steel", "black", "white", "mithril", "adamant", "dragon",
    # Colours
    "red", "blue", "green", "yellow", "purple", "orange", "pink", "grey", "gray",
    # Skills
    "attack", "defence", "defense", "strength", "magic", "prayer", "range",
    "ranged", "hitpoints", "mining", "smithing", "fishing", "cooking",
    "woodcutting", "firemaking", "crafting", "fletching", "herblore",
    "agility", "thieving", "slayer", "farming", "runecraft", "hunter",
    "construction",
    # Post vocabulary
    "team", "food", "item", "items", "game", "quest", "skill", "drop",
    "rate", "chance", "update", "patch", "fix", "change", "buff", "nerf",
    "ban", "block", "trade", "split", "map", "light", "rock", "shade",
    "world", "level", "boss", "monster", "player", "account",
})

# Words that name a category rather than an item; a lone slot or modifier word
# in an article almost never identifies one specific item.
GENERIC_WORDS = frozenset({
    # Equipment slots
    "helm", "hat", "coif", "mask", "hood",
    "chest", "body", "plate", "platebody", "top", "shirt",
    "legs", "platelegs", "bottom", "bottoms", "skirt", "chaps", "trousers",
    "robe", "robebottom", "robetop",
    "cape", "boots", "gloves", "gauntlets", "vambraces",
    # Weapon and shield types
    "dagger", "sword", "scimitar", "longsword",
    "bow", "shortbow", "crossbow",
    "axe", "pickaxe", "spear",
    "shield", "kiteshield",
    # Accessories and ammo
    "ring", "amulet", "bracelet", "necklace",
    "orb", "trident", "bolt", "arrow", "dart", "javelin", "tips",
    # Consumables and tools
    "potion", "mix", "scroll", "tablet", "bar", "pie", "page",
    "seed", "key", "jar", "bones", "meat", "logs", "fur",
    # Containers
    "bag", "box", "case", "barrel", "kit",
    # Modifiers
    "super", "magic", "mystic", "ornament", "divine", "elegant", "3rd", "age",
    "ensouled", "grimy", "cooked", "trimmed", "extended", "gilded",
    # Categories
    "sigil", "relic", "talisman", "hunter", "combat", "mage", "range",
    "set", "teleport", "visage",
    # True generics
    "a", "an", "and", "of", "the", "full", "head", "hole", "can", "ash",
    "remains", "white", "west",
})

# Single-word prefixes that collide with many items or everyday post language.
GREEDY_PREFIX_BLOCKLIST = frozenset({
    "blighted", "blood", "combat", "crystal", "light", "fire", "energy",
    "ancient", "super", "divine", "small", "large", "blessed", "holy",
    "dark", "soul", "spirit", "death", "chaos", "nature", "earth", "water",
    "smoke", "steam", "dust", "lava", "mud", "shadow", "arcane", "mystic",
    "void", "elite", "master", "team", "bounty", "hunter", "fishing",
    "slayer", "cannon", "infernal", "barrows",
})

SINGLE_WORD_PREFIX_BLOCKLIST = ITEM_NAME_BLOCKLIST | GENERIC_WORDS | GREEDY_PREFIX_BLOCKLIST

# Multi-word prefixes that are minigame, location or activity names far more
# often than they are the start of an item name.
MULTI_WORD_PREFIX_BLOCKLIST = frozenset({
    "bounty hunter", "castle wars", "soul wars", "pest control",
    "clue scroll", "treasure trail", "barbarian assault",
    "last man standing", "last man", "god wars", "grand exchange",
    "old school", "chambers of", "theatre of", "tombs of",
    "team cape", "combat bracelet", "skills necklace",
})

# Words ignored when counting an item name's significant words.
STOP_WORDS = frozenset({"a", "an", "and", "of", "the"})
