import re

# Article boilerplate stripped before extraction. Order matters: the rota and
# signature patterns assume placeholders were already removed.
MEDIA_PLACEHOLDER_PATTERN = re.compile(
    r"If you can'?t see the (?:image|video) above,? click here\.?!?",
    re.IGNORECASE,
)

CLICK_TO_SHOW_PATTERN = re.compile(r"CLICK HERE TO SHOW\n*", re.IGNORECASE)

PVP_ROTA_PATTERN = re.compile(
    r"(?:PvP World Rota|The PvP rota has moved to Period [A-Z]:?)[\s\S]*?(?:this (?:rota|week)\.?)\n*",
    re.IGNORECASE,
)

SOCIAL_BOILERPLATE_PATTERN = re.compile(
    r"You can also discuss this (?:update|merch release) on the 2007Scape subreddit[^\n]*(?:\n|$)",
    re.IGNORECASE,
)

WIKI_LINK_PATTERN = re.compile(
    r"For more info on the above content,? check out the official Old School Wiki\.?",
    re.IGNORECASE,
)

# "Mods Abe, Abyss, Acorn & Yume\n\nThe Old School Team."
MOD_SIGNATURE_PATTERN = re.compile(
    r"\n*Mods?\s+[A-Z][a-z]+(?:,?\s*[A-Z][a-z]+)*(?:\s*&\s*[A-Z][a-z]+)?\s*\n+The Old School Team\.?",
    re.IGNORECASE,
)

EXCESSIVE_NEWLINES_PATTERN = re.compile(r"\n{3,}")

CLEANING_PATTERNS = [
    MEDIA_PLACEHOLDER_PATTERN,
    CLICK_TO_SHOW_PATTERN,
    PVP_ROTA_PATTERN,
    SOCIAL_BOILERPLATE_PATTERN,
    WIKI_LINK_PATTERN,
    MOD_SIGNATURE_PATTERN,
]

TRAILING_PARENTHETICAL_PATTERN = re.compile(r"\s*\([^)]*\)\s*$")

WORD_PATTERN = re.compile(r"[a-z0-9][a-z0-9']*")
