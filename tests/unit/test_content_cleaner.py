from services.content_cleaner import clean_article_content, cleaning_stats

RAW_POST = """Varlamore Part Two is here!

If you can't see the image above, click here!

The Dragon hunter wand has been added.
CLICK HERE TO SHOW
Drop rates for the Sunlight moth have changed.



PvP World Rota
World 318 and 319 are PvP worlds this rota.
The Twisted bow remains unchanged.

You can also discuss this update on the 2007Scape subreddit, the forums and Discord.
For more info on the above content, check out the official Old School Wiki.

Mods Abe, Acorn & Yume

The Old School Team."""


def test_removes_boilerplate():
    cleaned = clean_article_content(RAW_POST)

    assert "If you can't see the image" not in cleaned
    assert "CLICK HERE TO SHOW" not in cleaned
    assert "PvP World Rota" not in cleaned
    assert "World 318" not in cleaned
    assert "2007Scape subreddit" not in cleaned
    assert "Old School Wiki" not in cleaned
    assert "The Old School Team" not in cleaned
    assert "Mods Abe" not in cleaned


def test_keeps_article_body():
    cleaned = clean_article_content(RAW_POST)

    assert cleaned.startswith("Varlamore Part Two is here!")
    assert "The Dragon hunter wand has been added." in cleaned
    assert "Drop rates for the Sunlight moth have changed." in cleaned
    assert "The Twisted bow remains unchanged." in cleaned


def test_collapses_blank_lines():
    assert "\n\n\n" not in clean_article_content(RAW_POST)


def test_empty_content():
    assert clean_article_content("") == ""
    assert clean_article_content(None) == ""


def test_cleaning_stats():
    stats = cleaning_stats("a" * 200, "a" * 150)

    assert stats == {
        "original_length": 200,
        "cleaned_length": 150,
        "reduction": 50,
        "reduction_percent": "25.0%",
    }
    assert cleaning_stats("", "")["reduction_percent"] == "0.0%"
