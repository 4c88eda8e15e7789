"""Canonical book catalogue and book-name resolution."""

import re
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Book:
    """One book of the 66-book canon with every name it is known by."""

    code: str  # Canonical code, e.g. "JHN"
    name: str  # English display name, e.g. "John"
    studylight: str  # StudyLight URL slug, e.g. "1-corinthians"
    biblehub: str  # Bible Hub URL slug, e.g. "1_corinthians"
    aliases: tuple[str, ...] = field(default_factory=tuple)  # English abbreviations
    chinese: tuple[str, ...] = field(default_factory=tuple)  # Simplified + Traditional


# =============================================================================
# Catalogue
# =============================================================================

BOOKS: list[Book] = [
    # Old Testament
    Book("GEN", "Genesis", "genesis", "genesis",
         ("gen", "ge", "gn"),
         ("创世记", "创", "創世記", "創")),
    Book("EXO", "Exodus", "exodus", "exodus",
         ("exod", "exo", "ex"),
         ("出埃及记", "出", "出埃及記")),
    Book("LEV", "Leviticus", "leviticus", "leviticus",
         ("lev", "le", "lv"),
         ("利未记", "利", "利未記")),
    Book("NUM", "Numbers", "numbers", "numbers",
         ("num", "nu", "nm", "nb"),
         ("民数记", "民", "民數記")),
    Book("DEU", "Deuteronomy", "deuteronomy", "deuteronomy",
         ("deut", "deu", "de", "dt"),
         ("申命记", "申", "申命記")),
    Book("JOS", "Joshua", "joshua", "joshua",
         ("josh", "jos", "jsh"),
         ("约书亚记", "书", "約書亞記", "書")),
    Book("JDG", "Judges", "judges", "judges",
         ("judg", "jdg", "jg", "jdgs"),
         ("士师记", "士", "士師記")),
    Book("RUT", "Ruth", "ruth", "ruth",
         ("rut", "ru", "rth"),
         ("路得记", "得", "路得記")),
    Book("1SA", "1 Samuel", "1-samuel", "1_samuel",
         ("1sam", "1sa", "1sm", "isamuel", "firstsamuel"),
         ("撒母耳记上", "撒上", "撒母耳記上")),
    Book("2SA", "2 Samuel", "2-samuel", "2_samuel",
         ("2sam", "2sa", "2sm", "iisamuel", "secondsamuel"),
         ("撒母耳记下", "撒下", "撒母耳記下")),
    Book("1KI", "1 Kings", "1-kings", "1_kings",
         ("1kgs", "1ki", "1kin", "ikings", "firstkings"),
         ("列王纪上", "王上", "列王紀上")),
    Book("2KI", "2 Kings", "2-kings", "2_kings",
         ("2kgs", "2ki", "2kin", "iikings", "secondkings"),
         ("列王纪下", "王下", "列王紀下")),
    Book("1CH", "1 Chronicles", "1-chronicles", "1_chronicles",
         ("1chron", "1chr", "1ch", "ichronicles", "firstchronicles"),
         ("历代志上", "代上", "歷代志上")),
    Book("2CH", "2 Chronicles", "2-chronicles", "2_chronicles",
         ("2chron", "2chr", "2ch", "iichronicles", "secondchronicles"),
         ("历代志下", "代下", "歷代志下")),
    Book("EZR", "Ezra", "ezra", "ezra",
         ("ezr", "ez"),
         ("以斯拉记", "拉", "以斯拉記")),
    Book("NEH", "Nehemiah", "nehemiah", "nehemiah",
         ("neh", "ne"),
         ("尼希米记", "尼", "尼希米記")),
    Book("EST", "Esther", "esther", "esther",
         ("esth", "est", "es"),
         ("以斯帖记", "斯", "以斯帖記")),
    Book("JOB", "Job", "job", "job",
         ("jb",),
         ("约伯记", "伯", "約伯記")),
    Book("PSA", "Psalms", "psalms", "psalms",
         ("psalm", "ps", "psa", "pss", "psm"),
         ("诗篇", "诗", "詩篇", "詩")),
    Book("PRO", "Proverbs", "proverbs", "proverbs",
         ("prov", "pro", "pr", "prv"),
         ("箴言", "箴")),
    Book("ECC", "Ecclesiastes", "ecclesiastes", "ecclesiastes",
         ("eccl", "eccles", "ecc", "ec", "qoh"),
         ("传道书", "传", "傳道書", "傳")),
    Book("SNG", "Song of Solomon", "song-of-solomon", "songs",
         ("songofsongs", "song", "sos", "sng", "canticles", "ss"),
         ("雅歌", "歌")),
    Book("ISA", "Isaiah", "isaiah", "isaiah",
         ("isa", "is"),
         ("以赛亚书", "赛", "以賽亞書", "賽")),
    Book("JER", "Jeremiah", "jeremiah", "jeremiah",
         ("jer", "je", "jr"),
         ("耶利米书", "耶", "耶利米書")),
    Book("LAM", "Lamentations", "lamentations", "lamentations",
         ("lam", "la"),
         ("耶利米哀歌", "哀")),
    Book("EZK", "Ezekiel", "ezekiel", "ezekiel",
         ("ezek", "eze", "ezk"),
         ("以西结书", "结", "以西結書", "結")),
    Book("DAN", "Daniel", "daniel", "daniel",
         ("dan", "da", "dn"),
         ("但以理书", "但", "但以理書")),
    Book("HOS", "Hosea", "hosea", "hosea",
         ("hos", "ho"),
         ("何西阿书", "何", "何西阿書")),
    Book("JOL", "Joel", "joel", "joel",
         ("joe", "jl", "jol"),
         ("约珥书", "珥", "約珥書")),
    Book("AMO", "Amos", "amos", "amos",
         ("am", "amo"),
         ("阿摩司书", "摩", "阿摩司書")),
    Book("OBA", "Obadiah", "obadiah", "obadiah",
         ("obad", "ob", "oba"),
         ("俄巴底亚书", "俄", "俄巴底亞書")),
    Book("JON", "Jonah", "jonah", "jonah",
         ("jon", "jnh"),
         ("约拿书", "拿", "約拿書")),
    Book("MIC", "Micah", "micah", "micah",
         ("mic", "mc"),
         ("弥迦书", "弥", "彌迦書", "彌")),
    Book("NAM", "Nahum", "nahum", "nahum",
         ("nah", "na", "nam"),
         ("那鸿书", "鸿", "那鴻書", "鴻")),
    Book("HAB", "Habakkuk", "habakkuk", "habakkuk",
         ("hab", "hb"),
         ("哈巴谷书", "哈", "哈巴谷書")),
    Book("ZEP", "Zephaniah", "zephaniah", "zephaniah",
         ("zeph", "zep", "zp"),
         ("西番雅书", "番", "西番雅書")),
    Book("HAG", "Haggai", "haggai", "haggai",
         ("hag", "hg"),
         ("哈该书", "该", "哈該書", "該")),
    Book("ZEC", "Zechariah", "zechariah", "zechariah",
         ("zech", "zec", "zc"),
         ("撒迦利亚书", "亚", "撒迦利亞書", "亞")),
    Book("MAL", "Malachi", "malachi", "malachi",
         ("mal", "ml"),
         ("玛拉基书", "玛", "瑪拉基書", "瑪")),
    # New Testament
    Book("MAT", "Matthew", "matthew", "matthew",
         ("matt", "mat", "mt"),
         ("马太福音", "太", "馬太福音")),
    Book("MRK", "Mark", "mark", "mark",
         ("mrk", "mar", "mk", "mr"),
         ("马可福音", "可", "馬可福音")),
    Book("LUK", "Luke", "luke", "luke",
         ("luk", "lk"),
         ("路加福音", "路")),
    Book("JHN", "John", "john", "john",
         ("jhn", "jn", "joh"),
         ("约翰福音", "约", "約翰福音", "約")),
    Book("ACT", "Acts", "acts", "acts",
         ("act", "ac"),
         ("使徒行传", "徒", "使徒行傳")),
    Book("ROM", "Romans", "romans", "romans",
         ("rom", "ro", "rm"),
         ("罗马书", "罗", "羅馬書", "羅")),
    Book("1CO", "1 Corinthians", "1-corinthians", "1_corinthians",
         ("1cor", "1co", "icorinthians", "firstcorinthians"),
         ("哥林多前书", "林前", "哥前", "哥林多前書")),
    Book("2CO", "2 Corinthians", "2-corinthians", "2_corinthians",
         ("2cor", "2co", "iicorinthians", "secondcorinthians"),
         ("哥林多后书", "林后", "哥后", "哥林多後書", "林後", "哥後")),
    Book("GAL", "Galatians", "galatians", "galatians",
         ("gal", "ga"),
         ("加拉太书", "加", "加拉太書")),
    Book("EPH", "Ephesians", "ephesians", "ephesians",
         ("eph", "ephes"),
         ("以弗所书", "弗", "以弗所書")),
    Book("PHP", "Philippians", "philippians", "philippians",
         ("phil", "php", "pp"),
         ("腓立比书", "腓", "腓立比書")),
    Book("COL", "Colossians", "colossians", "colossians",
         ("col",),
         ("歌罗西书", "西", "歌羅西書")),
    Book("1TH", "1 Thessalonians", "1-thessalonians", "1_thessalonians",
         ("1thess", "1thes", "1th", "ithessalonians", "firstthessalonians"),
         ("帖撒罗尼迦前书", "帖前", "帖撒羅尼迦前書")),
    Book("2TH", "2 Thessalonians", "2-thessalonians", "2_thessalonians",
         ("2thess", "2thes", "2th", "iithessalonians", "secondthessalonians"),
         ("帖撒罗尼迦后书", "帖后", "帖撒羅尼迦後書", "帖後")),
    Book("1TI", "1 Timothy", "1-timothy", "1_timothy",
         ("1tim", "1ti", "itimothy", "firsttimothy"),
         ("提摩太前书", "提前", "提摩太前書")),
    Book("2TI", "2 Timothy", "2-timothy", "2_timothy",
         ("2tim", "2ti", "iitimothy", "secondtimothy"),
         ("提摩太后书", "提后", "提摩太後書", "提後")),
    Book("TIT", "Titus", "titus", "titus",
         ("tit", "ti"),
         ("提多书", "多", "提多書")),
    Book("PHM", "Philemon", "philemon", "philemon",
         ("philem", "phm", "phlm", "pm"),
         ("腓利门书", "门", "腓利門書", "門")),
    Book("HEB", "Hebrews", "hebrews", "hebrews",
         ("heb",),
         ("希伯来书", "来", "希伯來書", "來")),
    Book("JAS", "James", "james", "james",
         ("jas", "jm", "jam"),
         ("雅各书", "雅", "雅各書")),
    Book("1PE", "1 Peter", "1-peter", "1_peter",
         ("1pet", "1pe", "1pt", "ipeter", "firstpeter"),
         ("彼得前书", "彼前", "彼得前書")),
    Book("2PE", "2 Peter", "2-peter", "2_peter",
         ("2pet", "2pe", "2pt", "iipeter", "secondpeter"),
         ("彼得后书", "彼后", "彼得後書", "彼後")),
    Book("1JN", "1 John", "1-john", "1_john",
         ("1jn", "1jo", "1joh", "ijohn", "firstjohn"),
         ("约翰一书", "约一", "約翰一書", "約一")),
    Book("2JN", "2 John", "2-john", "2_john",
         ("2jn", "2jo", "2joh", "iijohn", "secondjohn"),
         ("约翰二书", "约二", "約翰二書", "約二")),
    Book("3JN", "3 John", "3-john", "3_john",
         ("3jn", "3jo", "3joh", "iiijohn", "thirdjohn"),
         ("约翰三书", "约三", "約翰三書", "約三")),
    Book("JUD", "Jude", "jude", "jude",
         ("jud", "jd"),
         ("犹大书", "犹", "猶大書", "猶")),
    Book("REV", "Revelation", "revelation", "revelation",
         ("rev", "re", "rv", "apocalypse", "revelations"),
         ("启示录", "启", "啟示錄", "啟")),
]

BOOK_CODES = [book.code for book in BOOKS]

_BY_CODE: dict[str, Book] = {book.code: book for book in BOOKS}

_NORMALIZE_RE = re.compile(r"[\s._-]+")


def normalize_book_token(token: str) -> str:
    """Lowercase a book token and drop whitespace, dots and dashes ("1 Cor." -> "1cor")."""
    return _NORMALIZE_RE.sub("", token).lower()


def _build_alias_table() -> dict[str, str]:
    table: dict[str, str] = {}
    for book in BOOKS:
        names = (book.code, book.name, book.studylight, book.biblehub) + book.aliases + book.chinese
        for name in names:
            key = normalize_book_token(name)
            table.setdefault(key, book.code)
    return table


BOOK_ALIASES: dict[str, str] = _build_alias_table()


# =============================================================================
# Lookups
# =============================================================================

def resolve_book(token: str) -> Optional[str]:
    """Resolve any known book name or abbreviation to its canonical code."""
    if not token:
        return None
    return BOOK_ALIASES.get(normalize_book_token(token))


def get_book(code: str) -> Optional[Book]:
    return _BY_CODE.get(code)


def format_reference(ref) -> str:
    """Render a VerseReference as "Book chapter:start[-end]" using the English name."""
    book = get_book(ref.book)
    name = book.name if book else ref.book
    text = f"{name} {ref.chapter}"
    if ref.start_verse is not None:
        text += f":{ref.start_verse}"
        if ref.end_verse is not None:
            text += f"-{ref.end_verse}"
    return text
