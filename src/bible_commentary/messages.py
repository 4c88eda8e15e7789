"""Localized user-facing messages (English and Chinese)."""

from typing import Optional

DEFAULT_LANGUAGE = "en"

MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "specify_chapter": (
            'Please specify chapter and verses, not just the book. '
            'For example: "{book_name} 1:1-10" or "{book_name}1:1-10"'
        ),
        "specify_verses": (
            'Please specify verses, not just chapter. '
            'For example: "{book_name} {chapter}:1-10" or "{book_name}{chapter}:1-10"'
        ),
        "unknown_book": "Unknown book: {book_name}",
        "invalid_format": (
            'Invalid verse format: {input}. Supported formats: '
            '"John 3:16", "Matthew 5:1-12", "太:10:4-8", "太5:1-12", "哥前 7:24-40"'
        ),
        "chapter_out_of_range": (
            "{book_name} only has {max_chapter} chapters; chapter {chapter} does not exist. "
            'For example: "{book_name} {max_chapter}:1"'
        ),
        "verse_out_of_range": (
            "{book_name} {chapter} only has {max_verse} verses; verse {verse} does not exist. "
            'For example: "{book_name} {chapter}:1-{max_verse}"'
        ),
        "verse_order": (
            "The start verse ({start_verse}) must not be greater than the end verse ({end_verse}). "
            'For example: "{book_name} {chapter}:{end_verse}-{start_verse}"'
        ),
        "too_many_verses": (
            "Too many verses requested ({verse_count}). "
            "Please select at most {max_verses} verses at a time."
        ),
        "unknown_denomination": "Unknown denomination: {denomination}",
        "fallback_commentary": (
            "No specific commentary available for these verses. "
            "Use general biblical and theological knowledge."
        ),
        "fallback_timeout": (
            "Commentary retrieval timed out. Using general theological knowledge."
        ),
    },
    "zh": {
        "specify_chapter": (
            '请指定章节和经文，不只是书卷。例如："{book_name} 1:1-10" 或 "{book_name}1:1-10"'
        ),
        "specify_verses": (
            '请指定经文，不只是章节。例如："{book_name} {chapter}:1-10" 或 "{book_name}{chapter}:1-10"'
        ),
        "unknown_book": "未知的书卷：{book_name}",
        "invalid_format": (
            '经文格式无效：{input}。支持的格式："约 3:16"、"太 5:1-12"、"太:10:4-8"、"太5:1-12"、"哥前 7:24-40"'
        ),
        "chapter_out_of_range": (
            '{book_name}只有 {max_chapter} 章，第 {chapter} 章不存在。例如："{book_name} {max_chapter}:1"'
        ),
        "verse_out_of_range": (
            '{book_name} {chapter} 章只有 {max_verse} 节，第 {verse} 节不存在。'
            '例如："{book_name} {chapter}:1-{max_verse}"'
        ),
        "verse_order": (
            '起始经节（{start_verse}）不能大于结束经节（{end_verse}）。'
            '例如："{book_name} {chapter}:{end_verse}-{start_verse}"'
        ),
        "too_many_verses": "请求的经文过多（{verse_count} 节）。每次最多选择 {max_verses} 节。",
        "unknown_denomination": "未知的神学立场：{denomination}",
        "fallback_commentary": "这些经文没有可用的具体注释。请使用一般的圣经和神学知识。",
        "fallback_timeout": "注释检索超时。使用一般的神学知识。",
    },
}


def normalize_language(language: Optional[str]) -> str:
    """Map a language tag ("zh-CN", "en-US", ...) onto a supported catalogue."""
    if not language:
        return DEFAULT_LANGUAGE
    tag = language.lower()
    if tag.startswith("zh"):
        return "zh"
    return tag if tag in MESSAGES else DEFAULT_LANGUAGE


def message(key: str, language: Optional[str] = DEFAULT_LANGUAGE, **params) -> str:
    catalogue = MESSAGES[normalize_language(language)]
    template = catalogue.get(key) or MESSAGES[DEFAULT_LANGUAGE][key]
    return template.format(**params)
