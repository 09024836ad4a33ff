"""
Internationalization (i18n) for catalog document labels.

Simple dict-based localization for the strings drawn into catalog PDFs
and used in generated filenames. Supports en and zh with English fallback.

Usage:
    from core.i18n import get_string, format_info_bar
    label = get_string("no_image", "zh")  # "暂无图片"
    bar = format_info_bar(12, 1, 2, "2026-01-01 10:00:00", "en")
"""

from typing import Optional

# String tables keyed by (string_id, language_code)
STRINGS = {
    "company": {
        "en": "Company",
        "zh": "公司",
    },
    "title_all": {
        "en": "{company} - All Products",
        "zh": "{company}-全部商品-PDF文件",
    },
    "title_category": {
        "en": "{company} - {category}",
        "zh": "{company}-{category}-PDF文件",
    },
    "title_search": {
        "en": "{company} - Search Export",
        "zh": "{company}-搜索导出-PDF文件",
    },
    "export_all": {
        "en": "All Products",
        "zh": "全部款式",
    },
    "export_search": {
        "en": "Search Results",
        "zh": "导出结果",
    },
    "info_bar": {
        "en": "Total items: {total} | Page {page} of {pages} | Generated: {time}",
        "zh": "商品总数: {total} | 第 {page} 页 / 共 {pages} 页 | 生成时间: {time}",
    },
    "unnamed_product": {
        "en": "Unnamed product",
        "zh": "未命名商品",
    },
    "category": {
        "en": "Category: {name}",
        "zh": "分类: {name}",
    },
    "uncategorized": {
        "en": "Uncategorized",
        "zh": "未分类",
    },
    "params": {
        "en": "Specs: ",
        "zh": "参数: ",
    },
    "no_image": {
        "en": "No image",
        "zh": "暂无图片",
    },
    "image_failed": {
        "en": "Image failed to load",
        "zh": "图片加载失败",
    },
    "image_unavailable": {
        "en": "Image unavailable",
        "zh": "图片加载失败",
    },
}

SUPPORTED_LANGUAGES = ("en", "zh")


def get_string(string_id: str, lang: str = "en") -> str:
    """
    Get a localized string by ID and language code.

    Falls back to English if the language is not found,
    then to the string_id itself if no translation exists.
    """
    table = STRINGS.get(string_id)
    if not table:
        return string_id
    return table.get(lang, table.get("en", string_id))


def format_info_bar(
    total: int,
    page: int,
    pages: int,
    generated_time: str,
    lang: str = "en",
) -> str:
    """
    Format the running info bar line.

    Examples:
        format_info_bar(0, 1, 1, "2026-01-01 10:00:00", "en")
            -> "Total items: 0 | Page 1 of 1 | Generated: 2026-01-01 10:00:00"
    """
    return get_string("info_bar", lang).format(
        total=total, page=page, pages=pages, time=generated_time
    )


def format_category_label(name: Optional[str], lang: str = "en") -> str:
    """Format the category line of a product card."""
    return get_string("category", lang).format(
        name=name or get_string("uncategorized", lang)
    )
