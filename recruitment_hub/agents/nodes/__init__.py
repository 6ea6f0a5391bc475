from . import match_scorer, profile_parser, text_extractor

__all__ = [
    "match_scorer",
    "profile_parser",
    "text_extractor",
]
